import sys

from fscrub.cli import main

sys.exit(main())
