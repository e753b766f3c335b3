"""Command-line entry point.

    fscrub --dir logs --dir uploads --patterns patterns.json --crawl --watch

Crawl scrubs every file once; watch keeps scrubbing files as they are
created or written until interrupted.
"""

from __future__ import annotations

import argparse
import signal
import sys
from types import FrameType
from typing import Sequence

from fscrub import __version__
from fscrub.errors import FscrubError
from fscrub.handlers import Crawler, Watcher
from fscrub.logging_config import get_logger, setup_logging
from fscrub.models.types import Directory
from fscrub.pipeline.actions import LogAction
from fscrub.pipeline.dispatcher import FsHandler
from fscrub.pipeline.protocols import Action, Handler
from fscrub.scrubbing import Fscrub, load_pattern_config

logger = get_logger("cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fscrub",
        description="Scrub sensitive data from text files in directories",
    )
    parser.add_argument(
        "--dir",
        dest="dirs",
        action="append",
        default=[],
        metavar="DIR",
        help="directory to scrub (repeatable)",
    )
    parser.add_argument("--patterns", default="", help="path to a JSON or YAML pattern file")
    parser.add_argument("--watch", action="store_true", help="watch the dirs specified")
    parser.add_argument("--crawl", action="store_true", help="crawl the dirs specified (once)")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="only report what would be replaced, never rewrite files",
    )
    parser.add_argument(
        "--skip-dir",
        dest="skip_dirs",
        action="append",
        default=[],
        metavar="NAME",
        help="directory name to leave alone (repeatable)",
    )
    parser.add_argument("--log-files", action="store_true", help="log every file handled")
    parser.add_argument("--debug", action="store_true", default=None, help="debug logging")
    parser.add_argument("--log-file", default=None, help="also write logs to this file")
    parser.add_argument("--version", action="version", version=f"fscrub {__version__}")
    return parser


def build_handlers(args: argparse.Namespace, actions: Sequence[Action]) -> list[Handler]:
    """Create the handlers enabled on the command line."""
    handlers: list[Handler] = []
    if args.watch:
        handlers.append(Watcher(*actions, skip_dirs=args.skip_dirs))
    if args.crawl:
        handlers.append(Crawler(*actions, skip_dirs=args.skip_dirs))
    return handlers


def run(args: argparse.Namespace) -> None:
    """Load patterns, wire the pipeline and run it until done or interrupted.

    Raises:
        FscrubError: Configuration or any handler failed
    """
    config = load_pattern_config(args.patterns)
    scrubber = Fscrub(config, dry_run=args.dry_run)
    scrubber.validate()

    actions: list[Action] = [scrubber.handle]
    if args.log_files:
        actions.insert(0, LogAction())

    dispatcher = FsHandler([Directory(d) for d in args.dirs], build_handlers(args, actions))

    def interrupt(signum: int, frame: FrameType | None) -> None:
        logger.info("interrupt_received signal=%s", signal.Signals(signum).name)
        dispatcher.stop()

    previous = {sig: signal.signal(sig, interrupt) for sig in (signal.SIGINT, signal.SIGTERM)}
    try:
        for directory in dispatcher.dirs:
            logger.info("running_for_dir dir=%s", directory)
        dispatcher.run()
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.dirs:
        parser.error("at least one --dir is required")

    setup_logging(debug=args.debug, log_file=args.log_file)
    logger.info("starting version=%s dry_run=%s", __version__, args.dry_run)

    try:
        run(args)
    except FscrubError as e:
        logger.error("running fscrub failed: %s", e)
        return 1

    logger.info("finished")
    return 0


if __name__ == "__main__":
    sys.exit(main())
