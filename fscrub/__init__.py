"""fscrub: scrub sensitive data from text files, once or continuously.

Crawl or watch directories, rewrite lines matching configured patterns,
and pseudonymize identifiers consistently per file.
"""

__version__ = "0.1.0"
