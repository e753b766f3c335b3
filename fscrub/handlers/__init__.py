"""Directory handlers: one-shot crawl and continuous watch."""

from fscrub.handlers.crawler import Crawler
from fscrub.handlers.watcher import Watcher

__all__ = ["Crawler", "Watcher"]
