"""Crawler: one-shot directory walk driving actions over every entry.

Directories are handed to the actions too; the scrub action skips them
itself. The first action failure aborts the walk and becomes the
crawler's outcome for that directory.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Iterable, Iterator

from fscrub.errors import InvalidDirectoryError
from fscrub.models.types import Directory, FileInfo
from fscrub.pipeline.actions import chain_actions
from fscrub.pipeline.protocols import Action, Report
from fscrub.primitives import walk_directory

logger = logging.getLogger(__name__)

Walker = Callable[[str, frozenset[str]], Iterator[tuple[str, FileInfo]]]


class Crawler:
    """Walks a directory once and runs the actions on each visited entry.

    Implements the Handler protocol from fscrub.pipeline.protocols.
    stop() cancels between entries and is final for this instance.
    """

    name = "crawler"

    def __init__(
        self,
        *actions: Action,
        skip_dirs: Iterable[str] = (),
        walker: Walker = walk_directory,
    ) -> None:
        self._action = chain_actions(*actions)
        self._skip_dirs = frozenset(skip_dirs)
        self._walk = walker
        self._stopped = threading.Event()

    def run(self, directory: Directory, report: Report) -> None:
        """Walk the directory and report the terminal error, or None."""
        logger.info("running_crawler dir=%s", directory)
        if not directory:
            report(InvalidDirectoryError(directory))
            return

        visited = 0
        try:
            for path, info in self._walk(directory, self._skip_dirs):
                if self._stopped.is_set():
                    logger.info("crawler_stopped dir=%s visited=%d", directory, visited)
                    break
                self._action(path, info)
                visited += 1
        except Exception as e:
            logger.error("crawler_failed dir=%s visited=%d error=%s", directory, visited, e)
            report(e)
            return

        logger.info("crawler_finished dir=%s visited=%d", directory, visited)
        report(None)

    def stop(self) -> None:
        self._stopped.set()
