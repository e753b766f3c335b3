"""FsHandler: fan handlers out over directories, fan outcomes back in.

One thread per (directory, handler) pair. Every pair reports exactly one
outcome on an unbounded queue, so no producer ever blocks on a result
nobody reads. run() returns once every pair reported success and raises
on the first failure; either way every handler is stopped on exit.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Iterable

from fscrub.errors import DispatcherConfigError, HandlerError
from fscrub.models.types import Directories, Directory
from fscrub.pipeline.protocols import Handler

logger = logging.getLogger(__name__)

# Seconds to wait for each handler thread after stopping
JOIN_TIMEOUT: float = 5.0

Outcome = tuple[Directory, str, BaseException | None]


class FsHandler:
    """Runs every configured handler for every configured directory."""

    def __init__(
        self,
        dirs: Iterable[Directory],
        handlers: Iterable[Handler | None],
    ) -> None:
        """Initialize the dispatcher.

        Args:
            dirs: Directories to process, in order; duplicates allowed
            handlers: Handlers to run per directory; None entries are
                treated as already stopped and skipped

        Raises:
            DispatcherConfigError: No directory given
        """
        self.dirs: Directories = list(dirs)
        if not self.dirs:
            raise DispatcherConfigError("at least one dir required")
        self.handlers: list[Handler | None] = list(handlers)

    def run(self) -> None:
        """Start all (directory, handler) pairs and wait for their outcomes.

        Raises:
            HandlerError: First failure reported by any pair, with the
                directory and handler attached and the cause chained
        """
        logger.info("running_fscrub dirs=%d", len(self.dirs))
        handlers = [h for h in self.handlers if h is not None]
        if len(handlers) < len(self.handlers):
            logger.debug("skipping_unset_handlers count=%d", len(self.handlers) - len(handlers))
        if not handlers:
            logger.warning("no handlers defined")
            return

        results: queue.Queue[Outcome] = queue.Queue()
        threads: list[threading.Thread] = []
        try:
            for directory in self.dirs:
                for handler in handlers:
                    logger.info("starting_handler type=%s dir=%s", handler.name, directory)
                    thread = threading.Thread(
                        target=self._run_pair,
                        args=(handler, directory, results),
                        name=f"fscrub-{handler.name}",
                        daemon=True,
                    )
                    thread.start()
                    threads.append(thread)

            for _ in threads:
                directory, name, err = results.get()
                if err is not None:
                    logger.error("fscrub_handler_error type=%s dir=%s error=%s", name, directory, err)
                    raise HandlerError(directory, name, err) from err
        finally:
            self.stop()
            for thread in threads:
                thread.join(timeout=JOIN_TIMEOUT)

        logger.info("fscrub_finished")

    def stop(self) -> None:
        """Stop every handler. Safe to call from signal handlers and repeatedly."""
        for handler in self.handlers:
            if handler is not None:
                handler.stop()

    def _run_pair(
        self,
        handler: Handler,
        directory: Directory,
        results: queue.Queue[Outcome],
    ) -> None:
        reported = threading.Event()

        def report(err: BaseException | None) -> None:
            if reported.is_set():
                logger.warning("duplicate_report_ignored type=%s dir=%s", handler.name, directory)
                return
            reported.set()
            results.put((directory, handler.name, err))

        try:
            handler.run(directory, report)
        except Exception as e:
            report(e)
            return
        if not reported.is_set():
            report(None)
