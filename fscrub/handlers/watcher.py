"""Watcher: re-run actions whenever a file under a directory is written.

A single watchdog Observer (started at construction) serves every
directory the watcher runs for. Failures while handling an event are
logged and the watch continues; only failing to subscribe a directory
is reported as the watcher's outcome.
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Callable, Iterable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from fscrub.errors import InvalidDirectoryError, WatchSubscriptionError
from fscrub.models.types import Directory, FileInfo
from fscrub.pipeline.actions import chain_actions
from fscrub.pipeline.protocols import Action, Report

logger = logging.getLogger(__name__)

# Seconds to wait for the observer thread on stop
STOP_TIMEOUT: float = 5.0


class _FileEventHandler(FileSystemEventHandler):
    """Forwards file create/modify events under one watched root to the watcher."""

    def __init__(self, watcher: Watcher, root: str) -> None:
        super().__init__()
        self._watcher = watcher
        self._root = root

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._watcher.handle(os.fsdecode(event.src_path), "created", self._root)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._watcher.handle(os.fsdecode(event.src_path), "modified", self._root)


class Watcher:
    """Watches directories recursively and runs the actions on changed files.

    Implements the Handler protocol from fscrub.pipeline.protocols.
    run() blocks until stop() is called, then reports None.
    """

    name = "watcher"

    def __init__(
        self,
        *actions: Action,
        skip_dirs: Iterable[str] = (),
        observer_factory: Callable[[], BaseObserver] = Observer,
    ) -> None:
        self._action = chain_actions(*actions)
        self._skip_dirs = frozenset(skip_dirs)
        self._interrupt = threading.Event()
        self._stop_lock = threading.Lock()
        self._observer = observer_factory()
        self._observer.start()

    def run(self, directory: Directory, report: Report) -> None:
        """Subscribe to the directory and block until stopped."""
        logger.info("running_watcher dir=%s", directory)
        if not directory:
            report(InvalidDirectoryError(directory))
            return
        if self._interrupt.is_set():
            report(None)
            return

        try:
            self._observer.schedule(_FileEventHandler(self, directory), directory, recursive=True)
        except Exception as e:
            logger.error("watch_subscription_failed dir=%s error=%s", directory, e)
            report(WatchSubscriptionError(directory, str(e)))
            return

        logger.info("watching dir=%s", directory)
        self._interrupt.wait()
        logger.info("watcher_finished dir=%s", directory)
        report(None)

    def handle(self, path: str, kind: str, root: str | None = None) -> None:
        """Run the actions for one file event. Never raises.

        Events below a directory named in skip_dirs are ignored. Only the
        part of the path under root is checked, as the crawler prunes.
        """
        if self._skip_dirs and self._skipped(path, root):
            return

        logger.info("handling_file_event type=%s path=%s", kind, path)
        try:
            self._action(path, FileInfo.from_path(path))
        except Exception as e:
            # A bad event must not end the watch
            logger.error("failed_handling_file_event type=%s path=%s error=%s", kind, path, e)

    def _skipped(self, path: str, root: str | None) -> bool:
        dirs = Path(path).parent
        if root and dirs.is_relative_to(root):
            dirs = dirs.relative_to(root)
        return any(part in self._skip_dirs for part in dirs.parts)

    def stop(self) -> None:
        """Stop watching every directory. Safe to call more than once."""
        with self._stop_lock:
            if self._interrupt.is_set():
                return
            logger.info("stopping_watcher")
            self._interrupt.set()

        self._observer.unschedule_all()
        self._observer.stop()
        if self._observer.is_alive():
            self._observer.join(timeout=STOP_TIMEOUT)
        logger.info("watcher_stopped")
