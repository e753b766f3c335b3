"""Actions: per-file operations composed into a handler's pipeline."""

from __future__ import annotations

import logging

from fscrub.models.types import FileInfo
from fscrub.pipeline.protocols import Action

logger = logging.getLogger(__name__)


class LogAction:
    """Logs every path a handler hands over. Never fails."""

    def __call__(self, path: str, info: FileInfo) -> None:
        logger.info("running_action action=fslog path=%s file=%s", path, info.name)


def chain_actions(*actions: Action) -> Action:
    """Compose actions into one that runs them in order.

    The first action to raise stops the chain; the error propagates.
    """

    def run(path: str, info: FileInfo) -> None:
        for action in actions:
            action(path, info)

    return run
