"""Pipeline stage protocols (structural interfaces).

Each stage is defined by a Protocol -- a structural interface that any
implementation must satisfy. No base classes, no inheritance.
"""

from __future__ import annotations

from typing import Callable, Protocol

from fscrub.models.types import Directory, FileInfo

# Receives a handler's single outcome for one directory: None on success
Report = Callable[[BaseException | None], None]


class Pattern(Protocol):
    """Matches and rewrites sensitive data within a single line.

    `source` identifies the file the line belongs to. Static patterns
    ignore it; stateful patterns use it to scope their substitutions.
    """

    def find(self, text: str, source: str = "") -> int:
        """Return how many matches the line contains."""
        ...

    def handle(self, text: str, source: str = "") -> str:
        """Return the line with every match replaced."""
        ...

    def describe(self) -> str:
        """Short representation for logs and errors."""
        ...


class Action(Protocol):
    """Per-file operation driven by a Handler.

    Raises on failure; returning means success.
    """

    def __call__(self, path: str, info: FileInfo) -> None: ...


class Handler(Protocol):
    """Processes one directory once (crawl) or continuously (watch).

    run() reports exactly one outcome per call through `report`.
    stop() must be safe to call repeatedly and before or after run().
    """

    @property
    def name(self) -> str:
        """Handler kind for logging."""
        ...

    def run(self, directory: Directory, report: Report) -> None:
        """Process the directory, then report None or the failure."""
        ...

    def stop(self) -> None:
        """Cancel any ongoing work and release resources."""
        ...
