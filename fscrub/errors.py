"""Error hierarchy for fscrub.

Every fscrub-specific error inherits from FscrubError. Nothing in the
core retries: errors abort the current file (or the run, once they reach
the dispatcher) and carry enough context to find the offending input.
"""

from __future__ import annotations

from typing import Any


class FscrubError(Exception):
    """Base error for fscrub.

    Attributes:
        message: Human-readable error description
        details: Extra context rendered alongside the message
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            fields = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({fields})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigDecodeError(FscrubError):
    """Pattern configuration could not be decoded.

    Fatal at startup - fix the configuration file.
    """

    pass


class UnsupportedPatternTypeError(ConfigDecodeError):
    """Pattern descriptor carries an unknown type discriminator.

    Attributes:
        pattern_type: The discriminator value that was found
        index: Position of the descriptor in the patterns list
    """

    def __init__(self, pattern_type: Any, index: int) -> None:
        self.pattern_type = pattern_type
        self.index = index
        super().__init__(
            "unsupported pattern type",
            {"type": pattern_type, "index": index},
        )


# =============================================================================
# File Errors
# =============================================================================


class FileOpenError(FscrubError):
    """Opening a file for scrubbing failed.

    Attributes:
        path: The file that could not be opened
    """

    reason = "file could not be opened"

    def __init__(self, path: str, reason: str | None = None) -> None:
        self.path = path
        super().__init__(reason or self.reason, {"path": path})


class MissingFileError(FileOpenError):
    """File does not exist (vanished between discovery and handling)."""

    reason = "file does not exist"


class PermissionDeniedError(FileOpenError):
    """File exists but may not be opened for reading and writing."""

    reason = "file permission denied"


class UndefinedOpenError(FileOpenError):
    """Any other failure opening a file."""

    reason = "undefined error opening file"


class FileReadError(FscrubError):
    """File was opened but could not be read as text.

    Attributes:
        path: The file that failed to read
    """

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        super().__init__(f"file scan failed: {reason}", {"path": path})


class FileWriteError(FscrubError):
    """Rewriting a scrubbed file failed. The file may be left unmodified.

    Attributes:
        path: The file that failed to update
    """

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        super().__init__(f"updating file failed: {reason}", {"path": path})


# =============================================================================
# Pattern Errors
# =============================================================================


class PatternError(FscrubError):
    """Base error for pattern failures.

    Attributes:
        pattern: Description of the pattern that failed
    """

    def __init__(
        self,
        pattern: str,
        reason: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.pattern = pattern
        super().__init__(reason, {"pattern": pattern, **(details or {})})


class PatternCompileError(PatternError):
    """Regular expression in a pattern is malformed."""

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(pattern, f"compiling expression failed: {reason}")


class _LinePatternError(PatternError):
    """Pattern failure located at a file line."""

    action = "applying"

    def __init__(self, pattern: str, path: str, line_number: int, reason: str) -> None:
        self.path = path
        self.line_number = line_number
        super().__init__(
            pattern,
            f"{self.action} pattern failed: {reason}",
            {"path": path, "line": line_number},
        )


class PatternMatchError(_LinePatternError):
    """Pattern failed while counting matches in a line."""

    action = "finding"


class PatternHandleError(_LinePatternError):
    """Pattern failed while rewriting a line."""

    action = "handling"


# =============================================================================
# Handler Errors
# =============================================================================


class InvalidDirectoryError(FscrubError):
    """Directory handed to a handler is empty.

    Attributes:
        directory: The offending directory value
    """

    def __init__(self, directory: str) -> None:
        self.directory = directory
        super().__init__("invalid dir", {"dir": repr(directory)})


class WatchSubscriptionError(FscrubError):
    """Subscribing to filesystem events for a directory failed.

    Attributes:
        directory: The directory that could not be watched
    """

    def __init__(self, directory: str, reason: str) -> None:
        self.directory = directory
        super().__init__(f"watching dir failed: {reason}", {"dir": directory})


class DispatcherConfigError(FscrubError):
    """Dispatcher was configured without any directory."""

    pass


class HandlerError(FscrubError):
    """First failure reported by a handler, wrapped by the dispatcher.

    Attributes:
        directory: Directory the failing handler was running for
        handler: Name of the failing handler
    """

    def __init__(self, directory: str, handler: str, cause: BaseException) -> None:
        self.directory = directory
        self.handler = handler
        super().__init__(
            f"error encountered while running fscrub: {cause}",
            {"dir": directory, "handler": handler},
        )
