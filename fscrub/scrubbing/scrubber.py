"""Fscrub: line-oriented scrub engine for text files.

Applies an ordered list of patterns to every line of a file and rewrites
the file, prefixed with the provenance header, only when a line changed.

Per file:
1. Skip directories and anything that is not a regular file
2. Read and split into lines (the file handle is closed before any write)
3. Stop if the first non-blank line is the ignore marker
4. Drop provenance header lines left by an earlier run
5. Run every pattern over every remaining line, failing fast
6. If anything changed (never in dry-run), write header + lines back
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from fscrub.config import HEADER_LINES, IGNORE_MARKER
from fscrub.errors import (
    FileReadError,
    FileWriteError,
    FscrubError,
    MissingFileError,
    PatternHandleError,
    PatternMatchError,
    PermissionDeniedError,
    UndefinedOpenError,
)
from fscrub.models.types import FileInfo, Line
from fscrub.pipeline.protocols import Pattern
from fscrub.primitives import FileOpener, FileWriter, open_file, write_file

logger = logging.getLogger(__name__)


@dataclass
class ScanResult:
    """Outcome of running the patterns over one file's lines."""

    lines: list[str] = field(default_factory=list)
    changed: bool = False
    ignored: bool = False
    changed_lines: int = 0


def split_lines(content: str) -> list[str]:
    """Split file content into lines the way a line scanner does.

    Lines end at "\\n"; one trailing "\\r" is dropped; a final newline
    does not produce an extra empty line.
    """
    if not content:
        return []
    lines = content.split("\n")
    if content.endswith("\n"):
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


class Fscrub:
    """Scrub action for text files.

    Satisfies the Action protocol through its handle method:
        def handle(self, path: str, info: FileInfo) -> None

    Patterns are read-only after construction and shared across every
    file handled, possibly from several handler threads at once.
    """

    def __init__(
        self,
        patterns: Iterable[Pattern] = (),
        *,
        dry_run: bool = False,
        file_opener: FileOpener | None = open_file,
        file_writer: FileWriter | None = write_file,
    ) -> None:
        """Initialize the engine.

        Args:
            patterns: Patterns applied to every line, in order
            dry_run: Detect and log only; never rewrite a file
            file_opener: Opens a path for reading text
            file_writer: Replaces the whole content of a path
        """
        self.patterns: tuple[Pattern, ...] = tuple(patterns)
        self.dry_run = dry_run
        self._file_opener = file_opener
        self._file_writer = file_writer

    def validate(self) -> None:
        """Check the engine has its filesystem collaborators.

        Raises:
            FscrubError: opener or writer missing
        """
        if self._file_opener is None:
            raise FscrubError("fscrub missing file opener")
        if self._file_writer is None:
            raise FscrubError("fscrub missing file writer")

    def handle(self, path: str, info: FileInfo) -> None:
        """Scrub one file, rewriting it if any pattern changed a line.

        Raises:
            MissingFileError, PermissionDeniedError, UndefinedOpenError:
                file could not be opened
            FileReadError: file is not readable text
            PatternMatchError, PatternHandleError: a pattern failed
            FileWriteError: the rewrite failed
        """
        if info.is_dir:
            return
        if not info.is_regular:
            logger.debug("skipping_non_regular_file path=%s", path)
            return

        logger.info("running_action action=fscrub path=%s file=%s", path, info.name)

        texts = self._read_lines(path)
        logger.info("file_scan_started path=%s", path)
        result = self.scan(path, texts)

        if result.ignored:
            logger.info("file_ignored path=%s", path)
            return

        logger.info(
            "file_scan_finished path=%s lines=%d changed_lines=%d",
            path,
            len(result.lines),
            result.changed_lines,
        )
        if result.changed:
            self.update_file(path, result.lines)

    def scan(self, path: str, texts: Iterable[str]) -> ScanResult:
        """Run the patterns over a file's lines without touching the file.

        Args:
            path: File identity, used to scope stateful patterns
            texts: The file's lines, without line terminators

        Returns:
            ScanResult with the reconstructed lines (header removed)
        """
        result = ScanResult()
        marker_checked = False

        for number, text in enumerate(texts):
            if not marker_checked and text.strip():
                marker_checked = True
                if text.rstrip() == IGNORE_MARKER:
                    result.ignored = True
                    return result

            if text in HEADER_LINES:
                continue

            line = self.handle_line(Line(path=path, number=number, text=text))
            if line.changed:
                result.changed = True
                result.changed_lines += 1
            result.lines.append(line.text)

        return result

    def handle_line(self, line: Line) -> Line:
        """Apply every pattern to a line, in order.

        In dry-run mode the replacement is computed and logged but the
        line keeps its original text.

        Raises:
            PatternMatchError: A pattern's find failed
            PatternHandleError: A pattern's handle failed
        """
        logger.debug("handling_line path=%s line=%d", line.path, line.number)

        for pattern in self.patterns:
            try:
                count = pattern.find(line.text, line.path)
            except Exception as e:
                logger.error(
                    "failed_finding_pattern path=%s line=%d pattern=%s",
                    line.path,
                    line.number,
                    pattern.describe(),
                )
                raise PatternMatchError(pattern.describe(), line.path, line.number, str(e)) from e
            if count < 1:
                continue

            logger.info(
                "pattern_found path=%s line=%d pattern=%s count=%d",
                line.path,
                line.number,
                pattern.describe(),
                count,
            )
            try:
                text = pattern.handle(line.text, line.path)
            except Exception as e:
                logger.error(
                    "failed_handling_line path=%s line=%d pattern=%s",
                    line.path,
                    line.number,
                    pattern.describe(),
                )
                raise PatternHandleError(pattern.describe(), line.path, line.number, str(e)) from e

            if self.dry_run:
                logger.info(
                    "dry_run_replacement path=%s line=%d pattern=%s",
                    line.path,
                    line.number,
                    pattern.describe(),
                )
                continue
            if text != line.text:
                line.text = text
                line.changed = True

        return line

    def update_file(self, path: str, lines: list[str]) -> None:
        """Write the provenance header followed by lines to path.

        A single write is attempted; nothing is rolled back.

        Raises:
            FileWriteError: The writer failed
        """
        self.validate()
        content = "\n".join([*HEADER_LINES, *lines])
        try:
            self._file_writer(path, content)  # type: ignore[misc]
        except OSError as e:
            logger.error("file_update_failed path=%s error=%s", path, e)
            raise FileWriteError(path, str(e)) from e
        logger.info("file_updated path=%s", path)

    def _read_lines(self, path: str) -> list[str]:
        self.validate()
        try:
            f = self._file_opener(path)  # type: ignore[misc]
        except FileNotFoundError as e:
            logger.error("file_does_not_exist path=%s", path)
            raise MissingFileError(path) from e
        except PermissionError as e:
            logger.error("file_permission_denied path=%s", path)
            raise PermissionDeniedError(path) from e
        except Exception as e:
            logger.error("file_open_failed path=%s error=%s", path, e)
            raise UndefinedOpenError(path, f"undefined error opening file: {e}") from e

        with f:
            try:
                content = f.read()
            except (OSError, UnicodeDecodeError) as e:
                logger.error("file_scan_failed path=%s error=%s", path, e)
                raise FileReadError(path, str(e)) from e

        return split_lines(content)
