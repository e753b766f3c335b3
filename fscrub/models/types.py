"""Core type definitions: directories, file metadata, scanned lines."""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import NewType

# Opaque path identifier; the unit of handler fan-out
Directory = NewType("Directory", str)

# Ordered, duplicates permitted
Directories = list[Directory]


@dataclass(frozen=True)
class FileInfo:
    """Metadata an Action receives alongside the path it should process.

    Built from lstat so symlinks are reported as links, not followed.
    """

    name: str
    size: int
    mode: int
    is_dir: bool

    @classmethod
    def from_path(cls, path: str | os.PathLike[str]) -> FileInfo:
        """Stat a path and describe it.

        Raises:
            OSError: The path vanished or cannot be stat'ed
        """
        st = os.lstat(path)
        return cls(
            name=Path(path).name,
            size=st.st_size,
            mode=st.st_mode,
            is_dir=stat.S_ISDIR(st.st_mode),
        )

    @property
    def is_regular(self) -> bool:
        """True for plain files (not links, sockets, devices or directories)."""
        return stat.S_ISREG(self.mode)


@dataclass
class Line:
    """A single line of a file during a scrub pass.

    Produced by the file scan, rewritten by patterns, then either written
    back or discarded.
    """

    path: str
    number: int
    text: str
    changed: bool = False
