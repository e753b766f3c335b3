"""Filesystem collaborators used by the scrub engine and the handlers.

Each primitive is a plain function so tests can swap in failing or
in-memory replacements. They raise the underlying OSError untouched;
mapping to fscrub errors happens at the call site.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import TextIO

from fscrub.config import FILE_ENCODING
from fscrub.models.types import FileInfo

FileOpener = Callable[[str], TextIO]
FileWriter = Callable[[str, str], None]


def open_file(path: str) -> TextIO:
    """Open a file for reading as text.

    Newlines are passed through untranslated so the scan sees exactly
    what is on disk.
    """
    return open(os.path.abspath(path), encoding=FILE_ENCODING, newline="")


def write_file(path: str, data: str) -> None:
    """Replace the whole content of a file."""
    with open(os.path.abspath(path), "w", encoding=FILE_ENCODING, newline="") as f:
        f.write(data)


def _raise(err: OSError) -> None:
    raise err


def walk_directory(
    root: str,
    skip_dirs: frozenset[str] = frozenset(),
) -> Iterator[tuple[str, FileInfo]]:
    """Walk a directory tree yielding every entry, directories included.

    The root itself is yielded first. Directories named in skip_dirs are
    neither yielded nor descended into.

    Args:
        root: Directory to walk
        skip_dirs: Directory names to prune

    Yields:
        (path, FileInfo) for each visited entry

    Raises:
        OSError: The root or a subdirectory cannot be listed, or an
            entry cannot be stat'ed
    """
    yield root, FileInfo.from_path(root)

    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
        dirnames[:] = sorted(d for d in dirnames if d not in skip_dirs)

        for name in [*dirnames, *sorted(filenames)]:
            path = str(Path(dirpath) / name)
            yield path, FileInfo.from_path(path)
