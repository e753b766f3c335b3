"""Fixed constants shared across the scrubbing pipeline.

The provenance header and the ignore marker are part of the on-disk
contract: files rewritten by fscrub carry the header, and files carrying
the ignore marker are never touched again.
"""

from __future__ import annotations

# Inserted at the top of every file fscrub rewrites. Lines equal to any of
# these are dropped on later runs so the header never accumulates.
HEADER_LINES: tuple[str, ...] = (
    "//// PlayNet Fscrub ////",
    "// This file got cleaned by fscrub (github.com/playnet-public/fscrub) to remove sensitive information.",
    "// If this action was taken by mistake, please contact your responsible admin or seek advice at PlayNet (https://discord.gg/vhbP6Ks).",
    '// To make fscrub ignore your file, please add "//-ignore: github.com/playnet-public/fscrub" as first line and upload it again.',
    "////",
)

IGNORE_MARKER: str = "//-ignore: github.com/playnet-public/fscrub"

# Well-formed dotted-quad IPv4 address, octets 0-255
IP_EXPRESSION: str = (
    r"\b(25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)"
    r"(\.(25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)){3}\b"
)
IP_SUFFIX: str = ".ip.fscrub.org"

EMAIL_EXPRESSION: str = r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b"
EMAIL_SEED: int = 42

# Text encoding for reading and rewriting scrubbed files
FILE_ENCODING: str = "utf-8"
