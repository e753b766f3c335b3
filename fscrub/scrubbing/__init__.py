"""Scrubbing module.

Line patterns (literal, regex, stateful identifiers), their configuration
loader, and the Fscrub engine that applies them to files.
"""

from fscrub.scrubbing.identifiers import (
    IdentifierStore,
    IntelligentEmailPattern,
    IntelligentIPPattern,
)
from fscrub.scrubbing.pattern_config import (
    PatternConfig,
    load_pattern_config,
    parse_pattern_config,
)
from fscrub.scrubbing.patterns import RegexPattern, StringPattern
from fscrub.scrubbing.scrubber import Fscrub, ScanResult

__all__ = [
    "Fscrub",
    "ScanResult",
    "StringPattern",
    "RegexPattern",
    "IdentifierStore",
    "IntelligentIPPattern",
    "IntelligentEmailPattern",
    "PatternConfig",
    "load_pattern_config",
    "parse_pattern_config",
]
