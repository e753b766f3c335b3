"""Pattern configuration: decode a heterogeneous list of descriptors.

Each descriptor carries a "type" discriminator that is read first; the
remaining fields are then decoded by the variant's own decoder. This
table IS the set of supported pattern types. Adding a type means adding
one row.

    {"patterns": [
        {"type": "string", "source": "foo", "target": "bar"},
        {"type": "regex", "exp": "t\\s\\*\\w+", "target": "f *foo"},
        {"type": "ip", "suffix": ".ip.example.org"},
        {"type": "email", "seed": 7}
    ]}
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterator, Mapping

import yaml

from fscrub.config import EMAIL_SEED, IP_SUFFIX
from fscrub.errors import ConfigDecodeError, UnsupportedPatternTypeError
from fscrub.pipeline.protocols import Pattern
from fscrub.scrubbing.identifiers import (
    IdentifierStore,
    IntelligentEmailPattern,
    IntelligentIPPattern,
)
from fscrub.scrubbing.patterns import RegexPattern, StringPattern

logger = logging.getLogger(__name__)

YAML_SUFFIXES: frozenset[str] = frozenset({".yaml", ".yml"})


def _required(raw: Mapping[str, Any], key: str, index: int) -> str:
    value = raw.get(key)
    if not isinstance(value, str):
        raise ConfigDecodeError(
            f"pattern field {key!r} must be a string",
            {"index": index, "type": raw.get("type")},
        )
    return value


def _decode_string(raw: Mapping[str, Any], index: int, store: IdentifierStore) -> Pattern:
    source = _required(raw, "source", index)
    if not source:
        raise ConfigDecodeError("pattern field 'source' must not be empty", {"index": index})
    return StringPattern(source=source, target=_required(raw, "target", index))


def _decode_regex(raw: Mapping[str, Any], index: int, store: IdentifierStore) -> Pattern:
    return RegexPattern(exp=_required(raw, "exp", index), target=_required(raw, "target", index))


def _decode_ip(raw: Mapping[str, Any], index: int, store: IdentifierStore) -> Pattern:
    suffix = raw.get("suffix", IP_SUFFIX)
    if not isinstance(suffix, str):
        raise ConfigDecodeError("pattern field 'suffix' must be a string", {"index": index})
    return IntelligentIPPattern(store=store, suffix=suffix)


def _decode_email(raw: Mapping[str, Any], index: int, store: IdentifierStore) -> Pattern:
    seed = raw.get("seed", EMAIL_SEED)
    if isinstance(seed, bool) or not isinstance(seed, int):
        raise ConfigDecodeError("pattern field 'seed' must be an integer", {"index": index})
    return IntelligentEmailPattern(store=store, seed=seed)


PATTERN_DECODERS: dict[str, Callable[[Mapping[str, Any], int, IdentifierStore], Pattern]] = {
    "string": _decode_string,
    "regex": _decode_regex,
    "ip": _decode_ip,
    "email": _decode_email,
}


@dataclass(frozen=True)
class PatternConfig:
    """Ordered, immutable list of patterns loaded once at startup."""

    patterns: tuple[Pattern, ...] = ()

    def __iter__(self) -> Iterator[Pattern]:
        return iter(self.patterns)

    def __len__(self) -> int:
        return len(self.patterns)

    @classmethod
    def from_json(cls, text: str | bytes, store: IdentifierStore | None = None) -> PatternConfig:
        """Decode a JSON pattern document.

        Raises:
            ConfigDecodeError: Malformed JSON or descriptor
            UnsupportedPatternTypeError: Unknown type discriminator
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ConfigDecodeError(f"invalid pattern json: {e}") from e
        return parse_pattern_config(data, store)


def parse_pattern_config(data: Any, store: IdentifierStore | None = None) -> PatternConfig:
    """Decode an already parsed pattern document.

    Args:
        data: Mapping with a "patterns" list of descriptors
        store: Identifier store shared by the stateful patterns; a fresh
            one is created when omitted

    Returns:
        PatternConfig with patterns in document order

    Raises:
        ConfigDecodeError: Document or descriptor is malformed
        UnsupportedPatternTypeError: Unknown type discriminator
    """
    if not isinstance(data, Mapping):
        raise ConfigDecodeError("pattern document must be a mapping")
    raw_patterns = data.get("patterns")
    if not isinstance(raw_patterns, list):
        raise ConfigDecodeError("pattern document requires a 'patterns' list")

    store = store if store is not None else IdentifierStore()
    patterns: list[Pattern] = []
    for index, raw in enumerate(raw_patterns):
        if not isinstance(raw, Mapping):
            raise ConfigDecodeError("pattern descriptor must be a mapping", {"index": index})
        pattern_type = raw.get("type")
        decoder = PATTERN_DECODERS.get(pattern_type) if isinstance(pattern_type, str) else None
        if decoder is None:
            raise UnsupportedPatternTypeError(pattern_type, index)
        patterns.append(decoder(raw, index, store))

    return PatternConfig(patterns=tuple(patterns))


def load_pattern_config(
    path: str | Path | None,
    store: IdentifierStore | None = None,
) -> PatternConfig:
    """Load patterns from a JSON or YAML file.

    An empty path yields an empty configuration.

    Raises:
        ConfigDecodeError: File unreadable or content malformed
        UnsupportedPatternTypeError: Unknown type discriminator
    """
    if not path:
        return PatternConfig()

    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigDecodeError(f"reading pattern file failed: {e}", {"path": str(path)}) from e

    if path.suffix.lower() in YAML_SUFFIXES:
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigDecodeError(f"invalid pattern yaml: {e}", {"path": str(path)}) from e
        config = parse_pattern_config(data, store)
    else:
        config = PatternConfig.from_json(content, store)

    logger.info("patterns_loaded path=%s count=%d", path, len(config))
    return config
