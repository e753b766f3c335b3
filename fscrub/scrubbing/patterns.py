"""Static line patterns: literal substring and regular expression.

Both rewrite every match in a line with a fixed target. Neither keeps
state between lines or files, so a single instance is shared freely
across concurrently scrubbed files.
"""

from __future__ import annotations

import re
import threading
from dataclasses import dataclass, field

from fscrub.errors import PatternCompileError


@dataclass(frozen=True)
class StringPattern:
    """Replace every occurrence of a literal substring.

    An empty source never matches.
    """

    source: str
    target: str

    def find(self, text: str, source: str = "") -> int:
        """Count non-overlapping occurrences of the source string."""
        if not self.source:
            return 0
        return text.count(self.source)

    def handle(self, text: str, source: str = "") -> str:
        """Replace all occurrences of the source string with the target."""
        if not self.source:
            return text
        return text.replace(self.source, self.target)

    def describe(self) -> str:
        return f"Source: {self.source} - Target: {self.target}"


@dataclass
class RegexPattern:
    """Replace every match of a regular expression with a target template.

    The expression is compiled on first use and cached. The target uses
    re.sub template syntax, so groups can be referenced as \\1 or \\g<name>.
    """

    exp: str
    target: str
    _regex: re.Pattern[str] | None = field(default=None, init=False, repr=False, compare=False)
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    @property
    def regex(self) -> re.Pattern[str]:
        """The compiled expression.

        Raises:
            PatternCompileError: The expression is malformed
        """
        if self._regex is None:
            with self._lock:
                if self._regex is None:
                    try:
                        self._regex = re.compile(self.exp)
                    except re.error as e:
                        raise PatternCompileError(self.describe(), str(e)) from e
        return self._regex

    def find(self, text: str, source: str = "") -> int:
        """Count matches of the expression in the line."""
        return sum(1 for _ in self.regex.finditer(text))

    def handle(self, text: str, source: str = "") -> str:
        """Substitute every match with the expanded target.

        Raises:
            PatternCompileError: The expression is malformed
            re.error: The target references a group the expression lacks
        """
        return self.regex.sub(self.target, text)

    def describe(self) -> str:
        return f"Regex: {self.exp} - Target: {self.target}"
