"""Stateful identifier patterns: consistent per-file pseudonymization.

Same original value in the same file -> same substitute, every time.
The log keeps its meaning (which client talked to which) while the
sensitive values are gone. Substitutes are scoped per file, so the same
address may map to different substitutes in two files.
"""

from __future__ import annotations

import logging
import re
import threading
from typing import Callable

from faker import Faker

from fscrub.config import EMAIL_EXPRESSION, EMAIL_SEED, IP_EXPRESSION, IP_SUFFIX

logger = logging.getLogger(__name__)

# Keeps fake local parts inside EMAIL_EXPRESSION and free of "+"
_LOCAL_PART_STRIP = re.compile(r"[^a-z0-9._-]")


class IdentifierStore:
    """Per-file value -> substitute mappings shared by stateful patterns.

    Keyed first by (namespace, file), then by original value. Substitutes
    handed out are remembered per file too, so a pattern can recognise
    its own output on a later pass. Grows with the distinct values seen;
    nothing is evicted.

    Thread-safe: every lookup-or-insert holds a single lock, and the lock
    is never held across I/O.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._files: dict[tuple[str, str], dict[str, str]] = {}
        self._issued: dict[tuple[str, str], set[str]] = {}

    def substitute(
        self,
        namespace: str,
        source: str,
        value: str,
        make: Callable[[int], str],
    ) -> str:
        """Return the substitute for value in source, assigning one if new.

        Args:
            namespace: Pattern family (e.g. "ip") so patterns sharing a
                store keep independent numbering
            source: File identity the value was found in
            value: The original sensitive value
            make: Builds a substitute from the ordinal of first sighting

        Returns:
            The stable substitute for (namespace, source, value)
        """
        created = False
        with self._lock:
            known = self._files.setdefault((namespace, source), {})
            repl = known.get(value)
            if repl is None:
                repl = make(len(known))
                known[value] = repl
                self._issued.setdefault((namespace, source), set()).add(repl)
                created = True

        # Never log the original value
        if created:
            logger.debug(
                "identifier_assigned namespace=%s file=%s substitute=%s",
                namespace,
                source,
                repl,
            )
        return repl

    def is_substitute(self, namespace: str, source: str, value: str) -> bool:
        """True if value was handed out as a substitute in this file."""
        with self._lock:
            return value in self._issued.get((namespace, source), ())

    def mapping(self, namespace: str, source: str) -> dict[str, str]:
        """Copy of the current mapping for one file."""
        with self._lock:
            return dict(self._files.get((namespace, source), {}))

    def __len__(self) -> int:
        """Number of (namespace, file) mappings held."""
        with self._lock:
            return len(self._files)


class _IdentifierPattern:
    """Shared find/handle for patterns that substitute through a store."""

    namespace = ""

    def __init__(self, expression: str, store: IdentifierStore | None = None) -> None:
        self._regex = re.compile(expression)
        self.store = store if store is not None else IdentifierStore()

    def find(self, text: str, source: str = "") -> int:
        """Count identifier matches in the line, not counting own substitutes."""
        return sum(1 for m in self._regex.finditer(text) if not self._issued(m.group(0), source))

    def handle(self, text: str, source: str = "") -> str:
        """Replace each identifier with its per-file substitute.

        Substitutes this pattern already issued for the file are left as
        they are, so scrubbing a scrubbed file changes nothing.
        """

        def replace(m: re.Match[str]) -> str:
            value = m.group(0)
            if self._issued(value, source):
                return value
            return self.store.substitute(
                self.namespace,
                source,
                self._key(value),
                lambda ordinal: self._make(source, ordinal),
            )

        return self._regex.sub(replace, text)

    def _issued(self, value: str, source: str) -> bool:
        return self.store.is_substitute(self.namespace, source, self._key(value))

    def _key(self, value: str) -> str:
        return value

    def _make(self, source: str, ordinal: int) -> str:
        raise NotImplementedError


class IntelligentIPPattern(_IdentifierPattern):
    """Replace IPv4 addresses with stable per-file client names.

    The n-th distinct address seen in a file becomes `client<n><suffix>`.
    """

    namespace = "ip"

    def __init__(self, store: IdentifierStore | None = None, suffix: str = IP_SUFFIX) -> None:
        super().__init__(IP_EXPRESSION, store)
        self.suffix = suffix

    def _make(self, source: str, ordinal: int) -> str:
        return f"client{ordinal}{self.suffix}"

    def describe(self) -> str:
        return "intelligentIP"


class IntelligentEmailPattern(_IdentifierPattern):
    """Replace e-mail addresses with stable per-file fake addresses.

    Uses a seeded Faker instance so the same (file, ordinal) always yields
    the same fake local part. The ordinal follows a "+" tag, a character
    user names never contain, which keeps substitutes distinct within a
    file. Domains come from Faker's reserved example domains. Addresses
    compare case-insensitively.
    """

    namespace = "email"

    def __init__(self, store: IdentifierStore | None = None, seed: int = EMAIL_SEED) -> None:
        super().__init__(EMAIL_EXPRESSION, store)
        self.seed = seed
        self._faker = Faker()
        self._faker_lock = threading.Lock()

    def _key(self, value: str) -> str:
        return value.lower()

    def _make(self, source: str, ordinal: int) -> str:
        # Reseeding per substitute keeps output independent of file order
        with self._faker_lock:
            self._faker.seed_instance(f"{self.seed}:{source}:{ordinal}")
            user = self._faker.user_name()
            domain = self._faker.safe_domain_name()
        user = _LOCAL_PART_STRIP.sub("", user.lower()) or "user"
        return f"{user}+{ordinal}@{domain}"

    def describe(self) -> str:
        return "intelligentEmail"
