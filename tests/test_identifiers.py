"""Tests for the stateful identifier patterns and their store.

Verifies consistent per-file pseudonymization: same value in the same
file -> same substitute, distinct values -> distinct substitutes, and
no corruption under concurrent use.
"""

from __future__ import annotations

import random
import re
import threading

import pytest

from fscrub.scrubbing.identifiers import (
    IdentifierStore,
    IntelligentEmailPattern,
    IntelligentIPPattern,
)


class TestIdentifierStore:
    """Tests for the IdentifierStore class."""

    def test_assigns_ordinals_in_first_seen_order(self) -> None:
        store = IdentifierStore()

        def make(n: int) -> str:
            return f"v{n}"

        assert store.substitute("ns", "f", "a", make) == "v0"
        assert store.substitute("ns", "f", "b", make) == "v1"
        assert store.substitute("ns", "f", "a", make) == "v0"

    def test_factory_not_called_for_known_value(self) -> None:
        store = IdentifierStore()
        calls: list[int] = []

        def make(n: int) -> str:
            calls.append(n)
            return f"v{n}"

        store.substitute("ns", "f", "a", make)
        store.substitute("ns", "f", "a", make)

        assert calls == [0]

    def test_namespaces_number_independently(self) -> None:
        store = IdentifierStore()

        store.substitute("ip", "f", "a", str)
        assert store.substitute("email", "f", "b", str) == "0"

    def test_mapping_returns_copy(self) -> None:
        store = IdentifierStore()
        store.substitute("ns", "f", "a", str)

        snapshot = store.mapping("ns", "f")
        snapshot["x"] = "y"

        assert store.mapping("ns", "f") == {"a": "0"}

    def test_len_counts_files(self) -> None:
        store = IdentifierStore()
        store.substitute("ns", "f1", "a", str)
        store.substitute("ns", "f2", "a", str)

        assert len(store) == 2

    def test_remembers_issued_substitutes(self) -> None:
        store = IdentifierStore()
        store.substitute("ns", "f", "a", lambda n: f"v{n}")

        assert store.is_substitute("ns", "f", "v0") is True
        assert store.is_substitute("ns", "f", "a") is False
        assert store.is_substitute("ns", "g", "v0") is False
        assert store.is_substitute("other", "f", "v0") is False


class TestIntelligentIPPattern:
    """Tests for the IntelligentIPPattern class."""

    @pytest.fixture
    def pattern(self) -> IntelligentIPPattern:
        return IntelligentIPPattern()

    def test_find_single(self, pattern: IntelligentIPPattern) -> None:
        assert pattern.find("127.0.0.1", "file1") == 1

    def test_find_none(self, pattern: IntelligentIPPattern) -> None:
        assert pattern.find("abcccccccc.a..2.1.c.1.2.a.2.2.a.x", "file1") == 0

    def test_find_rejects_out_of_range_octets(self, pattern: IntelligentIPPattern) -> None:
        assert pattern.find("999.1.1.1", "file1") == 0

    def test_find_multiple(self, pattern: IntelligentIPPattern) -> None:
        assert pattern.find("from 10.0.0.1 to 10.0.0.2", "file1") == 2

    def test_sequence_within_one_file(self, pattern: IntelligentIPPattern) -> None:
        """127.0.0.1, 127.0.0.2, 127.0.0.1 -> client0, client1, client0."""
        assert pattern.handle("127.0.0.1", "file1") == "client0.ip.fscrub.org"
        assert pattern.handle("127.0.0.2", "file1") == "client1.ip.fscrub.org"
        assert pattern.handle("127.0.0.1", "file1") == "client0.ip.fscrub.org"

    def test_files_have_separate_namespaces(self, pattern: IntelligentIPPattern) -> None:
        """The same address may map differently in two files."""
        pattern.handle("127.0.0.1", "file1")
        pattern.handle("127.0.0.2", "file2")

        assert pattern.handle("127.0.0.1", "file1") == "client0.ip.fscrub.org"
        assert pattern.handle("127.0.0.1", "file2") == "client1.ip.fscrub.org"

    def test_handle_keeps_surrounding_text(self, pattern: IntelligentIPPattern) -> None:
        line = "GET / from 192.168.1.10 via 10.0.0.1 (192.168.1.10)"

        result = pattern.handle(line, "access.log")

        assert result == (
            "GET / from client0.ip.fscrub.org via client1.ip.fscrub.org "
            "(client0.ip.fscrub.org)"
        )

    def test_handle_without_match_is_identity(self, pattern: IntelligentIPPattern) -> None:
        text = "abcccccccc.a..2.1.c.1.2.a.2.2.a.x"

        assert pattern.handle(text, "file1") == text

    def test_custom_suffix(self) -> None:
        pattern = IntelligentIPPattern(suffix=".example")

        assert pattern.handle("1.2.3.4", "f") == "client0.example"

    def test_injected_store_is_used(self) -> None:
        store = IdentifierStore()
        pattern = IntelligentIPPattern(store=store)

        pattern.handle("1.2.3.4", "f")

        assert store.mapping("ip", "f") == {"1.2.3.4": "client0.ip.fscrub.org"}

    def test_instances_do_not_share_state(self) -> None:
        """Separate instances with default stores are isolated."""
        first = IntelligentIPPattern()
        second = IntelligentIPPattern()

        first.handle("1.1.1.1", "f")

        assert second.handle("2.2.2.2", "f") == "client0.ip.fscrub.org"

    def test_describe(self, pattern: IntelligentIPPattern) -> None:
        assert pattern.describe() == "intelligentIP"

    def test_concurrent_handle_keeps_mapping_consistent(self) -> None:
        """Many threads on overlapping (file, value) pairs never corrupt the map."""
        pattern = IntelligentIPPattern()
        files = [f"file{i}" for i in range(4)]
        addresses = [f"10.0.{i // 256}.{i % 256}" for i in range(50)]
        results: dict[tuple[str, str], set[str]] = {}
        results_lock = threading.Lock()
        barrier = threading.Barrier(16)

        def worker(seed: int) -> None:
            rng = random.Random(seed)
            pairs = [(f, a) for f in files for a in addresses]
            rng.shuffle(pairs)
            barrier.wait()
            for f, a in pairs:
                out = pattern.handle(a, f)
                with results_lock:
                    results.setdefault((f, a), set()).add(out)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(16)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        # Every pair saw exactly one substitute across all threads
        assert all(len(outs) == 1 for outs in results.values())
        for f in files:
            mapping = pattern.store.mapping("ip", f)
            assert len(mapping) == len(addresses)
            assert sorted(mapping.values()) == sorted(
                f"client{n}.ip.fscrub.org" for n in range(len(addresses))
            )


class TestIntelligentEmailPattern:
    """Tests for the IntelligentEmailPattern class."""

    def test_find(self) -> None:
        pattern = IntelligentEmailPattern()

        assert pattern.find("mail jane@corp.com and bob@corp.com", "f") == 2

    def test_consistent_within_file(self) -> None:
        pattern = IntelligentEmailPattern()

        first = pattern.handle("jane@corp.com", "f")
        second = pattern.handle("jane@corp.com", "f")

        assert first == second
        assert first != "jane@corp.com"
        assert "@" in first

    def test_case_insensitive(self) -> None:
        pattern = IntelligentEmailPattern()

        assert pattern.handle("Jane@Corp.com", "f") == pattern.handle("jane@corp.com", "f")

    def test_distinct_values_distinct_substitutes(self) -> None:
        """No two values in one file share a substitute, whatever Faker draws."""
        pattern = IntelligentEmailPattern()

        subs = [pattern.handle(f"user{n}@corp.com", "f") for n in range(300)]

        assert len(set(subs)) == 300

    def test_substitute_carries_ordinal_tag(self) -> None:
        pattern = IntelligentEmailPattern()

        subs = [pattern.handle(f"user{n}@corp.com", "f") for n in range(50)]

        for ordinal, sub in enumerate(subs):
            match = re.fullmatch(r"[a-z0-9._-]+\+(\d+)@example\.(com|net|org)", sub)
            assert match is not None, sub
            assert int(match.group(1)) == ordinal

    def test_own_substitute_left_alone(self) -> None:
        """A scrubbed line scrubbed again is unchanged."""
        pattern = IntelligentEmailPattern()
        line = pattern.handle("mail from alice@corp.com", "f")

        assert pattern.find(line, "f") == 0
        assert pattern.handle(line, "f") == line
        assert len(pattern.store.mapping("email", "f")) == 1

    def test_own_substitute_recognised_case_insensitively(self) -> None:
        pattern = IntelligentEmailPattern()
        sub = pattern.handle("alice@corp.com", "f")

        assert pattern.handle(sub.upper(), "f") == sub.upper()

    def test_substitute_from_other_file_is_replaced(self) -> None:
        """Substitutes are only recognised in the file they were issued for."""
        pattern = IntelligentEmailPattern()
        sub = pattern.handle("alice@corp.com", "f")

        assert pattern.find(sub, "g") == 1
        assert pattern.handle(sub, "g") != sub

    def test_new_address_next_to_substitute(self) -> None:
        pattern = IntelligentEmailPattern()
        first = pattern.handle("alice@corp.com", "f")

        line = pattern.handle(f"{first} cc bob@corp.com", "f")

        kept, added = line.split(" cc ")
        assert kept == first
        assert added != "bob@corp.com"
        assert "+1@" in added

    def test_deterministic_with_seed(self) -> None:
        """Same seed, file and order produce the same output across instances."""
        first = IntelligentEmailPattern(seed=7)
        second = IntelligentEmailPattern(seed=7)

        assert first.handle("a@b.com", "f") == second.handle("a@b.com", "f")

    def test_uses_reserved_domains(self) -> None:
        pattern = IntelligentEmailPattern()

        result = pattern.handle("a@b.com", "f")

        assert result.split("@")[1] in {"example.com", "example.net", "example.org"}

    def test_describe(self) -> None:
        assert IntelligentEmailPattern().describe() == "intelligentEmail"
