"""
Query service over a SearchIndex.

Walks the index keys in ascending order while feeding them to an automaton.
The automaton states for each prefix of the previous key are kept, so a key
only costs the bytes it does not share with its predecessor, and whenever a
state reports it can no longer match, every key under that prefix is skipped
with a binary search.
"""

import logging
from bisect import bisect_left
from collections.abc import Iterator, Sequence
from typing import Optional

from ..config import SearchConfig, get_config
from ..index import IndexBuilder, SearchIndex
from ..ingestion import Catalog, RecordResolver
from ..models import DocItem
from .automata import (
    Automaton,
    Exact,
    Intersection,
    Levenshtein,
    Pattern,
    Subsequence,
    Union,
)

logger = logging.getLogger(__name__)


def _common_prefix_length(a: bytes, b: bytes) -> int:
    n = min(len(a), len(b))
    i = 0
    while i < n and a[i] == b[i]:
        i += 1
    return i


def _prefix_successor(prefix: bytes) -> Optional[bytes]:
    """Smallest byte string greater than every string starting with ``prefix``."""
    stripped = prefix.rstrip(b"\xff")
    if not stripped:
        return None
    return stripped[:-1] + bytes((stripped[-1] + 1,))


def _skip_prefix(keys: Sequence[bytes], prefix: bytes, lo: int) -> int:
    """Position of the first key at or after ``lo`` not starting with ``prefix``."""
    successor = _prefix_successor(prefix)
    if successor is None:
        return len(keys)
    return bisect_left(keys, successor, lo)


class Seeker:
    """
    Search a SearchIndex with automata.

    Usage:
        seeker = Seeker.from_manifest(manifest_text)
        for item in seeker.search_fuzzy("dedXp", 1):
            print(item.url())
    """

    def __init__(self, index: SearchIndex, config: Optional[SearchConfig] = None):
        """
        Initialize the seeker.

        Args:
            index: Built search index
            config: Search settings (defaults to the global config)
        """
        self.index = index
        self.config = config or get_config().search

    @classmethod
    def from_catalog(cls, catalog: Catalog) -> "Seeker":
        """Build an index from ``catalog`` (consuming it) and wrap it."""
        return cls(IndexBuilder().build(catalog))

    @classmethod
    def from_manifest(
        cls, text: str, resolver: Optional[RecordResolver] = None
    ) -> "Seeker":
        """Resolve, index and wrap a complete manifest."""
        resolver = resolver or RecordResolver()
        return cls.from_catalog(resolver.resolve_manifest(text))

    def __len__(self) -> int:
        return len(self.index)

    @property
    def keys(self) -> tuple[bytes, ...]:
        return self.index.keys

    def search(self, automaton: Automaton) -> Iterator[DocItem]:
        """
        Lazily yield the items whose lookup key is accepted by ``automaton``.

        Items come in key order, and in canonical order within a key.  No work
        happens until the iterator is consumed; call again to restart.
        """
        for position in self._matching_positions(automaton):
            yield from self.index.items_at(position)

    def _matching_positions(self, automaton: Automaton) -> Iterator[int]:
        keys = self.index.keys
        num_keys = len(keys)

        # states[d] is the state after the first d bytes of the previous key
        states = [automaton.start()]
        previous = b""
        position = 0
        visited = 0
        matched = 0

        while position < num_keys:
            visited += 1
            key = keys[position]
            depth = min(_common_prefix_length(previous, key), len(states) - 1)
            del states[depth + 1 :]
            previous = key

            while depth < len(key) and automaton.can_match(states[depth]):
                states.append(automaton.step(states[depth], key[depth]))
                depth += 1

            if depth < len(key):
                position = _skip_prefix(keys, key[:depth], position + 1)
                continue

            if automaton.is_match(states[depth]):
                matched += 1
                yield position
            position += 1

        logger.debug(
            f"Search visited {visited} of {num_keys} keys, {matched} matched"
        )

    def lookup(self, name: str) -> tuple[DocItem, ...]:
        """Items named exactly ``name``, found by binary search."""
        return self.index.lookup(name.encode("utf-8"))

    def search_exact(self, name: str) -> Iterator[DocItem]:
        return self.search(Exact(name))

    def search_prefix(self, prefix: str) -> Iterator[DocItem]:
        return self.search(Exact(prefix).starts_with())

    def search_fuzzy(self, name: str, distance: Optional[int] = None) -> Iterator[DocItem]:
        """
        Items within ``distance`` edits of ``name``.

        Args:
            name: Name to approximate
            distance: Maximum edit distance (defaults to config)
        """
        if distance is None:
            distance = self.config.default_edit_distance
        automaton = Levenshtein(
            name, distance, state_limit=self.config.levenshtein_state_limit
        )
        return self.search(automaton)

    def search_pattern(self, pattern: str) -> Iterator[DocItem]:
        """Items whose whole name matches the regular expression ``pattern``."""
        return self.search(Pattern(pattern))

    def search_subsequence(self, chars: str) -> Iterator[DocItem]:
        return self.search(Subsequence(chars))

    def search_union(self, left: Automaton, right: Automaton) -> Iterator[DocItem]:
        return self.search(Union(left, right))

    def search_intersection(
        self, left: Automaton, right: Automaton
    ) -> Iterator[DocItem]:
        return self.search(Intersection(left, right))
