"""
Finite-state matchers driven by the Seeker.

Any object with ``start``, ``is_match``, ``can_match`` and ``step`` can be
used for searching (see ``Automaton``).  The matchers here cover the common
queries and compose with each other:

    Exact("dedup").starts_with()               # names beginning with "dedup"
    Levenshtein("dedXp", 1).union(Exact("len"))

States are opaque to the Seeker.  ``can_match(state)`` returning False
promises that no continuation of the bytes consumed so far can match, which
lets the Seeker skip every key under that prefix.
"""

from typing import Any, Optional, Protocol, runtime_checkable

import regex

from ..config import get_config
from ..errors import MatcherError


@runtime_checkable
class Automaton(Protocol):
    """Deterministic byte-wise state machine used to select index keys."""

    def start(self) -> Any: ...

    def is_match(self, state: Any) -> bool: ...

    def can_match(self, state: Any) -> bool: ...

    def step(self, state: Any, byte: int) -> Any: ...


class Matcher:
    """Base class for the bundled automata, adding composition helpers."""

    def start(self) -> Any:
        raise NotImplementedError

    def is_match(self, state: Any) -> bool:
        raise NotImplementedError

    def can_match(self, state: Any) -> bool:
        return True

    def step(self, state: Any, byte: int) -> Any:
        raise NotImplementedError

    def union(self, other: Automaton) -> "Union":
        return Union(self, other)

    def intersection(self, other: Automaton) -> "Intersection":
        return Intersection(self, other)

    def complement(self) -> "Complement":
        return Complement(self)

    def starts_with(self) -> "StartsWith":
        return StartsWith(self)


_DEAD = -1


class Exact(Matcher):
    """Match exactly one string."""

    def __init__(self, text: str):
        self.text = text
        self._bytes = text.encode("utf-8")

    def start(self) -> int:
        return 0

    def is_match(self, state: int) -> bool:
        return state == len(self._bytes)

    def can_match(self, state: int) -> bool:
        return 0 <= state < len(self._bytes)

    def step(self, state: int, byte: int) -> int:
        if 0 <= state < len(self._bytes) and self._bytes[state] == byte:
            return state + 1
        return _DEAD


class Subsequence(Matcher):
    """Match keys containing the bytes of ``text`` in order, gaps allowed."""

    def __init__(self, text: str):
        self.text = text
        self._bytes = text.encode("utf-8")

    def start(self) -> int:
        return 0

    def is_match(self, state: int) -> bool:
        return state == len(self._bytes)

    def step(self, state: int, byte: int) -> int:
        if state < len(self._bytes) and self._bytes[state] == byte:
            return state + 1
        return state


class AlwaysMatch(Matcher):
    """Match every key."""

    def start(self) -> None:
        return None

    def is_match(self, state: None) -> bool:
        return True

    def step(self, state: None, byte: int) -> None:
        return None


def _utf8_length(lead: int) -> int:
    if lead < 0x80:
        return 1
    if 0xC0 <= lead < 0xE0:
        return 2
    if 0xE0 <= lead < 0xF0:
        return 3
    if 0xF0 <= lead < 0xF8:
        return 4
    return 1


class Levenshtein(Matcher):
    """
    Match keys within ``distance`` edits of ``text``.

    Distances are counted in code points.  The state is the current row of
    the edit-distance table (values capped at ``distance + 1``) plus any
    bytes of an incomplete UTF-8 sequence.  Transitions are cached and the
    number of distinct states is bounded by ``state_limit``.
    """

    def __init__(self, text: str, distance: int, state_limit: Optional[int] = None):
        if distance < 0:
            raise MatcherError(f"Edit distance must be non-negative, got {distance}")

        self.text = text
        self.distance = distance
        if state_limit is None:
            state_limit = get_config().search.levenshtein_state_limit
        self.state_limit = state_limit

        self._cap = distance + 1
        self._transitions: dict[tuple[tuple, int], tuple] = {}
        self._states: set[tuple] = set()

    def start(self) -> tuple:
        row = tuple(min(i, self._cap) for i in range(len(self.text) + 1))
        return (row, b"")

    def is_match(self, state: tuple) -> bool:
        row, pending = state
        return not pending and row[-1] <= self.distance

    def can_match(self, state: tuple) -> bool:
        return min(state[0]) <= self.distance

    def step(self, state: tuple, byte: int) -> tuple:
        cached = self._transitions.get((state, byte))
        if cached is not None:
            return cached

        row, pending = state
        pending += bytes((byte,))
        if len(pending) < _utf8_length(pending[0]):
            nxt = (row, pending)
        else:
            char = pending.decode("utf-8", errors="replace")
            nxt = (self._advance(row, char), b"")

        if nxt not in self._states:
            self._states.add(nxt)
            if len(self._states) > self.state_limit:
                raise MatcherError(
                    f"Levenshtein matcher for {self.text!r} exceeded "
                    f"{self.state_limit} states"
                )

        self._transitions[(state, byte)] = nxt
        return nxt

    def _advance(self, row: tuple, char: str) -> tuple:
        cap = self._cap
        new_row = [min(row[0] + 1, cap)]
        for i, expected in enumerate(self.text, 1):
            cost = 0 if expected == char else 1
            value = min(row[i] + 1, new_row[i - 1] + 1, row[i - 1] + cost)
            new_row.append(min(value, cap))
        return tuple(new_row)


class Pattern(Matcher):
    """
    Match keys that fully match a regular expression.

    Uses partial matching from the ``regex`` package to tell whether a prefix
    can still be extended into a match.
    """

    def __init__(self, pattern: str):
        self.pattern = pattern
        try:
            self._regex = regex.compile(pattern)
        except regex.error as e:
            raise MatcherError(f"Invalid pattern {pattern!r}: {e}") from e

    def start(self) -> bytes:
        return b""

    def is_match(self, state: bytes) -> bool:
        text = _decode(state)
        return text is not None and self._regex.fullmatch(text) is not None

    def can_match(self, state: bytes) -> bool:
        text = _decode(state)
        if text is None:
            # Mid-way through a multi-byte character.
            return True
        return self._regex.fullmatch(text, partial=True) is not None

    def step(self, state: bytes, byte: int) -> bytes:
        return state + bytes((byte,))


def _decode(data: bytes) -> Optional[str]:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return None


class StartsWith(Matcher):
    """Match any key that has a prefix accepted by ``inner``."""

    _DONE = (True, None)

    def __init__(self, inner: Automaton):
        self.inner = inner

    def _wrap(self, inner_state: Any) -> tuple:
        if self.inner.is_match(inner_state):
            return self._DONE
        return (False, inner_state)

    def start(self) -> tuple:
        return self._wrap(self.inner.start())

    def is_match(self, state: tuple) -> bool:
        return state[0]

    def can_match(self, state: tuple) -> bool:
        done, inner_state = state
        return done or self.inner.can_match(inner_state)

    def step(self, state: tuple, byte: int) -> tuple:
        done, inner_state = state
        if done:
            return state
        return self._wrap(self.inner.step(inner_state, byte))


class Union(Matcher):
    """Match keys accepted by either automaton."""

    def __init__(self, left: Automaton, right: Automaton):
        self.left = left
        self.right = right

    def start(self) -> tuple:
        return (self.left.start(), self.right.start())

    def is_match(self, state: tuple) -> bool:
        return self.left.is_match(state[0]) or self.right.is_match(state[1])

    def can_match(self, state: tuple) -> bool:
        return self.left.can_match(state[0]) or self.right.can_match(state[1])

    def step(self, state: tuple, byte: int) -> tuple:
        return (self.left.step(state[0], byte), self.right.step(state[1], byte))


class Intersection(Matcher):
    """Match keys accepted by both automata."""

    def __init__(self, left: Automaton, right: Automaton):
        self.left = left
        self.right = right

    def start(self) -> tuple:
        return (self.left.start(), self.right.start())

    def is_match(self, state: tuple) -> bool:
        return self.left.is_match(state[0]) and self.right.is_match(state[1])

    def can_match(self, state: tuple) -> bool:
        return self.left.can_match(state[0]) and self.right.can_match(state[1])

    def step(self, state: tuple, byte: int) -> tuple:
        return (self.left.step(state[0], byte), self.right.step(state[1], byte))


class Complement(Matcher):
    """Match keys rejected by ``inner``."""

    def __init__(self, inner: Automaton):
        self.inner = inner

    def start(self) -> Any:
        return self.inner.start()

    def is_match(self, state: Any) -> bool:
        return not self.inner.is_match(state)

    def step(self, state: Any, byte: int) -> Any:
        return self.inner.step(state, byte)
