"""
Query layer.

Automata for selecting index keys and the Seeker that drives them.
"""

from .automata import (
    AlwaysMatch,
    Automaton,
    Complement,
    Exact,
    Intersection,
    Levenshtein,
    Matcher,
    Pattern,
    StartsWith,
    Subsequence,
    Union,
)
from .seeker import Seeker

__all__ = [
    "Seeker",
    "Automaton",
    "Matcher",
    "Exact",
    "Subsequence",
    "AlwaysMatch",
    "Levenshtein",
    "Pattern",
    "StartsWith",
    "Union",
    "Intersection",
    "Complement",
]
