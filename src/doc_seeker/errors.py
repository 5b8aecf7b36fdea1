"""
Exception hierarchy for manifest parsing, index building, and searching.
"""

__all__ = [
    "SeekerError",
    "ManifestSyntaxError",
    "SchemaError",
    "UnknownTypeTagError",
    "CapacityError",
    "CatalogConsumedError",
    "MatcherError",
    "IndexFormatError",
]


class SeekerError(Exception):
    """Base exception for all doc-seeker failures."""


class ManifestSyntaxError(SeekerError, ValueError):
    """Raised when a manifest line or fragment cannot be parsed."""


class SchemaError(SeekerError, ValueError):
    """Raised when a fragment does not have the expected shape."""


class UnknownTypeTagError(SchemaError):
    """Raised when an item type tag is outside the known enumeration."""

    def __init__(self, tag: int) -> None:
        super().__init__(f"Unknown item type tag: {tag!r}")
        self.tag = tag


class CapacityError(SeekerError):
    """Raised when a catalog holds more items than a packed range can address."""


class CatalogConsumedError(SeekerError, RuntimeError):
    """Raised when a catalog is used after being handed to the index builder."""


class MatcherError(SeekerError):
    """Raised by the bundled matchers for invalid queries or exhausted budgets."""


class IndexFormatError(SeekerError, ValueError):
    """Raised when a saved search index is corrupt or has an unknown version."""
