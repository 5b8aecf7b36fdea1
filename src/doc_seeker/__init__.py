"""
doc-seeker: search over documentation generator search manifests.

Turns a ``search-index.js`` manifest into an immutable index of
documentation items that can be queried with finite-state matchers.
"""

from .errors import (
    CapacityError,
    CatalogConsumedError,
    IndexFormatError,
    ManifestSyntaxError,
    MatcherError,
    SchemaError,
    SeekerError,
    UnknownTypeTagError,
)
from .index import IndexBuilder, SearchIndex
from .ingestion import Catalog, RecordResolver
from .models import DocItem, ItemType, TypeItem
from .normalization import ManifestNormalizer
from .query import Seeker

__version__ = "0.1.0"

__all__ = [
    "DocItem",
    "ItemType",
    "TypeItem",
    "ManifestNormalizer",
    "RecordResolver",
    "Catalog",
    "IndexBuilder",
    "SearchIndex",
    "Seeker",
    "SeekerError",
    "ManifestSyntaxError",
    "SchemaError",
    "UnknownTypeTagError",
    "CapacityError",
    "CatalogConsumedError",
    "MatcherError",
    "IndexFormatError",
]
