"""
Manifest ingestion.

Resolves normalized fragments into deduplicated catalogs of DocItems.
"""

from .catalog import Catalog
from .resolver import RecordResolver
from .schema import RawItem, RawParent, RawRecord

__all__ = [
    "Catalog",
    "RecordResolver",
    "RawItem",
    "RawParent",
    "RawRecord",
]
