"""
Index building and storage.

Groups catalog items by lookup key into an immutable, persistable index.
"""

from .builder import MAX_ITEMS, IndexBuilder, check_capacity
from .search_index import SearchIndex, pack_range, unpack_range

__all__ = [
    "IndexBuilder",
    "SearchIndex",
    "MAX_ITEMS",
    "check_capacity",
    "pack_range",
    "unpack_range",
]
