"""
Search index builder.

Consumes a Catalog and produces a SearchIndex:
1. Materialize the catalog's items in canonical order
2. Check that every position fits in a 32-bit range bound
3. Group consecutive items sharing a lookup key into [start, end) ranges
4. Record (key, packed range) pairs in ascending key order
"""

import logging

from ..errors import CapacityError
from ..ingestion import Catalog
from .search_index import SearchIndex, pack_range

logger = logging.getLogger(__name__)

# Range bounds are packed into 32 bits each.
MAX_ITEMS = 0xFFFFFFFF


def check_capacity(num_items: int) -> None:
    """
    Ensure ``num_items`` positions can be addressed by a packed range.

    Raises:
        CapacityError: If there are more than MAX_ITEMS items
    """
    if num_items > MAX_ITEMS:
        raise CapacityError(
            f"Catalog holds {num_items:,} items; a search index can address "
            f"at most {MAX_ITEMS:,}"
        )


class IndexBuilder:
    """
    Build a SearchIndex from a Catalog.

    Each catalog can be built exactly once; the builder takes ownership of
    its items.
    """

    def build(self, catalog: Catalog) -> SearchIndex:
        """
        Build the search index.

        Args:
            catalog: Catalog to consume

        Returns:
            Immutable SearchIndex over the catalog's items

        Raises:
            CapacityError: If the catalog is too large
            CatalogConsumedError: If the catalog was already built
        """
        items = catalog.consume()
        check_capacity(len(items))

        logger.info(f"Building search index for {len(items)} items...")

        keys: list[bytes] = []
        ranges: list[int] = []

        item_keys = [item.key for item in items]
        start = 0
        for end in range(1, len(item_keys) + 1):
            if end < len(item_keys) and item_keys[end] == item_keys[start]:
                continue
            keys.append(item_keys[start])
            ranges.append(pack_range(start, end))
            start = end

        index = SearchIndex(items, keys, ranges)

        logger.info(f"Built search index: {len(items)} items, {len(keys)} keys")

        return index
