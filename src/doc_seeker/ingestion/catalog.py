"""Deduplicating store for resolved documentation items."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from operator import attrgetter
from typing import Optional

from ..errors import CatalogConsumedError
from ..models import DocItem

_SORT_KEY = attrgetter("sort_key")


class Catalog:
    """
    Ordered set of DocItems, mutable until handed to the index builder.

    Items are deduplicated on (name, path, parent); when two equal items
    arrive, the first one inserted is kept.
    """

    def __init__(self, items: Iterable[DocItem] = ()) -> None:
        self._items: dict[DocItem, None] = {}
        self._sorted: Optional[list[DocItem]] = None
        self._consumed = False
        self.extend(items)

    def _check_live(self) -> None:
        if self._consumed:
            raise CatalogConsumedError("Catalog was already consumed by an index build")

    @property
    def consumed(self) -> bool:
        return self._consumed

    def insert(self, item: DocItem) -> bool:
        """Add an item; return False if an equal item was already present."""

        self._check_live()
        if item in self._items:
            return False
        self._items[item] = None
        self._sorted = None
        return True

    def extend(self, items: Iterable[DocItem]) -> int:
        """Insert every item and return how many were new."""

        added = 0
        for item in items:
            if self.insert(item):
                added += 1
        return added

    def merge(self, other: Catalog) -> int:
        """Insert every item of another catalog and return how many were new."""

        other._check_live()
        return self.extend(other)

    def _ordered(self) -> list[DocItem]:
        if self._sorted is None:
            self._sorted = sorted(self._items, key=_SORT_KEY)
        return self._sorted

    def __iter__(self) -> Iterator[DocItem]:
        self._check_live()
        return iter(self._ordered())

    def __len__(self) -> int:
        self._check_live()
        return len(self._items)

    def __contains__(self, item: object) -> bool:
        self._check_live()
        return item in self._items

    def consume(self) -> list[DocItem]:
        """Hand over the sorted items; the catalog is unusable afterwards."""

        self._check_live()
        items = self._ordered()
        self._items = {}
        self._sorted = None
        self._consumed = True
        return items
