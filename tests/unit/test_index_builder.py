"""Tests for building the search index."""

import pytest

from doc_seeker.errors import CapacityError, CatalogConsumedError
from doc_seeker.index import IndexBuilder, builder, pack_range, unpack_range
from doc_seeker.ingestion import Catalog, RecordResolver
from doc_seeker.models import DocItem, ItemType, TypeItem


@pytest.fixture
def index(manifest_text):
    catalog = RecordResolver().resolve_manifest(manifest_text)
    return IndexBuilder().build(catalog)


def make_catalog(count):
    return Catalog(
        DocItem(TypeItem(ItemType.FUNCTION, f"f{i}"), None, "m") for i in range(count)
    )


def test_pack_range():
    assert pack_range(3, 7) == (3 << 32) | 7
    assert unpack_range(pack_range(3, 7)) == (3, 7)
    assert unpack_range(pack_range(0xFFFFFFFF, 0xFFFFFFFF)) == (0xFFFFFFFF, 0xFFFFFFFF)


def test_keys_are_sorted_and_unique(index):
    assert list(index.keys) == [
        b"Vec",
        b"dedup",
        b"dedup_by",
        b"dedup_by_key",
        b"len",
        b"partition_dedup",
        b"slice",
        b"vec",
    ]
    assert len(index) == 13


def test_ranges_partition_items(index):
    """Every range is non-empty, homogeneous, and together they cover all items."""
    expected_start = 0
    for key, start, end in index.iter_ranges():
        assert start == expected_start
        assert end > start
        assert all(item.key == key for item in index.items[start:end])
        expected_start = end

    assert expected_start == len(index)


def test_items_follow_canonical_order(index):
    assert list(index.items) == sorted(index.items)


def test_group_contents(index):
    urls = [item.url() for item in index.lookup(b"dedup")]
    assert urls == [
        "alloc/vec/struct.Vec.html#method.dedup",
        "std/vec/struct.Vec.html#method.dedup",
    ]
    assert index.lookup(b"missing") == ()


def test_empty_catalog():
    index = IndexBuilder().build(Catalog())

    assert len(index) == 0
    assert index.keys == ()
    assert index.stats() == {"num_items": 0, "num_keys": 0, "max_group_size": 0}


def test_catalog_is_consumed():
    catalog = make_catalog(2)
    IndexBuilder().build(catalog)

    with pytest.raises(CatalogConsumedError):
        IndexBuilder().build(catalog)


def test_capacity_at_limit(monkeypatch):
    monkeypatch.setattr(builder, "MAX_ITEMS", 3)

    index = IndexBuilder().build(make_catalog(3))

    assert len(index) == 3


def test_capacity_exceeded(monkeypatch):
    monkeypatch.setattr(builder, "MAX_ITEMS", 3)

    with pytest.raises(CapacityError):
        IndexBuilder().build(make_catalog(4))


def test_default_capacity_is_32_bits():
    builder.check_capacity(0xFFFFFFFF)
    with pytest.raises(CapacityError):
        builder.check_capacity(0x100000000)


def test_stats(index):
    assert index.stats() == {"num_items": 13, "num_keys": 8, "max_group_size": 2}
