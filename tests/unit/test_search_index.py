"""Tests for saving and loading the search index."""

import struct

import pytest
import xxhash
import zstandard as zstd

from doc_seeker.errors import IndexFormatError
from doc_seeker.index import IndexBuilder, SearchIndex
from doc_seeker.ingestion import RecordResolver


@pytest.fixture
def index(manifest_text):
    return IndexBuilder().build(RecordResolver().resolve_manifest(manifest_text))


def test_save_and_load(index, tmp_path):
    save_path = tmp_path / "nested" / "std.dski"
    assert index.save(save_path) == save_path
    assert save_path.exists()

    loaded = SearchIndex.load(save_path)

    assert loaded.keys == index.keys
    assert loaded.ranges == index.ranges
    assert loaded.items == index.items
    # Equality ignores descriptions, so check them separately
    assert [i.desc for i in loaded.items] == [i.desc for i in index.items]
    assert [i.parent for i in loaded.items] == [i.parent for i in index.items]


def test_unicode_round_trip(tmp_path):
    text = (
        'searchIndex["ü"] = {"doc":"Dökumentation","i":'
        '[[5,"größe","crate::módulo","Größe berechnen",N]],"p":[]};'
    )
    index = IndexBuilder().build(RecordResolver().resolve_manifest(text))

    index.save(tmp_path / "u.dski", compression_level=3)
    loaded = SearchIndex.load(tmp_path / "u.dski")

    (item,) = loaded.items
    assert item.name.name == "größe"
    assert item.path == "crate::módulo"
    assert item.desc == "Größe berechnen"


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        SearchIndex.load(tmp_path / "missing.dski")


def test_load_bad_magic(tmp_path):
    path = tmp_path / "bad.dski"
    path.write_bytes(zstd.ZstdCompressor().compress(b"NOPE" + b"\x00" * 32))

    with pytest.raises(IndexFormatError, match="magic"):
        SearchIndex.load(path)


def test_load_unknown_version(index, tmp_path):
    path = index.save(tmp_path / "v.dski")
    data = bytearray(zstd.ZstdDecompressor().decompress(path.read_bytes()))
    data[4:8] = struct.pack("<I", 99)
    path.write_bytes(zstd.ZstdCompressor().compress(bytes(data)))

    with pytest.raises(IndexFormatError, match="version"):
        SearchIndex.load(path)


def test_load_detects_corruption(index, tmp_path):
    path = index.save(tmp_path / "c.dski")
    data = bytearray(zstd.ZstdDecompressor().decompress(path.read_bytes()))
    data[-1] ^= 0xFF
    path.write_bytes(zstd.ZstdCompressor().compress(bytes(data)))

    with pytest.raises(IndexFormatError, match="checksum"):
        SearchIndex.load(path)


def test_load_not_zstd(tmp_path):
    path = tmp_path / "plain.dski"
    path.write_bytes(b"this is not compressed")

    with pytest.raises(IndexFormatError):
        SearchIndex.load(path)


def test_mismatched_keys_and_ranges():
    with pytest.raises(ValueError):
        SearchIndex([], [b"a"], [])


def test_find(index):
    assert index.find(b"Vec") == 0
    assert index.find(b"vec") == index.num_keys - 1
    assert index.find(b"dedu") is None


def rewrite_last_range(path, start, end):
    """Replace the last key's packed range and re-sign the body."""
    data = bytearray(zstd.ZstdDecompressor().decompress(path.read_bytes()))
    data[-8:] = struct.pack("<Q", (start << 32) | end)
    data[24:32] = struct.pack("<Q", xxhash.xxh3_64_intdigest(bytes(data[32:])))
    path.write_bytes(zstd.ZstdCompressor().compress(bytes(data)))


def test_load_rejects_inverted_range(index, tmp_path):
    path = index.save(tmp_path / "inverted.dski")
    rewrite_last_range(path, 13, 11)

    with pytest.raises(IndexFormatError, match="Inverted range 13..11"):
        SearchIndex.load(path)


def test_load_rejects_gap_between_ranges(index, tmp_path):
    path = index.save(tmp_path / "gap.dski")
    rewrite_last_range(path, 12, 13)

    with pytest.raises(IndexFormatError, match="does not continue at item 11"):
        SearchIndex.load(path)


def test_load_rejects_uncovered_items(index, tmp_path):
    path = index.save(tmp_path / "short.dski")
    rewrite_last_range(path, 11, 12)

    with pytest.raises(IndexFormatError, match="cover 12 of 13"):
        SearchIndex.load(path)
