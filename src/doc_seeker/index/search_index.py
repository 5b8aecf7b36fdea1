"""
Immutable search index.

Pairs the sorted item array with an ordered key → range map:
- keys: unique lookup keys in ascending byte order
- ranges: packed ``(start << 32) | end`` per key, so that
  ``items[start:end]`` are exactly the items with that key
"""

import logging
import struct
from bisect import bisect_left
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import Optional

import xxhash
import zstandard as zstd

from ..config import get_config
from ..errors import IndexFormatError
from ..models import DocItem, ItemType, TypeItem

logger = logging.getLogger(__name__)

RANGE_MASK = 0xFFFFFFFF


def pack_range(start: int, end: int) -> int:
    """Pack a half-open ``[start, end)`` range into one 64-bit value."""
    return (start << 32) | end


def unpack_range(packed: int) -> tuple[int, int]:
    """Inverse of ``pack_range``."""
    return packed >> 32, packed & RANGE_MASK


class SearchIndex:
    """
    Sorted DocItems plus a key → range map over them.

    Built once by IndexBuilder and never mutated, so a single instance can
    serve any number of concurrent readers.
    """

    # File format
    MAGIC = b"DSKI"
    VERSION = 1

    def __init__(
        self, items: Sequence[DocItem], keys: Sequence[bytes], ranges: Sequence[int]
    ):
        """
        Initialize search index.

        Args:
            items: Items in canonical order
            keys: Unique lookup keys in ascending order
            ranges: Packed range for each key
        """
        if len(keys) != len(ranges):
            raise ValueError(
                f"Got {len(keys)} keys but {len(ranges)} ranges; they must match"
            )

        self._items = tuple(items)
        self._keys = tuple(keys)
        self._ranges = tuple(ranges)

    @property
    def items(self) -> tuple[DocItem, ...]:
        return self._items

    @property
    def keys(self) -> tuple[bytes, ...]:
        return self._keys

    @property
    def ranges(self) -> tuple[int, ...]:
        return self._ranges

    def __len__(self) -> int:
        return len(self._items)

    @property
    def num_keys(self) -> int:
        return len(self._keys)

    def find(self, key: bytes) -> Optional[int]:
        """Return the position of ``key`` in ``keys``, or None if absent."""
        pos = bisect_left(self._keys, key)
        if pos < len(self._keys) and self._keys[pos] == key:
            return pos
        return None

    def items_at(self, position: int) -> tuple[DocItem, ...]:
        """Items sharing the key at ``position`` of ``keys``."""
        start, end = unpack_range(self._ranges[position])
        return self._items[start:end]

    def lookup(self, key: bytes) -> tuple[DocItem, ...]:
        """Items whose lookup key equals ``key`` (empty if none)."""
        pos = self.find(key)
        if pos is None:
            return ()
        return self.items_at(pos)

    def iter_ranges(self) -> Iterator[tuple[bytes, int, int]]:
        """Yield ``(key, start, end)`` in key order."""
        for key, packed in zip(self._keys, self._ranges):
            start, end = unpack_range(packed)
            yield key, start, end

    def stats(self) -> dict[str, int]:
        """
        Get statistics for the index.

        Returns:
            Dictionary with item count, key count, and largest group size
        """
        max_group = 0
        for _, start, end in self.iter_ranges():
            max_group = max(max_group, end - start)

        return {
            "num_items": len(self._items),
            "num_keys": len(self._keys),
            "max_group_size": max_group,
        }

    def save(self, output_path: Path, compression_level: Optional[int] = None) -> Path:
        """
        Save index to disk with compression.

        File format (zstd compressed):
        - Header: [magic=DSKI][version:u32][num_items:u64][num_keys:u64][checksum:u64]
        - Items: [kind:u8][has_parent:u8][parent_kind:u8]? name path desc parent_name?
          where every string is [len:u32][utf-8 bytes]
        - Keys: [key_len:u32][key:bytes][packed_range:u64] * num_keys

        The checksum is xxh3_64 over everything after the header.

        Args:
            output_path: Path to save index file
            compression_level: Zstd compression level (defaults to config)

        Returns:
            Path to the written file
        """
        output_path = Path(output_path)
        if compression_level is None:
            compression_level = get_config().index.compression_level

        logger.info(f"Saving search index to {output_path}...")

        body = bytearray()
        for item in self._items:
            if item.parent is None:
                body.extend(struct.pack("<BB", item.name.kind, 0))
            else:
                body.extend(struct.pack("<BBB", item.name.kind, 1, item.parent.kind))
            _write_str(body, item.name.name)
            _write_str(body, item.path)
            _write_str(body, item.desc)
            if item.parent is not None:
                _write_str(body, item.parent.name)

        for key, packed in zip(self._keys, self._ranges):
            body.extend(struct.pack("<I", len(key)))
            body.extend(key)
            body.extend(struct.pack("<Q", packed))

        data = bytearray()
        data.extend(self.MAGIC)
        data.extend(struct.pack("<I", self.VERSION))
        data.extend(struct.pack("<Q", len(self._items)))
        data.extend(struct.pack("<Q", len(self._keys)))
        data.extend(struct.pack("<Q", xxhash.xxh3_64_intdigest(bytes(body))))
        data.extend(body)

        compressor = zstd.ZstdCompressor(level=compression_level)
        compressed_data = compressor.compress(bytes(data))

        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(compressed_data)

        original_size = len(data)
        compressed_size = len(compressed_data)
        ratio = original_size / compressed_size if compressed_size > 0 else 0

        logger.info(
            f"Saved search index: {original_size:,} bytes → {compressed_size:,} bytes "
            f"(compression ratio: {ratio:.2f}x)"
        )

        return output_path

    @classmethod
    def load(cls, input_path: Path) -> "SearchIndex":
        """
        Load index from disk.

        Args:
            input_path: Path to index file

        Returns:
            SearchIndex equal to the one that was saved

        Raises:
            FileNotFoundError: If the file does not exist
            IndexFormatError: If the file is corrupt or has another version
        """
        input_path = Path(input_path)
        logger.info(f"Loading search index from {input_path}...")

        if not input_path.exists():
            raise FileNotFoundError(f"Search index file not found: {input_path}")

        try:
            data = zstd.ZstdDecompressor().decompress(input_path.read_bytes())
        except zstd.ZstdError as e:
            raise IndexFormatError(f"Cannot decompress {input_path}: {e}") from e

        try:
            index = cls._decode(data)
        except IndexFormatError:
            raise
        except (struct.error, IndexError, ValueError) as e:
            raise IndexFormatError(f"Corrupt search index {input_path}: {e}") from e

        logger.info(
            f"Loaded search index: {len(index)} items, {index.num_keys} keys"
        )

        return index

    @classmethod
    def _decode(cls, data: bytes) -> "SearchIndex":
        # Parse header
        magic = data[:4]
        if magic != cls.MAGIC:
            raise IndexFormatError(f"Invalid search index file: bad magic {magic!r}")

        version, num_items, num_keys, checksum = struct.unpack_from("<IQQQ", data, 4)
        if version != cls.VERSION:
            raise IndexFormatError(f"Unsupported search index version: {version}")

        offset = 4 + struct.calcsize("<IQQQ")
        if xxhash.xxh3_64_intdigest(data[offset:]) != checksum:
            raise IndexFormatError("Search index checksum mismatch")

        items = []
        for _ in range(num_items):
            kind, has_parent = struct.unpack_from("<BB", data, offset)
            offset += 2
            parent_kind = None
            if has_parent:
                parent_kind = data[offset]
                offset += 1

            name, offset = _read_str(data, offset)
            path, offset = _read_str(data, offset)
            desc, offset = _read_str(data, offset)

            parent = None
            if parent_kind is not None:
                parent_name, offset = _read_str(data, offset)
                parent = TypeItem(ItemType(parent_kind), parent_name)

            items.append(DocItem(TypeItem(ItemType(kind), name), parent, path, desc))

        # Ranges must be non-empty, contiguous and cover every item
        keys = []
        ranges = []
        covered = 0
        for _ in range(num_keys):
            (key_len,) = struct.unpack_from("<I", data, offset)
            offset += 4
            key = bytes(data[offset : offset + key_len])
            offset += key_len

            (packed,) = struct.unpack_from("<Q", data, offset)
            offset += 8
            start, end = unpack_range(packed)
            if start > end:
                raise IndexFormatError(f"Inverted range {start}..{end} for key {key!r}")
            if end > num_items:
                raise IndexFormatError(f"Range end {end} exceeds {num_items} items")
            if start != covered or start == end:
                raise IndexFormatError(
                    f"Range {start}..{end} for key {key!r} does not continue at item {covered}"
                )
            covered = end

            keys.append(key)
            ranges.append(packed)

        if covered != num_items:
            raise IndexFormatError(f"Ranges cover {covered} of {num_items} items")

        if offset != len(data):
            raise IndexFormatError(f"{len(data) - offset} trailing bytes after index")

        return cls(items, keys, ranges)


def _write_str(buffer: bytearray, value: str) -> None:
    encoded = value.encode("utf-8")
    buffer.extend(struct.pack("<I", len(encoded)))
    buffer.extend(encoded)


def _read_str(data: bytes, offset: int) -> tuple[str, int]:
    (length,) = struct.unpack_from("<I", data, offset)
    offset += 4
    end = offset + length
    if end > len(data):
        raise IndexFormatError("String runs past end of search index")
    return data[offset:end].decode("utf-8"), end
