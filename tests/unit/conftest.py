"""Shared fixtures: a small two-crate search manifest."""

import json

import pytest

from doc_seeker.config import reset_config

STD_FRAGMENT = {
    "doc": "The Rust Standard Library",
    "i": [
        [0, "vec", "std", "A contiguous growable array type.", None, None],
        [3, "Vec", "std::vec", "A contiguous growable array type.", None, None],
        [11, "dedup", "", "Removes consecutive repeated elements.", 0, None],
        [11, "dedup_by", "", "Removes consecutive elements by a relation.", 0, None],
        [11, "dedup_by_key", "", "Removes consecutive elements by key.", 0, None],
        [11, "len", "", "Returns the number of elements.", 0, None],
        [15, "slice", "std", "A dynamically-sized view into a sequence.", None, None],
        [11, "partition_dedup", "", "Moves consecutive repeats to the end.", 1, None],
    ],
    "p": [[3, "Vec"], [15, "slice"]],
}

ALLOC_FRAGMENT = {
    "doc": "The Rust core allocation and collections library",
    "i": [
        [3, "Vec", "alloc::vec", "A contiguous growable array type.", None, None],
        [11, "dedup", "", "Removes consecutive repeated elements.", 0, None],
        [11, "dedup_by", "", "Removes consecutive elements by a relation.", 0, None],
        [11, "len", "", "Returns the number of elements.", 0, None],
        [14, "vec", "alloc", "Creates a Vec containing the arguments.", None, None],
    ],
    "p": [[3, "Vec"]],
}


def compress_fragment(fragment: dict) -> str:
    """Encode a fragment the way size-optimized manifests do (bare N for null)."""
    return json.dumps(fragment, separators=(",", ":")).replace("null", "N")


def make_manifest(fragments: dict[str, dict]) -> str:
    lines = ["var searchIndex = {};"]
    for label, fragment in fragments.items():
        lines.append(f'searchIndex["{label}"] = {compress_fragment(fragment)};')
    lines.append("initSearch(searchIndex);")
    return "\n".join(lines) + "\n"


@pytest.fixture(autouse=True)
def fresh_config():
    """Make every test read configuration from its own environment."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def manifest_text():
    """Manifest with a std and an alloc fragment (13 unique items, 8 names)."""
    return make_manifest({"std": STD_FRAGMENT, "alloc": ALLOC_FRAGMENT})


@pytest.fixture
def manifest_factory():
    """Build manifest text from a mapping of crate label to fragment dict."""
    return make_manifest
