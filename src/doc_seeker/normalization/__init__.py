"""
Search manifest normalization.

Extracts fragment lines and repairs size-compressed tokens.
"""

from .manifest_normalizer import ManifestFragment, ManifestNormalizer, fix_null_tokens

__all__ = [
    "ManifestNormalizer",
    "ManifestFragment",
    "fix_null_tokens",
]
