"""
Record resolution.

Turns normalized manifest fragments into DocItems:
- Validate the decoded fragment against the RawRecord schema
- Fill in omitted paths from the closest preceding item that has one
- Replace parent indexes with the parent type they point to
"""

import json
import logging
from typing import Optional, Union

from pydantic import ValidationError

from ..errors import ManifestSyntaxError, SchemaError
from ..models import DocItem, TypeItem
from ..normalization import ManifestFragment, ManifestNormalizer
from .catalog import Catalog
from .schema import RawItem, RawParent, RawRecord

logger = logging.getLogger(__name__)

FragmentInput = Union[str, ManifestFragment]


class RecordResolver:
    """
    Resolve manifest fragments into a Catalog.

    Usage:
        resolver = RecordResolver()
        catalog = resolver.resolve_manifest(manifest_text)
    """

    def __init__(self, normalizer: Optional[ManifestNormalizer] = None):
        """
        Initialize resolver.

        Args:
            normalizer: Normalizer used to split manifests (default: new instance)
        """
        self.normalizer = normalizer or ManifestNormalizer()

    def parse_fragment(self, fragment: FragmentInput) -> RawRecord:
        """
        Decode and validate one normalized fragment.

        Args:
            fragment: Normalized JSON text or a ManifestFragment

        Returns:
            Validated RawRecord

        Raises:
            ManifestSyntaxError: If the text is not valid JSON
            SchemaError: If the JSON does not match the fragment schema
        """
        label, text = _unpack(fragment)

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ManifestSyntaxError(f"Fragment {label!r} is not valid JSON: {e}") from e

        try:
            return RawRecord.model_validate(data)
        except ValidationError as e:
            raise SchemaError(f"Fragment {label!r} does not match schema: {e}") from e

    def resolve_record(self, record: RawRecord, label: str = "<fragment>") -> list[DocItem]:
        """
        Resolve paths and parents of a validated record.

        Args:
            record: Validated fragment
            label: Fragment label for error messages

        Returns:
            DocItems in the order the fragment lists them
        """
        items = []
        last_path = ""

        for position, raw in enumerate(record.items):
            last_path = _inherit_path(raw, last_path, position, label)
            parent = _resolve_parent(raw, record.parents, position, label)
            name = TypeItem.from_tag(raw.ty, raw.name)
            items.append(DocItem(name=name, parent=parent, path=last_path, desc=raw.desc))

        return items

    def resolve_fragment(
        self, fragment: FragmentInput, catalog: Optional[Catalog] = None
    ) -> Catalog:
        """
        Resolve one fragment into a catalog.

        Nothing is inserted unless the whole fragment resolves.

        Args:
            fragment: Normalized JSON text or a ManifestFragment
            catalog: Destination catalog (default: a new one)

        Returns:
            The destination catalog
        """
        label, _ = _unpack(fragment)
        record = self.parse_fragment(fragment)
        items = self.resolve_record(record, label)

        if not items:
            logger.warning(f"Fragment {label!r} contains no items")

        if catalog is None:
            catalog = Catalog()
        added = catalog.extend(items)

        logger.debug(
            f"Resolved fragment {label!r}: {len(items)} items, "
            f"{len(items) - added} duplicates"
        )

        return catalog

    def resolve_manifest(self, text: str, catalog: Optional[Catalog] = None) -> Catalog:
        """
        Resolve every fragment of a manifest into one catalog.

        The first failing fragment aborts the whole call and leaves ``catalog``
        unchanged.

        Args:
            text: Full manifest text
            catalog: Destination catalog (default: a new one)

        Returns:
            The destination catalog
        """
        resolved = Catalog()
        num_fragments = 0
        for fragment in self.normalizer.iter_fragments(text):
            self.resolve_fragment(fragment, resolved)
            num_fragments += 1

        if catalog is None:
            catalog = resolved
        else:
            catalog.merge(resolved)

        logger.info(
            f"Resolved {num_fragments} fragments into {len(catalog)} unique items"
        )

        return catalog


def _unpack(fragment: FragmentInput) -> tuple[str, str]:
    if isinstance(fragment, ManifestFragment):
        return fragment.label or f"line {fragment.line_number}", fragment.text
    return "<fragment>", fragment


def _inherit_path(raw: RawItem, last_path: str, position: int, label: str) -> str:
    """Return the item's path, falling back to the last non-empty one."""
    if raw.path:
        return raw.path
    if not last_path:
        raise SchemaError(
            f"Fragment {label!r} item {position} ({raw.name!r}) has no path to inherit"
        )
    return last_path


def _resolve_parent(
    raw: RawItem, parents: list[RawParent], position: int, label: str
) -> Optional[TypeItem]:
    if raw.parent_idx is None:
        return None

    if not 0 <= raw.parent_idx < len(parents):
        raise SchemaError(
            f"Fragment {label!r} item {position} ({raw.name!r}) refers to parent "
            f"{raw.parent_idx}, but only {len(parents)} parents exist"
        )

    parent = parents[raw.parent_idx]
    return TypeItem.from_tag(parent.ty, parent.name)
