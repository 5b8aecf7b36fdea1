"""
Core doc-seeker data models.

An entity in the search manifest is described by its category (an integer tag
in the manifest) and its bare name.  ``DocItem`` adds the module path the
entity lives under and, for members such as methods or fields, the parent
type that owns it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from functools import total_ordering
from typing import Optional

from .errors import UnknownTypeTagError


class ItemType(IntEnum):
    """Entity categories, numbered as in the manifest schema."""

    MODULE = 0
    EXTERN_CRATE = 1
    IMPORT = 2
    STRUCT = 3
    ENUM = 4
    FUNCTION = 5
    TYPE_ALIAS = 6
    STATIC = 7
    TRAIT = 8
    IMPL = 9
    REQUIRED_METHOD = 10
    PROVIDED_METHOD = 11
    STRUCT_FIELD = 12
    VARIANT = 13
    MACRO = 14
    PRIMITIVE = 15
    ASSOCIATED_TYPE = 16
    CONSTANT = 17
    ASSOCIATED_CONST = 18
    UNION = 19
    FOREIGN_TYPE = 20
    KEYWORD = 21
    EXISTENTIAL = 22

    @property
    def tag(self) -> str:
        """Short tag used in rendered names and URLs (``fn``, ``struct``, ...)."""
        return _DISPLAY_TAGS[self]


_DISPLAY_TAGS = {
    ItemType.MODULE: "module",
    ItemType.EXTERN_CRATE: "externcrate",
    ItemType.IMPORT: "import",
    ItemType.STRUCT: "struct",
    ItemType.ENUM: "enum",
    ItemType.FUNCTION: "fn",
    ItemType.TYPE_ALIAS: "type",
    ItemType.STATIC: "static",
    ItemType.TRAIT: "trait",
    ItemType.IMPL: "impl",
    ItemType.REQUIRED_METHOD: "tymethod",
    ItemType.PROVIDED_METHOD: "method",
    ItemType.STRUCT_FIELD: "structfield",
    ItemType.VARIANT: "variant",
    ItemType.MACRO: "macro",
    ItemType.PRIMITIVE: "primitive",
    ItemType.ASSOCIATED_TYPE: "associatedtype",
    ItemType.CONSTANT: "constant",
    ItemType.ASSOCIATED_CONST: "associatedconst",
    ItemType.UNION: "union",
    ItemType.FOREIGN_TYPE: "foreigntype",
    ItemType.KEYWORD: "keyword",
    ItemType.EXISTENTIAL: "existential",
}


@dataclass(frozen=True, slots=True)
class TypeItem:
    """
    A named entity together with its category.

    ``str(item)`` gives the ``tag.name`` form, e.g. ``struct.Vec`` or
    ``fn.dedup``.
    """

    kind: ItemType
    name: str

    @classmethod
    def from_tag(cls, tag: int, name: str) -> TypeItem:
        """
        Build a TypeItem from a manifest type tag.

        Raises:
            UnknownTypeTagError: If ``tag`` is not a known category
        """
        try:
            kind = ItemType(tag)
        except ValueError:
            raise UnknownTypeTagError(tag) from None
        return cls(kind, name)

    def __str__(self) -> str:
        return f"{self.kind.tag}.{self.name}"


@total_ordering
@dataclass(frozen=True, slots=True, eq=False)
class DocItem:
    """
    A searchable documentation entity.

    Two items are equal when they share the lookup key, the path, and the
    rendered parent; the description does not take part.

    Attributes:
        name: The entity itself
        parent: Owning type for members, None for free items
        path: ``::``-separated module path
        desc: One-line description from the manifest
    """

    name: TypeItem
    parent: Optional[TypeItem]
    path: str
    desc: str = field(default="")

    @property
    def key(self) -> bytes:
        """Lookup key: the bare name as UTF-8 bytes."""
        return self.name.name.encode("utf-8")

    @property
    def sort_key(self) -> tuple[bytes, str, tuple[int, str]]:
        # Items without a parent sort before items with one.
        parent = (0, "") if self.parent is None else (1, str(self.parent))
        return (self.key, self.path, parent)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DocItem):
            return NotImplemented
        return self.sort_key == other.sort_key

    def __lt__(self, other: DocItem) -> bool:
        if not isinstance(other, DocItem):
            return NotImplemented
        return self.sort_key < other.sort_key

    def __hash__(self) -> int:
        return hash(self.sort_key)

    def url(self) -> str:
        """
        Relative documentation URL of the item.

        Examples:
            ``std/vec/struct.Vec.html#fn.dedup`` for a member,
            ``std/vec/index.html`` for a module,
            ``std/macro.vec.html`` for anything else.
        """
        prefix = "".join(f"{segment}/" for segment in self.path.split("::"))

        if self.parent is not None:
            return f"{prefix}{self.parent}.html#{self.name}"
        if self.name.kind is ItemType.MODULE:
            return f"{prefix}{self.name.name}/index.html"
        return f"{prefix}{self.name}.html"

    def qualified_name(self) -> str:
        """Render ``path::parent::name`` using the ``tag.name`` forms."""
        if self.parent is not None:
            return f"{self.path}::{self.parent}::{self.name}"
        return f"{self.path}::{self.name}"

    def __str__(self) -> str:
        return self.url()
