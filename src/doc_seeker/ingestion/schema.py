"""
Pydantic models for a decoded manifest fragment.

Fragments store items and parents as positional arrays rather than objects
to keep the manifest small, so each model accepts either form.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, model_validator

_ITEM_FIELDS = ("ty", "name", "path", "desc", "parent_idx", "search_type")
_PARENT_FIELDS = ("ty", "name")


def _from_array(data: Any, fields: tuple[str, ...], min_len: int) -> Any:
    if not isinstance(data, (list, tuple)):
        return data
    if not min_len <= len(data) <= len(fields):
        raise ValueError(
            f"expected between {min_len} and {len(fields)} elements, got {len(data)}"
        )
    return dict(zip(fields, data))


class RawItem(BaseModel):
    """An item as stored in the manifest, before path and parent resolution."""

    model_config = ConfigDict(frozen=True)

    ty: StrictInt = Field(..., description="Item type tag")
    name: StrictStr = Field(..., description="Bare item name")
    path: StrictStr = Field(..., description="Module path, empty to inherit")
    desc: StrictStr = Field(..., description="One-line description")
    parent_idx: Optional[StrictInt] = Field(
        None, description="Index into the fragment's parent list"
    )
    search_type: Optional[Any] = Field(
        None, description="Function signature used by type-based search"
    )

    @model_validator(mode="before")
    @classmethod
    def _positional(cls, data: Any) -> Any:
        return _from_array(data, _ITEM_FIELDS, 4)


class RawParent(BaseModel):
    """A parent type referenced by ``RawItem.parent_idx``."""

    model_config = ConfigDict(frozen=True)

    ty: StrictInt = Field(..., description="Parent type tag")
    name: StrictStr = Field(..., description="Bare parent name")

    @model_validator(mode="before")
    @classmethod
    def _positional(cls, data: Any) -> Any:
        return _from_array(data, _PARENT_FIELDS, 2)


class RawRecord(BaseModel):
    """One crate's fragment: its items and the parents they point to."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    doc: StrictStr = Field(..., description="Crate documentation summary")
    items: list[RawItem] = Field(..., alias="i", description="Items in order")
    parents: list[RawParent] = Field(
        default_factory=list, alias="p", description="Parent types"
    )
