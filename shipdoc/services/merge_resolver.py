from __future__ import annotations

from collections.abc import Callable, Mapping
from functools import reduce
from typing import Any

from ..models.row_data import CanonicalRow, HeaderMapping, RawRow
from .normalizers import as_text

"""Mapping merge resolver.

Applies a HeaderMapping (static, AI-proposed or manual) to one RawRow. When
several source headers land on the same canonical field, the field's merge
policy decides the result:

- concatenate    : ContactName, AddressLine1, AddressLine2, Description
- longest_wins   : CustomerReference (short values are usually truncated
                   abbreviations, e.g. a province "ON" next to the order number)
- preferred_source: Price (named for amount/total headers, but the last
                    mapped header wins in either order)
- last_wins      : every other field

The resolver is a fold over (header, value) pairs with a fresh accumulator
dict per step, so it is pure and repeatable.
"""

__all__ = [
    "MERGEABLE_FIELDS",
    "MERGE_POLICIES",
    "apply_mapping",
    "concatenate",
    "last_wins",
    "longest_wins",
    "preferred_source",
    "resolve_rows",
]

# (existing value, new value, original header) -> merged value
MergePolicy = Callable[[Any, Any, str], Any]

MERGEABLE_FIELDS = ("ContactName", "AddressLine1", "AddressLine2", "Description")
REFERENCE_FIELD = "CustomerReference"
AMOUNT_FIELD = "Price"


def concatenate(existing: Any, new: Any, header: str) -> Any:
    return f"{as_text(existing)} {as_text(new)}".strip()


def longest_wins(existing: Any, new: Any, header: str) -> Any:
    return new if len(as_text(new)) > len(as_text(existing)) else existing


def preferred_source(existing: Any, new: Any, header: str) -> Any:
    # amount/total ヘッダーも後続の別ヘッダーに上書きされる (実質 last-wins)
    return new


def last_wins(existing: Any, new: Any, header: str) -> Any:
    return new


MERGE_POLICIES: Mapping[str, MergePolicy] = {
    **{f: concatenate for f in MERGEABLE_FIELDS},
    REFERENCE_FIELD: longest_wins,
    AMOUNT_FIELD: preferred_source,
}


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and value != value:  # NaN
        return True
    return str(value).strip() == ""


def _is_unmapped(field: str | None) -> bool:
    return not field or field == "null"


def _merge_step(mapping: HeaderMapping) -> Callable[[CanonicalRow, tuple[str, Any]], CanonicalRow]:
    def step(acc: CanonicalRow, item: tuple[str, Any]) -> CanonicalRow:
        header, value = item
        field = mapping.get(header)
        if _is_unmapped(field) or _is_blank(value):
            return acc
        if field not in acc:
            return {**acc, field: value}
        policy = MERGE_POLICIES.get(field, last_wins)
        return {**acc, field: policy(acc[field], value, header)}

    return step


def apply_mapping(row: RawRow | Mapping[str, Any], mapping: HeaderMapping) -> CanonicalRow:
    """Resolve one raw row into a CanonicalRow, walking headers in sheet order."""
    values = row.values if isinstance(row, RawRow) else row
    return reduce(_merge_step(mapping), values.items(), {})


def resolve_rows(rows: list[RawRow], mapping: HeaderMapping) -> list[CanonicalRow]:
    return [apply_mapping(r, mapping) for r in rows]
