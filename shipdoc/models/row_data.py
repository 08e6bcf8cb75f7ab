from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

"""Row models for the reconciliation pipeline.

RawRow is one data row exactly as read from the source sheet (header -> scalar).
CanonicalRow is a plain dict keyed by canonical field name; every pipeline stage
returns a fresh dict and never keeps a reference to the RawRow it came from.
"""

__all__ = [
    "CanonicalRow",
    "HeaderMapping",
    "RawRow",
]

CanonicalRow = dict[str, Any]
HeaderMapping = dict[str, str | None]  # original header -> canonical field (None = unmapped)


@dataclass(frozen=True)
class RawRow:
    """A source row, immutable once read.

    ``row_number`` is the 1-based data row position (the header row is not counted).
    ``values`` keeps the sheet's header order.
    """
    row_number: int
    values: Mapping[str, Any]

    def __post_init__(self) -> None:
        # 読み取り専用ビューに差し替え (frozen なので object.__setattr__)
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    @property
    def headers(self) -> list[str]:
        return list(self.values.keys())
