from __future__ import annotations

from typing import NamedTuple

from ..models.row_data import CanonicalRow
from .normalizers import as_text

"""Derived-field expander: package category -> physical dimensions.

Category is treated as the more deliberate signal, so a hit overwrites any
Length/Width/Height/Weight the row already had. Weights are kilograms and
go through the same <=50 kg heuristic as hand-entered weights downstream.
"""

__all__ = [
    "CATEGORY_FIELD",
    "PACKAGE_CATEGORIES",
    "PackageDimensions",
    "expand_derived_fields",
]

CATEGORY_FIELD = "Category"


class PackageDimensions(NamedTuple):
    length: float  # cm
    width: float  # cm
    height: float  # cm
    weight: float  # kg


PACKAGE_CATEGORIES: dict[str, PackageDimensions] = {
    "laptop": PackageDimensions(45, 35, 10, 3),
    "tablet": PackageDimensions(35, 25, 8, 1.5),
    "phone": PackageDimensions(25, 15, 8, 0.8),
    "desktop": PackageDimensions(60, 50, 30, 12),
    "monitor": PackageDimensions(75, 50, 20, 8),
    "small box": PackageDimensions(30, 20, 10, 1),
    "medium box": PackageDimensions(45, 35, 25, 5),
    "large box": PackageDimensions(60, 45, 40, 10),
}


def expand_derived_fields(row: CanonicalRow) -> CanonicalRow:
    """Return a copy of ``row`` with category-implied dimensions applied (if any)."""
    category = as_text(row.get(CATEGORY_FIELD)).strip().lower()
    dims = PACKAGE_CATEGORIES.get(category) if category else None
    if dims is None:
        return dict(row)
    return {
        **row,
        "Length": dims.length,
        "Width": dims.width,
        "Height": dims.height,
        "Weight": dims.weight,
    }
