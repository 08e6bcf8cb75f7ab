from __future__ import annotations

from collections.abc import Mapping, Sequence
from io import BytesIO
from pathlib import Path
from typing import Any

from openpyxl import load_workbook

from ..models.field_metadata import FieldMetadata
from .reader import MalformedSourceError, Source

"""Template export: fill listing values into a copy of the uploaded template.

Rows 1-2 of the ``Data`` sheet (labels, codes) and every other sheet are
left untouched; listings are written from row 3 down. Each value lands in
the sheet column its field code came from.
"""

__all__ = [
    "FIRST_DATA_ROW",
    "export_template_rows",
]

DATA_SHEET = "Data"
FIRST_DATA_ROW = 3


def _cell_value(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, float) and value != value:  # NaN
        return ""
    return value


def export_template_rows(
    template_source: Source,
    columns: Sequence[FieldMetadata],
    listings: Sequence[Mapping[str, Any]],
) -> bytes:
    """Return workbook bytes with one row per listing ({field code: value}).

    Missing values are written as empty strings.

    Raises:
        MalformedSourceError: template unreadable or without a Data sheet
        TypeError: a listing is not a mapping
    """
    try:
        stream = BytesIO(template_source) if isinstance(template_source, bytes) else Path(template_source)
        wb = load_workbook(stream)
    except Exception as e:
        raise MalformedSourceError(f"unreadable template: {e}") from e
    if DATA_SHEET not in wb.sheetnames:
        raise MalformedSourceError(f'Template missing "{DATA_SHEET}" sheet')

    ws = wb[DATA_SHEET]
    for offset, listing in enumerate(listings):
        if not isinstance(listing, Mapping):
            raise TypeError(f"listing {offset}: expected an object, got {type(listing).__name__}")
        row = FIRST_DATA_ROW + offset
        for col in columns:
            ws.cell(row=row, column=col.order + 1, value=_cell_value(listing.get(col.code)))

    out = BytesIO()
    wb.save(out)
    return out.getvalue()
