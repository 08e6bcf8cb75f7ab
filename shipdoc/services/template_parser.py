from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any

import pandas as pd

from ..excel.reader import MalformedSourceError, Source, normalize_sheet, read_workbook
from ..models.field_metadata import FieldMetadata, ParsedTemplate
from .normalizers import as_text
from .role_classifier import ColumnRoles, classify_columns, classify_requirement

"""Marketplace product-template ingestion.

Workbook layout:
- ``Data`` (mandatory): row 1 = labels, row 2 = field codes
- ``Columns`` (optional): metadata table, one row per field, headers vary
- ``ReferenceData`` (optional): one column per field code, permitted values below
"""

logger = logging.getLogger(__name__)

__all__ = [
    "DATA_SHEET",
    "METADATA_SHEET",
    "REFERENCE_SHEET",
    "infer_group",
    "parse_template",
]

DATA_SHEET = "Data"
METADATA_SHEET = "Columns"
REFERENCE_SHEET = "ReferenceData"

# (group, keywords matched against code, keywords matched against label)
_GROUP_RULES: tuple[tuple[str, tuple[str, ...], tuple[str, ...]], ...] = (
    ("Images", ("img", "image"), ("image",)),
    ("Offer", ("price", "offer", "sku", "quantity"), ()),
    ("Compliance", ("vix", "warranty", "tax"), ()),
    ("Specs", (), ("processor", "memory", "storage", "cpu", "ram")),
    ("Display", (), ("display", "screen")),
    ("Power", (), ("battery", "power")),
    ("Dimensions", (), ("dimension", "weight")),
)
DEFAULT_GROUP = "General Information"


def infer_group(code: str, label: str) -> str:
    c = code.lower()
    lbl = label.lower()
    for group, code_keys, label_keys in _GROUP_RULES:
        if any(k in c for k in code_keys) or any(k in lbl for k in label_keys):
            return group
    return DEFAULT_GROUP


def _cell(df: pd.DataFrame, row: int, col: int) -> str:
    if row >= df.shape[0] or col >= df.shape[1]:
        return ""
    return as_text(df.iat[row, col]).strip()


def _read_data_sheet(df: pd.DataFrame) -> list[FieldMetadata]:
    columns: list[FieldMetadata] = []
    for c in range(df.shape[1]):
        code = _cell(df, 1, c)
        if not code:
            continue  # コード無し列はスキップ
        label = _cell(df, 0, c) or code
        columns.append(FieldMetadata(order=c, label=label, code=code, group=infer_group(code, label)))
    return columns


def _metadata_by_code(
    rows: list[dict[str, Any]], roles: ColumnRoles, columns: list[FieldMetadata]
) -> dict[str, dict[str, Any]]:
    meta: dict[str, dict[str, Any]] = {}
    if roles.code is not None:
        for row in rows:
            code = as_text(row.get(roles.code)).strip()
            if code:
                meta[code] = row
        return meta
    # コード列が特定できない場合: 行内のいずれかの値が既知コードと一致するか
    for row in rows:
        cell_values = {as_text(v).strip() for v in row.values()}
        match = next((c for c in columns if c.code in cell_values), None)
        if match is not None:
            meta[match.code] = row
    return meta


def _apply_metadata(columns: list[FieldMetadata], df: pd.DataFrame) -> list[FieldMetadata]:
    sheet = normalize_sheet(df, METADATA_SHEET)
    if not sheet.rows:
        return columns
    roles = classify_columns(sheet.columns, sheet.rows)
    meta = _metadata_by_code(sheet.rows, roles, columns)

    updated: list[FieldMetadata] = []
    for col in columns:
        row = meta.get(col.code)
        if row is None:
            updated.append(col)
            continue
        changes: dict[str, Any] = {}
        if roles.description and as_text(row.get(roles.description)):
            changes["description"] = as_text(row.get(roles.description))
        if roles.example and as_text(row.get(roles.example)):
            changes["example"] = as_text(row.get(roles.example))
        if roles.requirement and as_text(row.get(roles.requirement)):
            changes["required"] = classify_requirement(row.get(roles.requirement))
            logger.debug(
                f"field {col.code}: requirement value '{as_text(row.get(roles.requirement)).strip()}' "
                f"-> {'required' if changes['required'] else 'optional'}"
            )
        else:
            logger.debug(f"field {col.code}: no requirement data found")
        updated.append(replace(col, **changes) if changes else col)
    return updated


def _apply_reference_values(columns: list[FieldMetadata], df: pd.DataFrame) -> list[FieldMetadata]:
    allowed_by_code: dict[str, tuple[str, ...]] = {}
    for c in range(df.shape[1]):
        header = _cell(df, 0, c)
        if not header:
            continue
        values = tuple(v for v in (_cell(df, r, c) for r in range(1, df.shape[0])) if v)
        if values and header not in allowed_by_code:
            allowed_by_code[header] = values
    return [
        replace(col, allowed_values=allowed_by_code[col.code], data_type="select")
        if col.code in allowed_by_code
        else col
        for col in columns
    ]


def parse_template(source: Source, file_name: str | None = None) -> ParsedTemplate:
    """Parse a product-template workbook into its FieldMetadata list.

    Args:
        source: .xlsx path or bytes
        file_name: original upload name; defaults to the path's name

    Raises:
        MalformedSourceError: workbook unreadable or Data sheet missing
    """
    sheets = read_workbook(source)
    if DATA_SHEET not in sheets:
        raise MalformedSourceError(f'Template missing "{DATA_SHEET}" sheet')

    columns = _read_data_sheet(sheets[DATA_SHEET])
    if METADATA_SHEET in sheets and not sheets[METADATA_SHEET].empty:
        columns = _apply_metadata(columns, sheets[METADATA_SHEET])
    if REFERENCE_SHEET in sheets and not sheets[REFERENCE_SHEET].empty:
        columns = _apply_reference_values(columns, sheets[REFERENCE_SHEET])

    if file_name is None:
        file_name = Path(source).name if not isinstance(source, bytes) else "template"
    template = ParsedTemplate(template_name=Path(file_name).stem, columns=columns)
    logger.info(
        f"template {template.template_name}: {len(columns)} fields, {len(template.required_codes)} required"
    )
    return template
