from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.row_data import RawRow

"""Workbook reader built on pandas.

Sheets are read without a header (``header=None``) and the header row is
applied afterwards, because order exports put headers on row 1 while template
Data sheets carry two header rows (labels, then codes).

Pandas' default NA strings are disabled: values such as "NA" (Namibia) or
"None" in a company column are data, not missing cells. Only truly empty cells
become None.
"""

__all__ = [
    "MalformedSourceError",
    "SheetData",
    "normalize_sheet",
    "read_order_sheet",
    "read_workbook",
]

Source = Path | str | bytes


class MalformedSourceError(Exception):
    """Raised when a source document cannot be used at all (fatal for the import)."""


@dataclass
class SheetData:
    sheet_name: str
    columns: list[str]
    rows: list[dict[str, Any]]  # 正規化済 (列名→値, 空セルは None)

    def raw_rows(self) -> list[RawRow]:
        return [RawRow(row_number=i, values=r) for i, r in enumerate(self.rows, start=1)]


def _open(source: Source) -> pd.ExcelFile:
    if isinstance(source, bytes):
        return pd.ExcelFile(BytesIO(source))
    return pd.ExcelFile(source)


def read_workbook(source: Source, target_sheets: Iterable[str] | None = None) -> dict[str, pd.DataFrame]:
    """Read a workbook returning raw DataFrames keyed by sheet name.

    Parameters
    ----------
    source: path to an .xlsx file, or its bytes
    target_sheets: restrict to these sheet names (None = all sheets)

    Raises MalformedSourceError when the workbook cannot be opened or parsed.
    """
    wanted = set(target_sheets) if target_sheets is not None else None
    dfs: dict[str, pd.DataFrame] = {}
    try:
        xls = _open(source)
        for name in xls.sheet_names:
            if wanted is not None and str(name) not in wanted:
                continue
            df = xls.parse(name, header=None, keep_default_na=False, na_values=[""])
            dfs[str(name)] = df
    except MalformedSourceError:
        raise
    except Exception as e:
        raise MalformedSourceError(f"unreadable workbook: {e}") from e
    return dfs


def _clean_cell(val: Any) -> Any:
    if val is None:
        return None
    if not isinstance(val, str) and pd.isna(val):
        return None
    return val


def _header_names(header_values: list[Any]) -> list[str]:
    """Stringify header cells; blank headers get positional names, repeats get a suffix."""
    names: list[str] = []
    seen: dict[str, int] = {}
    for idx, raw in enumerate(header_values):
        cell = _clean_cell(raw)
        name = str(cell).strip() if cell is not None else ""
        if not name:
            name = f"Column{idx + 1}"
        if name in seen:
            seen[name] += 1
            name = f"{name}_{seen[name]}"
        else:
            seen[name] = 0
        names.append(name)
    return names


def normalize_sheet(df: pd.DataFrame, sheet_name: str, header_row: int = 0) -> SheetData:
    """Apply ``header_row`` as the header and turn following rows into dicts.

    Fully empty rows are skipped. Empty cells become None; everything else is
    kept exactly as read.
    """
    if df.shape[0] <= header_row:
        raise MalformedSourceError(f"sheet '{sheet_name}' has no header row")
    columns = _header_names(df.iloc[header_row].tolist())
    rows: list[dict[str, Any]] = []
    for _, raw in df.iloc[header_row + 1:].iterrows():
        values = [_clean_cell(v) for v in raw.tolist()]
        if all(v is None or (isinstance(v, str) and not v.strip()) for v in values):
            continue
        rows.append(dict(zip(columns, values, strict=False)))
    return SheetData(sheet_name=sheet_name, columns=columns, rows=rows)


def read_order_sheet(source: Source) -> SheetData:
    """Read the first sheet of an order export (row 1 = headers).

    Raises MalformedSourceError for an unreadable workbook, a workbook without
    sheets, or a sheet without data rows.
    """
    sheets = read_workbook(source)
    if not sheets:
        raise MalformedSourceError("workbook contains no sheets")
    name, df = next(iter(sheets.items()))
    if df.empty:
        raise MalformedSourceError("File is empty")
    sheet = normalize_sheet(df, name)
    if not sheet.rows:
        raise MalformedSourceError("File is empty")
    return sheet
