from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from shipdoc.excel.reader import MalformedSourceError, normalize_sheet, read_order_sheet, read_workbook


def _make_excel(tmp_path: Path, name: str, sheets: dict[str, list[list[object]]]) -> Path:
    p = tmp_path / name
    with pd.ExcelWriter(p, engine="openpyxl") as writer:
        for sheet, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet, header=False, index=False)
    return p


def test_read_order_sheet_uses_first_sheet(tmp_path: Path):
    excel = _make_excel(
        tmp_path,
        "orders.xlsx",
        {
            "Orders": [["Order Number", "City"], ["A-1", "Ottawa"], ["A-2", "Toronto"]],
            "Other": [["x"], ["y"]],
        },
    )
    sheet = read_order_sheet(excel)
    assert sheet.sheet_name == "Orders"
    assert sheet.columns == ["Order Number", "City"]
    assert sheet.rows == [{"Order Number": "A-1", "City": "Ottawa"}, {"Order Number": "A-2", "City": "Toronto"}]


def test_blank_rows_skipped_and_empty_cells_none(tmp_path: Path):
    excel = _make_excel(
        tmp_path,
        "orders.xlsx",
        {"Orders": [["Ref", "Phone"], ["A-1", None], [None, None], ["A-2", 5195551234]]},
    )
    raw_rows = read_order_sheet(excel).raw_rows()
    assert [r.row_number for r in raw_rows] == [1, 2]
    assert raw_rows[0].values["Phone"] is None
    assert raw_rows[1].values["Ref"] == "A-2"


def test_na_strings_are_kept_as_data(tmp_path: Path):
    excel = _make_excel(tmp_path, "na.xlsx", {"Orders": [["Country", "Company"], ["NA", "None"], ["N/A", "null"]]})
    rows = read_order_sheet(excel).rows
    assert rows == [{"Country": "NA", "Company": "None"}, {"Country": "N/A", "Company": "null"}]


def test_header_only_sheet_is_empty_file(tmp_path: Path):
    excel = _make_excel(tmp_path, "empty.xlsx", {"Orders": [["Ref", "City"]]})
    with pytest.raises(MalformedSourceError) as e:
        read_order_sheet(excel)
    assert "File is empty" in str(e.value)


def test_unreadable_workbook(tmp_path: Path):
    bad = tmp_path / "bad.xlsx"
    bad.write_bytes(b"")
    with pytest.raises(MalformedSourceError) as e:
        read_workbook(bad)
    assert "unreadable workbook" in str(e.value)


def test_read_from_bytes(tmp_path: Path):
    excel = _make_excel(tmp_path, "orders.xlsx", {"Orders": [["Ref"], ["A-1"]]})
    assert read_order_sheet(excel.read_bytes()).rows == [{"Ref": "A-1"}]


def test_blank_and_duplicate_headers():
    df = pd.DataFrame([["Name", None, "Name"], ["a", "b", "c"]])
    sheet = normalize_sheet(df, "S")
    assert sheet.columns == ["Name", "Column2", "Name_1"]
    assert sheet.rows == [{"Name": "a", "Column2": "b", "Name_1": "c"}]


def test_target_sheets_filter(tmp_path: Path):
    excel = _make_excel(tmp_path, "multi.xlsx", {"A": [["x"]], "B": [["y"]]})
    assert list(read_workbook(excel, target_sheets={"B"})) == ["B"]
