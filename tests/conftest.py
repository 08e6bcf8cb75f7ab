# Shared pytest fixtures
from __future__ import annotations

import tempfile
from collections.abc import Callable
from pathlib import Path

import pandas as pd
import pytest

from shipdoc.logging.init import reset_logging

ORDER_HEADERS = [
    "Order Number", "Ship To Name", "Address", "City", "State", "Zip", "Country", "Qty", "Total",
]


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "out").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_directory: ./data
output_directory: ./out
generator:
  default_service_code: DOM.EP
  signature_threshold: 200
  notifications_enabled: false
  duplicate_by_quantity: false
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "shipdoc.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


def write_workbook(path: Path, sheets: dict[str, list[list[object]]]) -> Path:
    """Write a real .xlsx; every row (including the header rows) is written as data."""
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet_name, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
    return path


@pytest.fixture()
def make_order_file(temp_workdir: Path) -> Callable[..., Path]:
    """Create an order export in ./data with ORDER_HEADERS (or custom headers)."""
    def _make(name: str, rows: list[list[object]], headers: list[str] | None = None) -> Path:
        return write_workbook(
            temp_workdir / "data" / name,
            {"Orders": [headers or ORDER_HEADERS, *rows]},
        )
    return _make


@pytest.fixture()
def valid_order_rows() -> list[list[object]]:
    return [
        ["ORD-1001", "Alice Martin", "12 King St", "Toronto", "Ontario", "M5V 2T6", "Canada", 1, "$89.99"],
        ["ORD-1002", "Bob Tremblay", "5 Rue Laval", "Montreal", "QC", "h2x 1y4", "CAN", 2, "$249.00"],
    ]
