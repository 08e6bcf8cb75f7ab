from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from ..excel.reader import Source, read_order_sheet
from ..models.row_data import CanonicalRow, HeaderMapping, RawRow
from ..models.validation_error import ValidationError
from .derived_fields import expand_derived_fields
from .header_normalizer import normalize_headers
from .mapping_proposal import load_mapping_file
from .merge_resolver import apply_mapping
from .validator import validate_rows

"""Order export reconciliation: RawRows -> validated CanonicalRows.

Stages, each returning new values:
1. HeaderMapping (static normalization unless one is supplied)
2. merge resolver (one CanonicalRow per RawRow)
3. derived-field expansion (package category -> dimensions)
4. required-field validation over the whole batch
"""

logger = logging.getLogger(__name__)

__all__ = [
    "ParsedOrders",
    "parse_orders",
    "reconcile_rows",
]


@dataclass(frozen=True)
class ParsedOrders:
    headers: list[str]
    raw_rows: list[RawRow]
    mapping: HeaderMapping
    rows: list[CanonicalRow]
    errors: list[ValidationError]

    @property
    def is_valid(self) -> bool:
        return not self.errors


def reconcile_rows(
    raw_rows: Sequence[RawRow], mapping: HeaderMapping
) -> tuple[list[CanonicalRow], list[ValidationError]]:
    rows = [expand_derived_fields(apply_mapping(r, mapping)) for r in raw_rows]
    return rows, validate_rows(rows)


def parse_orders(
    source: Source,
    mapping: HeaderMapping | None = None,
    mapping_file: Path | None = None,
) -> ParsedOrders:
    """Read the first sheet of an order export and reconcile its rows.

    Args:
        source: .xlsx path or bytes
        mapping: explicit header mapping (e.g. a sanitized AI proposal)
        mapping_file: manual JSON mapping; used when ``mapping`` is None

    Raises:
        MalformedSourceError: workbook unreadable or without data rows
        MappingProposalError: the mapping file is unreadable or not a JSON object
    """
    sheet = read_order_sheet(source)
    headers = sheet.columns
    if mapping is None:
        if mapping_file is not None:
            mapping = load_mapping_file(mapping_file, headers)
        else:
            mapping = normalize_headers(headers)
    unmapped = [h for h, f in mapping.items() if not f]
    if unmapped:
        logger.debug(f"unmapped headers: {unmapped}")

    raw_rows = sheet.raw_rows()
    rows, errors = reconcile_rows(raw_rows, mapping)
    return ParsedOrders(headers=headers, raw_rows=raw_rows, mapping=mapping, rows=rows, errors=errors)
