from __future__ import annotations

from collections.abc import Sequence

from ..models.row_data import CanonicalRow
from ..models.validation_error import ValidationError
from .normalizers import as_text

"""Required-field validation for canonical order rows.

Errors are accumulated for every row and returned together; nothing is raised.
Input rows are never modified, so validation can be re-run after every edit.
"""

__all__ = [
    "REQUIRED_FIELDS",
    "validate_row",
    "validate_rows",
]

# field -> label used in the message
REQUIRED_FIELDS: dict[str, str] = {
    "ContactName": "Contact Name",
    "AddressLine1": "Address Line 1",
    "City": "City",
    "Province": "Province",
    "PostalCode": "Postal Code",
    "Country": "Country",
}


def validate_row(row: CanonicalRow, row_index: int) -> list[ValidationError]:
    return [
        ValidationError(row=row_index, field=field, message=f"{label} is required")
        for field, label in REQUIRED_FIELDS.items()
        if not as_text(row.get(field)).strip()
    ]


def validate_rows(rows: Sequence[CanonicalRow]) -> list[ValidationError]:
    """Validate all rows; row numbers in the result are 1-based positions."""
    errors: list[ValidationError] = []
    for index, row in enumerate(rows, start=1):
        errors.extend(validate_row(row, index))
    return errors
