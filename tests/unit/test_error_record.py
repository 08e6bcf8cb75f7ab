from __future__ import annotations

import json

from shipdoc.models.error_record import ErrorRecord
from shipdoc.models.validation_error import ValidationError


def test_create_has_utc_z_timestamp():
    rec = ErrorRecord.create("orders.xlsx", 2, "City", "MISSING_REQUIRED_FIELD", "City is required")
    assert rec.timestamp.endswith("Z")
    assert "+00:00" not in rec.timestamp


def test_from_validation():
    rec = ErrorRecord.from_validation("orders.xlsx", ValidationError(row=5, field="PostalCode", message="Postal Code is required"))
    assert rec.row == 5
    assert rec.field == "PostalCode"
    assert rec.error_type == "MISSING_REQUIRED_FIELD"


def test_json_line_keys_and_unicode():
    rec = ErrorRecord.file_level("commandes-été.xlsx", "MALFORMED_SOURCE", "File is empty")
    data = json.loads(rec.to_json_line())
    assert list(data) == ["timestamp", "file", "row", "field", "error_type", "message"]
    assert data["row"] == -1
    assert "été" in rec.to_json_line()
