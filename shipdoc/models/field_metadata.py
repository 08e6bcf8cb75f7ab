from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

"""FieldMetadata model for product-template ingestion.

One instance per field column of an uploaded template's Data sheet. Built once
per template and read-only afterward; the requirement flag is corrected by the
column role classifier through ``dataclasses.replace``.
"""

__all__ = [
    "FieldMetadata",
    "ParsedTemplate",
]


@dataclass(frozen=True)
class FieldMetadata:
    """Metadata for a single template field.

    Attributes:
        order: Zero-based column index in the Data sheet
        label: Human label (Data sheet row 1); falls back to the code
        code: Field code (Data sheet row 2)
        required: Requirement flag resolved from the metadata sheet
        description: Free-text description from the metadata sheet
        example: Example value from the metadata sheet
        allowed_values: Permitted values from the ReferenceData sheet, or None
        data_type: "text", or "select" when allowed_values is present
        group: Display group inferred from code/label keywords
    """
    order: int
    label: str
    code: str
    required: bool = False
    description: str = ""
    example: str = ""
    allowed_values: tuple[str, ...] | None = None
    data_type: str = "text"
    group: str = "General Information"

    def to_dict(self) -> dict[str, Any]:
        """Serialize for persistence; allowed_values becomes a list (or None)."""
        data = asdict(self)
        if self.allowed_values is not None:
            data["allowed_values"] = list(self.allowed_values)
        return data


@dataclass(frozen=True)
class ParsedTemplate:
    template_name: str  # file name without extension
    columns: list[FieldMetadata]

    @property
    def required_codes(self) -> list[str]:
        return [c.code for c in self.columns if c.required]
