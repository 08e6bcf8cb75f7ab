from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from ..models.row_data import HeaderMapping
from .header_normalizer import CANONICAL_FIELDS

"""Boundary for externally proposed header mappings.

An AI text-extraction service (or a user editing a JSON file) may propose a
header -> canonical field mapping. The proposal is untrusted: it is parsed and
checked here, then fed to the same merge resolver as a static mapping. This
module only builds the prompt and parses the answer; it never calls a model.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "FIELD_HINTS",
    "MappingProposalError",
    "build_mapping_prompt",
    "load_mapping_file",
    "parse_mapping_proposal",
    "sanitize_mapping",
]

FIELD_HINTS: dict[str, str] = {
    "ContactName": 'Recipient name (required) - Map BOTH "First Name" and "Last Name" columns to this field',
    "AddressLine1": "Street address line 1 (required)",
    "City": "City name (required)",
    "Province": "Province or state code (required)",
    "PostalCode": "Postal or ZIP code (required)",
    "Country": "Country code (required)",
    "Company": "Company name (optional)",
    "AddressLine2": "Street address line 2 (optional)",
    "Phone": "Phone number (optional)",
    "Email": "Email address (optional)",
    "CustomerReference": 'Order number (required) - Map "Order Number" or "Order ID" to this specific field',
    "Weight": "Package weight (optional)",
    "Length": "Package length (optional)",
    "Width": "Package width (optional)",
    "Height": "Package height (optional)",
    "ServiceCode": "Shipping service code (optional)",
    "Quantity": "Quantity of items (optional)",
    "Price": 'Total Order Amount (optional) - Map ONLY the "Amount" or "Grand Total" column. Ignore Tax/Subtotal.',
    "Description": "Item details or description (optional)",
    "Category": "Package category such as laptop, tablet or phone (optional)",
}


class MappingProposalError(Exception):
    """A mapping proposal could not be obtained or understood."""


def build_mapping_prompt(headers: Sequence[str]) -> str:
    header_lines = "\n".join(f'{i}. "{h}"' for i, h in enumerate(headers, start=1))
    field_lines = "\n".join(f"- {name}: {hint}" for name, hint in FIELD_HINTS.items())
    return (
        "You are a data mapping expert. I have an Excel file with the following column headers:\n"
        f"{header_lines}\n\n"
        "I need to map these columns to the following fields for a shipping XML document:\n"
        f"{field_lines}\n\n"
        "For each Excel column header, determine which field it should map to. "
        "If a header doesn't match any field, map it to null.\n\n"
        "Return ONLY a valid JSON object in this exact format (no markdown, no explanation):\n"
        '{\n  "Excel Header 1": "FieldName",\n  "Excel Header 2": null\n}\n\n'
        "Rules:\n"
        "- Use exact header names from the list I provided\n"
        "- Use exact field names (ContactName, AddressLine1, etc.)\n"
        '- If you see separate "First Name" and "Last Name" columns, map BOTH of them to "ContactName"\n'
        "- Map to null if no match"
    )


def sanitize_mapping(raw: Any, headers: Sequence[str]) -> HeaderMapping:
    """Keep known headers only; unknown or "null" targets become None (unmapped).

    Every header in ``headers`` gets an entry, so the result is a complete mapping.
    """
    if not isinstance(raw, dict):
        raise MappingProposalError(f"mapping must be a JSON object, got {type(raw).__name__}")
    known = set(CANONICAL_FIELDS)
    mapping: HeaderMapping = {}
    for header in headers:
        target = raw.get(header)
        if target is None or target == "null":
            mapping[header] = None
        elif isinstance(target, str) and target in known:
            mapping[header] = target
        else:
            logger.warning(f"mapping: header '{header}' -> unknown field {target!r}; left unmapped")
            mapping[header] = None
    header_set = set(headers)
    dropped = [k for k in raw if k not in header_set]
    if dropped:
        logger.debug(f"mapping: ignoring entries for unknown headers {dropped}")
    return mapping


def parse_mapping_proposal(text: str, headers: Sequence[str]) -> HeaderMapping:
    """Extract the JSON object from free model text and sanitize it."""
    json_text = text.strip()
    start = json_text.find("{")
    end = json_text.rfind("}")
    if start != -1 and end != -1:
        json_text = json_text[start:end + 1]
    try:
        raw = json.loads(json_text)
    except json.JSONDecodeError as e:
        raise MappingProposalError(f"proposal returned invalid JSON: {text[:50]}...") from e
    return sanitize_mapping(raw, headers)


def load_mapping_file(path: Path, headers: Sequence[str]) -> HeaderMapping:
    """Load a manual mapping (JSON object header -> field) and sanitize it."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise MappingProposalError(f"mapping file unreadable: {e}") from e
    return parse_mapping_proposal(text, headers)
