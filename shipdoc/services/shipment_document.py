from __future__ import annotations

import logging
from collections.abc import Sequence
from xml.sax.saxutils import escape

from ..models.config_models import GeneratorSettings
from ..models.row_data import CanonicalRow
from ..models.shipment_record import ShipmentRecord
from .normalizers import (
    FIELD_LIMITS,
    as_text,
    clean_phone,
    clean_postal_code,
    convert_weight_to_grams,
    format_dimension,
    normalize_country,
    normalize_province,
    normalize_service_code,
    parse_amount,
    parse_quantity,
    truncate,
    truncate_with_suffix,
)

"""Shipment document synthesizer.

Turns validated CanonicalRows into ShipmentRecords (normalization, truncation,
quantity duplication) and serializes them into the carrier's delivery-request
XML. Element order, tag names and indentation are fixed by the consuming
carrier system.

Records for the whole batch are built before anything is rendered: a contract
violation in any row aborts the batch instead of producing a partial document.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "SerializationContractError",
    "build_records",
    "escape_xml",
    "generate_document",
    "render_delivery_request",
    "render_document",
]

XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>'
SIGNATURE_OPTION_CODE = "SO"


class SerializationContractError(Exception):
    """A row cannot be expressed in the carrier format; the whole batch is rejected."""


def escape_xml(value: str) -> str:
    return escape(value, {'"': "&quot;", "'": "&apos;"})


def _record_for_unit(
    row: CanonicalRow,
    settings: GeneratorSettings,
    service_code: str,
    customer_ref: str,
    price: float,
) -> ShipmentRecord:
    email = truncate(row.get("Email"), FIELD_LIMITS["email"])
    return ShipmentRecord(
        customer_ref=customer_ref,
        company=truncate(row.get("Company"), FIELD_LIMITS["company"]),
        contact_name=truncate(row.get("ContactName"), FIELD_LIMITS["contact_name"]),
        address_line_1=truncate(row.get("AddressLine1"), FIELD_LIMITS["address_line_1"]),
        address_line_2=truncate(row.get("AddressLine2"), FIELD_LIMITS["address_line_2"]),
        city=truncate(row.get("City"), FIELD_LIMITS["city"]),
        province=normalize_province(row.get("Province")),
        postal_code=clean_postal_code(row.get("PostalCode")),
        country_code=normalize_country(row.get("Country")),
        phone=clean_phone(row.get("Phone")),
        email=email,
        service_code=service_code,
        length=format_dimension(row.get("Length"), settings.default_length),
        width=format_dimension(row.get("Width"), settings.default_width),
        height=format_dimension(row.get("Height"), settings.default_height),
        weight=convert_weight_to_grams(row.get("Weight"), settings.default_weight),
        price=price,
        signature_required=price > settings.signature_threshold,
        notification_email=email if settings.notifications_enabled and email else "",
    )


def build_records(rows: Sequence[CanonicalRow], settings: GeneratorSettings) -> list[ShipmentRecord]:
    """Normalize rows into per-unit ShipmentRecords.

    With ``duplicate_by_quantity`` a row of quantity n yields n records whose
    reference gets a "-1".."-n" suffix; the base reference is shortened first
    so the suffix always survives the 35-character limit.

    Raises:
        SerializationContractError: a row's service code resolves to empty
    """
    limit = FIELD_LIMITS["customer_ref"]
    records: list[ShipmentRecord] = []
    for index, row in enumerate(rows, start=1):
        service_code = normalize_service_code(row.get("ServiceCode"), settings.default_service_code)
        if not service_code:
            raise SerializationContractError(f"row {index}: service code cannot be empty")

        quantity = parse_quantity(row.get("Quantity"))
        price = parse_amount(row.get("Price")) if as_text(row.get("Price")) else 0.0
        duplicate = settings.duplicate_by_quantity and quantity > 1
        units = quantity if duplicate else 1
        base_ref = as_text(row.get("CustomerReference"))

        for unit in range(1, units + 1):
            if duplicate:
                customer_ref = truncate_with_suffix(base_ref, f"-{unit}", limit)
            else:
                customer_ref = truncate(base_ref, limit)
            records.append(_record_for_unit(row, settings, service_code, customer_ref, price))
    logger.debug(f"built {len(records)} shipment records from {len(rows)} rows")
    return records


def render_delivery_request(record: ShipmentRecord, indent: str = "  ") -> str:
    i = indent
    lines = [
        f"{i}<delivery-request>",
        f"{i}  <delivery-spec>",
        f"{i}    <destination>",
        f"{i}      <recipient>",
        f"{i}        <client-id>{escape_xml(record.company)}</client-id>",
        f"{i}        <contact-name>{escape_xml(record.contact_name)}</contact-name>",
        f"{i}        <company>{escape_xml(record.company)}</company>",
        f"{i}        <additional-addressinfo></additional-addressinfo>",
        f"{i}        <address-line-1>{escape_xml(record.address_line_1)}</address-line-1>",
        f"{i}        <address-line-2>{escape_xml(record.address_line_2)}</address-line-2>",
        f"{i}        <city>{escape_xml(record.city)}</city>",
        f"{i}        <prov-state>{escape_xml(record.province)}</prov-state>",
        f"{i}        <postal-zip-code>{escape_xml(record.postal_code)}</postal-zip-code>",
        f"{i}        <country-code>{escape_xml(record.country_code)}</country-code>",
        f"{i}        <client-voice-number>{escape_xml(record.phone)}</client-voice-number>",
        f"{i}      </recipient>",
        f"{i}    </destination>",
        f"{i}    <product-id>{escape_xml(record.service_code)}</product-id>",
    ]
    if record.signature_required:
        lines += [
            f"{i}    <options>",
            f'{i}      <option code="{SIGNATURE_OPTION_CODE}"/>',
            f"{i}    </options>",
        ]
    lines += [
        f"{i}    <item-specification>",
        f"{i}      <physical-characteristics>",
        f"{i}        <length>{record.length}</length>",
        f"{i}        <width>{record.width}</width>",
        f"{i}        <height>{record.height}</height>",
        f"{i}        <weight>{record.weight}</weight>",
        f"{i}      </physical-characteristics>",
        f"{i}    </item-specification>",
    ]
    if record.notification_email:
        lines += [
            f"{i}    <notification>",
            f"{i}      <client-notif-email>",
            f"{i}        <email>{escape_xml(record.notification_email)}</email>",
            f"{i}        <on-shipment>true</on-shipment>",
            f"{i}        <on-exception>true</on-exception>",
            f"{i}        <on-delivery>true</on-delivery>",
            f"{i}      </client-notif-email>",
            f"{i}    </notification>",
        ]
    lines += [
        f"{i}    <reference>",
        f"{i}      <customer-ref1>{escape_xml(record.customer_ref)}</customer-ref1>",
        f"{i}    </reference>",
        f"{i}  </delivery-spec>",
        f"{i}</delivery-request>",
    ]
    return "\n".join(lines) + "\n"


def render_document(records: Sequence[ShipmentRecord]) -> str:
    body = "".join(render_delivery_request(r) for r in records)
    return f"{XML_DECLARATION}\n<delivery-requests>\n{body}</delivery-requests>"


def generate_document(rows: Sequence[CanonicalRow], settings: GeneratorSettings) -> str:
    """Build and serialize the shipment document for a batch of validated rows."""
    return render_document(build_records(rows, settings))
