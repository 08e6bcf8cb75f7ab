from __future__ import annotations

import pytest

from shipdoc.models.config_models import GeneratorSettings
from shipdoc.services.shipment_document import (
    SerializationContractError,
    build_records,
    escape_xml,
    generate_document,
    render_delivery_request,
)


def _row(**overrides):
    row = {
        "CustomerReference": "ORD1",
        "ContactName": "Jane Doe",
        "AddressLine1": "1 Main St",
        "City": "Ottawa",
        "Province": "Ontario",
        "PostalCode": "k1a 0b1",
        "Country": "Canada",
        "Email": "jane@example.com",
    }
    row.update(overrides)
    return row


def test_quantity_duplication_suffixes_references():
    settings = GeneratorSettings(duplicate_by_quantity=True)
    records = build_records([_row(Quantity=3)], settings)
    assert [r.customer_ref for r in records] == ["ORD1-1", "ORD1-2", "ORD1-3"]
    assert len({(r.contact_name, r.city, r.weight) for r in records}) == 1


def test_quantity_ignored_when_duplication_disabled():
    records = build_records([_row(Quantity=3)], GeneratorSettings())
    assert [r.customer_ref for r in records] == ["ORD1"]


def test_suffix_survives_reference_truncation():
    settings = GeneratorSettings(duplicate_by_quantity=True)
    records = build_records([_row(CustomerReference="R" * 40, Quantity=2)], settings)
    assert [len(r.customer_ref) for r in records] == [35, 35]
    assert records[0].customer_ref.endswith("-1")
    assert records[1].customer_ref.endswith("-2")


def test_record_normalization():
    record = build_records([_row(Weight="2", Phone="(613) 555-0100")], GeneratorSettings())[0]
    assert record.province == "ON"
    assert record.country_code == "CA"
    assert record.postal_code == "K1A0B1"
    assert record.phone == "6135550100"
    assert record.weight == 2000
    assert (record.length, record.width, record.height) == ("30", "20", "10")
    assert record.service_code == "DOM.EP"


def test_signature_required_above_threshold_only():
    settings = GeneratorSettings(signature_threshold=200)
    records = build_records([_row(Price="$250.00"), _row(Price="$200"), _row()], settings)
    assert [r.signature_required for r in records] == [True, False, False]
    assert '<option code="SO"/>' in render_delivery_request(records[0])
    assert "<options>" not in render_delivery_request(records[1])


def test_notification_only_when_enabled_and_email_present():
    on = GeneratorSettings(notifications_enabled=True)
    with_email, without_email = build_records([_row(), _row(Email=None)], on)
    assert with_email.notification_email == "jane@example.com"
    assert "<email>jane@example.com</email>" in render_delivery_request(with_email)
    assert "<notification>" not in render_delivery_request(without_email)

    off = build_records([_row()], GeneratorSettings())[0]
    assert off.notification_email == ""


def test_empty_service_code_rejects_whole_batch():
    settings = GeneratorSettings(default_service_code="")
    with pytest.raises(SerializationContractError):
        generate_document([_row(ServiceCode="DOM.EP"), _row()], settings)


def test_escape_xml():
    assert escape_xml("A & B <C> \"q\" 'a'") == "A &amp; B &lt;C&gt; &quot;q&quot; &apos;a&apos;"


def test_document_envelope():
    doc = generate_document([_row(), _row(CustomerReference="ORD2")], GeneratorSettings())
    assert doc.startswith('<?xml version="1.0" encoding="utf-8"?>\n<delivery-requests>\n  <delivery-request>\n')
    assert doc.endswith("  </delivery-request>\n</delivery-requests>")
    assert doc.count("<delivery-request>") == 2


def test_empty_batch_document():
    assert generate_document([], GeneratorSettings()) == (
        '<?xml version="1.0" encoding="utf-8"?>\n<delivery-requests>\n</delivery-requests>'
    )
