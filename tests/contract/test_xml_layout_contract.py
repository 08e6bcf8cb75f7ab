from __future__ import annotations

from shipdoc.models.config_models import GeneratorSettings
from shipdoc.services.shipment_document import generate_document

"""Carrier document layout contract: byte-for-byte output for fixed input."""

ROW = {
    "CustomerReference": "ORD-1",
    "Company": "Acme & Co",
    "ContactName": "Jane Doe",
    "AddressLine1": "1 Main St",
    "City": "Ottawa",
    "Province": "ON",
    "PostalCode": "K1A 0B1",
    "Country": "CA",
    "Phone": "613-555-0100",
    "Email": "jane@example.com",
    "Weight": 2,
    "Price": "$50",
}

EXPECTED_PLAIN = """<?xml version="1.0" encoding="utf-8"?>
<delivery-requests>
  <delivery-request>
    <delivery-spec>
      <destination>
        <recipient>
          <client-id>Acme &amp; Co</client-id>
          <contact-name>Jane Doe</contact-name>
          <company>Acme &amp; Co</company>
          <additional-addressinfo></additional-addressinfo>
          <address-line-1>1 Main St</address-line-1>
          <address-line-2></address-line-2>
          <city>Ottawa</city>
          <prov-state>ON</prov-state>
          <postal-zip-code>K1A0B1</postal-zip-code>
          <country-code>CA</country-code>
          <client-voice-number>6135550100</client-voice-number>
        </recipient>
      </destination>
      <product-id>DOM.EP</product-id>
      <item-specification>
        <physical-characteristics>
          <length>30</length>
          <width>20</width>
          <height>10</height>
          <weight>2000</weight>
        </physical-characteristics>
      </item-specification>
      <reference>
        <customer-ref1>ORD-1</customer-ref1>
      </reference>
    </delivery-spec>
  </delivery-request>
</delivery-requests>"""


def test_plain_document_layout():
    assert generate_document([ROW], GeneratorSettings()) == EXPECTED_PLAIN


def test_optional_blocks_position():
    settings = GeneratorSettings(notifications_enabled=True, signature_threshold=10)
    doc = generate_document([ROW], settings)
    expected = EXPECTED_PLAIN.replace(
        "      <product-id>DOM.EP</product-id>\n",
        "      <product-id>DOM.EP</product-id>\n"
        "      <options>\n"
        '        <option code="SO"/>\n'
        "      </options>\n",
    ).replace(
        "      </item-specification>\n",
        "      </item-specification>\n"
        "      <notification>\n"
        "        <client-notif-email>\n"
        "          <email>jane@example.com</email>\n"
        "          <on-shipment>true</on-shipment>\n"
        "          <on-exception>true</on-exception>\n"
        "          <on-delivery>true</on-delivery>\n"
        "        </client-notif-email>\n"
        "      </notification>\n",
    )
    assert doc == expected
