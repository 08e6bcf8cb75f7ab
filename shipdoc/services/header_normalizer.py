from __future__ import annotations

import re
from collections.abc import Iterable

from ..models.row_data import HeaderMapping

"""Canonical field dictionary and header normalization.

A raw header is collapsed (lower-case, trimmed, whitespace/underscores/hyphens
removed) and looked up in the synonym table. Synonyms are collapsed the same
way when the table is compiled, so "Postal Code", "postal_code" and
"POSTAL-CODE" all resolve to PostalCode.

Headers with no match pass through unchanged and stay usable as literal keys.
"""

__all__ = [
    "CANONICAL_FIELDS",
    "COLUMN_SYNONYMS",
    "collapse_header",
    "normalize_header",
    "normalize_headers",
]

# Dictionary order matters: when a collapsed header is a synonym of two
# fields ("amount"), the first field listed wins.
COLUMN_SYNONYMS: dict[str, tuple[str, ...]] = {
    "CustomerReference": (
        "customerreference", "order number", "orderid", "order id", "ref",
        "ordernumber", "order#", "order no", "reference",
    ),
    "Company": ("company", "business", "organization", "companyname", "business name"),
    "ContactName": (
        "contactname", "contact name", "name", "recipient", "recipient name",
        "customer name", "full name", "ship to name", "shipto",
    ),
    "Phone": ("phone", "telephone", "tel", "phonenumber", "phone number", "contact phone", "mobile"),
    "Email": ("email", "e-mail", "emailaddress", "email address", "contact email"),
    "AddressLine1": (
        "addressline1", "address line 1", "address1", "address", "street",
        "street address", "ship to address", "shipping address", "addr1", "line1",
    ),
    "AddressLine2": ("addressline2", "address line 2", "address2", "suite", "unit", "apt", "apartment", "addr2", "line2"),
    "City": ("city", "town", "municipality"),
    "Province": ("province", "prov", "state", "prov-state", "provstate", "prov/state", "region"),
    "PostalCode": ("postalcode", "postal code", "zipcode", "zip", "postal", "zip code", "postcode", "postal/zip"),
    "Country": ("country", "countrycode", "country code", "destination country"),
    "Weight": ("weight", "wt", "mass", "package weight", "parcel weight"),
    "Length": ("length", "len", "l", "package length"),
    "Width": ("width", "w", "package width"),
    "Height": ("height", "h", "ht", "package height"),
    "ServiceCode": ("servicecode", "service code", "service", "productid", "product id", "shipping method", "delivery method"),
    "Quantity": ("quantity", "qty", "count", "amount", "number of items"),
    "Price": ("price", "value", "total", "amount", "order total", "unit price", "declared value"),
    "Description": ("description", "item description", "item details", "details", "product description"),
    "Category": ("category", "package category", "packagecategory", "package type", "device type"),
}

CANONICAL_FIELDS: tuple[str, ...] = tuple(COLUMN_SYNONYMS)

_COLLAPSE_RX = re.compile(r"[_\s-]+")


def collapse_header(header: str) -> str:
    return _COLLAPSE_RX.sub("", str(header).strip().lower())


def _compile_lookup() -> dict[str, str]:
    lookup: dict[str, str] = {}
    for field, synonyms in COLUMN_SYNONYMS.items():
        for synonym in (field, *synonyms):
            lookup.setdefault(collapse_header(synonym), field)
    return lookup


_LOOKUP: dict[str, str] = _compile_lookup()


def normalize_header(header: str) -> str:
    """Return the canonical field for ``header``, or ``header`` itself on no match."""
    return _LOOKUP.get(collapse_header(header), header)


def normalize_headers(headers: Iterable[str]) -> HeaderMapping:
    """Build a header -> canonical-name map for a raw header list."""
    return {h: normalize_header(h) for h in headers}
