from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
import re
from typing import Any

"""Value normalization rules for the carrier shipment document.

All functions are pure and accept the loosely typed scalars a spreadsheet
yields (str, int, float, None, NaN). String limits mirror the carrier's hard
field-length constraints and are applied on character boundaries.
"""

__all__ = [
    "COUNTRY_ALIASES",
    "FIELD_LIMITS",
    "PROVINCE_CODES",
    "VALID_SERVICE_CODES",
    "as_text",
    "clean_phone",
    "clean_postal_code",
    "convert_weight_to_grams",
    "format_dimension",
    "normalize_country",
    "normalize_province",
    "normalize_service_code",
    "parse_amount",
    "parse_quantity",
    "to_number",
    "truncate",
    "truncate_with_suffix",
]

FIELD_LIMITS: dict[str, int] = {
    "customer_ref": 35,
    "company": 44,
    "contact_name": 44,
    "address_line_1": 44,
    "address_line_2": 44,
    "city": 40,
    "email": 70,
    "phone": 25,
    "postal_code": 14,
}

DEFAULT_COUNTRY = "CA"
COUNTRY_ALIASES: dict[str, str] = {
    "CAN": "CA",
    "CA": "CA",
    "CANADA": "CA",
    "USA": "US",
    "US": "US",
    "UNITED STATES": "US",
}

PROVINCE_CODES: dict[str, str] = {
    "ALBERTA": "AB",
    "BRITISH COLUMBIA": "BC",
    "MANITOBA": "MB",
    "NEW BRUNSWICK": "NB",
    "NEWFOUNDLAND": "NL",
    "NEWFOUNDLAND AND LABRADOR": "NL",
    "NOVA SCOTIA": "NS",
    "ONTARIO": "ON",
    "PRINCE EDWARD ISLAND": "PE",
    "QUEBEC": "QC",
    "QUÉBEC": "QC",
    "SASKATCHEWAN": "SK",
    "NORTHWEST TERRITORIES": "NT",
    "NUNAVUT": "NU",
    "YUKON": "YT",
    "YUKON TERRITORY": "YT",
}

VALID_SERVICE_CODES = frozenset({
    "DOM.EP", "DOM.RP", "DOM.XP", "DOM.PC",
    "USA.EP", "USA.PW", "USA.SP",
    "INT.XP", "INT.IP", "INT.SP",
})

# (all of, any of, code) - evaluated in order, first match wins.
# Ground/regular/standard deliberately map to expedited.
SERVICE_KEYWORD_RULES: tuple[tuple[tuple[str, ...], tuple[str, ...], str], ...] = (
    ((), ("REGULAR", "GROUND", "STANDARD"), "DOM.EP"),
    ((), ("EXPEDITED",), "DOM.EP"),
    ((), ("XPRESS", "EXPRESS"), "DOM.XP"),
    ((), ("PRIORITY",), "DOM.PC"),
    (("USA", "PACKET"), (), "USA.SP"),
    (("USA", "EXPEDITED"), (), "USA.EP"),
)

KG_THRESHOLD = 50  # <= 50 は kg とみなす
ONE_DECIMAL = Decimal("0.1")

_NUMBER_PREFIX_RX = re.compile(r"^\s*[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?")
_INT_PREFIX_RX = re.compile(r"^\s*[-+]?\d+")
_NON_DIGIT_RX = re.compile(r"\D")
_WHITESPACE_RX = re.compile(r"\s")
_NON_AMOUNT_RX = re.compile(r"[^\d.]")


def as_text(value: Any) -> str:
    """Render a cell value as text; whole floats lose their ``.0`` (5195551234.0 -> "5195551234")."""
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value)


def to_number(value: Any) -> float | None:
    """Parse a leading number out of a cell ("2.5 kg" -> 2.5).

    None when there is no number or it is not finite ("1e400", NaN).
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        text = value
    else:
        m = _NUMBER_PREFIX_RX.match(str(value))
        if m is None:
            return None
        text = m.group(0)
    try:
        number = float(text)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def truncate(value: Any, max_length: int) -> str:
    return as_text(value)[:max_length]


def truncate_with_suffix(base: Any, suffix: str, max_length: int) -> str:
    """Truncate ``base`` so that ``base + suffix`` fits, keeping the suffix whole."""
    room = max(0, max_length - len(suffix))
    return as_text(base)[:room] + suffix


def clean_phone(value: Any) -> str:
    return _NON_DIGIT_RX.sub("", as_text(value))[:FIELD_LIMITS["phone"]]


def clean_postal_code(value: Any) -> str:
    return _WHITESPACE_RX.sub("", as_text(value)).upper()[:FIELD_LIMITS["postal_code"]]


def normalize_country(value: Any) -> str:
    text = as_text(value).strip().upper()
    if not text:
        return DEFAULT_COUNTRY
    if text in COUNTRY_ALIASES:
        return COUNTRY_ALIASES[text]
    if len(text) == 2:
        return text
    return DEFAULT_COUNTRY


def normalize_province(value: Any) -> str:
    """Full province/territory names -> 2-letter code; anything else unchanged."""
    text = as_text(value).strip()
    if len(text) == 2:
        return text
    return PROVINCE_CODES.get(text.upper(), text)


def convert_weight_to_grams(value: Any, default_weight: int) -> int:
    """Values <= 50 are kilograms, larger values are already grams.

    Missing, zero or non-numeric weights yield ``default_weight`` unchanged.
    """
    number = to_number(value)
    if not number:
        return default_weight
    grams = number * 1000 if number <= KG_THRESHOLD else number
    return int(math.floor(grams + 0.5))


def _format_number(number: float) -> str:
    if float(number).is_integer():
        return str(int(number))
    # 二進値そのものを半上げで丸める (12.25 -> 12.3, 0.15 -> 0.1)
    return str(Decimal(number).quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP))


def format_dimension(value: Any, default_value: float) -> str:
    number = to_number(value)
    if not number:
        return _format_number(default_value)
    return _format_number(number)


def normalize_service_code(value: Any, default_service: str) -> str:
    text = as_text(value).strip()
    if not text:
        return default_service
    s = text.upper()
    if s in VALID_SERVICE_CODES:
        return s
    for all_of, any_of, code in SERVICE_KEYWORD_RULES:
        if all(k in s for k in all_of) and (not any_of or any(k in s for k in any_of)):
            return code
    return default_service


def parse_amount(value: Any) -> float:
    """Order amount with currency symbols and separators stripped; 0.0 when unparsable."""
    cleaned = _NON_AMOUNT_RX.sub("", as_text(value))
    try:
        return float(cleaned)
    except ValueError:
        return 0.0


def parse_quantity(value: Any) -> int:
    m = _INT_PREFIX_RX.match(as_text(value))
    if m is None:
        return 1
    return int(m.group(0)) or 1
