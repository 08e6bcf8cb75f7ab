from __future__ import annotations

from dataclasses import dataclass

"""ShipmentRecord model.

One fully normalized, carrier-ready unit. Every string is already truncated to
the carrier's field limits, so serialization only escapes and emits.
"""

__all__ = [
    "ShipmentRecord",
]


@dataclass(frozen=True)
class ShipmentRecord:
    customer_ref: str  # <= 35 chars, "-{n}" suffix kept intact when duplicated
    company: str  # <= 44
    contact_name: str  # <= 44
    address_line_1: str  # <= 44
    address_line_2: str  # <= 44
    city: str  # <= 40
    province: str
    postal_code: str  # <= 14, no whitespace, upper-case
    country_code: str
    phone: str  # digits only, <= 25
    email: str  # <= 70
    service_code: str  # never empty
    length: str
    width: str
    height: str
    weight: int  # grams
    price: float = 0.0
    signature_required: bool = False
    notification_email: str = ""  # 通知無効 or メール無しなら空
