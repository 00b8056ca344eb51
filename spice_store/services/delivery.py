import re
from decimal import Decimal
from typing import Iterable

from spice_store.models.schemas import OrderItem

DELIVERY_CHARGE = Decimal("100")
BULK_THRESHOLD_GRAMS = 50

_NON_DIGITS = re.compile(r"[^0-9]")


def parse_size_grams(label) -> int:
    """'50g' -> 50, 'bulk' -> 0."""
    digits = _NON_DIGITS.sub("", str(label or ""))
    return int(digits) if digits else 0


def has_bulk_line(items: Iterable[OrderItem]) -> bool:
    return any(parse_size_grams(item.size) >= BULK_THRESHOLD_GRAMS for item in items)


def delivery_fee(items: Iterable[OrderItem], free_delivery_requested: bool, promo_applied: bool) -> Decimal:
    if promo_applied:
        return Decimal("0")
    if free_delivery_requested and has_bulk_line(items):
        return Decimal("0")
    return DELIVERY_CHARGE
