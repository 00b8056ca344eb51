import logging
from decimal import Decimal
from typing import Dict, List, Optional, Set

from spice_store.core.errors import (
    ConfigurationError,
    InvalidOrder,
    InvalidStatusTransition,
    OrderNotFound,
)
from spice_store.models.schemas import OrderIntent, OrderRecord, OrderStatus, OrderSummary, to_money
from spice_store.services.delivery import delivery_fee
from spice_store.services.pricing import resolve_line
from spice_store.services.promo import PromoValidator

logger = logging.getLogger("ORDERS")
logger.setLevel(logging.INFO)

DEFAULT_PAGE_SIZE = 5
MAX_PAGE_SIZE = 50

# pending -> packed -> shipped -> delivered, cancellation only before shipping.
ALLOWED_TRANSITIONS: Dict[OrderStatus, Set[OrderStatus]] = {
    OrderStatus.pending: {OrderStatus.packed, OrderStatus.cancelled},
    OrderStatus.packed: {OrderStatus.shipped, OrderStatus.cancelled},
    OrderStatus.shipped: {OrderStatus.delivered},
    OrderStatus.delivered: set(),
    OrderStatus.cancelled: set(),
}


def promo_applies(promo: PromoValidator, code: Optional[str]) -> bool:
    if not code or not code.strip():
        return False
    try:
        return promo.is_valid(code)
    except ConfigurationError:
        # Misconfigured promo never blocks an order, the customer just pays delivery.
        logger.error("Promo code supplied but no promo is configured; charging delivery")
        return False


def create_order(store, intent: OrderIntent, promo: PromoValidator,
                 user_id: Optional[str] = None) -> OrderRecord:
    """Price an order intent on the server and store it as a pending order.

    ``user_id`` is the identity resolved from the caller's credential; when given it
    replaces whatever the client put in the intent. Every line is priced before the
    single insert, so a missing product leaves nothing behind.
    """
    if not intent.items:
        raise InvalidOrder("No items provided")

    items = [resolve_line(store, line) for line in intent.items]

    subtotal = sum((to_money(item.line_total) for item in items), Decimal("0"))
    promo_ok = promo_applies(promo, intent.coupon_code)
    if intent.coupon_applied and not promo_ok:
        logger.warning(f"Client claimed coupon '{intent.coupon_code}' but it did not validate")
    fee = delivery_fee(items, intent.freeDeliveryFor50Plus, promo_ok)
    total = subtotal + fee

    payload = {
        "customer_name": intent.customer_name,
        "phone": intent.phone,
        "email": str(intent.email),
        "address": intent.address,
        "pincode": intent.pincode,
        "items": [item.model_dump() for item in items],
        "total_price": float(total),
        "payment_method": intent.payment_method.value,
        "status": OrderStatus.pending.value,
        "user_id": user_id or intent.user_id,
    }
    inserted = store.insert_order(payload)
    order = OrderRecord.model_validate({**payload, **(inserted or {})})
    logger.info(f"Order {order.id} created: {len(items)} line(s), subtotal {subtotal}, delivery {fee}, total {total}")
    return order


def check_transition(current: OrderStatus, requested: OrderStatus) -> bool:
    """True when the status actually changes, False for a same-status no-op."""
    if current == requested:
        return False
    if requested not in ALLOWED_TRANSITIONS[current]:
        raise InvalidStatusTransition(current.value, requested.value)
    return True


def update_status(store, order_id: str, new_status: OrderStatus) -> OrderRecord:
    row = store.get_order(order_id)
    if not row:
        raise OrderNotFound(order_id)
    order = OrderRecord.model_validate(row)
    if not check_transition(order.status, new_status):
        return order
    updated = store.update_order_status(order_id, new_status.value)
    logger.info(f"Order {order_id}: {order.status.value} -> {new_status.value}")
    return OrderRecord.model_validate({**row, **(updated or {}), "status": new_status.value})


def _page(start: int, limit: int):
    start = max(0, int(start or 0))
    limit = max(1, min(int(limit or DEFAULT_PAGE_SIZE), MAX_PAGE_SIZE))
    return start, limit


def _records(rows) -> List[OrderRecord]:
    return [OrderRecord.model_validate(row) for row in rows]


def find_guest_orders(store, email: str, pincode: Optional[str] = None,
                      start: int = 0, limit: int = DEFAULT_PAGE_SIZE) -> List[OrderRecord]:
    filters = {"email": email.strip()}
    if pincode:
        filters["pincode"] = pincode.strip()
    start, limit = _page(start, limit)
    return _records(store.find_orders(filters, start, limit))


def list_user_orders(store, user_id: Optional[str], email: Optional[str] = None,
                     start: int = 0, limit: int = DEFAULT_PAGE_SIZE) -> List[OrderRecord]:
    start, limit = _page(start, limit)
    if user_id:
        return _records(store.find_orders({"user_id": user_id}, start, limit))
    if email:
        return _records(store.find_orders({"email": email.strip()}, start, limit))
    return []


def list_orders(store, status: Optional[OrderStatus] = None,
                start: int = 0, limit: int = DEFAULT_PAGE_SIZE) -> List[OrderRecord]:
    filters = {"status": status.value} if status else {}
    start, limit = _page(start, limit)
    return _records(store.find_orders(filters, start, limit))


def order_summary(store) -> OrderSummary:
    counts = {s.value: store.count_orders(s.value) for s in OrderStatus}
    return OrderSummary(total=store.count_orders(), **counts)
