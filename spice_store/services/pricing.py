import logging
from decimal import Decimal

from spice_store.core.errors import ProductNotFound
from spice_store.models.schemas import OrderItem, OrderItemIn

logger = logging.getLogger("PRICING")
logger.setLevel(logging.INFO)

# Canonical size -> price table, used when a product has no variant row for a size.
SIZES = [
    ("10g", Decimal("140")),
    ("25g", Decimal("350")),
    ("50g", Decimal("700")),
    ("100g", Decimal("1400")),
]


def canonical_price(size_label: str) -> Decimal:
    for label, price in SIZES:
        if label == size_label:
            return price
    logger.warning(f"Unknown size label '{size_label}', charging {SIZES[0][0]} price")
    return SIZES[0][1]


def _price_for(store, product: dict, size_label: str) -> Decimal:
    """Authoritative price for one product/size pair. Client-side prices never reach here."""
    variant_price = store.get_variant_price(product["id"], size_label)
    if variant_price is not None:
        return Decimal(str(variant_price))
    return canonical_price(size_label)


def resolve_line(store, item: OrderItemIn) -> OrderItem:
    product = store.get_product(item.id)
    if not product:
        raise ProductNotFound(item.id)
    size_label = (item.size or "").strip()
    price = _price_for(store, product, size_label)
    name = product.get("name")
    return OrderItem(
        id=product["id"],
        name=name,
        product_name=name,
        size=size_label,
        price=float(price),
        quantity=item.quantity,
    )
