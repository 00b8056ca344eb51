"""Shopper-side cart that survives restarts.

The cart belongs to one browsing session. Prices kept here are for display only;
the server re-prices every line when the order is placed.
"""
import json
import logging
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger("CART")
logger.setLevel(logging.INFO)


def cart_key(product_id: str, size: Optional[str]) -> str:
    return f"{product_id}::{size or ''}"


class CartLine(BaseModel):
    id: str
    size: Optional[str] = None
    name: Optional[str] = None
    price: float = 0
    quantity: int = Field(1, ge=1)
    cartId: Optional[str] = None

    @property
    def key(self) -> str:
        return self.cartId or cart_key(self.id, self.size)


# --- storages ---

class MemoryCartStorage:
    def __init__(self, text: Optional[str] = None):
        self.text = text

    def load(self) -> Optional[str]:
        return self.text

    def save(self, text: str) -> None:
        self.text = text

    def clear(self) -> None:
        self.text = None


class FileCartStorage:
    """JSON file on disk, the desktop stand-in for browser local storage."""

    def __init__(self, path):
        self.path = Path(path)

    def load(self) -> Optional[str]:
        if not self.path.exists():
            return None
        return self.path.read_text(encoding="utf-8")

    def save(self, text: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(text, encoding="utf-8")

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()


class CartStore:
    def __init__(self, storage=None):
        self.storage = storage if storage is not None else MemoryCartStorage()
        self._lines: Dict[str, CartLine] = self._load()

    def _load(self) -> Dict[str, CartLine]:
        try:
            raw = self.storage.load()
            if not raw:
                return {}
            parsed = json.loads(raw) or []
            lines = [CartLine.model_validate(entry) for entry in parsed]
        except (OSError, ValueError, TypeError, ValidationError) as e:
            logger.warning(f"Discarding unreadable saved cart: {e}")
            return {}
        loaded: Dict[str, CartLine] = {}
        for line in lines:
            # Stored cartIds are not trusted; older carts have none.
            key = cart_key(line.id, line.size)
            line.cartId = key
            if key in loaded:
                loaded[key].quantity += line.quantity
            else:
                loaded[key] = line
        return loaded

    def _persist(self) -> None:
        data = [line.model_dump() for line in self._lines.values()]
        self.storage.save(json.dumps(data))

    @property
    def lines(self) -> List[CartLine]:
        return list(self._lines.values())

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[CartLine]:
        return iter(self.lines)

    def get(self, key: str) -> Optional[CartLine]:
        return self._lines.get(key)

    def add_item(self, product_id: str, size: Optional[str], price: float, name: Optional[str] = None) -> CartLine:
        key = cart_key(product_id, size)
        line = self._lines.get(key)
        if line:
            line.quantity += 1
        else:
            line = CartLine(id=product_id, size=size, name=name, price=price, quantity=1, cartId=key)
            self._lines[key] = line
        self._persist()
        return line

    def update_quantity(self, key: str, quantity: int) -> None:
        if quantity <= 0:
            self.remove_item(key)
            return
        line = self._lines.get(key)
        if line:
            line.quantity = quantity
        self._persist()

    def remove_item(self, key: str) -> None:
        self._lines.pop(key, None)
        self._persist()

    def clear(self) -> None:
        self._lines = {}
        self.storage.clear()

    def total(self) -> float:
        return sum(line.price * line.quantity for line in self._lines.values())

    def to_order_items(self) -> List[dict]:
        """Unpriced item list for an order request."""
        return [{"id": line.id, "size": line.size, "quantity": line.quantity} for line in self._lines.values()]
