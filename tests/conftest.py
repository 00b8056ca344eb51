# Ensure project root (parent of tests) is on sys.path so `import spice_store...` works.
import sys
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)

from fastapi.testclient import TestClient  # noqa: E402

from spice_store.api import deps  # noqa: E402
from spice_store.core.config import Settings, get_settings  # noqa: E402
from spice_store.main import app  # noqa: E402


class FakeAuthError(Exception):
    status = 401


class FakeStore:
    """In-memory stand-in for SupabaseStore."""

    def __init__(self):
        self.products = {
            "P1": {"id": "P1", "name": "Natural Premium Hing", "description": "Pure asafoetida"},
            "P2": {"id": "P2", "name": "Kashmiri Saffron", "description": None},
        }
        # P1 has no variant rows and is priced from the canonical size table.
        self.variants = {
            ("P2", "10g"): 300.0,
            ("P2", "50g"): 1200.0,
        }
        self.orders = []
        self.users = {
            "user-token": {"id": "user-1", "email": "asha@example.com"},
            "admin-token": {"id": "admin-1", "email": "owner@example.com"},
        }
        self.admins = {"admin-1"}
        self.product_lookups = 0
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def get_product(self, product_id):
        self.product_lookups += 1
        return self.products.get(product_id)

    def list_products(self):
        return list(self.products.values())

    def list_variants(self, product_id):
        return [{"size": s, "price": p} for (pid, s), p in self.variants.items() if pid == product_id]

    def get_variant_price(self, product_id, size):
        return self.variants.get((product_id, size))

    def insert_order(self, payload):
        self._clock += timedelta(minutes=1)
        row = {**payload, "id": str(uuid.uuid4()), "created_at": self._clock.isoformat()}
        self.orders.append(row)
        return dict(row)

    def get_order(self, order_id):
        for row in self.orders:
            if row["id"] == order_id:
                return dict(row)
        return None

    def update_order_status(self, order_id, status):
        for row in self.orders:
            if row["id"] == order_id:
                row["status"] = status
                return dict(row)
        return {}

    def find_orders(self, filters, start, limit):
        rows = [r for r in self.orders if all(r.get(k) == v for k, v in filters.items())]
        rows.sort(key=lambda r: r["created_at"], reverse=True)
        return [dict(r) for r in rows[start:start + limit]]

    def count_orders(self, status=None):
        return len([r for r in self.orders if status is None or r["status"] == status])

    def resolve_user(self, token):
        if token not in self.users:
            raise FakeAuthError("invalid JWT")
        return dict(self.users[token])

    def is_admin(self, user_id):
        return user_id in self.admins


class RecordingDispatcher:
    def __init__(self):
        self.orders = []
        self.contacts = []

    async def dispatch_order(self, order):
        self.orders.append(order)
        return []

    async def send_contact_message(self, msg):
        self.contacts.append(msg)
        return {"success": True, "results": [], "errors": []}


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def settings():
    return Settings(PROMO_CODE="FREEDELIVERY", RESEND_API_KEY=None, ADMIN_EMAIL="owner@example.com")


@pytest.fixture
def client(store, dispatcher, settings):
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[deps.get_store] = lambda: store
    app.dependency_overrides[deps.get_dispatcher] = lambda: dispatcher
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def intent_payload():
    return {
        "customer_name": "Asha Verma",
        "phone": "9876543210",
        "email": "asha@example.com",
        "address": "12 MG Road, Indiranagar, Bengaluru",
        "pincode": "560038",
        "items": [{"id": "P1", "size": "10g", "quantity": 2}],
        "payment_method": "cod",
        "user_id": None,
        "freeDeliveryFor50Plus": False,
        "coupon_code": None,
        "coupon_applied": False,
    }
