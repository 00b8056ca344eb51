import logging
from typing import Any, Dict, List, Optional

from supabase import Client, create_client

from spice_store.core.config import get_settings
from spice_store.core.errors import ConfigurationError
from spice_store.core.retry import DEFAULT_ATTEMPTS, retry_call

logger = logging.getLogger("SUPABASE")
logger.setLevel(logging.INFO)

supabase = None


def get_client() -> Client:
    global supabase
    if supabase is None:
        settings = get_settings()
        if not settings.SUPABASE_URL or not settings.supabase_key:
            logger.error("SUPABASE_URL / service key missing from the environment")
            raise ConfigurationError("Supabase URL/Key not configured. See .env")
        supabase = create_client(settings.SUPABASE_URL, settings.supabase_key)
    return supabase


class SupabaseStore:
    """Table access used by the order pipeline.

    Every call crosses the network, so each one goes through ``retry_call``.
    """

    def __init__(self, client: Client, attempts: int = DEFAULT_ATTEMPTS):
        self.client = client
        self.attempts = attempts

    def _run(self, query, label: str):
        return retry_call(query.execute, attempts=self.attempts, label=label)

    # --- catalog ---

    def get_product(self, product_id: str) -> Optional[Dict[str, Any]]:
        res = self._run(
            self.client.table("products").select("*").eq("id", product_id).limit(1),
            "get_product",
        )
        return res.data[0] if res.data else None

    def list_products(self) -> List[Dict[str, Any]]:
        res = self._run(
            self.client.table("products").select("*").order("created_at", desc=True),
            "list_products",
        )
        return res.data or []

    def list_variants(self, product_id: str) -> List[Dict[str, Any]]:
        res = self._run(
            self.client.table("product_variants").select("size,price").eq("product_id", product_id),
            "list_variants",
        )
        return res.data or []

    def get_variant_price(self, product_id: str, size: str) -> Optional[float]:
        res = self._run(
            self.client.table("product_variants")
            .select("price")
            .eq("product_id", product_id)
            .eq("size", size)
            .limit(1),
            "get_variant_price",
        )
        if res.data:
            return float(res.data[0]["price"])
        return None

    # --- orders ---

    def insert_order(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        res = self._run(self.client.table("orders").insert(payload), "insert_order")
        return res.data[0]

    def get_order(self, order_id: str) -> Optional[Dict[str, Any]]:
        res = self._run(
            self.client.table("orders").select("*").eq("id", order_id).limit(1),
            "get_order",
        )
        return res.data[0] if res.data else None

    def update_order_status(self, order_id: str, status: str) -> Dict[str, Any]:
        res = self._run(
            self.client.table("orders").update({"status": status}).eq("id", order_id),
            "update_order_status",
        )
        return res.data[0] if res.data else {}

    def find_orders(self, filters: Dict[str, Any], start: int, limit: int) -> List[Dict[str, Any]]:
        query = self.client.table("orders").select("*")
        for column, value in filters.items():
            query = query.eq(column, value)
        query = query.order("created_at", desc=True).range(start, start + limit - 1)
        return self._run(query, "find_orders").data or []

    def count_orders(self, status: Optional[str] = None) -> int:
        query = self.client.table("orders").select("id", count="exact")
        if status:
            query = query.eq("status", status)
        return self._run(query, "count_orders").count or 0

    # --- auth ---

    def resolve_user(self, token: str) -> Optional[Dict[str, Any]]:
        res = retry_call(self.client.auth.get_user, token, attempts=self.attempts, label="get_user")
        user = getattr(res, "user", None)
        if not user or not user.id:
            return None
        return {"id": str(user.id), "email": getattr(user, "email", None)}

    def is_admin(self, user_id: str) -> bool:
        res = self._run(
            self.client.table("user_roles")
            .select("role")
            .eq("user_id", user_id)
            .eq("role", "admin")
            .limit(1),
            "is_admin",
        )
        return bool(res.data)
