import logging
import time
from typing import Any, Dict, List, Optional

import httpx

from spice_store.cart import CartStore
from spice_store.core.errors import TransientBackendError
from spice_store.core.retry import DEFAULT_ATTEMPTS, retry_call
from spice_store.services.delivery import BULK_THRESHOLD_GRAMS, parse_size_grams

logger = logging.getLogger("STOREFRONT")
logger.setLevel(logging.INFO)


class CheckoutError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _connect_failed(exc: BaseException) -> bool:
    # The request never left the machine, so resending cannot create a second order.
    return isinstance(exc, httpx.ConnectError)


def _backend_unavailable(exc: BaseException) -> bool:
    # A plain 500 is a deliberate answer, such as missing configuration, and resending will not change it.
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in (502, 503, 504)
    return isinstance(exc, httpx.TransportError)


class StorefrontClient:
    """Checkout flow against the store API, driven by a local ``CartStore``."""

    def __init__(self, base_url: str, cart: CartStore, token: Optional[str] = None,
                 http: Optional[httpx.Client] = None, attempts: int = DEFAULT_ATTEMPTS,
                 sleep=time.sleep):
        self.cart = cart
        self.token = token
        self.http = http or httpx.Client(base_url=base_url, timeout=30.0)
        self.attempts = attempts
        self.sleep = sleep
        self.promo_code: Optional[str] = None

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def _send(self, path: str, payload: dict) -> httpx.Response:
        r = self.http.post(path, json=payload, headers=self._headers())
        if r.status_code >= 500:
            r.raise_for_status()
        return r

    def _post(self, path: str, payload: dict, transient=_backend_unavailable) -> httpx.Response:
        try:
            return retry_call(self._send, path, payload, attempts=self.attempts,
                              transient=transient, sleep=self.sleep, label=f"POST {path}")
        except httpx.HTTPStatusError as e:
            raise CheckoutError(_error_text(e.response), e.response.status_code) from e
        except TransientBackendError as e:
            cause = e.__cause__
            if isinstance(cause, httpx.HTTPStatusError):
                raise CheckoutError(_error_text(cause.response), cause.response.status_code) from e
            raise CheckoutError(e.user_message, e.status_code) from e

    @property
    def bulk_eligible(self) -> bool:
        return any(parse_size_grams(line.size) >= BULK_THRESHOLD_GRAMS for line in self.cart)

    def apply_promo(self, code: str) -> bool:
        code = (code or "").strip()
        if not code:
            raise CheckoutError("Enter a promo code to apply")
        r = self._post("/api/promo/validate", {"code": code})
        if r.status_code >= 400:
            raise CheckoutError(_error_text(r), r.status_code)
        valid = bool(r.json().get("valid"))
        self.promo_code = code if valid else None
        return valid

    def place_order(self, customer: Dict[str, str], payment_method: str = "cod",
                    free_delivery_requested: bool = False) -> Dict[str, Any]:
        """Submit the cart as an unpriced order and clear it once the server accepts."""
        if not len(self.cart):
            raise CheckoutError("Your cart is empty")
        payload = {
            "customer_name": customer.get("name") or customer.get("customer_name"),
            "phone": customer.get("phone"),
            "email": customer.get("email"),
            "address": customer.get("address"),
            "pincode": customer.get("pincode"),
            "items": self.cart.to_order_items(),
            "payment_method": payment_method,
            "user_id": customer.get("user_id"),
            "freeDeliveryFor50Plus": bool(free_delivery_requested and self.bulk_eligible),
            "coupon_code": self.promo_code,
            "coupon_applied": self.promo_code is not None,
        }
        r = self._post("/api/orders", payload, transient=_connect_failed)
        if r.status_code >= 400:
            raise CheckoutError(_error_text(r), r.status_code)
        order = r.json()["order"]
        self.cart.clear()
        self.promo_code = None
        logger.info(f"Order {order.get('id')} placed")
        return order

    def lookup_orders(self, email: str, pincode: Optional[str] = None,
                      start: int = 0, limit: int = 5) -> List[Dict[str, Any]]:
        r = self._post("/api/orders/lookup", {"email": email, "pincode": pincode, "start": start, "limit": limit})
        if r.status_code >= 400:
            raise CheckoutError(_error_text(r), r.status_code)
        return r.json().get("orders", [])


def _error_text(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    return body.get("error") or body.get("message") or body.get("detail") or f"HTTP {response.status_code}"
