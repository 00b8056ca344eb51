import logging
from html import escape
from typing import Any, Dict, List, Optional

import httpx

from spice_store.core.errors import ConfigurationError
from spice_store.models.schemas import ContactMessage, DispatchResult, OrderRecord

logger = logging.getLogger("NOTIFY")
logger.setLevel(logging.INFO)

RESEND_URL = "https://api.resend.com/emails"
STORE_NAME = "Royal Pure Spices"


class ResendMailer:
    """Thin async client for the Resend transactional email API."""

    def __init__(self, api_key: Optional[str], from_email: str,
                 transport: Optional[httpx.AsyncBaseTransport] = None, timeout: float = 15.0):
        self.api_key = api_key
        self.from_email = from_email
        self.transport = transport
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def send(self, to: str, subject: str, html: str) -> Dict[str, Any]:
        if not self.api_key:
            raise ConfigurationError("RESEND_API_KEY not configured")
        payload = {"from": self.from_email, "to": [to], "subject": subject, "html": html}
        headers = {"Authorization": f"Bearer {self.api_key}"}
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            r = await client.post(RESEND_URL, json=payload, headers=headers)
            r.raise_for_status()
            return r.json()


# --- Email bodies ---

def short_order_id(order_id: str) -> str:
    return str(order_id or "")[:8].upper()


def _money(value: float) -> str:
    return f"₹{value:.2f}"


def _payment_label(method: str) -> str:
    return "Cash on Delivery" if method == "cod" else "Online Payment"


def items_table_rows(order: OrderRecord) -> str:
    rows = []
    for item in order.items:
        name = escape(item.name or item.product_name or "Item")
        size = f" ({escape(item.size)})" if item.size else ""
        rows.append(
            f"<tr><td>{name}{size}</td><td>{item.quantity}</td>"
            f"<td>{_money(item.price)}</td><td>{_money(item.line_total)}</td></tr>"
        )
    return "".join(rows)


def customer_email_html(order: OrderRecord) -> str:
    delivery = "FREE" if order.delivery_fee == 0 else _money(order.delivery_fee)
    return f"""
    <html><body>
        <h1>{STORE_NAME}</h1>
        <h2>Thank you for your order, {escape(order.customer_name)}!</h2>
        <p><strong>Order ID:</strong> {escape(order.id)}</p>
        <p><strong>Payment Method:</strong> {_payment_label(order.payment_method)}</p>
        <table border="1" style="width:100%;border-collapse: collapse;">
        <tr><th>Item</th><th>Qty</th><th>Price</th><th>Total</th></tr>
        {items_table_rows(order)}
        <tr><td colspan="3">Subtotal</td><td>{_money(order.subtotal)}</td></tr>
        <tr><td colspan="3">Delivery</td><td>{delivery}</td></tr>
        <tr><td colspan="3"><strong>Total</strong></td><td><strong>{_money(order.total_price)}</strong></td></tr>
        </table>
        <h3>Delivery Address</h3>
        <p>{escape(order.customer_name)}<br>{escape(order.address)}<br>
        Pincode: {escape(order.pincode)}<br>Phone: {escape(order.phone)}</p>
    </body></html>
    """


def admin_email_html(order: OrderRecord) -> str:
    return f"""
    <html><body>
        <h1>New Order Received!</h1>
        <p><strong>Order ID:</strong> {escape(order.id)}</p>
        <p><strong>Total Amount:</strong> {_money(order.total_price)}</p>
        <p><strong>Payment:</strong> {_payment_label(order.payment_method)}</p>
        <h3>Customer Details</h3>
        <p>Name: {escape(order.customer_name)}<br>Email: {escape(order.email)}<br>
        Phone: {escape(order.phone)}<br>Address: {escape(order.address)}, {escape(order.pincode)}</p>
        <table border="1" style="width:100%;border-collapse: collapse;">
        <tr><th>Item</th><th>Qty</th><th>Price</th><th>Total</th></tr>
        {items_table_rows(order)}
        </table>
        <p>Please process this order and update the status in the admin dashboard.</p>
    </body></html>
    """


def contact_email_html(msg: ContactMessage) -> str:
    body = escape(msg.message).replace("\n", "<br />")
    return f"""
    <h2>New contact form submission</h2>
    <p><strong>Name:</strong> {escape(msg.name)}</p>
    <p><strong>Email:</strong> {escape(msg.email)}</p>
    <p><strong>Phone:</strong> {escape(msg.phone or "-")}</p>
    <p><strong>Message:</strong></p>
    <p>{body}</p>
    """


class NotificationDispatcher:
    """Sends order and contact emails.

    ``dispatch_order`` is scheduled as a background task after the order is stored;
    it never raises, failures only end up in the log and the returned results.
    """

    def __init__(self, mailer: ResendMailer, admin_email: Optional[str] = None):
        self.mailer = mailer
        self.admin_email = admin_email

    async def _send(self, kind: str, to: str, subject: str, html: str) -> DispatchResult:
        try:
            await self.mailer.send(to, subject, html)
            logger.info(f"{kind} email sent to {to}")
            return DispatchResult(type=kind, ok=True)
        except Exception as e:
            logger.error(f"Failed to send {kind} email: {e}")
            return DispatchResult(type=kind, ok=False, error=str(e))

    async def dispatch_order(self, order: OrderRecord) -> List[DispatchResult]:
        tag = short_order_id(order.id)
        results = [
            await self._send(
                "customer", order.email,
                f"Order Confirmation - #{tag}",
                customer_email_html(order),
            )
        ]
        if self.admin_email:
            results.append(await self._send(
                "admin", self.admin_email,
                f"New Order - #{tag} - {_money(order.total_price)}",
                admin_email_html(order),
            ))
        else:
            logger.warning("ADMIN_EMAIL not configured; skipping admin alert")
        failed = [r for r in results if not r.ok]
        if failed:
            logger.error(f"Order {order.id}: {len(failed)} notification(s) failed")
        return results

    async def send_contact_message(self, msg: ContactMessage) -> Dict[str, Any]:
        if not self.mailer.configured:
            logger.error("send_contact_message: RESEND_API_KEY is not configured")
            raise ConfigurationError("RESEND_API_KEY not configured")
        results = []
        if self.admin_email:
            results.append(await self._send(
                "admin_email", self.admin_email,
                f"New contact form: {msg.name}",
                contact_email_html(msg),
            ))
        else:
            logger.warning("ADMIN_EMAIL not configured; skipping admin notification")
        ack = (
            f"<p>Hi {escape(msg.name)},</p>"
            "<p>Thanks for reaching out. We've received your message and will get back to you soon.</p>"
            f"<hr />{contact_email_html(msg)}"
        )
        results.append(await self._send(
            "user_email", msg.email,
            f"Thanks for contacting {STORE_NAME}, {msg.name}",
            ack,
        ))
        return {
            "success": True,
            "results": [r.model_dump() for r in results if r.ok],
            "errors": [r.model_dump() for r in results if not r.ok],
        }
