import re
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, computed_field, field_validator

PHONE_PATTERN = r"^[6-9]\d{9}$"
PINCODE_PATTERN = r"^\d{6}$"
CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


class OrderStatus(str, Enum):
    pending = "pending"
    packed = "packed"
    shipped = "shipped"
    delivered = "delivered"
    cancelled = "cancelled"


class PaymentMethod(str, Enum):
    cod = "cod"
    online = "online"


# --- Order intent (client -> server), no price fields ---

class OrderItemIn(BaseModel):
    id: str = Field(..., min_length=1, description="Product id")
    size: Optional[str] = Field(None, description="Variant label, e.g. 50g")
    quantity: int = Field(1, ge=1)

    @field_validator("id")
    @classmethod
    def strip_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Product id is required")
        return v


class OrderIntent(BaseModel):
    # Unknown keys such as "price" or "total" are dropped, never trusted.
    model_config = ConfigDict(extra="ignore")

    customer_name: str = Field(..., min_length=2, max_length=100)
    phone: str = Field(..., pattern=PHONE_PATTERN)
    email: EmailStr
    address: str = Field(..., min_length=10, max_length=500)
    pincode: str = Field(..., pattern=PINCODE_PATTERN)
    items: List[OrderItemIn] = Field(default_factory=list)
    payment_method: PaymentMethod = PaymentMethod.cod
    user_id: Optional[str] = None
    freeDeliveryFor50Plus: bool = False
    coupon_code: Optional[str] = None
    # Accepted for wire compatibility only; the promo is re-checked server-side.
    coupon_applied: bool = False

    @field_validator("customer_name", "phone", "address", "pincode", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


# --- Order record (server-authoritative) ---

class OrderItem(BaseModel):
    id: str
    name: Optional[str] = None
    product_name: Optional[str] = None
    size: str = ""
    price: float = Field(..., ge=0)
    quantity: int = Field(..., ge=1)

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v):
        return str(v)

    @property
    def line_total(self) -> float:
        return float(to_money(Decimal(str(self.price)) * self.quantity))


class OrderRecord(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    customer_name: str
    phone: str
    email: str
    address: str
    pincode: str
    items: List[OrderItem]
    total_price: float
    payment_method: str
    status: OrderStatus = OrderStatus.pending
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator("id", "user_id", mode="before")
    @classmethod
    def stringify_ids(cls, v):
        return str(v) if v is not None else v

    @computed_field
    @property
    def subtotal(self) -> float:
        return float(sum((to_money(item.line_total) for item in self.items), Decimal("0")))

    @computed_field
    @property
    def delivery_fee(self) -> float:
        # Both sides rounded to cents, so the difference is exactly 0 or the flat charge.
        return float(to_money(self.total_price) - to_money(self.subtotal))


class OrderCreated(BaseModel):
    success: bool = True
    order: OrderRecord


class OrderList(BaseModel):
    orders: List[OrderRecord]


class GuestOrderLookup(BaseModel):
    email: EmailStr
    pincode: Optional[str] = None
    start: int = Field(0, ge=0)
    limit: int = Field(5, ge=1)

    @field_validator("pincode", mode="before")
    @classmethod
    def blank_pincode(cls, v):
        if isinstance(v, str):
            v = v.strip()
        return v or None


class StatusUpdate(BaseModel):
    status: OrderStatus


class OrderSummary(BaseModel):
    total: int
    pending: int
    packed: int
    shipped: int
    delivered: int
    cancelled: int


# --- Promo ---

class PromoIn(BaseModel):
    code: Optional[str] = ""


class PromoOut(BaseModel):
    valid: bool
    message: str


# --- Catalog ---

class VariantOut(BaseModel):
    size: str
    price: float


class ProductOut(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    variants: List[VariantOut] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v):
        return str(v)


# --- Contact form ---

class ContactMessage(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    phone: Optional[str] = None
    message: str = Field(..., min_length=10, max_length=1000)

    @field_validator("phone", mode="before")
    @classmethod
    def optional_phone(cls, v):
        if isinstance(v, str):
            v = v.strip()
        if not v:
            return None
        if not re.match(PHONE_PATTERN, v):
            raise ValueError("Enter a valid 10-digit phone number")
        return v


class DispatchResult(BaseModel):
    type: str
    ok: bool
    error: Optional[str] = None
