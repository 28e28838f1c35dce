from __future__ import annotations

import datetime as dt
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import OrderStatus

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


# -------------------------
# Stored records
# -------------------------

class OrderLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    quantity: int = Field(ge=1)
    unit_price: Decimal = Field(ge=0)

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class OrderRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    table_id: str
    line_items: List[OrderLine]
    subtotal: Decimal
    status: OrderStatus = OrderStatus.PENDING
    created_at: datetime


class ReservationRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    guests: int = Field(ge=1)
    date: dt.date
    time: dt.time
    status: str = "confirmed"
    created_at: datetime


class ContactMessageRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    message: str
    is_read: bool = False
    created_at: datetime


# -------------------------
# Customer input
# -------------------------

class _ContactFields(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    email: str = Field(pattern=EMAIL_PATTERN, max_length=254)

    @field_validator("name", "email", mode="before")
    @classmethod
    def strip_text(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value


class ReservationCreate(_ContactFields):
    guests: int = Field(ge=1)
    date: dt.date
    time: dt.time


class ContactMessageCreate(_ContactFields):
    message: str = Field(min_length=1, max_length=5000)

    @field_validator("message", mode="before")
    @classmethod
    def strip_message(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value


class CartItemAdd(BaseModel):
    name: str


class CartQuantityUpdate(BaseModel):
    delta: int


class CheckoutRequest(BaseModel):
    table_id: Optional[str] = None


class OrderAdvance(BaseModel):
    seen_status: Optional[OrderStatus] = None


# -------------------------
# Responses
# -------------------------

class MenuItemRead(BaseModel):
    name: str
    category: str
    price: Decimal
    description: Optional[str] = None


class MenuResponse(BaseModel):
    groups: Dict[str, Dict[str, List[MenuItemRead]]]


class CartLineRead(BaseModel):
    name: str
    category: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal


class CartRead(BaseModel):
    table_id: Optional[str] = None
    lines: List[CartLineRead]
    item_count: int
    subtotal: Decimal
    tax: Decimal
    total: Decimal


class StorefrontResponse(BaseModel):
    view: str
    table_id: Optional[str] = None
    cart: CartRead


class NoticeRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: Optional[str] = None
    expires_at: datetime


class NoticesResponse(BaseModel):
    notices: List[NoticeRead]
    order_placed: Optional[NoticeRead] = None


class OrderPlacedResponse(BaseModel):
    order: OrderRecord
    total: Decimal
    confirmation: NoticeRead


class StaffOrderRead(OrderRecord):
    next_action: Optional[str] = None
    total: Decimal


class DashboardResponse(BaseModel):
    is_loading: bool
    orders: List[StaffOrderRead]
    reservations: List[ReservationRecord]
    messages: List[ContactMessageRecord]
    active_order_count: int
    unread_message_count: int
    reservation_count: int
    notices: List[NoticeRead] = Field(default_factory=list)


class ClearResponse(BaseModel):
    collection: str
    deleted: int
