from __future__ import annotations

import datetime as dt
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class Collection(str, Enum):
    ORDERS = "orders"
    RESERVATIONS = "reservations"
    CONTACT_MESSAGES = "contact_messages"


class OrderStatus(str, Enum):
    PENDING = "pending"
    PREPARING = "preparing"
    SERVED = "served"


_NEXT_STATUS = {
    OrderStatus.PENDING: OrderStatus.PREPARING,
    OrderStatus.PREPARING: OrderStatus.SERVED,
}

ORDER_ACTION_LABELS = {
    OrderStatus.PENDING: "Start Prep",
    OrderStatus.PREPARING: "Serve Order",
}


def next_status(status: OrderStatus | str) -> Optional[OrderStatus]:
    """The single legal successor of ``status``; ``None`` once served."""
    return _NEXT_STATUS.get(OrderStatus(status))


class Order(SQLModel, table=True):
    __tablename__ = "orders"

    id: str = Field(default_factory=new_id, primary_key=True)
    table_id: str = Field(index=True)
    line_items: list[dict] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    subtotal: Decimal = Field(default=Decimal("0"), ge=0, max_digits=10, decimal_places=2)
    status: str = Field(default=OrderStatus.PENDING.value, index=True)
    created_at: datetime = Field(default_factory=utc_now, index=True)


class Reservation(SQLModel, table=True):
    __tablename__ = "reservations"

    id: str = Field(default_factory=new_id, primary_key=True)
    name: str
    email: str
    guests: int = Field(default=1, ge=1)
    date: dt.date = Field(index=True)
    time: dt.time
    status: str = Field(default="confirmed")
    created_at: datetime = Field(default_factory=utc_now, index=True)


class ContactMessage(SQLModel, table=True):
    __tablename__ = "contact_messages"

    id: str = Field(default_factory=new_id, primary_key=True)
    name: str
    email: str
    message: str
    is_read: bool = Field(default=False, index=True)
    created_at: datetime = Field(default_factory=utc_now, index=True)


TABLES = {
    Collection.ORDERS: Order,
    Collection.RESERVATIONS: Reservation,
    Collection.CONTACT_MESSAGES: ContactMessage,
}


__all__ = [
    "Collection",
    "ContactMessage",
    "ORDER_ACTION_LABELS",
    "Order",
    "OrderStatus",
    "Reservation",
    "TABLES",
    "next_status",
    "utc_now",
]
