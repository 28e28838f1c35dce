"""Turning a customer's cart into a stored order."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, Optional

from .cart import Cart
from .errors import StoreError
from .models import Collection, OrderStatus, utc_now
from .notices import Notice
from .schemas import OrderLine, OrderRecord
from .store import Store

logger = logging.getLogger(__name__)

WALK_IN_TABLE = "Walk-in"
ORDER_CONFIRMATION_SECONDS = 5.0
ORDER_FAILED_MESSAGE = "We couldn't send your order to the kitchen. Your cart is saved, please try again."
ORDER_IN_PROGRESS_MESSAGE = "Your order is already on its way to the kitchen."


@dataclass(frozen=True)
class SubmissionResult:
    order: Optional[OrderRecord] = None
    confirmation: Optional[Notice] = None
    error: Optional[str] = None
    busy: bool = False

    @property
    def ok(self) -> bool:
        return self.order is not None


def resolve_table_id(table_id: str | None) -> str:
    if table_id is None or not table_id.strip():
        return WALK_IN_TABLE
    return table_id.strip()


def snapshot_lines(cart: Cart) -> list[OrderLine]:
    return [
        OrderLine(name=line.name, quantity=line.quantity, unit_price=line.item.price)
        for line in cart.lines
    ]


class OrderSubmission:
    def __init__(
        self,
        store: Store,
        *,
        clock: Callable[[], datetime] = utc_now,
        confirmation_ttl: float = ORDER_CONFIRMATION_SECONDS,
    ) -> None:
        self.store = store
        self.clock = clock
        self.confirmation_ttl = confirmation_ttl

    async def submit(self, cart: Cart, table_id: str | None = None) -> SubmissionResult | None:
        """Place the cart as a pending order.

        Returns ``None`` without touching anything when the cart is empty.
        While one submission of a cart is in flight, another returns a
        ``busy`` result instead of placing a second order. On success only
        the submitted quantities leave the cart, so items added meanwhile
        stay for the next order. On a store failure the cart is left as it
        was so the customer can retry.
        """
        if cart.is_empty:
            return None
        if cart.is_submitting:
            logger.info("Ignoring checkout for table %s, an order is already on its way", table_id)
            return SubmissionResult(error=ORDER_IN_PROGRESS_MESSAGE, busy=True)

        lines = snapshot_lines(cart)
        subtotal = sum((line.line_total for line in lines), Decimal("0"))
        data = {
            "table_id": resolve_table_id(table_id),
            "line_items": [line.model_dump() for line in lines],
            "subtotal": subtotal,
            "status": OrderStatus.PENDING,
        }
        cart.is_submitting = True
        try:
            order = await self.store.create(Collection.ORDERS, data)
        except StoreError as exc:
            logger.warning("Order for table %s was not placed: %s", data["table_id"], exc)
            return SubmissionResult(error=ORDER_FAILED_MESSAGE)
        finally:
            cart.is_submitting = False

        for line in lines:
            cart.update_quantity(line.name, -line.quantity)
        logger.info("Order %s placed for table %s", order.id, order.table_id)
        confirmation = Notice(
            id=order.id,
            title="Order placed!",
            description=f"Table {order.table_id}: we're on it.",
            expires_at=self.clock() + timedelta(seconds=self.confirmation_ttl),
        )
        return SubmissionResult(order=order, confirmation=confirmation)
