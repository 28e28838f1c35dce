import asyncio
import logging
from decimal import Decimal
from typing import Iterable, List

import httpx

from .errors import StoreError
from .models import Collection
from .pricing import TAX_RATE, total_with_tax
from .schemas import ContactMessageRecord, OrderRecord, ReservationRecord
from .store import ChangeEvent, Store, Subscription

logger = logging.getLogger(__name__)

LINE_PUSH_URL = "https://api.line.me/v2/bot/message/push"
LINE_BROADCAST_URL = "https://api.line.me/v2/bot/message/broadcast"


def format_order(order: OrderRecord, tax_rate: Decimal = TAX_RATE) -> str:
    lines = [f"- {line.name} x{line.quantity}" for line in order.line_items]
    return (
        "🆕 New order\n"
        f"Table: {order.table_id}\n"
        + "\n".join(lines)
        + f"\nTotal: ${total_with_tax(order.subtotal, tax_rate)}"
    )


def format_reservation(reservation: ReservationRecord) -> str:
    return (
        "📅 New booking\n"
        f"{reservation.name} ({reservation.email})\n"
        f"{reservation.guests} guests on {reservation.date.isoformat()} at {reservation.time.strftime('%H:%M')}"
    )


def format_message(message: ContactMessageRecord) -> str:
    return f"✉️ New message from {message.name} ({message.email})\n{message.message}"


FORMATTERS = {
    Collection.ORDERS: format_order,
    Collection.RESERVATIONS: format_reservation,
    Collection.CONTACT_MESSAGES: format_message,
}


class LineNotifier:
    """Push new orders, bookings and messages to staff over LINE."""

    def __init__(
        self,
        store: Store,
        token: str,
        targets: Iterable[str] = (),
        *,
        tax_rate: Decimal = TAX_RATE,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.tax_rate = tax_rate
        self.store = store
        self.token = token
        self.targets: List[str] = list(targets)
        self.transport = transport
        self._subscriptions: List[Subscription] = []

    def attach(self) -> None:
        for collection in Collection:
            self._subscriptions.append(self.store.subscribe(collection, self.on_change))

    def detach(self) -> None:
        for handle in self._subscriptions:
            self.store.unsubscribe(handle)
        self._subscriptions.clear()

    async def on_change(self, event: ChangeEvent) -> None:
        if event.action != "create" or event.record_id is None:
            return
        try:
            record = await self.store.get(event.collection, event.record_id)
        except StoreError as exc:
            logger.warning("Skipping LINE notification for %s: %s", event.record_id, exc)
            return
        if record is None:
            return
        if event.collection is Collection.ORDERS:
            text = format_order(record, self.tax_rate)
        else:
            text = FORMATTERS[event.collection](record)
        await self.send(text)

    async def send(self, text: str) -> None:
        messages = [{"type": "text", "text": text}]
        if self.targets:
            await asyncio.gather(
                *(self._post_line(LINE_PUSH_URL, {"to": recipient, "messages": messages}) for recipient in self.targets)
            )
        else:
            await self._post_line(LINE_BROADCAST_URL, {"messages": messages})

    async def _post_line(self, url: str, payload: dict) -> None:
        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=5) as client:
                response = await client.post(
                    url,
                    headers={"Authorization": f"Bearer {self.token}"},
                    json=payload,
                )
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("Failed to send LINE message: %s", exc)
