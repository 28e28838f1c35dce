"""Staff controller read model.

``StaffSyncView`` keeps a local copy of every order, reservation and contact
message. Any change event for a collection triggers a full reload of that
collection; status actions patch the local copy first and fall back to an
authoritative reload when the store rejects the write.
"""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Sequence, Union

from .errors import StoreError
from .models import ORDER_ACTION_LABELS, Collection, OrderStatus, next_status
from .notices import NoticeBoard
from .pricing import TAX_RATE, total_with_tax
from .schemas import ContactMessageRecord, OrderRecord, ReservationRecord
from .store import ChangeEvent, Record, Store, Subscription

logger = logging.getLogger(__name__)

Confirm = Callable[[str], bool]

SORTING: Dict[Collection, tuple[Union[str, Sequence[str]], bool]] = {
    Collection.ORDERS: ("created_at", False),
    Collection.RESERVATIONS: (("date", "time"), True),
    Collection.CONTACT_MESSAGES: ("created_at", False),
}

CLEAR_PROMPTS = {
    Collection.ORDERS: "Clear all orders? This cannot be undone.",
    Collection.RESERVATIONS: "Clear all bookings? This cannot be undone.",
    Collection.CONTACT_MESSAGES: "Clear all messages? This cannot be undone.",
}

CANCEL_RESERVATION_PROMPT = "Cancel this reservation?"


class StaffSyncView:
    def __init__(
        self,
        store: Store,
        *,
        notices: NoticeBoard | None = None,
        tax_rate: Decimal = TAX_RATE,
    ) -> None:
        self.store = store
        self.notices = notices or NoticeBoard()
        self.tax_rate = tax_rate
        self.is_loading = True
        self._records: Dict[Collection, List[Record]] = {collection: [] for collection in Collection}
        self._subscriptions: List[Subscription] = []
        self._issued: Dict[Collection, int] = {collection: 0 for collection in Collection}
        self._applied: Dict[Collection, int] = {collection: 0 for collection in Collection}

    # -------------------------
    # Read model
    # -------------------------

    @property
    def orders(self) -> List[OrderRecord]:
        return list(self._records[Collection.ORDERS])

    @property
    def reservations(self) -> List[ReservationRecord]:
        return list(self._records[Collection.RESERVATIONS])

    @property
    def messages(self) -> List[ContactMessageRecord]:
        return list(self._records[Collection.CONTACT_MESSAGES])

    @property
    def active(self) -> bool:
        return bool(self._subscriptions)

    @property
    def active_order_count(self) -> int:
        return sum(1 for order in self.orders if order.status is not OrderStatus.SERVED)

    @property
    def unread_message_count(self) -> int:
        return sum(1 for message in self.messages if not message.is_read)

    @property
    def reservation_count(self) -> int:
        return len(self._records[Collection.RESERVATIONS])

    def find(self, collection: Collection, record_id: str) -> Optional[Record]:
        for record in self._records[collection]:
            if record.id == record_id:
                return record
        return None

    def order_action(self, order: OrderRecord) -> Optional[str]:
        return ORDER_ACTION_LABELS.get(order.status)

    def display_total(self, order: OrderRecord) -> Decimal:
        return total_with_tax(order.subtotal, self.tax_rate)

    # -------------------------
    # Lifecycle
    # -------------------------

    async def activate(self) -> None:
        if self._subscriptions:
            return
        # subscribe before the first load so concurrent callers see it active
        for collection in Collection:
            self._subscriptions.append(self.store.subscribe(collection, self._on_change, inline=True))
        self.is_loading = True
        await self.refresh()
        self.is_loading = False

    async def deactivate(self) -> None:
        for handle in self._subscriptions:
            self.store.unsubscribe(handle)
        self._subscriptions.clear()

    async def refresh(self) -> None:
        await asyncio.gather(*(self.reload(collection) for collection in Collection))

    async def poll(self, interval: float) -> None:
        """Reload everything every ``interval`` seconds until cancelled."""
        while True:
            await asyncio.sleep(interval)
            await self.refresh()

    async def reload(self, collection: Collection) -> bool:
        """Replace the local copy of ``collection`` with the store's.

        Responses are sequence-stamped; one that completes after a newer
        reload has already been applied is dropped.
        """
        collection = Collection(collection)
        self._issued[collection] += 1
        token = self._issued[collection]
        order_by, ascending = SORTING[collection]
        try:
            records = await self.store.list(collection, order_by=order_by, ascending=ascending)
        except StoreError as exc:
            logger.warning("Reload of %s failed, keeping previous state: %s", collection.value, exc)
            return False
        if token < self._applied[collection]:
            logger.debug("Dropping stale %s reload %s", collection.value, token)
            return False
        self._applied[collection] = token
        self._records[collection] = list(records)
        return True

    async def _on_change(self, event: ChangeEvent) -> None:
        await self.reload(event.collection)

    # -------------------------
    # Staff actions
    # -------------------------

    async def advance_order(
        self, order_id: str, seen_status: OrderStatus | str | None = None
    ) -> Optional[OrderStatus]:
        """Move an order one step forward.

        ``seen_status`` is the status the action was offered for. When the
        order has already reached the resulting status (another session got
        there first) nothing is written and that status is returned.

        Returns the new status, or ``None`` when no action applies (unknown
        or already served order) or the store rejected the write.
        """
        order = self.find(Collection.ORDERS, order_id)
        if order is None:
            return None
        target = next_status(seen_status if seen_status is not None else order.status)
        if target is None:
            return None
        if order.status is target:
            return target
        if next_status(order.status) is not target:
            return None
        self._patch(Collection.ORDERS, order_id, status=target)
        try:
            await self.store.update(Collection.ORDERS, order_id, {"status": target})
        except StoreError as exc:
            logger.warning("Could not move order %s to %s: %s", order_id, target.value, exc)
            self.notices.push("Order update failed", f"Table {order.table_id} is still {order.status.value}.")
            await self.reload(Collection.ORDERS)
            return None
        return target

    async def mark_message_read(self, message_id: str) -> bool:
        message = self.find(Collection.CONTACT_MESSAGES, message_id)
        if message is None:
            return False
        if message.is_read:
            return True
        self._patch(Collection.CONTACT_MESSAGES, message_id, is_read=True)
        try:
            await self.store.update(Collection.CONTACT_MESSAGES, message_id, {"is_read": True})
        except StoreError as exc:
            logger.warning("Could not mark message %s read: %s", message_id, exc)
            self.notices.push("Inbox update failed", f"Message from {message.name} is still unread.")
            await self.reload(Collection.CONTACT_MESSAGES)
            return False
        return True

    async def delete_record(self, collection: Collection, record_id: str) -> bool:
        collection = Collection(collection)
        try:
            await self.store.delete(collection, record_id)
        except StoreError as exc:
            logger.warning("Could not delete %s %s: %s", collection.value, record_id, exc)
            self.notices.push("Delete failed", str(exc))
            await self.reload(collection)
            return False
        self._records[collection] = [
            record for record in self._records[collection] if record.id != record_id
        ]
        return True

    async def cancel_reservation(self, reservation_id: str, confirm: Confirm) -> bool:
        if not confirm(CANCEL_RESERVATION_PROMPT):
            return False
        return await self.delete_record(Collection.RESERVATIONS, reservation_id)

    async def clear_all(self, collection: Collection, confirm: Confirm) -> Optional[int]:
        """Delete every record of ``collection`` once ``confirm`` agrees.

        Returns the number of deleted records, or ``None`` when the action was
        declined or failed.
        """
        collection = Collection(collection)
        if not confirm(CLEAR_PROMPTS[collection]):
            return None
        try:
            deleted = await self.store.delete_all(collection)
        except StoreError as exc:
            logger.warning("Could not clear %s: %s", collection.value, exc)
            self.notices.push("Clear failed", str(exc))
            await self.reload(collection)
            return None
        self._records[collection] = []
        return deleted

    def _patch(self, collection: Collection, record_id: str, **fields) -> None:
        self._records[collection] = [
            record.model_copy(update=fields) if record.id == record_id else record
            for record in self._records[collection]
        ]
