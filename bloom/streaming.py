"""Server-Sent Events feed of store changes for the staff controller.

The first event is always a ``snapshot`` with the current badge counts; each
later ``change`` event tells the client which collection to re-fetch. Event
ids increase monotonically per stream. Changes that pile up before the client
reads them are coalesced per collection, keeping the latest one.
"""

from __future__ import annotations

import asyncio
import json
from typing import AsyncIterator, Callable, Dict, List

from .models import Collection
from .store import ChangeEvent, Store, Subscription

KEEPALIVE_INTERVAL = 15


def format_event(event: str, seq: int, data: dict) -> str:
    return f"event: {event}\nid: {seq}\ndata: {json.dumps(data)}\n\n"


class ChangeStream:
    def __init__(
        self,
        store: Store,
        snapshot: Callable[[], dict],
        *,
        keepalive: float = KEEPALIVE_INTERVAL,
    ) -> None:
        self.store = store
        self.snapshot = snapshot
        self.keepalive = keepalive
        self.pending: Dict[Collection, ChangeEvent] = {}
        self._wakeup = asyncio.Event()
        self._subscriptions: List[Subscription] = []

    def open(self) -> None:
        for collection in Collection:
            self._subscriptions.append(self.store.subscribe(collection, self._on_change))

    def close(self) -> None:
        for handle in self._subscriptions:
            self.store.unsubscribe(handle)
        self._subscriptions.clear()

    def _on_change(self, event: ChangeEvent) -> None:
        # re-inserting moves the collection behind the ones changed before it
        self.pending.pop(event.collection, None)
        self.pending[event.collection] = event
        self._wakeup.set()

    def _take_pending(self) -> List[ChangeEvent]:
        changes = list(self.pending.values())
        self.pending.clear()
        self._wakeup.clear()
        return changes

    async def events(self) -> AsyncIterator[str]:
        seq = 1
        yield format_event("snapshot", seq, self.snapshot())
        try:
            while True:
                if not self.pending:
                    try:
                        await asyncio.wait_for(self._wakeup.wait(), timeout=self.keepalive)
                    except asyncio.TimeoutError:
                        yield ":keepalive\n\n"
                        continue
                for change in self._take_pending():
                    seq += 1
                    yield format_event(
                        "change",
                        seq,
                        {
                            "collection": change.collection.value,
                            "action": change.action,
                            "id": change.record_id,
                            "at": change.occurred_at.isoformat(),
                        },
                    )
        finally:
            self.close()
