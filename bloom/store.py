"""Record store used by the storefront and the staff controller.

Two implementations share one contract: ``SQLStore`` persists through
SQLModel and is the canonical backend, ``LocalStore`` keeps one JSON document
per collection on disk and is meant for local development only. Both publish
change events through an in-process ``ChangeHub`` after every successful
mutation.
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from functools import partial
from itertools import count
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Sequence, Set, Union

from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, ValidationError
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from . import crud
from .config import Settings
from .errors import ReadOnlyField, RecordNotFound, StoreError
from .models import TABLES, Collection, new_id, utc_now
from .schemas import ContactMessageRecord, OrderRecord, ReservationRecord

logger = logging.getLogger(__name__)

Record = Union[OrderRecord, ReservationRecord, ContactMessageRecord]

RECORD_TYPES: Dict[Collection, type[BaseModel]] = {
    Collection.ORDERS: OrderRecord,
    Collection.RESERVATIONS: ReservationRecord,
    Collection.CONTACT_MESSAGES: ContactMessageRecord,
}

WRITABLE_FIELDS: Dict[Collection, frozenset[str]] = {
    Collection.ORDERS: frozenset({"status"}),
    Collection.RESERVATIONS: frozenset({"status"}),
    Collection.CONTACT_MESSAGES: frozenset({"is_read"}),
}

STORAGE_KEYS: Dict[Collection, str] = {
    Collection.ORDERS: "bloom_orders",
    Collection.RESERVATIONS: "bloom_reservations",
    Collection.CONTACT_MESSAGES: "bloom_contact_messages",
}


@dataclass(frozen=True)
class ChangeEvent:
    collection: Collection
    action: str
    record_id: str | None = None
    occurred_at: datetime = field(default_factory=utc_now)


ChangeListener = Callable[[ChangeEvent], Union[None, Awaitable[None]]]


@dataclass(frozen=True)
class Subscription:
    id: int
    collection: Collection


class ChangeHub:
    """Fan out change events to the listeners of each collection.

    Plain callables and ``inline`` listeners run before ``publish`` returns.
    Other async listeners are started as background tasks, so a slow
    consumer never holds up the write that produced the event.
    """

    def __init__(self) -> None:
        self._listeners: Dict[int, tuple[Collection, ChangeListener, bool]] = {}
        self._ids = count(1)
        self._tasks: Set[asyncio.Future] = set()

    def subscribe(self, collection: Collection, listener: ChangeListener, *, inline: bool = False) -> Subscription:
        handle = Subscription(next(self._ids), Collection(collection))
        self._listeners[handle.id] = (handle.collection, listener, inline)
        return handle

    def unsubscribe(self, handle: Subscription) -> None:
        self._listeners.pop(handle.id, None)

    def listener_count(self, collection: Collection) -> int:
        return sum(1 for target, _, _ in self._listeners.values() if target is collection)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def publish(self, event: ChangeEvent) -> None:
        targets = [
            (listener, inline)
            for target, listener, inline in list(self._listeners.values())
            if target is event.collection
        ]
        for listener, inline in targets:
            try:
                result = listener(event)
                if not inspect.isawaitable(result):
                    continue
                if inline:
                    await result
                    continue
            except Exception:  # noqa: BLE001
                logger.exception("Change listener failed for %s/%s", event.collection.value, event.action)
                continue
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(partial(self._finished, event))

    def _finished(self, event: ChangeEvent, task: asyncio.Future) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Change listener failed for %s/%s",
                event.collection.value,
                event.action,
                exc_info=exc,
            )

    async def drain(self) -> None:
        """Wait for every background listener started so far."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


class Store(ABC):
    """Durable, subscribable storage for orders, reservations and messages."""

    def __init__(self, *, clock: Callable[[], datetime] = utc_now) -> None:
        self.clock = clock
        self.hub = ChangeHub()

    @abstractmethod
    async def create(self, collection: Collection, data: dict) -> Record:
        """Persist a new record and return it with its generated id."""

    @abstractmethod
    async def list(
        self,
        collection: Collection,
        order_by: Union[str, Sequence[str]] = "created_at",
        ascending: bool = True,
    ) -> List[Record]:
        ...

    @abstractmethod
    async def get(self, collection: Collection, record_id: str) -> Record | None:
        ...

    @abstractmethod
    async def update(self, collection: Collection, record_id: str, fields: dict) -> Record:
        ...

    @abstractmethod
    async def delete(self, collection: Collection, record_id: str) -> None:
        ...

    @abstractmethod
    async def delete_all(self, collection: Collection, exclude: dict | None = None) -> int:
        ...

    def subscribe(
        self, collection: Collection, on_change: ChangeListener, *, inline: bool = False
    ) -> Subscription:
        return self.hub.subscribe(collection, on_change, inline=inline)

    def unsubscribe(self, handle: Subscription) -> None:
        self.hub.unsubscribe(handle)

    async def close(self) -> None:
        await self.hub.drain()

    async def _publish(self, collection: Collection, action: str, record_id: str | None = None) -> None:
        await self.hub.publish(ChangeEvent(collection, action, record_id))

    def _build_record(self, collection: Collection, data: dict) -> Record:
        payload = {"id": new_id(), "created_at": self.clock(), **data}
        try:
            return RECORD_TYPES[collection].model_validate(payload)
        except ValidationError as exc:
            raise StoreError(f"Invalid {collection.value} record: {exc}") from exc

    def _apply_update(self, collection: Collection, record: Record, fields: dict) -> Record:
        blocked = set(fields) - WRITABLE_FIELDS[collection]
        if blocked:
            raise ReadOnlyField(collection.value, blocked)
        try:
            return RECORD_TYPES[collection].model_validate({**record.model_dump(), **fields})
        except ValidationError as exc:
            raise StoreError(f"Invalid {collection.value} update: {exc}") from exc


def _order_fields(order_by: Union[str, Sequence[str]]) -> tuple[str, ...]:
    if isinstance(order_by, str):
        return (order_by,)
    return tuple(order_by)


def _row_values(collection: Collection, record: Record) -> dict:
    values = record.model_dump()
    if collection is Collection.ORDERS:
        values["line_items"] = [line.model_dump(mode="json") for line in record.line_items]
        values["status"] = record.status.value
    return values


class SQLStore(Store):
    """Store backed by the SQL database configured in ``database_url``."""

    def __init__(self, engine: Engine, *, clock: Callable[[], datetime] = utc_now) -> None:
        super().__init__(clock=clock)
        self.engine = engine

    async def _run(self, fn: Callable[..., Any], *args: Any) -> Any:
        try:
            return await run_in_threadpool(fn, *args)
        except SQLAlchemyError as exc:
            logger.warning("Database call %s failed: %s", fn.__name__, exc)
            raise StoreError("The order database is unavailable") from exc

    async def create(self, collection: Collection, data: dict) -> Record:
        collection = Collection(collection)
        record = self._build_record(collection, data)

        def _create() -> Record:
            with Session(self.engine) as session:
                row = crud.create_record(session, TABLES[collection], _row_values(collection, record))
                return RECORD_TYPES[collection].model_validate(row)

        created = await self._run(_create)
        await self._publish(collection, "create", created.id)
        return created

    async def list(
        self,
        collection: Collection,
        order_by: Union[str, Sequence[str]] = "created_at",
        ascending: bool = True,
    ) -> List[Record]:
        collection = Collection(collection)
        fields = _order_fields(order_by)

        def _list() -> List[Record]:
            with Session(self.engine) as session:
                rows = crud.list_records(session, TABLES[collection], fields, ascending)
                return [RECORD_TYPES[collection].model_validate(row) for row in rows]

        return await self._run(_list)

    async def get(self, collection: Collection, record_id: str) -> Record | None:
        collection = Collection(collection)

        def _get() -> Record | None:
            with Session(self.engine) as session:
                row = crud.get_record(session, TABLES[collection], record_id)
                return RECORD_TYPES[collection].model_validate(row) if row else None

        return await self._run(_get)

    async def update(self, collection: Collection, record_id: str, fields: dict) -> Record:
        collection = Collection(collection)

        def _update() -> Record:
            with Session(self.engine) as session:
                row = crud.get_record(session, TABLES[collection], record_id)
                if row is None:
                    raise RecordNotFound(collection.value, record_id)
                current = RECORD_TYPES[collection].model_validate(row)
                updated = self._apply_update(collection, current, fields)
                values = _row_values(collection, updated)
                row = crud.update_record(session, row, {key: values[key] for key in fields})
                return RECORD_TYPES[collection].model_validate(row)

        updated = await self._run(_update)
        await self._publish(collection, "update", record_id)
        return updated

    async def delete(self, collection: Collection, record_id: str) -> None:
        collection = Collection(collection)

        def _delete() -> None:
            with Session(self.engine) as session:
                row = crud.get_record(session, TABLES[collection], record_id)
                if row is None:
                    raise RecordNotFound(collection.value, record_id)
                crud.delete_record(session, row)

        await self._run(_delete)
        await self._publish(collection, "delete", record_id)

    async def delete_all(self, collection: Collection, exclude: dict | None = None) -> int:
        collection = Collection(collection)

        def _delete_all() -> int:
            with Session(self.engine) as session:
                return crud.delete_all_records(session, TABLES[collection], exclude)

        deleted = await self._run(_delete_all)
        await self._publish(collection, "delete")
        return deleted

    async def close(self) -> None:
        await super().close()
        self.engine.dispose()


class LocalStore(Store):
    """JSON-file store keyed by the ``bloom_*`` storage names.

    Change events only reach listeners in the same process; run a single
    worker when using it.
    """

    def __init__(self, directory: Union[str, Path], *, clock: Callable[[], datetime] = utc_now) -> None:
        super().__init__(clock=clock)
        self.directory = Path(directory)
        self._lock = asyncio.Lock()

    def path_for(self, collection: Collection) -> Path:
        return self.directory / f"{STORAGE_KEYS[Collection(collection)]}.json"

    def _read(self, collection: Collection) -> List[Record]:
        path = self.path_for(collection)
        if not path.exists():
            return []
        try:
            raw = json.loads(path.read_text(encoding="utf-8") or "[]")
            return [RECORD_TYPES[collection].model_validate(item) for item in raw]
        except (OSError, ValueError) as exc:
            logger.warning("Could not read %s: %s", path, exc)
            raise StoreError(f"Local storage {path.name} is unreadable") from exc

    def _write(self, collection: Collection, records: List[Record]) -> None:
        path = self.path_for(collection)
        payload = json.dumps([record.model_dump(mode="json") for record in records], indent=2)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp_path = path.with_suffix(".json.tmp")
            tmp_path.write_text(payload, encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as exc:
            logger.warning("Could not write %s: %s", path, exc)
            raise StoreError(f"Local storage {path.name} is not writable") from exc

    async def create(self, collection: Collection, data: dict) -> Record:
        collection = Collection(collection)
        record = self._build_record(collection, data)
        async with self._lock:
            records = self._read(collection)
            records.append(record)
            self._write(collection, records)
        await self._publish(collection, "create", record.id)
        return record

    async def list(
        self,
        collection: Collection,
        order_by: Union[str, Sequence[str]] = "created_at",
        ascending: bool = True,
    ) -> List[Record]:
        collection = Collection(collection)
        fields = _order_fields(order_by)
        records = self._read(collection)
        return sorted(
            records,
            key=lambda record: tuple(getattr(record, name) for name in fields),
            reverse=not ascending,
        )

    async def get(self, collection: Collection, record_id: str) -> Record | None:
        collection = Collection(collection)
        for record in self._read(collection):
            if record.id == record_id:
                return record
        return None

    async def update(self, collection: Collection, record_id: str, fields: dict) -> Record:
        collection = Collection(collection)
        async with self._lock:
            records = self._read(collection)
            for index, record in enumerate(records):
                if record.id == record_id:
                    records[index] = self._apply_update(collection, record, fields)
                    self._write(collection, records)
                    updated = records[index]
                    break
            else:
                raise RecordNotFound(collection.value, record_id)
        await self._publish(collection, "update", record_id)
        return updated

    async def delete(self, collection: Collection, record_id: str) -> None:
        collection = Collection(collection)
        async with self._lock:
            records = self._read(collection)
            remaining = [record for record in records if record.id != record_id]
            if len(remaining) == len(records):
                raise RecordNotFound(collection.value, record_id)
            self._write(collection, remaining)
        await self._publish(collection, "delete", record_id)

    async def delete_all(self, collection: Collection, exclude: dict | None = None) -> int:
        collection = Collection(collection)
        async with self._lock:
            records = self._read(collection)
            if exclude:
                kept = [
                    record
                    for record in records
                    if all(getattr(record, key) == value for key, value in exclude.items())
                ]
            else:
                kept = []
            self._write(collection, kept)
        await self._publish(collection, "delete")
        return len(records) - len(kept)


def build_store(settings: Settings, engine: Engine | None = None) -> Store:
    if settings.store_backend == "local":
        logger.info("Using local JSON store at %s", settings.local_store_dir)
        return LocalStore(settings.local_store_dir)
    if engine is None:
        from .database import engine as default_engine

        engine = default_engine
    return SQLStore(engine)
