import asyncio
import json
from datetime import date, time
from decimal import Decimal

import pytest

from bloom.errors import ReadOnlyField, RecordNotFound, StoreError
from bloom.models import Collection, OrderStatus
from bloom.store import STORAGE_KEYS, LocalStore


def _order(table_id="4", subtotal="9.98"):
    return {
        "table_id": table_id,
        "line_items": [{"name": "Tea", "quantity": 2, "unit_price": Decimal("4.99")}],
        "subtotal": Decimal(subtotal),
        "status": OrderStatus.PENDING,
    }


def _reservation(day, hour=19, name="Rana"):
    return {
        "name": name,
        "email": "rana@example.com",
        "guests": 4,
        "date": day,
        "time": time(hour, 30),
    }


@pytest.mark.anyio
async def test_create_assigns_id_and_round_trips(store):
    created = await store.create(Collection.ORDERS, _order())
    assert created.id
    fetched = await store.get(Collection.ORDERS, created.id)
    assert fetched.table_id == "4"
    assert fetched.status is OrderStatus.PENDING
    assert fetched.subtotal == Decimal("9.98")
    assert fetched.line_items[0].unit_price == Decimal("4.99")


@pytest.mark.anyio
async def test_list_orders_newest_first(store):
    first = await store.create(Collection.ORDERS, _order("1"))
    second = await store.create(Collection.ORDERS, _order("2"))
    newest_first = await store.list(Collection.ORDERS, order_by="created_at", ascending=False)
    assert [order.id for order in newest_first] == [second.id, first.id]


@pytest.mark.anyio
async def test_list_reservations_soonest_first(store):
    later = await store.create(Collection.RESERVATIONS, _reservation(date(2026, 11, 2)))
    sooner = await store.create(Collection.RESERVATIONS, _reservation(date(2026, 10, 25), hour=20))
    same_day_earlier = await store.create(Collection.RESERVATIONS, _reservation(date(2026, 10, 25), hour=18))
    records = await store.list(Collection.RESERVATIONS, order_by=("date", "time"), ascending=True)
    assert [record.id for record in records] == [same_day_earlier.id, sooner.id, later.id]


@pytest.mark.anyio
async def test_update_status(store):
    created = await store.create(Collection.ORDERS, _order())
    updated = await store.update(Collection.ORDERS, created.id, {"status": OrderStatus.PREPARING})
    assert updated.status is OrderStatus.PREPARING
    assert (await store.get(Collection.ORDERS, created.id)).status is OrderStatus.PREPARING


@pytest.mark.anyio
async def test_update_rejects_other_fields(store):
    created = await store.create(Collection.ORDERS, _order())
    with pytest.raises(ReadOnlyField):
        await store.update(Collection.ORDERS, created.id, {"subtotal": Decimal("0")})
    with pytest.raises(StoreError):
        await store.update(Collection.ORDERS, created.id, {"status": "lost"})
    assert (await store.get(Collection.ORDERS, created.id)).subtotal == Decimal("9.98")


@pytest.mark.anyio
async def test_missing_records(store):
    with pytest.raises(RecordNotFound):
        await store.update(Collection.ORDERS, "nope", {"status": OrderStatus.SERVED})
    with pytest.raises(RecordNotFound):
        await store.delete(Collection.ORDERS, "nope")
    assert await store.get(Collection.ORDERS, "nope") is None


@pytest.mark.anyio
async def test_delete_and_delete_all(store):
    first = await store.create(Collection.ORDERS, _order("1"))
    await store.create(Collection.ORDERS, _order("2"))
    kept = await store.create(Collection.ORDERS, _order("3"))
    await store.update(Collection.ORDERS, kept.id, {"status": OrderStatus.PREPARING})

    await store.delete(Collection.ORDERS, first.id)
    deleted = await store.delete_all(Collection.ORDERS, exclude={"status": "preparing"})
    remaining = await store.list(Collection.ORDERS)
    assert deleted == 1
    assert [order.id for order in remaining] == [kept.id]

    assert await store.delete_all(Collection.ORDERS) == 1
    assert await store.list(Collection.ORDERS) == []


@pytest.mark.anyio
async def test_subscribers_hear_every_mutation(store):
    events = []
    handle = store.subscribe(Collection.CONTACT_MESSAGES, events.append)
    other = []
    store.subscribe(Collection.ORDERS, other.append)

    message = await store.create(
        Collection.CONTACT_MESSAGES,
        {"name": "Sam", "email": "sam@example.com", "message": "Hi"},
    )
    await store.update(Collection.CONTACT_MESSAGES, message.id, {"is_read": True})
    await store.delete(Collection.CONTACT_MESSAGES, message.id)
    store.unsubscribe(handle)
    await store.delete_all(Collection.CONTACT_MESSAGES)

    assert [(event.action, event.record_id) for event in events] == [
        ("create", message.id),
        ("update", message.id),
        ("delete", message.id),
    ]
    assert other == []


@pytest.mark.anyio
async def test_failing_listener_does_not_fail_mutation(store):
    seen = []

    async def broken(event):
        raise RuntimeError("listener down")

    store.subscribe(Collection.ORDERS, broken)
    store.subscribe(Collection.ORDERS, seen.append)
    created = await store.create(Collection.ORDERS, _order())
    await store.hub.drain()
    assert created.id
    assert len(seen) == 1
    assert store.hub.pending == 0


@pytest.mark.anyio
async def test_slow_listener_does_not_hold_up_writes(store):
    release = asyncio.Event()
    heard = []

    async def slow(event):
        await release.wait()
        heard.append(event.record_id)

    store.subscribe(Collection.ORDERS, slow)
    created = await asyncio.wait_for(store.create(Collection.ORDERS, _order()), timeout=1)
    assert heard == []
    assert store.hub.pending == 1

    release.set()
    await store.hub.drain()
    assert heard == [created.id]


@pytest.mark.anyio
async def test_inline_listener_finishes_before_write_returns(store):
    heard = []

    async def reload(event):
        await asyncio.sleep(0)
        heard.append(event.action)

    store.subscribe(Collection.ORDERS, reload, inline=True)
    await store.create(Collection.ORDERS, _order())
    assert heard == ["create"]
    assert store.hub.pending == 0


@pytest.mark.anyio
async def test_close_waits_for_background_listeners(local_store):
    heard = []

    async def late(event):
        await asyncio.sleep(0.01)
        heard.append(event.record_id)

    local_store.subscribe(Collection.ORDERS, late)
    created = await local_store.create(Collection.ORDERS, _order())
    await local_store.close()
    assert heard == [created.id]

@pytest.mark.anyio
async def test_no_event_when_mutation_fails(store):
    events = []
    store.subscribe(Collection.ORDERS, events.append)
    with pytest.raises(RecordNotFound):
        await store.update(Collection.ORDERS, "missing", {"status": OrderStatus.SERVED})
    assert events == []


@pytest.mark.anyio
async def test_local_store_uses_well_known_keys(tmp_path, clock):
    store = LocalStore(tmp_path, clock=clock)
    created = await store.create(Collection.ORDERS, _order())
    path = tmp_path / "bloom_orders.json"
    assert store.path_for(Collection.ORDERS) == path
    assert STORAGE_KEYS[Collection.CONTACT_MESSAGES] == "bloom_contact_messages"
    saved = json.loads(path.read_text())
    assert saved[0]["id"] == created.id
    assert saved[0]["subtotal"] == "9.98"


@pytest.mark.anyio
async def test_local_store_unreadable_file(tmp_path, clock):
    store = LocalStore(tmp_path, clock=clock)
    (tmp_path / "bloom_orders.json").write_text("{not json")
    with pytest.raises(StoreError):
        await store.list(Collection.ORDERS)
