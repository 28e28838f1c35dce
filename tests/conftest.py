import os

os.environ.setdefault("BLOOM_DATABASE_URL", "sqlite://")
os.environ.setdefault("BLOOM_STORE_BACKEND", "database")

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from bloom.catalog import MenuCategory, MenuItem
from bloom.database import build_engine, init_db
from bloom.errors import StoreError
from bloom.store import LocalStore, SQLStore


class TickingClock:
    """Advances one second per call so created_at values never tie."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FrozenClock(TickingClock):
    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def frozen_clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def sql_store(tmp_path, clock):
    engine = build_engine(f"sqlite:///{tmp_path / 'bloom.db'}")
    init_db(engine)
    store = SQLStore(engine, clock=clock)
    yield store
    engine.dispose()


@pytest.fixture
def local_store(tmp_path, clock):
    return LocalStore(tmp_path / "storage", clock=clock)


@pytest.fixture(params=["sql", "local"])
def store(request):
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def latte() -> MenuItem:
    return MenuItem("Latte", MenuCategory.HOT_DRINKS, Decimal("6.99"))


@pytest.fixture
def water() -> MenuItem:
    return MenuItem("Water", MenuCategory.COLD_DRINKS, Decimal("2.50"))


def make_failing(monkeypatch, store, *methods: str) -> None:
    """Make the given store methods raise ``StoreError``."""

    async def _fail(*args, **kwargs):
        raise StoreError("store unavailable")

    for name in methods:
        monkeypatch.setattr(store, name, _fail)
