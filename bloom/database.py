from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from .config import get_settings

# registers the tables on SQLModel.metadata
from . import models  # noqa: F401


def build_engine(url: str) -> Engine:
    engine_kwargs = {}
    if url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
            engine_kwargs["poolclass"] = StaticPool
    return create_engine(url, echo=False, **engine_kwargs)


settings = get_settings()
engine = build_engine(settings.database_url)


def init_db(bind: Engine | None = None) -> None:
    SQLModel.metadata.create_all(bind or engine)
