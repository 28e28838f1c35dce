from __future__ import annotations

from typing import List, Sequence

from sqlmodel import Session, SQLModel, select


# -------------------------
# Generic record operations
# -------------------------

def list_records(
    session: Session,
    model: type[SQLModel],
    order_by: Sequence[str],
    ascending: bool = True,
) -> List[SQLModel]:
    columns = [getattr(model, name) for name in order_by]
    ordering = [column.asc() if ascending else column.desc() for column in columns]
    statement = select(model).order_by(*ordering)
    return list(session.exec(statement))


def get_record(session: Session, model: type[SQLModel], record_id: str) -> SQLModel | None:
    return session.get(model, record_id)


def create_record(session: Session, model: type[SQLModel], data: dict) -> SQLModel:
    row = model(**data)
    session.add(row)
    session.commit()
    session.refresh(row)
    return row


def update_record(session: Session, row: SQLModel, updates: dict) -> SQLModel:
    for key, value in updates.items():
        setattr(row, key, value)
    session.add(row)
    session.commit()
    session.refresh(row)
    return row


def delete_record(session: Session, row: SQLModel) -> None:
    session.delete(row)
    session.commit()


def delete_all_records(session: Session, model: type[SQLModel], exclude: dict | None = None) -> int:
    """Delete every row except those matching all ``exclude`` pairs."""
    statement = select(model)
    deleted = 0
    for row in session.exec(statement).all():
        if exclude and all(getattr(row, key) == value for key, value in exclude.items()):
            continue
        session.delete(row)
        deleted += 1
    session.commit()
    return deleted
