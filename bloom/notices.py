from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from .models import utc_now

DEFAULT_NOTICE_SECONDS = 3.0


@dataclass(frozen=True)
class Notice:
    """A transient, dismissable message shown to the customer or to staff."""

    id: str
    title: str
    description: Optional[str]
    expires_at: datetime

    def is_active(self, now: datetime) -> bool:
        return now < self.expires_at


class NoticeBoard:
    """Toast queue whose entries lapse on their own after ``ttl`` seconds."""

    def __init__(
        self,
        ttl: float = DEFAULT_NOTICE_SECONDS,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.ttl = ttl
        self.clock = clock
        self._notices: List[Notice] = []

    def push(self, title: str, description: str | None = None, *, ttl: float | None = None) -> Notice:
        seconds = self.ttl if ttl is None else ttl
        notice = Notice(
            id=uuid.uuid4().hex[:7],
            title=title,
            description=description,
            expires_at=self.clock() + timedelta(seconds=seconds),
        )
        self._notices.append(notice)
        return notice

    def dismiss(self, notice_id: str) -> None:
        self._notices = [notice for notice in self._notices if notice.id != notice_id]

    def active(self) -> List[Notice]:
        now = self.clock()
        self._notices = [notice for notice in self._notices if notice.is_active(now)]
        return list(self._notices)
