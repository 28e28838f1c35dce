from __future__ import annotations

import secrets
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Mapping, Optional

from .cart import Cart
from .models import utc_now
from .notices import Notice, NoticeBoard

STAFF_PATH = "/controller"


def resolve_view(path: str) -> str:
    """Pick the staff controller for ``/controller``, the storefront otherwise."""
    if path.rstrip("/") == STAFF_PATH:
        return "staff"
    return "storefront"


@dataclass
class CustomerSession:
    """Everything one browsing session owns: cart, table and UI flags."""

    id: str
    table_id: Optional[str] = None
    cart: Cart = field(default_factory=Cart)
    notices: NoticeBoard = field(default_factory=NoticeBoard)
    confirmation: Optional[Notice] = None
    is_menu_open: bool = False
    is_cart_modal_open: bool = False

    @classmethod
    def start(cls, session_id: str, query: Mapping[str, str], **kwargs) -> "CustomerSession":
        table = (query.get("table") or "").strip()
        return cls(id=session_id, table_id=table or None, **kwargs)

    def active_confirmation(self, now: datetime) -> Optional[Notice]:
        if self.confirmation is not None and not self.confirmation.is_active(now):
            self.confirmation = None
        return self.confirmation


class SessionRegistry:
    """Customer sessions keyed by cookie value, oldest evicted first."""

    def __init__(
        self,
        max_sessions: int = 1000,
        *,
        notice_seconds: float = 3.0,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.max_sessions = max_sessions
        self.notice_seconds = notice_seconds
        self.clock = clock
        self._sessions: "OrderedDict[str, CustomerSession]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, session_id: str | None) -> CustomerSession | None:
        if not session_id:
            return None
        session = self._sessions.get(session_id)
        if session is not None:
            self._sessions.move_to_end(session_id)
        return session

    def get_or_start(self, session_id: str | None, query: Mapping[str, str]) -> CustomerSession:
        session = self.get(session_id)
        if session is not None:
            return session
        session = CustomerSession.start(
            secrets.token_urlsafe(16),
            query,
            notices=NoticeBoard(self.notice_seconds, clock=self.clock),
        )
        self._sessions[session.id] = session
        while len(self._sessions) > self.max_sessions:
            self._sessions.popitem(last=False)
        return session
