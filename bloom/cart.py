"""In-memory cart for one browsing session."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable

from .catalog import MenuItem

logger = logging.getLogger(__name__)

CartListener = Callable[["Cart"], None]


@dataclass
class CartLine:
    item: MenuItem
    quantity: int = 1

    @property
    def name(self) -> str:
        return self.item.name

    @property
    def line_total(self) -> Decimal:
        return self.item.price * self.quantity


class Cart:
    """Selected menu items keyed by item name.

    Every mutation notifies listeners synchronously with the cart itself, so
    whatever renders the cart always sees the latest state.
    """

    def __init__(self) -> None:
        self._lines: dict[str, CartLine] = {}
        self._listeners: list[CartListener] = []
        # set while an order built from this cart is being stored
        self.is_submitting = False

    def __len__(self) -> int:
        return len(self._lines)

    @property
    def lines(self) -> tuple[CartLine, ...]:
        return tuple(CartLine(line.item, line.quantity) for line in self._lines.values())

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def quantity_of(self, name: str) -> int:
        line = self._lines.get(name)
        return line.quantity if line else 0

    def add_item(self, item: MenuItem) -> None:
        line = self._lines.get(item.name)
        if line is None:
            self._lines[item.name] = CartLine(item, 1)
        else:
            line.quantity += 1
        self._notify()

    def remove_item(self, name: str) -> None:
        if self._lines.pop(name, None) is not None:
            self._notify()

    def update_quantity(self, name: str, delta: int) -> None:
        line = self._lines.get(name)
        if line is None:
            return
        quantity = max(0, line.quantity + delta)
        if quantity == 0:
            del self._lines[name]
        else:
            line.quantity = quantity
        self._notify()

    def clear(self) -> None:
        self._lines.clear()
        self._notify()

    def subtotal(self) -> Decimal:
        return sum((line.line_total for line in self._lines.values()), Decimal("0"))

    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:  # noqa: BLE001
                logger.exception("Cart listener %r failed", listener)
