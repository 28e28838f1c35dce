from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from functools import lru_cache
from typing import Iterable, Iterator

from .errors import UnknownMenuItem
from .menu_data import DEFAULT_MENU_ITEMS, TOP_LEVEL_CATEGORIES


class MenuCategory(str, Enum):
    APPETIZERS = "Appetizers"
    MAIN_DISHES = "Main Dishes"
    BREAKFAST = "Breakfast"
    SALADS = "Salads"
    SHISHA = "Shisha"
    MOCKTAILS = "Mocktails"
    FRESH_JUICE = "Fresh Juice"
    MILKSHAKES = "Milkshakes"
    SMOOTHIES = "Smoothies"
    HOT_DRINKS = "Hot Drinks"
    DESSERTS = "Desserts"
    COLD_DRINKS = "Cold Drinks"
    MOJITOS = "Mojitos"


@dataclass(frozen=True)
class MenuItem:
    """An orderable catalog entry."""

    name: str
    category: MenuCategory
    price: Decimal
    description: str | None = None

    def __post_init__(self) -> None:
        if self.price < 0:
            raise ValueError(f"{self.name}: price must not be negative")


class Catalog:
    """Immutable lookup table of menu items keyed by name."""

    def __init__(self, items: Iterable[MenuItem]) -> None:
        by_name: dict[str, MenuItem] = {}
        for item in items:
            if item.name in by_name:
                raise ValueError(f"Duplicate menu item name: {item.name}")
            by_name[item.name] = item
        self._items = by_name

    @classmethod
    def from_records(cls, records: Iterable[dict]) -> "Catalog":
        return cls(
            MenuItem(
                name=record["name"],
                category=MenuCategory(record["category"]),
                price=Decimal(str(record["price"])),
                description=record.get("description"),
            )
            for record in records
        )

    def __iter__(self) -> Iterator[MenuItem]:
        return iter(self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, name: object) -> bool:
        return name in self._items

    def get(self, name: str) -> MenuItem | None:
        return self._items.get(name)

    def require(self, name: str) -> MenuItem:
        item = self._items.get(name)
        if item is None:
            raise UnknownMenuItem(name)
        return item

    def by_category(self, category: MenuCategory | str) -> list[MenuItem]:
        category = MenuCategory(category)
        return [item for item in self._items.values() if item.category is category]

    def categories(self) -> list[MenuCategory]:
        seen: list[MenuCategory] = []
        for item in self._items.values():
            if item.category not in seen:
                seen.append(item.category)
        return seen

    def grouped(self) -> dict[str, dict[str, list[MenuItem]]]:
        """Items nested by top-level group (Food, Drinks, Shisha) then category."""
        groups: dict[str, dict[str, list[MenuItem]]] = {}
        for group, categories in TOP_LEVEL_CATEGORIES.items():
            sections = {name: self.by_category(name) for name in categories}
            groups[group] = {name: items for name, items in sections.items() if items}
        return groups


@lru_cache
def get_catalog() -> Catalog:
    return Catalog.from_records(DEFAULT_MENU_ITEMS)
