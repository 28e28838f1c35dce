from decimal import Decimal

import pytest

from bloom.catalog import Catalog, MenuCategory, MenuItem, get_catalog
from bloom.errors import UnknownMenuItem
from bloom.pricing import tax_amount, total_with_tax


def test_default_catalog_names_are_unique():
    catalog = get_catalog()
    names = [item.name for item in catalog]
    assert len(names) == len(set(names)) == len(catalog)


def test_lookup_by_name():
    catalog = get_catalog()
    assert catalog.require("Latte").price == Decimal("6.99")
    assert catalog.get("Water").category is MenuCategory.COLD_DRINKS
    assert catalog.get("Pumpkin Spice") is None
    with pytest.raises(UnknownMenuItem):
        catalog.require("Pumpkin Spice")


def test_same_flavour_in_several_sections_stays_distinct():
    catalog = get_catalog()
    assert catalog.require("Mango Milkshake").category is MenuCategory.MILKSHAKES
    assert catalog.require("Mango Smoothie").category is MenuCategory.SMOOTHIES
    assert catalog.require("Mango Mojito").category is MenuCategory.MOJITOS


def test_duplicate_names_rejected():
    item = MenuItem("Tea", MenuCategory.HOT_DRINKS, Decimal("4.50"))
    with pytest.raises(ValueError):
        Catalog([item, item])


def test_negative_price_rejected():
    with pytest.raises(ValueError):
        MenuItem("Tea", MenuCategory.HOT_DRINKS, Decimal("-1"))


def test_grouped_menu():
    groups = get_catalog().grouped()
    assert list(groups) == ["Food", "Drinks", "Shisha"]
    assert "Hot Drinks" in groups["Drinks"]
    assert all(item.category is MenuCategory.SHISHA for item in groups["Shisha"]["Shisha"])


def test_tax_is_derived_from_subtotal():
    assert tax_amount(Decimal("16.48")) == Decimal("2.14")
    assert total_with_tax(Decimal("16.48")) == Decimal("18.62")
    assert total_with_tax(Decimal("10.00"), Decimal("0")) == Decimal("10.00")
