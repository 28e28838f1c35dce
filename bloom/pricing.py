"""Display-time money helpers.

Stored subtotals are always pre-tax. Taxed totals are derived here and
nowhere else.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

TAX_RATE = Decimal("0.13")
CENTS = Decimal("0.01")


def quantize_money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def tax_amount(subtotal: Decimal, rate: Decimal = TAX_RATE) -> Decimal:
    return quantize_money(Decimal(subtotal) * rate)


def total_with_tax(subtotal: Decimal, rate: Decimal = TAX_RATE) -> Decimal:
    return quantize_money(Decimal(subtotal) * (1 + rate))
