"""
Pricing Module - Calculator
=============================
Order price breakdown: subtotal, flat delivery fee, tax, total.

Amounts are accumulated as exact Decimals. Rounding to cents happens only
when a breakdown leaves the system (API responses, order snapshots) through
`PriceBreakdown.rounded()`.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from config.settings import DELIVERY_FEE, TAX_RATE
from common.helpers import money, to_decimal


@dataclass(frozen=True)
class PriceBreakdown:
    subtotal: Decimal
    delivery_fee: Decimal
    tax: Decimal
    total: Decimal

    def line_total(self, line) -> Decimal:
        """Display total for one line (rounded)."""
        return money(to_decimal(line.unit_price) * line.quantity)

    def rounded(self) -> "PriceBreakdown":
        """
        Cent-rounded copy for display/persistence.
        The total is re-summed from the rounded parts, so
        total == subtotal + delivery_fee + tax still holds exactly.
        """
        subtotal = money(self.subtotal)
        delivery_fee = money(self.delivery_fee)
        tax = money(self.tax)
        return PriceBreakdown(
            subtotal=subtotal,
            delivery_fee=delivery_fee,
            tax=tax,
            total=subtotal + delivery_fee + tax,
        )

    def to_dict(self) -> dict:
        return {
            "subtotal": str(self.subtotal),
            "delivery_fee": str(self.delivery_fee),
            "tax": str(self.tax),
            "total": str(self.total),
        }


def calculate_breakdown(
    lines: Iterable,
    delivery_fee: Optional[Decimal] = None,
    tax_rate: Optional[Decimal] = None,
) -> PriceBreakdown:
    """
    Price a set of lines (anything with `unit_price` and `quantity`).

    Args:
        lines: Cart ledger lines or order line inputs; may be empty
        delivery_fee: Flat fee, defaults to settings.DELIVERY_FEE
        tax_rate: Fraction of subtotal (0.10 = 10%), defaults to settings.TAX_RATE

    Returns:
        PriceBreakdown with unrounded values
    """
    fee = to_decimal(DELIVERY_FEE if delivery_fee is None else delivery_fee)
    rate = to_decimal(TAX_RATE if tax_rate is None else tax_rate)

    subtotal = sum(
        (to_decimal(line.unit_price) * line.quantity for line in lines),
        Decimal("0"),
    )
    tax = subtotal * rate

    return PriceBreakdown(
        subtotal=subtotal,
        delivery_fee=fee,
        tax=tax,
        total=subtotal + fee + tax,
    )
