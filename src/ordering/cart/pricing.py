"""Cart totals and coupon discount calculation.

Pure functions over cart lines and an applied-coupon snapshot. Amounts are in
the catalogue's native currency unit; percentage discounts are rounded half-up
to a whole unit.
"""

import json
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass(frozen=True)
class CartTotals:
    subtotal: float
    discount: float
    subtotal_after_discount: float

    def to_dict(self) -> dict:
        return {
            "subtotal": self.subtotal,
            "discount": self.discount,
            "subtotal_after_discount": self.subtotal_after_discount,
        }


def round_half_up(value) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def product_scope(coupon) -> set[str]:
    """Product ids a snapshot is restricted to; empty means the whole cart."""
    scope = getattr(coupon, "applied_to_products", None)
    if not scope:
        return set()
    if isinstance(scope, str):
        scope = json.loads(scope)
    return {str(p) for p in scope}


def line_total(line) -> float:
    return float(line.price) * int(line.quantity)


def subtotal_of(lines) -> float:
    return sum((line_total(line) for line in lines), 0.0)


def applicable_total(lines, coupon) -> float:
    scope = product_scope(coupon)
    if not scope:
        return subtotal_of(lines)
    return subtotal_of(line for line in lines if str(line.product_id) in scope)


def coupon_discount(lines, coupon) -> float:
    """Discount granted by ``coupon`` before clamping to the subtotal."""
    if coupon is None:
        return 0.0

    precomputed = float(coupon.discount or 0)
    if precomputed > 0:
        return precomputed

    value = float(coupon.discount_value or 0)
    if coupon.discount_type == DiscountType.PERCENTAGE.value:
        return float(round_half_up(applicable_total(lines, coupon) * value / 100))
    if coupon.discount_type == DiscountType.FIXED.value:
        # A scoped fixed coupon cannot discount more than the scoped lines cost
        if product_scope(coupon):
            return min(value, applicable_total(lines, coupon))
        return value
    return 0.0


def compute_totals(lines, coupon=None) -> CartTotals:
    lines = list(lines)
    subtotal = subtotal_of(lines)
    discount = min(coupon_discount(lines, coupon), subtotal)
    return CartTotals(
        subtotal=subtotal,
        discount=discount,
        subtotal_after_discount=max(0.0, subtotal - discount),
    )
