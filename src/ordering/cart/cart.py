"""Cart aggregate — one cart per user, with lines and an applied coupon snapshot.

The cart is a standard CQRS aggregate (not event sourced). Lines are keyed by
(product, weight option) and carry the unit price captured when they were
added. A coupon is bound by value: the snapshot keeps the coupon's terms as
they were at selection time.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text, ValueObject

from ordering.cart.events import (
    CartCleared,
    CartCouponApplied,
    CartCouponReleased,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
)
from ordering.cart.pricing import CartTotals, DiscountType, compute_totals
from ordering.domain import ordering
from shared.errors import NotFoundError


class CouponReleaseReason(Enum):
    UNSELECTED = "Unselected"
    CART_EMPTIED = "Cart_Emptied"
    CART_CLEARED = "Cart_Cleared"


def _normalize_weight(weight_option):
    return weight_option or None


@ordering.entity(part_of="Cart")
class CartLine:
    product_id = Identifier(required=True)
    weight_option = String(max_length=50)
    quantity = Integer(required=True, min_value=1)
    price = Float(required=True, min_value=0.0)
    added_at = DateTime()

    def matches(self, product_id, weight_option) -> bool:
        return str(self.product_id) == str(product_id) and _normalize_weight(
            self.weight_option
        ) == _normalize_weight(weight_option)


@ordering.value_object(part_of="Cart")
class AppliedCoupon:
    """Immutable copy of a coupon's terms at the moment it was selected.

    ``discount`` is an optional pre-resolved absolute amount; when positive it
    wins over recomputing from type and value.
    """

    coupon_id = String(required=True, max_length=50)
    code = String(required=True, max_length=20)
    discount_type = String(required=True, choices=DiscountType)
    discount_value = Float(required=True, min_value=0.0)
    applied_to_products = Text()  # JSON list of product ids; empty = whole cart
    discount = Float(default=0.0, min_value=0.0)
    applied_at = DateTime()

    def to_dict(self) -> dict:
        return {
            "coupon_id": self.coupon_id,
            "code": self.code,
            "discount_type": self.discount_type,
            "discount_value": self.discount_value,
            "applied_to_products": json.loads(self.applied_to_products) if self.applied_to_products else [],
            "discount": self.discount or 0.0,
            "applied_at": self.applied_at.isoformat() if self.applied_at else None,
        }


@ordering.aggregate
class Cart:
    user_id = Identifier(required=True, unique=True)
    items = HasMany(CartLine)
    applied_coupon = ValueObject(AppliedCoupon)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def lines_must_be_unique_per_variant(self):
        seen = set()
        for line in self.items:
            key = (str(line.product_id), _normalize_weight(line.weight_option))
            if key in seen:
                raise ValidationError({"items": [f"Duplicate cart line for product {key[0]}"]})
            seen.add(key)

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, user_id):
        now = datetime.now(UTC)
        return cls(user_id=user_id, created_at=now, updated_at=now)

    # -------------------------------------------------------------------
    # Lines
    # -------------------------------------------------------------------
    def find_line(self, product_id, weight_option=None):
        return next((line for line in self.items if line.matches(product_id, weight_option)), None)

    def quantity_of(self, product_id, weight_option=None) -> int:
        line = self.find_line(product_id, weight_option)
        return line.quantity if line else 0

    def _require_line(self, product_id, weight_option):
        line = self.find_line(product_id, weight_option)
        if line is None:
            raise NotFoundError(
                "Item not found in cart",
                product_id=str(product_id),
                weight_option=_normalize_weight(weight_option),
            )
        return line

    def add_item(self, product_id, quantity, price, weight_option=None):
        """Add units of a product variant, accumulating onto an existing line."""
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Valid quantity is required"]})
        if price is None or price < 0:
            raise ValidationError({"price": ["Valid price is required"]})

        weight_option = _normalize_weight(weight_option)
        now = datetime.now(UTC)

        existing = self.find_line(product_id, weight_option)
        if existing:
            existing.quantity += quantity
        else:
            self.add_items(
                CartLine(
                    product_id=product_id,
                    weight_option=weight_option,
                    quantity=quantity,
                    price=price,
                    added_at=now,
                )
            )

        self.updated_at = now
        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                user_id=str(self.user_id),
                product_id=str(product_id),
                weight_option=weight_option,
                quantity=quantity,
                price=price,
            )
        )

    def set_quantity(self, product_id, quantity, weight_option=None):
        """Overwrite a line's quantity; zero removes the line."""
        if quantity is None or quantity < 0:
            raise ValidationError({"quantity": ["Valid quantity is required"]})

        line = self._require_line(product_id, weight_option)
        if quantity == 0:
            self._remove_line(line)
            return

        previous_quantity = line.quantity
        if previous_quantity == quantity:
            return

        line.quantity = quantity
        self.updated_at = datetime.now(UTC)
        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                product_id=str(product_id),
                weight_option=_normalize_weight(weight_option),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )

    def remove_item(self, product_id, weight_option=None):
        self._remove_line(self._require_line(product_id, weight_option))

    def _remove_line(self, line):
        product_id, weight_option = str(line.product_id), line.weight_option
        self.remove_items(line)
        self.updated_at = datetime.now(UTC)
        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                product_id=product_id,
                weight_option=weight_option,
            )
        )
        self.coupon_released_when_cart_empties()

    def clear(self):
        """Remove every line and release the coupon unconditionally."""
        removed = len(self.items)
        for line in list(self.items):
            self.remove_items(line)
        self.updated_at = datetime.now(UTC)
        self.raise_(CartCleared(cart_id=str(self.id), removed_line_count=removed))
        self.release_coupon(CouponReleaseReason.CART_CLEARED)

    # -------------------------------------------------------------------
    # Coupon
    # -------------------------------------------------------------------
    @property
    def has_coupon(self) -> bool:
        return self.applied_coupon is not None

    def apply_coupon(self, snapshot: AppliedCoupon):
        """Bind a coupon snapshot, replacing any coupon already applied."""
        replaced = self.applied_coupon.code if self.applied_coupon else None
        self.applied_coupon = snapshot
        self.updated_at = datetime.now(UTC)
        self.raise_(
            CartCouponApplied(
                cart_id=str(self.id),
                coupon_id=snapshot.coupon_id,
                coupon_code=snapshot.code,
                replaced_coupon_code=replaced,
            )
        )

    def release_coupon(self, reason=CouponReleaseReason.UNSELECTED) -> bool:
        """Clear the applied coupon. Returns False when none was applied."""
        if self.applied_coupon is None:
            return False

        code = self.applied_coupon.code
        self.applied_coupon = None
        self.updated_at = datetime.now(UTC)
        self.raise_(CartCouponReleased(cart_id=str(self.id), coupon_code=code, reason=reason.value))
        return True

    def coupon_released_when_cart_empties(self) -> bool:
        """Post-condition of every line removal: an empty cart keeps no coupon."""
        if self.items:
            return False
        return self.release_coupon(CouponReleaseReason.CART_EMPTIED)

    # -------------------------------------------------------------------
    # Read side
    # -------------------------------------------------------------------
    def totals(self) -> CartTotals:
        return compute_totals(self.items, self.applied_coupon)
