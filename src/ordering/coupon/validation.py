"""Checkout-time coupon validation.

Answers "can this user apply this code to this cart, and for how much?"
without changing any state.
"""

from decimal import ROUND_HALF_UP, Decimal

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from ordering.cart.pricing import DiscountType
from ordering.coupon.coupon import Coupon, normalize_code
from shared.errors import CouponExpiredError, CouponUnavailableError, NotFoundError


def round_money(value) -> float:
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _ids_of(items, key) -> set[str]:
    return {str(item.get(key)) for item in items if item.get(key) is not None}


def validate_coupon(code, user_id, cart_total, items=None) -> dict:
    """Check a code against the cart and return the discount it would grant.

    ``items`` is an optional list of ``{"product_id", "category_id"}`` dicts;
    when given, scoped coupons must match at least one of them.
    """
    if not normalize_code(code):
        raise ValidationError({"code": ["Coupon code is required"]})
    if not user_id:
        raise ValidationError({"user_id": ["User ID is required"]})
    if cart_total is None or cart_total <= 0:
        raise ValidationError({"cart_total": ["Valid cart total is required"]})

    coupon = current_domain.repository_for(Coupon).by_code(code)
    if coupon is None:
        raise NotFoundError("Invalid coupon code", code=normalize_code(code))
    if not coupon.is_active:
        raise CouponUnavailableError("This coupon is currently inactive", code=coupon.code, reason="inactive")
    if coupon.is_expired():
        raise CouponExpiredError(coupon.code)
    if coupon.usage_limit and (coupon.used_count or 0) >= coupon.usage_limit:
        raise CouponUnavailableError("Coupon usage limit has been reached", code=coupon.code, reason="usage_limit")
    if coupon.usage_by(user_id) >= (coupon.usage_limit_per_user or 1):
        raise CouponUnavailableError(
            "You have already used this coupon the maximum number of times",
            code=coupon.code,
            reason="per_user_limit",
        )
    if cart_total < (coupon.min_order_value or 0):
        raise CouponUnavailableError(
            f"Minimum order value of {coupon.min_order_value:g} required to use this coupon",
            code=coupon.code,
            reason="min_order_value",
            min_order_value=coupon.min_order_value,
        )

    items = items or []
    if items:
        products = coupon.product_ids()
        if products and not _ids_of(items, "product_id") & set(products):
            raise CouponUnavailableError(
                "This coupon is not applicable to the items in your cart", code=coupon.code, reason="scope"
            )
        categories = coupon.category_ids()
        if categories and not _ids_of(items, "category_id") & set(categories):
            raise CouponUnavailableError(
                "This coupon is not applicable to the items in your cart", code=coupon.code, reason="scope"
            )

    if coupon.discount_type == DiscountType.PERCENTAGE.value:
        discount = cart_total * coupon.discount_value / 100
        if coupon.max_discount and discount > coupon.max_discount:
            discount = coupon.max_discount
    else:
        discount = min(coupon.discount_value, cart_total)

    discount = round_money(discount)
    return {
        "coupon_id": str(coupon.id),
        "code": coupon.code,
        "description": coupon.description,
        "discount_type": coupon.discount_type,
        "discount_value": coupon.discount_value,
        "discount": discount,
        "final_total": round_money(max(0.0, cart_total - discount)),
    }
