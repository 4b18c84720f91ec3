"""BDD tests for coupons bound to a cart."""

from ordering.cart.events import CartCouponReleased
from pytest_bdd import parsers, scenarios, then, when

scenarios("features/cart_coupons.feature")


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('a {discount_type} coupon "{code}" worth {value:g} is applied'))
def apply_coupon_to_cart(cart, coupon_snapshot, discount_type, code, value):
    cart.apply_coupon(coupon_snapshot(code, discount_type, value))


@when(parsers.cfparse('"{product_id}" in "{weight}" is removed'))
def remove_line(cart, product_id, weight):
    cart.remove_item(product_id, weight_option=weight)


@when("the cart is cleared")
def clear_cart(cart):
    cart.clear()


@when("the coupon is unselected")
def unselect_coupon(cart):
    cart.release_coupon()


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the coupon was released because "{reason}"'))
def coupon_released_because(cart, reason):
    released = [e for e in cart._events if isinstance(e, CartCouponReleased)]
    assert len(released) == 1
    assert released[0].reason == reason
