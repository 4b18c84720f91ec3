"""Shared BDD fixtures and step definitions for the Ordering domain."""

import pytest
from ordering.cart.cart import AppliedCoupon, Cart
from ordering.cart.events import (
    CartCleared,
    CartCouponApplied,
    CartCouponReleased,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
)
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then

# Map event name strings to classes for dynamic lookup in Then steps
_CART_EVENT_CLASSES = {
    "CartItemAdded": CartItemAdded,
    "CartQuantityUpdated": CartQuantityUpdated,
    "CartItemRemoved": CartItemRemoved,
    "CartCleared": CartCleared,
    "CartCouponApplied": CartCouponApplied,
    "CartCouponReleased": CartCouponReleased,
}


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def user_id():
    return "user-001"


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


@pytest.fixture()
def coupon_snapshot():
    """Build an unscoped coupon snapshot from its code and terms."""

    def _build(code, discount_type, value):
        return AppliedCoupon(
            coupon_id=f"cpn-{code.lower()}",
            code=code,
            discount_type=discount_type,
            discount_value=value,
            applied_to_products="[]",
        )

    return _build


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("an empty cart", target_fixture="cart")
def empty_cart(user_id):
    cart = Cart.create(user_id=user_id)
    cart._events.clear()
    return cart


@given(
    parsers.cfparse('the cart holds {qty:d} units of "{product_id}" in "{weight}" at {price:g}'),
    target_fixture="cart",
)
def cart_holds(cart, qty, product_id, weight, price):
    cart.add_item(product_id=product_id, quantity=qty, price=price, weight_option=weight)
    cart._events.clear()
    return cart


@given(
    parsers.cfparse('a {discount_type} coupon "{code}" worth {value:g} was applied'),
    target_fixture="cart",
)
def coupon_was_applied(cart, coupon_snapshot, discount_type, code, value):
    cart.apply_coupon(coupon_snapshot(code, discount_type, value))
    cart._events.clear()
    return cart


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the cart has {count:d} line"))
def cart_has_one_line(cart, count):
    assert len(cart.items) == count


@then(parsers.cfparse("the cart has {count:d} lines"))
def cart_has_n_lines(cart, count):
    assert len(cart.items) == count


@then(parsers.cfparse("the subtotal is {amount:g}"))
def subtotal_is(cart, amount):
    assert cart.totals().subtotal == amount


@then(parsers.cfparse("the discount is {amount:g}"))
def discount_is(cart, amount):
    assert cart.totals().discount == amount


@then(parsers.cfparse("the subtotal after discount is {amount:g}"))
def subtotal_after_discount_is(cart, amount):
    assert cart.totals().subtotal_after_discount == amount


@then("the cart has no coupon")
def cart_has_no_coupon(cart):
    assert cart.applied_coupon is None


@then(parsers.cfparse('the applied coupon is "{code}"'))
def applied_coupon_is(cart, code):
    assert cart.applied_coupon is not None
    assert cart.applied_coupon.code == code


@then("the cart action fails with a validation error")
def cart_action_fails(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)


@then(parsers.cfparse("a {event_type} cart event is raised"))
def cart_event_raised(cart, event_type):
    event_cls = _CART_EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in cart._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in cart._events]}"


@then(parsers.cfparse("no {event_type} cart event is raised"))
def cart_event_not_raised(cart, event_type):
    event_cls = _CART_EVENT_CLASSES[event_type]
    assert not any(isinstance(e, event_cls) for e in cart._events)
