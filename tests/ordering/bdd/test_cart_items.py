"""BDD tests for cart item management."""

from protean.exceptions import ValidationError
from pytest_bdd import parsers, scenarios, then, when

scenarios("features/cart_items.feature")


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('"{product_id}" in "{weight}" is added with quantity {qty:d} at {price:g}'))
def add_item_to_cart(cart, product_id, weight, qty, price, error):
    try:
        cart.add_item(product_id=product_id, quantity=qty, price=price, weight_option=weight)
    except ValidationError as exc:
        error["exc"] = exc


@when(parsers.cfparse('the quantity of "{product_id}" in "{weight}" is set to {qty:d}'))
def set_item_quantity(cart, product_id, weight, qty):
    cart.set_quantity(product_id, qty, weight_option=weight)


@when("the cart is cleared")
def clear_cart(cart):
    cart.clear()


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the line for "{product_id}" in "{weight}" has quantity {qty:d}'))
def line_has_quantity(cart, product_id, weight, qty):
    line = cart.find_line(product_id, weight)
    assert line is not None
    assert line.quantity == qty
