"""Domain events for the Cart aggregate."""

from protean.fields import Float, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="Cart")
class CartItemAdded:
    """Units of a product variant were added to the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    weight_option = String()
    quantity = Integer(required=True)
    price = Float(required=True)


@ordering.event(part_of="Cart")
class CartQuantityUpdated:
    """The quantity of a cart line was overwritten."""

    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    weight_option = String()
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@ordering.event(part_of="Cart")
class CartItemRemoved:
    """A line was removed from the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    weight_option = String()


@ordering.event(part_of="Cart")
class CartCleared:
    """Every line was removed from the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    removed_line_count = Integer(required=True)


@ordering.event(part_of="Cart")
class CartCouponApplied:
    """A coupon snapshot was bound to the cart, replacing any previous one."""

    __version__ = 1

    cart_id = Identifier(required=True)
    coupon_id = String(required=True)
    coupon_code = String(required=True)
    replaced_coupon_code = String()


@ordering.event(part_of="Cart")
class CartCouponReleased:
    """The applied coupon was removed from the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    coupon_code = String(required=True)
    reason = String(required=True)
