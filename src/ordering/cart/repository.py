"""Repository for the Cart aggregate — one cart per user."""

from ordering.cart.cart import Cart
from ordering.domain import ordering


@ordering.repository(part_of=Cart)
class CartRepository:
    def for_user(self, user_id) -> Cart | None:
        """The user's cart, or None when it has not been created yet."""
        carts = self._dao.query.filter(user_id=str(user_id)).all().items
        return carts[0] if carts else None

    def get_or_create(self, user_id) -> Cart:
        """Fetch the user's cart, persisting an empty one on first access."""
        cart = self.for_user(user_id)
        if cart is None:
            cart = Cart.create(user_id=str(user_id))
            self.add(cart)
        return cart
