"""Cart management — clearing the cart."""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from ordering.cart.cart import Cart
from ordering.cart.items import cart_result, drop_selection_if_released
from ordering.domain import ordering

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Cart")
class ClearCart:
    """Remove every line and the applied coupon from the user's cart."""

    user_id = Identifier(required=True)


@ordering.command_handler(part_of=Cart)
class ManageCartHandler:
    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get_or_create(command.user_id)
        cart.clear()
        repo.add(cart)
        drop_selection_if_released(cart)

        logger.info("Cart cleared", user_id=str(command.user_id))
        return cart_result(cart)
