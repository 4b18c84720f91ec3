"""Cart line commands — add, set quantity, remove.

Every command addresses the user's cart (created on first access). Product
existence and stock are checked against the catalogue before the aggregate is
touched. When a removal leaves the cart empty the aggregate releases its
coupon, and the handler drops the user's selected-coupon record with it.
"""

import structlog
from protean import handle
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from ordering.cart.cart import Cart
from ordering.cart.stock import StockMode, StockValidator
from ordering.catalogue import get_catalogue
from ordering.coupon.selected import SelectedCoupon
from ordering.domain import ordering
from shared.errors import CollaboratorError, NotFoundError

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Cart")
class AddToCart:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    weight_option = String(max_length=50)
    quantity = Integer(required=True, min_value=1)
    price = Float(required=True, min_value=0.0)


@ordering.command(part_of="Cart")
class SetCartQuantity:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    weight_option = String(max_length=50)
    quantity = Integer(required=True, min_value=0)


@ordering.command(part_of="Cart")
class RemoveFromCart:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    weight_option = String(max_length=50)


def live_product(product_id):
    """Catalogue snapshot of ``product_id``; NotFound when missing or deleted."""
    try:
        product = get_catalogue().find(str(product_id))
    except Exception as exc:
        raise CollaboratorError(f"Product lookup failed: {exc}", product_id=str(product_id)) from exc

    if product is None or product.is_deleted:
        raise NotFoundError("Product not found", product_id=str(product_id))
    return product


def cart_result(cart: Cart) -> dict:
    return {"cart_id": str(cart.id), "item_count": len(cart.items)}


def drop_selection_if_released(cart: Cart) -> None:
    """Keep the selected-coupon record in step with the cart's coupon slot."""
    if cart.has_coupon:
        return

    current_domain.repository_for(SelectedCoupon).clear_for(cart.user_id)


@ordering.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        live_product(command.product_id)

        repo = current_domain.repository_for(Cart)
        cart = repo.get_or_create(command.user_id)

        StockValidator(get_catalogue()).ensure(
            command.product_id,
            command.weight_option,
            cart.quantity_of(command.product_id, command.weight_option),
            command.quantity,
            StockMode.ADD,
        )

        cart.add_item(
            product_id=command.product_id,
            weight_option=command.weight_option,
            quantity=command.quantity,
            price=command.price,
        )
        repo.add(cart)

        logger.info(
            "Cart item added",
            user_id=str(command.user_id),
            product_id=str(command.product_id),
            weight_option=command.weight_option,
            quantity=command.quantity,
        )
        return cart_result(cart)

    @handle(SetCartQuantity)
    def set_cart_quantity(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get_or_create(command.user_id)

        if command.quantity > 0:
            if cart.find_line(command.product_id, command.weight_option) is None:
                raise NotFoundError(
                    "Item not found in cart",
                    product_id=str(command.product_id),
                    weight_option=command.weight_option,
                )
            StockValidator(get_catalogue()).ensure(
                command.product_id,
                command.weight_option,
                cart.quantity_of(command.product_id, command.weight_option),
                command.quantity,
                StockMode.SET,
            )

        cart.set_quantity(
            product_id=command.product_id,
            weight_option=command.weight_option,
            quantity=command.quantity,
        )
        repo.add(cart)
        drop_selection_if_released(cart)

        logger.info(
            "Cart quantity set",
            user_id=str(command.user_id),
            product_id=str(command.product_id),
            weight_option=command.weight_option,
            quantity=command.quantity,
        )
        return cart_result(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get_or_create(command.user_id)
        cart.remove_item(product_id=command.product_id, weight_option=command.weight_option)
        repo.add(cart)
        drop_selection_if_released(cart)

        logger.info(
            "Cart item removed",
            user_id=str(command.user_id),
            product_id=str(command.product_id),
            weight_option=command.weight_option,
        )
        return cart_result(cart)
