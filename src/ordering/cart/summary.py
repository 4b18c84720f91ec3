"""Read side of the cart: lines joined with catalogue display fields, plus totals."""

from protean.utils.globals import current_domain

from ordering.cart.cart import Cart
from ordering.cart.pricing import line_total
from ordering.catalogue import get_catalogue
from shared.errors import CollaboratorError


def _line_view(line, product) -> dict:
    available = None
    if product is not None:
        variant = product.variant(line.weight_option)
        if variant is not None:
            available = variant.quantity

    return {
        "id": str(line.id),
        "product_id": str(line.product_id),
        "weight_option": line.weight_option,
        "quantity": line.quantity,
        "price": line.price,
        "line_total": line_total(line),
        "product_name": product.title if product else None,
        "product_image": product.image if product else None,
        "available": available,
        "added_at": line.added_at.isoformat() if line.added_at else None,
    }


def cart_summary(user_id) -> dict:
    """Get-or-create the user's cart and render it with totals.

    Lines whose product has since disappeared from the catalogue are still
    listed, with empty display fields.
    """
    cart = current_domain.repository_for(Cart).get_or_create(user_id)

    product_ids = sorted({str(line.product_id) for line in cart.items})
    try:
        products = get_catalogue().find_many(product_ids) if product_ids else {}
    except Exception as exc:
        raise CollaboratorError(f"Product lookup failed: {exc}") from exc

    totals = cart.totals()
    return {
        "cart_id": str(cart.id),
        "user_id": str(cart.user_id),
        "items": [_line_view(line, products.get(str(line.product_id))) for line in cart.items],
        "item_count": len(cart.items),
        "applied_coupon": cart.applied_coupon.to_dict() if cart.applied_coupon else None,
        **totals.to_dict(),
    }
