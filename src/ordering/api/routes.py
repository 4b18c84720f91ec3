"""FastAPI routes for the Ordering domain — carts and coupons."""

import json

from fastapi import APIRouter
from protean.utils.globals import current_domain

from ordering.api.schemas import (
    AddToCartRequest,
    CreateCouponRequest,
    EditCouponRequest,
    SelectCouponRequest,
    SetCartQuantityRequest,
    ValidateCouponRequest,
)
from ordering.cart.items import AddToCart, RemoveFromCart, SetCartQuantity
from ordering.cart.management import ClearCart
from ordering.cart.summary import cart_summary
from ordering.coupon.management import CreateCoupon, DeleteCoupon, EditCoupon, list_coupons
from ordering.coupon.selection import SelectCoupon, UnselectCoupon
from ordering.coupon.validation import validate_coupon
from shared.api import ok

# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


@cart_router.get("/{user_id}")
async def get_cart(user_id: str):
    return ok("Cart fetched successfully", cart_summary(user_id))


@cart_router.post("/{user_id}/items")
async def add_cart_item(user_id: str, body: AddToCartRequest):
    command = AddToCart(
        user_id=user_id,
        product_id=body.product_id,
        weight_option=body.weight_option,
        quantity=body.quantity,
        price=body.price,
    )
    result = current_domain.process(command, asynchronous=False)
    return ok("Item added to cart", result)


@cart_router.put("/{user_id}/items/{product_id}")
async def set_cart_quantity(user_id: str, product_id: str, body: SetCartQuantityRequest):
    command = SetCartQuantity(
        user_id=user_id,
        product_id=product_id,
        weight_option=body.weight_option,
        quantity=body.quantity,
    )
    result = current_domain.process(command, asynchronous=False)
    return ok("Cart updated", result)


@cart_router.delete("/{user_id}/items/{product_id}")
async def remove_cart_item(user_id: str, product_id: str, weight_option: str | None = None):
    command = RemoveFromCart(user_id=user_id, product_id=product_id, weight_option=weight_option)
    result = current_domain.process(command, asynchronous=False)
    return ok("Item removed from cart", result)


@cart_router.delete("/{user_id}/items")
async def clear_cart(user_id: str):
    result = current_domain.process(ClearCart(user_id=user_id), asynchronous=False)
    return ok("Cart cleared", result)


@cart_router.post("/{user_id}/coupon")
async def select_coupon(user_id: str, body: SelectCouponRequest):
    command = SelectCoupon(user_id=user_id, coupon=body.coupon)
    result = current_domain.process(command, asynchronous=False)
    return ok("Coupon applied to cart", result)


@cart_router.delete("/{user_id}/coupon")
async def unselect_coupon(user_id: str):
    result = current_domain.process(UnselectCoupon(user_id=user_id), asynchronous=False)
    return ok("Coupon removed from cart", result)


# ---------------------------------------------------------------------------
# Coupon Router
# ---------------------------------------------------------------------------
coupon_router = APIRouter(prefix="/coupons", tags=["coupons"])


@coupon_router.get("")
async def get_coupons(active: bool | None = None, expired: bool | None = None, search: str | None = None):
    return ok("Coupons fetched successfully", list_coupons(active=active, expired=expired, search=search))


@coupon_router.post("", status_code=201)
async def create_coupon(body: CreateCouponRequest):
    command = CreateCoupon(
        code=body.code,
        description=body.description,
        discount_type=body.discount_type,
        discount_value=body.discount_value,
        min_order_value=body.min_order_value,
        max_discount=body.max_discount,
        usage_limit=body.usage_limit,
        usage_limit_per_user=body.usage_limit_per_user,
        expiry_date=body.expiry_date,
        is_active=body.is_active,
        applicable_products=json.dumps(body.applicable_products),
        applicable_categories=json.dumps(body.applicable_categories),
    )
    result = current_domain.process(command, asynchronous=False)
    return ok("Coupon created successfully", result, status=201)


@coupon_router.post("/validate")
async def validate(body: ValidateCouponRequest):
    result = validate_coupon(
        code=body.code,
        user_id=body.user_id,
        cart_total=body.cart_total,
        items=[item.model_dump() for item in body.items],
    )
    return ok("Coupon applied successfully", result)


@coupon_router.put("/{coupon_id}")
async def edit_coupon(coupon_id: str, body: EditCouponRequest):
    fields = body.model_dump(exclude_none=True)
    for key in ("applicable_products", "applicable_categories"):
        if key in fields:
            fields[key] = json.dumps(fields[key])
    result = current_domain.process(EditCoupon(coupon_id=coupon_id, **fields), asynchronous=False)
    return ok("Coupon updated successfully", result)


@coupon_router.delete("/{coupon_id}")
async def delete_coupon(coupon_id: str):
    result = current_domain.process(DeleteCoupon(coupon_id=coupon_id), asynchronous=False)
    return ok("Coupon deleted successfully", result)
