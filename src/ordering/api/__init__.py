"""Ordering domain API package."""

from ordering.api.routes import cart_router, coupon_router

__all__ = ["cart_router", "coupon_router"]
