"""Ordering bounded context — Shopping Cart and Promotions.

Owns the per-user cart, the coupon catalogue and the coupon selection
workflow that binds a coupon snapshot to a cart.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
