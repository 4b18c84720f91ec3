"""Coupon selection — binding a catalogue coupon to the user's cart.

Selecting copies the coupon's terms onto the cart as a snapshot and records
the selection for checkout. The last selection wins. Unselecting releases
the snapshot and always drops the selection record, even when the cart held
no coupon.
"""

import json
from datetime import UTC, datetime

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.cart.cart import AppliedCoupon, Cart, CouponReleaseReason
from ordering.coupon.coupon import Coupon
from ordering.coupon.selected import SelectedCoupon
from ordering.domain import ordering
from shared.errors import CouponExpiredError, CouponUnavailableError, NotFoundError

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Cart")
class SelectCoupon:
    user_id = Identifier(required=True)
    coupon = String(required=True, max_length=100)  # coupon id or code


@ordering.command(part_of="Cart")
class UnselectCoupon:
    user_id = Identifier(required=True)


def usable_coupon(id_or_code) -> Coupon:
    """Resolve a coupon that can be applied right now."""
    coupon = current_domain.repository_for(Coupon).resolve(id_or_code)
    if coupon is None:
        raise NotFoundError("Coupon not found", coupon=str(id_or_code))
    if not coupon.is_active:
        raise CouponUnavailableError("This coupon is currently inactive", code=coupon.code, reason="inactive")
    if coupon.is_expired():
        raise CouponExpiredError(coupon.code)
    return coupon


def snapshot_of(coupon: Coupon) -> AppliedCoupon:
    return AppliedCoupon(
        coupon_id=str(coupon.id),
        code=coupon.code,
        discount_type=coupon.discount_type,
        discount_value=coupon.discount_value,
        applied_to_products=json.dumps([]),
        discount=0.0,
        applied_at=datetime.now(UTC),
    )


@ordering.command_handler(part_of=Cart)
class CouponSelectionHandler:
    @handle(SelectCoupon)
    def select_coupon(self, command):
        coupon = usable_coupon(command.coupon)

        repo = current_domain.repository_for(Cart)
        cart = repo.get_or_create(command.user_id)
        snapshot = snapshot_of(coupon)
        cart.apply_coupon(snapshot)
        repo.add(cart)

        current_domain.repository_for(SelectedCoupon).bind_selection(
            command.user_id, coupon.id, coupon.code
        )

        logger.info("Coupon selected", user_id=str(command.user_id), code=coupon.code)
        return snapshot.to_dict()

    @handle(UnselectCoupon)
    def unselect_coupon(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.for_user(command.user_id)

        released = False
        if cart is not None and cart.release_coupon(CouponReleaseReason.UNSELECTED):
            repo.add(cart)
            released = True

        self.selection_record_cleared(command.user_id)

        logger.info("Coupon unselected", user_id=str(command.user_id), released=released)
        return {}

    def selection_record_cleared(self, user_id) -> None:
        """Post-condition of unselect: no selection record survives."""
        current_domain.repository_for(SelectedCoupon).clear_for(user_id)
