"""Domain events for the Coupon aggregate."""

from protean.fields import DateTime, Float, Identifier, String

from ordering.domain import ordering


@ordering.event(part_of="Coupon")
class CouponCreated:
    __version__ = 1

    coupon_id = Identifier(required=True)
    code = String(required=True)
    discount_type = String(required=True)
    discount_value = Float(required=True)
    expiry_date = DateTime()


@ordering.event(part_of="Coupon")
class CouponUpdated:
    __version__ = 1

    coupon_id = Identifier(required=True)
    code = String(required=True)
    changed_fields = String()  # comma-separated field names


@ordering.event(part_of="Coupon")
class CouponDeleted:
    __version__ = 1

    coupon_id = Identifier(required=True)
    code = String(required=True)
