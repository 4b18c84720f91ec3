"""Coupon catalogue — create, edit, delete and list coupons."""

import json
from datetime import UTC, datetime

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from ordering.cart.pricing import DiscountType
from ordering.coupon.coupon import Coupon, as_utc, normalize_code
from ordering.domain import ordering
from shared.errors import ConflictError, NotFoundError

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Coupon")
class CreateCoupon:
    code = String(required=True, max_length=50)
    description = String(max_length=500)
    discount_type = String(required=True, choices=DiscountType)
    discount_value = Float(required=True)
    min_order_value = Float(default=0.0, min_value=0.0)
    max_discount = Float(min_value=0.0)
    usage_limit = Integer(min_value=1)
    usage_limit_per_user = Integer(default=1, min_value=1)
    expiry_date = DateTime()
    is_active = Boolean(default=True)
    applicable_products = Text()  # JSON list of product ids
    applicable_categories = Text()  # JSON list of category ids


@ordering.command(part_of="Coupon")
class EditCoupon:
    """Partial edit. Unset fields are left alone; ``clear_expiry`` removes the expiry."""

    coupon_id = Identifier(required=True)
    code = String(max_length=50)
    description = String(max_length=500)
    discount_type = String(choices=DiscountType)
    discount_value = Float()
    min_order_value = Float(min_value=0.0)
    max_discount = Float(min_value=0.0)
    usage_limit = Integer(min_value=1)
    usage_limit_per_user = Integer(min_value=1)
    expiry_date = DateTime()
    clear_expiry = Boolean(default=False)
    is_active = Boolean()
    applicable_products = Text()
    applicable_categories = Text()


@ordering.command(part_of="Coupon")
class DeleteCoupon:
    coupon_id = Identifier(required=True)


def _json_list(value):
    if value is None:
        return None
    parsed = json.loads(value) if isinstance(value, str) else value
    if not isinstance(parsed, list):
        raise ValidationError({"applicable_products": ["Must be a list"]})
    return [str(v) for v in parsed]


def _live_coupon(coupon_id) -> Coupon:
    coupon = current_domain.repository_for(Coupon).resolve(coupon_id)
    if coupon is None:
        raise NotFoundError("Coupon not found", coupon_id=str(coupon_id))
    return coupon


def _ensure_code_free(code, except_id=None) -> None:
    existing = current_domain.repository_for(Coupon).by_code(code)
    if existing is not None and str(existing.id) != str(except_id):
        raise ConflictError("Coupon code already exists", code=normalize_code(code))


@ordering.command_handler(part_of=Coupon)
class ManageCouponHandler:
    @handle(CreateCoupon)
    def create_coupon(self, command):
        if not normalize_code(command.code):
            raise ValidationError({"code": ["Coupon code is required"]})
        if command.expiry_date is not None and as_utc(command.expiry_date) <= datetime.now(UTC):
            raise ValidationError({"expiry_date": ["Expiry date must be in the future"]})
        _ensure_code_free(command.code)

        coupon = Coupon.create(
            code=command.code,
            description=command.description,
            discount_type=command.discount_type,
            discount_value=command.discount_value,
            min_order_value=command.min_order_value,
            max_discount=command.max_discount,
            usage_limit=command.usage_limit,
            usage_limit_per_user=command.usage_limit_per_user,
            expiry_date=command.expiry_date,
            is_active=command.is_active,
            applicable_products=_json_list(command.applicable_products),
            applicable_categories=_json_list(command.applicable_categories),
        )
        current_domain.repository_for(Coupon).add(coupon)

        logger.info("Coupon created", coupon_id=str(coupon.id), code=coupon.code)
        return coupon.to_dict()

    @handle(EditCoupon)
    def edit_coupon(self, command):
        coupon = _live_coupon(command.coupon_id)

        changes = {}
        for field in (
            "description",
            "discount_type",
            "discount_value",
            "min_order_value",
            "max_discount",
            "usage_limit",
            "usage_limit_per_user",
            "expiry_date",
            "is_active",
        ):
            value = getattr(command, field)
            if value is not None:
                changes[field] = value
        for field in ("applicable_products", "applicable_categories"):
            value = getattr(command, field)
            if value is not None:
                changes[field] = _json_list(value)
        if command.clear_expiry:
            changes["expiry_date"] = None

        if command.code is not None:
            if not normalize_code(command.code):
                raise ValidationError({"code": ["Coupon code is required"]})
            if normalize_code(command.code) != coupon.code:
                _ensure_code_free(command.code, except_id=coupon.id)
            changes["code"] = command.code

        coupon.update(**changes)
        current_domain.repository_for(Coupon).add(coupon)

        logger.info("Coupon updated", coupon_id=str(coupon.id), fields=sorted(changes))
        return coupon.to_dict()

    @handle(DeleteCoupon)
    def delete_coupon(self, command):
        coupon = _live_coupon(command.coupon_id)
        coupon.soft_delete()
        current_domain.repository_for(Coupon).add(coupon)

        logger.info("Coupon deleted", coupon_id=str(coupon.id), code=coupon.code)
        return {"coupon_id": str(coupon.id)}


def list_coupons(active: bool | None = None, expired: bool | None = None, search: str | None = None) -> list[dict]:
    """Non-deleted coupons, newest first.

    ``active`` filters on the active flag, ``expired`` on whether the expiry
    date has passed, and ``search`` matches code or description
    case-insensitively.
    """
    now = datetime.now(UTC)
    coupons = current_domain.repository_for(Coupon).live()

    if active is not None:
        coupons = [c for c in coupons if bool(c.is_active) == active]
    if expired is not None:
        coupons = [c for c in coupons if c.is_expired(now) == expired]
    if search:
        needle = search.lower()
        coupons = [
            c for c in coupons if needle in (c.code or "").lower() or needle in (c.description or "").lower()
        ]

    epoch = datetime.min.replace(tzinfo=UTC)
    coupons.sort(key=lambda c: as_utc(c.created_at) or epoch, reverse=True)
    return [c.to_dict() for c in coupons]
