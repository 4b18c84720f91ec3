"""Coupon aggregate — the promotion catalogue.

Codes are stored trimmed and upper-cased, so lookups are case-insensitive.
Deleting a coupon is a soft delete; carts that already hold a snapshot of it
are unaffected.
"""

import json
from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, String, Text

from ordering.cart.pricing import DiscountType
from ordering.coupon.events import CouponCreated, CouponDeleted, CouponUpdated
from ordering.domain import ordering

EDITABLE_FIELDS = (
    "code",
    "description",
    "discount_type",
    "discount_value",
    "min_order_value",
    "max_discount",
    "usage_limit",
    "usage_limit_per_user",
    "expiry_date",
    "is_active",
    "applicable_products",
    "applicable_categories",
)


def normalize_code(code) -> str:
    return str(code or "").strip().upper()


def as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


@ordering.aggregate
class Coupon:
    code = String(required=True, min_length=3, max_length=20)
    description = String(max_length=500)
    discount_type = String(required=True, choices=DiscountType)
    discount_value = Float(required=True, min_value=0.0)
    min_order_value = Float(default=0.0, min_value=0.0)
    max_discount = Float(min_value=0.0)
    usage_limit = Integer(min_value=1)
    usage_limit_per_user = Integer(default=1, min_value=1)
    used_count = Integer(default=0, min_value=0)
    user_usage = Text()  # JSON: {user_id: count}
    expiry_date = DateTime()
    is_active = Boolean(default=True)
    applicable_products = Text()  # JSON list of product ids
    applicable_categories = Text()  # JSON list of category ids
    is_deleted = Boolean(default=False)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def discount_value_must_be_positive(self):
        if self.discount_value is None or self.discount_value <= 0:
            raise ValidationError({"discount_value": ["Discount value must be greater than 0"]})

    @invariant.post
    def percentage_cannot_exceed_100(self):
        if (
            self.discount_type == DiscountType.PERCENTAGE.value
            and self.discount_value is not None
            and self.discount_value > 100
        ):
            raise ValidationError({"discount_value": ["Percentage discount cannot exceed 100"]})

    @classmethod
    def create(
        cls,
        code,
        discount_type,
        discount_value,
        description=None,
        min_order_value=0.0,
        max_discount=None,
        usage_limit=None,
        usage_limit_per_user=1,
        expiry_date=None,
        is_active=True,
        applicable_products=None,
        applicable_categories=None,
    ):
        now = datetime.now(UTC)
        coupon = cls(
            code=normalize_code(code),
            description=description,
            discount_type=discount_type,
            discount_value=discount_value,
            min_order_value=min_order_value or 0.0,
            max_discount=max_discount,
            usage_limit=usage_limit,
            usage_limit_per_user=usage_limit_per_user or 1,
            user_usage=json.dumps({}),
            expiry_date=expiry_date,
            is_active=True if is_active is None else is_active,
            applicable_products=json.dumps(list(applicable_products or [])),
            applicable_categories=json.dumps(list(applicable_categories or [])),
            created_at=now,
            updated_at=now,
        )
        coupon.raise_(
            CouponCreated(
                coupon_id=str(coupon.id),
                code=coupon.code,
                discount_type=coupon.discount_type,
                discount_value=coupon.discount_value,
                expiry_date=coupon.expiry_date,
            )
        )
        return coupon

    def update(self, **changes):
        """Apply a partial edit; keys outside ``EDITABLE_FIELDS`` are rejected."""
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationError({field: ["Field cannot be edited"] for field in sorted(unknown)})

        if "code" in changes:
            changes["code"] = normalize_code(changes["code"])
        for field in ("applicable_products", "applicable_categories"):
            if field in changes:
                changes[field] = json.dumps(list(changes[field] or []))

        # Type and value may change together, so invariants run once at the end
        with atomic_change(self):
            for field, value in changes.items():
                setattr(self, field, value)
            self.updated_at = datetime.now(UTC)

        self.raise_(
            CouponUpdated(
                coupon_id=str(self.id),
                code=self.code,
                changed_fields=",".join(sorted(changes)),
            )
        )

    def soft_delete(self):
        self.is_deleted = True
        self.updated_at = datetime.now(UTC)
        self.raise_(CouponDeleted(coupon_id=str(self.id), code=self.code))

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def is_expired(self, now: datetime | None = None) -> bool:
        expiry = as_utc(self.expiry_date)
        return expiry is not None and expiry < (now or datetime.now(UTC))

    def usage_by(self, user_id) -> int:
        usage = json.loads(self.user_usage) if self.user_usage else {}
        return int(usage.get(str(user_id), 0))

    def product_ids(self) -> list[str]:
        return json.loads(self.applicable_products) if self.applicable_products else []

    def category_ids(self) -> list[str]:
        return json.loads(self.applicable_categories) if self.applicable_categories else []

    def to_dict(self) -> dict:
        return {
            "coupon_id": str(self.id),
            "code": self.code,
            "description": self.description,
            "discount_type": self.discount_type,
            "discount_value": self.discount_value,
            "min_order_value": self.min_order_value,
            "max_discount": self.max_discount,
            "usage_limit": self.usage_limit,
            "usage_limit_per_user": self.usage_limit_per_user,
            "used_count": self.used_count,
            "expiry_date": self.expiry_date.isoformat() if self.expiry_date else None,
            "is_active": self.is_active,
            "applicable_products": self.product_ids(),
            "applicable_categories": self.category_ids(),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
