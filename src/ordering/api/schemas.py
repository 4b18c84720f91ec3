"""Pydantic request schemas for the Ordering API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    weight_option: str | None = None
    quantity: int = Field(ge=1)
    price: float = Field(ge=0)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "prod-001",
                    "weight_option": "500g",
                    "quantity": 2,
                    "price": 100.0,
                }
            ]
        }
    }


class SetCartQuantityRequest(BaseModel):
    weight_option: str | None = None
    quantity: int = Field(ge=0)


class SelectCouponRequest(BaseModel):
    coupon: str = Field(min_length=1, description="Coupon id or code")


# ---------------------------------------------------------------------------
# Coupon Request Schemas
# ---------------------------------------------------------------------------
class CreateCouponRequest(BaseModel):
    code: str
    description: str | None = None
    discount_type: Literal["percentage", "fixed"]
    discount_value: float
    min_order_value: float = Field(default=0, ge=0)
    max_discount: float | None = Field(default=None, ge=0)
    usage_limit: int | None = Field(default=None, ge=1)
    usage_limit_per_user: int = Field(default=1, ge=1)
    expiry_date: datetime | None = None
    is_active: bool = True
    applicable_products: list[str] = Field(default_factory=list)
    applicable_categories: list[str] = Field(default_factory=list)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "code": "SAVE10",
                    "description": "10% off the whole cart",
                    "discount_type": "percentage",
                    "discount_value": 10,
                }
            ]
        }
    }


class EditCouponRequest(BaseModel):
    code: str | None = None
    description: str | None = None
    discount_type: Literal["percentage", "fixed"] | None = None
    discount_value: float | None = None
    min_order_value: float | None = Field(default=None, ge=0)
    max_discount: float | None = Field(default=None, ge=0)
    usage_limit: int | None = Field(default=None, ge=1)
    usage_limit_per_user: int | None = Field(default=None, ge=1)
    expiry_date: datetime | None = None
    clear_expiry: bool = False
    is_active: bool | None = None
    applicable_products: list[str] | None = None
    applicable_categories: list[str] | None = None


class CouponItemSchema(BaseModel):
    product_id: str | None = None
    category_id: str | None = None


class ValidateCouponRequest(BaseModel):
    code: str
    user_id: str
    cart_total: float
    items: list[CouponItemSchema] = Field(default_factory=list)
