"""Pydantic request schemas for the Identity API."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

# --- Request Schemas ---


class AddAddressRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "label": "Home",
                    "name": "Asha Rao",
                    "phone": "9876543210",
                    "line": "12 MG Road",
                    "city": "Bengaluru",
                    "state": "Karnataka",
                    "pincode": "560001",
                    "is_default": True,
                }
            ]
        }
    }

    label: Literal["Home", "Work", "Other"] = "Home"
    address_type: Literal["Home", "Work", "Other", "OtherDetailed"] = "Home"
    name: str = Field(..., max_length=100)
    phone: str = Field(..., max_length=20)
    email: str | None = Field(None, max_length=254)
    line: str = Field(..., max_length=500)
    landmark: str | None = Field(None, max_length=255)
    city: str = Field(..., max_length=100)
    state: str = Field(..., max_length=100)
    country: str | None = Field(None, max_length=100)
    pincode: str = Field(..., max_length=20)
    lat: float | None = None
    lng: float | None = None
    is_default: bool = False
    is_primary: bool = False


class UpdateAddressRequest(BaseModel):
    label: Literal["Home", "Work", "Other"] | None = None
    address_type: Literal["Home", "Work", "Other", "OtherDetailed"] | None = None
    name: str | None = Field(None, max_length=100)
    phone: str | None = Field(None, max_length=20)
    email: str | None = Field(None, max_length=254)
    line: str | None = Field(None, max_length=500)
    landmark: str | None = Field(None, max_length=255)
    city: str | None = Field(None, max_length=100)
    state: str | None = Field(None, max_length=100)
    country: str | None = Field(None, max_length=100)
    pincode: str | None = Field(None, max_length=20)
    lat: float | None = None
    lng: float | None = None
    is_default: bool | None = None
    is_primary: bool | None = None


AddressFlagName = Literal["default", "primary"]
