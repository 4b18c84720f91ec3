"""AddressBook aggregate root with Address entities.

Each user owns one book. Among the live (not deleted) addresses at most one
is the default and, independently, at most one is the primary. Flag changes
flip every affected address inside this aggregate, so the book is persisted
in a single write, and ``flags_revision`` moves on every flag change so two
concurrent writers of the same book collide on its version.
"""

import re
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String

from identity.address.events import AddressAdded, AddressFlagChanged, AddressRemoved, AddressUpdated
from identity.domain import identity
from shared.flags import active_members, find_member, set_active, unset_active

MAX_ADDRESSES = 10

_PHONE = re.compile(r"^\d{10}$")
_PINCODE = re.compile(r"^\d{6}$")
_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

EDITABLE_FIELDS = (
    "label",
    "address_type",
    "name",
    "phone",
    "email",
    "line",
    "landmark",
    "city",
    "state",
    "country",
    "pincode",
    "lat",
    "lng",
)


def contact_errors(phone=None, pincode=None, email=None) -> dict:
    """Format errors for whichever of phone, pincode and email are given."""
    errors = {}
    if phone is not None and not _PHONE.match(phone):
        errors["phone"] = ["Valid 10-digit phone number is required"]
    if pincode is not None and not _PINCODE.match(pincode):
        errors["pincode"] = ["Valid 6-digit pincode is required"]
    if email and not _EMAIL.match(email):
        errors["email"] = ["Invalid email address"]
    return errors


class AddressLabel(Enum):
    HOME = "Home"
    WORK = "Work"
    OTHER = "Other"


class AddressType(Enum):
    HOME = "Home"
    WORK = "Work"
    OTHER = "Other"
    OTHER_DETAILED = "OtherDetailed"


class AddressFlag(Enum):
    """Single-active flags an address can carry, mapped to their field."""

    DEFAULT = "default"
    PRIMARY = "primary"

    @property
    def field(self) -> str:
        return f"is_{self.value}"


@identity.entity(part_of="AddressBook")
class Address:
    label: String(choices=AddressLabel, default=AddressLabel.HOME.value)
    address_type: String(choices=AddressType, default=AddressType.HOME.value)
    name: String(required=True, max_length=100)
    phone: String(required=True, max_length=10)
    email: String(max_length=254)
    line: String(required=True, max_length=500)
    landmark: String(max_length=255)
    city: String(required=True, max_length=100)
    state: String(required=True, max_length=100)
    country: String(max_length=100)
    pincode: String(required=True, max_length=6)
    lat: Float(min_value=-90.0, max_value=90.0)
    lng: Float(min_value=-180.0, max_value=180.0)
    is_default: Boolean(default=False)
    is_primary: Boolean(default=False)
    is_deleted: Boolean(default=False)
    created_at: DateTime()

    @invariant.post
    def contact_details_must_be_well_formed(self):
        errors = contact_errors(self.phone, self.pincode, self.email)
        if errors:
            raise ValidationError(errors)

    def to_dict(self) -> dict:
        return {
            "address_id": str(self.id),
            "label": self.label,
            "address_type": self.address_type,
            "name": self.name,
            "phone": self.phone,
            "email": self.email,
            "line": self.line,
            "landmark": self.landmark,
            "city": self.city,
            "state": self.state,
            "country": self.country,
            "pincode": self.pincode,
            "lat": self.lat,
            "lng": self.lng,
            "is_default": bool(self.is_default),
            "is_primary": bool(self.is_primary),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


def _strip(value):
    return value.strip() if isinstance(value, str) else value


@identity.aggregate
class AddressBook:
    user_id: Identifier(required=True, unique=True)
    addresses: HasMany(Address)
    flags_revision: Integer(default=0)

    @invariant.post
    def live_addresses_cannot_exceed_maximum(self):
        if len(self.live_addresses()) > MAX_ADDRESSES:
            raise ValidationError({"addresses": [f"Cannot have more than {MAX_ADDRESSES} addresses"]})

    @invariant.post
    def at_most_one_default_address(self):
        if len(active_members(self.addresses, "is_default")) > 1:
            raise ValidationError({"addresses": ["Only one address can be the default"]})

    @invariant.post
    def at_most_one_primary_address(self):
        if len(active_members(self.addresses, "is_primary")) > 1:
            raise ValidationError({"addresses": ["Only one address can be the primary"]})

    @classmethod
    def create(cls, user_id):
        return cls(user_id=user_id)

    def live_addresses(self) -> list:
        return [a for a in self.addresses if not a.is_deleted]

    def sorted_addresses(self) -> list:
        """Live addresses, default first, then newest first."""
        epoch = datetime.min.replace(tzinfo=UTC)

        def created(address):
            value = address.created_at
            if value is None:
                return epoch
            return value if value.tzinfo else value.replace(tzinfo=UTC)

        newest_first = sorted(self.live_addresses(), key=created, reverse=True)
        return sorted(newest_first, key=lambda a: not a.is_default)

    def find(self, address_id):
        return find_member(self.addresses, address_id)

    def add_address(self, is_default=False, is_primary=False, **fields):
        if len(self.live_addresses()) >= MAX_ADDRESSES:
            raise ValidationError({"addresses": [f"Cannot have more than {MAX_ADDRESSES} addresses"]})
        errors = contact_errors(
            _strip(fields.get("phone")), _strip(fields.get("pincode")), _strip(fields.get("email"))
        )
        if errors:
            raise ValidationError(errors)

        address = Address(
            **{k: _strip(v) for k, v in fields.items()},
            created_at=datetime.now(UTC),
        )
        self.add_addresses(address)
        self.raise_(
            AddressAdded(
                user_id=str(self.user_id),
                address_id=str(address.id),
                label=address.label,
                city=address.city,
                pincode=address.pincode,
            )
        )

        if is_default:
            self.set_flag(address.id, AddressFlag.DEFAULT, True)
        if is_primary:
            self.set_flag(address.id, AddressFlag.PRIMARY, True)
        return address

    def update_address(self, address_id, is_default=None, is_primary=None, **changes):
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationError({field: ["Field cannot be edited"] for field in sorted(unknown)})

        address = self.find(address_id)
        for field in ("name", "line", "city", "state"):
            if field in changes and not _strip(changes[field]):
                raise ValidationError({field: [f"{field.capitalize()} cannot be empty"]})
        errors = contact_errors(
            **{f: _strip(changes[f]) for f in ("phone", "pincode", "email") if f in changes}
        )
        if errors:
            raise ValidationError(errors)

        with atomic_change(self):
            for field, value in changes.items():
                setattr(address, field, _strip(value))

        if changes:
            self.raise_(
                AddressUpdated(
                    user_id=str(self.user_id),
                    address_id=str(address.id),
                    changed_fields=",".join(sorted(changes)),
                )
            )

        if is_default is not None:
            self.set_flag(address.id, AddressFlag.DEFAULT, is_default)
        if is_primary is not None:
            self.set_flag(address.id, AddressFlag.PRIMARY, is_primary)
        return address

    def remove_address(self, address_id):
        """Soft delete; a removed address gives up its default/primary flags."""
        address = self.find(address_id)
        flags_held = address.is_default or address.is_primary

        with atomic_change(self):
            address.is_deleted = True
            address.is_default = False
            address.is_primary = False
            if flags_held:
                self.flags_revision = (self.flags_revision or 0) + 1

        self.raise_(AddressRemoved(user_id=str(self.user_id), address_id=str(address.id)))
        return address

    def set_flag(self, address_id, flag: AddressFlag, active: bool):
        """Make ``address_id`` the only address carrying ``flag``, or clear it.

        Clearing leaves the siblings untouched, so a book may have no default.
        """
        previous = None
        with atomic_change(self):
            if active:
                target, previous = set_active(self.addresses, flag.field, address_id)
            else:
                target = unset_active(self.addresses, flag.field, address_id)
            self.flags_revision = (self.flags_revision or 0) + 1

        self.raise_(
            AddressFlagChanged(
                user_id=str(self.user_id),
                address_id=str(target.id),
                flag=flag.value,
                active=active,
                previous_address_id=str(previous.id) if previous else None,
            )
        )
        return target
