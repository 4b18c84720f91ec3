"""Domain events for the AddressBook aggregate."""

from protean.fields import Boolean, Identifier, String

from identity.domain import identity


@identity.event(part_of="AddressBook")
class AddressAdded:
    __version__ = 1

    user_id: Identifier(required=True)
    address_id: Identifier(required=True)
    label: String()
    city: String()
    pincode: String()


@identity.event(part_of="AddressBook")
class AddressUpdated:
    __version__ = 1

    user_id: Identifier(required=True)
    address_id: Identifier(required=True)
    changed_fields: String()  # comma-separated field names


@identity.event(part_of="AddressBook")
class AddressRemoved:
    __version__ = 1

    user_id: Identifier(required=True)
    address_id: Identifier(required=True)


@identity.event(part_of="AddressBook")
class AddressFlagChanged:
    """An address gained or lost the default/primary flag."""

    __version__ = 1

    user_id: Identifier(required=True)
    address_id: Identifier(required=True)
    flag: String(required=True)
    active: Boolean(required=True)
    previous_address_id: Identifier()
