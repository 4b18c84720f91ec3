"""Address book commands — add, update, remove addresses and flip their flags.

Commands that name an existing address first establish who owns it: an
address in no book is NotFound, an address in someone else's book is
Forbidden.
"""

import structlog
from protean import handle
from protean.fields import Boolean, Float, Identifier, String
from protean.utils.globals import current_domain

from identity.address.book import AddressBook, AddressFlag, AddressLabel, AddressType
from identity.domain import identity
from shared.errors import ForbiddenError, NotFoundError

logger = structlog.get_logger(__name__)

_ADDRESS_FIELDS = (
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


@identity.command(part_of="AddressBook")
class AddAddress:
    user_id: Identifier(required=True)
    label: String(choices=AddressLabel, default=AddressLabel.HOME.value)
    address_type: String(choices=AddressType, default=AddressType.HOME.value)
    name: String(required=True, max_length=100)
    phone: String(required=True, max_length=20)
    email: String(max_length=254)
    line: String(required=True, max_length=500)
    landmark: String(max_length=255)
    city: String(required=True, max_length=100)
    state: String(required=True, max_length=100)
    country: String(max_length=100)
    pincode: String(required=True, max_length=20)
    lat: Float()
    lng: Float()
    is_default: Boolean(default=False)
    is_primary: Boolean(default=False)


@identity.command(part_of="AddressBook")
class UpdateAddress:
    """Partial edit; unset fields keep their value."""

    user_id: Identifier(required=True)
    address_id: Identifier(required=True)
    label: String(choices=AddressLabel)
    address_type: String(choices=AddressType)
    name: String(max_length=100)
    phone: String(max_length=20)
    email: String(max_length=254)
    line: String(max_length=500)
    landmark: String(max_length=255)
    city: String(max_length=100)
    state: String(max_length=100)
    country: String(max_length=100)
    pincode: String(max_length=20)
    lat: Float()
    lng: Float()
    is_default: Boolean()
    is_primary: Boolean()


@identity.command(part_of="AddressBook")
class RemoveAddress:
    user_id: Identifier(required=True)
    address_id: Identifier(required=True)


@identity.command(part_of="AddressBook")
class SetAddressFlag:
    user_id: Identifier(required=True)
    address_id: Identifier(required=True)
    flag: String(required=True, choices=AddressFlag)
    active: Boolean(default=True)


def owned_book(user_id, address_id) -> AddressBook:
    """The user's book, provided it holds ``address_id``."""
    repo = current_domain.repository_for(AddressBook)
    owner = repo.owner_of(address_id)
    if owner is None:
        raise NotFoundError("Address not found", address_id=str(address_id))
    if owner != str(user_id):
        logger.warning("Address ownership mismatch", user_id=str(user_id), address_id=str(address_id))
        raise ForbiddenError("Address belongs to another user", address_id=str(address_id))
    return repo.for_user(user_id)


@identity.command_handler(part_of=AddressBook)
class ManageAddressesHandler:
    @handle(AddAddress)
    def add_address(self, command):
        repo = current_domain.repository_for(AddressBook)
        book = repo.get_or_create(command.user_id)

        fields = {f: getattr(command, f) for f in _ADDRESS_FIELDS if getattr(command, f) is not None}
        address = book.add_address(
            is_default=bool(command.is_default),
            is_primary=bool(command.is_primary),
            **fields,
        )
        repo.add(book)

        logger.info("Address added", user_id=str(command.user_id), address_id=str(address.id))
        return address.to_dict()

    @handle(UpdateAddress)
    def update_address(self, command):
        book = owned_book(command.user_id, command.address_id)

        changes = {f: getattr(command, f) for f in _ADDRESS_FIELDS if getattr(command, f) is not None}
        address = book.update_address(
            command.address_id,
            is_default=command.is_default,
            is_primary=command.is_primary,
            **changes,
        )
        current_domain.repository_for(AddressBook).add(book)

        logger.info("Address updated", user_id=str(command.user_id), address_id=str(address.id))
        return address.to_dict()

    @handle(RemoveAddress)
    def remove_address(self, command):
        book = owned_book(command.user_id, command.address_id)
        book.remove_address(command.address_id)
        current_domain.repository_for(AddressBook).add(book)

        logger.info("Address removed", user_id=str(command.user_id), address_id=str(command.address_id))
        return {"address_id": str(command.address_id)}

    @handle(SetAddressFlag)
    def set_address_flag(self, command):
        book = owned_book(command.user_id, command.address_id)
        flag = AddressFlag(command.flag)
        address = book.set_flag(command.address_id, flag, bool(command.active))
        current_domain.repository_for(AddressBook).add(book)

        logger.info(
            "Address flag changed",
            user_id=str(command.user_id),
            address_id=str(command.address_id),
            flag=flag.value,
            active=bool(command.active),
        )
        return address.to_dict()


def list_addresses(user_id) -> list[dict]:
    """Live addresses of the user, default first."""
    book = current_domain.repository_for(AddressBook).for_user(user_id)
    if book is None:
        return []
    return [a.to_dict() for a in book.sorted_addresses()]
