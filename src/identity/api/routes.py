"""FastAPI endpoints for the Identity domain — user address books."""

from fastapi import APIRouter
from protean.utils.globals import current_domain

from identity.address.management import (
    AddAddress,
    RemoveAddress,
    SetAddressFlag,
    UpdateAddress,
    list_addresses,
)
from identity.api.schemas import AddAddressRequest, AddressFlagName, UpdateAddressRequest
from shared.api import ok

router = APIRouter(prefix="/users", tags=["addresses"])


@router.get("/{user_id}/addresses")
async def get_addresses(user_id: str):
    return ok("Addresses fetched successfully", list_addresses(user_id))


@router.post("/{user_id}/addresses", status_code=201)
async def add_address(user_id: str, body: AddAddressRequest):
    command = AddAddress(user_id=user_id, **body.model_dump(exclude_none=True))
    result = current_domain.process(command, asynchronous=False)
    return ok("Address created successfully", result, status=201)


@router.put("/{user_id}/addresses/{address_id}")
async def update_address(user_id: str, address_id: str, body: UpdateAddressRequest):
    command = UpdateAddress(user_id=user_id, address_id=address_id, **body.model_dump(exclude_none=True))
    result = current_domain.process(command, asynchronous=False)
    return ok("Address updated successfully", result)


@router.delete("/{user_id}/addresses/{address_id}")
async def remove_address(user_id: str, address_id: str):
    result = current_domain.process(RemoveAddress(user_id=user_id, address_id=address_id), asynchronous=False)
    return ok("Address deleted successfully", result)


@router.put("/{user_id}/addresses/{address_id}/{flag}")
async def set_address_flag(user_id: str, address_id: str, flag: AddressFlagName):
    command = SetAddressFlag(user_id=user_id, address_id=address_id, flag=flag, active=True)
    result = current_domain.process(command, asynchronous=False)
    return ok(f"{flag.capitalize()} address set successfully", result)


@router.delete("/{user_id}/addresses/{address_id}/{flag}")
async def unset_address_flag(user_id: str, address_id: str, flag: AddressFlagName):
    command = SetAddressFlag(user_id=user_id, address_id=address_id, flag=flag, active=False)
    result = current_domain.process(command, asynchronous=False)
    return ok(f"{flag.capitalize()} address unset successfully", result)
