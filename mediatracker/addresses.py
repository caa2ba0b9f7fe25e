"""Address management routes for the Media Tracker API.

The order of the ownership and existence checks differs per operation;
it decides whether a caller without access can tell a missing address
from someone else's.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from . import schemas
from .access import ADMIN_ONLY, Caller, authorize
from .auth import get_current_caller
from .database import get_db
from .errors import GuardedRoute, InvalidInput, NotFound
from .models import Address, User
from .repository import Repository, UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/addresses", tags=["addresses"], route_class=GuardedRoute)


@router.get("/", response_model=List[schemas.AddressOut])
def list_addresses(
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """List the addresses of all users. Administrators only."""
    logger.info("GetAllAddresses attempt by user %s", caller.id)
    authorize(caller, allowed_roles=ADMIN_ONLY)
    return Repository(db, Address).get_all(include=("user",))


@router.get("/{user_id}", response_model=schemas.AddressOut)
def get_address(
    user_id: int = Path(gt=0),
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """
    Retrieve the address of a user.

    Args:
        user_id (int): Owning user identifier.
        caller (Caller): Authenticated caller.
        db (Session): Database session.

    Raises:
        Forbidden: If the caller is neither the owner nor an administrator.
        NotFound: If the user has no address.

    Returns:
        AddressOut: Address data.
    """
    logger.info("GetAddress attempt for user_id %s", user_id)
    authorize(caller, owner_id=user_id)
    address = Repository(db, Address).get(Address.user_id == user_id, include=("user",))
    if address is None:
        logger.warning("User %s does not have an address", user_id)
        raise NotFound("User does not have an address")
    return address


@router.post(
    "/", response_model=schemas.AddressOut, status_code=status.HTTP_201_CREATED
)
def add_address(
    address_in: schemas.AddressCreate,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """
    Add an address to a user.

    Raises:
        Forbidden: If the caller is neither the owner nor an administrator.
        NotFound: If the user does not exist.
        InvalidInput: If the user already has an address.

    Returns:
        AddressOut: Created address.
    """
    logger.info("AddAddress attempt for user_id %s", address_in.user_id)
    authorize(caller, owner_id=address_in.user_id)
    user = UserRepository(db).get(User.id == address_in.user_id, include=("address",))
    if user is None:
        raise NotFound("User not found")
    if user.address is not None:
        logger.info("User %s already has an address", address_in.user_id)
        raise InvalidInput("User already has an address")
    address = Address(
        id=user.id,
        **address_in.model_dump(exclude={"user_id"}),
    )
    return Repository(db, Address).create(address)


@router.put("/", status_code=status.HTTP_204_NO_CONTENT)
def update_address(
    address_in: schemas.AddressUpdate,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """
    Replace the fields of an existing address.

    Existence is checked before ownership.

    Raises:
        NotFound: If the address does not exist.
        Forbidden: If the caller is neither the owner nor an administrator.
    """
    logger.info("UpdateAddress attempt for address_id %s", address_in.address_id)
    addresses = Repository(db, Address)
    address = addresses.get(Address.id == address_in.address_id)
    if address is None:
        logger.info("Address %s not found", address_in.address_id)
        raise NotFound("Address not found")
    authorize(caller, owner_id=address.user_id)
    for key, value in address_in.model_dump(exclude={"address_id"}).items():
        setattr(address, key, value)
    addresses.update(address)
    return None


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_address(
    user_id: int = Path(gt=0),
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """
    Delete the address of a user. Administrators only.

    Raises:
        Forbidden: If the caller is not an administrator.
        NotFound: If the user has no address.
    """
    logger.info("DeleteAddress attempt for user_id %s", user_id)
    authorize(caller, owner_id=user_id, allowed_roles=ADMIN_ONLY)
    addresses = Repository(db, Address)
    address = addresses.get(Address.user_id == user_id)
    if address is None:
        raise NotFound("Address not found")
    addresses.remove(address)
    return None
