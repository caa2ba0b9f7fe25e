"""User-related routes and operations for the Media Tracker API."""

import logging
from typing import List

from fastapi import APIRouter, Depends, Path, status
from fastapi_limiter.depends import RateLimiter
from sqlalchemy.orm import Session

from . import schemas
from .access import ADMIN_ONLY, Caller, authorize
from .auth import get_current_caller
from .database import get_db
from .errors import GuardedRoute, NotFound
from .models import User
from .repository import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"], route_class=GuardedRoute)


@router.get(
    "/me",
    response_model=schemas.UserOut,
    dependencies=[Depends(RateLimiter(times=5, seconds=60))],
)
def read_me(
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """
    Retrieve details of the currently authenticated user.

    Raises:
        NotFound: If the account behind the token no longer exists.

    Returns:
        UserOut: User profile information.
    """
    user = UserRepository(db).get(User.id == caller.id)
    if user is None:
        raise NotFound("User not found")
    return user


@router.get("/", response_model=List[schemas.UserOut])
def list_users(
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """List every registered user. Administrators only."""
    logger.info("GetAllUsers attempt by user %s", caller.id)
    authorize(caller, allowed_roles=ADMIN_ONLY)
    return UserRepository(db).get_all()


@router.get("/{user_id}", response_model=schemas.UserOut)
def get_user(
    user_id: int = Path(gt=0),
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """
    Retrieve a user profile.

    Ownership is checked before existence, so a regular user cannot probe
    other ids.
    """
    logger.info("GetUser attempt for user_id %s", user_id)
    authorize(caller, owner_id=user_id)
    user = UserRepository(db).get(User.id == user_id)
    if user is None:
        raise NotFound("User not found")
    return user


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int = Path(gt=0),
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """
    Delete a user account.

    The address, tracked media, reviews and notifications of the user are
    removed with it; media and genres are left untouched.
    """
    logger.info("DeleteUser attempt for user_id %s by user %s", user_id, caller.id)
    authorize(caller, owner_id=user_id)
    users = UserRepository(db)
    user = users.get(User.id == user_id)
    if user is None:
        raise NotFound("User not found")
    users.remove(user)
    return None
