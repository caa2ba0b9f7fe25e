"""Notification routes for the Media Tracker API.

Notifications are stored messages; delivering them is left to clients
polling for unshown ones.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from . import schemas
from .access import ADMIN_ONLY, Caller, authorize
from .auth import get_current_caller
from .database import get_db
from .errors import GuardedRoute, NotFound
from .models import Notification, User
from .repository import Repository, UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/notifications", tags=["notifications"], route_class=GuardedRoute
)


@router.get("/", response_model=List[schemas.NotificationOut])
def list_notifications(
    user_id: int = Query(gt=0),
    unshown_only: bool = False,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """
    List the notifications of a user.

    Args:
        user_id (int): Recipient user identifier.
        unshown_only (bool): Skip notifications already marked as shown.
        caller (Caller): Authenticated caller.
        db (Session): Database session.
    """
    authorize(caller, owner_id=user_id)
    criteria = [Notification.user_id == user_id]
    if unshown_only:
        criteria.append(Notification.shown.is_(False))
    return Repository(db, Notification).get_all(*criteria)


@router.post(
    "/", response_model=schemas.NotificationOut, status_code=status.HTTP_201_CREATED
)
def add_notification(
    notification_in: schemas.NotificationCreate,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """Send a notification to a user. Administrators only."""
    logger.info("AddNotification attempt for user_id %s", notification_in.user_id)
    authorize(caller, allowed_roles=ADMIN_ONLY)
    if not UserRepository(db).exists(User.id == notification_in.user_id):
        raise NotFound("User not found")
    return Repository(db, Notification).create(
        Notification(**notification_in.model_dump())
    )


@router.put("/{notification_id}/shown", response_model=schemas.NotificationOut)
def mark_shown(
    notification_id: int = Path(gt=0),
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """Mark a notification as shown. Existence is checked before ownership."""
    notifications = Repository(db, Notification)
    notification = notifications.get(Notification.id == notification_id)
    if notification is None:
        raise NotFound("Notification not found")
    authorize(caller, owner_id=notification.user_id)
    notification.shown = True
    notifications.update(notification)
    return notification


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(
    notification_id: int = Path(gt=0),
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """Delete a notification. Existence is checked before ownership."""
    notifications = Repository(db, Notification)
    notification = notifications.get(Notification.id == notification_id)
    if notification is None:
        raise NotFound("Notification not found")
    authorize(caller, owner_id=notification.user_id)
    notifications.remove(notification)
    return None
