"""Routes for media tracked by users, including rating and review updates."""

import logging
from typing import List

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from . import schemas
from .access import Caller, authorize
from .auth import get_current_caller
from .database import get_db
from .errors import Conflict, GuardedRoute, NotFound
from .models import Media, MediaStatus, UserMedia
from .repository import Repository, ReviewRepository, UserMediaRepository
from .review_lifecycle import apply_review_update

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user-media", tags=["user-media"], route_class=GuardedRoute)


@router.get("/", response_model=List[schemas.UserMediaOut])
def list_user_media(
    user_id: int = Query(gt=0),
    status_filter: MediaStatus | None = Query(None, alias="status"),
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """
    List the media tracked by a user.

    Args:
        user_id (int): Owning user identifier.
        status_filter (MediaStatus | None): Optional watch status filter.
        caller (Caller): Authenticated caller.
        db (Session): Database session.

    Returns:
        list[UserMediaOut]: Tracked media with their reviews.
    """
    logger.info("GetUserMedia attempt for user_id %s", user_id)
    authorize(caller, owner_id=user_id)
    return UserMediaRepository(db).for_user(user_id, status_filter)


@router.post(
    "/", response_model=schemas.UserMediaOut, status_code=status.HTTP_201_CREATED
)
def add_user_media(
    user_media_in: schemas.UserMediaCreate,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """
    Start tracking a media item for a user.

    No review is created here, whatever the status.

    Raises:
        Forbidden: If the caller is neither the owner nor an administrator.
        NotFound: If the media item does not exist.
        Conflict: If the user already tracks the media item.
    """
    logger.info(
        "AddUserMedia attempt for user_id %s and media_id %s",
        user_media_in.user_id,
        user_media_in.media_id,
    )
    authorize(caller, owner_id=user_media_in.user_id)
    if not Repository(db, Media).exists(Media.id == user_media_in.media_id):
        raise NotFound("Media does not exist")
    tracked = UserMediaRepository(db)
    if tracked.exists(
        UserMedia.user_id == user_media_in.user_id,
        UserMedia.media_id == user_media_in.media_id,
    ):
        raise Conflict("Media is already tracked by this user")
    return tracked.create(
        UserMedia(
            user_id=user_media_in.user_id,
            media_id=user_media_in.media_id,
            status=user_media_in.status.value,
            note=user_media_in.note,
        )
    )


@router.put("/", response_model=schemas.UserMediaOut)
def update_user_media(
    user_media_in: schemas.UserMediaUpdate,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """
    Update status and note of a tracked media item, and its review.

    Ownership is checked before existence. The first update carrying a
    rating or review text creates the review; later ones overwrite it.

    Raises:
        Forbidden: If the caller is neither the owner nor an administrator.
        NotFound: If the user does not track this item.
        InvalidInput: If a review is touched with an invalid rating.

    Returns:
        UserMediaOut: Updated tracked media item.
    """
    logger.info(
        "UpdateUserMedia attempt for user_media_id %s", user_media_in.user_media_id
    )
    authorize(caller, owner_id=user_media_in.user_id)
    tracked = UserMediaRepository(db)
    user_media = tracked.get(
        UserMedia.id == user_media_in.user_media_id,
        UserMedia.user_id == user_media_in.user_id,
        include=("review",),
    )
    if user_media is None:
        raise NotFound("UserMedia not found")

    apply_review_update(
        ReviewRepository(db),
        user_media,
        user_media_in.user_rating,
        user_media_in.review_text,
    )
    user_media.status = user_media_in.status.value
    user_media.note = user_media_in.note
    tracked.update(user_media)
    return user_media


@router.delete("/{user_media_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user_media(
    user_media_id: int = Path(gt=0),
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """
    Stop tracking a media item; its review is deleted with it.

    Existence is checked before ownership.
    """
    logger.info("DeleteUserMedia attempt for user_media_id %s", user_media_id)
    tracked = UserMediaRepository(db)
    user_media = tracked.get(UserMedia.id == user_media_id)
    if user_media is None:
        raise NotFound("UserMedia not found")
    authorize(caller, owner_id=user_media.user_id)
    tracked.remove(user_media)
    return None
