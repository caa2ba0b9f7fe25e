"""Read-only review routes. Reviews are written through tracked media updates."""

import logging
from typing import List

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from . import schemas
from .access import Caller, authorize
from .auth import get_current_caller
from .database import get_db
from .errors import GuardedRoute, NotFound
from .models import Review
from .repository import ReviewRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reviews", tags=["reviews"], route_class=GuardedRoute)


@router.get("/", response_model=List[schemas.ReviewOut])
def list_reviews(
    user_id: int = Query(gt=0),
    media_id: int | None = Query(None, gt=0),
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """List the reviews written by a user, optionally for one media item."""
    logger.info("GetReviews attempt for user_id %s", user_id)
    authorize(caller, owner_id=user_id)
    reviews = ReviewRepository(db)
    if media_id is not None:
        review = reviews.get_for(user_id, media_id)
        return [review] if review else []
    return reviews.get_all(Review.user_id == user_id)


@router.get("/{review_id}", response_model=schemas.ReviewOut)
def get_review(
    review_id: int = Path(gt=0),
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """
    Retrieve a single review.

    Existence is checked before ownership.
    """
    review = ReviewRepository(db).get(Review.id == review_id)
    if review is None:
        raise NotFound("Review not found")
    authorize(caller, owner_id=review.user_id)
    return review
