"""Lazy creation and update of the single review of a tracked media item.

A tracked media row starts without a review. The first update carrying a
rating or review text creates one; later updates overwrite it in place.
Reviews are never removed here, only through cascades of their owner.
"""

import logging

from . import models
from .errors import InvalidInput
from .repository import ReviewRepository

logger = logging.getLogger(__name__)


def parse_rating(raw: str | None) -> models.UserRating:
    """
    Convert a submitted rating to its enum member.

    Matching is exact and case-sensitive on the member value.

    Raises:
        InvalidInput: If ``raw`` is missing or not on the rating scale.
    """
    try:
        return models.UserRating(raw)
    except ValueError as exc:
        allowed = ", ".join(member.value for member in models.UserRating)
        raise InvalidInput(f"Rating '{raw}' is invalid. Allowed: {allowed}") from exc


def apply_review_update(
    reviews: ReviewRepository,
    user_media: models.UserMedia,
    rating: str | None,
    text: str | None,
) -> models.UserMedia:
    """
    Create or update the review linked to ``user_media``.

    Without a linked review and with both ``rating`` and ``text`` empty,
    nothing happens. Otherwise the rating must be valid: it is checked
    before anything is written, and the review (created on first use)
    receives ``rating`` and ``text`` unconditionally.

    Args:
        reviews (ReviewRepository): Repository used to persist the review.
        user_media (UserMedia): Tracked media row being updated.
        rating (str | None): Submitted rating name.
        text (str | None): Submitted review text.

    Raises:
        InvalidInput: If a review is touched and ``rating`` is invalid.

    Returns:
        UserMedia: ``user_media`` with ``review`` and ``review_id`` set when
        a review exists.
    """
    review = user_media.review
    if review is None and not rating and not text:
        return user_media

    parsed = parse_rating(rating)

    if review is None:
        review = reviews.create(
            models.Review(
                user=user_media.user,
                media=user_media.media,
                user_media=user_media,
                rating=parsed.value,
                text=text,
            )
        )
        user_media.review_id = review.id
        logger.info(
            "Review %s created for user %s and media %s",
            review.id,
            user_media.user_id,
            user_media.media_id,
        )
        return user_media

    review.rating = parsed.value
    review.text = text
    reviews.update(review)
    return user_media
