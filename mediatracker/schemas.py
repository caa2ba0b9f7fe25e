from datetime import datetime
from pydantic import BaseModel, Field
from typing import List, Optional

from .models import MediaStatus, Role, UserRating


class ORMModel(BaseModel):
    """Base for response schemas built from ORM objects."""

    class Config:
        from_attributes = True  # allow SQLAlchemy objects


class UserBase(BaseModel):
    """Shared fields for user schemas."""

    username: str = Field(min_length=1, max_length=100)
    first_name: str = Field(default="", max_length=200)
    last_name: str = Field(default="", max_length=200)


class UserCreate(UserBase):
    """Payload for registering a new user."""

    password: str = Field(min_length=6)


class UserOut(UserBase, ORMModel):
    """Response schema for user data."""

    id: int
    role: Role = Role.USER
    created: Optional[datetime] = None
    last_login: Optional[datetime] = None


class Token(BaseModel):
    """JWT token response schema."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class TokenRefresh(BaseModel):
    """Schema for requesting a new access token from a refresh token."""

    refresh_token: str


class TokenData(BaseModel):
    """Payload stored inside JWT token."""

    sub: str | None = None
    role: str | None = None
    exp: Optional[datetime] = None
    scope: Optional[str] = None


class AddressFields(BaseModel):
    """Editable address fields."""

    country: str = Field(min_length=1, max_length=100)
    city: str = Field(min_length=1, max_length=100)
    address_text: str = Field(min_length=1, max_length=500)
    post_code: str = Field(min_length=1, max_length=20)


class AddressCreate(AddressFields):
    """Payload for adding an address to a user."""

    user_id: int = Field(gt=0)


class AddressUpdate(AddressFields):
    """Payload for replacing an existing address."""

    address_id: int = Field(gt=0)


class AddressOut(AddressFields, ORMModel):
    """Response schema for an address."""

    id: int
    user_id: int


class GenreOut(ORMModel):
    id: int
    name: str


class MediaBase(BaseModel):
    """Shared catalog fields of a media item."""

    type: Optional[str] = None
    title: str = Field(min_length=1, max_length=1000)
    year: Optional[str] = Field(default=None, max_length=9)
    runtime: Optional[str] = None
    director: Optional[str] = None
    writer: Optional[str] = None
    actors: Optional[str] = None
    plot: Optional[str] = Field(default=None, max_length=2000)
    language: Optional[str] = None
    country: Optional[str] = None
    poster: Optional[str] = None
    imdb_id: Optional[str] = None
    imdb_rating: Optional[float] = None
    imdb_votes: Optional[int] = None


class MediaCreate(MediaBase):
    """Payload for adding a media item; genres are given by name."""

    genres: List[str] = []


class MediaOut(MediaBase, ORMModel):
    """Response schema for a media item with its genres."""

    id: int
    genres: List[GenreOut] = []


class ReviewOut(ORMModel):
    """Response schema for a review."""

    id: int
    user_id: int
    media_id: int
    user_media_id: int
    rating: UserRating
    text: Optional[str] = None


class UserMediaCreate(BaseModel):
    """Payload for tracking a media item."""

    user_id: int = Field(gt=0)
    media_id: int = Field(gt=0)
    status: MediaStatus = MediaStatus.WISHLIST
    note: Optional[str] = Field(default=None, max_length=1000)


class UserMediaUpdate(BaseModel):
    """
    Payload for updating a tracked media item.

    ``user_rating`` is kept as free text and validated against the rating
    scale only when a review is created or updated.
    """

    user_id: int = Field(gt=0)
    user_media_id: int = Field(gt=0)
    status: MediaStatus
    note: Optional[str] = Field(default=None, max_length=1000)
    user_rating: Optional[str] = None
    review_text: Optional[str] = Field(default=None, max_length=1000)


class UserMediaOut(ORMModel):
    """Response schema for a tracked media item."""

    id: int
    user_id: int
    media_id: int
    status: MediaStatus
    note: Optional[str] = None
    review_id: Optional[int] = None
    review: Optional[ReviewOut] = None


class NotificationCreate(BaseModel):
    """Payload for sending a notification to a user."""

    user_id: int = Field(gt=0)
    title: str = Field(min_length=1, max_length=100)
    text: str = Field(min_length=1, max_length=1000)


class NotificationOut(ORMModel):
    id: int
    user_id: int
    title: str
    text: str
    shown: bool
