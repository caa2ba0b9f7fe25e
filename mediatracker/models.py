"""Database models for the Media Tracker API.

This module defines SQLAlchemy ORM models used by the application together
with the enumerations stored in their columns.
"""

from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import (
    Column,
    Integer,
    String,
    Float,
    Boolean,
    DateTime,
    ForeignKey,
    Table,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship, synonym

from .database import Base


class Role(str, Enum):
    """Roles a user account can hold."""

    ADMIN = "admin"
    USER = "user"


class MediaStatus(str, Enum):
    """Watch status of a tracked media item."""

    WISHLIST = "Wishlist"
    WATCHING = "Watching"
    FINISHED = "Finished"


class UserRating(str, Enum):
    """Rating scale of a review, from worst to best."""

    TERRIBLE = "Terrible"
    BAD = "Bad"
    AVERAGE = "Average"
    GOOD = "Good"
    EXCELLENT = "Excellent"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


media_genres = Table(
    "media_genres",
    Base.metadata,
    Column(
        "media_id", Integer, ForeignKey("media.id", ondelete="CASCADE"), primary_key=True
    ),
    Column(
        "genre_id", Integer, ForeignKey("genres.id", ondelete="CASCADE"), primary_key=True
    ),
)
"""Association table linking media to genres."""


class User(Base):
    """
    SQLAlchemy model representing an application user.

    A user is the root of ownership: their address, tracked media, reviews
    and notifications are deleted together with them.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), unique=True, index=True, nullable=False)
    first_name = Column(String(200), nullable=False, default="")
    last_name = Column(String(200), nullable=False, default="")
    role = Column(String(20), default=Role.USER.value, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    created = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated = Column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )
    last_login = Column(DateTime(timezone=True), nullable=True)
    is_deleted = Column(Boolean, default=False, nullable=False)

    address = relationship(
        "Address",
        back_populates="user",
        uselist=False,
        cascade="all, delete",
    )
    user_media = relationship(
        "UserMedia", back_populates="user", cascade="all, delete"
    )
    reviews = relationship(
        "Review", back_populates="user", cascade="all, delete"
    )
    notifications = relationship(
        "Notification", back_populates="user", cascade="all, delete"
    )


class Address(Base):
    """
    Postal address of a user.

    The primary key is the owning user's id, so a user has at most one
    address.
    """

    __tablename__ = "addresses"

    id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    country = Column(String(100), nullable=False)
    city = Column(String(100), nullable=False)
    address_text = Column(String(500), nullable=False)
    post_code = Column(String(20), nullable=False)

    #: Alias of ``id`` under the name used by request payloads
    user_id = synonym("id")

    user = relationship("User", back_populates="address")


class Genre(Base):
    """Genre shared by any number of media items."""

    __tablename__ = "genres"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)

    media = relationship("Media", secondary=media_genres, back_populates="genres")


class Media(Base):
    """
    Catalog entry for a movie or series.

    Media rows are reference data shared by all users. Deleting one removes
    the tracked media and reviews that point at it.
    """

    __tablename__ = "media"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(String(50), nullable=True)
    title = Column(String(1000), nullable=False, index=True)
    year = Column(String(9), nullable=True)
    runtime = Column(String(30), nullable=True)
    director = Column(String(500), nullable=True)
    writer = Column(String(500), nullable=True)
    actors = Column(String(1000), nullable=True)
    plot = Column(String(2000), nullable=True)
    language = Column(String(200), nullable=True)
    country = Column(String(200), nullable=True)
    poster = Column(String(1000), nullable=True)
    imdb_id = Column(String(20), nullable=True, index=True)
    imdb_rating = Column(Float, nullable=True)
    imdb_votes = Column(Integer, nullable=True)

    genres = relationship("Genre", secondary=media_genres, back_populates="media")
    user_media = relationship(
        "UserMedia", back_populates="media", cascade="all, delete"
    )
    reviews = relationship(
        "Review", back_populates="media", cascade="all, delete"
    )


class UserMedia(Base):
    """
    A media item tracked by a user, with its watch status.

    ``review_id`` stays empty until the first rating or review text is
    submitted for the pair.
    """

    __tablename__ = "user_media"
    __table_args__ = (
        UniqueConstraint("user_id", "media_id", name="uq_user_media"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    media_id = Column(
        Integer, ForeignKey("media.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status = Column(String(20), default=MediaStatus.WISHLIST.value, nullable=False)
    note = Column(String(1000), nullable=True)
    review_id = Column(Integer, nullable=True)

    user = relationship("User", back_populates="user_media")
    media = relationship("Media", back_populates="user_media")
    review = relationship(
        "Review",
        back_populates="user_media",
        uselist=False,
        cascade="all, delete",
    )


class Review(Base):
    """
    Rating and review text of a user for a media item.

    Belongs to exactly one tracked media row; user and media ids are
    denormalized copies of that row's.
    """

    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    media_id = Column(
        Integer, ForeignKey("media.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_media_id = Column(
        Integer,
        ForeignKey("user_media.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    rating = Column(String(50), nullable=False)
    text = Column(String(1000), nullable=True)

    user = relationship("User", back_populates="reviews")
    media = relationship("Media", back_populates="reviews")
    user_media = relationship("UserMedia", back_populates="review")


class Notification(Base):
    """Message addressed to a single user."""

    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title = Column(String(100), nullable=False)
    text = Column(String(1000), nullable=False)
    shown = Column(Boolean, default=False, nullable=False)

    user = relationship("User", back_populates="notifications")
