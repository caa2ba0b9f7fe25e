"""Client for importing catalog entries from the OMDb API."""

import logging
from typing import List, Optional

import httpx
from pydantic import BaseModel, Field, field_validator

from .core import get_settings
from .errors import InternalError, NotFound
from .models import Media

logger = logging.getLogger(__name__)


def _not_available(value):
    return None if value in ("N/A", "") else value


class OmdbMedia(BaseModel):
    """Subset of an OMDb title record used to build a media item."""

    title: str = Field(alias="Title")
    year: Optional[str] = Field(default=None, alias="Year")
    runtime: Optional[str] = Field(default=None, alias="Runtime")
    genre: Optional[str] = Field(default=None, alias="Genre")
    director: Optional[str] = Field(default=None, alias="Director")
    writer: Optional[str] = Field(default=None, alias="Writer")
    actors: Optional[str] = Field(default=None, alias="Actors")
    plot: Optional[str] = Field(default=None, alias="Plot")
    language: Optional[str] = Field(default=None, alias="Language")
    country: Optional[str] = Field(default=None, alias="Country")
    poster: Optional[str] = Field(default=None, alias="Poster")
    imdb_rating: Optional[float] = Field(default=None, alias="imdbRating")
    imdb_votes: Optional[int] = Field(default=None, alias="imdbVotes")
    imdb_id: str = Field(alias="imdbID")
    type: Optional[str] = Field(default=None, alias="Type")

    @field_validator(
        "year",
        "runtime",
        "genre",
        "director",
        "writer",
        "actors",
        "plot",
        "language",
        "country",
        "poster",
        "imdb_rating",
        mode="before",
    )
    @classmethod
    def drop_not_available(cls, value):
        return _not_available(value)

    @field_validator("imdb_votes", mode="before")
    @classmethod
    def parse_votes(cls, value):
        value = _not_available(value)
        if isinstance(value, str):
            return value.replace(",", "")
        return value

    @property
    def genre_names(self) -> List[str]:
        if not self.genre:
            return []
        return [name.strip() for name in self.genre.split(",") if name.strip()]

    def to_media(self) -> Media:
        """Build an unsaved media item; genres are attached by the caller."""
        return Media(
            **self.model_dump(exclude={"genre"}),
        )


def fetch_media(imdb_id: str) -> OmdbMedia:
    """
    Fetch a title from OMDb by its IMDb id.

    Args:
        imdb_id (str): IMDb identifier such as ``tt0083658``.

    Raises:
        InternalError: If no API key is configured or OMDb cannot be reached.
        NotFound: If OMDb does not know the title.

    Returns:
        OmdbMedia: Parsed title record.
    """
    settings = get_settings()
    if not settings.OMDB_API_KEY:
        raise InternalError("OMDb is not configured")

    try:
        response = httpx.get(
            settings.OMDB_URL,
            params={"apikey": settings.OMDB_API_KEY, "i": imdb_id},
            timeout=10.0,
        )
        response.raise_for_status()
    except httpx.HTTPError as exc:
        logger.error("OMDb request for %s failed: %s", imdb_id, exc)
        raise InternalError("OMDb request failed", cause=exc) from exc

    data = response.json()
    if data.get("Response") == "False":
        raise NotFound(data.get("Error", "Media not found in OMDb"))
    return OmdbMedia.model_validate(data)
