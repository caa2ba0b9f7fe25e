"""Media catalog and genre routes for the Media Tracker API."""

import logging
from typing import List

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from . import omdb, schemas
from .access import ADMIN_ONLY, Caller, authorize, authorize_role
from .auth import get_current_caller
from .database import get_db
from .errors import Conflict, GuardedRoute, NotFound
from .models import Genre, Media
from .repository import GenreRepository, Repository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/media", tags=["media"], route_class=GuardedRoute)


@router.get("/genres", response_model=List[schemas.GenreOut])
def list_genres(
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """List all genres."""
    authorize_role(caller)
    return GenreRepository(db).get_all()


@router.get("/genres/{genre_id}", response_model=List[schemas.MediaOut])
def list_media_by_genre(
    genre_id: int = Path(gt=0),
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """
    List the media items of a genre.

    Raises:
        NotFound: If the genre does not exist.
    """
    logger.info("GetAllMediasByGenreId attempt with genre_id %s", genre_id)
    authorize_role(caller)
    genres = GenreRepository(db)
    if not genres.exists(Genre.id == genre_id):
        raise NotFound("Genre not found")
    return Repository(db, Media).get_all(
        Media.genres.any(Genre.id == genre_id), include=("genres",)
    )


@router.get("/", response_model=List[schemas.MediaOut])
def list_media(
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """List the whole catalog. Administrators only."""
    logger.info("GetAllMedias attempt by user %s", caller.id)
    authorize(caller, allowed_roles=ADMIN_ONLY)
    return Repository(db, Media).get_all(include=("genres",))


@router.get("/{media_id}", response_model=schemas.MediaOut)
def get_media(
    media_id: int = Path(gt=0),
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """
    Retrieve a media item with its genres.

    Raises:
        NotFound: If the media item does not exist.
    """
    logger.info("GetMediaById attempt with media_id %s", media_id)
    authorize_role(caller)
    media = Repository(db, Media).get(Media.id == media_id, include=("genres",))
    if media is None:
        logger.info("Media %s does not exist", media_id)
        raise NotFound("Media does not exist")
    return media


def _attach_genres(db: Session, media: Media, names: List[str]) -> Media:
    genres = GenreRepository(db)
    media.genres = [genres.get_or_create(name) for name in dict.fromkeys(names)]
    return media


@router.post("/", response_model=schemas.MediaOut, status_code=status.HTTP_201_CREATED)
def add_media(
    media_in: schemas.MediaCreate,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """
    Add a media item to the catalog. Administrators only.

    Genres are referenced by name and created when missing.
    """
    logger.info("AddMedia attempt with title %r", media_in.title)
    authorize(caller, allowed_roles=ADMIN_ONLY)
    media = Media(**media_in.model_dump(exclude={"genres"}))
    _attach_genres(db, media, media_in.genres)
    return Repository(db, Media).create(media)


@router.post(
    "/import/{imdb_id}",
    response_model=schemas.MediaOut,
    status_code=status.HTTP_201_CREATED,
)
def import_media(
    imdb_id: str = Path(min_length=3, max_length=20),
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """
    Add a media item to the catalog from OMDb. Administrators only.

    Raises:
        Conflict: If a media item with this IMDb id already exists.
        NotFound: If OMDb does not know the title.
    """
    logger.info("ImportMedia attempt with imdb_id %s", imdb_id)
    authorize(caller, allowed_roles=ADMIN_ONLY)
    catalog = Repository(db, Media)
    if catalog.exists(Media.imdb_id == imdb_id):
        raise Conflict("Media already imported")
    record = omdb.fetch_media(imdb_id)
    media = _attach_genres(db, record.to_media(), record.genre_names)
    return catalog.create(media)


@router.delete("/{media_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_media(
    media_id: int = Path(gt=0),
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """
    Delete a media item with the tracked media and reviews pointing at it.
    Administrators only.
    """
    logger.info("DeleteMedia attempt with media_id %s", media_id)
    authorize(caller, allowed_roles=ADMIN_ONLY)
    catalog = Repository(db, Media)
    media = catalog.get(Media.id == media_id)
    if media is None:
        logger.info("Media with id %s not found", media_id)
        raise NotFound("Media not found")
    catalog.remove(media)
    return None
