"""Generic data access for all entity types.

This module replaces per-entity CRUD helpers with one :class:`Repository`
parameterized by the mapped class. Subclasses exist only where an entity
needs a query of its own.
"""

from typing import Generic, Iterable, Sequence, TypeVar

from sqlalchemy import select, inspect
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from . import models
from .errors import Conflict, NotFound

ModelT = TypeVar("ModelT")


class Repository(Generic[ModelT]):
    """
    CRUD and predicate queries for one mapped class.

    Criteria are SQLAlchemy column expressions, e.g.
    ``repo.get(models.Address.user_id == 1)``. ``include`` names relationship
    attributes to load eagerly together with the result.
    """

    model: type[ModelT]

    def __init__(self, db: Session, model: type[ModelT] | None = None):
        self.db = db
        if model is not None:
            self.model = model

    def _select(self, criteria: Sequence, include: Iterable[str]):
        stmt = select(self.model).where(*criteria)
        for name in include:
            stmt = stmt.options(selectinload(getattr(self.model, name)))
        return stmt

    def get(self, *criteria, include: Iterable[str] = ()) -> ModelT | None:
        """
        Return the first entity matching ``criteria``.

        The caller is responsible for criteria selecting at most one
        logical record.

        Returns:
            ModelT | None: Matching entity or ``None``.
        """
        return self.db.execute(self._select(criteria, include)).scalars().first()

    def get_all(self, *criteria, include: Iterable[str] = ()) -> list[ModelT]:
        """Return all entities matching ``criteria`` in no particular order."""
        return list(self.db.execute(self._select(criteria, include)).scalars().all())

    def exists(self, *criteria) -> bool:
        """Return ``True`` if at least one entity matches ``criteria``."""
        stmt = select(self.model).where(*criteria).exists()
        return bool(self.db.execute(select(stmt)).scalar())

    def create(self, entity: ModelT) -> ModelT:
        """
        Persist a new entity.

        Args:
            entity (ModelT): Transient entity instance.

        Raises:
            Conflict: If a uniqueness constraint is violated.

        Returns:
            ModelT: The entity with its generated id.
        """
        self.db.add(entity)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise Conflict(f"{self.model.__name__} already exists") from exc
        self.db.refresh(entity)
        return entity

    def update(self, entity: ModelT) -> None:
        """
        Replace the stored record with the state of ``entity``.

        Raises:
            NotFound: If the record no longer exists.
            Conflict: If the new state violates a uniqueness constraint.
        """
        if not self._is_stored(entity):
            raise NotFound(f"{self.model.__name__} not found")
        self.db.merge(entity)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise Conflict(f"{self.model.__name__} already exists") from exc

    def remove(self, entity: ModelT) -> None:
        """
        Delete ``entity`` together with the rows it owns.

        Raises:
            NotFound: If the record does not exist.
        """
        if not self._is_stored(entity):
            raise NotFound(f"{self.model.__name__} not found")
        self.db.delete(entity)
        self.db.commit()

    def _is_stored(self, entity: ModelT) -> bool:
        identity = inspect(entity).identity
        if identity is None:
            return False
        mapper = inspect(self.model)
        return self.exists(
            *(column == value for column, value in zip(mapper.primary_key, identity))
        )


class UserRepository(Repository[models.User]):
    model = models.User

    def get_by_username(self, username: str) -> models.User | None:
        return self.get(models.User.username == username)


class UserMediaRepository(Repository[models.UserMedia]):
    model = models.UserMedia

    def for_user(
        self, user_id: int, status: models.MediaStatus | None = None
    ) -> list[models.UserMedia]:
        """
        Return media tracked by a user, optionally filtered by status.

        Args:
            user_id (int): Owning user id.
            status (MediaStatus | None): Watch status to keep.

        Returns:
            list[UserMedia]: Tracked media with their review and media loaded.
        """
        criteria = [models.UserMedia.user_id == user_id]
        if status is not None:
            criteria.append(models.UserMedia.status == status.value)
        return self.get_all(*criteria, include=("media", "review"))


class ReviewRepository(Repository[models.Review]):
    model = models.Review

    def get_for(self, user_id: int, media_id: int) -> models.Review | None:
        """Return the review a user wrote for a media item, if any."""
        return self.get(
            models.Review.user_id == user_id,
            models.Review.media_id == media_id,
        )


class GenreRepository(Repository[models.Genre]):
    model = models.Genre

    def get_or_create(self, name: str) -> models.Genre:
        genre = self.get(models.Genre.name == name)
        if genre is None:
            genre = self.create(models.Genre(name=name))
        return genre
