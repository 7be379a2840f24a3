from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from gridiron_ingest.db.base import Base
from gridiron_ingest.db.errors import StorageError

ModelT = TypeVar("ModelT", bound=Base)


@contextmanager
def storage_errors(action: str) -> Iterator[None]:
    """Translate SQLAlchemy failures into StorageError.

    Lookups that simply find nothing return None; only genuine storage failures
    surface as exceptions.
    """
    try:
        yield
    except SQLAlchemyError as e:
        raise StorageError(f"{action} failed: {e.__class__.__name__}: {e}") from e


class BaseRepository(Generic[ModelT]):
    def __init__(self, session: Session, model: type[ModelT]) -> None:
        self.session = session
        self.model = model

    def add(self, obj: ModelT, *, flush: bool = True) -> ModelT:
        self.session.add(obj)
        if flush:
            self.session.flush()  # assigns PKs, surfaces constraint violations
        return obj

    def get(self, id_: Any) -> ModelT | None:
        with storage_errors(f"get {self.model.__name__}"):
            return self.session.get(self.model, id_)

    def first_where(self, *predicates: ColumnElement[bool]) -> ModelT | None:
        stmt = select(self.model).where(*predicates).limit(1)
        with storage_errors(f"find {self.model.__name__}"):
            return self.session.execute(stmt).scalars().first()

    def one_where(self, *predicates: ColumnElement[bool]) -> ModelT:
        stmt = select(self.model).where(*predicates)
        with storage_errors(f"find {self.model.__name__}"):
            return self.session.execute(stmt).scalars().one()

    def all_where(self, *predicates: ColumnElement[bool]) -> list[ModelT]:
        id_col = self.model.id  # type: ignore[attr-defined]
        stmt = select(self.model).where(*predicates).order_by(id_col)
        with storage_errors(f"list {self.model.__name__}"):
            return list(self.session.execute(stmt).scalars().all())

    def list(self, *, offset: int = 0, limit: int = 100) -> list[ModelT]:
        stmt = select(self.model).offset(offset).limit(limit)
        with storage_errors(f"list {self.model.__name__}"):
            return list(self.session.execute(stmt).scalars().all())

    def delete(self, obj: ModelT, *, flush: bool = True) -> None:
        self.session.delete(obj)
        if flush:
            self.session.flush()

    def diff(self, obj: ModelT, changes: Mapping[str, Any]) -> dict[str, Any]:
        """Subset of `changes` whose values differ from what `obj` holds."""
        return {k: v for k, v in changes.items() if getattr(obj, k) != v}

    def patch(self, obj: ModelT, changes: Mapping[str, Any], *, flush: bool = True) -> ModelT:
        # Unlike a partial update, None is written through: a provider clearing
        # a value (e.g. a score retracted) is itself a correction.
        for k, v in changes.items():
            setattr(obj, k, v)
        if flush:
            self.session.flush()
        return obj
