# Overview: Minimal record store over one SQLAlchemy model; services never build queries directly.

from __future__ import annotations

from typing import Any, Generic, Iterable, TypeVar

from ..extensions import db

T = TypeVar("T")


class Repository(Generic[T]):
    """
    Create / get-by-id / get-by-key / list-with-predicate / update / delete
    over a single model.

    Writes only flush; the calling service decides when to commit so a
    failed operation never leaves a half-written record behind.
    """

    def __init__(self, model: type[T]):
        self.model = model

    @property
    def session(self):
        return db.session

    def add(self, entity: T) -> T:
        self.session.add(entity)
        self.session.flush()  # ensure entity.id exists
        return entity

    def get(self, entity_id: int) -> T | None:
        return self.session.get(self.model, entity_id)

    def get_by(self, **criteria: Any) -> T | None:
        return self.session.query(self.model).filter_by(**criteria).first()

    def exists(self, **criteria: Any) -> bool:
        return self.get_by(**criteria) is not None

    def list(self, *predicates, order_by: Iterable | None = None, **criteria: Any) -> list[T]:
        query = self.session.query(self.model)
        if criteria:
            query = query.filter_by(**criteria)
        if predicates:
            query = query.filter(*predicates)
        if order_by is not None:
            query = query.order_by(*order_by)
        return query.all()

    def update(self, entity: T, **changes: Any) -> T:
        for key, value in changes.items():
            setattr(entity, key, value)
        self.session.flush()
        return entity

    def delete(self, entity: T) -> None:
        self.session.delete(entity)
        self.session.flush()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()
