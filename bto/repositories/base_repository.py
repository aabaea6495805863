# bto/repositories/base_repository.py
from typing import Generic, List, Optional, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Lookup and persistence of one entity type.

    save() only stages and flushes; committing belongs to the caller's
    unit of work.
    """

    model: Type[T]

    def __init__(self, db: Session):
        self.db = db

    def save(self, entity: T) -> T:
        self.db.add(entity)
        self.db.flush()
        return entity

    def find_by_id(self, entity_id: str) -> Optional[T]:
        if entity_id is None:
            raise ValueError(f"{self.model.__name__} id must not be None")
        return self.db.get(self.model, entity_id)

    def find_all(self) -> List[T]:
        return list(self.db.scalars(select(self.model)))

    def delete_by_id(self, entity_id: str) -> bool:
        entity = self.find_by_id(entity_id)
        if entity is None:
            return False
        self.db.delete(entity)
        self.db.flush()
        return True

    def count(self) -> int:
        return self.db.scalar(select(func.count()).select_from(select(self.model).subquery())) or 0
