"""Shared plumbing for session-bound services."""

from __future__ import annotations

from typing import Optional, Type, TypeVar

from sqlmodel import Session, SQLModel, select

from inventory_service.exceptions import NotFound
from inventory_service.models import Item

T = TypeVar("T", bound=SQLModel)


class BaseService:
    def __init__(self, session: Session):
        self.session = session

    def _get(self, model: Type[T], entity_id: Optional[int]) -> T:
        """Resolve an id or raise ``NotFound`` naming the entity."""
        entity = self.session.get(model, entity_id) if entity_id is not None else None
        if entity is None:
            raise NotFound(f"{model.__name__} not found", id=entity_id)
        return entity

    def _lock(self, model: Type[T], entity_id: int) -> T:
        """Re-read a row from the store under a row lock for read-modify-write."""
        stmt = (
            select(model)
            .where(model.id == entity_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        entity = self.session.exec(stmt).first()
        if entity is None:
            raise NotFound(f"{model.__name__} not found", id=entity_id)
        return entity

    def _lock_item(self, item_id: int) -> Item:
        return self._lock(Item, item_id)
