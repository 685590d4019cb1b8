"""Query filters shared by services and reports."""

from typing import TypeVar

from sqlmodel import SQLModel
from sqlmodel.sql.expression import Select

from inventory_service.models import Item, ItemStatus

T = TypeVar("T", bound=SQLModel)


def exclude_removed(query: Select[T]) -> Select[T]:
    """
    Exclude soft-removed items (cancelled receipts) from an item query.

    Args:
        query: SQLModel select over ``Item``

    Returns:
        Query with the removal filter applied
    """
    return query.where(Item.removed_at.is_(None))


def in_stock_only(query: Select[T]) -> Select[T]:
    """Restrict an item query to sellable, not removed batches."""
    return exclude_removed(query).where(Item.status == ItemStatus.IN_STOCK)


def active_only(query: Select[T], model: type[SQLModel]) -> Select[T]:
    """
    Filter query to rows whose ``is_active`` flag is set.

    Args:
        query: SQLModel select query
        model: Model class carrying ``is_active`` (Warehouse, Shelf)

    Returns:
        Query filtered for active rows only
    """
    if hasattr(model, "is_active"):
        return query.where(model.is_active.is_(True))
    return query
