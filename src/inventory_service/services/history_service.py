"""Append-only operation history of stock items."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlmodel import func, or_, select

from inventory_service.models import Document, History, Item, ItemStatus, OperationType
from inventory_service.services.base import BaseService


class HistoryService(BaseService):
    """Single writer and reader of the ``history`` ledger."""

    def record(
        self,
        item: Item,
        operation_type: OperationType,
        created_by: Optional[str],
        *,
        document: Optional[Document] = None,
        quantity_change: Optional[Decimal] = None,
        price: Optional[Decimal] = None,
        from_shelf_id: Optional[int] = None,
        to_shelf_id: Optional[int] = None,
        from_status: Optional[ItemStatus] = None,
        to_status: Optional[ItemStatus] = None,
        notes: Optional[str] = None,
    ) -> History:
        """Append one entry; entries are never updated afterwards."""

        entry = History(
            item_id=item.id,
            document_id=document.id if document is not None else None,
            operation_type=operation_type,
            quantity_change=quantity_change,
            price=price,
            from_shelf_id=from_shelf_id,
            to_shelf_id=to_shelf_id,
            from_status=from_status,
            to_status=to_status,
            created_by=created_by,
            notes=notes,
        )
        self.session.add(entry)
        return entry

    def for_item(self, item_id: int) -> List[History]:
        stmt = (
            select(History)
            .where(History.item_id == item_id)
            .order_by(History.operation_date.desc(), History.id.desc())
        )
        return list(self.session.exec(stmt))

    def for_document(self, document_id: int) -> List[History]:
        stmt = (
            select(History)
            .where(History.document_id == document_id)
            .order_by(History.operation_date, History.id)
        )
        return list(self.session.exec(stmt))

    def for_shelf(self, shelf_id: int) -> List[History]:
        """Movements into or out of a shelf."""
        stmt = (
            select(History)
            .where(or_(History.from_shelf_id == shelf_id, History.to_shelf_id == shelf_id))
            .order_by(History.operation_date.desc(), History.id.desc())
        )
        return list(self.session.exec(stmt))

    def by_operation_type(self, operation_type: OperationType) -> List[History]:
        stmt = (
            select(History)
            .where(History.operation_type == operation_type)
            .order_by(History.operation_date.desc(), History.id.desc())
        )
        return list(self.session.exec(stmt))

    def between(self, start: datetime, end: datetime) -> List[History]:
        stmt = (
            select(History)
            .where(History.operation_date >= start, History.operation_date <= end)
            .order_by(History.operation_date.desc(), History.id.desc())
        )
        return list(self.session.exec(stmt))

    def reconstruct_quantity(self, item_id: int, until: Optional[datetime] = None) -> Decimal:
        """Replay signed quantity changes of an item up to ``until``.

        Movements carry no quantity change, so the result equals the item's
        quantity at that moment.
        """

        stmt = select(func.coalesce(func.sum(History.quantity_change), 0)).where(
            History.item_id == item_id,
            History.quantity_change.is_not(None),
        )
        if until is not None:
            stmt = stmt.where(History.operation_date <= until)
        total = self.session.exec(stmt).one()
        return Decimal(str(total))
