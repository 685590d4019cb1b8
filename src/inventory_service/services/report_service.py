"""Read-only reporting over the stock ledger and documents."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlmodel import func, select

from inventory_service.db.filters import in_stock_only
from inventory_service.models import (
    Document,
    DocumentStatus,
    DocumentType,
    History,
    Item,
    Nomenclature,
    Shelf,
    Warehouse,
)
from inventory_service.schemas import SalesTotals, StockRow
from inventory_service.services.base import BaseService
from inventory_service.services.history_service import HistoryService

ZERO = Decimal("0")


def _decimal(value: Any) -> Decimal:
    return Decimal(str(value)) if value is not None else ZERO


class ReportService(BaseService):
    """Service for stock, expiry and sales reports. Never mutates."""

    def _stock_subquery(self):
        return (
            in_stock_only(
                select(
                    Item.nomenclature_id.label("nomenclature_id"),
                    func.sum(Item.quantity).label("quantity"),
                )
            )
            .group_by(Item.nomenclature_id)
            .subquery()
        )

    def stock_by_nomenclature(self) -> List[StockRow]:
        """IN_STOCK quantity for every catalog entry, zero when nothing is stocked."""

        stock = self._stock_subquery()
        stmt = (
            select(Nomenclature, stock.c.quantity)
            .outerjoin(stock, stock.c.nomenclature_id == Nomenclature.id)
            .order_by(Nomenclature.article)
        )
        return [
            StockRow(
                nomenclature_id=nomenclature.id,
                article=nomenclature.article,
                name=nomenclature.name,
                quantity=_decimal(quantity),
            )
            for nomenclature, quantity in self.session.exec(stmt)
        ]

    def stock_by_warehouse(self) -> List[StockRow]:
        """IN_STOCK quantity per nomenclature and warehouse of the item's shelf."""

        stmt = (
            in_stock_only(
                select(Nomenclature, Warehouse, func.sum(Item.quantity))
                .join(Item, Item.nomenclature_id == Nomenclature.id)
                .join(Shelf, Shelf.id == Item.current_shelf_id)
                .join(Warehouse, Warehouse.id == Shelf.warehouse_id)
            )
            .where(Item.quantity > 0)
            .group_by(Nomenclature.id, Warehouse.id)
            .order_by(Nomenclature.article, Warehouse.name)
        )
        return [
            StockRow(
                nomenclature_id=nomenclature.id,
                article=nomenclature.article,
                name=nomenclature.name,
                warehouse_id=warehouse.id,
                warehouse_name=warehouse.name,
                quantity=_decimal(quantity),
            )
            for nomenclature, warehouse, quantity in self.session.exec(stmt)
        ]

    def low_stock(self) -> List[Nomenclature]:
        """Catalog entries whose IN_STOCK quantity is below their reorder threshold."""

        stock = self._stock_subquery()
        stmt = (
            select(Nomenclature)
            .outerjoin(stock, stock.c.nomenclature_id == Nomenclature.id)
            .where(func.coalesce(stock.c.quantity, 0) < Nomenclature.min_stock_level)
            .order_by(Nomenclature.name)
        )
        return list(self.session.exec(stmt))

    def expiring_within(self, days: int, today: Optional[date] = None) -> List[Item]:
        """IN_STOCK items expiring after today and no later than ``days`` from now."""

        today = today or date.today()
        stmt = (
            in_stock_only(select(Item))
            .where(
                Item.expiry_date.is_not(None),
                Item.expiry_date > today,
                Item.expiry_date <= today + timedelta(days=days),
            )
            .order_by(Item.expiry_date, Item.id)
        )
        return list(self.session.exec(stmt))

    def expired_items(self, today: Optional[date] = None) -> List[Item]:
        today = today or date.today()
        stmt = (
            in_stock_only(select(Item))
            .where(Item.expiry_date.is_not(None), Item.expiry_date < today)
            .order_by(Item.expiry_date, Item.id)
        )
        return list(self.session.exec(stmt))

    def _document_totals(self, document_type: DocumentType, start_date: date, end_date: date) -> SalesTotals:
        stmt = select(func.count(Document.id), func.coalesce(func.sum(Document.total_amount), 0)).where(
            Document.document_type == document_type,
            Document.status == DocumentStatus.CONFIRMED,
            Document.document_date >= start_date,
            Document.document_date <= end_date,
        )
        count, total = self.session.exec(stmt).one()
        return SalesTotals(start_date=start_date, end_date=end_date, count=count, total_amount=_decimal(total))

    def sales_totals(self, start_date: date, end_date: date) -> SalesTotals:
        """Count and amount of confirmed sales dated within [start, end]."""
        return self._document_totals(DocumentType.SALE, start_date, end_date)

    def receipt_totals(self, start_date: date, end_date: date) -> SalesTotals:
        return self._document_totals(DocumentType.RECEIPT, start_date, end_date)

    def operation_history(self, start: datetime, end: datetime) -> List[History]:
        return HistoryService(self.session).between(start, end)

    def shelf_report(self, shelf_id: int, today: Optional[date] = None) -> Dict[str, Any]:
        shelf = self._get(Shelf, shelf_id)
        items = list(
            self.session.exec(
                in_stock_only(select(Item)).where(Item.current_shelf_id == shelf_id).order_by(Item.id)
            )
        )
        return {
            "shelf": shelf,
            "items": items,
            "item_count": len(items),
            "total_value": sum((item.total_value for item in items), ZERO),
            "expired_count": sum(1 for item in items if item.is_expired(today)),
        }

    def warehouse_summary(self, warehouse_id: int) -> Dict[str, Any]:
        warehouse = self._get(Warehouse, warehouse_id)
        items = list(
            self.session.exec(
                in_stock_only(select(Item))
                .join(Shelf, Shelf.id == Item.current_shelf_id)
                .where(Shelf.warehouse_id == warehouse_id)
            )
        )
        return {
            "warehouse": warehouse,
            "total_items": len(items),
            "total_quantity": sum((item.quantity for item in items), ZERO),
            "total_value": sum((item.total_value for item in items), ZERO),
            "purchase_cost": sum((item.total_purchase_cost for item in items), ZERO),
        }
