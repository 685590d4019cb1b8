"""Sale documents: take sold quantities out of stock batches."""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from sqlmodel import func, select

from inventory_service.db import atomic
from inventory_service.db.filters import in_stock_only
from inventory_service.exceptions import InsufficientStock, InvalidLineData, ItemUnavailable
from inventory_service.models import (
    Document,
    DocumentLine,
    DocumentType,
    Item,
    ItemStatus,
    OperationType,
    Shelf,
)
from inventory_service.schemas import SaleLineData
from inventory_service.services.documents import DocumentWorkflow, require_positive

ZERO = Decimal("0")


class SaleService(DocumentWorkflow):
    """Service for sale drafts and their confirmation."""

    document_type = DocumentType.SALE

    def create_draft(
        self,
        document_number: str,
        document_date: date,
        warehouse_id: int,
        customer: Optional[str],
        created_by: Optional[str],
        notes: Optional[str] = None,
    ) -> Document:
        return self._create_draft(document_number, document_date, warehouse_id, customer, created_by, notes)

    def add_line(
        self,
        document_id: int,
        item_id: int,
        quantity: Decimal,
        selling_price: Optional[Decimal] = None,
    ) -> DocumentLine:
        """Add a sale line.

        The availability check here is advisory; ``confirm`` re-reads the item
        and checks again.
        """

        with atomic(self.session, "add sale line"):
            document = self._load_draft(document_id)
            require_positive(quantity, "quantity", document_number=document.document_number)
            item = self._get(Item, item_id)
            self._check_sellable(document, item, quantity)

            price = selling_price if selling_price is not None else item.selling_price
            if price is None or price < 0:
                raise InvalidLineData(
                    "selling_price must not be negative",
                    document_number=document.document_number,
                    item_id=item_id,
                )

            line = DocumentLine(
                nomenclature_id=item.nomenclature_id,
                item_id=item.id,
                quantity=quantity,
                price=price,
                shelf_id=item.current_shelf_id,
            )
            return self._add_line(document, line)

    def _check_sellable(self, document: Document, item: Item, quantity: Decimal) -> None:
        if item.status != ItemStatus.IN_STOCK or item.removed_at is not None:
            raise ItemUnavailable(
                "Item is not available for sale",
                document_number=document.document_number,
                item_id=item.id,
                status=item.status.value,
            )
        if item.quantity - quantity < 0:
            raise InsufficientStock(
                "Not enough stock in item",
                document_number=document.document_number,
                item_id=item.id,
                available=item.quantity,
                requested=quantity,
            )

    def _validate_lines(self, document: Document) -> None:
        demand: Dict[int, Decimal] = defaultdict(lambda: ZERO)
        for line in document.lines:
            if line.item_id is None:
                raise ItemUnavailable(
                    "Sale line has no item", document_number=document.document_number, line_id=line.id
                )
            demand[line.item_id] += line.quantity
        for item_id, quantity in demand.items():
            self._check_sellable(document, self._lock_item(item_id), quantity)

    def _apply_line(self, document: Document, line: DocumentLine, confirmed_by: Optional[str]) -> None:
        item = self._lock_item(line.item_id)
        self._check_sellable(document, item, line.quantity)

        remaining = item.quantity - line.quantity
        if remaining == 0:
            item.status = ItemStatus.SOLD
            item.quantity = ZERO
        else:
            item.quantity = remaining

        self.history.record(
            item,
            OperationType.SALE,
            confirmed_by,
            document=document,
            quantity_change=-line.quantity,
            price=line.price,
            from_shelf_id=item.current_shelf_id,
            from_status=ItemStatus.IN_STOCK,
            to_status=item.status,
            notes=f"Продажа по документу {document.document_number}",
        )

    def sell(
        self,
        document_number: str,
        document_date: date,
        warehouse_id: int,
        customer: Optional[str],
        lines: Sequence[SaleLineData],
        created_by: Optional[str],
        notes: Optional[str] = None,
    ) -> Document:
        """Create, fill and confirm a sale as one transaction."""

        with atomic(self.session, "sell"):
            document = self.create_draft(document_number, document_date, warehouse_id, customer, created_by, notes)
            for line in lines:
                self.add_line(document.id, **line.model_dump())
            return self.confirm(document.id, created_by)

    def available_items(self, nomenclature_id: int, warehouse_id: Optional[int] = None) -> List[Item]:
        """Sellable batches of a nomenclature, oldest first."""

        stmt = in_stock_only(select(Item)).where(
            Item.nomenclature_id == nomenclature_id,
            Item.quantity > 0,
        )
        if warehouse_id is not None:
            stmt = stmt.join(Shelf, Shelf.id == Item.current_shelf_id).where(Shelf.warehouse_id == warehouse_id)
        stmt = stmt.order_by(Item.created_at, Item.id)
        return list(self.session.exec(stmt))

    def available_quantity(self, nomenclature_id: int) -> Decimal:
        stmt = in_stock_only(
            select(func.coalesce(func.sum(Item.quantity), 0))
        ).where(Item.nomenclature_id == nomenclature_id)
        return Decimal(str(self.session.exec(stmt).one()))
