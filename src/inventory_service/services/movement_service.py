"""Movement documents and quick moves between shelves."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Dict, Optional, Sequence

from inventory_service.db import atomic
from inventory_service.exceptions import ItemUnavailable, NoCurrentLocation, SameLocation
from inventory_service.logging import logger
from inventory_service.models import (
    Document,
    DocumentLine,
    DocumentType,
    History,
    Item,
    OperationType,
    Shelf,
)
from inventory_service.schemas import MovementLineData
from inventory_service.services.documents import DocumentWorkflow


class MovementService(DocumentWorkflow):
    """Service for relocating items, with or without a movement document."""

    document_type = DocumentType.MOVEMENT

    def create_draft(
        self,
        document_number: str,
        document_date: date,
        warehouse_id: int,
        created_by: Optional[str],
        notes: Optional[str] = None,
    ) -> Document:
        return self._create_draft(document_number, document_date, warehouse_id, None, created_by, notes)

    def add_line(self, document_id: int, item_id: int, target_shelf_id: int) -> DocumentLine:
        with atomic(self.session, "add movement line"):
            document = self._load_draft(document_id)
            item = self._get(Item, item_id)
            self._get(Shelf, target_shelf_id)
            self._check_movable(item, item.current_shelf_id, target_shelf_id, document.document_number)

            # Price is irrelevant for a movement; the line carries the whole batch.
            line = DocumentLine(
                nomenclature_id=item.nomenclature_id,
                item_id=item.id,
                quantity=item.quantity,
                price=Decimal("0"),
                shelf_id=target_shelf_id,
            )
            return self._add_line(document, line)

    def _check_movable(
        self,
        item: Item,
        current_shelf_id: Optional[int],
        target_shelf_id: int,
        document_number: Optional[str] = None,
    ) -> None:
        context = {"item_id": item.id, "document_number": document_number}
        if item.removed_at is not None:
            raise ItemUnavailable("Item has been removed from stock", **context)
        if current_shelf_id is None:
            raise NoCurrentLocation("Item has no current shelf", **context)
        if current_shelf_id == target_shelf_id:
            raise SameLocation("Item is already on the target shelf", shelf_id=target_shelf_id, **context)

    def _validate_lines(self, document: Document) -> None:
        # Lines apply in order, so a later line starts where an earlier one left the item.
        locations: Dict[int, Optional[int]] = {}
        for line in document.lines:
            if line.item_id is None:
                raise ItemUnavailable(
                    "Movement line has no item", document_number=document.document_number, line_id=line.id
                )
            if line.item_id not in locations:
                locations[line.item_id] = self._lock_item(line.item_id).current_shelf_id
            item = self.session.get(Item, line.item_id)
            self._check_movable(item, locations[line.item_id], line.shelf_id, document.document_number)
            locations[line.item_id] = line.shelf_id

    def _apply_line(self, document: Document, line: DocumentLine, confirmed_by: Optional[str]) -> None:
        item = self._lock_item(line.item_id)
        self._check_movable(item, item.current_shelf_id, line.shelf_id, document.document_number)
        self._relocate(item, line.shelf_id, confirmed_by, document=document, label="Перемещение")

    def _relocate(
        self,
        item: Item,
        target_shelf_id: int,
        moved_by: Optional[str],
        *,
        document: Optional[Document] = None,
        label: str,
    ) -> History:
        from_shelf = self._get(Shelf, item.current_shelf_id)
        to_shelf = self._get(Shelf, target_shelf_id)
        item.current_shelf_id = to_shelf.id
        return self.history.record(
            item,
            OperationType.MOVEMENT,
            moved_by,
            document=document,
            from_shelf_id=from_shelf.id,
            to_shelf_id=to_shelf.id,
            from_status=item.status,
            to_status=item.status,
            notes=f"{label}: {from_shelf.full_address} → {to_shelf.full_address}",
        )

    def quick_move(self, item_id: int, target_shelf_id: int, moved_by: Optional[str]) -> Item:
        """Relocate an item without a movement document."""

        with atomic(self.session, "quick move"):
            item = self._lock_item(item_id)
            self._get(Shelf, target_shelf_id)
            self._check_movable(item, item.current_shelf_id, target_shelf_id)
            from_shelf_id = item.current_shelf_id
            self._relocate(item, target_shelf_id, moved_by, label="Быстрое перемещение")
            self.session.flush()

        logger.info(
            "Item moved",
            item_id=item_id,
            from_shelf_id=from_shelf_id,
            to_shelf_id=target_shelf_id,
            moved_by=moved_by,
        )
        return item

    def move(
        self,
        document_number: str,
        document_date: date,
        warehouse_id: int,
        lines: Sequence[MovementLineData],
        created_by: Optional[str],
        notes: Optional[str] = None,
    ) -> Document:
        """Create, fill and confirm a movement as one transaction."""

        with atomic(self.session, "move"):
            document = self.create_draft(document_number, document_date, warehouse_id, created_by, notes)
            for line in lines:
                self.add_line(document.id, **line.model_dump())
            return self.confirm(document.id, created_by)
