"""Receipt documents: bring new stock batches into the ledger."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

from inventory_service.db import atomic
from inventory_service.exceptions import InvalidDocumentState, InvalidLineData, ItemAlreadyDisposed
from inventory_service.logging import logger
from inventory_service.models import (
    Document,
    DocumentLine,
    DocumentStatus,
    DocumentType,
    Item,
    ItemStatus,
    Nomenclature,
    OperationType,
    Shelf,
)
from inventory_service.schemas import ReceiptLineData
from inventory_service.services.documents import DocumentWorkflow, require_positive


class ReceiptService(DocumentWorkflow):
    """Service for receipt drafts, their confirmation and cancellation."""

    document_type = DocumentType.RECEIPT

    def create_draft(
        self,
        document_number: str,
        document_date: date,
        warehouse_id: int,
        supplier: Optional[str],
        created_by: Optional[str],
        notes: Optional[str] = None,
    ) -> Document:
        return self._create_draft(document_number, document_date, warehouse_id, supplier, created_by, notes)

    def add_line(
        self,
        document_id: int,
        nomenclature_id: int,
        quantity: Decimal,
        purchase_price: Decimal,
        shelf_id: int,
        selling_price: Optional[Decimal] = None,
        batch_number: Optional[str] = None,
        manufacture_date: Optional[date] = None,
        expiry_date: Optional[date] = None,
        serial_number: Optional[str] = None,
    ) -> DocumentLine:
        with atomic(self.session, "add receipt line"):
            document = self._load_draft(document_id)
            context = {"document_number": document.document_number}
            require_positive(quantity, "quantity", **context)
            require_positive(purchase_price, "purchase_price", **context)
            if selling_price is not None:
                require_positive(selling_price, "selling_price", **context)
            if manufacture_date and expiry_date and expiry_date < manufacture_date:
                raise InvalidLineData("Expiry date precedes manufacture date", **context)

            self._get(Nomenclature, nomenclature_id)
            shelf = self._get(Shelf, shelf_id)
            if shelf.warehouse_id != document.warehouse_id:
                raise InvalidLineData(
                    "Shelf belongs to another warehouse", shelf_id=shelf_id, **context
                )

            line = DocumentLine(
                nomenclature_id=nomenclature_id,
                quantity=quantity,
                price=purchase_price,
                shelf_id=shelf_id,
                selling_price=selling_price,
                batch_number=batch_number,
                serial_number=serial_number,
                manufacture_date=manufacture_date,
                expiry_date=expiry_date,
            )
            return self._add_line(document, line)

    def _validate_lines(self, document: Document) -> None:
        for line in document.lines:
            require_positive(line.quantity, "quantity", document_number=document.document_number, line_id=line.id)
            self._get(Shelf, line.shelf_id)

    def _apply_line(self, document: Document, line: DocumentLine, confirmed_by: Optional[str]) -> None:
        item = Item(
            nomenclature_id=line.nomenclature_id,
            batch_number=line.batch_number,
            serial_number=line.serial_number,
            quantity=line.quantity,
            purchase_price=line.price,
            selling_price=line.selling_price if line.selling_price is not None else line.price,
            current_shelf_id=line.shelf_id,
            status=ItemStatus.IN_STOCK,
            manufacture_date=line.manufacture_date,
            expiry_date=line.expiry_date,
        )
        self.session.add(item)
        self.session.flush()

        line.item_id = item.id
        self.history.record(
            item,
            OperationType.RECEIPT,
            confirmed_by,
            document=document,
            quantity_change=line.quantity,
            price=line.price,
            to_shelf_id=line.shelf_id,
            to_status=ItemStatus.IN_STOCK,
            notes=f"Поступление по документу {document.document_number}",
        )

    def cancel(self, document_id: int, cancelled_by: Optional[str]) -> Document:
        """Retract a confirmed receipt whose stock is still untouched by sales."""

        with atomic(self.session, "cancel receipt"):
            document = self._lock(Document, document_id)
            self._require_type(document)
            if document.status != DocumentStatus.CONFIRMED:
                raise InvalidDocumentState(
                    "Only confirmed receipts can be cancelled",
                    document_number=document.document_number,
                    status=document.status.value,
                )

            received = []
            for line in document.lines:
                if line.item_id is None:
                    continue
                item = self._lock_item(line.item_id)
                if item.status == ItemStatus.SOLD or item.quantity < line.quantity:
                    raise ItemAlreadyDisposed(
                        "Received stock has already been sold",
                        document_number=document.document_number,
                        item_id=item.id,
                    )
                received.append((line, item))

            removed_at = datetime.now()
            for line, item in received:
                from_status = item.status
                item.quantity = Decimal("0")
                item.removed_at = removed_at
                item.removed_by = cancelled_by
                self.history.record(
                    item,
                    OperationType.WRITE_OFF,
                    cancelled_by,
                    document=document,
                    quantity_change=-line.quantity,
                    price=line.price,
                    from_shelf_id=item.current_shelf_id,
                    from_status=from_status,
                    notes=f"Отмена документа поступления {document.document_number}",
                )

            document.status = DocumentStatus.CANCELLED
            self.session.flush()

        logger.info(
            "Receipt cancelled",
            document_number=document.document_number,
            lines=len(received),
            cancelled_by=cancelled_by,
        )
        return document

    def receive(
        self,
        document_number: str,
        document_date: date,
        warehouse_id: int,
        supplier: Optional[str],
        lines: Sequence[ReceiptLineData],
        created_by: Optional[str],
        notes: Optional[str] = None,
    ) -> Document:
        """Create, fill and confirm a receipt as one transaction."""

        with atomic(self.session, "receive"):
            document = self.create_draft(document_number, document_date, warehouse_id, supplier, created_by, notes)
            for line in lines:
                self.add_line(document.id, **line.model_dump())
            return self.confirm(document.id, created_by)
