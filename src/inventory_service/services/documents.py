"""Draft lifecycle shared by receipt, sale and movement documents."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from inventory_service.db import atomic
from inventory_service.exceptions import (
    DuplicateDocumentNumber,
    EmptyDocument,
    InvalidDocumentState,
    InvalidDocumentType,
    InvalidLineData,
)
from inventory_service.logging import logger
from inventory_service.models import Document, DocumentLine, DocumentStatus, DocumentType, Warehouse
from inventory_service.services.base import BaseService
from inventory_service.services.history_service import HistoryService


class DocumentWorkflow(BaseService):
    """Template for a document flow.

    Subclasses set ``document_type`` and implement ``_validate_lines`` (checks
    run before anything is mutated) and ``_apply_line`` (the stock mutation for
    one line). ``confirm`` runs both inside a single unit of work.
    """

    document_type: DocumentType

    def __init__(self, session: Session, history: Optional[HistoryService] = None):
        super().__init__(session)
        self.history = history or HistoryService(session)

    def get_document(self, document_id: int) -> Document:
        return self._get(Document, document_id)

    def _create_draft(
        self,
        document_number: str,
        document_date: date,
        warehouse_id: int,
        counterparty: Optional[str],
        created_by: Optional[str],
        notes: Optional[str] = None,
    ) -> Document:
        with atomic(self.session, f"create {self.document_type.value} draft"):
            self._get(Warehouse, warehouse_id)
            existing = self.session.exec(
                select(Document.id).where(Document.document_number == document_number)
            ).first()
            if existing is not None:
                raise DuplicateDocumentNumber(
                    "Document number already exists", document_number=document_number
                )

            document = Document(
                document_type=self.document_type,
                document_number=document_number,
                document_date=document_date,
                warehouse_id=warehouse_id,
                counterparty=counterparty,
                status=DocumentStatus.DRAFT,
                notes=notes,
                created_by=created_by,
            )
            self.session.add(document)
            try:
                self.session.flush()
            except IntegrityError as exc:
                raise DuplicateDocumentNumber(
                    "Document number already exists", document_number=document_number
                ) from exc
        return document

    def _add_line(self, document: Document, line: DocumentLine) -> DocumentLine:
        line.recalculate_total()
        document.lines.append(line)
        document.recalculate_total()
        self.session.flush()
        return line

    def remove_line(self, document_id: int, line_id: int) -> Document:
        """Drop a line from a draft and recompute its total."""

        with atomic(self.session, "remove document line"):
            document = self._lock(Document, document_id)
            self._require_type(document)
            self._require_draft(document)
            line = self._get(DocumentLine, line_id)
            if line.document_id != document.id:
                raise InvalidLineData(
                    "Line does not belong to document",
                    document_number=document.document_number,
                    line_id=line_id,
                )
            document.lines.remove(line)
            document.recalculate_total()
            self.session.flush()
        return document

    def delete_draft(self, document_id: int) -> None:
        with atomic(self.session, "delete draft"):
            document = self._lock(Document, document_id)
            self._require_type(document)
            self._require_draft(document)
            self.session.delete(document)
        logger.info("Draft deleted", document_id=document_id)

    def confirm(self, document_id: int, confirmed_by: Optional[str]) -> Document:
        """Apply every line of a draft to the stock ledger, all or nothing."""

        with atomic(self.session, f"confirm {self.document_type.value}"):
            document = self._lock(Document, document_id)
            self._require_type(document)
            self._require_draft(document)
            if not document.lines:
                raise EmptyDocument(
                    "Cannot confirm a document without lines",
                    document_number=document.document_number,
                )

            self._validate_lines(document)
            for line in document.lines:
                self._apply_line(document, line, confirmed_by)

            document.recalculate_total()
            document.status = DocumentStatus.CONFIRMED
            document.confirmed_by = confirmed_by
            document.confirmed_at = datetime.now()
            self.session.flush()

        logger.info(
            "Document confirmed",
            document_type=self.document_type.value,
            document_number=document.document_number,
            lines=len(document.lines),
            confirmed_by=confirmed_by,
        )
        return document

    def _validate_lines(self, document: Document) -> None:
        raise NotImplementedError

    def _apply_line(self, document: Document, line: DocumentLine, confirmed_by: Optional[str]) -> None:
        raise NotImplementedError

    def _require_type(self, document: Document) -> None:
        if document.document_type != self.document_type:
            raise InvalidDocumentType(
                f"Document is not a {self.document_type.value}",
                document_number=document.document_number,
                document_type=document.document_type.value,
            )

    def _require_draft(self, document: Document) -> None:
        if document.status != DocumentStatus.DRAFT:
            raise InvalidDocumentState(
                "Only draft documents can be changed or confirmed",
                document_number=document.document_number,
                status=document.status.value,
            )

    def _load_draft(self, document_id: int) -> Document:
        document = self.get_document(document_id)
        self._require_draft(document)
        self._require_type(document)
        return document


def require_positive(value: Optional[Decimal], field: str, **context) -> Decimal:
    if value is None or value <= 0:
        raise InvalidLineData(f"{field} must be greater than zero", value=value, **context)
    return value
