"""Pydantic payloads for one-shot document entry and the HTTP surface."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, computed_field

from inventory_service.models import DocumentStatus, DocumentType, ItemStatus, OperationType


class ReceiptLineData(BaseModel):
    nomenclature_id: int
    quantity: Decimal
    purchase_price: Decimal
    shelf_id: int
    selling_price: Optional[Decimal] = None
    batch_number: Optional[str] = None
    manufacture_date: Optional[date] = None
    expiry_date: Optional[date] = None
    serial_number: Optional[str] = None


class SaleLineData(BaseModel):
    item_id: int
    quantity: Decimal
    selling_price: Optional[Decimal] = None


class MovementLineData(BaseModel):
    item_id: int
    target_shelf_id: int


class DraftRequest(BaseModel):
    document_number: str
    document_date: date
    warehouse_id: int
    counterparty: Optional[str] = None
    created_by: Optional[str] = None
    notes: Optional[str] = None


class ReceiptRequest(DraftRequest):
    lines: List[ReceiptLineData]


class SaleRequest(DraftRequest):
    lines: List[SaleLineData]


class MovementRequest(DraftRequest):
    lines: List[MovementLineData]


class OperatorRequest(BaseModel):
    operator: Optional[str] = None


class QuickMoveRequest(OperatorRequest):
    target_shelf_id: int


class DocumentLineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    nomenclature_id: int
    item_id: Optional[int]
    quantity: Decimal
    price: Decimal
    total: Decimal
    shelf_id: Optional[int]


class DocumentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    document_type: DocumentType
    document_number: str
    document_date: date
    warehouse_id: int
    counterparty: Optional[str]
    total_amount: Decimal
    status: DocumentStatus
    created_by: Optional[str]
    confirmed_by: Optional[str]
    lines: List[DocumentLineResponse]

    @computed_field
    @property
    def type_name(self) -> str:
        return self.document_type.display_name

    @computed_field
    @property
    def status_name(self) -> str:
        return self.status.display_name


class ItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    nomenclature_id: int
    batch_number: Optional[str]
    quantity: Decimal
    purchase_price: Optional[Decimal]
    selling_price: Optional[Decimal]
    current_shelf_id: Optional[int]
    status: ItemStatus
    expiry_date: Optional[date]

    @computed_field
    @property
    def status_name(self) -> str:
        return self.status.display_name


class HistoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    item_id: int
    document_id: Optional[int]
    operation_type: OperationType
    quantity_change: Optional[Decimal]
    price: Optional[Decimal]
    from_shelf_id: Optional[int]
    to_shelf_id: Optional[int]
    from_status: Optional[ItemStatus]
    to_status: Optional[ItemStatus]
    operation_date: datetime
    created_by: Optional[str]
    notes: Optional[str]

    @computed_field
    @property
    def operation_name(self) -> str:
        return self.operation_type.display_name


class StockRow(BaseModel):
    nomenclature_id: int
    article: str
    name: str
    warehouse_id: Optional[int] = None
    warehouse_name: Optional[str] = None
    quantity: Decimal


class SalesTotals(BaseModel):
    start_date: date
    end_date: date
    count: int
    total_amount: Decimal
