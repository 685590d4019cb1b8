"""Document workflow endpoints: drafts, lines, confirmation and one-shot entry."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status

from inventory_service.config import Settings
from inventory_service.routes.dependencies import (
    get_history_service,
    get_movement_service,
    get_receipt_service,
    get_sale_service,
    get_settings_dependency,
)
from inventory_service.schemas import (
    DocumentLineResponse,
    DocumentResponse,
    DraftRequest,
    HistoryResponse,
    ItemResponse,
    MovementLineData,
    MovementRequest,
    OperatorRequest,
    QuickMoveRequest,
    ReceiptLineData,
    ReceiptRequest,
    SaleLineData,
    SaleRequest,
)
from inventory_service.services import HistoryService, MovementService, ReceiptService, SaleService

router = APIRouter(prefix="/api/v1", tags=["documents"])


def _operator(requested: str | None, settings: Settings) -> str:
    return requested or settings.default_operator


# Receipts

@router.post("/receipts", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
def create_receipt_draft(
    payload: DraftRequest,
    service: ReceiptService = Depends(get_receipt_service),
    settings: Settings = Depends(get_settings_dependency),
) -> DocumentResponse:
    document = service.create_draft(
        payload.document_number,
        payload.document_date,
        payload.warehouse_id,
        payload.counterparty,
        _operator(payload.created_by, settings),
        payload.notes,
    )
    return DocumentResponse.model_validate(document)


@router.post(
    "/receipts/{document_id}/lines",
    response_model=DocumentLineResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_receipt_line(
    document_id: int,
    payload: ReceiptLineData,
    service: ReceiptService = Depends(get_receipt_service),
) -> DocumentLineResponse:
    line = service.add_line(document_id, **payload.model_dump())
    return DocumentLineResponse.model_validate(line)


@router.post("/receipts/{document_id}/confirm", response_model=DocumentResponse)
def confirm_receipt(
    document_id: int,
    payload: OperatorRequest,
    service: ReceiptService = Depends(get_receipt_service),
    settings: Settings = Depends(get_settings_dependency),
) -> DocumentResponse:
    document = service.confirm(document_id, _operator(payload.operator, settings))
    return DocumentResponse.model_validate(document)


@router.post("/receipts/{document_id}/cancel", response_model=DocumentResponse)
def cancel_receipt(
    document_id: int,
    payload: OperatorRequest,
    service: ReceiptService = Depends(get_receipt_service),
    settings: Settings = Depends(get_settings_dependency),
) -> DocumentResponse:
    document = service.cancel(document_id, _operator(payload.operator, settings))
    return DocumentResponse.model_validate(document)


@router.post("/receipts/confirmed", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
def receive(
    payload: ReceiptRequest,
    service: ReceiptService = Depends(get_receipt_service),
    settings: Settings = Depends(get_settings_dependency),
) -> DocumentResponse:
    document = service.receive(
        payload.document_number,
        payload.document_date,
        payload.warehouse_id,
        payload.counterparty,
        payload.lines,
        _operator(payload.created_by, settings),
        payload.notes,
    )
    return DocumentResponse.model_validate(document)


# Sales

@router.post("/sales", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
def create_sale_draft(
    payload: DraftRequest,
    service: SaleService = Depends(get_sale_service),
    settings: Settings = Depends(get_settings_dependency),
) -> DocumentResponse:
    document = service.create_draft(
        payload.document_number,
        payload.document_date,
        payload.warehouse_id,
        payload.counterparty,
        _operator(payload.created_by, settings),
        payload.notes,
    )
    return DocumentResponse.model_validate(document)


@router.post("/sales/{document_id}/lines", response_model=DocumentLineResponse, status_code=status.HTTP_201_CREATED)
def add_sale_line(
    document_id: int,
    payload: SaleLineData,
    service: SaleService = Depends(get_sale_service),
) -> DocumentLineResponse:
    line = service.add_line(document_id, **payload.model_dump())
    return DocumentLineResponse.model_validate(line)


@router.post("/sales/{document_id}/confirm", response_model=DocumentResponse)
def confirm_sale(
    document_id: int,
    payload: OperatorRequest,
    service: SaleService = Depends(get_sale_service),
    settings: Settings = Depends(get_settings_dependency),
) -> DocumentResponse:
    document = service.confirm(document_id, _operator(payload.operator, settings))
    return DocumentResponse.model_validate(document)


@router.post("/sales/confirmed", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
def sell(
    payload: SaleRequest,
    service: SaleService = Depends(get_sale_service),
    settings: Settings = Depends(get_settings_dependency),
) -> DocumentResponse:
    document = service.sell(
        payload.document_number,
        payload.document_date,
        payload.warehouse_id,
        payload.counterparty,
        payload.lines,
        _operator(payload.created_by, settings),
        payload.notes,
    )
    return DocumentResponse.model_validate(document)


# Movements

@router.post("/movements", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
def create_movement_draft(
    payload: DraftRequest,
    service: MovementService = Depends(get_movement_service),
    settings: Settings = Depends(get_settings_dependency),
) -> DocumentResponse:
    document = service.create_draft(
        payload.document_number,
        payload.document_date,
        payload.warehouse_id,
        _operator(payload.created_by, settings),
        payload.notes,
    )
    return DocumentResponse.model_validate(document)


@router.post(
    "/movements/{document_id}/lines",
    response_model=DocumentLineResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_movement_line(
    document_id: int,
    payload: MovementLineData,
    service: MovementService = Depends(get_movement_service),
) -> DocumentLineResponse:
    line = service.add_line(document_id, payload.item_id, payload.target_shelf_id)
    return DocumentLineResponse.model_validate(line)


@router.post("/movements/{document_id}/confirm", response_model=DocumentResponse)
def confirm_movement(
    document_id: int,
    payload: OperatorRequest,
    service: MovementService = Depends(get_movement_service),
    settings: Settings = Depends(get_settings_dependency),
) -> DocumentResponse:
    document = service.confirm(document_id, _operator(payload.operator, settings))
    return DocumentResponse.model_validate(document)


@router.post("/movements/confirmed", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
def move(
    payload: MovementRequest,
    service: MovementService = Depends(get_movement_service),
    settings: Settings = Depends(get_settings_dependency),
) -> DocumentResponse:
    document = service.move(
        payload.document_number,
        payload.document_date,
        payload.warehouse_id,
        payload.lines,
        _operator(payload.created_by, settings),
        payload.notes,
    )
    return DocumentResponse.model_validate(document)


@router.post("/items/{item_id}/move", response_model=ItemResponse)
def quick_move(
    item_id: int,
    payload: QuickMoveRequest,
    service: MovementService = Depends(get_movement_service),
    settings: Settings = Depends(get_settings_dependency),
) -> ItemResponse:
    item = service.quick_move(item_id, payload.target_shelf_id, _operator(payload.operator, settings))
    return ItemResponse.model_validate(item)


# Lookups

@router.get("/documents/{document_id}", response_model=DocumentResponse)
def get_document(
    document_id: int,
    service: ReceiptService = Depends(get_receipt_service),
) -> DocumentResponse:
    return DocumentResponse.model_validate(service.get_document(document_id))


@router.get("/items/{item_id}/history", response_model=List[HistoryResponse])
def item_history(
    item_id: int,
    service: HistoryService = Depends(get_history_service),
) -> List[HistoryResponse]:
    return [HistoryResponse.model_validate(entry) for entry in service.for_item(item_id)]
