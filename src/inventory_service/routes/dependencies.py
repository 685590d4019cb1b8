"""FastAPI dependencies bound to the application's database handle."""

from __future__ import annotations

from typing import Iterator

from fastapi import Depends, Request
from sqlmodel import Session

from inventory_service.config import Settings
from inventory_service.services import (
    CatalogService,
    HistoryService,
    MovementService,
    ReceiptService,
    ReportService,
    SaleService,
)


def get_session(request: Request) -> Iterator[Session]:
    """Get database session."""
    session = request.app.state.database.session()
    try:
        yield session
    finally:
        session.close()


def get_settings_dependency(request: Request) -> Settings:
    return request.app.state.settings


def get_receipt_service(session: Session = Depends(get_session)) -> ReceiptService:
    return ReceiptService(session)


def get_sale_service(session: Session = Depends(get_session)) -> SaleService:
    return SaleService(session)


def get_movement_service(session: Session = Depends(get_session)) -> MovementService:
    return MovementService(session)


def get_report_service(session: Session = Depends(get_session)) -> ReportService:
    return ReportService(session)


def get_history_service(session: Session = Depends(get_session)) -> HistoryService:
    return HistoryService(session)


def get_catalog_service(session: Session = Depends(get_session)) -> CatalogService:
    return CatalogService(session)
