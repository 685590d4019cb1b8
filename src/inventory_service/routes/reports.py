"""Read-only report endpoints."""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from inventory_service.config import Settings
from inventory_service.routes.dependencies import get_report_service, get_settings_dependency
from inventory_service.schemas import ItemResponse, SalesTotals, StockRow
from inventory_service.services import ReportService

router = APIRouter(prefix="/api/v1/reports", tags=["reports"])


@router.get("/stock", response_model=List[StockRow])
def stock_by_nomenclature(service: ReportService = Depends(get_report_service)) -> List[StockRow]:
    return service.stock_by_nomenclature()


@router.get("/stock/by-warehouse", response_model=List[StockRow])
def stock_by_warehouse(service: ReportService = Depends(get_report_service)) -> List[StockRow]:
    return service.stock_by_warehouse()


@router.get("/low-stock", response_model=List[StockRow])
def low_stock(service: ReportService = Depends(get_report_service)) -> List[StockRow]:
    """Catalog entries below their reorder threshold, with their current stock."""
    stock = {row.nomenclature_id: row for row in service.stock_by_nomenclature()}
    return [stock[nomenclature.id] for nomenclature in service.low_stock()]


@router.get("/expiring", response_model=List[ItemResponse])
def expiring_items(
    days: Optional[int] = Query(default=None, ge=0),
    service: ReportService = Depends(get_report_service),
    settings: Settings = Depends(get_settings_dependency),
) -> List[ItemResponse]:
    horizon = settings.expiry_warning_days if days is None else days
    return [ItemResponse.model_validate(item) for item in service.expiring_within(horizon)]


@router.get("/sales", response_model=SalesTotals)
def sales_totals(
    start: date,
    end: date,
    service: ReportService = Depends(get_report_service),
) -> SalesTotals:
    return service.sales_totals(start, end)
