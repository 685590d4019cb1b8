"""Business services for stock operations."""

from inventory_service.services.catalog_service import CatalogService
from inventory_service.services.history_service import HistoryService
from inventory_service.services.movement_service import MovementService
from inventory_service.services.receipt_service import ReceiptService
from inventory_service.services.report_service import ReportService
from inventory_service.services.sale_service import SaleService

__all__ = [
    "CatalogService",
    "HistoryService",
    "MovementService",
    "ReceiptService",
    "ReportService",
    "SaleService",
]
