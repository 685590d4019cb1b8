"""Database models for the store inventory service."""

from inventory_service.models.enums import DocumentStatus, DocumentType, ItemStatus, OperationType
from inventory_service.models.inventory import (
    Document,
    DocumentLine,
    History,
    Item,
    Manufacturer,
    Nomenclature,
    Shelf,
    Warehouse,
    metadata,
)

__all__ = [
    "Document",
    "DocumentLine",
    "DocumentStatus",
    "DocumentType",
    "History",
    "Item",
    "ItemStatus",
    "Manufacturer",
    "Nomenclature",
    "OperationType",
    "Shelf",
    "Warehouse",
    "metadata",
]
