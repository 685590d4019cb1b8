"""Closed status and type enumerations of the stock ledger."""

from __future__ import annotations

from enum import Enum


class DocumentType(str, Enum):
    RECEIPT = "RECEIPT"
    SALE = "SALE"
    MOVEMENT = "MOVEMENT"
    WRITE_OFF = "WRITE_OFF"
    INVENTORY = "INVENTORY"

    @property
    def display_name(self) -> str:
        return _DOCUMENT_TYPE_NAMES[self]


class DocumentStatus(str, Enum):
    DRAFT = "DRAFT"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"

    @property
    def display_name(self) -> str:
        return _DOCUMENT_STATUS_NAMES[self]


class ItemStatus(str, Enum):
    IN_STOCK = "IN_STOCK"
    SOLD = "SOLD"
    RESERVED = "RESERVED"
    DAMAGED = "DAMAGED"
    EXPIRED = "EXPIRED"
    RETURNED = "RETURNED"

    @property
    def display_name(self) -> str:
        return _ITEM_STATUS_NAMES[self]


class OperationType(str, Enum):
    RECEIPT = "RECEIPT"
    SALE = "SALE"
    MOVEMENT = "MOVEMENT"
    WRITE_OFF = "WRITE_OFF"
    STATUS_CHANGE = "STATUS_CHANGE"
    INVENTORY = "INVENTORY"
    RETURN = "RETURN"

    @property
    def display_name(self) -> str:
        return _OPERATION_TYPE_NAMES[self]


_DOCUMENT_TYPE_NAMES = {
    DocumentType.RECEIPT: "Поступление",
    DocumentType.SALE: "Реализация",
    DocumentType.MOVEMENT: "Перемещение",
    DocumentType.WRITE_OFF: "Списание",
    DocumentType.INVENTORY: "Инвентаризация",
}

_DOCUMENT_STATUS_NAMES = {
    DocumentStatus.DRAFT: "Черновик",
    DocumentStatus.CONFIRMED: "Проведён",
    DocumentStatus.CANCELLED: "Отменён",
}

_ITEM_STATUS_NAMES = {
    ItemStatus.IN_STOCK: "На складе",
    ItemStatus.SOLD: "Продано",
    ItemStatus.RESERVED: "Зарезервировано",
    ItemStatus.DAMAGED: "Повреждено",
    ItemStatus.EXPIRED: "Просрочено",
    ItemStatus.RETURNED: "Возвращено",
}

_OPERATION_TYPE_NAMES = {
    OperationType.RECEIPT: "Поступление",
    OperationType.SALE: "Продажа",
    OperationType.MOVEMENT: "Перемещение",
    OperationType.WRITE_OFF: "Списание",
    OperationType.STATUS_CHANGE: "Изменение статуса",
    OperationType.INVENTORY: "Инвентаризация",
    OperationType.RETURN: "Возврат",
}
