"""Error kinds raised by the stock workflow."""

from __future__ import annotations

from typing import Any


class InventoryError(Exception):
    """Base class for every business rule violation of the inventory core.

    ``context`` carries identifiers (document number, item id, ...) that a
    caller needs to show or log the failure.
    """

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{key}={value}" for key, value in self.context.items())
        return f"{self.message} ({details})"


class NotFound(InventoryError):
    """Referenced entity id does not resolve."""


class DuplicateKey(InventoryError):
    """Business key uniqueness violation."""


class DuplicateDocumentNumber(DuplicateKey):
    pass


class InvalidDocumentType(InventoryError):
    pass


class InvalidDocumentState(InventoryError):
    pass


class EmptyDocument(InventoryError):
    pass


class InvalidLineData(InventoryError):
    """Line quantity or price outside the allowed range."""


class ItemUnavailable(InventoryError):
    pass


class InsufficientStock(InventoryError):
    pass


class NoCurrentLocation(InventoryError):
    pass


class SameLocation(InventoryError):
    pass


class ItemAlreadyDisposed(InventoryError):
    pass


class ConcurrentModification(InventoryError):
    """Row changed by another transaction between read and write."""


class ReferentialConstraint(InventoryError):
    """Deletion attempted against a row that other rows still reference."""


class HistoryImmutable(InventoryError):
    """History rows are append-only."""


__all__ = [
    "ConcurrentModification",
    "DuplicateDocumentNumber",
    "DuplicateKey",
    "EmptyDocument",
    "HistoryImmutable",
    "InsufficientStock",
    "InvalidDocumentState",
    "InvalidDocumentType",
    "InvalidLineData",
    "InventoryError",
    "ItemAlreadyDisposed",
    "ItemUnavailable",
    "NoCurrentLocation",
    "NotFound",
    "ReferentialConstraint",
    "SameLocation",
]
