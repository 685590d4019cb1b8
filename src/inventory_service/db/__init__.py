"""Database utilities."""

from __future__ import annotations

from inventory_service.db.engine import Database, atomic

__all__ = ["Database", "atomic"]
