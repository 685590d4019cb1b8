"""Warehouse topology and product catalog administration."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import func, or_, select

from inventory_service.db import atomic
from inventory_service.db.filters import active_only
from inventory_service.exceptions import DuplicateKey, InvalidLineData, ReferentialConstraint
from inventory_service.logging import logger
from inventory_service.models import (
    Document,
    DocumentLine,
    History,
    Item,
    Manufacturer,
    Nomenclature,
    Shelf,
    Warehouse,
)
from inventory_service.services.base import BaseService


class CatalogService(BaseService):
    """Service for warehouses, shelves, manufacturers and nomenclature."""

    def _insert(self, entity, message: str, **context):
        self.session.add(entity)
        try:
            self.session.flush()
        except IntegrityError as exc:
            raise DuplicateKey(message, **context) from exc
        return entity

    def _exists(self, stmt) -> bool:
        return self.session.exec(stmt.limit(1)).first() is not None

    # Warehouses

    def create_warehouse(self, name: str, address: Optional[str] = None, is_active: bool = True) -> Warehouse:
        with atomic(self.session, "create warehouse"):
            if self._exists(select(Warehouse.id).where(Warehouse.name == name)):
                raise DuplicateKey("Warehouse name already exists", name=name)
            return self._insert(
                Warehouse(name=name, address=address, is_active=is_active),
                "Warehouse name already exists",
                name=name,
            )

    def list_warehouses(self, include_inactive: bool = False) -> List[Warehouse]:
        stmt = select(Warehouse).order_by(Warehouse.name)
        if not include_inactive:
            stmt = active_only(stmt, Warehouse)
        return list(self.session.exec(stmt))

    def deactivate_warehouse(self, warehouse_id: int) -> Warehouse:
        with atomic(self.session, "deactivate warehouse"):
            warehouse = self._get(Warehouse, warehouse_id)
            warehouse.is_active = False
            self.session.flush()
        return warehouse

    def delete_warehouse(self, warehouse_id: int) -> None:
        """Hard delete, allowed only while nothing references the warehouse."""

        with atomic(self.session, "delete warehouse"):
            warehouse = self._get(Warehouse, warehouse_id)
            if self._exists(select(Document.id).where(Document.warehouse_id == warehouse_id)):
                raise ReferentialConstraint(
                    "Warehouse is referenced by documents", warehouse_id=warehouse_id
                )
            for shelf in list(warehouse.shelves):
                self._ensure_shelf_unreferenced(shelf.id)
                self.session.delete(shelf)
            self.session.delete(warehouse)
        logger.info("Warehouse deleted", warehouse_id=warehouse_id)

    # Shelves

    def add_shelf(
        self,
        warehouse_id: int,
        code: str,
        description: Optional[str] = None,
        capacity: Optional[int] = None,
        is_active: bool = True,
    ) -> Shelf:
        with atomic(self.session, "add shelf"):
            self._get(Warehouse, warehouse_id)
            if capacity is not None and capacity < 0:
                raise InvalidLineData("capacity must not be negative", capacity=capacity)
            if self._exists(select(Shelf.id).where(Shelf.warehouse_id == warehouse_id, Shelf.code == code)):
                raise DuplicateKey("Shelf code already exists in warehouse", warehouse_id=warehouse_id, code=code)
            return self._insert(
                Shelf(
                    warehouse_id=warehouse_id,
                    code=code,
                    description=description,
                    capacity=capacity,
                    is_active=is_active,
                ),
                "Shelf code already exists in warehouse",
                warehouse_id=warehouse_id,
                code=code,
            )

    def list_shelves(self, warehouse_id: int, include_inactive: bool = False) -> List[Shelf]:
        stmt = select(Shelf).where(Shelf.warehouse_id == warehouse_id).order_by(Shelf.code)
        if not include_inactive:
            stmt = active_only(stmt, Shelf)
        return list(self.session.exec(stmt))

    def deactivate_shelf(self, shelf_id: int) -> Shelf:
        with atomic(self.session, "deactivate shelf"):
            shelf = self._get(Shelf, shelf_id)
            shelf.is_active = False
            self.session.flush()
        return shelf

    def _ensure_shelf_unreferenced(self, shelf_id: int) -> None:
        referenced = (
            self._exists(select(Item.id).where(Item.current_shelf_id == shelf_id))
            or self._exists(select(DocumentLine.id).where(DocumentLine.shelf_id == shelf_id))
            or self._exists(
                select(History.id).where(
                    or_(History.from_shelf_id == shelf_id, History.to_shelf_id == shelf_id)
                )
            )
        )
        if referenced:
            raise ReferentialConstraint("Shelf is referenced by stock or history", shelf_id=shelf_id)

    def delete_shelf(self, shelf_id: int) -> None:
        with atomic(self.session, "delete shelf"):
            shelf = self._get(Shelf, shelf_id)
            self._ensure_shelf_unreferenced(shelf_id)
            self.session.delete(shelf)

    # Manufacturers

    def create_manufacturer(
        self, name: str, country: Optional[str] = None, contact_info: Optional[str] = None
    ) -> Manufacturer:
        with atomic(self.session, "create manufacturer"):
            if self._exists(select(Manufacturer.id).where(Manufacturer.name == name)):
                raise DuplicateKey("Manufacturer name already exists", name=name)
            return self._insert(
                Manufacturer(name=name, country=country, contact_info=contact_info),
                "Manufacturer name already exists",
                name=name,
            )

    def delete_manufacturer(self, manufacturer_id: int) -> None:
        with atomic(self.session, "delete manufacturer"):
            manufacturer = self._get(Manufacturer, manufacturer_id)
            if self._exists(select(Nomenclature.id).where(Nomenclature.manufacturer_id == manufacturer_id)):
                raise ReferentialConstraint(
                    "Manufacturer is referenced by nomenclature", manufacturer_id=manufacturer_id
                )
            self.session.delete(manufacturer)

    # Nomenclature

    def create_nomenclature(
        self,
        article: str,
        name: str,
        unit: str = "шт",
        manufacturer_id: Optional[int] = None,
        min_stock_level: int = 0,
        description: Optional[str] = None,
    ) -> Nomenclature:
        with atomic(self.session, "create nomenclature"):
            if manufacturer_id is not None:
                self._get(Manufacturer, manufacturer_id)
            if min_stock_level < 0:
                raise InvalidLineData("min_stock_level must not be negative", article=article)
            if self.find_by_article(article) is not None:
                raise DuplicateKey("Article already exists", article=article)
            return self._insert(
                Nomenclature(
                    article=article,
                    name=name,
                    unit=unit,
                    manufacturer_id=manufacturer_id,
                    min_stock_level=min_stock_level,
                    description=description,
                ),
                "Article already exists",
                article=article,
            )

    def update_nomenclature(self, nomenclature_id: int, **changes) -> Nomenclature:
        """Edit a catalog entry; the article is fixed once created."""

        with atomic(self.session, "update nomenclature"):
            nomenclature = self._get(Nomenclature, nomenclature_id)
            if "article" in changes and changes["article"] != nomenclature.article:
                raise InvalidLineData("Article cannot be changed", article=nomenclature.article)
            if changes.get("manufacturer_id") is not None:
                self._get(Manufacturer, changes["manufacturer_id"])
            for field in ("name", "unit", "manufacturer_id", "min_stock_level", "description"):
                if field in changes:
                    setattr(nomenclature, field, changes[field])
            self.session.flush()
        return nomenclature

    def find_by_article(self, article: str) -> Optional[Nomenclature]:
        return self.session.exec(select(Nomenclature).where(Nomenclature.article == article)).first()

    def search_nomenclature(self, term: str) -> List[Nomenclature]:
        stmt = (
            select(Nomenclature)
            .where(func.lower(Nomenclature.name).contains(term.lower()))
            .order_by(Nomenclature.name)
        )
        return list(self.session.exec(stmt))

    def list_nomenclature(self) -> List[Nomenclature]:
        return list(self.session.exec(select(Nomenclature).order_by(Nomenclature.name)))

    def delete_nomenclature(self, nomenclature_id: int) -> None:
        with atomic(self.session, "delete nomenclature"):
            nomenclature = self._get(Nomenclature, nomenclature_id)
            if self._exists(select(Item.id).where(Item.nomenclature_id == nomenclature_id)) or self._exists(
                select(DocumentLine.id).where(DocumentLine.nomenclature_id == nomenclature_id)
            ):
                raise ReferentialConstraint(
                    "Nomenclature is referenced by items or documents", nomenclature_id=nomenclature_id
                )
            self.session.delete(nomenclature)
