from __future__ import annotations

from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest

from inventory_service.config import get_settings
from inventory_service.db import Database
from inventory_service.schemas import ReceiptLineData
from inventory_service.services import CatalogService, ReceiptService


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def database():
    db = Database.from_url("sqlite://")
    db.init_schema()
    yield db
    db.dispose()


@pytest.fixture
def file_database(tmp_path):
    """Store on disk so that every session gets its own connection and transaction."""
    db = Database.from_url(f"sqlite:///{tmp_path / 'inventory.db'}")
    db.init_schema()
    yield db
    db.dispose()


@pytest.fixture
def stocked_store(file_database):
    """One 100-unit item on shelf S1 of a fresh on-disk store."""

    with file_database.session() as session:
        catalog = CatalogService(session)
        warehouse = catalog.create_warehouse("Склад W")
        s1 = catalog.add_shelf(warehouse.id, "S1")
        s2 = catalog.add_shelf(warehouse.id, "S2")
        nomenclature = catalog.create_nomenclature("ART-1", "Widget")
        receipt = ReceiptService(session).receive(
            "ПС-001",
            date.today(),
            warehouse.id,
            None,
            [
                ReceiptLineData(
                    nomenclature_id=nomenclature.id,
                    quantity=Decimal("100"),
                    purchase_price=Decimal("150"),
                    shelf_id=s1.id,
                )
            ],
            "tester",
        )
        return SimpleNamespace(
            warehouse_id=warehouse.id,
            s1=s1.id,
            s2=s2.id,
            item_id=receipt.lines[0].item_id,
        )


@pytest.fixture
def session(database):
    with database.session() as session:
        yield session


@pytest.fixture
def catalog(session):
    return CatalogService(session)


@pytest.fixture
def ledger(catalog):
    warehouse = catalog.create_warehouse("Склад W", "г. Москва")
    other = catalog.create_warehouse("Склад №2")
    return SimpleNamespace(
        warehouse=warehouse,
        other_warehouse=other,
        s1=catalog.add_shelf(warehouse.id, "S1", capacity=100),
        s2=catalog.add_shelf(warehouse.id, "S2", capacity=100),
        remote=catalog.add_shelf(other.id, "R1"),
        nomenclature=catalog.create_nomenclature("ART-1", "Widget", min_stock_level=10),
        spare=catalog.create_nomenclature("ART-2", "Gadget", min_stock_level=0),
    )


@pytest.fixture
def receive(session, ledger):
    """Confirm a one-line receipt and return the id of the created item."""

    counter = iter(range(1, 1000))

    def _receive(quantity="100", price="150", shelf=None, nomenclature=None, number=None, **line):
        document = ReceiptService(session).receive(
            number or f"AUTO-{next(counter):03d}",
            date.today(),
            ledger.warehouse.id,
            "ООО Поставщик",
            [
                ReceiptLineData(
                    nomenclature_id=(nomenclature or ledger.nomenclature).id,
                    quantity=Decimal(quantity),
                    purchase_price=Decimal(price),
                    shelf_id=(shelf or ledger.s1).id,
                    **line,
                )
            ],
            "tester",
        )
        return document.lines[0].item_id

    return _receive
