"""Demo data for a fresh store database."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from sqlmodel import Session, select

from inventory_service.db import atomic
from inventory_service.logging import logger
from inventory_service.models import Warehouse
from inventory_service.schemas import ReceiptLineData
from inventory_service.services import CatalogService, ReceiptService

DEMO_RECEIPT_NUMBER = "ПС-DEMO-001"


def seed_demo_data(session: Session, operator: str = "system") -> bool:
    """Create a demo catalog and stock it through one confirmed receipt.

    Returns False without touching anything when a warehouse already exists.
    """

    if session.exec(select(Warehouse.id)).first() is not None:
        logger.info("Demo data already exists, skipping")
        return False

    catalog = CatalogService(session)
    receipts = ReceiptService(session)
    today = date.today()

    with atomic(session, "seed demo data"):
        samsung = catalog.create_manufacturer("Samsung", "Южная Корея", "info@samsung.com")
        apple = catalog.create_manufacturer("Apple", "США", "info@apple.com")
        xiaomi = catalog.create_manufacturer("Xiaomi", "Китай", "info@xiaomi.com")

        main = catalog.create_warehouse("Основной склад", "г. Москва, ул. Складская, д. 1")
        catalog.create_warehouse("Склад №2", "г. Москва, ул. Промышленная, д. 15")
        shelves = {
            code: catalog.add_shelf(main.id, code, description, capacity)
            for code, description, capacity in (
                ("A-01", "Стеллаж A, полка 1", 100),
                ("A-02", "Стеллаж A, полка 2", 100),
                ("B-01", "Стеллаж B, полка 1", 50),
            )
        }

        galaxy = catalog.create_nomenclature("SM-G991B", "Samsung Galaxy S21", "шт", samsung.id, 5)
        iphone = catalog.create_nomenclature("IPH13-128", "Apple iPhone 13 128GB", "шт", apple.id, 3)
        redmi = catalog.create_nomenclature("MI11-256", "Xiaomi Mi 11 256GB", "шт", xiaomi.id, 5)
        cases = catalog.create_nomenclature("CASE-UNI", "Чехол универсальный", "шт", None, 20)
        catalog.create_nomenclature("CHG-20W", "Зарядное устройство 20W", "шт", None, 10)

        lines = [
            ReceiptLineData(
                nomenclature_id=galaxy.id, quantity=Decimal("10"), purchase_price=Decimal("45000.00"),
                selling_price=Decimal("59990.00"), shelf_id=shelves["A-01"].id, batch_number="BATCH-2024-001",
                manufacture_date=today - timedelta(days=90),
            ),
            ReceiptLineData(
                nomenclature_id=iphone.id, quantity=Decimal("7"), purchase_price=Decimal("65000.00"),
                selling_price=Decimal("79990.00"), shelf_id=shelves["A-02"].id, batch_number="BATCH-2024-003",
                manufacture_date=today - timedelta(days=60),
            ),
            ReceiptLineData(
                nomenclature_id=redmi.id, quantity=Decimal("15"), purchase_price=Decimal("35000.00"),
                selling_price=Decimal("49990.00"), shelf_id=shelves["A-02"].id, batch_number="BATCH-2024-005",
            ),
            ReceiptLineData(
                nomenclature_id=cases.id, quantity=Decimal("50"), purchase_price=Decimal("150.00"),
                selling_price=Decimal("299.00"), shelf_id=shelves["B-01"].id, batch_number="BATCH-2024-009",
                expiry_date=today + timedelta(days=365),
            ),
        ]
        receipts.receive(DEMO_RECEIPT_NUMBER, today, main.id, "ООО Поставщик", lines, operator)

    logger.info("Demo data created", receipt=DEMO_RECEIPT_NUMBER)
    return True
