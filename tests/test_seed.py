from __future__ import annotations

from sqlmodel import select

from inventory_service.models import Document, DocumentStatus, Item, Shelf, Warehouse
from inventory_service.seed import DEMO_RECEIPT_NUMBER, seed_demo_data
from inventory_service.services import ReportService


def test_seed_creates_stocked_catalog(session):
    assert seed_demo_data(session) is True

    assert len(session.exec(select(Warehouse)).all()) == 2
    assert len(session.exec(select(Shelf)).all()) == 3
    assert len(session.exec(select(Item)).all()) == 4

    receipt = session.exec(select(Document).where(Document.document_number == DEMO_RECEIPT_NUMBER)).one()
    assert receipt.status == DocumentStatus.CONFIRMED
    assert receipt.confirmed_by == "system"

    stock = {row.article: row.quantity for row in ReportService(session).stock_by_nomenclature()}
    assert stock["CASE-UNI"] == 50
    assert stock["CHG-20W"] == 0


def test_seed_is_skipped_when_data_exists(session, ledger):
    assert seed_demo_data(session) is False
    assert session.exec(select(Document)).all() == []
