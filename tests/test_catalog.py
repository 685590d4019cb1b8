from __future__ import annotations

from datetime import date

import pytest

from inventory_service.exceptions import DuplicateKey, InvalidLineData, NotFound, ReferentialConstraint
from inventory_service.services import ReceiptService


def test_warehouse_names_are_unique(catalog, ledger):
    with pytest.raises(DuplicateKey):
        catalog.create_warehouse("Склад W")


def test_shelf_code_unique_per_warehouse(catalog, ledger):
    with pytest.raises(DuplicateKey):
        catalog.add_shelf(ledger.warehouse.id, "S1")

    shelf = catalog.add_shelf(ledger.other_warehouse.id, "S1")
    assert shelf.full_address == "Склад №2 / S1"


def test_shelf_requires_existing_warehouse(catalog):
    with pytest.raises(NotFound):
        catalog.add_shelf(9999, "X-01")


def test_inactive_rows_hidden_from_listings(catalog, ledger):
    catalog.deactivate_shelf(ledger.s2.id)
    catalog.deactivate_warehouse(ledger.other_warehouse.id)

    assert [shelf.code for shelf in catalog.list_shelves(ledger.warehouse.id)] == ["S1"]
    assert len(catalog.list_shelves(ledger.warehouse.id, include_inactive=True)) == 2
    assert [w.name for w in catalog.list_warehouses()] == ["Склад W"]
    assert len(catalog.list_warehouses(include_inactive=True)) == 2


def test_article_is_unique_and_immutable(catalog, ledger):
    with pytest.raises(DuplicateKey):
        catalog.create_nomenclature("ART-1", "Другой")

    with pytest.raises(InvalidLineData):
        catalog.update_nomenclature(ledger.nomenclature.id, article="ART-9")

    updated = catalog.update_nomenclature(ledger.nomenclature.id, name="Widget XL", min_stock_level=3)
    assert updated.name == "Widget XL"
    assert updated.min_stock_level == 3
    assert catalog.find_by_article("ART-1").id == ledger.nomenclature.id


def test_nomenclature_search_and_listing(catalog, ledger):
    assert [n.article for n in catalog.search_nomenclature("widg")] == ["ART-1"]
    assert [n.name for n in catalog.list_nomenclature()] == ["Gadget", "Widget"]
    assert catalog.find_by_article("NOPE") is None


def test_manufacturer_link(catalog):
    maker = catalog.create_manufacturer("Acme", "США")
    nomenclature = catalog.create_nomenclature("ACME-1", "Anvil", manufacturer_id=maker.id)

    assert nomenclature.manufacturer_id == maker.id
    with pytest.raises(DuplicateKey):
        catalog.create_manufacturer("Acme")
    with pytest.raises(ReferentialConstraint):
        catalog.delete_manufacturer(maker.id)

    catalog.delete_nomenclature(nomenclature.id)
    catalog.delete_manufacturer(maker.id)


def test_unknown_manufacturer_rejected(catalog):
    with pytest.raises(NotFound):
        catalog.create_nomenclature("X-1", "Ghost", manufacturer_id=9999)


def test_referenced_rows_cannot_be_deleted(session, catalog, ledger, receive):
    receive()

    with pytest.raises(ReferentialConstraint):
        catalog.delete_shelf(ledger.s1.id)
    with pytest.raises(ReferentialConstraint):
        catalog.delete_nomenclature(ledger.nomenclature.id)
    with pytest.raises(ReferentialConstraint):
        catalog.delete_warehouse(ledger.warehouse.id)

    catalog.delete_shelf(ledger.s2.id)
    assert [shelf.code for shelf in catalog.list_shelves(ledger.warehouse.id)] == ["S1"]


def test_unreferenced_warehouse_deleted_with_shelves(catalog, ledger):
    catalog.delete_warehouse(ledger.other_warehouse.id)

    assert [w.name for w in catalog.list_warehouses(include_inactive=True)] == ["Склад W"]


def test_warehouse_with_draft_documents_is_kept(session, catalog, ledger):
    ReceiptService(session).create_draft("ПС-001", date.today(), ledger.other_warehouse.id, None, "tester")

    with pytest.raises(ReferentialConstraint):
        catalog.delete_warehouse(ledger.other_warehouse.id)
