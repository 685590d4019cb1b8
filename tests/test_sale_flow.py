from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from sqlmodel import select

from inventory_service.exceptions import (
    ConcurrentModification,
    InsufficientStock,
    InvalidLineData,
    ItemUnavailable,
)
from inventory_service.models import Document, DocumentStatus, History, Item, ItemStatus, OperationType
from inventory_service.schemas import SaleLineData
from inventory_service.services import HistoryService, SaleService


@pytest.fixture
def sales(session):
    return SaleService(session)


def sale_draft(sales, ledger, number):
    return sales.create_draft(number, date.today(), ledger.warehouse.id, "Покупатель", "cashier")


def test_partial_sale_keeps_item_in_stock(session, sales, ledger, receive):
    item_id = receive(quantity="100")
    document = sale_draft(sales, ledger, "РН-001")
    line = sales.add_line(document.id, item_id, Decimal("30"))

    sales.confirm(document.id, "cashier")

    item = session.get(Item, item_id)
    assert item.quantity == Decimal("70")
    assert item.status == ItemStatus.IN_STOCK
    # Price defaults to the item's selling price.
    assert line.price == Decimal("150")

    sale_rows = HistoryService(session).by_operation_type(OperationType.SALE)
    assert len(sale_rows) == 1
    assert sale_rows[0].quantity_change == Decimal("-30")
    assert sale_rows[0].from_shelf_id == ledger.s1.id
    assert sale_rows[0].to_status == ItemStatus.IN_STOCK


def test_selling_remainder_marks_item_sold(session, sales, ledger, receive):
    item_id = receive(quantity="100")
    for number, quantity in (("РН-001", "30"), ("РН-002", "40"), ("РН-003", "30")):
        document = sale_draft(sales, ledger, number)
        sales.add_line(document.id, item_id, Decimal(quantity))
        sales.confirm(document.id, "cashier")

    item = session.get(Item, item_id)
    assert item.quantity == 0
    assert item.status == ItemStatus.SOLD

    history = HistoryService(session)
    assert history.reconstruct_quantity(item_id) == 0
    assert history.for_item(item_id)[0].to_status == ItemStatus.SOLD


def test_oversell_rejected_at_add(session, sales, ledger, receive):
    item_id = receive(quantity="70")
    document = sale_draft(sales, ledger, "РН-001")

    with pytest.raises(InsufficientStock):
        sales.add_line(document.id, item_id, Decimal("200"))

    assert session.get(Item, item_id).quantity == Decimal("70")
    assert sales.get_document(document.id).lines == []


def test_confirm_rechecks_stock_sold_in_between(session, sales, ledger, receive):
    item_id = receive(quantity="100")
    first = sale_draft(sales, ledger, "РН-001")
    second = sale_draft(sales, ledger, "РН-002")
    sales.add_line(first.id, item_id, Decimal("60"))
    sales.add_line(second.id, item_id, Decimal("60"))

    sales.confirm(first.id, "cashier")
    with pytest.raises(InsufficientStock):
        sales.confirm(second.id, "cashier")

    assert session.get(Item, item_id).quantity == Decimal("40")
    assert sales.get_document(second.id).status == DocumentStatus.DRAFT
    assert len(HistoryService(session).by_operation_type(OperationType.SALE)) == 1


def test_failed_confirm_changes_nothing(session, sales, ledger, receive):
    plenty = receive(quantity="10")
    scarce = receive(quantity="5")
    document = sale_draft(sales, ledger, "РН-001")
    sales.add_line(document.id, plenty, Decimal("5"))
    sales.add_line(document.id, scarce, Decimal("5"))
    sales.sell("РН-002", date.today(), ledger.warehouse.id, None, [SaleLineData(item_id=scarce, quantity=Decimal("3"))], "cashier")

    with pytest.raises(InsufficientStock):
        sales.confirm(document.id, "cashier")

    assert session.get(Item, plenty).quantity == Decimal("10")
    assert session.get(Item, scarce).quantity == Decimal("2")
    assert HistoryService(session).for_item(plenty)[0].operation_type == OperationType.RECEIPT
    assert sales.get_document(document.id).status == DocumentStatus.DRAFT


def test_same_item_on_two_lines_is_checked_in_total(session, sales, ledger, receive):
    item_id = receive(quantity="10")
    document = sale_draft(sales, ledger, "РН-001")
    sales.add_line(document.id, item_id, Decimal("6"))
    sales.add_line(document.id, item_id, Decimal("6"))

    with pytest.raises(InsufficientStock):
        sales.confirm(document.id, "cashier")

    assert session.get(Item, item_id).quantity == Decimal("10")


def test_same_item_on_two_lines_sells_out(session, sales, ledger, receive):
    item_id = receive(quantity="10")
    document = sale_draft(sales, ledger, "РН-001")
    sales.add_line(document.id, item_id, Decimal("4"))
    sales.add_line(document.id, item_id, Decimal("6"), selling_price=Decimal("200"))

    confirmed = sales.confirm(document.id, "cashier")

    item = session.get(Item, item_id)
    assert item.status == ItemStatus.SOLD
    assert confirmed.total_amount == Decimal("1800")
    assert len(HistoryService(session).for_document(document.id)) == 2


def test_sold_item_is_unavailable(session, sales, ledger, receive):
    item_id = receive(quantity="5")
    sales.sell("РН-001", date.today(), ledger.warehouse.id, None, [SaleLineData(item_id=item_id, quantity=Decimal("5"))], "cashier")
    document = sale_draft(sales, ledger, "РН-002")

    with pytest.raises(ItemUnavailable):
        sales.add_line(document.id, item_id, Decimal("1"))


def test_non_positive_sale_quantity_rejected(sales, ledger, receive):
    item_id = receive(quantity="5")
    document = sale_draft(sales, ledger, "РН-001")

    with pytest.raises(InvalidLineData):
        sales.add_line(document.id, item_id, Decimal("0"))


def test_failed_sell_rolls_back_draft(session, sales, ledger, receive):
    item_id = receive(quantity="5")

    with pytest.raises(InsufficientStock):
        sales.sell(
            "РН-001",
            date.today(),
            ledger.warehouse.id,
            None,
            [
                SaleLineData(item_id=item_id, quantity=Decimal("3")),
                SaleLineData(item_id=item_id, quantity=Decimal("3")),
            ],
            "cashier",
        )

    assert session.exec(select(Document).where(Document.document_number == "РН-001")).first() is None
    assert session.get(Item, item_id).quantity == Decimal("5")
    assert session.exec(select(History).where(History.operation_type == OperationType.SALE)).all() == []


def test_available_items_oldest_first(sales, ledger, receive):
    first = receive(quantity="5")
    second = receive(quantity="7", shelf=ledger.s2)
    receive(quantity="3", nomenclature=ledger.spare)
    sold = receive(quantity="2")
    sales.sell("РН-001", date.today(), ledger.warehouse.id, None, [SaleLineData(item_id=sold, quantity=Decimal("2"))], "cashier")

    available = sales.available_items(ledger.nomenclature.id)

    assert [item.id for item in available] == [first, second]
    assert sales.available_items(ledger.nomenclature.id, ledger.other_warehouse.id) == []
    assert sales.available_quantity(ledger.nomenclature.id) == Decimal("12")
    assert sales.available_quantity(ledger.spare.id) == Decimal("3")


def test_receipt_and_sale_bump_item_version(session, sales, ledger, receive):
    item_id = receive(quantity="10")
    assert session.get(Item, item_id).version_id == 1

    sales.sell("РН-001", date.today(), ledger.warehouse.id, None, [SaleLineData(item_id=item_id, quantity=Decimal("1"))], "cashier")

    assert session.get(Item, item_id).version_id == 2


def test_concurrent_confirmations_cannot_oversell(file_database, stocked_store, monkeypatch):
    with file_database.session() as setup:
        drafts = SaleService(setup)
        first_id = sale_draft_id(drafts, stocked_store, "РН-001")
        second_id = sale_draft_id(drafts, stocked_store, "РН-002")

    with file_database.session() as session_a, file_database.session() as session_b:
        first = SaleService(session_a)
        second = SaleService(session_b)
        check = first._check_sellable
        calls = []

        def check_then_other_confirms(document, item, quantity):
            check(document, item, quantity)
            calls.append(item.id)
            # The second call sits between the locked re-read and the write.
            if len(calls) == 2:
                second.confirm(second_id, "cashier-b")

        monkeypatch.setattr(first, "_check_sellable", check_then_other_confirms)

        with pytest.raises(ConcurrentModification):
            first.confirm(first_id, "cashier-a")

    with file_database.session() as session:
        sales = SaleService(session)
        item = session.get(Item, stocked_store.item_id)
        assert item.quantity == Decimal("40")
        assert HistoryService(session).reconstruct_quantity(item.id) == item.quantity
        assert len(HistoryService(session).by_operation_type(OperationType.SALE)) == 1
        assert sales.get_document(first_id).status == DocumentStatus.DRAFT
        assert sales.get_document(second_id).status == DocumentStatus.CONFIRMED

        with pytest.raises(InsufficientStock):
            sales.confirm(first_id, "cashier-a")


def sale_draft_id(sales, store, number):
    document = sales.create_draft(number, date.today(), store.warehouse_id, None, "cashier")
    sales.add_line(document.id, store.item_id, Decimal("60"))
    return document.id
