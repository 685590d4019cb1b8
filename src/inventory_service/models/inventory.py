"""Stock ledger, document and history tables."""

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

from sqlalchemy import Column, DateTime, Integer, UniqueConstraint, func
from sqlmodel import Field, Relationship, SQLModel

from inventory_service.models.enums import DocumentStatus, DocumentType, ItemStatus, OperationType

ZERO = Decimal("0")
CENT = Decimal("0.01")


def created_at_field() -> Field:
    """Generate created_at timestamp field."""
    return Field(
        sa_column=Column(
            DateTime(timezone=True),
            nullable=False,
            server_default=func.now(),
        ),
    )


def updated_at_field() -> Field:
    """Generate updated_at timestamp field with auto-update."""
    return Field(
        sa_column=Column(
            DateTime(timezone=True),
            nullable=False,
            server_default=func.now(),
            onupdate=func.now(),
        ),
    )


def quantity_field(default: Optional[Decimal] = ZERO, **kwargs) -> Field:
    return Field(default=default, max_digits=12, decimal_places=3, **kwargs)


def money_field(default: Optional[Decimal] = ZERO, **kwargs) -> Field:
    return Field(default=default, max_digits=14, decimal_places=2, **kwargs)


# 1. Warehouse topology

class Warehouse(SQLModel, table=True):
    """Physical warehouse owning a set of shelves."""

    __tablename__ = "warehouse"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(unique=True, index=True)
    address: Optional[str] = None
    is_active: bool = Field(default=True)
    created_at: datetime = created_at_field()

    shelves: List["Shelf"] = Relationship(
        back_populates="warehouse",
        sa_relationship_kwargs={"order_by": "Shelf.code"},
    )


class Shelf(SQLModel, table=True):
    """Storage slot within a warehouse."""

    __tablename__ = "shelf"
    __table_args__ = (
        UniqueConstraint("warehouse_id", "code", name="uq_shelf_warehouse_code"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    warehouse_id: int = Field(foreign_key="warehouse.id", index=True)
    code: str
    description: Optional[str] = None
    capacity: Optional[int] = None
    is_active: bool = Field(default=True)
    created_at: datetime = created_at_field()

    warehouse: Optional[Warehouse] = Relationship(back_populates="shelves")

    @property
    def full_address(self) -> str:
        warehouse_name = self.warehouse.name if self.warehouse else "?"
        return f"{warehouse_name} / {self.code}"


# 2. Catalog

class Manufacturer(SQLModel, table=True):
    __tablename__ = "manufacturer"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(unique=True, index=True)
    country: Optional[str] = None
    contact_info: Optional[str] = None
    created_at: datetime = created_at_field()
    updated_at: datetime = updated_at_field()


class Nomenclature(SQLModel, table=True):
    """Catalog entry (SKU); carries no quantity or price."""

    __tablename__ = "nomenclature"

    id: Optional[int] = Field(default=None, primary_key=True)
    article: str = Field(unique=True, index=True)
    name: str = Field(index=True)
    description: Optional[str] = None
    unit: str = Field(default="шт")
    manufacturer_id: Optional[int] = Field(default=None, foreign_key="manufacturer.id")
    min_stock_level: int = Field(default=0, ge=0)
    created_at: datetime = created_at_field()
    updated_at: datetime = updated_at_field()


# 3. Stock

# Bumped on every UPDATE; a write based on a stale read matches no row.
_item_version = Column("version_id", Integer, nullable=False)


class Item(SQLModel, table=True):
    """Physical batch of a nomenclature with its own quantity, place and status."""

    __tablename__ = "item"
    __mapper_args__ = {"version_id_col": _item_version}

    id: Optional[int] = Field(default=None, primary_key=True)
    nomenclature_id: int = Field(foreign_key="nomenclature.id", index=True)
    batch_number: Optional[str] = Field(default=None, index=True)
    serial_number: Optional[str] = None
    quantity: Decimal = quantity_field()
    purchase_price: Optional[Decimal] = money_field(default=None)
    selling_price: Optional[Decimal] = money_field(default=None)
    current_shelf_id: Optional[int] = Field(default=None, foreign_key="shelf.id", index=True)
    status: ItemStatus = Field(default=ItemStatus.IN_STOCK, index=True)
    manufacture_date: Optional[date] = None
    expiry_date: Optional[date] = Field(default=None, index=True)
    removed_at: Optional[datetime] = Field(default=None, index=True)
    removed_by: Optional[str] = None
    created_at: datetime = created_at_field()
    updated_at: datetime = updated_at_field()
    version_id: Optional[int] = Field(default=None, sa_column=_item_version)

    def is_expired(self, today: Optional[date] = None) -> bool:
        today = today or date.today()
        return self.expiry_date is not None and today > self.expiry_date

    @property
    def total_value(self) -> Decimal:
        if self.selling_price is None or self.quantity is None:
            return ZERO
        return self.selling_price * self.quantity

    @property
    def total_purchase_cost(self) -> Decimal:
        if self.purchase_price is None or self.quantity is None:
            return ZERO
        return self.purchase_price * self.quantity


# 4. Documents

class Document(SQLModel, table=True):
    """Receipt, sale or movement document with its ordered lines."""

    __tablename__ = "document"

    id: Optional[int] = Field(default=None, primary_key=True)
    document_type: DocumentType = Field(index=True)
    document_number: str = Field(unique=True, index=True)
    document_date: date = Field(index=True)
    warehouse_id: int = Field(foreign_key="warehouse.id", index=True)
    counterparty: Optional[str] = None
    total_amount: Decimal = money_field()
    status: DocumentStatus = Field(default=DocumentStatus.DRAFT, index=True)
    notes: Optional[str] = None
    created_by: Optional[str] = None
    confirmed_by: Optional[str] = None
    confirmed_at: Optional[datetime] = None
    created_at: datetime = created_at_field()
    updated_at: datetime = updated_at_field()

    lines: List["DocumentLine"] = Relationship(
        back_populates="document",
        sa_relationship_kwargs={
            "cascade": "all, delete-orphan",
            "order_by": "DocumentLine.id",
        },
    )

    def recalculate_total(self) -> Decimal:
        self.total_amount = sum((line.total for line in self.lines), ZERO)
        return self.total_amount


class DocumentLine(SQLModel, table=True):
    __tablename__ = "document_line"

    id: Optional[int] = Field(default=None, primary_key=True)
    document_id: int = Field(foreign_key="document.id", index=True, ondelete="CASCADE")
    nomenclature_id: int = Field(foreign_key="nomenclature.id")
    item_id: Optional[int] = Field(default=None, foreign_key="item.id", index=True)
    quantity: Decimal = quantity_field()
    price: Decimal = money_field()
    total: Decimal = money_field()
    shelf_id: Optional[int] = Field(default=None, foreign_key="shelf.id")
    # Receipt-only attributes copied onto the item created at confirmation.
    selling_price: Optional[Decimal] = money_field(default=None)
    batch_number: Optional[str] = None
    serial_number: Optional[str] = None
    manufacture_date: Optional[date] = None
    expiry_date: Optional[date] = None
    created_at: datetime = created_at_field()

    document: Optional[Document] = Relationship(back_populates="lines")

    def recalculate_total(self) -> Decimal:
        self.total = ((self.quantity or ZERO) * (self.price or ZERO)).quantize(CENT, rounding=ROUND_HALF_UP)
        return self.total


# 5. Audit

class History(SQLModel, table=True):
    """Append-only ledger entry for one stock-affecting event."""

    __tablename__ = "history"

    id: Optional[int] = Field(default=None, primary_key=True)
    item_id: int = Field(foreign_key="item.id", index=True)
    document_id: Optional[int] = Field(default=None, foreign_key="document.id", index=True)
    operation_type: OperationType = Field(index=True)
    quantity_change: Optional[Decimal] = quantity_field(default=None)
    price: Optional[Decimal] = money_field(default=None)
    from_shelf_id: Optional[int] = Field(default=None, foreign_key="shelf.id")
    to_shelf_id: Optional[int] = Field(default=None, foreign_key="shelf.id")
    from_status: Optional[ItemStatus] = None
    to_status: Optional[ItemStatus] = None
    operation_date: datetime = Field(default_factory=datetime.now, index=True)
    created_by: Optional[str] = None
    notes: Optional[str] = None


metadata = SQLModel.metadata

__all__ = [
    "Document",
    "DocumentLine",
    "History",
    "Item",
    "Manufacturer",
    "Nomenclature",
    "Shelf",
    "Warehouse",
    "metadata",
]
