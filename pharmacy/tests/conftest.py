"""Shared test fixtures.

Every test gets a fresh in-memory SQLite database, so tests never pollute
each other or a real database.
"""

from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import date
from decimal import Decimal
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from pharmacy.app.core.database import Base, get_db
from pharmacy.app.main import app
from pharmacy.app.models.invoice import Invoice, InvoiceItem
from pharmacy.app.models.stock import StockItem
from pharmacy.app.models.supplier import (
    PaymentStatus,
    POStatus,
    PurchaseOrder,
    PurchaseOrderItem,
    Supplier,
)


# ─── DB session on a throwaway in-memory database ────────────────────────────


@pytest.fixture()
def db() -> Generator[Session, None, None]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine, autoflush=False)()

    yield session

    session.close()
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture()
def client(db: Session) -> Generator[TestClient, None, None]:
    """FastAPI TestClient wired to the test session."""

    def _override_get_db() -> Generator[Session, None, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ─── Stock fixtures ──────────────────────────────────────────────────────────


@pytest.fixture()
def paracetamol(db: Session) -> StockItem:
    item = StockItem(
        name="Paracetamol 500mg",
        category="Tablet",
        batch_no="B-TAB-01",
        expiry_date=date(2024, 7, 1),
        current_stock=50,
        unit_price=Decimal("1.20"),
        mrp=Decimal("1.50"),
        supplier="Gulf Medical Supplies",
    )
    db.add(item)
    db.flush()
    return item


@pytest.fixture()
def syrup(db: Session) -> StockItem:
    item = StockItem(
        name="Cough Syrup",
        category="Syrup",
        batch_no="B-SYR-01",
        expiry_date=date(2024, 5, 20),
        current_stock=75,
        unit_price=Decimal("50.00"),
        mrp=None,
        supplier="Nile Pharma",
    )
    db.add(item)
    db.flush()
    return item


# ─── Supplier fixtures ───────────────────────────────────────────────────────


@pytest.fixture()
def supplier(db: Session) -> Supplier:
    s = Supplier(name="Gulf Medical Supplies", payment_terms="Net 30")
    db.add(s)
    db.flush()
    return s


@pytest.fixture()
def other_supplier(db: Session) -> Supplier:
    s = Supplier(name="Acme Drugs")
    db.add(s)
    db.flush()
    return s


# ─── Builders ────────────────────────────────────────────────────────────────


@pytest.fixture()
def make_invoice(db: Session):
    """Factory: ``make_invoice(number, on, [(item, qty), ...])``."""

    def _make(
        number: str,
        on: date,
        lines: list[tuple[StockItem | str, int]],
        patient: str = "John Doe",
    ) -> Invoice:
        inv = Invoice(
            invoice_number=number,
            invoice_date=on,
            patient_name=patient,
            patient_phone="0501234567",
        )
        for target, qty in lines:
            if isinstance(target, StockItem):
                inv.items.append(
                    InvoiceItem(
                        medicine_id=target.item_id,
                        medicine_name=target.name,
                        quantity=qty,
                        batch_no=target.batch_no,
                    )
                )
            else:
                inv.items.append(InvoiceItem(medicine_name=target, quantity=qty))
        db.add(inv)
        db.flush()
        return inv

    return _make


@pytest.fixture()
def make_po(db: Session):
    """Factory for purchase orders; received ones get a GRN number and date."""

    def _make(
        supplier: Supplier,
        number: str,
        total: str = "0",
        order_date: date = date(2024, 1, 1),
        grn_date: date | None = None,
        due_date: date | None = None,
        status: POStatus = POStatus.RECEIVED,
        payment_status: PaymentStatus = PaymentStatus.PENDING,
        lines: list[tuple[StockItem, int, int | None]] | None = None,
    ) -> PurchaseOrder:
        received = status == POStatus.RECEIVED
        po = PurchaseOrder(
            po_number=number,
            supplier_id=supplier.id,
            status=status,
            order_date=order_date,
            grn_number=f"GRN-{number}" if received else None,
            grn_date=(grn_date or order_date) if received else None,
            invoice_number=f"SI-{number}",
            payment_due_date=due_date,
            payment_status=payment_status,
            total_amount=Decimal(total),
        )
        for item, qty, tabs in lines or []:
            po.items.append(
                PurchaseOrderItem(
                    stock_item_id=item.item_id,
                    stock_item_name=item.name,
                    quantity=qty,
                    qty_in_tabs=tabs,
                )
            )
        db.add(po)
        db.flush()
        return po

    return _make
