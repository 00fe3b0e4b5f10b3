"""Seed the database with demo stock, a supplier with a received PO, and a
patient invoice so every report has something to show.

Usage:
    python -m pharmacy.scripts.seed
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from pharmacy.app.core.database import SessionLocal
from pharmacy.app.models.invoice import Invoice, InvoiceItem
from pharmacy.app.models.stock import DayReport, StockItem
from pharmacy.app.models.supplier import (
    PaymentStatus,
    POStatus,
    PurchaseOrder,
    PurchaseOrderItem,
    Supplier,
    SupplierPayment,
)

STOCK_ITEMS: list[tuple[str, str, int, Decimal, int]] = [
    # name, category, current stock, MRP, days to expiry
    ("Paracetamol 500mg", "Tablet", 480, Decimal("1.50"), 400),
    ("Amoxicillin 250mg", "Capsule", 220, Decimal("4.25"), 75),
    ("Cough Syrup 100ml", "Syrup", 35, Decimal("65.00"), 20),
    ("Insulin Glargine", "Injection", 12, Decimal("780.00"), 45),
    ("ORS Sachet", "Powder", 150, Decimal("18.00"), 300),
]


def seed() -> None:
    db = SessionLocal()
    today = date.today()
    try:
        # ── Stock items ────────────────────────────────────────────────
        items: dict[str, StockItem] = {}
        for name, category, stock, mrp, expiry_days in STOCK_ITEMS:
            existing = db.query(StockItem).filter_by(name=name).first()
            if existing:
                items[name] = existing
                continue
            item = StockItem(
                name=name,
                category=category,
                batch_no=f"B-{category[:3].upper()}-01",
                expiry_date=today + timedelta(days=expiry_days),
                current_stock=stock,
                minimum_stock=10,
                unit_price=mrp * Decimal("0.8"),
                mrp=mrp,
                supplier="Gulf Medical Supplies",
            )
            db.add(item)
            items[name] = item
            print(f"Created stock item: {name}")
        db.flush()

        # ── Supplier, GRN and part payment ─────────────────────────────
        supplier = db.query(Supplier).filter_by(name="Gulf Medical Supplies").first()
        if not supplier:
            supplier = Supplier(name="Gulf Medical Supplies", payment_terms="Net 30")
            db.add(supplier)
            db.flush()
            print("Created supplier: Gulf Medical Supplies")

        if not db.query(PurchaseOrder).filter_by(po_number="PO-0001").first():
            para = items["Paracetamol 500mg"]
            po = PurchaseOrder(
                po_number="PO-0001",
                supplier_id=supplier.id,
                status=POStatus.RECEIVED,
                order_date=today - timedelta(days=50),
                grn_number="GRN-0001",
                grn_date=today - timedelta(days=45),
                invoice_number="SI-7781",
                invoice_date=today - timedelta(days=45),
                payment_due_date=today - timedelta(days=15),
                payment_status=PaymentStatus.PARTIAL,
                total_amount=Decimal("1200.00"),
            )
            po.items.append(
                PurchaseOrderItem(
                    stock_item_id=para.item_id,
                    stock_item_name=para.name,
                    quantity=10,
                    qty_in_tabs=1000,
                    unit_price=Decimal("120.00"),
                    total_price=Decimal("1200.00"),
                )
            )
            db.add(po)
            db.flush()
            db.add(
                SupplierPayment(
                    supplier_id=supplier.id,
                    purchase_order_id=po.id,
                    amount=Decimal("500.00"),
                    payment_date=today - timedelta(days=20),
                    payment_method="Bank Transfer",
                    reference_number="TRX-5521",
                )
            )
            print("Created PO-0001 with GRN-0001 and a part payment")

        # ── Patient invoice ────────────────────────────────────────────
        if not db.query(Invoice).filter_by(invoice_number="INV-0001").first():
            inv = Invoice(
                invoice_number="INV-0001",
                invoice_date=today,
                patient_name="Walk-in Patient",
                total=Decimal("30.00"),
            )
            inv.items.append(
                InvoiceItem(
                    medicine_id=items["Paracetamol 500mg"].item_id,
                    medicine_name="Paracetamol 500mg",
                    quantity=20,
                    unit_price=Decimal("1.50"),
                )
            )
            db.add(inv)
            print("Created invoice: INV-0001")

        # ── Today's opening snapshot ───────────────────────────────────
        if not db.query(DayReport).filter_by(report_date=today).first():
            db.add(
                DayReport(
                    report_date=today,
                    stock_snapshot={
                        name: {"opening": item.current_stock}
                        for name, item in items.items()
                    },
                )
            )
            print(f"Created day report for {today}")

        db.commit()
        print("Seed complete.")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
