from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import or_
from sqlalchemy.orm import Session

from pharmacy.app.models.invoice import Invoice, InvoiceItem
from pharmacy.app.models.stock import StockItem
from pharmacy.app.models.supplier import POStatus, PurchaseOrder, PurchaseOrderItem
from pharmacy.app.services.ledger import (
    Direction,
    LedgerEntry,
    ReferenceType,
    filter_entries,
    ledger_totals,
    reconcile,
    with_opening_entry,
)
from pharmacy.app.services.movement import KeyResolver, aggregate, tally

logger = logging.getLogger(__name__)


def _get_stock_item(db: Session, item_id: int) -> StockItem:
    item = db.query(StockItem).filter(StockItem.item_id == item_id).first()
    if not item:
        raise ValueError("Stock item not found")
    return item


def _issued_entries(db: Session, item_id: int, from_date: date, to_date: date) -> list[LedgerEntry]:
    rows = (
        db.query(InvoiceItem, Invoice)
        .join(Invoice, InvoiceItem.invoice_id == Invoice.id)
        .filter(
            InvoiceItem.medicine_id == item_id,
            Invoice.invoice_date >= from_date,
            Invoice.invoice_date <= to_date,
        )
        .all()
    )
    return [
        LedgerEntry(
            entry_date=invoice.invoice_date,
            direction=Direction.OUT,
            quantity=line.quantity,
            reference=invoice.invoice_number,
            reference_type=ReferenceType.INVOICE,
            entry_id=str(line.id),
            details={
                "patient_name": invoice.patient_name,
                "patient_phone": invoice.patient_phone,
                "invoice_number": invoice.invoice_number,
                "batch_no": line.batch_no,
            },
        )
        for line, invoice in rows
    ]


def _received_entries(db: Session, item_id: int, from_date: date, to_date: date) -> list[LedgerEntry]:
    rows = (
        db.query(PurchaseOrderItem, PurchaseOrder)
        .join(PurchaseOrder, PurchaseOrderItem.purchase_order_id == PurchaseOrder.id)
        .filter(
            PurchaseOrderItem.stock_item_id == item_id,
            PurchaseOrder.status == POStatus.RECEIVED,
            PurchaseOrder.grn_date.isnot(None),
            PurchaseOrder.grn_date >= from_date,
            PurchaseOrder.grn_date <= to_date,
        )
        .all()
    )
    return [
        LedgerEntry(
            entry_date=po.grn_date,
            direction=Direction.IN,
            # tab count is the stocking unit; fall back to pack quantity
            quantity=line.qty_in_tabs or line.quantity or 0,
            reference=po.grn_number or po.po_number,
            reference_type=ReferenceType.GRN,
            entry_id=f"grn-{line.id}",
            details={
                "supplier": po.supplier.name,
                "po_number": po.po_number,
                "grn_number": po.grn_number,
            },
        )
        for line, po in rows
    ]


def _entry_out(entry: LedgerEntry) -> dict:
    return {
        "id": entry.entry_id,
        "date": entry.entry_date.isoformat(),
        "type": entry.direction.value,
        "quantity": entry.quantity,
        "balance": entry.running_balance,
        "reference": entry.reference,
        "reference_type": entry.reference_type.value,
        "details": dict(entry.details),
    }


def get_stock_ledger(
    db: Session,
    item_id: int,
    from_date: date,
    to_date: date,
    direction: Direction | None = None,
) -> dict:
    """Movements of one stock item in a window, with running balances.

    The item's live current stock is taken as the balance after the last
    movement in the window. Movements after *to_date* are not undone, so a
    window ending in the past reports its opening and closing as if it ended
    today. With no movements in the window both balances are ``None``.
    """
    item = _get_stock_item(db, item_id)

    movements = _issued_entries(db, item_id, from_date, to_date)
    movements += _received_entries(db, item_id, from_date, to_date)

    reconciliation = reconcile(item.current_stock, movements)
    entries = with_opening_entry(reconciliation, from_date)
    total_in, total_out = ledger_totals(entries)

    logger.info(
        "Stock ledger for item %s (%s to %s): %d movements",
        item_id, from_date, to_date, len(reconciliation.entries),
    )

    return {
        "item_id": item.item_id,
        "name": item.name,
        "category": item.category,
        "from_date": str(from_date),
        "to_date": str(to_date),
        "current_stock": item.current_stock,
        "opening_balance": reconciliation.opening_balance,
        "closing_balance": reconciliation.closing_balance,
        "total_in": total_in,
        "total_out": total_out,
        "entries": [_entry_out(e) for e in filter_entries(entries, direction)],
    }


# ─── Movement summary across all items ──────────────────────────────────────


def get_stock_movements(
    db: Session,
    from_date: date,
    to_date: date,
    search: str | None = None,
) -> dict:
    """Total IN/OUT per stock item in a window, with derived opening stock."""
    query = db.query(StockItem)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(
            or_(
                StockItem.name.ilike(pattern),
                StockItem.category.ilike(pattern),
                StockItem.supplier.ilike(pattern),
            )
        )
    items = query.order_by(StockItem.name.asc()).all()
    resolver = KeyResolver.from_items((i.item_id, i.name) for i in items)

    issued_rows = (
        db.query(InvoiceItem.medicine_id, InvoiceItem.medicine_name, InvoiceItem.quantity)
        .join(Invoice, InvoiceItem.invoice_id == Invoice.id)
        .filter(Invoice.invoice_date >= from_date, Invoice.invoice_date <= to_date)
        .all()
    )
    issued = tally(
        ((medicine_id if medicine_id is not None else name, qty) for medicine_id, name, qty in issued_rows),
        resolver,
    )

    received_rows = (
        db.query(
            PurchaseOrderItem.stock_item_id,
            PurchaseOrderItem.stock_item_name,
            PurchaseOrderItem.qty_in_tabs,
            PurchaseOrderItem.quantity,
        )
        .join(PurchaseOrder, PurchaseOrderItem.purchase_order_id == PurchaseOrder.id)
        .filter(
            PurchaseOrder.status == POStatus.RECEIVED,
            PurchaseOrder.grn_date.isnot(None),
            PurchaseOrder.grn_date >= from_date,
            PurchaseOrder.grn_date <= to_date,
        )
        .all()
    )
    received = tally(
        (
            (stock_item_id if stock_item_id is not None else name, tabs or qty or 0)
            for stock_item_id, name, tabs, qty in received_rows
        ),
        resolver,
    )

    current = {resolver.resolve(i.item_id): i.current_stock for i in items}
    opening = {
        key: stock - received.get(key, 0) + issued.get(key, 0)
        for key, stock in current.items()
    }
    rows = {row.entity_key: row for row in aggregate(opening, issued, received, current)}

    movements = []
    for item in items:
        row = rows[resolver.resolve(item.item_id)]
        movements.append(
            {
                "item_id": item.item_id,
                "name": item.name,
                "category": item.category,
                "batch_no": item.batch_no,
                "supplier": item.supplier,
                "opening_stock": row.opening,
                "total_in": row.received,
                "total_out": row.issued,
                "closing_stock": row.closing,
                "current_stock": item.current_stock,
            }
        )

    return {
        "from_date": str(from_date),
        "to_date": str(to_date),
        "items": movements,
        "total_in": sum(m["total_in"] for m in movements),
        "total_out": sum(m["total_out"] for m in movements),
    }
