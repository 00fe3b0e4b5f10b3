from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from pharmacy.app.models.invoice import Invoice, InvoiceItem
from pharmacy.app.models.stock import DayReport, StockItem
from pharmacy.app.models.supplier import POStatus, PurchaseOrder, PurchaseOrderItem
from pharmacy.app.services.movement import KeyResolver, aggregate, tally

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def _snapshot_openings(db: Session, report_date: date, resolver: KeyResolver) -> dict[str, int]:
    """Opening stock captured at the start of *report_date*, keyed by item."""
    day = db.query(DayReport).filter(DayReport.report_date == report_date).first()
    snapshot = (day.stock_snapshot or {}) if day else {}
    openings: dict[str, int] = {}
    for name, data in snapshot.items():
        if not isinstance(data, dict) or data.get("opening") is None:
            continue
        openings[resolver.resolve(name)] = int(data["opening"])
    return openings


def _rate(item: StockItem) -> Decimal:
    return Decimal(str(item.mrp or item.unit_price or 0))


def get_sale_report(db: Session, report_date: date) -> dict:
    """Daily sale report: opening, sold, received and closing stock per item.

    Opening stock comes from the day's stock snapshot; items missing from the
    snapshot fall back to their current stock. Only items with a sale, a
    receipt or a snapshot opening are listed.
    """
    items = db.query(StockItem).order_by(StockItem.name.asc()).all()
    resolver = KeyResolver.from_items((i.item_id, i.name) for i in items)
    snapshot = _snapshot_openings(db, report_date, resolver)

    sold_rows = (
        db.query(InvoiceItem.medicine_id, InvoiceItem.medicine_name, InvoiceItem.quantity)
        .join(Invoice, InvoiceItem.invoice_id == Invoice.id)
        .filter(Invoice.invoice_date == report_date)
        .all()
    )
    issued = tally(
        ((name if medicine_id is None else medicine_id, qty) for medicine_id, name, qty in sold_rows),
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
            PurchaseOrder.grn_date == report_date,
            PurchaseOrder.status == POStatus.RECEIVED,
        )
        .all()
    )
    received = tally(
        (
            (name if stock_item_id is None else stock_item_id, tabs or qty or 0)
            for stock_item_id, name, tabs, qty in received_rows
        ),
        resolver,
    )

    current = {resolver.resolve(i.item_id): i.current_stock for i in items}
    opening = {key: snapshot.get(key, stock) for key, stock in current.items()}
    rows = {row.entity_key: row for row in aggregate(opening, issued, received, current)}

    report_items = []
    categories: dict[str, dict] = {}
    discrepancies = 0
    for item in items:
        key = resolver.resolve(item.item_id)
        row = rows[key]
        from_snapshot = key in snapshot
        if not (row.issued > 0 or row.received > 0 or from_snapshot):
            continue

        rate = _rate(item)
        value = rate * row.issued
        if row.discrepancy:
            discrepancies += 1
        report_items.append(
            {
                "s_no": len(report_items) + 1,
                "item_id": item.item_id,
                "medicine_name": item.name,
                "category": item.category,
                "opening_stock": row.opening,
                "sale_qty": row.issued,
                "rate": str(rate),
                "value": str(value),
                "stock_received": row.received,
                "closing_stock": row.closing,
                "current_stock": row.current_stock,
                "discrepancy": row.discrepancy,
                "is_from_snapshot": from_snapshot,
            }
        )
        cat = categories.setdefault(
            item.category, {"category": item.category, "total_qty": 0, "total_value": ZERO}
        )
        cat["total_qty"] += row.issued
        cat["total_value"] += value

    unknown = set(issued) | set(received)
    unknown.difference_update(current)
    if unknown:
        logger.debug("Sale report %s: %d movements for unknown items", report_date, len(unknown))
    if discrepancies:
        logger.warning(
            "Sale report %s: %d items whose closing stock differs from current stock",
            report_date, discrepancies,
        )

    category_totals = [
        {**cat, "total_value": str(cat["total_value"])}
        for _, cat in sorted(categories.items())
    ]
    grand_total = sum((cat["total_value"] for cat in categories.values()), ZERO)

    return {
        "report_date": str(report_date),
        "items": report_items,
        "category_totals": category_totals,
        "grand_total_value": str(grand_total),
        "discrepancy_count": discrepancies,
    }
