from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from pharmacy.app.models.supplier import (
    PaymentStatus,
    POStatus,
    PurchaseOrder,
    Supplier,
    SupplierPayment,
    SupplierPaymentStatus,
)
from pharmacy.app.services.aging import completed_payments_by_po, outstanding_amount

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
DEBIT = "debit"
CREDIT = "credit"


def _get_supplier(db: Session, supplier_id: UUID) -> Supplier:
    supplier = db.query(Supplier).filter(Supplier.id == supplier_id).first()
    if not supplier:
        raise ValueError("Supplier not found")
    return supplier


def _pending_bills(
    db: Session, supplier: Supplier, received: list[PurchaseOrder],
) -> list[dict]:
    """Received, not yet paid POs with what has been paid and what remains."""
    paid_by_po = completed_payments_by_po(db, supplier.id)
    bills = []
    for po in sorted(received, key=lambda p: (p.grn_date or p.order_date, p.po_number)):
        if po.payment_status == PaymentStatus.PAID:
            continue
        paid = paid_by_po.get(str(po.id), ZERO)
        pending = outstanding_amount(po.total_amount, paid)
        if pending is None:
            continue
        bills.append(
            {
                "po_number": po.po_number,
                "grn_number": po.grn_number,
                "invoice_number": po.invoice_number,
                "grn_date": po.grn_date.isoformat() if po.grn_date else None,
                "payment_due_date": po.payment_due_date.isoformat() if po.payment_due_date else None,
                "payment_status": po.payment_status.value,
                "total_amount": str(po.total_amount),
                "paid_amount": str(paid),
                "pending_amount": str(pending),
            }
        )
    return bills


def get_supplier_ledger(
    db: Session,
    supplier_id: UUID,
    from_date: date | None = None,
    to_date: date | None = None,
) -> dict:
    """Bills (received POs) as debits and completed payments as credits.

    The running balance starts at zero and is the amount owed after each
    entry; bills are listed before payments on the same date. Pending bills
    and the PO/payment counts cover the supplier's whole history and ignore
    the date filter.
    """
    supplier = _get_supplier(db, supplier_id)

    all_pos = db.query(PurchaseOrder).filter(PurchaseOrder.supplier_id == supplier.id).all()
    received = [po for po in all_pos if po.status == POStatus.RECEIVED]
    all_payments = (
        db.query(SupplierPayment).filter(SupplierPayment.supplier_id == supplier.id).all()
    )
    payments = [p for p in all_payments if p.status == SupplierPaymentStatus.COMPLETED]

    raw: list[dict] = []
    for po in received:
        raw.append(
            {
                "date": po.grn_date or po.order_date,
                "type": DEBIT,
                "amount": Decimal(str(po.total_amount)),
                "reference": po.po_number,
                "description": f"GRN {po.grn_number}" if po.grn_number else "Purchase order",
                "invoice_number": po.invoice_number,
            }
        )
    for pay in payments:
        raw.append(
            {
                "date": pay.payment_date,
                "type": CREDIT,
                "amount": Decimal(str(pay.amount)),
                "reference": pay.reference_number or "",
                "description": f"Payment ({pay.payment_method})" if pay.payment_method else "Payment",
                "invoice_number": None,
            }
        )

    if from_date:
        raw = [e for e in raw if e["date"] >= from_date]
    if to_date:
        raw = [e for e in raw if e["date"] <= to_date]
    raw.sort(key=lambda e: (e["date"], 0 if e["type"] == DEBIT else 1))

    balance = ZERO
    total_debits = ZERO
    total_credits = ZERO
    entries = []
    for e in raw:
        if e["type"] == DEBIT:
            balance += e["amount"]
            total_debits += e["amount"]
        else:
            balance -= e["amount"]
            total_credits += e["amount"]
        entries.append(
            {
                **e,
                "date": e["date"].isoformat(),
                "amount": str(e["amount"]),
                "balance": str(balance),
            }
        )

    pending_bills = _pending_bills(db, supplier, received)
    pending_amount = sum((Decimal(b["pending_amount"]) for b in pending_bills), ZERO)

    logger.info(
        "Supplier ledger for %s: %d entries, %d pending bills",
        supplier.name, len(entries), len(pending_bills),
    )

    return {
        "supplier_id": str(supplier.id),
        "supplier": supplier.name,
        "entries": entries,
        "pending_bills": pending_bills,
        "summary": {
            "total_debits": str(total_debits),
            "total_credits": str(total_credits),
            "balance": str(total_debits - total_credits),
            "pending_po_count": len(pending_bills),
            "pending_amount": str(pending_amount),
            "total_po_count": len(all_pos),
            "total_payment_count": len(all_payments),
        },
    }
