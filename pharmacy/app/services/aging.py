from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy import func as sa_func
from sqlalchemy.orm import Session, joinedload

from pharmacy.app.models.supplier import (
    PaymentStatus,
    POStatus,
    PurchaseOrder,
    SupplierPayment,
    SupplierPaymentStatus,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

CURRENT = "current"
BUCKETS: tuple[str, ...] = (CURRENT, "1-30", "31-60", "61-90", "91-120", "120+")


def bucket(days_overdue: int) -> str:
    """Assign an aging bucket from signed days overdue (<= 0 is not yet due)."""
    if days_overdue <= 0:
        return CURRENT
    elif days_overdue <= 30:
        return "1-30"
    elif days_overdue <= 60:
        return "31-60"
    elif days_overdue <= 90:
        return "61-90"
    elif days_overdue <= 120:
        return "91-120"
    else:
        return "120+"


def empty_buckets() -> dict[str, Decimal]:
    return {name: ZERO for name in BUCKETS}


def days_overdue(due_date: date, as_of: date) -> int:
    return (as_of - due_date).days


def outstanding_amount(total: Any, settled: Any) -> Decimal | None:
    """Amount still owed, or ``None`` when nothing is outstanding."""
    outstanding = Decimal(str(total or 0)) - Decimal(str(settled or 0))
    if outstanding <= ZERO:
        return None
    return outstanding


@dataclass(frozen=True)
class Obligation:
    due_date: date
    outstanding: Decimal
    party_id: str = ""
    party: str = ""
    reference: str = ""
    details: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ClassifiedObligation:
    obligation: Obligation
    bucket: str
    signed_days_overdue: int

    @property
    def days_overdue(self) -> int:
        return max(0, self.signed_days_overdue)


@dataclass(frozen=True)
class AgingResult:
    buckets: dict[str, Decimal]
    total: Decimal
    classified: list[ClassifiedObligation]

    @property
    def overdue(self) -> Decimal:
        return self.total - self.buckets[CURRENT]


def bucket_obligations(obligations: Iterable[Obligation], as_of: date) -> AgingResult:
    """Classify each obligation and accumulate per-bucket and grand totals."""
    buckets = empty_buckets()
    classified: list[ClassifiedObligation] = []
    for ob in obligations:
        signed = days_overdue(ob.due_date, as_of)
        name = bucket(signed)
        buckets[name] += ob.outstanding
        classified.append(
            ClassifiedObligation(obligation=ob, bucket=name, signed_days_overdue=signed)
        )
    total = sum(buckets.values(), ZERO)
    return AgingResult(buckets=buckets, total=total, classified=classified)


# ─── Supplier payables ───────────────────────────────────────────────────────


def completed_payments_by_po(
    db: Session, supplier_id: uuid.UUID | None = None,
) -> dict[str, Decimal]:
    """Sum of COMPLETED payments per purchase order id."""
    query = db.query(
        SupplierPayment.purchase_order_id,
        sa_func.coalesce(sa_func.sum(SupplierPayment.amount), 0),
    ).filter(
        SupplierPayment.status == SupplierPaymentStatus.COMPLETED,
        SupplierPayment.purchase_order_id.isnot(None),
    )
    if supplier_id is not None:
        query = query.filter(SupplierPayment.supplier_id == supplier_id)
    rows = query.group_by(SupplierPayment.purchase_order_id).all()
    return {str(po_id): Decimal(str(paid)) for po_id, paid in rows}


def _iso(value: date | None) -> str | None:
    return value.isoformat() if value else None


def load_supplier_obligations(db: Session, as_of: date) -> list[Obligation]:
    """Outstanding amounts on received, not fully paid purchase orders.

    The due date falls back from the payment due date to the GRN date, then
    the order date, then *as_of*.
    """
    pos = (
        db.query(PurchaseOrder)
        .options(joinedload(PurchaseOrder.supplier))
        .filter(
            PurchaseOrder.status == POStatus.RECEIVED,
            PurchaseOrder.payment_status != PaymentStatus.PAID,
        )
        .order_by(PurchaseOrder.order_date.asc(), PurchaseOrder.po_number.asc())
        .all()
    )
    paid_by_po = completed_payments_by_po(db)

    obligations: list[Obligation] = []
    for po in pos:
        pending = outstanding_amount(po.total_amount, paid_by_po.get(str(po.id)))
        if pending is None:
            continue
        due = po.payment_due_date or po.grn_date or po.order_date or as_of
        obligations.append(
            Obligation(
                due_date=due,
                outstanding=pending,
                party_id=str(po.supplier_id),
                party=po.supplier.name,
                reference=po.po_number,
                details={
                    "grn_number": po.grn_number,
                    "invoice_number": po.invoice_number,
                    "invoice_date": _iso(po.invoice_date),
                    "order_date": _iso(po.order_date),
                    "grn_date": _iso(po.grn_date),
                    "payment_due_date": _iso(po.payment_due_date),
                },
            )
        )
    return obligations


def _bucket_row(name: str, buckets: Mapping[str, Decimal], total: Decimal) -> dict[str, str]:
    row = {"name": name}
    for key in BUCKETS:
        row[key] = str(buckets[key])
    row["total"] = str(total)
    return row


def _percentages(buckets: Mapping[str, Decimal], total: Decimal) -> dict[str, str]:
    if total == ZERO:
        return {key: "0.00" for key in BUCKETS}
    return {
        key: str((buckets[key] / total * 100).quantize(Decimal("0.01")))
        for key in BUCKETS
    }


def get_supplier_aging(db: Session, as_of_date: date) -> dict:
    """Supplier payables aging: per-supplier bucket rows, totals and PO detail."""
    obligations = load_supplier_obligations(db, as_of_date)

    by_supplier: dict[str, list[Obligation]] = {}
    names: dict[str, str] = {}
    for ob in obligations:
        by_supplier.setdefault(ob.party_id, []).append(ob)
        names[ob.party_id] = ob.party

    suppliers_list = []
    for supplier_id in sorted(by_supplier, key=lambda sid: names[sid]):
        result = bucket_obligations(by_supplier[supplier_id], as_of_date)
        row = _bucket_row(names[supplier_id], result.buckets, result.total)
        row["supplier_id"] = supplier_id
        suppliers_list.append(row)

    overall = bucket_obligations(obligations, as_of_date)
    details = [
        {
            "supplier": c.obligation.party,
            "po_number": c.obligation.reference,
            **c.obligation.details,
            "due_date": c.obligation.due_date.isoformat(),
            "days_overdue": c.days_overdue,
            "bucket": c.bucket,
            "outstanding": str(c.obligation.outstanding),
        }
        for c in sorted(overall.classified, key=lambda c: (c.obligation.party, c.obligation.reference))
    ]

    logger.info(
        "Supplier aging as of %s: %d suppliers, %d open POs, total %s",
        as_of_date, len(suppliers_list), len(details), overall.total,
    )

    return {
        "as_of_date": str(as_of_date),
        "buckets": list(BUCKETS),
        "suppliers": suppliers_list,
        "totals": _bucket_row("Total", overall.buckets, overall.total),
        "percentages": _percentages(overall.buckets, overall.total),
        "details": details,
    }


def get_aging_summary(db: Session, as_of_date: date) -> dict:
    """Compact payables summary for the dashboard widget."""
    result = bucket_obligations(load_supplier_obligations(db, as_of_date), as_of_date)

    counts = {key: 0 for key in BUCKETS}
    overdue_suppliers: set[str] = set()
    for c in result.classified:
        counts[c.bucket] += 1
        if c.bucket != CURRENT:
            overdue_suppliers.add(c.obligation.party_id)

    return {
        "as_of_date": str(as_of_date),
        "buckets": [
            {"bucket": key, "amount": str(result.buckets[key]), "count": counts[key]}
            for key in BUCKETS
        ],
        "total_pending": str(result.total),
        "total_overdue": str(result.overdue),
        "overdue_count": sum(n for key, n in counts.items() if key != CURRENT),
        "suppliers_with_overdue": len(overdue_suppliers),
    }
