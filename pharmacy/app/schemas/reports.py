from __future__ import annotations

from typing import Any

from pydantic import BaseModel


# ─── Stock Ledger ────────────────────────────────────────────────────────────


class LedgerEntryOut(BaseModel):
    id: str
    date: str
    type: str  # IN / OUT
    quantity: int
    balance: int | None
    reference: str
    reference_type: str  # GRN / Invoice / Adjustment / Opening
    details: dict[str, Any]


class StockLedgerResponse(BaseModel):
    item_id: int
    name: str
    category: str
    from_date: str
    to_date: str
    current_stock: int
    opening_balance: int | None  # None when the window has no movements
    closing_balance: int | None
    total_in: int
    total_out: int
    entries: list[LedgerEntryOut]


class StockMovementOut(BaseModel):
    item_id: int
    name: str
    category: str
    batch_no: str | None
    supplier: str | None
    opening_stock: int
    total_in: int
    total_out: int
    closing_stock: int
    current_stock: int


class StockMovementsResponse(BaseModel):
    from_date: str
    to_date: str
    items: list[StockMovementOut]
    total_in: int
    total_out: int


# ─── Supplier Aging ──────────────────────────────────────────────────────────


class SupplierAgingResponse(BaseModel):
    as_of_date: str
    buckets: list[str]
    suppliers: list[dict[str, str]]  # name, supplier_id, one key per bucket, total
    totals: dict[str, str]
    percentages: dict[str, str]
    details: list[dict[str, Any]]


class AgingBucketSummary(BaseModel):
    bucket: str
    amount: str
    count: int


class AgingSummaryResponse(BaseModel):
    as_of_date: str
    buckets: list[AgingBucketSummary]
    total_pending: str
    total_overdue: str
    overdue_count: int
    suppliers_with_overdue: int


# ─── Sale Report ─────────────────────────────────────────────────────────────


class SaleReportItem(BaseModel):
    s_no: int
    item_id: int
    medicine_name: str
    category: str
    opening_stock: int
    sale_qty: int
    rate: str
    value: str
    stock_received: int
    closing_stock: int
    current_stock: int
    discrepancy: int  # closing - current; highlighted, never corrected
    is_from_snapshot: bool


class CategoryTotal(BaseModel):
    category: str
    total_qty: int
    total_value: str


class SaleReportResponse(BaseModel):
    report_date: str
    items: list[SaleReportItem]
    category_totals: list[CategoryTotal]
    grand_total_value: str
    discrepancy_count: int


# ─── Supplier Ledger ─────────────────────────────────────────────────────────


class SupplierLedgerEntry(BaseModel):
    date: str
    type: str  # debit / credit
    amount: str
    reference: str
    description: str
    invoice_number: str | None
    balance: str


class PendingBill(BaseModel):
    po_number: str
    grn_number: str | None
    invoice_number: str | None
    grn_date: str | None
    payment_due_date: str | None
    payment_status: str
    total_amount: str
    paid_amount: str
    pending_amount: str


class SupplierLedgerSummary(BaseModel):
    total_debits: str
    total_credits: str
    balance: str
    pending_po_count: int
    pending_amount: str
    total_po_count: int
    total_payment_count: int


class SupplierLedgerResponse(BaseModel):
    supplier_id: str
    supplier: str
    entries: list[SupplierLedgerEntry]
    pending_bills: list[PendingBill]
    summary: SupplierLedgerSummary


# ─── Expiry Alerts ───────────────────────────────────────────────────────────


class ExpiryAlertItem(BaseModel):
    item_id: int
    name: str
    batch_no: str | None
    category: str
    expiry_date: str
    current_stock: int
    days_left: int
    band: str | None


class ExpiryAlertsResponse(BaseModel):
    as_of_date: str
    within_days: int
    items: list[ExpiryAlertItem]
    counts: dict[str, int]
