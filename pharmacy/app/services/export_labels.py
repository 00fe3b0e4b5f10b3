"""Column and title labels used by the Excel and PDF exports."""
from __future__ import annotations

LABELS: dict[str, str] = {
    # Common
    "as_of": "As of",
    "period": "Period",
    "date": "Date",
    "type": "Type",
    "reference": "Reference",
    "reference_type": "Reference Type",
    "balance": "Balance",
    "total": "TOTAL",
    "grand_total": "GRAND TOTAL",

    # Stock ledger
    "stock_ledger": "Stock Ledger",
    "party": "Patient/Supplier",
    "phone": "Phone",
    "po_number": "PO Number",
    "grn_number": "GRN Number",
    "in_qty": "In Qty",
    "out_qty": "Out Qty",
    "opening": "Opening",
    "current_stock": "Current Stock",
    "total_in": "Total In",
    "total_out": "Total Out",

    # Supplier aging
    "supplier_aging": "Supplier Payment Aging Report",
    "aging_summary": "Aging Summary",
    "aging_details": "Aging Details",
    "supplier": "Supplier",
    "current": "Current",
    "1-30": "1-30 Days",
    "31-60": "31-60 Days",
    "61-90": "61-90 Days",
    "91-120": "91-120 Days",
    "120+": "120+ Days",
    "total_outstanding": "Total Outstanding",
    "invoice_number": "Invoice Number",
    "invoice_date": "Invoice Date",
    "po_date": "PO Date",
    "grn_date": "GRN Date",
    "due_date": "Due Date",
    "days_overdue": "Days Overdue",
    "aging_bucket": "Aging Bucket",
    "amount_outstanding": "Amount Outstanding",

    # Sale report
    "sale_report": "Sale Report",
    "s_no": "S. No.",
    "medicine_name": "Medicine Name",
    "medicine_category": "Medicine Category",
    "stock_opening": "Stock Opening",
    "sale_qty": "Sale Qty",
    "rate": "Rate",
    "value": "Value",
    "stock_received": "Stock Received",
    "closing_stock": "Closing Stock",
    "total_sale": "TOTAL SALE",

    # Supplier ledger
    "supplier_ledger": "Supplier Ledger",
    "description": "Description",
    "debit": "Debit (Bill)",
    "credit": "Credit (Payment)",
    "total_debits": "Total Bills",
    "total_credits": "Total Payments",
    "balance_due": "Balance Due",
    "pending_bills": "Pending Bills",
    "pending_amount": "Pending Amount",
    "pending_po_count": "Pending POs",
    "total_po_count": "Total POs",
    "total_payment_count": "Total Payments Made",
    "payment_status": "Payment Status",
    "bill_amount": "Bill Amount",
    "paid_amount": "Paid",
}


def label(key: str) -> str:
    """Return the label for *key*, or the key itself when unknown."""
    return LABELS.get(key, key)
