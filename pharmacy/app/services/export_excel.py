"""Excel export functions for pharmacy reports using openpyxl."""
from __future__ import annotations

import io
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from pharmacy.app.services.aging import BUCKETS
from pharmacy.app.services.export_labels import label

# ── Shared styling constants ────────────────────────────────────────────────

_HEADER_FONT = Font(name="Calibri", bold=True, color="FFFFFF", size=11)
_HEADER_FILL = PatternFill(start_color="1F4E79", end_color="1F4E79", fill_type="solid")
_TOTAL_FONT = Font(name="Calibri", bold=True, size=11)
_TOTAL_BORDER = Border(
    top=Side(style="thin"),
    bottom=Side(style="double"),
)
_DISCREPANCY_FILL = PatternFill(start_color="FCE4D6", end_color="FCE4D6", fill_type="solid")
_CURRENCY_FMT = '#,##0.00'
_QTY_FMT = '#,##0'
_RIGHT = Alignment(horizontal="right")
_LEFT = Alignment(horizontal="left")


def _auto_width(ws: Any) -> None:
    """Auto-fit column widths based on content."""
    for col_idx in range(1, ws.max_column + 1):
        max_len = 0
        col_letter = get_column_letter(col_idx)
        for row in ws.iter_rows(min_col=col_idx, max_col=col_idx, values_only=False):
            cell = row[0]
            if cell.value is not None:
                max_len = max(max_len, len(str(cell.value)))
        ws.column_dimensions[col_letter].width = min(max_len + 4, 40)


def _write_header_row(ws: Any, row: int, values: list[str]) -> None:
    """Write a styled header row."""
    for col, val in enumerate(values, 1):
        cell = ws.cell(row=row, column=col, value=val)
        cell.font = _HEADER_FONT
        cell.fill = _HEADER_FILL
        cell.alignment = _RIGHT if col > 1 else _LEFT


def _write_title(ws: Any, title: str, subtitle: str) -> int:
    """Write report title and subtitle, return next available row."""
    ws.cell(row=1, column=1, value=title).font = Font(name="Calibri", bold=True, size=14)
    ws.cell(row=2, column=1, value=subtitle).font = Font(name="Calibri", size=10, italic=True)
    return 4


def _money(ws: Any, row: int, col: int, value: str | None, total: bool = False) -> None:
    c = ws.cell(row=row, column=col, value=float(value or 0))
    c.number_format = _CURRENCY_FMT
    c.alignment = _RIGHT
    if total:
        c.font = _TOTAL_FONT
        c.border = _TOTAL_BORDER


def _qty(ws: Any, row: int, col: int, value: int | None, total: bool = False) -> None:
    c = ws.cell(row=row, column=col, value=value)
    c.number_format = _QTY_FMT
    c.alignment = _RIGHT
    if total:
        c.font = _TOTAL_FONT
        c.border = _TOTAL_BORDER


def _save(wb: Workbook) -> io.BytesIO:
    """Finalize every sheet and return the workbook as BytesIO."""
    for ws in wb.worksheets:
        _auto_width(ws)
    buf = io.BytesIO()
    wb.save(buf)
    buf.seek(0)
    return buf


# ── 1. Stock Ledger ────────────────────────────────────────────────────────


def export_stock_ledger_excel(data: dict[str, Any]) -> io.BytesIO:
    wb = Workbook()
    ws = wb.active
    ws.title = label("stock_ledger")

    row = _write_title(
        ws,
        f"{label('stock_ledger')}: {data['name']}",
        f"{label('period')}: {data['from_date']} to {data['to_date']}"
        f"  |  {label('total_in')}: {data['total_in']}  |  {label('total_out')}: {data['total_out']}",
    )
    _write_header_row(ws, row, [
        label("date"), label("type"), label("reference"), label("reference_type"),
        label("party"), label("phone"), label("po_number"), label("grn_number"),
        label("in_qty"), label("out_qty"), label("balance"),
    ])
    row += 1

    for entry in data.get("entries", []):
        details = entry.get("details", {})
        is_opening = entry["reference_type"] == "Opening"
        ws.cell(row=row, column=1, value=entry["date"])
        ws.cell(row=row, column=2, value=label("opening") if is_opening else entry["type"])
        ws.cell(row=row, column=3, value=entry["reference"])
        ws.cell(row=row, column=4, value=entry["reference_type"])
        ws.cell(row=row, column=5, value=details.get("patient_name") or details.get("supplier") or "-")
        ws.cell(row=row, column=6, value=details.get("patient_phone") or "-")
        ws.cell(row=row, column=7, value=details.get("po_number") or "-")
        ws.cell(row=row, column=8, value=details.get("grn_number") or "-")
        if entry["type"] == "IN":
            _qty(ws, row, 9, entry["quantity"])
        else:
            _qty(ws, row, 10, entry["quantity"])
        _qty(ws, row, 11, entry["balance"])
        row += 1

    ws.cell(row=row, column=1, value=label("total")).font = _TOTAL_FONT
    _qty(ws, row, 9, data["total_in"], total=True)
    _qty(ws, row, 10, data["total_out"], total=True)
    _qty(ws, row, 11, data["current_stock"], total=True)

    return _save(wb)


# ── 2. Supplier Aging ──────────────────────────────────────────────────────


def export_supplier_aging_excel(data: dict[str, Any]) -> io.BytesIO:
    wb = Workbook()
    ws = wb.active
    ws.title = label("aging_summary")

    row = _write_title(ws, label("supplier_aging"), f"{label('as_of')} {data['as_of_date']}")
    _write_header_row(
        ws, row, [label("supplier"), *[label(b) for b in BUCKETS], label("total_outstanding")],
    )
    row += 1

    for supplier in data.get("suppliers", []):
        ws.cell(row=row, column=1, value=supplier["name"])
        for col, key in enumerate(BUCKETS, 2):
            _money(ws, row, col, supplier[key])
        _money(ws, row, len(BUCKETS) + 2, supplier["total"])
        row += 1

    totals = data.get("totals", {})
    ws.cell(row=row, column=1, value=label("total")).font = _TOTAL_FONT
    for col, key in enumerate(BUCKETS, 2):
        _money(ws, row, col, totals.get(key), total=True)
    _money(ws, row, len(BUCKETS) + 2, totals.get("total"), total=True)

    # Details sheet
    ds = wb.create_sheet(label("aging_details"))
    _write_header_row(ds, 1, [
        label("supplier"), label("po_number"), label("grn_number"), label("invoice_number"),
        label("invoice_date"), label("po_date"), label("grn_date"), label("due_date"),
        label("days_overdue"), label("aging_bucket"), label("amount_outstanding"),
    ])
    row = 2
    for d in data.get("details", []):
        ds.cell(row=row, column=1, value=d["supplier"])
        ds.cell(row=row, column=2, value=d["po_number"])
        ds.cell(row=row, column=3, value=d.get("grn_number") or "-")
        ds.cell(row=row, column=4, value=d.get("invoice_number") or "-")
        ds.cell(row=row, column=5, value=d.get("invoice_date") or "-")
        ds.cell(row=row, column=6, value=d.get("order_date") or "-")
        ds.cell(row=row, column=7, value=d.get("grn_date") or "-")
        ds.cell(row=row, column=8, value=d.get("payment_due_date") or "-")
        _qty(ds, row, 9, d["days_overdue"])
        ds.cell(row=row, column=10, value=label(d["bucket"]))
        _money(ds, row, 11, d["outstanding"])
        row += 1

    return _save(wb)


# ── 3. Sale Report ─────────────────────────────────────────────────────────


def export_sale_report_excel(data: dict[str, Any]) -> io.BytesIO:
    wb = Workbook()
    ws = wb.active
    ws.title = label("sale_report")

    row = _write_title(ws, f"{label('sale_report')} - {data['report_date']}", "")
    _write_header_row(ws, row, [
        label("s_no"), label("medicine_name"), label("medicine_category"),
        label("stock_opening"), label("sale_qty"), label("rate"), label("value"),
        label("stock_received"), label("closing_stock"),
    ])
    row += 1

    order = {cat["category"]: idx for idx, cat in enumerate(data.get("category_totals", []))}
    items = sorted(data.get("items", []), key=lambda i: (order.get(i["category"], len(order)), i["s_no"]))
    for s_no, item in enumerate(items, 1):
        ws.cell(row=row, column=1, value=s_no)
        ws.cell(row=row, column=2, value=item["medicine_name"])
        ws.cell(row=row, column=3, value=item["category"])
        _qty(ws, row, 4, item["opening_stock"])
        _qty(ws, row, 5, item["sale_qty"])
        _money(ws, row, 6, item["rate"])
        _money(ws, row, 7, item["value"])
        _qty(ws, row, 8, item["stock_received"])
        _qty(ws, row, 9, item["closing_stock"])
        if item.get("discrepancy"):
            ws.cell(row=row, column=9).fill = _DISCREPANCY_FILL
        row += 1

    row += 1
    for cat in data.get("category_totals", []):
        ws.cell(row=row, column=1, value=f"{label('total_sale')} ({cat['category']})").font = _TOTAL_FONT
        ws.cell(row=row, column=3, value=cat["category"])
        _qty(ws, row, 5, cat["total_qty"], total=True)
        _money(ws, row, 7, cat["total_value"], total=True)
        row += 1

    ws.cell(row=row, column=1, value=label("grand_total")).font = _TOTAL_FONT
    ws.cell(row=row, column=3, value="+".join(c["category"] for c in data.get("category_totals", [])))
    _money(ws, row, 7, data["grand_total_value"], total=True)

    return _save(wb)


# ── 4. Supplier Ledger ─────────────────────────────────────────────────────


def export_supplier_ledger_excel(data: dict[str, Any]) -> io.BytesIO:
    wb = Workbook()
    ws = wb.active
    ws.title = label("supplier_ledger")

    row = _write_title(ws, f"{label('supplier_ledger')}: {data['supplier']}", "")
    _write_header_row(ws, row, [
        label("date"), label("reference"), label("description"),
        label("debit"), label("credit"), label("balance"),
    ])
    row += 1

    for entry in data.get("entries", []):
        ws.cell(row=row, column=1, value=entry["date"])
        ws.cell(row=row, column=2, value=entry["reference"])
        ws.cell(row=row, column=3, value=entry["description"])
        _money(ws, row, 4 if entry["type"] == "debit" else 5, entry["amount"])
        _money(ws, row, 6, entry["balance"])
        row += 1

    summary = data["summary"]
    ws.cell(row=row, column=1, value=label("total")).font = _TOTAL_FONT
    _money(ws, row, 4, summary["total_debits"], total=True)
    _money(ws, row, 5, summary["total_credits"], total=True)
    _money(ws, row, 6, summary["balance"], total=True)

    row += 2
    for key, value in (
        ("total_debits", summary["total_debits"]),
        ("total_credits", summary["total_credits"]),
        ("balance_due", summary["balance"]),
        ("pending_amount", summary["pending_amount"]),
    ):
        ws.cell(row=row, column=1, value=label(key)).font = _TOTAL_FONT
        _money(ws, row, 2, value)
        row += 1
    for key in ("pending_po_count", "total_po_count", "total_payment_count"):
        ws.cell(row=row, column=1, value=label(key)).font = _TOTAL_FONT
        _qty(ws, row, 2, summary[key])
        row += 1

    # Pending bills sheet
    ps = wb.create_sheet(label("pending_bills"))
    _write_header_row(ps, 1, [
        label("po_number"), label("grn_number"), label("invoice_number"), label("grn_date"),
        label("due_date"), label("payment_status"), label("bill_amount"),
        label("paid_amount"), label("pending_amount"),
    ])
    row = 2
    for bill in data.get("pending_bills", []):
        ps.cell(row=row, column=1, value=bill["po_number"])
        ps.cell(row=row, column=2, value=bill.get("grn_number") or "-")
        ps.cell(row=row, column=3, value=bill.get("invoice_number") or "-")
        ps.cell(row=row, column=4, value=bill.get("grn_date") or "-")
        ps.cell(row=row, column=5, value=bill.get("payment_due_date") or "-")
        ps.cell(row=row, column=6, value=bill["payment_status"])
        _money(ps, row, 7, bill["total_amount"])
        _money(ps, row, 8, bill["paid_amount"])
        _money(ps, row, 9, bill["pending_amount"])
        row += 1
    ps.cell(row=row, column=1, value=label("total")).font = _TOTAL_FONT
    _money(ps, row, 9, summary["pending_amount"], total=True)

    return _save(wb)
