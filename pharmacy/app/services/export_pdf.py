"""PDF export functions for pharmacy reports using fpdf2."""
from __future__ import annotations

import io
from typing import Any

from fpdf import FPDF

from pharmacy.app.core.config import settings
from pharmacy.app.services.aging import BUCKETS
from pharmacy.app.services.export_labels import label

# ── Shared helpers ──────────────────────────────────────────────────────────

_COL_BG = (33, 37, 41)     # dark header
_ALT_BG = (248, 249, 250)  # zebra rows
_LINE_H = 7
_FONT = "Helvetica"


def _new_pdf(title: str, subtitle: str) -> FPDF:
    """Create a landscape PDF with title and subtitle."""
    pdf = FPDF(orientation="L")
    pdf.add_page()
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.set_font(_FONT, "B", 16)
    pdf.cell(0, 10, _safe_text(title), new_x="LMARGIN", new_y="NEXT", align="C")
    pdf.set_font(_FONT, "", 9)
    pdf.cell(0, 6, _safe_text(subtitle), new_x="LMARGIN", new_y="NEXT", align="C")
    pdf.ln(4)
    return pdf


def _header_row(pdf: FPDF, headers: list[str], widths: list[int]) -> None:
    """Draw a colored header row."""
    pdf.set_fill_color(*_COL_BG)
    pdf.set_text_color(255, 255, 255)
    pdf.set_font(_FONT, "B", 8)
    for i, (h, w) in enumerate(zip(headers, widths)):
        align = "R" if i > 0 else "L"
        pdf.cell(w, _LINE_H, h, border=1, fill=True, align=align)
    pdf.ln()
    pdf.set_text_color(0, 0, 0)


def _data_row(
    pdf: FPDF, values: list[str], widths: list[int], bold: bool = False, shade: bool = False,
) -> None:
    """Draw a data row."""
    pdf.set_font(_FONT, "B" if bold else "", 8)
    if shade:
        pdf.set_fill_color(*_ALT_BG)
    for i, (v, w) in enumerate(zip(values, widths)):
        align = "R" if i > 0 else "L"
        pdf.cell(w, _LINE_H, _safe_text(v), border="B", align=align, fill=shade)
    pdf.ln()


def _fmt(value: Any) -> str:
    """Format a numeric string for display."""
    try:
        n = float(value)
        return f"{n:,.2f}"
    except (ValueError, TypeError):
        return str(value)


def _safe_text(text: Any) -> str:
    """Replace non-latin-1 characters for the built-in PDF fonts."""
    return str(text).encode("latin-1", errors="replace").decode("latin-1")


def _to_bytes(pdf: FPDF) -> io.BytesIO:
    """Output PDF to BytesIO."""
    buf = io.BytesIO(bytes(pdf.output()))
    buf.seek(0)
    return buf


# ── 1. Supplier Aging ──────────────────────────────────────────────────────


def export_supplier_aging_pdf(data: dict[str, Any]) -> io.BytesIO:
    pdf = _new_pdf(
        f"{settings.REPORT_TITLE} - {label('supplier_aging')}",
        f"{label('as_of')}: {data['as_of_date']}",
    )

    widths = [61, 30, 30, 30, 30, 30, 30, 36]
    _header_row(pdf, [label("supplier"), *[label(b) for b in BUCKETS], label("total")], widths)
    for idx, supplier in enumerate(data.get("suppliers", [])):
        _data_row(
            pdf,
            [supplier["name"][:30], *[_fmt(supplier[b]) for b in BUCKETS], _fmt(supplier["total"])],
            widths,
            shade=idx % 2 == 0,
        )

    totals = data.get("totals", {})
    _data_row(
        pdf,
        [label("total"), *[_fmt(totals.get(b, "0")) for b in BUCKETS], _fmt(totals.get("total", "0"))],
        widths,
        bold=True,
    )

    return _to_bytes(pdf)


# ── 2. Stock Ledger ────────────────────────────────────────────────────────


def export_stock_ledger_pdf(data: dict[str, Any]) -> io.BytesIO:
    pdf = _new_pdf(
        f"{label('stock_ledger')}: {data['name']}",
        f"{label('period')}: {data['from_date']} to {data['to_date']}"
        f"  |  {label('current_stock')}: {data['current_stock']}",
    )

    widths = [28, 22, 40, 28, 70, 25, 25, 30]
    _header_row(pdf, [
        label("date"), label("type"), label("reference"), label("reference_type"),
        label("party"), label("in_qty"), label("out_qty"), label("balance"),
    ], widths)

    for idx, entry in enumerate(data.get("entries", [])):
        details = entry.get("details", {})
        is_in = entry["type"] == "IN"
        _data_row(pdf, [
            entry["date"],
            label("opening") if entry["reference_type"] == "Opening" else entry["type"],
            str(entry["reference"])[:20],
            entry["reference_type"],
            str(details.get("patient_name") or details.get("supplier") or "-")[:35],
            str(entry["quantity"]) if is_in else "",
            "" if is_in else str(entry["quantity"]),
            str(entry["balance"]),
        ], widths, shade=idx % 2 == 0)

    _data_row(pdf, [
        label("total"), "", "", "", "",
        str(data["total_in"]), str(data["total_out"]), str(data["current_stock"]),
    ], widths, bold=True)

    return _to_bytes(pdf)
