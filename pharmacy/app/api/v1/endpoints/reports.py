from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from pharmacy.app.api.deps import as_of
from pharmacy.app.api.v1.endpoints.exports import PDF_MIME, XLSX_MIME, export_response
from pharmacy.app.core.database import get_db
from pharmacy.app.schemas.reports import (
    AgingSummaryResponse,
    SaleReportResponse,
    SupplierAgingResponse,
)
from pharmacy.app.services.aging import (
    get_aging_summary as _get_aging_summary,
    get_supplier_aging as _get_supplier_aging,
)
from pharmacy.app.services.export_excel import (
    export_sale_report_excel,
    export_supplier_aging_excel,
)
from pharmacy.app.services.export_pdf import export_supplier_aging_pdf
from pharmacy.app.services.sale_report import get_sale_report as _get_sale_report

router = APIRouter()


def _report_date(report_date: date | None = Query(None)) -> date:
    return report_date or date.today()


# ── Supplier Aging ─────────────────────────────────────────────────────────


@router.get("/supplier-aging", response_model=SupplierAgingResponse)
def supplier_aging(
    as_of_date: date = Depends(as_of),
    db: Session = Depends(get_db),
) -> dict[str, object]:
    return _get_supplier_aging(db, as_of_date)


@router.get("/supplier-aging/summary", response_model=AgingSummaryResponse)
def supplier_aging_summary(
    as_of_date: date = Depends(as_of),
    db: Session = Depends(get_db),
) -> dict[str, object]:
    return _get_aging_summary(db, as_of_date)


@router.get("/supplier-aging/export/excel")
def supplier_aging_export_excel(
    as_of_date: date = Depends(as_of),
    db: Session = Depends(get_db),
) -> StreamingResponse:
    data = _get_supplier_aging(db, as_of_date)
    buf = export_supplier_aging_excel(data)
    return export_response(buf, XLSX_MIME, f"Supplier_Aging_Report_{as_of_date}.xlsx")


@router.get("/supplier-aging/export/pdf")
def supplier_aging_export_pdf(
    as_of_date: date = Depends(as_of),
    db: Session = Depends(get_db),
) -> StreamingResponse:
    data = _get_supplier_aging(db, as_of_date)
    buf = export_supplier_aging_pdf(data)
    return export_response(buf, PDF_MIME, f"Supplier_Aging_Report_{as_of_date}.pdf")


# ── Sale Report ────────────────────────────────────────────────────────────


@router.get("/sale-report", response_model=SaleReportResponse)
def sale_report(
    report_date: date = Depends(_report_date),
    db: Session = Depends(get_db),
) -> dict[str, object]:
    return _get_sale_report(db, report_date)


@router.get("/sale-report/export/excel")
def sale_report_export_excel(
    report_date: date = Depends(_report_date),
    db: Session = Depends(get_db),
) -> StreamingResponse:
    data = _get_sale_report(db, report_date)
    buf = export_sale_report_excel(data)
    return export_response(buf, XLSX_MIME, f"sale-report-{report_date}.xlsx")
