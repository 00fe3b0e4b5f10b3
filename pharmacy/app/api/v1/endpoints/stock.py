from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from pharmacy.app.api.deps import as_of, report_window
from pharmacy.app.api.v1.endpoints.exports import PDF_MIME, XLSX_MIME, export_response
from pharmacy.app.core.config import settings
from pharmacy.app.core.database import get_db
from pharmacy.app.schemas.reports import (
    ExpiryAlertsResponse,
    StockLedgerResponse,
    StockMovementsResponse,
)
from pharmacy.app.services.expiry import get_expiry_alerts as _get_expiry_alerts
from pharmacy.app.services.export_excel import export_stock_ledger_excel
from pharmacy.app.services.export_pdf import export_stock_ledger_pdf
from pharmacy.app.services.ledger import Direction
from pharmacy.app.services.stock_ledger import (
    get_stock_ledger as _get_stock_ledger,
    get_stock_movements as _get_stock_movements,
)

router = APIRouter()


def _ledger_or_404(
    db: Session, item_id: int, window: tuple[date, date], direction: Direction | None = None,
) -> dict:
    fd, td = window
    try:
        return _get_stock_ledger(db, item_id, fd, td, direction=direction)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


# ── Movement summary ────────────────────────────────────────────────────────


@router.get("/movements", response_model=StockMovementsResponse)
def stock_movements(
    window: tuple[date, date] = Depends(report_window),
    search: str | None = Query(None),
    db: Session = Depends(get_db),
) -> dict[str, object]:
    fd, td = window
    return _get_stock_movements(db, fd, td, search=search)


# ── Expiry alerts ───────────────────────────────────────────────────────────


@router.get("/expiry-alerts", response_model=ExpiryAlertsResponse)
def expiry_alerts(
    as_of_date: date = Depends(as_of),
    within_days: int | None = Query(None, ge=0),
    db: Session = Depends(get_db),
) -> dict[str, object]:
    if within_days is None:
        within_days = settings.EXPIRY_ALERT_DAYS
    return _get_expiry_alerts(db, as_of_date, within_days)


# ── Stock ledger ────────────────────────────────────────────────────────────


@router.get("/{item_id}/ledger", response_model=StockLedgerResponse)
def stock_ledger(
    item_id: int,
    window: tuple[date, date] = Depends(report_window),
    direction: Direction | None = Query(None),
    db: Session = Depends(get_db),
) -> dict[str, object]:
    return _ledger_or_404(db, item_id, window, direction)


@router.get("/{item_id}/ledger/export/excel")
def stock_ledger_export_excel(
    item_id: int,
    window: tuple[date, date] = Depends(report_window),
    direction: Direction | None = Query(None),
    db: Session = Depends(get_db),
) -> StreamingResponse:
    data = _ledger_or_404(db, item_id, window, direction)
    buf = export_stock_ledger_excel(data)
    filename = f"Stock_Ledger_{data['name'].replace(' ', '_')}_{data['from_date']}_to_{data['to_date']}.xlsx"
    return export_response(buf, XLSX_MIME, filename)


@router.get("/{item_id}/ledger/export/pdf")
def stock_ledger_export_pdf(
    item_id: int,
    window: tuple[date, date] = Depends(report_window),
    direction: Direction | None = Query(None),
    db: Session = Depends(get_db),
) -> StreamingResponse:
    data = _ledger_or_404(db, item_id, window, direction)
    buf = export_stock_ledger_pdf(data)
    filename = f"Stock_Ledger_{data['name'].replace(' ', '_')}_{data['from_date']}_to_{data['to_date']}.pdf"
    return export_response(buf, PDF_MIME, filename)
