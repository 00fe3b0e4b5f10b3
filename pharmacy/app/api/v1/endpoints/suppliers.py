from __future__ import annotations

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from pharmacy.app.api.v1.endpoints.exports import XLSX_MIME, export_response
from pharmacy.app.core.database import get_db
from pharmacy.app.schemas.reports import SupplierLedgerResponse
from pharmacy.app.services.export_excel import export_supplier_ledger_excel
from pharmacy.app.services.supplier_ledger import get_supplier_ledger as _get_supplier_ledger

router = APIRouter()


def _ledger_or_404(
    db: Session, supplier_id: UUID, from_date: date | None, to_date: date | None,
) -> dict:
    try:
        return _get_supplier_ledger(db, supplier_id, from_date, to_date)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/{supplier_id}/ledger", response_model=SupplierLedgerResponse)
def supplier_ledger(
    supplier_id: UUID,
    from_date: date | None = Query(None),
    to_date: date | None = Query(None),
    db: Session = Depends(get_db),
) -> dict[str, object]:
    return _ledger_or_404(db, supplier_id, from_date, to_date)


@router.get("/{supplier_id}/ledger/export/excel")
def supplier_ledger_export_excel(
    supplier_id: UUID,
    from_date: date | None = Query(None),
    to_date: date | None = Query(None),
    db: Session = Depends(get_db),
) -> StreamingResponse:
    data = _ledger_or_404(db, supplier_id, from_date, to_date)
    buf = export_supplier_ledger_excel(data)
    filename = f"Supplier_Ledger_{data['supplier'].replace(' ', '_')}.xlsx"
    return export_response(buf, XLSX_MIME, filename)
