from __future__ import annotations

from datetime import date, timedelta

from fastapi import HTTPException, Query, status

from pharmacy.app.core.config import settings


def report_window(
    from_date: date | None = Query(None),
    to_date: date | None = Query(None),
) -> tuple[date, date]:
    """Reporting window; defaults to the configured number of days ending today."""
    if to_date is None:
        to_date = date.today()
    if from_date is None:
        from_date = to_date - timedelta(days=settings.LEDGER_DEFAULT_WINDOW_DAYS)
    if from_date > to_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="from_date must be on or before to_date",
        )
    return from_date, to_date


def as_of(as_of_date: date | None = Query(None)) -> date:
    return as_of_date or date.today()
