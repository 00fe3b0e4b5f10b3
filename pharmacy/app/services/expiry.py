from __future__ import annotations

from datetime import date

from sqlalchemy.orm import Session

from pharmacy.app.models.stock import StockItem

EXPIRED = "expired"
BANDS: tuple[str, ...] = (EXPIRED, "30", "60", "90")


def days_until(expiry_date: date, as_of: date) -> int:
    return (expiry_date - as_of).days


def expiry_band(days_left: int) -> str | None:
    """Band for an item expiring in *days_left* days; ``None`` beyond 90 days."""
    if days_left <= 0:
        return EXPIRED
    if days_left <= 30:
        return "30"
    if days_left <= 60:
        return "60"
    if days_left <= 90:
        return "90"
    return None


def get_expiry_alerts(db: Session, as_of_date: date, within_days: int = 90) -> dict:
    """Stock items already expired or expiring within *within_days*."""
    items = (
        db.query(StockItem)
        .filter(StockItem.expiry_date.isnot(None))
        .order_by(StockItem.expiry_date.asc(), StockItem.name.asc())
        .all()
    )

    alerts = []
    counts = {band: 0 for band in BANDS}
    for item in items:
        days_left = days_until(item.expiry_date, as_of_date)
        if days_left > within_days:
            continue
        band = expiry_band(days_left)
        if band:
            counts[band] += 1
        alerts.append(
            {
                "item_id": item.item_id,
                "name": item.name,
                "batch_no": item.batch_no,
                "category": item.category,
                "expiry_date": item.expiry_date.isoformat(),
                "current_stock": item.current_stock,
                "days_left": days_left,
                "band": band,
            }
        )

    return {
        "as_of_date": str(as_of_date),
        "within_days": within_days,
        "items": alerts,
        "counts": counts,
    }
