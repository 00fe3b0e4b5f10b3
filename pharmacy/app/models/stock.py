from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Date,
    DateTime,
    Index,
    Integer,
    Numeric,
    String,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from pharmacy.app.core.database import Base


class StockItem(Base):
    """A medicine or consumable held in the pharmacy store.

    ``current_stock`` is the live on-hand quantity (in tabs/units). Reports
    never write it back; ledgers and movement reports derive historical
    balances from it.
    """

    __tablename__ = "stock_items"

    item_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    batch_no: Mapped[str | None] = mapped_column(String(100), nullable=True)
    expiry_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    current_stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    minimum_stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    unit_price: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2), nullable=False, default=Decimal("0")
    )
    mrp: Mapped[Decimal | None] = mapped_column(Numeric(precision=12, scale=2), nullable=True)
    supplier: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("current_stock >= 0", name="ck_stock_item_stock_non_negative"),
        Index("ix_stock_items_name", "name"),
        Index("ix_stock_items_category", "category"),
    )


class DayReport(Base):
    """End-of-day register; ``stock_snapshot`` holds opening stock per item name."""

    __tablename__ = "day_reports"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    report_date: Mapped[date] = mapped_column(Date, unique=True, nullable=False)
    stock_snapshot: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
