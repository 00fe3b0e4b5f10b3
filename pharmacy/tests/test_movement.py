"""Tests for per-item movement aggregation and the daily sale report."""
from __future__ import annotations

import random
from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from pharmacy.app.models.stock import DayReport, StockItem
from pharmacy.app.models.supplier import POStatus, Supplier
from pharmacy.app.services.movement import (
    KeyResolver,
    MovementRow,
    active_rows,
    aggregate,
    normalize_key,
    tally,
)
from pharmacy.app.services.sale_report import get_sale_report

DAY = date(2024, 5, 1)


# ─── Pure aggregation ────────────────────────────────────────────────────────


class TestNormalizeKey:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (42, "42"),
            ("42", "42"),
            (" 007 ", "7"),
            ("  Paracetamol 500MG ", "paracetamol 500mg"),
            (None, ""),
        ],
    )
    def test_normalize(self, value: object, expected: str) -> None:
        assert normalize_key(value) == expected


class TestKeyResolver:
    def test_id_and_name_resolve_to_same_key(self) -> None:
        resolver = KeyResolver.from_items([(7, "Paracetamol"), (8, "Syrup")])
        assert resolver.resolve(7) == "7"
        assert resolver.resolve("7") == "7"
        assert resolver.resolve(" PARACETAMOL ") == "7"
        assert "syrup" in resolver
        assert "unknown" not in resolver

    def test_unknown_identifier_keeps_its_own_key(self) -> None:
        resolver = KeyResolver.from_items([(7, "Paracetamol")])
        assert resolver.resolve("Aspirin") == "aspirin"

    def test_duplicate_name_keeps_first_item(self) -> None:
        resolver = KeyResolver.from_items([(1, "Syrup"), (2, "Syrup")])
        assert resolver.resolve("syrup") == "1"

    def test_tally_merges_id_and_name(self) -> None:
        resolver = KeyResolver.from_items([(7, "Paracetamol")])
        totals = tally([(7, 10), ("paracetamol", 5), ("", 3), (None, 4), ("Aspirin", None)], resolver)
        assert totals == {"7": 15, "aspirin": 0}


class TestAggregate:
    def test_closing_and_discrepancy(self) -> None:
        [row] = aggregate({"a": 100}, {"a": 30}, {"a": 10}, {"a": 75})
        assert row.closing == 80
        assert row.discrepancy == 5

    def test_union_of_keys_defaults_to_zero(self) -> None:
        rows = aggregate({"a": 5}, {"b": 2}, {"c": 3}, {"a": 5, "d": 9})
        assert [r.entity_key for r in rows] == ["a", "b", "c", "d"]
        b = rows[1]
        assert (b.opening, b.issued, b.received, b.current_stock) == (0, 2, 0, 0)
        assert b.closing == -2
        assert not b.has_opening
        assert rows[0].has_opening

    def test_missing_values_count_as_zero(self) -> None:
        [row] = aggregate({"a": None}, {}, {"a": None}, {})
        assert row.closing == 0
        assert row.discrepancy == 0

    @pytest.mark.parametrize("seed", range(20))
    def test_movement_identity(self, seed: int) -> None:
        rng = random.Random(seed)
        keys = [f"k{i}" for i in range(10)]

        def _sample() -> dict[str, int]:
            return {k: rng.randint(0, 200) for k in keys if rng.random() < 0.6}

        rows = aggregate(_sample(), _sample(), _sample(), _sample())
        for row in rows:
            assert row.closing - row.opening - row.received + row.issued == 0

    def test_repeatable(self) -> None:
        args = ({"a": 1}, {"a": 2}, {"b": 3}, {"a": 4})
        assert aggregate(*args) == aggregate(*args)

    def test_active_rows(self) -> None:
        rows = [
            MovementRow("idle", 0, 0, 0, 0),
            MovementRow("held", 5, 0, 0, 5),
            MovementRow("sold", 0, 1, 0, 0),
        ]
        assert [r.entity_key for r in active_rows(rows)] == ["held", "sold"]


# ─── Daily sale report ───────────────────────────────────────────────────────


class TestSaleReport:
    def test_opening_from_snapshot_and_discrepancy(
        self,
        db: Session,
        syrup: StockItem,
        supplier: Supplier,
        make_invoice,
        make_po,
    ) -> None:
        db.add(DayReport(report_date=DAY, stock_snapshot={"Cough Syrup": {"opening": 100}}))
        make_invoice("INV-1", DAY, [(syrup, 30)])
        make_po(supplier, "PO-1", order_date=DAY, lines=[(syrup, 10, None)])
        db.flush()

        result = get_sale_report(db, DAY)

        [row] = result["items"]
        assert row["opening_stock"] == 100
        assert row["sale_qty"] == 30
        assert row["stock_received"] == 10
        assert row["closing_stock"] == 80
        assert row["current_stock"] == 75
        assert row["discrepancy"] == 5
        assert row["is_from_snapshot"] is True
        # no MRP, so the unit price is the rate
        assert Decimal(row["value"]) == Decimal("1500")
        assert result["discrepancy_count"] == 1

    def test_name_only_lines_and_tab_quantities(
        self,
        db: Session,
        paracetamol: StockItem,
        supplier: Supplier,
        make_invoice,
        make_po,
    ) -> None:
        make_invoice("INV-1", DAY, [(paracetamol, 4), ("  paracetamol 500MG", 6)])
        make_po(supplier, "PO-1", order_date=DAY, lines=[(paracetamol, 2, 20)])

        result = get_sale_report(db, DAY)

        [row] = result["items"]
        assert row["sale_qty"] == 10
        assert row["stock_received"] == 20
        # no snapshot: opening falls back to current stock
        assert row["opening_stock"] == 50
        assert row["is_from_snapshot"] is False
        assert row["closing_stock"] == 60
        assert Decimal(row["rate"]) == Decimal("1.50")

    def test_idle_items_and_other_days_excluded(
        self,
        db: Session,
        paracetamol: StockItem,
        syrup: StockItem,
        supplier: Supplier,
        make_invoice,
        make_po,
    ) -> None:
        make_invoice("INV-OLD", date(2024, 4, 30), [(paracetamol, 4)])
        make_po(supplier, "PO-OPEN", order_date=DAY, status=POStatus.PENDING, lines=[(syrup, 5, None)])

        result = get_sale_report(db, DAY)
        assert result["items"] == []
        assert Decimal(result["grand_total_value"]) == Decimal("0")

    def test_category_totals(
        self,
        db: Session,
        paracetamol: StockItem,
        syrup: StockItem,
        make_invoice,
    ) -> None:
        make_invoice("INV-1", DAY, [(paracetamol, 10), (syrup, 2)])

        result = get_sale_report(db, DAY)

        totals = {c["category"]: c for c in result["category_totals"]}
        assert [c["category"] for c in result["category_totals"]] == ["Syrup", "Tablet"]
        assert totals["Tablet"]["total_qty"] == 10
        assert Decimal(totals["Tablet"]["total_value"]) == Decimal("15")
        assert Decimal(totals["Syrup"]["total_value"]) == Decimal("100")
        assert Decimal(result["grand_total_value"]) == Decimal("115")
        assert [i["s_no"] for i in result["items"]] == [1, 2]

    def test_endpoint(self, client: TestClient, paracetamol: StockItem, make_invoice) -> None:
        make_invoice("INV-1", DAY, [(paracetamol, 3)])
        resp = client.get("/api/v1/reports/sale-report", params={"report_date": "2024-05-01"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["report_date"] == "2024-05-01"
        assert data["items"][0]["medicine_name"] == "Paracetamol 500mg"
        assert data["items"][0]["sale_qty"] == 3
