"""Tests for supplier payables aging."""
from __future__ import annotations

import random
from datetime import date, timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from pharmacy.app.models.supplier import (
    PaymentStatus,
    POStatus,
    Supplier,
    SupplierPayment,
    SupplierPaymentStatus,
)
from pharmacy.app.services.aging import (
    BUCKETS,
    Obligation,
    bucket,
    bucket_obligations,
    get_aging_summary,
    get_supplier_aging,
    outstanding_amount,
)

ZERO = Decimal("0")
AS_OF = date(2024, 6, 1)


# ─── Pure bucketing ──────────────────────────────────────────────────────────


class TestBucket:
    @pytest.mark.parametrize(
        "days, expected",
        [
            (-10, "current"),
            (0, "current"),
            (1, "1-30"),
            (30, "1-30"),
            (31, "31-60"),
            (60, "31-60"),
            (61, "61-90"),
            (90, "61-90"),
            (91, "91-120"),
            (120, "91-120"),
            (121, "120+"),
            (1000, "120+"),
        ],
    )
    def test_thresholds(self, days: int, expected: str) -> None:
        assert bucket(days) == expected

    def test_ninety_two_days_overdue(self) -> None:
        result = bucket_obligations(
            [Obligation(due_date=date(2024, 3, 1), outstanding=Decimal("1000"))], AS_OF
        )
        [c] = result.classified
        assert c.days_overdue == 92
        assert c.bucket == "91-120"
        assert result.buckets["91-120"] == Decimal("1000")
        assert result.total == Decimal("1000")

    def test_not_yet_due_is_current_and_clamped(self) -> None:
        result = bucket_obligations(
            [Obligation(due_date=AS_OF + timedelta(days=10), outstanding=Decimal("50"))], AS_OF
        )
        [c] = result.classified
        assert c.bucket == "current"
        assert c.signed_days_overdue == -10
        assert c.days_overdue == 0
        assert result.overdue == ZERO

    def test_empty_input(self) -> None:
        result = bucket_obligations([], AS_OF)
        assert result.total == ZERO
        assert all(v == ZERO for v in result.buckets.values())
        assert list(result.buckets) == list(BUCKETS)

    @pytest.mark.parametrize("seed", range(20))
    def test_bucket_totals_match_outstanding(self, seed: int) -> None:
        rng = random.Random(seed)
        obligations = [
            Obligation(
                due_date=AS_OF - timedelta(days=rng.randint(-60, 400)),
                outstanding=Decimal(rng.randint(1, 100000)) / 100,
            )
            for _ in range(rng.randint(0, 40))
        ]
        result = bucket_obligations(obligations, AS_OF)
        expected = sum((o.outstanding for o in obligations), ZERO)
        assert sum(result.buckets.values(), ZERO) == expected
        assert result.total == expected
        for c in result.classified:
            assert c.bucket == bucket(c.signed_days_overdue)

    def test_repeatable(self) -> None:
        obligations = [Obligation(due_date=date(2024, 1, 1), outstanding=Decimal("10"))]
        assert bucket_obligations(obligations, AS_OF) == bucket_obligations(obligations, AS_OF)


class TestOutstandingAmount:
    def test_partial(self) -> None:
        assert outstanding_amount(Decimal("1000"), Decimal("400")) == Decimal("600")

    def test_settled_or_overpaid(self) -> None:
        assert outstanding_amount(Decimal("100"), Decimal("100")) is None
        assert outstanding_amount(Decimal("100"), Decimal("150")) is None

    def test_missing_values(self) -> None:
        assert outstanding_amount(Decimal("100"), None) == Decimal("100")
        assert outstanding_amount(None, None) is None


# ─── Supplier aging report ───────────────────────────────────────────────────


class TestSupplierAgingReport:
    def test_empty(self, db: Session) -> None:
        result = get_supplier_aging(db, AS_OF)
        assert result["suppliers"] == []
        assert result["details"] == []
        assert Decimal(result["totals"]["total"]) == ZERO
        assert all(v == "0.00" for v in result["percentages"].values())

    def test_buckets_per_supplier(
        self, db: Session, supplier: Supplier, other_supplier: Supplier, make_po,
    ) -> None:
        make_po(supplier, "PO-1", total="1000", due_date=date(2024, 3, 1))
        make_po(supplier, "PO-2", total="200", due_date=date(2024, 6, 15))
        make_po(other_supplier, "PO-3", total="300", due_date=date(2024, 5, 20))

        result = get_supplier_aging(db, AS_OF)

        assert [s["name"] for s in result["suppliers"]] == ["Acme Drugs", "Gulf Medical Supplies"]
        acme, gulf = result["suppliers"]
        assert Decimal(acme["1-30"]) == Decimal("300")
        assert Decimal(gulf["91-120"]) == Decimal("1000")
        assert Decimal(gulf["current"]) == Decimal("200")
        assert Decimal(gulf["total"]) == Decimal("1200")
        assert gulf["supplier_id"] == str(supplier.id)

        totals = result["totals"]
        assert totals["name"] == "Total"
        assert Decimal(totals["total"]) == Decimal("1500")
        assert sum(Decimal(totals[b]) for b in BUCKETS) == Decimal("1500")
        assert result["percentages"]["91-120"] == "66.67"

        detail = next(d for d in result["details"] if d["po_number"] == "PO-1")
        assert detail["days_overdue"] == 92
        assert detail["bucket"] == "91-120"
        assert detail["grn_number"] == "GRN-PO-1"

    def test_payments_reduce_outstanding(
        self, db: Session, supplier: Supplier, make_po,
    ) -> None:
        po = make_po(
            supplier, "PO-1", total="1000", due_date=date(2024, 5, 1),
            payment_status=PaymentStatus.PARTIAL,
        )
        db.add_all([
            SupplierPayment(
                supplier_id=supplier.id, purchase_order_id=po.id,
                amount=Decimal("400"), payment_date=date(2024, 5, 5),
            ),
            SupplierPayment(
                supplier_id=supplier.id, purchase_order_id=po.id,
                amount=Decimal("300"), payment_date=date(2024, 5, 6),
                status=SupplierPaymentStatus.FAILED,
            ),
        ])
        db.flush()

        result = get_supplier_aging(db, AS_OF)
        [row] = result["suppliers"]
        assert Decimal(row["31-60"]) == Decimal("600")
        assert Decimal(row["total"]) == Decimal("600")

    def test_excludes_paid_unreceived_and_fully_settled(
        self, db: Session, supplier: Supplier, make_po,
    ) -> None:
        make_po(supplier, "PO-PAID", total="500", payment_status=PaymentStatus.PAID)
        make_po(supplier, "PO-OPEN", total="500", status=POStatus.PENDING)
        settled = make_po(supplier, "PO-SETTLED", total="100")
        db.add(SupplierPayment(
            supplier_id=supplier.id, purchase_order_id=settled.id,
            amount=Decimal("100"), payment_date=date(2024, 2, 1),
        ))
        db.flush()

        result = get_supplier_aging(db, AS_OF)
        assert result["suppliers"] == []

    def test_due_date_falls_back_to_grn_date(
        self, db: Session, supplier: Supplier, make_po,
    ) -> None:
        make_po(supplier, "PO-1", total="100", order_date=date(2024, 1, 1), grn_date=date(2024, 5, 2))
        result = get_supplier_aging(db, AS_OF)
        [detail] = result["details"]
        assert detail["due_date"] == "2024-05-02"
        assert detail["days_overdue"] == 30
        assert detail["bucket"] == "1-30"


class TestAgingSummary:
    def test_counts_and_overdue(
        self, db: Session, supplier: Supplier, other_supplier: Supplier, make_po,
    ) -> None:
        make_po(supplier, "PO-1", total="1000", due_date=date(2024, 3, 1))
        make_po(supplier, "PO-2", total="200", due_date=date(2024, 7, 1))
        make_po(other_supplier, "PO-3", total="300", due_date=date(2024, 1, 1))

        result = get_aging_summary(db, AS_OF)
        assert Decimal(result["total_pending"]) == Decimal("1500")
        assert Decimal(result["total_overdue"]) == Decimal("1300")
        assert result["overdue_count"] == 2
        assert result["suppliers_with_overdue"] == 2
        by_bucket = {b["bucket"]: b for b in result["buckets"]}
        assert by_bucket["current"]["count"] == 1
        assert by_bucket["120+"]["count"] == 1


# ─── API ─────────────────────────────────────────────────────────────────────


class TestAgingAPI:
    def test_supplier_aging_endpoint(
        self, client: TestClient, supplier: Supplier, make_po,
    ) -> None:
        make_po(supplier, "PO-1", total="1000", due_date=date(2024, 3, 1))
        resp = client.get("/api/v1/reports/supplier-aging", params={"as_of_date": "2024-06-01"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["as_of_date"] == "2024-06-01"
        assert data["buckets"] == list(BUCKETS)
        assert Decimal(data["suppliers"][0]["91-120"]) == Decimal("1000")

    def test_summary_endpoint(self, client: TestClient) -> None:
        resp = client.get("/api/v1/reports/supplier-aging/summary")
        assert resp.status_code == 200
        assert resp.json()["overdue_count"] == 0

    def test_bad_date_rejected(self, client: TestClient) -> None:
        resp = client.get("/api/v1/reports/supplier-aging", params={"as_of_date": "not-a-date"})
        assert resp.status_code == 422
