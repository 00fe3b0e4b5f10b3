"""Tests for the stock ledger reconciliation passes."""
from __future__ import annotations

import random
from datetime import date

import pytest

from pharmacy.app.services.ledger import (
    Direction,
    LedgerEntry,
    ReferenceType,
    apply_forward,
    derive_opening_balance,
    filter_entries,
    ledger_totals,
    reconcile,
    sort_entries,
    with_opening_entry,
)


def _entry(day: int, direction: str, qty: int | None, ref: str = "") -> LedgerEntry:
    return LedgerEntry(
        entry_date=date(2024, 1, day),
        direction=Direction(direction),
        quantity=qty,  # type: ignore[arg-type]
        reference=ref,
    )


def _random_entries(rng: random.Random, n: int) -> list[LedgerEntry]:
    return [
        _entry(rng.randint(1, 28), rng.choice(["IN", "OUT"]), rng.randint(0, 500))
        for _ in range(n)
    ]


# ─── Worked examples ─────────────────────────────────────────────────────────


class TestReconcile:
    def test_opening_and_running_balances(self) -> None:
        result = reconcile(50, [_entry(1, "IN", 20), _entry(2, "OUT", 10), _entry(3, "IN", 5)])
        assert result.opening_balance == 35
        assert [e.running_balance for e in result.entries] == [55, 45, 50]
        assert result.closing_balance == 50

    def test_empty_window_has_no_opening(self) -> None:
        result = reconcile(50, [])
        assert result.opening_balance is None
        assert result.entries == []
        assert result.closing_balance is None
        assert with_opening_entry(result, date(2024, 1, 1)) == []

    def test_unsorted_input_is_ordered_by_date(self) -> None:
        result = reconcile(50, [_entry(3, "IN", 5), _entry(1, "IN", 20), _entry(2, "OUT", 10)])
        assert [e.entry_date.day for e in result.entries] == [1, 2, 3]
        assert result.opening_balance == 35

    def test_same_day_in_before_out(self) -> None:
        result = reconcile(10, [_entry(5, "OUT", 8, "inv"), _entry(5, "IN", 8, "grn")])
        assert [e.reference for e in result.entries] == ["grn", "inv"]
        assert [e.running_balance for e in result.entries] == [18, 10]

    def test_same_day_ties_keep_input_order(self) -> None:
        ordered = sort_entries([_entry(2, "OUT", 1, "a"), _entry(2, "OUT", 2, "b")])
        assert [e.reference for e in ordered] == ["a", "b"]

    def test_missing_quantity_counts_as_zero(self) -> None:
        result = reconcile(10, [_entry(1, "IN", None), _entry(2, "OUT", 4)])
        assert result.entries[0].quantity == 0
        assert result.opening_balance == 14
        assert [e.running_balance for e in result.entries] == [14, 10]

    def test_negative_opening_is_reported_as_is(self) -> None:
        result = reconcile(0, [_entry(1, "OUT", 5)])
        assert result.opening_balance == 5
        result = reconcile(0, [_entry(1, "IN", 5)])
        assert result.opening_balance == -5

    def test_input_entries_are_not_mutated(self) -> None:
        entries = [_entry(1, "IN", 20)]
        reconcile(50, entries)
        assert entries[0].running_balance is None


# ─── Properties over random inputs ───────────────────────────────────────────


class TestReconcileProperties:
    @pytest.mark.parametrize("seed", range(25))
    def test_balance_conservation(self, seed: int) -> None:
        rng = random.Random(seed)
        entries = _random_entries(rng, rng.randint(1, 30))
        current = rng.randint(0, 1000)
        result = reconcile(current, entries)
        total_in = sum(e.quantity for e in entries if e.direction is Direction.IN)
        total_out = sum(e.quantity for e in entries if e.direction is Direction.OUT)
        assert result.opening_balance + total_in - total_out == current
        assert result.closing_balance == current

    @pytest.mark.parametrize("seed", range(25))
    def test_running_balance_is_prefix_sum(self, seed: int) -> None:
        rng = random.Random(seed)
        result = reconcile(rng.randint(0, 1000), _random_entries(rng, rng.randint(1, 30)))
        running = result.opening_balance
        for entry in result.entries:
            running += entry.signed_quantity
            assert entry.running_balance == running

    @pytest.mark.parametrize("seed", range(10))
    def test_repeatable(self, seed: int) -> None:
        rng = random.Random(seed)
        entries = _random_entries(rng, 15)
        assert reconcile(300, entries) == reconcile(300, entries)


class TestPasses:
    def test_backward_then_forward(self) -> None:
        ordered = sort_entries([_entry(1, "IN", 20), _entry(2, "OUT", 10), _entry(3, "IN", 5)])
        opening = derive_opening_balance(50, ordered)
        assert opening == 35
        forward = apply_forward(opening, ordered)
        assert forward[-1].running_balance == 50

    def test_missing_current_balance_counts_as_zero(self) -> None:
        assert derive_opening_balance(None, [_entry(1, "OUT", 3)]) == 3  # type: ignore[arg-type]


# ─── Display helpers ─────────────────────────────────────────────────────────


class TestOpeningEntryAndTotals:
    def test_opening_entry_leads_and_is_excluded_from_totals(self) -> None:
        result = reconcile(50, [_entry(1, "IN", 20), _entry(2, "OUT", 10), _entry(3, "IN", 5)])
        entries = with_opening_entry(result, date(2024, 1, 1))

        opening = entries[0]
        assert opening.is_opening
        assert opening.reference_type is ReferenceType.OPENING
        assert opening.entry_id == "opening"
        assert opening.quantity == 35
        assert opening.running_balance == 35
        assert len(entries) == 4

        assert ledger_totals(entries) == (25, 10)

    def test_filter_by_direction(self) -> None:
        result = reconcile(50, [_entry(1, "IN", 20), _entry(2, "OUT", 10)])
        entries = with_opening_entry(result, date(2024, 1, 1))
        outs = filter_entries(entries, Direction.OUT)
        assert [e.quantity for e in outs] == [10]
        assert filter_entries(entries, None) == entries
