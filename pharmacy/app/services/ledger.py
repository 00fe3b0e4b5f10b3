"""Stock ledger reconciliation.

Given the quantity on hand *now* and the movements recorded inside a
reporting window, work out what the balance was when the window opened and
the balance after every movement.

The computation is two passes over the chronologically ordered movements:

* ``derive_opening_balance`` walks backward from the current balance and
  undoes each movement (an IN is subtracted, an OUT is added back).
* ``apply_forward`` walks forward from that opening balance and records the
  running balance on each movement.

Movements on the same date are ordered IN before OUT.
"""
from __future__ import annotations

import enum
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any


class Direction(str, enum.Enum):
    IN = "IN"
    OUT = "OUT"


class ReferenceType(str, enum.Enum):
    GRN = "GRN"
    INVOICE = "Invoice"
    ADJUSTMENT = "Adjustment"
    OPENING = "Opening"


def _as_int(value: Any) -> int:
    if value is None:
        return 0
    return int(value)


@dataclass(frozen=True)
class LedgerEntry:
    """One stock movement. ``running_balance`` is filled in by reconciliation."""

    entry_date: date
    direction: Direction
    quantity: int
    reference: str = ""
    reference_type: ReferenceType = ReferenceType.ADJUSTMENT
    details: Mapping[str, Any] = field(default_factory=dict)
    entry_id: str = ""
    running_balance: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "quantity", _as_int(self.quantity))
        object.__setattr__(self, "direction", Direction(self.direction))

    @property
    def signed_quantity(self) -> int:
        return self.quantity if self.direction is Direction.IN else -self.quantity

    @property
    def is_opening(self) -> bool:
        return self.reference_type is ReferenceType.OPENING


@dataclass(frozen=True)
class Reconciliation:
    opening_balance: int | None
    entries: list[LedgerEntry]

    @property
    def closing_balance(self) -> int | None:
        if not self.entries:
            return self.opening_balance
        return self.entries[-1].running_balance


def ledger_order(entry: LedgerEntry) -> tuple[date, int]:
    """Sort key: by date, then IN before OUT."""
    return (entry.entry_date, 0 if entry.direction is Direction.IN else 1)


def sort_entries(entries: Iterable[LedgerEntry]) -> list[LedgerEntry]:
    return sorted(entries, key=ledger_order)


def derive_opening_balance(current_balance: int, ordered: Sequence[LedgerEntry]) -> int:
    """Undo *ordered* movements, newest first, starting from *current_balance*."""
    balance = _as_int(current_balance)
    for entry in reversed(ordered):
        balance -= entry.signed_quantity
    return balance


def apply_forward(opening_balance: int, ordered: Sequence[LedgerEntry]) -> list[LedgerEntry]:
    """Return copies of *ordered* with their running balance recorded."""
    balance = opening_balance
    result: list[LedgerEntry] = []
    for entry in ordered:
        balance += entry.signed_quantity
        result.append(replace(entry, running_balance=balance))
    return result


def reconcile(current_balance: int, transactions: Iterable[LedgerEntry]) -> Reconciliation:
    """Derive the window's opening balance and the running balance per movement.

    With no movements the opening balance is ``None`` and no entries are
    produced.
    """
    ordered = sort_entries(transactions)
    if not ordered:
        return Reconciliation(opening_balance=None, entries=[])
    opening = derive_opening_balance(current_balance, ordered)
    return Reconciliation(opening_balance=opening, entries=apply_forward(opening, ordered))


def opening_entry(window_start: date, opening_balance: int) -> LedgerEntry:
    return LedgerEntry(
        entry_date=window_start,
        direction=Direction.IN,
        quantity=opening_balance,
        reference="Opening Balance",
        reference_type=ReferenceType.OPENING,
        entry_id="opening",
        running_balance=opening_balance,
    )


def with_opening_entry(reconciliation: Reconciliation, window_start: date) -> list[LedgerEntry]:
    """Entries for display, led by the opening-balance row when there are movements."""
    if reconciliation.opening_balance is None or not reconciliation.entries:
        return list(reconciliation.entries)
    return [opening_entry(window_start, reconciliation.opening_balance), *reconciliation.entries]


def ledger_totals(entries: Iterable[LedgerEntry]) -> tuple[int, int]:
    """Return ``(total_in, total_out)``, ignoring the opening-balance row."""
    total_in = 0
    total_out = 0
    for entry in entries:
        if entry.is_opening:
            continue
        if entry.direction is Direction.IN:
            total_in += entry.quantity
        else:
            total_out += entry.quantity
    return total_in, total_out


def filter_entries(entries: Iterable[LedgerEntry], direction: Direction | None) -> list[LedgerEntry]:
    if direction is None:
        return list(entries)
    return [e for e in entries if e.direction is direction]
