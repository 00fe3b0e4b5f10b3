"""Per-item opening/closing stock from issued and received quantities.

Movements can be recorded against a stock item's numeric id or against its
name (invoice lines carry the medicine name, GRN lines the item name), so
everything is first folded onto a normalized entity key.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any


def _as_int(value: Any) -> int:
    if value is None:
        return 0
    return int(value)


def normalize_key(value: Any) -> str:
    """Canonical key for an item id or name.

    Integers and digit-only strings map to their decimal form; any other
    string is stripped and lower-cased.
    """
    if value is None:
        return ""
    if isinstance(value, int):
        return str(value)
    text = str(value).strip()
    if text.isdigit():
        return str(int(text))
    return text.lower()


class KeyResolver:
    """Maps aliases (ids, names) of known items onto one canonical key."""

    def __init__(self) -> None:
        self._aliases: dict[str, str] = {}

    @classmethod
    def from_items(cls, items: Iterable[tuple[Any, str]]) -> KeyResolver:
        """Build from ``(item_id, name)`` pairs; the id becomes the canonical key."""
        resolver = cls()
        for item_id, name in items:
            resolver.register(item_id, name)
        return resolver

    def register(self, key: Any, *aliases: Any) -> str:
        canonical = normalize_key(key)
        self._aliases[canonical] = canonical
        for alias in aliases:
            alias_key = normalize_key(alias)
            # first registration wins for duplicate names
            self._aliases.setdefault(alias_key, canonical)
        return canonical

    def resolve(self, identifier: Any) -> str:
        key = normalize_key(identifier)
        return self._aliases.get(key, key)

    def __contains__(self, identifier: Any) -> bool:
        return normalize_key(identifier) in self._aliases


def tally(
    pairs: Iterable[tuple[Any, Any]], resolver: KeyResolver | None = None,
) -> dict[str, int]:
    """Sum ``(identifier, quantity)`` pairs per resolved key."""
    totals: dict[str, int] = {}
    for identifier, quantity in pairs:
        key = resolver.resolve(identifier) if resolver else normalize_key(identifier)
        if not key:
            continue
        totals[key] = totals.get(key, 0) + _as_int(quantity)
    return totals


@dataclass(frozen=True)
class MovementRow:
    entity_key: str
    opening: int
    issued: int
    received: int
    current_stock: int
    has_opening: bool = True

    @property
    def closing(self) -> int:
        return self.opening + self.received - self.issued

    @property
    def discrepancy(self) -> int:
        """Non-zero means an unrecorded adjustment or a data-entry mismatch."""
        return self.closing - self.current_stock

    @property
    def is_active(self) -> bool:
        return self.issued > 0 or self.received > 0 or self.opening != 0


def aggregate(
    opening_map: Mapping[str, Any],
    issued_map: Mapping[str, Any],
    received_map: Mapping[str, Any],
    current_stock_map: Mapping[str, Any],
) -> list[MovementRow]:
    """One row per entity key found in any of the maps, ordered by key.

    Absent values count as zero.
    """
    keys = set(opening_map) | set(issued_map) | set(received_map) | set(current_stock_map)
    return [
        MovementRow(
            entity_key=key,
            opening=_as_int(opening_map.get(key)),
            issued=_as_int(issued_map.get(key)),
            received=_as_int(received_map.get(key)),
            current_stock=_as_int(current_stock_map.get(key)),
            has_opening=key in opening_map,
        )
        for key in sorted(keys)
    ]


def active_rows(rows: Iterable[MovementRow]) -> list[MovementRow]:
    """Drop rows with no movement and a zero opening balance."""
    return [row for row in rows if row.is_active]
