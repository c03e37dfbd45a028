"""Pantry stock ledger arithmetic.

Stock is keyed by ingredient; each entry holds one unit. Adjustments arrive as signed
base-unit deltas. Consumption is floored at zero and never opens an entry; restoration
may open one when the delta allows it. A delta in another unit family than the held
entry is skipped, since grams cannot be netted against millilitres.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Optional, Set

from larder.models.pantry import StockDelta, StockEntry
from larder.models.shopping import DemandKey
from larder.models.units import Unit

logger = logging.getLogger(__name__)


def apply_delta(entry: Optional[StockEntry], delta: StockDelta) -> Optional[StockEntry]:
    """Return the entry after applying ``delta``.

    ``None`` means there is still no entry for the ingredient. The input entry is
    returned unchanged when the delta cannot apply to it.
    """

    if entry is None:
        if delta.quantity_normalized > 0 and delta.create_if_missing:
            return StockEntry(
                ingredient_id=delta.ingredient_id,
                quantity=delta.quantity_normalized / delta.unit.conversion_ratio,
                unit=delta.unit,
            )
        return None

    if entry.base_unit != delta.base_unit:
        logger.warning(
            "Skipping stock delta for ingredient %s: held in %s, delta in %s",
            entry.ingredient_id,
            entry.base_unit,
            delta.base_unit,
        )
        return entry

    new_normalized = max(0.0, entry.quantity_normalized + delta.quantity_normalized)
    return entry.model_copy(
        update={"quantity": new_normalized / entry.unit.conversion_ratio}
    )


def stock_totals(entries: Iterable[StockEntry]) -> Dict[DemandKey, float]:
    """Sum normalized stock per (ingredient, base unit), keyed like demand buckets."""

    totals: Dict[DemandKey, float] = defaultdict(float)
    for entry in entries:
        totals[DemandKey(entry.ingredient_id, entry.base_unit)] += entry.quantity_normalized
    return dict(totals)


class StockLedger:
    """Mutable in-memory stock state tracking which ingredients changed."""

    def __init__(self, entries: Iterable[StockEntry] = ()) -> None:
        self._entries: Dict[int, StockEntry] = {}
        self._changed: Set[int] = set()
        for entry in entries:
            self._entries[entry.ingredient_id] = entry

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, ingredient_id: int) -> Optional[StockEntry]:
        return self._entries.get(ingredient_id)

    def entries(self) -> List[StockEntry]:
        return list(self._entries.values())

    def changed(self) -> List[StockEntry]:
        """Entries modified since construction (removed ones are not listed)."""

        return [self._entries[i] for i in sorted(self._changed) if i in self._entries]

    def apply(self, delta: StockDelta) -> Optional[StockEntry]:
        current = self._entries.get(delta.ingredient_id)
        updated = apply_delta(current, delta)
        if updated is not None and updated is not current:
            self._entries[delta.ingredient_id] = updated
            self._changed.add(delta.ingredient_id)
        return updated

    def increment(
        self, ingredient_id: int, base_quantity: float, unit: Optional[Unit] = None
    ) -> Optional[StockEntry]:
        """Add stock; ``unit`` is required to open a missing entry."""

        if base_quantity <= 0:
            return self.get(ingredient_id)
        current = self.get(ingredient_id)
        delta_unit = unit or (current.unit if current else None)
        if delta_unit is None:
            return None
        return self.apply(
            StockDelta(ingredient_id, base_quantity, delta_unit, create_if_missing=True)
        )

    def decrement(self, ingredient_id: int, base_quantity: float) -> Optional[StockEntry]:
        current = self.get(ingredient_id)
        if current is None or base_quantity <= 0:
            return current
        return self.apply(StockDelta(ingredient_id, -base_quantity, current.unit))

    def upsert(
        self,
        ingredient_id: int,
        quantity: float,
        unit: Unit,
        *,
        expiry_date: Optional[date] = None,
    ) -> StockEntry:
        """Replace the held quantity; the unit (and family) may change."""

        current = self.get(ingredient_id)
        if current is None:
            entry = StockEntry(
                ingredient_id=ingredient_id,
                quantity=max(0.0, quantity),
                unit=unit,
                expiry_date=expiry_date,
            )
        else:
            entry = current.model_copy(
                update={"quantity": max(0.0, quantity), "unit": unit, "expiry_date": expiry_date}
            )
        self._entries[ingredient_id] = entry
        self._changed.add(ingredient_id)
        return entry

    def remove(self, ingredient_id: int) -> None:
        self._entries.pop(ingredient_id, None)
        self._changed.discard(ingredient_id)

    def totals_by_key(self) -> Dict[DemandKey, float]:
        return stock_totals(self._entries.values())


__all__ = ["StockLedger", "apply_delta", "stock_totals"]
