"""Conversion between display quantities and base-unit quantities."""

from __future__ import annotations

from typing import Iterable, Optional, Tuple

from larder.errors import IncompatibleUnit
from larder.models.units import Unit
from larder.quantities.catalog import UnitCatalog


def normalize(quantity: float, unit: Unit) -> float:
    """Return ``quantity`` expressed in the unit's base unit (2 kg -> 2000 g)."""

    return quantity * unit.conversion_ratio


def denormalize(base_quantity: float, base_unit: str, unit: Unit) -> float:
    """Express a base-unit quantity in ``unit``."""

    if unit.base_unit != base_unit:
        raise IncompatibleUnit(
            f"cannot express a quantity in {base_unit} using unit {unit.code!r} "
            f"(base {unit.base_unit})"
        )
    return base_quantity / unit.conversion_ratio


def convert(quantity: float, from_unit: Unit, to_unit: Unit) -> float:
    """Convert between two units of the same family."""

    if from_unit.family != to_unit.family:
        raise IncompatibleUnit(
            f"cannot convert {from_unit.code!r} ({from_unit.family}) "
            f"to {to_unit.code!r} ({to_unit.family})"
        )
    return denormalize(normalize(quantity, from_unit), from_unit.base_unit, to_unit)


def best_display_unit(
    base_quantity: float,
    base_unit: str,
    candidate_units: Iterable[Unit],
) -> Optional[Tuple[float, Unit]]:
    """Pick the largest displayable unit that keeps the quantity readable.

    Preference order: a whole number >= 1, then any value >= 1 rounded to two
    decimals, then the base unit at the raw quantity. Returns ``None`` when no
    candidate shares ``base_unit``.
    """

    candidates = [unit for unit in candidate_units if unit.base_unit == base_unit]
    displayable = sorted(
        (unit for unit in candidates if unit.is_displayable),
        key=lambda unit: unit.conversion_ratio,
        reverse=True,
    )

    for unit in displayable:
        converted = base_quantity / unit.conversion_ratio
        if converted >= 1 and float(converted).is_integer():
            return converted, unit

    for unit in displayable:
        converted = base_quantity / unit.conversion_ratio
        if converted >= 1:
            return round(converted, 2), unit

    for unit in candidates:
        if unit.code == base_unit:
            return base_quantity, unit
    return None


class QuantityNormalizer:
    """Catalog-bound facade resolving unit codes before converting."""

    def __init__(self, catalog: UnitCatalog) -> None:
        self._catalog = catalog

    @property
    def catalog(self) -> UnitCatalog:
        return self._catalog

    def normalize(self, quantity: float, unit: Unit) -> float:
        return normalize(quantity, unit)

    def normalize_code(self, quantity: float, unit_code: str) -> Tuple[float, Unit]:
        unit = self._catalog.get_by_code(unit_code)
        return normalize(quantity, unit), unit

    def denormalize(self, base_quantity: float, base_unit: str, unit: Unit) -> float:
        return denormalize(base_quantity, base_unit, unit)

    def convert(self, quantity: float, from_code: str, to_code: str) -> float:
        return convert(
            quantity,
            self._catalog.get_by_code(from_code),
            self._catalog.get_by_code(to_code),
        )

    def best_display_unit(
        self,
        base_quantity: float,
        base_unit: str,
        candidate_units: Optional[Iterable[Unit]] = None,
    ) -> Optional[Tuple[float, Unit]]:
        units = self._catalog.list_units() if candidate_units is None else candidate_units
        return best_display_unit(base_quantity, base_unit, units)


__all__ = [
    "QuantityNormalizer",
    "best_display_unit",
    "convert",
    "denormalize",
    "normalize",
]
