"""Read-only unit catalog shared by the normalizer, scaler and aggregator."""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, List, Optional

from larder.errors import UnknownUnit
from larder.models.units import Unit

logger = logging.getLogger(__name__)

UnitLoader = Callable[[], Iterable[Unit]]


class UnitCatalog:
    """Immutable view over the unit reference table.

    The catalog is built once from a loader and passed explicitly to the components
    that need conversion ratios. ``reload`` re-runs the loader when the reference table
    changed underneath a long-lived process.
    """

    def __init__(self, units: Iterable[Unit], *, loader: Optional[UnitLoader] = None) -> None:
        self._loader = loader
        self._index(units)

    @classmethod
    def from_loader(cls, loader: UnitLoader) -> "UnitCatalog":
        return cls(loader(), loader=loader)

    def _index(self, units: Iterable[Unit]) -> None:
        ordered = sorted(units, key=lambda unit: (unit.display_order, unit.id))
        by_code: Dict[str, Unit] = {}
        for unit in ordered:
            key = unit.code.lower()
            if key in by_code:
                logger.warning("Duplicate unit code %r ignored (id=%s)", unit.code, unit.id)
                continue
            by_code[key] = unit
        self._units: tuple[Unit, ...] = tuple(by_code.values())
        self._by_code = by_code
        self._by_id: Dict[int, Unit] = {unit.id: unit for unit in self._units}

    def reload(self) -> None:
        """Refresh the catalog from its loader."""

        if self._loader is None:
            raise RuntimeError("Unit catalog was built without a loader")
        self._index(self._loader())
        logger.info("Unit catalog reloaded with %d units", len(self._units))

    def __len__(self) -> int:
        return len(self._units)

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and code.lower() in self._by_code

    def list_units(self) -> List[Unit]:
        return list(self._units)

    def codes(self) -> List[str]:
        return [unit.code for unit in self._units]

    def find_by_code(self, code: str) -> Optional[Unit]:
        return self._by_code.get((code or "").strip().lower())

    def find_by_id(self, unit_id: int) -> Optional[Unit]:
        return self._by_id.get(unit_id)

    def get_by_code(self, code: str) -> Unit:
        unit = self.find_by_code(code)
        if unit is None:
            raise UnknownUnit(code, self.codes())
        return unit

    def get_by_id(self, unit_id: int) -> Unit:
        unit = self.find_by_id(unit_id)
        if unit is None:
            raise UnknownUnit(unit_id)
        return unit

    def displayable_units(self) -> List[Unit]:
        return [unit for unit in self._units if unit.is_displayable]

    def units_for_base(self, base_unit: str) -> List[Unit]:
        return [unit for unit in self._units if unit.base_unit == base_unit]

    def base_unit(self, base_unit: str) -> Optional[Unit]:
        """Return the unit whose code is the base unit itself (g, ml, piece)."""

        return self.find_by_code(base_unit)


__all__ = ["UnitCatalog", "UnitLoader"]
