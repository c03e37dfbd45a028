"""Construction of the engine services from settings.

Nothing here is cached at module level; callers build the objects they need and
pass them on explicitly.
"""

from __future__ import annotations

from datetime import date
from typing import Callable, Optional

from larder.config import Settings, get_settings
from larder.db.store import SqlStore
from larder.db.units import load_units
from larder.planning.demand import DemandAggregator
from larder.planning.preparation import MealPreparationService
from larder.planning.shopping_list import ShoppingListService
from larder.quantities.catalog import UnitCatalog
from larder.quantities.scaler import RecipeScaler


def build_catalog(settings: Optional[Settings] = None) -> UnitCatalog:
    """Return a catalog backed by the units table (seeded on first use)."""

    snapshot = (settings or get_settings()).units_snapshot_path
    return UnitCatalog.from_loader(lambda: load_units(snapshot))


def build_preparation_service(
    catalog: Optional[UnitCatalog] = None,
    *,
    settings: Optional[Settings] = None,
    store: Optional[SqlStore] = None,
    today: Callable[[], date] = date.today,
) -> MealPreparationService:
    settings = settings or get_settings()
    catalog = catalog or build_catalog(settings)
    return MealPreparationService(
        store or SqlStore(),
        RecipeScaler(catalog),
        today=today,
        max_attempts=settings.transition_attempts,
    )


def build_shopping_service(
    catalog: Optional[UnitCatalog] = None,
    *,
    settings: Optional[Settings] = None,
    store: Optional[SqlStore] = None,
) -> ShoppingListService:
    settings = settings or get_settings()
    catalog = catalog or build_catalog(settings)
    return ShoppingListService(
        store or SqlStore(),
        DemandAggregator(RecipeScaler(catalog)),
        provenance_width=settings.provenance_width,
        skip_prepared=settings.shopping_skip_prepared,
    )


__all__ = ["build_catalog", "build_preparation_service", "build_shopping_service"]
