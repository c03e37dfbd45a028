"""Shopping list derivation: demand netted against stock, staples excluded."""

from __future__ import annotations

import logging
import math
from datetime import date, timedelta
from textwrap import shorten
from typing import Iterable, List, Mapping, Optional

from larder.metrics import SHOPPING_LISTS_GENERATED
from larder.models.pantry import Ingredient, StockEntry
from larder.models.shopping import (
    AggregatedDemand,
    DemandKey,
    ShoppingList,
    ShoppingListItem,
)
from larder.pantry.ledger import stock_totals
from larder.planning.demand import DemandAggregator
from larder.planning.ports import ShoppingStore

logger = logging.getLogger(__name__)

# Float noise such as 70.00000000001 must not round up to an extra unit.
_CEIL_PRECISION = 6


def week_start_for(day: date) -> date:
    """Return the Monday of ``day``'s week."""

    return day - timedelta(days=day.weekday())


def purchase_quantity(deficit_normalized: float, conversion_ratio: float) -> float:
    """Whole display units to buy so that the deficit is covered."""

    return float(math.ceil(round(deficit_normalized / conversion_ratio, _CEIL_PRECISION)))


def _provenance(recipe_names: Iterable[str], width: int) -> Optional[str]:
    names = sorted(recipe_names)
    if not names:
        return None
    return shorten(", ".join(names), width=width, placeholder="…")


def _sort_key(item: ShoppingListItem) -> tuple:
    return (item.category is None, (item.category or "").lower(), item.ingredient_name.lower())


def build_shopping_list(
    demand: Mapping[DemandKey, AggregatedDemand],
    stock: Iterable[StockEntry],
    ingredients: Iterable[Ingredient],
    *,
    provenance_width: int = 60,
) -> List[ShoppingListItem]:
    """Return the items still to buy, sorted by category then name."""

    in_stock = stock_totals(stock)
    ingredient_index = {ingredient.id: ingredient for ingredient in ingredients}
    staple_ids = {ingredient.id for ingredient in ingredient_index.values() if ingredient.is_staple}

    items: List[ShoppingListItem] = []
    for key, needed in demand.items():
        if needed.ingredient_id in staple_ids:
            continue
        deficit = max(0.0, needed.quantity_normalized - in_stock.get(key, 0.0))
        if deficit <= 0:
            continue

        unit = needed.display_unit
        quantity_needed = purchase_quantity(deficit, unit.conversion_ratio)
        ingredient = ingredient_index.get(needed.ingredient_id)
        items.append(
            ShoppingListItem(
                ingredient_id=needed.ingredient_id,
                ingredient_name=ingredient.name if ingredient else needed.ingredient_name,
                category=ingredient.category if ingredient else None,
                quantity_needed=quantity_needed,
                unit=unit,
                quantity_normalized=quantity_needed * unit.conversion_ratio,
                deficit_normalized=deficit,
                recipes=_provenance(needed.recipe_names, provenance_width),
            )
        )

    items.sort(key=_sort_key)
    return items


class ShoppingListService:
    """Generate, read and complete week-scoped shopping lists."""

    def __init__(
        self,
        store: ShoppingStore,
        aggregator: DemandAggregator,
        *,
        provenance_width: int = 60,
        skip_prepared: bool = False,
    ) -> None:
        self._store = store
        self._aggregator = aggregator
        self._provenance_width = provenance_width
        self._skip_prepared = skip_prepared

    def generate(self, week_start: date) -> ShoppingList:
        """Rebuild the list for the week starting at ``week_start``, replacing any prior one."""

        meals = self._store.list_meals_in_range(week_start, week_start + timedelta(days=6))
        recipes_by_id = {}
        for recipe_id in {meal.recipe_id for meal in meals if meal.recipe_id is not None}:
            recipe = self._store.get_recipe(recipe_id)
            if recipe is not None:
                recipes_by_id[recipe_id] = recipe

        demand = self._aggregator.aggregate(
            meals, recipes_by_id, include_prepared=not self._skip_prepared
        )
        items = build_shopping_list(
            demand,
            self._store.list_stock(),
            self._store.list_ingredients(),
            provenance_width=self._provenance_width,
        )
        shopping_list = self._store.replace_shopping_list(week_start, items)
        SHOPPING_LISTS_GENERATED.inc()
        logger.info(
            "Generated shopping list %s for week %s: %d meals, %d items",
            shopping_list.id,
            week_start.isoformat(),
            len(meals),
            len(items),
        )
        return shopping_list

    def get(self, week_start: date) -> Optional[ShoppingList]:
        return self._store.get_shopping_list(week_start)

    def toggle_item(self, item_id: int) -> ShoppingListItem:
        return self._store.toggle_shopping_item(item_id)

    def complete(self, list_id: int) -> int:
        """Mark the list purchased and move checked items into stock."""

        stocked = self._store.complete_shopping(list_id)
        logger.info("Shopping list %s completed, %d items stocked", list_id, stocked)
        return stocked


__all__ = [
    "ShoppingListService",
    "build_shopping_list",
    "purchase_quantity",
    "week_start_for",
]
