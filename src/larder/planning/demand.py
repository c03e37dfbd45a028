"""Weekly ingredient demand aggregation."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping

from larder.errors import InvalidServings, MissingRecipeReference, UnknownUnit
from larder.metrics import DEMAND_SKIPPED_MEALS
from larder.models.plan import PlannedMeal
from larder.models.recipe import Recipe, ScaledLine
from larder.models.shopping import AggregatedDemand, DemandKey
from larder.quantities.scaler import RecipeScaler

logger = logging.getLogger(__name__)

Demand = Dict[DemandKey, AggregatedDemand]


class DemandAggregator:
    """Sum scaled recipe needs per (ingredient, base unit) across planned meals."""

    def __init__(self, scaler: RecipeScaler) -> None:
        self._scaler = scaler

    def _recipe(
        self, meal: PlannedMeal, recipe_id: int, recipes_by_id: Mapping[int, Recipe]
    ) -> Recipe:
        recipe = recipes_by_id.get(recipe_id)
        if recipe is None:
            raise MissingRecipeReference(recipe_id, meal.id)
        return recipe

    def aggregate(
        self,
        meals: Iterable[PlannedMeal],
        recipes_by_id: Mapping[int, Recipe],
        *,
        include_prepared: bool = True,
    ) -> Demand:
        demand: Demand = {}
        for meal in meals:
            if meal.recipe_id is None:
                continue
            if meal.is_prepared and not include_prepared:
                DEMAND_SKIPPED_MEALS.labels(reason="prepared").inc()
                continue
            try:
                recipe = self._recipe(meal, meal.recipe_id, recipes_by_id)
                lines: List[ScaledLine] = self._scaler.scale_recipe(recipe, meal.servings)
            except MissingRecipeReference as exc:
                logger.warning("Skipping meal %s in demand: %s", meal.id, exc)
                DEMAND_SKIPPED_MEALS.labels(reason="missing_recipe").inc()
                continue
            except (InvalidServings, UnknownUnit) as exc:
                logger.warning("Skipping meal %s in demand: %s", meal.id, exc)
                DEMAND_SKIPPED_MEALS.labels(reason="invalid_recipe").inc()
                continue

            recipe_name = recipe.name
            for line in lines:
                key = DemandKey(line.ingredient_id, line.base_unit)
                bucket = demand.get(key)
                if bucket is None:
                    bucket = AggregatedDemand(
                        ingredient_id=line.ingredient_id,
                        ingredient_name=line.ingredient_name,
                        base_unit=line.base_unit,
                        display_unit=line.unit,
                    )
                    demand[key] = bucket
                bucket.quantity_normalized += line.quantity_normalized
                bucket.recipe_names.add(recipe_name)
        return demand


def merge_demand(
    first: Mapping[DemandKey, AggregatedDemand],
    second: Mapping[DemandKey, AggregatedDemand],
) -> Demand:
    """Combine two aggregation results; the first display unit seen wins."""

    merged: Demand = {}
    for source in (first, second):
        for key, bucket in source.items():
            existing = merged.get(key)
            if existing is None:
                merged[key] = AggregatedDemand(
                    ingredient_id=bucket.ingredient_id,
                    ingredient_name=bucket.ingredient_name,
                    base_unit=bucket.base_unit,
                    display_unit=bucket.display_unit,
                    quantity_normalized=bucket.quantity_normalized,
                    recipe_names=set(bucket.recipe_names),
                )
                continue
            existing.quantity_normalized += bucket.quantity_normalized
            existing.recipe_names |= bucket.recipe_names
    return merged


__all__ = ["Demand", "DemandAggregator", "merge_demand"]
