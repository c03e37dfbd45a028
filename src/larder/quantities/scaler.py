"""Recipe scaling to arbitrary serving counts."""

from __future__ import annotations

from typing import Iterable, List

from larder.errors import InvalidServings
from larder.models.recipe import Recipe, RecipeIngredientLine, ScaledLine
from larder.quantities.catalog import UnitCatalog
from larder.quantities.normalizer import normalize


def round_for_display(quantity: float) -> float:
    """Round a scaled quantity for display; accumulation keeps full precision."""

    return round(quantity, 1)


class RecipeScaler:
    """Scale recipe ingredient lines, re-resolving each unit through the catalog."""

    def __init__(self, catalog: UnitCatalog) -> None:
        self._catalog = catalog

    @staticmethod
    def ratio(base_servings: int, target_servings: float) -> float:
        if base_servings is None or base_servings <= 0:
            raise InvalidServings(f"base servings must be positive, got {base_servings}")
        if target_servings is None or target_servings <= 0:
            raise InvalidServings(f"target servings must be positive, got {target_servings}")
        return target_servings / base_servings

    def scale(
        self,
        lines: Iterable[RecipeIngredientLine],
        base_servings: int,
        target_servings: float,
    ) -> List[ScaledLine]:
        ratio = self.ratio(base_servings, target_servings)
        scaled: List[ScaledLine] = []
        for line in lines:
            # The catalog is authoritative for ratios; the line may carry a stale copy.
            unit = self._catalog.get_by_code(line.unit.code)
            scaled.append(
                ScaledLine(
                    ingredient_id=line.ingredient_id,
                    ingredient_name=line.ingredient_name,
                    quantity=line.quantity * ratio,
                    unit=unit,
                    quantity_normalized=normalize(line.quantity, unit) * ratio,
                )
            )
        return scaled

    def scale_recipe(self, recipe: Recipe, target_servings: float) -> List[ScaledLine]:
        return self.scale(recipe.ingredients, recipe.base_servings, target_servings)


__all__ = ["RecipeScaler", "round_for_display"]
