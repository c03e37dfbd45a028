"""Pydantic models defining shared data contracts."""

from larder.models.pantry import Ingredient, StockDelta, StockEntry
from larder.models.plan import MealTransition, MealType, PlannedMeal, SweepReport
from larder.models.recipe import (
    Recipe,
    RecipeFilters,
    RecipeImport,
    RecipeImportLine,
    RecipeIngredientLine,
    ScaledLine,
)
from larder.models.shopping import (
    AggregatedDemand,
    DemandKey,
    ShoppingList,
    ShoppingListItem,
    ShoppingListStatus,
)
from larder.models.units import FAMILY_BASE_UNITS, BaseUnit, Unit, UnitFamily

__all__ = [
    "Ingredient",
    "StockDelta",
    "StockEntry",
    "MealTransition",
    "MealType",
    "PlannedMeal",
    "SweepReport",
    "Recipe",
    "RecipeFilters",
    "RecipeImport",
    "RecipeImportLine",
    "RecipeIngredientLine",
    "ScaledLine",
    "AggregatedDemand",
    "DemandKey",
    "ShoppingList",
    "ShoppingListItem",
    "ShoppingListStatus",
    "FAMILY_BASE_UNITS",
    "BaseUnit",
    "Unit",
    "UnitFamily",
]
