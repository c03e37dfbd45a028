"""Meal planning services: demand, shopping lists and preparation."""

from .demand import Demand, DemandAggregator, merge_demand
from .preparation import MealPreparationService
from .shopping_list import ShoppingListService, build_shopping_list, purchase_quantity, week_start_for

__all__ = [
    "Demand",
    "DemandAggregator",
    "MealPreparationService",
    "ShoppingListService",
    "build_shopping_list",
    "merge_demand",
    "purchase_quantity",
    "week_start_for",
]
