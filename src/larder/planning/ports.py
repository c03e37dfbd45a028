"""Store contracts consumed by the planning services."""

from __future__ import annotations

from datetime import date
from typing import List, Optional, Protocol, Sequence

from larder.models.pantry import Ingredient, StockEntry
from larder.models.plan import MealTransition, MealType, PlannedMeal
from larder.models.recipe import Recipe
from larder.models.shopping import ShoppingList, ShoppingListItem


class RecipeSource(Protocol):
    def get_recipe(self, recipe_id: int) -> Optional[Recipe]: ...


class PreparationStore(RecipeSource, Protocol):
    """Persistence needed by the meal preparation state machine."""

    def get_meal(self, meal_id: int) -> Optional[PlannedMeal]: ...

    def insert_meal(
        self, meal_date: date, meal_type: MealType, recipe_id: Optional[int], servings: int
    ) -> PlannedMeal: ...

    def list_unprepared_before(self, day: date) -> List[PlannedMeal]: ...

    def apply_meal_transition(self, transition: MealTransition) -> bool:
        """Apply deltas and meal changes atomically.

        Returns ``False`` without applying anything when the meal no longer matches the
        transition's expected state.
        """
        ...


class ShoppingStore(RecipeSource, Protocol):
    """Persistence needed by shopping list generation."""

    def list_meals_in_range(self, start: date, end: date) -> List[PlannedMeal]: ...

    def list_stock(self) -> List[StockEntry]: ...

    def list_ingredients(self) -> List[Ingredient]: ...

    def replace_shopping_list(
        self, week_start: date, items: Sequence[ShoppingListItem]
    ) -> ShoppingList: ...

    def get_shopping_list(self, week_start: date) -> Optional[ShoppingList]: ...

    def toggle_shopping_item(self, item_id: int) -> ShoppingListItem: ...

    def complete_shopping(self, list_id: int) -> int: ...


__all__ = ["PreparationStore", "RecipeSource", "ShoppingStore"]
