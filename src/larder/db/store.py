"""SQLAlchemy-backed implementation of the planning store contracts."""

from __future__ import annotations

from datetime import date
from typing import List, Optional, Sequence

from larder.models.pantry import Ingredient, StockEntry
from larder.models.plan import MealTransition, MealType, PlannedMeal
from larder.models.recipe import Recipe
from larder.models.shopping import ShoppingList, ShoppingListItem

from . import ingredients, meals, recipes, shopping_list, stock


class SqlStore:
    """Adapter exposing the repository modules as a ``PreparationStore``/``ShoppingStore``."""

    def get_recipe(self, recipe_id: int) -> Optional[Recipe]:
        return recipes.get_recipe(recipe_id)

    # meals
    def get_meal(self, meal_id: int) -> Optional[PlannedMeal]:
        return meals.get_meal(meal_id)

    def insert_meal(
        self, meal_date: date, meal_type: MealType, recipe_id: Optional[int], servings: int
    ) -> PlannedMeal:
        return meals.insert_meal(meal_date, meal_type, recipe_id, servings)

    def list_unprepared_before(self, day: date) -> List[PlannedMeal]:
        return meals.list_unprepared_before(day)

    def list_meals_in_range(self, start: date, end: date) -> List[PlannedMeal]:
        return meals.list_meals_in_range(start, end)

    def apply_meal_transition(self, transition: MealTransition) -> bool:
        return meals.apply_meal_transition(transition)

    # pantry
    def list_stock(self) -> List[StockEntry]:
        return stock.list_stock()

    def list_ingredients(self) -> List[Ingredient]:
        return ingredients.list_ingredients()

    # shopping lists
    def replace_shopping_list(
        self, week_start: date, items: Sequence[ShoppingListItem]
    ) -> ShoppingList:
        return shopping_list.replace_shopping_list(week_start, items)

    def get_shopping_list(self, week_start: date) -> Optional[ShoppingList]:
        return shopping_list.get_shopping_list(week_start)

    def toggle_shopping_item(self, item_id: int) -> ShoppingListItem:
        return shopping_list.toggle_shopping_item(item_id)

    def complete_shopping(self, list_id: int) -> int:
        return shopping_list.complete_shopping(list_id)


__all__ = ["SqlStore"]
