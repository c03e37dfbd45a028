"""In-memory store used by the planning service tests."""

from __future__ import annotations

from datetime import date, datetime
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from larder.models.pantry import Ingredient, StockEntry
from larder.models.plan import MealTransition, MealType, PlannedMeal
from larder.models.recipe import Recipe, RecipeIngredientLine
from larder.models.shopping import ShoppingList, ShoppingListItem
from larder.pantry.ledger import StockLedger
from larder.quantities.catalog import UnitCatalog

LineSpec = Tuple[int, str, float, str]


def make_recipe(
    catalog: UnitCatalog,
    recipe_id: int,
    name: str,
    base_servings: int,
    lines: Iterable[LineSpec],
) -> Recipe:
    """Build a recipe from ``(ingredient_id, ingredient_name, quantity, unit_code)`` tuples."""

    return Recipe(
        id=recipe_id,
        name=name,
        base_servings=base_servings,
        ingredients=[
            RecipeIngredientLine(
                ingredient_id=ingredient_id,
                ingredient_name=ingredient_name,
                quantity=quantity,
                unit=catalog.get_by_code(code),
            )
            for ingredient_id, ingredient_name, quantity, code in lines
        ],
    )


class InMemoryStore:
    """Dictionary-backed ``PreparationStore`` and ``ShoppingStore``."""

    def __init__(self) -> None:
        self.recipes: Dict[int, Recipe] = {}
        self.meals: Dict[int, PlannedMeal] = {}
        self.ingredients: Dict[int, Ingredient] = {}
        self.ledger = StockLedger()
        self.lists: Dict[int, ShoppingList] = {}
        self.before_apply: Optional[Callable[[MealTransition], None]] = None
        self.transitions_applied = 0
        self._next_meal_id = 1
        self._next_list_id = 1
        self._next_item_id = 1

    # fixtures -------------------------------------------------------------
    def add_recipe(self, recipe: Recipe) -> Recipe:
        self.recipes[recipe.id] = recipe
        for line in recipe.ingredients:
            self.ingredients.setdefault(
                line.ingredient_id, Ingredient(id=line.ingredient_id, name=line.ingredient_name)
            )
        return recipe

    def add_ingredient(self, ingredient: Ingredient) -> Ingredient:
        self.ingredients[ingredient.id] = ingredient
        return ingredient

    def stock_of(self, ingredient_id: int) -> Optional[float]:
        entry = self.ledger.get(ingredient_id)
        return None if entry is None else entry.quantity_normalized

    # recipes / meals ------------------------------------------------------
    def get_recipe(self, recipe_id: int) -> Optional[Recipe]:
        return self.recipes.get(recipe_id)

    def get_meal(self, meal_id: int) -> Optional[PlannedMeal]:
        return self.meals.get(meal_id)

    def insert_meal(
        self, meal_date: date, meal_type: MealType, recipe_id: Optional[int], servings: int
    ) -> PlannedMeal:
        meal = PlannedMeal(
            id=self._next_meal_id,
            date=meal_date,
            meal_type=meal_type,
            recipe_id=recipe_id,
            servings=servings,
        )
        self._next_meal_id += 1
        self.meals[meal.id] = meal
        return meal

    def list_unprepared_before(self, day: date) -> List[PlannedMeal]:
        return sorted(
            (m for m in self.meals.values() if m.date < day and not m.is_prepared),
            key=lambda m: (m.date, m.id),
        )

    def list_meals_in_range(self, start: date, end: date) -> List[PlannedMeal]:
        return sorted(
            (m for m in self.meals.values() if start <= m.date <= end),
            key=lambda m: (m.date, m.id),
        )

    def apply_meal_transition(self, transition: MealTransition) -> bool:
        if self.before_apply is not None:
            self.before_apply(transition)
        meal = self.meals.get(transition.meal_id)
        if (
            meal is None
            or meal.is_prepared != transition.expected_prepared
            or meal.servings != transition.expected_servings
        ):
            return False

        for delta in transition.deltas:
            self.ledger.apply(delta)
        if transition.delete:
            del self.meals[meal.id]
        else:
            update: dict = {}
            if transition.set_prepared is not None:
                update["is_prepared"] = transition.set_prepared
            if transition.set_servings is not None:
                update["servings"] = transition.set_servings
            self.meals[meal.id] = meal.model_copy(update=update)
        self.transitions_applied += 1
        return True

    # pantry ---------------------------------------------------------------
    def list_stock(self) -> List[StockEntry]:
        return self.ledger.entries()

    def list_ingredients(self) -> List[Ingredient]:
        return list(self.ingredients.values())

    # shopping lists -------------------------------------------------------
    def replace_shopping_list(
        self, week_start: date, items: Sequence[ShoppingListItem]
    ) -> ShoppingList:
        for list_id, existing in list(self.lists.items()):
            if existing.week_start == week_start:
                del self.lists[list_id]
        stored = []
        for item in items:
            stored.append(item.model_copy(update={"id": self._next_item_id}))
            self._next_item_id += 1
        shopping_list = ShoppingList(
            id=self._next_list_id,
            week_start=week_start,
            created_at=datetime(2024, 1, 1, 12, 0),
            items=stored,
        )
        self._next_list_id += 1
        self.lists[shopping_list.id] = shopping_list
        return shopping_list

    def get_shopping_list(self, week_start: date) -> Optional[ShoppingList]:
        for shopping_list in self.lists.values():
            if shopping_list.week_start == week_start:
                return shopping_list
        return None

    def toggle_shopping_item(self, item_id: int) -> ShoppingListItem:
        for list_id, shopping_list in self.lists.items():
            for index, item in enumerate(shopping_list.items):
                if item.id == item_id:
                    toggled = item.model_copy(update={"checked": not item.checked})
                    items = list(shopping_list.items)
                    items[index] = toggled
                    self.lists[list_id] = shopping_list.model_copy(update={"items": items})
                    return toggled
        raise ValueError(f"Shopping list item {item_id} not found")

    def complete_shopping(self, list_id: int) -> int:
        shopping_list = self.lists.get(list_id)
        if shopping_list is None:
            raise ValueError(f"Shopping list {list_id} not found")
        stocked = 0
        for item in shopping_list.items:
            if not item.checked:
                continue
            entry = self.ledger.increment(item.ingredient_id, item.quantity_normalized, item.unit)
            if entry is not None:
                stocked += 1
        self.lists[list_id] = shopping_list.model_copy(
            update={"status": "purchased", "purchased_at": datetime(2024, 1, 2, 9, 0)}
        )
        return stocked
