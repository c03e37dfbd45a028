"""Tests for recipe persistence helpers."""

from __future__ import annotations

from datetime import date

import pytest

from larder.db.meals import get_meal, insert_meal
from larder.db.models import RecipeIngredientORM
from larder.db.recipes import delete_recipe, get_recipe, list_recipes, update_recipe_line
from larder.db.repository import session_scope
from larder.db.stock import get_stock_entry, upsert_stock
from larder.models.recipe import RecipeFilters


def test_create_and_get_recipe(risotto):
    loaded = get_recipe(risotto.id)

    assert loaded.name == "Risotto"
    assert loaded.tags == ["italian", "weeknight"]
    assert [line.ingredient_name for line in loaded.ingredients] == ["rice", "broth"]
    assert [line.quantity_normalized for line in loaded.ingredients] == [500, 1000]
    assert get_recipe(risotto.id + 100) is None


def test_list_recipes_filters(risotto):
    assert [r.id for r in list_recipes()] == [risotto.id]
    assert [r.id for r in list_recipes(RecipeFilters(search="sott"))] == [risotto.id]
    assert list_recipes(RecipeFilters(category="dessert")) == []
    assert [r.id for r in list_recipes(RecipeFilters(tag="weeknight"))] == [risotto.id]
    assert list_recipes(RecipeFilters(tag="vegan")) == []


def test_update_recipe_line_rewrites_normalized_quantity(risotto, db_catalog):
    line = risotto.ingredients[0]

    updated = update_recipe_line(line.id, quantity=2, unit=db_catalog.get_by_code("kg"))

    assert updated.quantity_normalized == 2000
    with session_scope() as session:
        row = session.get(RecipeIngredientORM, line.id)
        assert row.quantity_normalized == 2000

    assert update_recipe_line(line.id, quantity=3).quantity_normalized == 3000


def test_update_missing_line_raises():
    with pytest.raises(ValueError):
        update_recipe_line(12345, quantity=1)


def test_delete_recipe_removes_meals_without_touching_stock(risotto, db_catalog):
    rice_id = risotto.ingredients[0].ingredient_id
    upsert_stock(rice_id, 1, db_catalog.get_by_code("kg"))
    meal = insert_meal(date(2024, 5, 6), "dinner", risotto.id, 4)

    delete_recipe(risotto.id)

    assert get_recipe(risotto.id) is None
    assert get_meal(meal.id) is None
    assert get_stock_entry(rice_id).quantity_normalized == 1000
