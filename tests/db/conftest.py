"""Fixtures for repository tests backed by a temporary SQLite database."""

from __future__ import annotations

import pytest

from larder.db.ingredients import create_ingredient
from larder.db.recipes import create_recipe
from larder.db.units import load_units
from larder.models.recipe import RecipeIngredientLine
from larder.quantities.catalog import UnitCatalog


@pytest.fixture()
def db_catalog() -> UnitCatalog:
    return UnitCatalog.from_loader(load_units)


@pytest.fixture()
def risotto(db_catalog):
    rice = create_ingredient(name="rice", category="grains")
    broth = create_ingredient(name="broth")
    return create_recipe(
        name="Risotto",
        base_servings=4,
        category="main",
        tags=["italian", "weeknight"],
        lines=[
            RecipeIngredientLine(
                ingredient_id=rice.id, quantity=500, unit=db_catalog.get_by_code("g")
            ),
            RecipeIngredientLine(
                ingredient_id=broth.id, quantity=1, unit=db_catalog.get_by_code("l")
            ),
        ],
    )
