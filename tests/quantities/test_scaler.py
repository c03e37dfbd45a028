"""Tests for recipe scaling."""

from __future__ import annotations

import pytest

from larder.errors import InvalidServings, UnknownUnit
from larder.models.recipe import RecipeIngredientLine
from larder.models.units import Unit
from larder.quantities.scaler import RecipeScaler, round_for_display
from tests.fakes import make_recipe


@pytest.fixture()
def pasta(catalog):
    return make_recipe(
        catalog,
        1,
        "Pasta",
        4,
        [(1, "pasta", 400, "g"), (2, "cream", 20, "cl"), (3, "garlic", 2, "gousse")],
    )


def test_scale_recipe_halves_quantities(scaler, pasta):
    lines = scaler.scale_recipe(pasta, 2)

    assert [line.quantity for line in lines] == [200, 10, 1]
    assert [line.quantity_normalized for line in lines] == [200, 100, 1]
    assert [line.base_unit for line in lines] == ["g", "ml", "piece"]


def test_scaling_is_linear(scaler, pasta):
    single = scaler.scale_recipe(pasta, 1)
    many = scaler.scale_recipe(pasta, 7)

    for one, seven in zip(single, many):
        assert seven.quantity_normalized == pytest.approx(one.quantity_normalized * 7)


@pytest.mark.parametrize("base,target", [(0, 2), (4, 0), (-1, 2), (4, -3)])
def test_ratio_rejects_non_positive_servings(base, target):
    with pytest.raises(InvalidServings):
        RecipeScaler.ratio(base, target)


def test_catalog_ratio_wins_over_stale_line_unit(scaler):
    stale = Unit(id=2, code="kg", family="mass", base_unit="g", conversion_ratio=100)
    line = RecipeIngredientLine(ingredient_id=1, ingredient_name="flour", quantity=1, unit=stale)

    (scaled,) = scaler.scale([line], 2, 2)

    assert scaled.quantity_normalized == 1000
    assert scaled.unit.conversion_ratio == 1000


def test_unknown_line_unit_raises(scaler):
    odd = Unit(id=99, code="bucket", family="volume", base_unit="ml", conversion_ratio=5000)
    line = RecipeIngredientLine(ingredient_id=1, ingredient_name="water", quantity=1, unit=odd)

    with pytest.raises(UnknownUnit):
        scaler.scale([line], 1, 1)


def test_round_for_display():
    assert round_for_display(66.666) == 66.7
    assert round_for_display(2.0) == 2.0
