"""Tests for stock ledger arithmetic."""

from __future__ import annotations

import pytest

from larder.models.pantry import StockDelta, StockEntry
from larder.models.shopping import DemandKey
from larder.pantry.ledger import StockLedger, apply_delta, stock_totals


@pytest.fixture()
def flour(catalog):
    return StockEntry(ingredient_id=1, ingredient_name="flour", quantity=1, unit=catalog.get_by_code("kg"))


def test_consumption_converts_back_to_entry_unit(catalog, flour):
    updated = apply_delta(flour, StockDelta(1, -250, catalog.get_by_code("g")))

    assert updated.quantity == pytest.approx(0.75)
    assert updated.unit.code == "kg"
    assert updated.quantity_normalized == pytest.approx(750)


def test_consumption_is_floored_at_zero(catalog, flour):
    updated = apply_delta(flour, StockDelta(1, -5000, catalog.get_by_code("g")))

    assert updated.quantity == 0
    assert updated.quantity_normalized == 0


def test_consumption_never_opens_an_entry(catalog):
    assert apply_delta(None, StockDelta(1, -100, catalog.get_by_code("g"))) is None
    assert apply_delta(None, StockDelta(1, 100, catalog.get_by_code("g"))) is None


def test_restoration_may_open_an_entry(catalog):
    created = apply_delta(
        None, StockDelta(4, 300, catalog.get_by_code("cl"), create_if_missing=True)
    )

    assert created.ingredient_id == 4
    assert created.unit.code == "cl"
    assert created.quantity == pytest.approx(30)


def test_other_family_delta_is_skipped(catalog, flour):
    assert apply_delta(flour, StockDelta(1, -100, catalog.get_by_code("ml"))) is flour


def test_ledger_tracks_changed_entries(catalog, flour):
    sugar = StockEntry(ingredient_id=2, quantity=500, unit=catalog.get_by_code("g"))
    ledger = StockLedger([flour, sugar])

    ledger.decrement(1, 100)
    ledger.decrement(3, 100)
    ledger.increment(5, 2, catalog.get_by_code("piece"))

    assert [entry.ingredient_id for entry in ledger.changed()] == [1, 5]
    assert ledger.get(2) is sugar
    assert ledger.get(3) is None


def test_increment_without_unit_needs_existing_entry(flour):
    ledger = StockLedger([flour])

    assert ledger.increment(9, 10) is None
    assert ledger.increment(1, 500).quantity_normalized == pytest.approx(1500)


def test_upsert_may_change_unit_family(catalog, flour):
    ledger = StockLedger([flour])

    entry = ledger.upsert(1, 2, catalog.get_by_code("l"))

    assert entry.base_unit == "ml"
    assert entry.quantity_normalized == 2000
    assert ledger.changed() == [entry]


def test_stock_totals_keyed_by_ingredient_and_base_unit(catalog, flour):
    garlic = StockEntry(ingredient_id=7, quantity=3, unit=catalog.get_by_code("gousse"))

    totals = stock_totals([flour, garlic])

    assert totals == {DemandKey(1, "g"): 1000, DemandKey(7, "piece"): 3}
    assert StockLedger([flour, garlic]).totals_by_key() == totals


def test_random_walk_never_goes_negative(catalog, flour):
    ledger = StockLedger([flour])
    grams = catalog.get_by_code("g")

    for amount in (-400, 250, -900, -10, 75, -5000, 30):
        ledger.apply(StockDelta(1, amount, grams, create_if_missing=True))
        assert ledger.get(1).quantity_normalized >= 0
