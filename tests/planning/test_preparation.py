"""Tests for the meal preparation state machine."""

from __future__ import annotations

from datetime import date

import pytest
from prometheus_client import REGISTRY

from larder.errors import ConcurrentPreparationConflict, InvalidServings, MealNotFound
from larder.planning.preparation import MealPreparationService
from tests.fakes import InMemoryStore, make_recipe

TODAY = date(2024, 5, 8)
PAST = date(2024, 5, 6)
FUTURE = date(2024, 5, 10)


@pytest.fixture()
def store(catalog):
    store = InMemoryStore()
    store.add_recipe(
        make_recipe(catalog, 1, "Risotto", 4, [(1, "rice", 500, "g"), (2, "stock", 1, "l")])
    )
    store.ledger.upsert(1, 2, catalog.get_by_code("kg"))
    store.ledger.upsert(2, 150, catalog.get_by_code("cl"))
    return store


@pytest.fixture()
def service(store, scaler):
    return MealPreparationService(store, scaler, today=lambda: TODAY)


def _samples(transition, result):
    return REGISTRY.get_sample_value(
        "larder_meal_transitions_total", {"transition": transition, "result": result}
    ) or 0.0


def test_mark_prepared_deducts_scaled_lines(service, store):
    meal = store.insert_meal(FUTURE, "dinner", 1, 2)

    assert service.mark_prepared(meal.id) is True

    assert store.get_meal(meal.id).is_prepared is True
    assert store.stock_of(1) == pytest.approx(1750)
    assert store.stock_of(2) == pytest.approx(1000)


def test_mark_prepared_is_idempotent(service, store):
    meal = store.insert_meal(FUTURE, "dinner", 1, 4)
    before = _samples("prepare", "noop")

    assert service.mark_prepared(meal.id) is True
    assert service.mark_prepared(meal.id) is False

    assert store.stock_of(1) == pytest.approx(1500)
    assert store.transitions_applied == 1
    assert _samples("prepare", "noop") == before + 1


def test_consumption_is_clamped_and_never_creates(service, store, catalog):
    store.ledger.upsert(1, 100, catalog.get_by_code("g"))
    store.ledger.remove(2)
    meal = store.insert_meal(FUTURE, "dinner", 1, 4)

    service.mark_prepared(meal.id)

    assert store.stock_of(1) == 0
    assert store.stock_of(2) is None


def test_update_servings_on_planned_meal_leaves_stock(service, store):
    meal = store.insert_meal(FUTURE, "dinner", 1, 4)

    updated = service.update_servings(meal.id, 6)

    assert updated.servings == 6
    assert store.stock_of(1) == pytest.approx(2000)


def test_update_servings_on_prepared_meal_reconciles_difference(service, store):
    meal = store.insert_meal(FUTURE, "dinner", 1, 4)
    service.mark_prepared(meal.id)

    service.update_servings(meal.id, 2)
    assert store.stock_of(1) == pytest.approx(1750)

    service.update_servings(meal.id, 6)
    assert store.stock_of(1) == pytest.approx(1250)
    assert store.get_meal(meal.id).servings == 6


def test_reducing_servings_restores_into_missing_entry(service, store):
    meal = store.insert_meal(FUTURE, "dinner", 1, 4)
    service.mark_prepared(meal.id)
    store.ledger.remove(2)

    service.update_servings(meal.id, 2)

    assert store.stock_of(2) == pytest.approx(500)


@pytest.mark.parametrize("servings", [0, -2])
def test_update_servings_rejects_non_positive(service, store, servings):
    meal = store.insert_meal(FUTURE, "dinner", 1, 4)

    with pytest.raises(InvalidServings):
        service.update_servings(meal.id, servings)


def test_remove_prepared_meal_restores_stock(service, store):
    meal = store.insert_meal(FUTURE, "dinner", 1, 4)
    service.mark_prepared(meal.id)
    after_preparation = store.stock_of(1)

    service.remove_meal(meal.id)

    assert store.get_meal(meal.id) is None
    assert store.stock_of(1) == pytest.approx(after_preparation + 500)


def test_remove_planned_meal_only_deletes(service, store):
    meal = store.insert_meal(FUTURE, "dinner", 1, 4)

    service.remove_meal(meal.id)

    assert store.get_meal(meal.id) is None
    assert store.stock_of(1) == pytest.approx(2000)


def test_add_meal_in_the_past_is_prepared_immediately(service, store):
    past = service.add_meal(PAST, "lunch", 1, 4)
    upcoming = service.add_meal(FUTURE, "lunch", 1, 4)

    assert past.is_prepared is True
    assert upcoming.is_prepared is False
    assert store.stock_of(1) == pytest.approx(1500)


def test_add_meal_rejects_non_positive_servings(service):
    with pytest.raises(InvalidServings):
        service.add_meal(FUTURE, "lunch", 1, 0)


def test_missing_recipe_still_transitions(service, store, caplog):
    meal = store.insert_meal(FUTURE, "dinner", 42, 2)

    assert service.mark_prepared(meal.id) is True

    assert store.get_meal(meal.id).is_prepared is True
    assert store.stock_of(1) == pytest.approx(2000)
    assert "Recipe 42" in caplog.text


def test_unknown_meal_raises(service):
    with pytest.raises(MealNotFound):
        service.mark_prepared(999)


def test_sweep_prepares_only_past_meals(service, store):
    past_ids = [store.insert_meal(PAST, "dinner", 1, 1).id for _ in range(3)]
    future = store.insert_meal(FUTURE, "dinner", 1, 1)

    report = service.auto_mark_past_meals()

    assert report.total == 3
    assert report.prepared == 3
    assert report.failed == []
    assert report.summary() == "3 of 3 meals processed"
    assert all(store.get_meal(meal_id).is_prepared for meal_id in past_ids)
    assert store.get_meal(future.id).is_prepared is False


def test_sweep_continues_after_a_failing_meal(service, store, catalog):
    store.add_recipe(make_recipe(catalog, 2, "Broken", 0, [(3, "salt", 1, "g")]))
    broken = store.insert_meal(PAST, "lunch", 2, 2)
    fine = store.insert_meal(PAST, "dinner", 1, 4)

    report = service.auto_mark_past_meals()

    assert report.failed == [broken.id]
    assert report.prepared == 1
    assert report.summary() == "1 of 2 meals processed"
    assert store.get_meal(fine.id).is_prepared is True
    assert store.get_meal(broken.id).is_prepared is False


def test_transition_is_replanned_after_concurrent_edit(service, store):
    meal = store.insert_meal(FUTURE, "dinner", 1, 4)
    edits = []

    def concurrent_edit(transition):
        if not edits:
            edits.append(transition)
            store.meals[meal.id] = store.meals[meal.id].model_copy(update={"servings": 2})

    store.before_apply = concurrent_edit

    assert service.mark_prepared(meal.id) is True
    assert store.stock_of(1) == pytest.approx(1750)


def test_lost_race_to_another_preparer_returns_false(service, store):
    meal = store.insert_meal(FUTURE, "dinner", 1, 4)

    def concurrent_prepare(transition):
        store.meals[meal.id] = store.meals[meal.id].model_copy(update={"is_prepared": True})

    store.before_apply = concurrent_prepare

    assert service.mark_prepared(meal.id) is False
    assert store.stock_of(1) == pytest.approx(2000)


def test_persistent_conflict_raises(store, scaler):
    meal = store.insert_meal(FUTURE, "dinner", 1, 4)
    service = MealPreparationService(store, scaler, today=lambda: TODAY, max_attempts=2)

    def keep_changing(transition):
        current = store.meals[meal.id]
        store.meals[meal.id] = current.model_copy(update={"servings": current.servings + 1})

    store.before_apply = keep_changing

    with pytest.raises(ConcurrentPreparationConflict):
        service.update_servings(meal.id, 10)
