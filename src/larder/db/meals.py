"""Data access helpers for planned meals and their preparation transitions."""

from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import delete, select, update

from larder.models.plan import MealTransition, MealType, PlannedMeal

from .models import PlannedMealORM, RecipeORM
from .repository import session_scope
from .stock import ledger_for_update, persist_ledger

logger = logging.getLogger(__name__)

_UNSET = object()


def _to_model(row: PlannedMealORM, recipe_name: Optional[str]) -> PlannedMeal:
    return PlannedMeal.model_validate(
        {
            "id": row.id,
            "date": row.date,
            "meal_type": row.meal_type,
            "recipe_id": row.recipe_id,
            "recipe_name": recipe_name,
            "servings": row.servings,
            "is_prepared": row.is_prepared,
        }
    )


def _select_meals():
    return select(PlannedMealORM, RecipeORM.name).outerjoin(
        RecipeORM, RecipeORM.id == PlannedMealORM.recipe_id
    )


def list_meals_in_range(start: date, end: date) -> List[PlannedMeal]:
    """Return meals dated within ``[start, end]`` inclusive, ordered by date."""

    with session_scope() as session:
        rows = session.execute(
            _select_meals()
            .where(PlannedMealORM.date >= start, PlannedMealORM.date <= end)
            .order_by(PlannedMealORM.date, PlannedMealORM.id)
        ).all()
        return [_to_model(row, recipe_name) for row, recipe_name in rows]


def list_unprepared_before(day: date) -> List[PlannedMeal]:
    with session_scope() as session:
        rows = session.execute(
            _select_meals()
            .where(PlannedMealORM.date < day, PlannedMealORM.is_prepared.is_(False))
            .order_by(PlannedMealORM.date, PlannedMealORM.id)
        ).all()
        return [_to_model(row, recipe_name) for row, recipe_name in rows]


def get_meal(meal_id: int) -> Optional[PlannedMeal]:
    with session_scope() as session:
        result = session.execute(_select_meals().where(PlannedMealORM.id == meal_id)).first()
        if result is None:
            return None
        row, recipe_name = result
        return _to_model(row, recipe_name)


def insert_meal(
    meal_date: date,
    meal_type: MealType,
    recipe_id: Optional[int],
    servings: int,
) -> PlannedMeal:
    with session_scope() as session:
        row = PlannedMealORM(
            date=meal_date,
            meal_type=meal_type,
            recipe_id=recipe_id,
            servings=int(servings),
            is_prepared=False,
        )
        session.add(row)
        session.flush()
        recipe = session.get(RecipeORM, recipe_id) if recipe_id is not None else None
        return _to_model(row, recipe.name if recipe else None)


def update_meal(
    meal_id: int,
    *,
    servings: int | object = _UNSET,
    meal_date: date | object = _UNSET,
    meal_type: MealType | object = _UNSET,
) -> PlannedMeal:
    """Raw field update without stock effects; servings edits go through the preparation service."""

    with session_scope() as session:
        row = session.get(PlannedMealORM, meal_id)
        if row is None:
            raise ValueError(f"Planned meal {meal_id} not found")

        if servings is not _UNSET:
            row.servings = int(servings)  # type: ignore[call-overload]
        if meal_date is not _UNSET:
            row.date = meal_date  # type: ignore[assignment]
        if meal_type is not _UNSET:
            row.meal_type = str(meal_type)

        session.flush()
        recipe = session.get(RecipeORM, row.recipe_id) if row.recipe_id is not None else None
        return _to_model(row, recipe.name if recipe else None)


def delete_meal(meal_id: int) -> None:
    with session_scope() as session:
        row = session.get(PlannedMealORM, meal_id)
        if row is None:
            raise ValueError(f"Planned meal {meal_id} not found")
        session.delete(row)


def apply_meal_transition(transition: MealTransition) -> bool:
    """Apply a guarded meal change and its stock deltas in one transaction.

    The guarded UPDATE/DELETE on the meal row is the first write of the transaction so
    that it takes the database write lock before any stock row is read. Returns
    ``False`` without writing anything when the meal no longer matches the expected
    state.
    """

    guard = (
        PlannedMealORM.id == transition.meal_id,
        PlannedMealORM.is_prepared == transition.expected_prepared,
        PlannedMealORM.servings == transition.expected_servings,
    )
    if transition.delete:
        statement = delete(PlannedMealORM).where(*guard)
    else:
        values: dict[str, object] = {}
        if transition.set_prepared is not None:
            values["is_prepared"] = transition.set_prepared
        if transition.set_servings is not None:
            values["servings"] = transition.set_servings
        if not values:
            values["is_prepared"] = transition.expected_prepared
        statement = update(PlannedMealORM).where(*guard).values(**values)

    with session_scope() as session:
        result = session.execute(statement.execution_options(synchronize_session=False))
        if result.rowcount != 1:
            logger.debug("Meal %s guard did not match; transition skipped", transition.meal_id)
            return False

        if transition.deltas:
            ledger = ledger_for_update(session, (d.ingredient_id for d in transition.deltas))
            for delta in transition.deltas:
                ledger.apply(delta)
            persist_ledger(session, ledger)
        return True


__all__ = [
    "apply_meal_transition",
    "delete_meal",
    "get_meal",
    "insert_meal",
    "list_meals_in_range",
    "list_unprepared_before",
    "update_meal",
]
