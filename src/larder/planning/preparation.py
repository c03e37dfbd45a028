"""Meal preparation state machine.

A planned meal moves once from planned to prepared; the move deducts the scaled recipe
ingredients from stock. Servings edits on a prepared meal reconcile the difference and
removing a prepared meal gives its ingredients back. Every transition is handed to the
store as a single ``MealTransition`` guarded by the meal's expected state, so two
callers racing on the same meal cannot both deduct.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable, List, Optional

from larder.errors import (
    ConcurrentPreparationConflict,
    InvalidServings,
    MealNotFound,
    MissingRecipeReference,
)
from larder.metrics import MEAL_TRANSITIONS, STOCK_ADJUSTMENTS, SWEEP_MEALS
from larder.models.pantry import StockDelta
from larder.models.plan import MealTransition, MealType, PlannedMeal, SweepReport
from larder.models.recipe import Recipe
from larder.planning.ports import PreparationStore
from larder.quantities.scaler import RecipeScaler

logger = logging.getLogger(__name__)

TransitionPlanner = Callable[[PlannedMeal], Optional[MealTransition]]


class MealPreparationService:
    """Drive ``is_prepared`` transitions and their stock side effects."""

    def __init__(
        self,
        store: PreparationStore,
        scaler: RecipeScaler,
        *,
        today: Callable[[], date] = date.today,
        max_attempts: int = 3,
    ) -> None:
        self._store = store
        self._scaler = scaler
        self._today = today
        self._max_attempts = max(1, max_attempts)

    # --- helpers ----------------------------------------------------------
    def _require_meal(self, meal_id: int) -> PlannedMeal:
        meal = self._store.get_meal(meal_id)
        if meal is None:
            raise MealNotFound(meal_id)
        return meal

    def _recipe_for(self, meal: PlannedMeal) -> Optional[Recipe]:
        """Return the meal's recipe; a dangling reference is tolerated as no recipe."""

        if meal.recipe_id is None:
            return None
        recipe = self._store.get_recipe(meal.recipe_id)
        if recipe is None:
            logger.warning("%s; transition proceeds without stock effects",
                           MissingRecipeReference(meal.recipe_id, meal.id))
        return recipe

    def _deltas(
        self, recipe: Optional[Recipe], servings: float, *, sign: int, create_if_missing: bool
    ) -> tuple[StockDelta, ...]:
        if recipe is None or servings == 0:
            return ()
        if servings < 0:
            servings, sign = -servings, -sign
        return tuple(
            StockDelta(
                ingredient_id=line.ingredient_id,
                quantity_normalized=sign * line.quantity_normalized,
                unit=line.unit,
                create_if_missing=create_if_missing,
            )
            for line in self._scaler.scale_recipe(recipe, servings)
            if line.quantity_normalized > 0
        )

    def _run(self, meal_id: int, kind: str, planner: TransitionPlanner) -> bool:
        """Plan and apply a transition, re-reading the meal when the guard misses."""

        for attempt in range(1, self._max_attempts + 1):
            meal = self._require_meal(meal_id)
            transition = planner(meal)
            if transition is None:
                MEAL_TRANSITIONS.labels(transition=kind, result="noop").inc()
                return False
            if self._store.apply_meal_transition(transition):
                MEAL_TRANSITIONS.labels(transition=kind, result="applied").inc()
                for delta in transition.deltas:
                    STOCK_ADJUSTMENTS.labels(direction=delta.direction).inc()
                logger.info(
                    "Meal %s %s applied with %d stock deltas",
                    meal_id,
                    kind,
                    len(transition.deltas),
                    extra={"meal_id": meal_id},
                )
                return True
            logger.debug("Meal %s changed during %s (attempt %d)", meal_id, kind, attempt)

        MEAL_TRANSITIONS.labels(transition=kind, result="conflict").inc()
        raise ConcurrentPreparationConflict(meal_id, self._max_attempts)

    # --- transitions ------------------------------------------------------
    def mark_prepared(self, meal_id: int) -> bool:
        """Deduct the meal's ingredients and flag it prepared.

        Returns ``False`` when the meal was already prepared, including when a
        concurrent caller won the race.
        """

        def plan(meal: PlannedMeal) -> Optional[MealTransition]:
            if meal.is_prepared:
                return None
            deltas = self._deltas(
                self._recipe_for(meal), meal.servings, sign=-1, create_if_missing=False
            )
            return MealTransition(
                meal_id=meal.id,
                expected_prepared=False,
                expected_servings=meal.servings,
                deltas=deltas,
                set_prepared=True,
            )

        return self._run(meal_id, "prepare", plan)

    def update_servings(self, meal_id: int, new_servings: int) -> PlannedMeal:
        """Change servings; a prepared meal reconciles stock by the servings difference."""

        if new_servings is None or new_servings <= 0:
            raise InvalidServings(f"servings must be positive, got {new_servings}")

        def plan(meal: PlannedMeal) -> Optional[MealTransition]:
            if meal.servings == new_servings:
                return None
            deltas: tuple[StockDelta, ...] = ()
            if meal.is_prepared:
                # Fewer servings than before gives stock back; more consumes extra.
                deltas = self._deltas(
                    self._recipe_for(meal),
                    meal.servings - new_servings,
                    sign=1,
                    create_if_missing=True,
                )
            return MealTransition(
                meal_id=meal.id,
                expected_prepared=meal.is_prepared,
                expected_servings=meal.servings,
                deltas=deltas,
                set_servings=new_servings,
            )

        self._run(meal_id, "update_servings", plan)
        return self._require_meal(meal_id)

    def remove_meal(self, meal_id: int) -> None:
        """Delete the meal, first restoring stock if it had been prepared."""

        def plan(meal: PlannedMeal) -> MealTransition:
            deltas: tuple[StockDelta, ...] = ()
            if meal.is_prepared:
                deltas = self._deltas(
                    self._recipe_for(meal), meal.servings, sign=1, create_if_missing=True
                )
            return MealTransition(
                meal_id=meal.id,
                expected_prepared=meal.is_prepared,
                expected_servings=meal.servings,
                deltas=deltas,
                delete=True,
            )

        self._run(meal_id, "remove", plan)

    def add_meal(
        self,
        meal_date: date,
        meal_type: MealType,
        recipe_id: Optional[int],
        servings: int,
    ) -> PlannedMeal:
        """Plan a meal; a meal dated in the past is assumed eaten and prepared at once."""

        if servings is None or servings <= 0:
            raise InvalidServings(f"servings must be positive, got {servings}")
        meal = self._store.insert_meal(meal_date, meal_type, recipe_id, servings)
        if meal_date < self._today():
            self.mark_prepared(meal.id)
            meal = self._require_meal(meal.id)
        return meal

    def auto_mark_past_meals(self) -> SweepReport:
        """Prepare every unprepared meal dated before today; failures do not stop the sweep."""

        meals: List[PlannedMeal] = self._store.list_unprepared_before(self._today())
        report = SweepReport(total=len(meals))
        for meal in meals:
            try:
                if self.mark_prepared(meal.id):
                    report.prepared += 1
                SWEEP_MEALS.labels(result="ok").inc()
            except Exception:
                logger.exception("Auto-preparing meal %s failed", meal.id)
                SWEEP_MEALS.labels(result="failed").inc()
                report.failed.append(meal.id)
        if meals:
            logger.info("Past-meal sweep: %s", report.summary())
        return report


__all__ = ["MealPreparationService"]
