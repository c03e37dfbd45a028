"""Meal plan models and preparation transition records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from larder.models.pantry import StockDelta

MealType = Literal["breakfast", "lunch", "snack", "dinner"]


class PlannedMeal(BaseModel):
    """Recipe assigned to a calendar slot."""

    id: int
    date: date
    meal_type: MealType
    recipe_id: Optional[int] = Field(default=None)
    recipe_name: Optional[str] = Field(default=None)
    servings: int = Field(ge=1)
    is_prepared: bool = Field(default=False)

    model_config = ConfigDict(frozen=True)


@dataclass(frozen=True)
class MealTransition:
    """Stock deltas plus meal changes that the store applies as one unit.

    The store applies nothing unless the meal row still has ``expected_prepared`` and
    ``expected_servings``.
    """

    meal_id: int
    expected_prepared: bool
    expected_servings: int
    deltas: tuple[StockDelta, ...] = ()
    set_prepared: Optional[bool] = None
    set_servings: Optional[int] = None
    delete: bool = False


@dataclass
class SweepReport:
    """Outcome of a past-meal sweep."""

    total: int = 0
    prepared: int = 0
    failed: list[int] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return self.total - len(self.failed)

    def summary(self) -> str:
        return f"{self.processed} of {self.total} meals processed"


__all__ = ["MealTransition", "MealType", "PlannedMeal", "SweepReport"]
