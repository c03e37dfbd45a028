"""Pantry data models: ingredients, stock entries and stock deltas."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from larder.models.units import BaseUnit, Unit


class Ingredient(BaseModel):
    """Ingredient known to the household."""

    id: int
    name: str
    category: Optional[str] = Field(default=None)
    is_staple: bool = Field(default=False)

    model_config = ConfigDict(frozen=True)


class StockEntry(BaseModel):
    """Current pantry holding of one ingredient, expressed in one unit."""

    id: Optional[int] = Field(default=None)
    ingredient_id: int
    ingredient_name: str = Field(default="")
    category: Optional[str] = Field(default=None)
    quantity: float = Field(ge=0)
    unit: Unit
    expiry_date: Optional[date] = Field(default=None)

    model_config = ConfigDict(frozen=True)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def quantity_normalized(self) -> float:
        return self.quantity * self.unit.conversion_ratio

    @property
    def base_unit(self) -> BaseUnit:
        return self.unit.base_unit


@dataclass(frozen=True)
class StockDelta:
    """Signed base-unit adjustment to apply to one ingredient's stock entry.

    Negative values consume stock and are floored at zero. Positive values restore
    stock; ``create_if_missing`` allows a restoration to open a new entry in ``unit``.
    """

    ingredient_id: int
    quantity_normalized: float
    unit: Unit
    create_if_missing: bool = False

    @property
    def base_unit(self) -> BaseUnit:
        return self.unit.base_unit

    @property
    def direction(self) -> str:
        return "restore" if self.quantity_normalized > 0 else "consume"


__all__ = ["Ingredient", "StockDelta", "StockEntry"]
