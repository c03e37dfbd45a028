"""Shopping list and demand aggregation models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Literal, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field

from larder.models.units import BaseUnit, Unit

ShoppingListStatus = Literal["draft", "validated", "purchased"]


class DemandKey(NamedTuple):
    """Aggregation bucket key; one ingredient may appear under several base units."""

    ingredient_id: int
    base_unit: BaseUnit


@dataclass
class AggregatedDemand:
    """Accumulated base-unit demand for one ingredient in one unit family."""

    ingredient_id: int
    ingredient_name: str
    base_unit: BaseUnit
    display_unit: Unit
    quantity_normalized: float = 0.0
    recipe_names: set[str] = field(default_factory=set)

    @property
    def key(self) -> DemandKey:
        return DemandKey(self.ingredient_id, self.base_unit)


class ShoppingListItem(BaseModel):
    """Single ingredient to buy for a planned week."""

    id: Optional[int] = Field(default=None)
    ingredient_id: int
    ingredient_name: str = Field(default="")
    category: Optional[str] = Field(default=None)
    quantity_needed: float = Field(ge=0)
    unit: Unit
    quantity_normalized: float = Field(ge=0)
    deficit_normalized: float = Field(default=0.0, ge=0)
    recipes: Optional[str] = Field(default=None)
    checked: bool = Field(default=False)

    model_config = ConfigDict(frozen=True)


class ShoppingList(BaseModel):
    """Week-scoped shopping list snapshot."""

    id: int
    week_start: date
    status: ShoppingListStatus = Field(default="draft")
    created_at: datetime
    purchased_at: Optional[datetime] = Field(default=None)
    items: list[ShoppingListItem] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


__all__ = [
    "AggregatedDemand",
    "DemandKey",
    "ShoppingList",
    "ShoppingListItem",
    "ShoppingListStatus",
]
