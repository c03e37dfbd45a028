"""Recipe data models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from larder.models.units import BaseUnit, Unit


class RecipeIngredientLine(BaseModel):
    """One ingredient line of a recipe, in the line's own display unit."""

    id: Optional[int] = Field(default=None)
    ingredient_id: int
    ingredient_name: str = Field(default="")
    quantity: float = Field(ge=0)
    unit: Unit

    model_config = ConfigDict(frozen=True)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def quantity_normalized(self) -> float:
        return self.quantity * self.unit.conversion_ratio

    @property
    def base_unit(self) -> BaseUnit:
        return self.unit.base_unit


class Recipe(BaseModel):
    """Recipe with ingredient quantities listed for ``base_servings`` people."""

    id: int
    name: str
    base_servings: int
    category: Optional[str] = Field(default=None)
    tags: list[str] = Field(default_factory=list)
    instructions: Optional[str] = Field(default=None)
    ingredients: list[RecipeIngredientLine] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class RecipeFilters(BaseModel):
    """Optional filters for recipe listing."""

    search: Optional[str] = Field(default=None)
    category: Optional[str] = Field(default=None)
    tag: Optional[str] = Field(default=None)

    model_config = ConfigDict(frozen=True)


class RecipeImportLine(BaseModel):
    """Ingredient line of an imported recipe, referencing units by code."""

    name: str = Field(min_length=1)
    quantity: float = Field(default=0.0, ge=0)
    unit_code: str = Field(default="piece")
    category: Optional[str] = Field(default=None)


class RecipeImport(BaseModel):
    """Recipe payload accepted by the importer."""

    name: str = Field(min_length=1)
    base_servings: int = Field(default=4, ge=1)
    category: Optional[str] = Field(default=None)
    tags: list[str] = Field(default_factory=list)
    instructions: Optional[str] = Field(default=None)
    ingredients: list[RecipeImportLine] = Field(default_factory=list)


@dataclass(frozen=True)
class ScaledLine:
    """Recipe line scaled to a target serving count."""

    ingredient_id: int
    ingredient_name: str
    quantity: float
    unit: Unit
    quantity_normalized: float

    @property
    def base_unit(self) -> BaseUnit:
        return self.unit.base_unit


__all__ = [
    "Recipe",
    "RecipeFilters",
    "RecipeImport",
    "RecipeImportLine",
    "RecipeIngredientLine",
    "ScaledLine",
]
