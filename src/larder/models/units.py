"""Unit reference data models."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

UnitFamily = Literal["mass", "volume", "count"]
BaseUnit = Literal["g", "ml", "piece"]

FAMILY_BASE_UNITS: dict[str, str] = {
    "mass": "g",
    "volume": "ml",
    "count": "piece",
}


class Unit(BaseModel):
    """Measurement unit with its conversion ratio to the family's base unit."""

    id: int
    code: str
    label: Optional[str] = Field(default=None)
    family: UnitFamily
    base_unit: BaseUnit
    conversion_ratio: float = Field(gt=0)
    is_displayable: bool = Field(default=True)
    needs_article: bool = Field(default=False)
    display_order: int = Field(default=0)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_family(self) -> "Unit":
        expected = FAMILY_BASE_UNITS[self.family]
        if self.base_unit != expected:
            raise ValueError(
                f"unit {self.code!r} of family {self.family} must use base unit "
                f"{expected!r}, not {self.base_unit!r}"
            )
        return self

    @property
    def is_base(self) -> bool:
        return self.code == self.base_unit


__all__ = ["BaseUnit", "FAMILY_BASE_UNITS", "Unit", "UnitFamily"]
