"""Exception types raised by the quantity-reconciliation engine."""

from __future__ import annotations

from typing import Iterable, Optional


class LarderError(Exception):
    """Base class for all engine errors."""


class UnknownUnit(LarderError, LookupError):
    """A unit code or id is not present in the unit catalog."""

    def __init__(self, reference: object, valid_codes: Optional[Iterable[str]] = None) -> None:
        self.reference = reference
        message = f"Unknown unit {reference!r}"
        if valid_codes is not None:
            message += f"; valid codes: {', '.join(valid_codes)}"
        super().__init__(message)


class IncompatibleUnit(LarderError, ValueError):
    """A conversion was attempted across unit families."""


class InvalidServings(LarderError, ValueError):
    """Base or target serving count is not a positive number."""


class MissingRecipeReference(LarderError, LookupError):
    """A planned meal points at a recipe that no longer exists."""

    def __init__(self, recipe_id: int, meal_id: Optional[int] = None) -> None:
        self.recipe_id = recipe_id
        self.meal_id = meal_id
        super().__init__(f"Recipe {recipe_id} referenced by meal {meal_id} not found")


class MealNotFound(LarderError, LookupError):
    """The planned meal id does not exist."""

    def __init__(self, meal_id: int) -> None:
        self.meal_id = meal_id
        super().__init__(f"Planned meal {meal_id} not found")


class ConcurrentPreparationConflict(LarderError, RuntimeError):
    """A meal transition kept losing its compare-and-set against concurrent writers."""

    def __init__(self, meal_id: int, attempts: int) -> None:
        self.meal_id = meal_id
        self.attempts = attempts
        super().__init__(f"Planned meal {meal_id} changed concurrently ({attempts} attempts)")


__all__ = [
    "LarderError",
    "UnknownUnit",
    "IncompatibleUnit",
    "InvalidServings",
    "MissingRecipeReference",
    "MealNotFound",
    "ConcurrentPreparationConflict",
]
