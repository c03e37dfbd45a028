"""Unit catalog, quantity normalization and recipe scaling."""

from larder.quantities.catalog import UnitCatalog
from larder.quantities.normalizer import (
    QuantityNormalizer,
    best_display_unit,
    convert,
    denormalize,
    normalize,
)
from larder.quantities.scaler import RecipeScaler, round_for_display

__all__ = [
    "UnitCatalog",
    "QuantityNormalizer",
    "best_display_unit",
    "convert",
    "denormalize",
    "normalize",
    "RecipeScaler",
    "round_for_display",
]
