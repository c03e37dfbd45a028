"""
Larder meal-planning engine.

The package reconciles recipe quantities across units, aggregates weekly demand, keeps the
pantry stock ledger consistent with prepared meals, and derives shopping lists.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
