"""Prometheus metrics definitions for Larder."""

from __future__ import annotations

from prometheus_client import Counter

MEAL_TRANSITIONS = Counter(
    "larder_meal_transitions_total",
    "Meal preparation state transitions by kind and result",
    ["transition", "result"],
)

STOCK_ADJUSTMENTS = Counter(
    "larder_stock_adjustments_total",
    "Stock ledger adjustments applied by direction",
    ["direction"],
)

SWEEP_MEALS = Counter(
    "larder_sweep_meals_total",
    "Meals visited by the past-meal sweep by outcome",
    ["result"],
)

DEMAND_SKIPPED_MEALS = Counter(
    "larder_demand_skipped_meals_total",
    "Planned meals left out of demand aggregation",
    ["reason"],
)

SHOPPING_LISTS_GENERATED = Counter(
    "larder_shopping_lists_generated_total",
    "Number of shopping lists regenerated",
)

__all__ = [
    "MEAL_TRANSITIONS",
    "STOCK_ADJUSTMENTS",
    "SWEEP_MEALS",
    "DEMAND_SKIPPED_MEALS",
    "SHOPPING_LISTS_GENERATED",
]
