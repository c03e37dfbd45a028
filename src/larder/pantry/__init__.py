"""Pantry stock ledger."""

from larder.pantry.ledger import StockLedger, apply_delta, stock_totals

__all__ = ["StockLedger", "apply_delta", "stock_totals"]
