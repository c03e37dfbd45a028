"""Pantry stock data access helpers."""

from __future__ import annotations

from datetime import date
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from larder.models.pantry import StockEntry
from larder.models.units import Unit
from larder.pantry.ledger import StockLedger

from .models import IngredientORM, StockORM
from .repository import session_scope
from .units import units_by_id


def _to_model(row: StockORM, ingredient: IngredientORM, units: Dict[int, Unit]) -> StockEntry:
    return StockEntry.model_validate(
        {
            "id": row.id,
            "ingredient_id": row.ingredient_id,
            "ingredient_name": ingredient.name,
            "category": ingredient.category,
            "quantity": max(0.0, row.quantity),
            "unit": units[row.unit_id],
            "expiry_date": row.expiry_date,
        }
    )


def _select_stock():
    return select(StockORM, IngredientORM).join(
        IngredientORM, IngredientORM.id == StockORM.ingredient_id
    )


def _select_stock_for_update(ingredient_ids: Iterable[int]):
    return (
        _select_stock()
        .where(StockORM.ingredient_id.in_(list(ingredient_ids)))
        .with_for_update(of=StockORM)
    )


def ledger_for_update(session: Session, ingredient_ids: Iterable[int]) -> StockLedger:
    """Load and lock the stock rows of ``ingredient_ids`` inside an open transaction.

    Row locks hold until the transaction ends, so transitions on different meals
    sharing an ingredient serialize on server databases. SQLite has no row locks and
    relies on its database-wide write lock instead.
    """

    ids = set(ingredient_ids)
    units = units_by_id(session)
    rows = session.execute(_select_stock_for_update(ids)).all()
    return StockLedger(_to_model(row, ingredient, units) for row, ingredient in rows)


def persist_ledger(session: Session, ledger: StockLedger) -> int:
    """Write every changed ledger entry back; returns the number of rows written."""

    written = 0
    for entry in ledger.changed():
        row = session.execute(
            select(StockORM)
            .where(StockORM.ingredient_id == entry.ingredient_id)
            .with_for_update()
        ).scalar_one_or_none()
        if row is None:
            row = StockORM(ingredient_id=entry.ingredient_id)
            session.add(row)
        row.quantity = entry.quantity
        row.unit_id = entry.unit.id
        row.quantity_normalized = entry.quantity_normalized
        row.expiry_date = entry.expiry_date
        written += 1
    session.flush()
    return written


def list_stock() -> List[StockEntry]:
    with session_scope() as session:
        units = units_by_id(session)
        rows = session.execute(_select_stock().order_by(IngredientORM.name)).all()
        return [_to_model(row, ingredient, units) for row, ingredient in rows]


def get_stock_entry(ingredient_id: int) -> Optional[StockEntry]:
    with session_scope() as session:
        units = units_by_id(session)
        result = session.execute(
            _select_stock().where(StockORM.ingredient_id == ingredient_id)
        ).first()
        if result is None:
            return None
        row, ingredient = result
        return _to_model(row, ingredient, units)


def upsert_stock(
    ingredient_id: int,
    quantity: float,
    unit: Unit,
    *,
    expiry_date: Optional[date] = None,
) -> StockEntry:
    """Set the held quantity of an ingredient; the unit may differ from the previous one."""

    with session_scope() as session:
        if session.get(IngredientORM, ingredient_id) is None:
            raise ValueError(f"Ingredient {ingredient_id} not found")
        ledger = ledger_for_update(session, [ingredient_id])
        ledger.upsert(ingredient_id, float(quantity), unit, expiry_date=expiry_date)
        persist_ledger(session, ledger)
        row, ingredient = session.execute(
            _select_stock().where(StockORM.ingredient_id == ingredient_id)
        ).one()
        return _to_model(row, ingredient, units_by_id(session))


def delete_stock(ingredient_id: int) -> None:
    with session_scope() as session:
        row = session.execute(
            select(StockORM).where(StockORM.ingredient_id == ingredient_id)
        ).scalar_one_or_none()
        if row is None:
            raise ValueError(f"Stock entry for ingredient {ingredient_id} not found")
        session.delete(row)


__all__ = [
    "delete_stock",
    "get_stock_entry",
    "ledger_for_update",
    "list_stock",
    "persist_ledger",
    "upsert_stock",
]
