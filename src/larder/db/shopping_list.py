"""Shopping list persistence helpers."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Dict, List, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from larder.models.shopping import ShoppingList, ShoppingListItem
from larder.models.units import Unit

from .models import IngredientORM, ShoppingListItemORM, ShoppingListORM
from .repository import session_scope
from .stock import ledger_for_update, persist_ledger
from .units import units_by_id

logger = logging.getLogger(__name__)


def _item_to_model(
    row: ShoppingListItemORM, ingredient: IngredientORM, units: Dict[int, Unit]
) -> ShoppingListItem:
    return ShoppingListItem.model_validate(
        {
            "id": row.id,
            "ingredient_id": row.ingredient_id,
            "ingredient_name": ingredient.name,
            "category": ingredient.category,
            "quantity_needed": row.quantity_needed,
            "unit": units[row.unit_id],
            "quantity_normalized": row.quantity_normalized,
            "deficit_normalized": row.deficit_normalized,
            "recipes": row.recipes,
            "checked": row.checked,
        }
    )


def _load_items(session: Session, list_id: int) -> List[ShoppingListItem]:
    units = units_by_id(session)
    rows = session.execute(
        select(ShoppingListItemORM, IngredientORM)
        .join(IngredientORM, IngredientORM.id == ShoppingListItemORM.ingredient_id)
        .where(ShoppingListItemORM.list_id == list_id)
        .order_by(ShoppingListItemORM.id)
    ).all()
    return [_item_to_model(row, ingredient, units) for row, ingredient in rows]


def _to_model(session: Session, row: ShoppingListORM) -> ShoppingList:
    return ShoppingList.model_validate(
        {
            "id": row.id,
            "week_start": row.week_start,
            "status": row.status,
            "created_at": row.created_at,
            "purchased_at": row.purchased_at,
            "items": _load_items(session, row.id),
        }
    )


def _delete_list(session: Session, list_id: int) -> None:
    session.execute(delete(ShoppingListItemORM).where(ShoppingListItemORM.list_id == list_id))
    session.execute(delete(ShoppingListORM).where(ShoppingListORM.id == list_id))


def replace_shopping_list(week_start: date, items: Sequence[ShoppingListItem]) -> ShoppingList:
    """Delete any list for ``week_start`` and store ``items`` as a fresh draft."""

    with session_scope() as session:
        existing = session.execute(
            select(ShoppingListORM.id).where(ShoppingListORM.week_start == week_start)
        ).scalar_one_or_none()
        if existing is not None:
            _delete_list(session, existing)
            session.flush()

        header = ShoppingListORM(week_start=week_start, status="draft", created_at=datetime.now())
        session.add(header)
        session.flush()
        for item in items:
            session.add(
                ShoppingListItemORM(
                    list_id=header.id,
                    ingredient_id=item.ingredient_id,
                    quantity_needed=item.quantity_needed,
                    unit_id=item.unit.id,
                    quantity_normalized=item.quantity_normalized,
                    deficit_normalized=item.deficit_normalized,
                    recipes=item.recipes,
                    checked=item.checked,
                )
            )
        session.flush()
        return _to_model(session, header)


def get_shopping_list(week_start: date) -> Optional[ShoppingList]:
    with session_scope() as session:
        row = session.execute(
            select(ShoppingListORM).where(ShoppingListORM.week_start == week_start)
        ).scalar_one_or_none()
        if row is None:
            return None
        return _to_model(session, row)


def get_shopping_list_by_id(list_id: int) -> Optional[ShoppingList]:
    with session_scope() as session:
        row = session.get(ShoppingListORM, list_id)
        if row is None:
            return None
        return _to_model(session, row)


def toggle_shopping_item(item_id: int) -> ShoppingListItem:
    with session_scope() as session:
        row = session.get(ShoppingListItemORM, item_id)
        if row is None:
            raise ValueError(f"Shopping list item {item_id} not found")
        row.checked = not row.checked
        session.flush()
        ingredient = session.get(IngredientORM, row.ingredient_id)
        assert ingredient is not None
        return _item_to_model(row, ingredient, units_by_id(session))


def complete_shopping(list_id: int) -> int:
    """Mark the list purchased and add every checked item to stock.

    Missing stock entries are opened in the item's unit. Returns the number of items
    moved into stock; an item whose stock is held in another unit family is skipped.
    """

    with session_scope() as session:
        header = session.get(ShoppingListORM, list_id)
        if header is None:
            raise ValueError(f"Shopping list {list_id} not found")

        checked = [item for item in _load_items(session, list_id) if item.checked]
        ledger = ledger_for_update(session, (item.ingredient_id for item in checked))
        stocked = 0
        for item in checked:
            before = ledger.get(item.ingredient_id)
            after = ledger.increment(item.ingredient_id, item.quantity_normalized, item.unit)
            # An entry held in another unit family comes back unchanged.
            if after is not None and after is not before:
                stocked += 1
        persist_ledger(session, ledger)

        header.status = "purchased"
        header.purchased_at = datetime.now()
        session.flush()
        return stocked


__all__ = [
    "complete_shopping",
    "get_shopping_list",
    "get_shopping_list_by_id",
    "replace_shopping_list",
    "toggle_shopping_item",
]
