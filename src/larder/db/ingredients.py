"""Ingredient data access helpers."""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from larder.models.pantry import Ingredient

from .models import IngredientORM
from .repository import session_scope

logger = logging.getLogger(__name__)


def _to_model(row: IngredientORM) -> Ingredient:
    return Ingredient.model_validate(
        {
            "id": row.id,
            "name": row.name,
            "category": row.category,
            "is_staple": row.is_staple,
        }
    )


def _find_by_name(session: Session, name: str) -> Optional[IngredientORM]:
    return session.execute(
        select(IngredientORM).where(IngredientORM.name == name)
    ).scalar_one_or_none()


def get_or_create_in_session(
    session: Session, name: str, category: Optional[str] = None
) -> IngredientORM:
    """Return the ingredient with exactly ``name``, inserting it when absent."""

    cleaned = name.strip()
    row = _find_by_name(session, cleaned)
    if row is not None:
        return row
    row = IngredientORM(name=cleaned, category=category, is_staple=False)
    session.add(row)
    session.flush()
    logger.info("Created ingredient %r (id=%s)", cleaned, row.id)
    return row


def list_ingredients() -> List[Ingredient]:
    with session_scope() as session:
        rows = session.execute(select(IngredientORM).order_by(IngredientORM.name)).scalars().all()
        return [_to_model(row) for row in rows]


def get_ingredient(ingredient_id: int) -> Optional[Ingredient]:
    with session_scope() as session:
        row = session.get(IngredientORM, ingredient_id)
        if row is None:
            return None
        return _to_model(row)


def create_ingredient(
    *,
    name: str,
    category: Optional[str] = None,
    is_staple: bool = False,
) -> Ingredient:
    with session_scope() as session:
        cleaned = name.strip()
        if _find_by_name(session, cleaned) is not None:
            raise ValueError(f"Ingredient {cleaned!r} already exists")
        row = IngredientORM(name=cleaned, category=category, is_staple=is_staple)
        session.add(row)
        session.flush()
        return _to_model(row)


def get_or_create_ingredient(name: str, category: Optional[str] = None) -> Ingredient:
    """Exact-name lookup; a missing ingredient is created (never fuzzy matched)."""

    with session_scope() as session:
        return _to_model(get_or_create_in_session(session, name, category))


def set_staple(ingredient_id: int, is_staple: bool) -> Ingredient:
    with session_scope() as session:
        row = session.get(IngredientORM, ingredient_id)
        if row is None:
            raise ValueError(f"Ingredient {ingredient_id} not found")
        row.is_staple = bool(is_staple)
        session.flush()
        return _to_model(row)


__all__ = [
    "create_ingredient",
    "get_ingredient",
    "get_or_create_in_session",
    "get_or_create_ingredient",
    "list_ingredients",
    "set_staple",
]
