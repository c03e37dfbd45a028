"""Recipe persistence helpers."""

from __future__ import annotations

import json
import logging
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from larder.models.recipe import Recipe, RecipeFilters, RecipeIngredientLine
from larder.models.units import Unit

from .models import IngredientORM, PlannedMealORM, RecipeIngredientORM, RecipeORM
from .repository import session_scope
from .units import units_by_id

logger = logging.getLogger(__name__)

_UNSET = object()


def _decode_tags(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError:
        return [tag.strip() for tag in raw.split(",") if tag.strip()]
    return [str(tag) for tag in decoded] if isinstance(decoded, list) else []


def _line_to_model(
    row: RecipeIngredientORM, ingredient_name: str, units: Dict[int, Unit]
) -> RecipeIngredientLine:
    return RecipeIngredientLine.model_validate(
        {
            "id": row.id,
            "ingredient_id": row.ingredient_id,
            "ingredient_name": ingredient_name,
            "quantity": row.quantity,
            "unit": units[row.unit_id],
        }
    )


def _load_lines(
    session: Session, recipe_ids: Iterable[int], units: Dict[int, Unit]
) -> Dict[int, List[RecipeIngredientLine]]:
    ids = list(recipe_ids)
    lines: Dict[int, List[RecipeIngredientLine]] = {recipe_id: [] for recipe_id in ids}
    if not ids:
        return lines
    rows = session.execute(
        select(RecipeIngredientORM, IngredientORM.name)
        .join(IngredientORM, IngredientORM.id == RecipeIngredientORM.ingredient_id)
        .where(RecipeIngredientORM.recipe_id.in_(ids))
        .order_by(RecipeIngredientORM.recipe_id, RecipeIngredientORM.position, RecipeIngredientORM.id)
    ).all()
    for line_row, ingredient_name in rows:
        lines[line_row.recipe_id].append(_line_to_model(line_row, ingredient_name, units))
    return lines


def _to_model(row: RecipeORM, lines: List[RecipeIngredientLine]) -> Recipe:
    return Recipe.model_validate(
        {
            "id": row.id,
            "name": row.name,
            "base_servings": row.base_servings,
            "category": row.category,
            "tags": _decode_tags(row.tags),
            "instructions": row.instructions,
            "ingredients": lines,
        }
    )


def get_recipe(recipe_id: int) -> Optional[Recipe]:
    with session_scope() as session:
        row = session.get(RecipeORM, recipe_id)
        if row is None:
            return None
        lines = _load_lines(session, [row.id], units_by_id(session))
        return _to_model(row, lines[row.id])


def list_recipes(filters: Optional[RecipeFilters] = None) -> List[Recipe]:
    """Return recipes ordered by name, optionally filtered by name, category or tag."""

    filters = filters or RecipeFilters()
    query = select(RecipeORM).order_by(RecipeORM.name, RecipeORM.id)
    if filters.search:
        query = query.where(RecipeORM.name.ilike(f"%{filters.search.strip()}%"))
    if filters.category:
        query = query.where(RecipeORM.category == filters.category)

    with session_scope() as session:
        rows = session.execute(query).scalars().all()
        if filters.tag:
            rows = [row for row in rows if filters.tag in _decode_tags(row.tags)]
        lines = _load_lines(session, [row.id for row in rows], units_by_id(session))
        return [_to_model(row, lines[row.id]) for row in rows]


def create_recipe_in_session(
    session: Session,
    *,
    name: str,
    base_servings: int = 4,
    category: Optional[str] = None,
    tags: Sequence[str] = (),
    instructions: Optional[str] = None,
    lines: Sequence[RecipeIngredientLine] = (),
) -> Recipe:
    """Insert a recipe and its lines in the caller's transaction."""

    recipe = RecipeORM(
        name=name.strip(),
        base_servings=int(base_servings),
        category=category,
        tags=json.dumps(list(tags)) if tags else None,
        instructions=instructions,
    )
    session.add(recipe)
    session.flush()
    for position, line in enumerate(lines):
        session.add(
            RecipeIngredientORM(
                recipe_id=recipe.id,
                ingredient_id=line.ingredient_id,
                quantity=float(line.quantity),
                unit_id=line.unit.id,
                quantity_normalized=line.quantity_normalized,
                position=position,
            )
        )
    session.flush()
    loaded = _load_lines(session, [recipe.id], units_by_id(session))
    return _to_model(recipe, loaded[recipe.id])


def create_recipe(
    *,
    name: str,
    base_servings: int = 4,
    category: Optional[str] = None,
    tags: Sequence[str] = (),
    instructions: Optional[str] = None,
    lines: Sequence[RecipeIngredientLine] = (),
) -> Recipe:
    with session_scope() as session:
        return create_recipe_in_session(
            session,
            name=name,
            base_servings=base_servings,
            category=category,
            tags=tags,
            instructions=instructions,
            lines=lines,
        )


def update_recipe_line(
    line_id: int,
    *,
    quantity: float | object = _UNSET,
    unit: Unit | object = _UNSET,
) -> RecipeIngredientLine:
    """Edit a recipe line; the stored normalized quantity is always recomputed."""

    with session_scope() as session:
        row = session.get(RecipeIngredientORM, line_id)
        if row is None:
            raise ValueError(f"Recipe line {line_id} not found")

        units = units_by_id(session)
        if quantity is not _UNSET:
            row.quantity = float(quantity)  # type: ignore[arg-type]
        if unit is not _UNSET:
            row.unit_id = unit.id  # type: ignore[union-attr]
        line_unit = units[row.unit_id]
        row.quantity_normalized = row.quantity * line_unit.conversion_ratio

        session.flush()
        ingredient = session.get(IngredientORM, row.ingredient_id)
        return _line_to_model(row, ingredient.name if ingredient else "", units)


def delete_recipe(recipe_id: int) -> None:
    """Delete a recipe, its lines and its planned meals; stock is left untouched."""

    with session_scope() as session:
        row = session.get(RecipeORM, recipe_id)
        if row is None:
            raise ValueError(f"Recipe {recipe_id} not found")
        removed = session.execute(
            delete(PlannedMealORM).where(PlannedMealORM.recipe_id == recipe_id)
        ).rowcount
        session.execute(delete(RecipeIngredientORM).where(RecipeIngredientORM.recipe_id == recipe_id))
        session.delete(row)
        logger.info("Deleted recipe %s with %d planned meals", recipe_id, removed)


__all__ = [
    "create_recipe",
    "create_recipe_in_session",
    "delete_recipe",
    "get_recipe",
    "list_recipes",
    "update_recipe_line",
]
