"""Turn imported recipe payloads into stored recipes."""

from __future__ import annotations

import logging
from typing import List

from larder.db.ingredients import get_or_create_in_session
from larder.db.recipes import create_recipe_in_session
from larder.db.repository import session_scope
from larder.models.recipe import Recipe, RecipeImport, RecipeIngredientLine
from larder.quantities.catalog import UnitCatalog

logger = logging.getLogger(__name__)


def import_recipe(payload: RecipeImport, catalog: UnitCatalog) -> Recipe:
    """Store ``payload`` as a recipe.

    Every unit code is resolved before anything is written, so an unknown code raises
    ``UnknownUnit`` (listing the valid codes) and leaves the database untouched.
    Ingredients are matched by exact name and created when missing, in the same
    transaction as the recipe.
    """

    units = [catalog.get_by_code(line.unit_code) for line in payload.ingredients]

    with session_scope() as session:
        lines: List[RecipeIngredientLine] = []
        for raw_line, unit in zip(payload.ingredients, units):
            ingredient = get_or_create_in_session(session, raw_line.name, raw_line.category)
            lines.append(
                RecipeIngredientLine(
                    ingredient_id=ingredient.id,
                    ingredient_name=ingredient.name,
                    quantity=raw_line.quantity,
                    unit=unit,
                )
            )

        recipe = create_recipe_in_session(
            session,
            name=payload.name,
            base_servings=payload.base_servings,
            category=payload.category,
            tags=payload.tags,
            instructions=payload.instructions,
            lines=lines,
        )

    logger.info(
        "Imported recipe %r (id=%s) with %d ingredient lines",
        recipe.name,
        recipe.id,
        len(recipe.ingredients),
    )
    return recipe


__all__ = ["import_recipe"]
