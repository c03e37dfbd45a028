"""SQLAlchemy models representing Larder persistence tables."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base class for Larder ORM models."""


class UnitORM(Base):
    """Unit reference row with its conversion ratio to the family base unit."""

    __tablename__ = "units"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    label: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    family: Mapped[str] = mapped_column(String(16), nullable=False)
    base_unit: Mapped[str] = mapped_column(String(16), nullable=False)
    conversion_ratio: Mapped[float] = mapped_column(Float, nullable=False)
    is_displayable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    needs_article: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class IngredientORM(Base):
    """Ingredient known to the household; names are unique."""

    __tablename__ = "ingredients"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    category: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    is_staple: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
    )


class RecipeORM(Base):
    __tablename__ = "recipes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    base_servings: Mapped[int] = mapped_column(Integer, nullable=False, default=4)
    category: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    tags: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    instructions: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class RecipeIngredientORM(Base):
    """Ingredient line of a recipe; ``quantity_normalized`` is rewritten on every edit."""

    __tablename__ = "recipe_ingredients"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    recipe_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False
    )
    ingredient_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("ingredients.id"), nullable=False
    )
    quantity: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    unit_id: Mapped[int] = mapped_column(Integer, ForeignKey("units.id"), nullable=False)
    quantity_normalized: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class StockORM(Base):
    """Pantry stock, one row per ingredient."""

    __tablename__ = "stock"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    ingredient_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("ingredients.id"), nullable=False, unique=True
    )
    quantity: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    unit_id: Mapped[int] = mapped_column(Integer, ForeignKey("units.id"), nullable=False)
    quantity_normalized: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    expiry_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class PlannedMealORM(Base):
    """Recipe scheduled on a calendar slot."""

    __tablename__ = "planned_meals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    meal_type: Mapped[str] = mapped_column(String(16), nullable=False)
    recipe_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("recipes.id"), nullable=True
    )
    servings: Mapped[int] = mapped_column(Integer, nullable=False, default=2)
    is_prepared: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
    )


class ShoppingListORM(Base):
    """Week-scoped shopping list header."""

    __tablename__ = "shopping_lists"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    week_start: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="draft")
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    purchased_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Ids are never reused once a list is replaced.
    __table_args__ = (
        UniqueConstraint("week_start", name="uq_shopping_lists_week_start"),
        {"sqlite_autoincrement": True},
    )


class ShoppingListItemORM(Base):
    """Generated shopping list entry."""

    __tablename__ = "shopping_list_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    list_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("shopping_lists.id", ondelete="CASCADE"), nullable=False
    )
    ingredient_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("ingredients.id"), nullable=False
    )
    quantity_needed: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    unit_id: Mapped[int] = mapped_column(Integer, ForeignKey("units.id"), nullable=False)
    quantity_normalized: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    deficit_normalized: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    recipes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    checked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = ({"sqlite_autoincrement": True},)


__all__ = [
    "Base",
    "UnitORM",
    "IngredientORM",
    "RecipeORM",
    "RecipeIngredientORM",
    "StockORM",
    "PlannedMealORM",
    "ShoppingListORM",
    "ShoppingListItemORM",
]
