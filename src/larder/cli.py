"""Command-line interface for Larder."""

from __future__ import annotations

import json
from datetime import date
from typing import NoReturn, Optional

import typer
from pydantic import ValidationError

from larder.config import Settings, get_settings
from larder.deps import build_catalog, build_preparation_service, build_shopping_service
from larder.errors import ConcurrentPreparationConflict, InvalidServings, MealNotFound, UnknownUnit
from larder.ingest.recipes import import_recipe
from larder.logging_utils import configure_logging, database_secrets
from larder.models.recipe import RecipeImport
from larder.planning.shopping_list import week_start_for

app = typer.Typer(help="Larder meal-planning stock maintenance commands.")


def _configure_logging(settings: Settings) -> None:
    secrets = database_secrets(settings.database_url)
    configure_logging(settings.log_level, settings.log_format, secrets)


def _fail(message: str) -> NoReturn:
    typer.secho(message, fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


@app.callback()
def _setup() -> None:
    _configure_logging(get_settings())


@app.command()
def units() -> None:
    """List the unit catalog with conversion ratios."""

    for unit in build_catalog().list_units():
        flag = "" if unit.is_displayable else " (hidden)"
        typer.echo(f"{unit.code}\t{unit.family}\t{unit.conversion_ratio:g} {unit.base_unit}{flag}")


@app.command()
def prepare(meal_id: int = typer.Argument(..., help="Planned meal ID.")) -> None:
    """Mark a planned meal prepared and deduct its ingredients from stock."""

    service = build_preparation_service()
    try:
        changed = service.mark_prepared(meal_id)
    except (MealNotFound, ConcurrentPreparationConflict) as exc:
        _fail(str(exc))
    typer.echo(f"Meal {meal_id} prepared." if changed else f"Meal {meal_id} was already prepared.")


@app.command()
def servings(
    meal_id: int = typer.Argument(..., help="Planned meal ID."),
    count: int = typer.Argument(..., help="New number of servings."),
) -> None:
    """Change a meal's servings, reconciling stock when it is already prepared."""

    service = build_preparation_service()
    try:
        meal = service.update_servings(meal_id, count)
    except InvalidServings as exc:
        _fail(f"Invalid servings: {exc}")
    except (MealNotFound, ConcurrentPreparationConflict) as exc:
        _fail(str(exc))
    typer.echo(f"Meal {meal.id} now serves {meal.servings}.")


@app.command()
def sweep() -> None:
    """Mark every unprepared meal dated before today as prepared."""

    report = build_preparation_service().auto_mark_past_meals()
    typer.echo(report.summary())
    if report.failed:
        typer.secho(
            f"Failed meals: {', '.join(str(meal_id) for meal_id in report.failed)}",
            fg=typer.colors.YELLOW,
        )


@app.command("shopping-list")
def shopping_list(
    week_start: Optional[str] = typer.Argument(
        None, help="ISO date inside the target week (defaults to the current week)."
    ),
    pretty: bool = typer.Option(False, "--pretty", help="Pretty-print output JSON."),
) -> None:
    """Regenerate the shopping list for a week and print it as JSON."""

    try:
        day = date.fromisoformat(week_start) if week_start else date.today()
    except ValueError:
        _fail(f"Invalid date: {week_start}")

    result = build_shopping_service().generate(week_start_for(day))
    payload = result.model_dump(mode="json")
    if pretty:
        typer.echo(json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False))
    else:
        typer.echo(json.dumps(payload, ensure_ascii=False))


@app.command("complete-shopping")
def complete_shopping(list_id: int = typer.Argument(..., help="Shopping list ID.")) -> None:
    """Mark a shopping list purchased and move checked items into stock."""

    try:
        stocked = build_shopping_service().complete(list_id)
    except ValueError as exc:
        _fail(str(exc))
    typer.echo(f"Stocked {stocked} item(s).")


@app.command("import-recipe")
def import_recipe_command(path: str = typer.Argument(..., help="Recipe JSON file.")) -> None:
    """Import a recipe JSON payload, creating missing ingredients."""

    try:
        with open(path, "r", encoding="utf-8") as fh:
            payload = RecipeImport.model_validate(json.load(fh))
    except OSError as exc:
        _fail(f"Cannot read {path}: {exc}")
    except json.JSONDecodeError as exc:
        _fail(f"Invalid JSON in {path}: {exc}")
    except ValidationError as exc:
        _fail(f"Invalid recipe in {path}: {exc}")
    try:
        recipe = import_recipe(payload, build_catalog())
    except UnknownUnit as exc:
        _fail(str(exc))
    typer.echo(f"Imported recipe {recipe.id}: {recipe.name} ({len(recipe.ingredients)} lines)")


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for `python -m larder`."""
    app(prog_name="larder", args=argv)


if __name__ == "__main__":
    main()
