"""Shared pytest fixtures for the Larder test suite."""

from __future__ import annotations

import pytest

from larder.config import get_settings
from larder.db.repository import reset_repository_state
from larder.db.units import default_units
from larder.quantities.catalog import UnitCatalog
from larder.quantities.scaler import RecipeScaler


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Ensure each test uses an isolated SQLite database location."""

    db_path = tmp_path / "test_larder.db"
    monkeypatch.setenv("LARDER_DATABASE_PATH", str(db_path))
    monkeypatch.delenv("LARDER_DATABASE_URL", raising=False)
    monkeypatch.delenv("LARDER_UNITS_SNAPSHOT_PATH", raising=False)
    get_settings.cache_clear()
    reset_repository_state()
    yield
    reset_repository_state()
    monkeypatch.delenv("LARDER_DATABASE_PATH", raising=False)
    get_settings.cache_clear()


@pytest.fixture()
def catalog() -> UnitCatalog:
    """Catalog built from the default unit table, without a database."""

    return UnitCatalog(default_units())


@pytest.fixture()
def scaler(catalog) -> RecipeScaler:
    return RecipeScaler(catalog)
