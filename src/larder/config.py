"""Application configuration helpers."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

ENV_FILE_CANDIDATES = (Path(".env"), Path(".env.local"))


class Settings(BaseModel):
    """Global application settings loaded from environment variables or .env files."""

    database_path: Path = Field(
        default=Path("./data/larder.db"),
        description="SQLite database location.",
    )
    database_url: Optional[str] = Field(
        default=None,
        description="Full SQLAlchemy URL; overrides database_path when set.",
    )
    units_snapshot_path: Optional[Path] = Field(
        default=None,
        description="JSON file used to seed the unit catalog instead of the built-in table.",
    )
    log_level: str = Field(default="INFO", description="Logging level (DEBUG/INFO/WARNING/ERROR)")
    log_format: str = Field(
        default="plain",
        description="Logging format (plain/json).",
    )
    provenance_width: int = Field(
        default=60,
        ge=10,
        description="Maximum width of the recipe provenance text on shopping list items.",
    )
    shopping_skip_prepared: bool = Field(
        default=False,
        description="Leave already prepared meals out of shopping list demand when true.",
    )
    transition_attempts: int = Field(
        default=3,
        ge=1,
        description="Attempts for a meal transition before reporting a concurrent conflict.",
    )

    model_config = ConfigDict(frozen=True)

    def resolved_database_url(self) -> str:
        """Return the SQLAlchemy URL used by the repository layer."""

        if self.database_url:
            return self.database_url
        return f"sqlite:///{self.database_path}"


def _coerce_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _parse_env_file(path: Path) -> dict[str, str]:
    payload: dict[str, str] = {}
    try:
        with path.open("r", encoding="utf-8") as handle:
            for raw_line in handle:
                line = raw_line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, raw_value = line.split("=", 1)
                payload[key.strip()] = raw_value.strip()
    except FileNotFoundError:
        return {}
    return payload


def _load_env_file_values() -> dict[str, str]:
    values: dict[str, str] = {}
    for candidate in ENV_FILE_CANDIDATES:
        values.update(_parse_env_file(candidate))
    return values


def _load_from_env() -> dict[str, object]:
    """Load optional overrides from env vars (with .env fallbacks)."""

    file_values = _load_env_file_values()

    def _env(key: str) -> Optional[str]:
        return os.environ.get(key) or file_values.get(key)

    payload: dict[str, object] = {}
    if (db_path := _env("LARDER_DATABASE_PATH")):
        payload["database_path"] = Path(db_path)
    if (db_url := _env("LARDER_DATABASE_URL")):
        payload["database_url"] = db_url
    if (units_snapshot := _env("LARDER_UNITS_SNAPSHOT_PATH")):
        payload["units_snapshot_path"] = Path(units_snapshot)
    if (log_level := _env("LARDER_LOG_LEVEL")):
        payload["log_level"] = log_level
    if (log_format := _env("LARDER_LOG_FORMAT")):
        payload["log_format"] = log_format
    if (provenance_width := _env("LARDER_PROVENANCE_WIDTH")):
        try:
            payload["provenance_width"] = int(provenance_width)
        except ValueError:
            pass
    if (skip_prepared := _env("LARDER_SHOPPING_SKIP_PREPARED")):
        payload["shopping_skip_prepared"] = _coerce_bool(skip_prepared)
    if (attempts := _env("LARDER_TRANSITION_ATTEMPTS")):
        try:
            payload["transition_attempts"] = int(attempts)
        except ValueError:
            pass
    return payload


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings(**_load_from_env())
