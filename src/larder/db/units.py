"""Unit reference table: default catalog, snapshot seeding and loading."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from larder.config import get_settings
from larder.models.units import Unit

from .models import UnitORM
from .repository import session_scope

logger = logging.getLogger(__name__)

_COUNT_UNITS = (
    "gousse",
    "tranche",
    "feuille",
    "botte",
    "bouquet",
    "sachet",
    "brin",
    "branche",
    "tige",
    "filet",
    "cube",
    "noix",
    "grain",
    "tete",
    "plaque",
    "poignee",
    "grappe",
    "boule",
    "baton",
    "trait",
)

DEFAULT_UNITS: List[Dict[str, Any]] = [
    {"code": "g", "label": "gramme", "family": "mass", "base_unit": "g", "conversion_ratio": 1},
    {"code": "kg", "label": "kilogramme", "family": "mass", "base_unit": "g", "conversion_ratio": 1000},
    {
        "code": "pincee",
        "label": "pincée",
        "family": "mass",
        "base_unit": "g",
        "conversion_ratio": 0.5,
        "is_displayable": False,
        "needs_article": True,
    },
    {"code": "ml", "label": "millilitre", "family": "volume", "base_unit": "ml", "conversion_ratio": 1},
    {"code": "cl", "label": "centilitre", "family": "volume", "base_unit": "ml", "conversion_ratio": 10},
    {"code": "l", "label": "litre", "family": "volume", "base_unit": "ml", "conversion_ratio": 1000},
    {
        "code": "cas",
        "label": "cuillère à soupe",
        "family": "volume",
        "base_unit": "ml",
        "conversion_ratio": 15,
        "needs_article": True,
    },
    {
        "code": "cac",
        "label": "cuillère à café",
        "family": "volume",
        "base_unit": "ml",
        "conversion_ratio": 5,
        "needs_article": True,
    },
    {
        "code": "verre",
        "label": "verre",
        "family": "volume",
        "base_unit": "ml",
        "conversion_ratio": 200,
        "needs_article": True,
    },
    {
        "code": "tasse",
        "label": "tasse",
        "family": "volume",
        "base_unit": "ml",
        "conversion_ratio": 250,
        "needs_article": True,
    },
    {"code": "piece", "label": "pièce", "family": "count", "base_unit": "piece", "conversion_ratio": 1},
] + [
    {
        "code": code,
        "label": code,
        "family": "count",
        "base_unit": "piece",
        "conversion_ratio": 1,
        "needs_article": True,
    }
    for code in _COUNT_UNITS
]


def _records_with_ids(records: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    resolved: List[Dict[str, Any]] = []
    for position, record in enumerate(records, start=1):
        payload = dict(record)
        payload.setdefault("id", position)
        payload.setdefault("display_order", position)
        resolved.append(payload)
    return resolved


def default_units() -> List[Unit]:
    """Return the built-in catalog without touching the database."""

    return [Unit.model_validate(record) for record in _records_with_ids(DEFAULT_UNITS)]


def _load_snapshot_data(snapshot_path: Path | None = None) -> List[Dict[str, Any]]:
    path = snapshot_path or get_settings().units_snapshot_path
    if path is not None and path.exists():
        logger.info("Seeding units from snapshot %s", path)
        return _records_with_ids(json.loads(path.read_text(encoding="utf-8")))
    return _records_with_ids(DEFAULT_UNITS)


def _seed_units(session: Session, snapshot_path: Path | None = None) -> None:
    exists = session.execute(select(UnitORM.id).limit(1)).first()
    if exists:
        return

    for record in _load_snapshot_data(snapshot_path):
        unit = Unit.model_validate(record)
        session.merge(
            UnitORM(
                id=unit.id,
                code=unit.code,
                label=unit.label,
                family=unit.family,
                base_unit=unit.base_unit,
                conversion_ratio=unit.conversion_ratio,
                is_displayable=unit.is_displayable,
                needs_article=unit.needs_article,
                display_order=unit.display_order,
            )
        )
    session.flush()


def unit_to_model(row: UnitORM) -> Unit:
    return Unit.model_validate(
        {
            "id": row.id,
            "code": row.code,
            "label": row.label,
            "family": row.family,
            "base_unit": row.base_unit,
            "conversion_ratio": row.conversion_ratio,
            "is_displayable": row.is_displayable,
            "needs_article": row.needs_article,
            "display_order": row.display_order,
        }
    )


def units_by_id(session: Session) -> Dict[int, Unit]:
    """Index the unit table inside an open session, seeding it when empty."""

    _seed_units(session)
    rows = session.execute(select(UnitORM)).scalars().all()
    return {row.id: unit_to_model(row) for row in rows}


def load_units(snapshot_path: Optional[Path] = None) -> List[Unit]:
    """Return all units ordered for display (seeded from snapshot or defaults if empty)."""

    with session_scope() as session:
        _seed_units(session, snapshot_path)
        rows = (
            session.execute(select(UnitORM).order_by(UnitORM.display_order, UnitORM.id))
            .scalars()
            .all()
        )
        return [unit_to_model(row) for row in rows]


__all__ = ["DEFAULT_UNITS", "default_units", "load_units", "unit_to_model", "units_by_id"]
