from __future__ import annotations

import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.db.base import Base
from app.db.session import engine as default_engine
from app.models.scheduling import SchedulingPreferences

logger = logging.getLogger(__name__)

REQUIRED_TABLES: set[str] = {
    "activity_logs",
    "departments",
    "teachers",
    "subjects",
    "rooms",
    "sections",
    "break_times",
    "scheduling_preferences",
    "generated_timetables",
    "users",
}


def _ensure_preferences_row(bind: Engine) -> None:
    with Session(bind) as session:
        if session.get(SchedulingPreferences, 1) is not None:
            return
        session.add(SchedulingPreferences(id=1))
        session.commit()
        logger.info("Seeded default scheduling preferences")


def _assert_required_tables(bind: Engine) -> None:
    existing = set(inspect(bind).get_table_names())
    missing = sorted(REQUIRED_TABLES - existing)
    if missing:
        raise RuntimeError(f"Database schema is missing tables: {', '.join(missing)}. Run alembic upgrade head.")


def ensure_runtime_schema(bind: Engine | None = None) -> None:
    bind = bind or default_engine
    try:
        if get_settings().auto_create_tables:
            import app.models  # noqa: F401

            Base.metadata.create_all(bind=bind)
        _assert_required_tables(bind)
        _ensure_preferences_row(bind)
    except Exception:
        logger.exception("Runtime schema bootstrap failed")
        raise
