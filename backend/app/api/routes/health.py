from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import func, inspect, select, text
from sqlalchemy.engine import Connection

from app.db.bootstrap import REQUIRED_TABLES
from app.db.session import engine
from app.models.room import Room
from app.models.section import Section
from app.models.subject import Subject
from app.models.teacher import Teacher
from app.models.timetable import GeneratedTimetableRecord

router = APIRouter()

GENERATION_INPUTS = (
    ("sections", Section),
    ("subjects", Subject),
    ("teachers", Teacher),
    ("rooms", Room),
)


def _count(connection: Connection, model) -> int:
    return int(connection.execute(select(func.count()).select_from(model)).scalar_one())


def _scheduler_status(connection: Connection) -> dict:
    counts = {label: _count(connection, model) for label, model in GENERATION_INPUTS}
    return {
        "inputs": counts,
        "missing_inputs": [label for label, count in counts.items() if count == 0],
        "can_generate": all(counts.values()),
        "stored_timetables": _count(connection, GeneratedTimetableRecord),
    }


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


@router.get("/health/live")
def health_live() -> dict:
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/health/ready")
def health_ready() -> JSONResponse:
    db_ok = True
    missing_tables: list[str] = []
    db_error: str | None = None
    scheduler: dict | None = None

    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
            missing_tables = sorted(REQUIRED_TABLES - set(inspect(connection).get_table_names()))
            if not missing_tables:
                scheduler = _scheduler_status(connection)
    except Exception as exc:  # pragma: no cover - environment dependent
        db_ok = False
        db_error = str(exc)

    # An empty catalogue is still ready; it only blocks generation.
    ready = db_ok and not missing_tables
    payload = {
        "status": "ok" if ready else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": {
            "ok": db_ok,
            "schema_ok": not missing_tables,
            "missing_tables": missing_tables,
            "error": db_error,
        },
        "scheduler": scheduler,
    }
    return JSONResponse(status_code=200 if ready else 503, content=payload)
