import logging
from time import perf_counter

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_scheduler
from app.core.exceptions import SchedulerError
from app.models.user import User
from app.schemas.generator import GenerateTimetableRequest, GenerateTimetableResponse
from app.services.audit import log_activity
from app.services.history import save_timetable
from app.services.snapshot import GenerationInputs, load_generation_inputs
from app.services.timetable_generator import generate

router = APIRouter()
logger = logging.getLogger(__name__)


def _ensure_generation_inputs(inputs: GenerationInputs, department_id: str | None) -> None:
    missing = [
        label
        for label, items in (
            ("sections", inputs.sections),
            ("subjects", inputs.subjects),
            ("teachers", inputs.teachers),
            ("rooms", inputs.rooms),
        )
        if not items
    ]
    if missing:
        raise SchedulerError(
            "Add sections, subjects, teachers and rooms before generating a timetable",
            details={"missing": missing, "department_id": department_id},
        )


def _result_warning(conflicts: int, unmet_soft: int) -> str | None:
    if conflicts:
        return f"Generated timetable has {conflicts} hard conflicts; review the conflict report before use."
    if unmet_soft:
        return f"Generated timetable leaves {unmet_soft} soft constraints unmet."
    return None


@router.post("/generate", response_model=GenerateTimetableResponse)
def generate_timetable(
    payload: GenerateTimetableRequest,
    current_user: User = Depends(require_scheduler),
    db: Session = Depends(get_db),
) -> GenerateTimetableResponse:
    started = perf_counter()
    logger.info(
        "TIMETABLE GENERATION START | user_id=%s | department_id=%s | persist=%s",
        current_user.id,
        payload.department_id,
        payload.persist,
    )
    try:
        inputs = load_generation_inputs(db, department_id=payload.department_id)
        _ensure_generation_inputs(inputs, payload.department_id)
        preferences = payload.preferences_override or inputs.preferences

        generation_started = perf_counter()
        timetable = generate(
            inputs.teachers,
            inputs.subjects,
            inputs.rooms,
            inputs.sections,
            inputs.breaks,
            preferences,
            name=payload.name,
        )
        runtime_ms = int((perf_counter() - generation_started) * 1000)

        unmet_soft = sum(1 for item in timetable.violated_constraints if item.type == "soft")
        if payload.persist:
            save_timetable(db, timetable, generated_by=current_user)
            log_activity(
                db,
                actor=current_user,
                action="timetable.generate",
                entity_type="timetable",
                entity_id=timetable.id,
                summary=f"{current_user.name} generated {timetable.name}.",
                details={
                    "entries": len(timetable.entries),
                    "conflicts": timetable.conflicts,
                    "unmet_soft_constraints": unmet_soft,
                },
            )
            db.commit()

        logger.info(
            "TIMETABLE GENERATION COMPLETE | user_id=%s | timetable_id=%s | entries=%s | hard_conflicts=%s | unmet_soft=%s | runtime_ms=%s | wall_ms=%s",
            current_user.id,
            timetable.id,
            len(timetable.entries),
            timetable.conflicts,
            unmet_soft,
            runtime_ms,
            int((perf_counter() - started) * 1000),
        )
        return GenerateTimetableResponse(
            timetable=timetable,
            runtime_ms=runtime_ms,
            persisted=payload.persist,
            warning=_result_warning(timetable.conflicts, unmet_soft),
        )
    except Exception:
        db.rollback()
        logger.exception(
            "TIMETABLE GENERATION FAILED | user_id=%s | department_id=%s | wall_ms=%s",
            current_user.id,
            payload.department_id,
            int((perf_counter() - started) * 1000),
        )
        raise
