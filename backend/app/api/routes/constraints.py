from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, require_admin
from app.models.scheduling import BreakTime, SchedulingPreferences
from app.models.user import User
from app.schemas.settings import (
    BreakTimeCreate,
    BreakTimePayload,
    SchedulingPreferencesOut,
    SchedulingPreferencesPayload,
)
from app.services.audit import log_activity
from app.services.snapshot import apply_preferences, break_to_payload, preferences_to_payload

router = APIRouter()


@router.get("/breaks", response_model=list[BreakTimePayload])
def list_breaks(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> list[BreakTimePayload]:
    breaks = db.execute(select(BreakTime).order_by(BreakTime.created_at, BreakTime.id)).scalars().all()
    return [break_to_payload(item) for item in breaks]


@router.post("/breaks", response_model=BreakTimePayload, status_code=status.HTTP_201_CREATED)
def create_break(
    payload: BreakTimeCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> BreakTimePayload:
    item = BreakTime(name=payload.name, day=payload.day, start_time=payload.startTime, end_time=payload.endTime)
    db.add(item)
    db.flush()
    log_activity(
        db,
        actor=current_user,
        action="break.create",
        entity_type="break",
        entity_id=item.id,
        summary=f"{current_user.name} added break {payload.name} on {payload.day} {payload.startTime}-{payload.endTime}.",
    )
    db.commit()
    db.refresh(item)
    return break_to_payload(item)


@router.delete("/breaks/{break_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_break(
    break_id: str,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> None:
    item = db.get(BreakTime, break_id)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Break not found")
    log_activity(
        db,
        actor=current_user,
        action="break.delete",
        entity_type="break",
        entity_id=item.id,
        summary=f"{current_user.name} removed break {item.name}.",
    )
    db.delete(item)
    db.commit()


@router.get("/preferences", response_model=SchedulingPreferencesOut)
def get_preferences(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SchedulingPreferencesOut:
    current = preferences_to_payload(db.get(SchedulingPreferences, 1))
    return SchedulingPreferencesOut(**current.model_dump())


@router.put("/preferences", response_model=SchedulingPreferencesOut)
def update_preferences(
    payload: SchedulingPreferencesPayload,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> SchedulingPreferencesOut:
    row = db.get(SchedulingPreferences, 1)
    if row is None:
        row = SchedulingPreferences(id=1)
        db.add(row)
    apply_preferences(row, payload)
    log_activity(
        db,
        actor=current_user,
        action="preferences.update",
        entity_type="preferences",
        entity_id="1",
        summary=f"{current_user.name} updated scheduling preferences.",
        details=payload.model_dump(),
    )
    db.commit()
    db.refresh(row)
    return SchedulingPreferencesOut(**preferences_to_payload(row).model_dump())
