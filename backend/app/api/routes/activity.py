from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_scheduler
from app.models.activity_log import ActivityLog
from app.models.user import User
from app.schemas.activity import ActivityLogOut

router = APIRouter()


@router.get("/activity", response_model=list[ActivityLogOut])
def list_activity(
    entity_type: str | None = Query(default=None, max_length=50),
    limit: int = Query(default=100, ge=1, le=500),
    current_user: User = Depends(require_scheduler),
    db: Session = Depends(get_db),
) -> list[ActivityLogOut]:
    query = select(ActivityLog).order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
    if entity_type is not None:
        query = query.where(ActivityLog.entity_type == entity_type)
    return list(db.execute(query.limit(limit)).scalars())
