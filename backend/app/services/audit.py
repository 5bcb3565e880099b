from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from app.models.activity_log import ActivityLog
from app.models.user import User

logger = logging.getLogger(__name__)


def log_activity(
    db: Session,
    *,
    actor: User | None,
    action: str,
    entity_type: str,
    entity_id: str | None = None,
    summary: str = "",
    details: dict | None = None,
) -> None:
    """Stage an activity row on ``db``; it is written by the caller's commit."""
    db.add(
        ActivityLog(
            actor_id=actor.id if actor is not None else None,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            summary=summary,
            details=details or {},
        )
    )
    logger.info(
        "ACTIVITY | action=%s | entity=%s:%s | actor=%s",
        action,
        entity_type,
        entity_id,
        actor.id if actor is not None else None,
    )
