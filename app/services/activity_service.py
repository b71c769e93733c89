# app/services/activity_service.py
"""
Shared activity-log service.
Used by allocation_service for the auto_allocated and allocation_updated entries.
"""

import re
from datetime import datetime
from sqlalchemy.orm import Session
from app.config import settings
from app.models.activity_log import ActivityLog
from app.utils.logger import get_logger

logger = get_logger(__name__)

AUTO_ALLOCATED = "auto_allocated"
ALLOCATION_UPDATED = "allocation_updated"

_HTML_TAG = re.compile(r"<[^>]*>")
_MAX_ACTOR_LENGTH = 100


def log_activity(db: Session, event_id: int, action: str, details: str,
                 actor: str, commit: bool = True) -> ActivityLog:
    """Append an activity entry. With commit=False the caller owns the transaction."""
    entry = ActivityLog(
        event_id=event_id,
        action=action,
        details=_HTML_TAG.sub("", details),
        actor=(actor or settings.MANUAL_ALLOCATION_ACTOR)[:_MAX_ACTOR_LENGTH],
        created_at=datetime.utcnow(),
    )
    db.add(entry)
    if commit:
        db.commit()
    logger.info(f"[ACTIVITY][{action}] event={event_id} {entry.details}")
    return entry


def list_activity(db: Session, event_id: int, limit: int = None) -> list[ActivityLog]:
    """Newest first; limit is capped at ACTIVITY_LOG_MAX_LIMIT."""
    limit = limit or settings.ACTIVITY_LOG_DEFAULT_LIMIT
    limit = max(1, min(limit, settings.ACTIVITY_LOG_MAX_LIMIT))
    return (
        db.query(ActivityLog)
        .filter(ActivityLog.event_id == event_id)
        .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        .limit(limit)
        .all()
    )
