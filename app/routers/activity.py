# app/routers/activity.py
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.event import Event
from app.schemas.activity_log import ActivityLogOut
from app.services.activity_service import list_activity

router = APIRouter()


@router.get("/events/{event_id}/activity", response_model=list[ActivityLogOut],
            summary="Activity log for an event, newest first")
def get_event_activity(event_id: int, limit: Optional[int] = None, db: Session = Depends(get_db)):
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        raise HTTPException(status_code=404, detail=f"Event {event_id} not found")
    return list_activity(db, event_id, limit)
