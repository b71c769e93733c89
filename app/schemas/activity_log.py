# app/schemas/activity_log.py
from pydantic import BaseModel
from datetime import datetime


class ActivityLogOut(BaseModel):
    id: int
    event_id: int
    action: str
    details: str
    actor: str
    created_at: datetime

    class Config:
        from_attributes = True
