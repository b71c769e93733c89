# app/models/event.py
"""
Events table: one row per wedding, conference or offsite.
Owns the guest list, the room-block inventory and the activity log.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from app.database import Base


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    event_type = Column(String(50), default="wedding", nullable=False)  # wedding | conference | offsite
    status = Column(String(50), default="draft", nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    guests = relationship("Guest", back_populates="event", order_by="Guest.id")
    room_blocks = relationship("RoomBlock", back_populates="event", order_by="RoomBlock.id")

    def __repr__(self):
        return f"<Event {self.id} {self.name!r}>"
