# app/models/guest.py
"""
Guests table: the event's guest list.
allocated_floor / allocated_wing stay NULL until the allocator (or a manual
override) places the guest; together they ARE the guest's allocation.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from app.database import Base


class Guest(Base):
    __tablename__ = "guests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    email = Column(String(200))
    phone = Column(String(50))
    group = Column("guest_group", String(100))   # VIP | Bride Side | Groom Side | Family | Friends | free text
    proximity_request = Column(Text)             # e.g. "Near Priya Sharma"
    status = Column(String(50), default="invited", nullable=False)  # invited | confirmed | cancelled
    allocated_floor = Column(String(50))
    allocated_wing = Column(String(100))
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    event = relationship("Event", back_populates="guests")

    def __repr__(self):
        return f"<Guest {self.id} {self.name!r} zone={self.allocated_floor}/{self.allocated_wing}>"
