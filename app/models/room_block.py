# app/models/room_block.py
"""
Room blocks table: hotel inventory held for an event.
Each block sits on a floor/wing; blocks sharing a floor/wing form one allocation zone.
"""

from sqlalchemy import Column, Integer, String, Float, ForeignKey
from sqlalchemy.orm import relationship
from app.database import Base


class RoomBlock(Base):
    __tablename__ = "room_blocks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    room_type = Column(String(100), nullable=False)
    hotel_name = Column(String(200))
    rate = Column(Float, default=0.0, nullable=False)
    total_qty = Column(Integer, default=0, nullable=False)   # zone capacity contribution
    booked_qty = Column(Integer, default=0, nullable=False)  # informational only
    floor = Column(String(50))    # free text, e.g. "4", "2-3", "Ground"
    wing = Column(String(100))    # free text, e.g. "East Wing"

    event = relationship("Event", back_populates="room_blocks")

    def __repr__(self):
        return f"<RoomBlock {self.id} {self.room_type} {self.floor}/{self.wing} qty={self.total_qty}>"
