"""
Seed a demo wedding with room blocks and a guest list ready for allocation.
Usage: python scripts/setup/seed_demo.py
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from app.database import SessionLocal, create_tables
from app.models import Event, Guest, RoomBlock

ROOM_BLOCKS = [
    # room_type, hotel, rate, total_qty, booked_qty, floor, wing
    ("Deluxe Room", "The Leela Palace", 12000, 30, 12, "2-3", "East Wing"),
    ("Premium Suite", "The Leela Palace", 22000, 15, 6, "4", "East Wing"),
    ("Royal Suite", "The Leela Palace", 45000, 5, 2, "5", "Tower"),
]

GUESTS = [
    # name, status, group, proximity_request
    ("Priya Sharma", "confirmed", "Bride Side", None),
    ("Anita Sharma", "confirmed", "Bride Side", "Near Priya Sharma"),
    ("Rajiv Sharma", "confirmed", "Bride Side", "Near Anita Sharma"),
    ("Meena Sharma", "confirmed", "Bride Side", None),
    ("Neha Verma", "invited", "Bride Side", "Near Priya Sharma"),
    ("Amit Patel", "confirmed", "Groom Side", None),
    ("Sunita Patel", "confirmed", "Groom Side", "Near Amit Patel"),
    ("Rohan Mehta", "confirmed", "Groom Side", None),
    ("Kavita Iyer", "confirmed", "Family", None),
    ("Arjun Iyer", "confirmed", "Family", "Next to Kavita Iyer"),
    ("Dev Malhotra", "confirmed", "Friends", None),
    ("Sara Khan", "invited", "Friends", None),
    ("Governor R. Rao", "confirmed", "VIP", None),
    ("Lata Desai", "confirmed", "VIP", None),
    ("Vikram Singh", "cancelled", "Friends", None),
    ("Pooja Nair", "invited", None, None),
]


def main():
    create_tables()
    db = SessionLocal()
    try:
        event = Event(name="Sharma–Patel Wedding", event_type="wedding", status="active")
        db.add(event)
        db.flush()

        for room_type, hotel, rate, total, booked, floor, wing in ROOM_BLOCKS:
            db.add(RoomBlock(event_id=event.id, room_type=room_type, hotel_name=hotel, rate=rate,
                             total_qty=total, booked_qty=booked, floor=floor, wing=wing))
        for name, status, group, proximity in GUESTS:
            db.add(Guest(event_id=event.id, name=name, status=status, group=group,
                         proximity_request=proximity))
        db.commit()
        print(f"✅ Seeded event {event.id}: {len(ROOM_BLOCKS)} room blocks, {len(GUESTS)} guests")
        print(f"   Try: python scripts/test/simulate_allocation.py --event-id {event.id}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
