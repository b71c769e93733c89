"""Shared fixtures: in-memory SQLite session, seeded events, API client."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from app.database import Base, get_db
from app.models import Event, Guest, RoomBlock


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def make_event(db):
    """
    Create an event with room blocks and guests.
    blocks: (floor, wing, total_qty) tuples
    guests: dicts of Guest column values (name required)
    """
    def _make(blocks=(), guests=(), name="Test Wedding"):
        event = Event(name=name, event_type="wedding", status="active")
        db.add(event)
        db.flush()
        for floor, wing, qty in blocks:
            db.add(RoomBlock(event_id=event.id, room_type="Deluxe", total_qty=qty,
                             floor=floor, wing=wing))
        for values in guests:
            values = dict(values)
            db.add(Guest(event_id=event.id, status=values.pop("status", "confirmed"), **values))
        db.commit()
        return event
    return _make


@pytest.fixture
def client(db):
    from app.main import app

    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
