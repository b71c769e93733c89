"""Tests for the allocation service against an in-memory database."""

import threading
from unittest.mock import patch

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from app.database import Base
from app.models import ActivityLog, Event, Guest, RoomBlock
from app.services import allocation_service
from app.services.allocation_service import (
    EventNotFoundError, GuestNotInEventError, NOTHING_TO_ALLOCATE,
    allocate_manually, auto_allocate, get_allocation_overview, get_event_lock,
)

WEDDING_BLOCKS = [("2-3", "East Wing", 3), ("4", "East Wing", 2), ("5", "Tower", 1)]


def guest_rows(db, event_id):
    return db.query(Guest).filter(Guest.event_id == event_id).order_by(Guest.id).all()


def activity_rows(db, event_id):
    return db.query(ActivityLog).filter(ActivityLog.event_id == event_id).all()


class TestAutoAllocate:
    def test_unknown_event(self, db):
        with pytest.raises(EventNotFoundError):
            auto_allocate(db, 999)

    def test_places_guests_and_logs_one_entry(self, db, make_event):
        event = make_event(WEDDING_BLOCKS, [
            {"name": "Priya Sharma", "group": "Bride Side"},
            {"name": "Anita Sharma", "group": "Bride Side", "proximity_request": "Near Priya Sharma"},
            {"name": "Governor Rao", "group": "VIP"},
            {"name": "Vikram Singh", "group": "Friends", "status": "cancelled"},
        ])

        result = auto_allocate(db, event.id)

        assert result.allocated == 3
        assert result.zones_considered == 3
        assert result.unallocated_guest_ids == []
        assert not result.nothing_to_allocate

        priya, anita, rao, vikram = guest_rows(db, event.id)
        assert (rao.allocated_floor, rao.allocated_wing) == ("5", "Tower")
        assert (priya.allocated_floor, priya.allocated_wing) == ("2-3", "East Wing")
        assert (anita.allocated_floor, anita.allocated_wing) == ("2-3", "East Wing")
        assert vikram.allocated_floor is None

        logs = activity_rows(db, event.id)
        assert len(logs) == 1
        assert logs[0].action == "auto_allocated"
        assert logs[0].actor == "AI Allocator"
        assert logs[0].details == "AI auto-allocated 3 guests across 3 zones"

    def test_nothing_to_allocate(self, db, make_event):
        event = make_event(WEDDING_BLOCKS, [
            {"name": "A", "allocated_floor": "4", "allocated_wing": "East Wing"},
            {"name": "B", "status": "cancelled"},
        ])

        result = auto_allocate(db, event.id)

        assert result.nothing_to_allocate
        assert result.allocated == 0
        assert result.message == NOTHING_TO_ALLOCATE
        assert activity_rows(db, event.id) == []

    def test_second_run_allocates_nothing_more(self, db, make_event):
        event = make_event(WEDDING_BLOCKS, [{"name": f"Guest {i}"} for i in range(4)])

        first = auto_allocate(db, event.id)
        before = [(g.allocated_floor, g.allocated_wing) for g in guest_rows(db, event.id)]
        second = auto_allocate(db, event.id)

        assert first.allocated == 4
        assert second.nothing_to_allocate
        assert [(g.allocated_floor, g.allocated_wing) for g in guest_rows(db, event.id)] == before

    def test_exhaustion_leaves_guests_for_a_later_run(self, db, make_event):
        event = make_event([("1", "Main", 2)], [{"name": f"Guest {i}"} for i in range(3)])

        first = auto_allocate(db, event.id)
        second = auto_allocate(db, event.id)

        assert first.allocated == 2
        assert first.unallocated_guest_ids == [guest_rows(db, event.id)[2].id]
        assert second.allocated == 0
        assert not second.nothing_to_allocate

    def test_existing_allocations_count_against_capacity(self, db, make_event):
        event = make_event([("1", "Main", 1), ("2", "Main", 5)], [
            {"name": "Placed", "allocated_floor": "1", "allocated_wing": "Main"},
            {"name": "New"},
        ])

        result = auto_allocate(db, event.id)

        new_guest = guest_rows(db, event.id)[1]
        assert result.allocations[new_guest.id].floor == "2"

    def test_no_room_blocks(self, db, make_event):
        event = make_event([], [{"name": "A"}])

        result = auto_allocate(db, event.id)

        assert result.allocated == 0
        assert result.zones_considered == 0
        assert len(result.unallocated_guest_ids) == 1

    def test_failed_save_rolls_back(self, db, make_event):
        event = make_event(WEDDING_BLOCKS, [{"name": "A"}, {"name": "B"}])

        with patch("app.services.allocation_service.activity_service.log_activity",
                   side_effect=RuntimeError("audit log down")):
            with pytest.raises(RuntimeError):
                auto_allocate(db, event.id)

        assert all(g.allocated_floor is None for g in guest_rows(db, event.id))
        assert auto_allocate(db, event.id).allocated == 2


class TestAllocateManually:
    def test_writes_given_zones(self, db, make_event):
        event = make_event(WEDDING_BLOCKS, [{"name": "A"}, {"name": "B"}])
        a, b = guest_rows(db, event.id)

        result = allocate_manually(db, event.id, {a.id: ("4", "East Wing"), b.id: (" 5 ", "Tower")})

        assert result.allocated == 2
        assert result.over_capacity_zones == []
        a, b = guest_rows(db, event.id)
        assert (a.allocated_floor, a.allocated_wing) == ("4", "East Wing")
        assert (b.allocated_floor, b.allocated_wing) == ("5", "Tower")

        log = activity_rows(db, event.id)[0]
        assert log.action == "allocation_updated"
        assert log.actor == "Agent"
        assert log.details == "Room allocations saved for 2 guests"

    def test_unknown_guest_rejects_whole_batch(self, db, make_event):
        event = make_event(WEDDING_BLOCKS, [{"name": "A"}])
        other = make_event(WEDDING_BLOCKS, [{"name": "Outsider"}], name="Other Event")
        a = guest_rows(db, event.id)[0]
        outsider = guest_rows(db, other.id)[0]

        with pytest.raises(GuestNotInEventError):
            allocate_manually(db, event.id, {a.id: ("4", "East Wing"), outsider.id: ("5", "Tower")})

        assert guest_rows(db, event.id)[0].allocated_floor is None
        assert guest_rows(db, other.id)[0].allocated_floor is None
        assert activity_rows(db, event.id) == []

    def test_override_may_exceed_capacity(self, db, make_event):
        event = make_event([("5", "Tower", 1)], [{"name": "A"}, {"name": "B"}])
        a, b = guest_rows(db, event.id)

        result = allocate_manually(db, event.id, {a.id: ("5", "Tower"), b.id: ("5", "Tower")})

        assert result.allocated == 2
        assert len(result.over_capacity_zones) == 1
        zone = result.over_capacity_zones[0]
        assert (zone.current_count, zone.capacity) == (2, 1)
        assert all(g.allocated_floor == "5" for g in guest_rows(db, event.id))

    def test_unknown_event(self, db):
        with pytest.raises(EventNotFoundError):
            allocate_manually(db, 999, {1: ("1", "Main")})


class TestOverview:
    def test_board(self, db, make_event):
        event = make_event(WEDDING_BLOCKS, [
            {"name": "Top", "allocated_floor": "5", "allocated_wing": "Tower"},
            {"name": "Low", "allocated_floor": "2-3", "allocated_wing": "east wing"},
            {"name": "Gone", "allocated_floor": "9", "allocated_wing": "Annex"},
            {"name": "Waiting"},
        ])

        overview = get_allocation_overview(db, event.id)

        assert [s.zone.floor for s in overview.zones] == ["2-3", "4", "5"]
        assert [g.name for g in overview.zones[0].guests] == ["Low"]
        assert overview.zones[2].zone.current_count == 1
        assert [g.name for g in overview.unallocated] == ["Waiting"]
        assert [g.name for g in overview.orphaned] == ["Gone"]

    def test_unknown_event(self, db):
        with pytest.raises(EventNotFoundError):
            get_allocation_overview(db, 999)


def test_event_locks_are_per_event():
    assert get_event_lock(1) is get_event_lock(1)
    assert get_event_lock(1) is not get_event_lock(2)


def test_unused_event_locks_are_released():
    lock = get_event_lock(4242)
    assert allocation_service._event_locks.get(4242) is lock
    del lock
    assert 4242 not in allocation_service._event_locks


def test_concurrent_runs_never_exceed_capacity(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'allocator.db'}",
                           connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    setup = Session()
    event = Event(name="Busy Wedding", event_type="wedding", status="active")
    setup.add(event)
    setup.flush()
    event_id = event.id
    setup.add(RoomBlock(event_id=event_id, room_type="Deluxe", total_qty=5, floor="3", wing="East"))
    setup.add_all([Guest(event_id=event_id, name=f"Guest {i}", status="confirmed") for i in range(20)])
    setup.commit()
    setup.close()

    results, errors = [], []

    def run():
        session = Session()
        try:
            results.append(auto_allocate(session, event_id))
        except Exception as exc:
            errors.append(exc)
        finally:
            session.close()

    threads = [threading.Thread(target=run) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    try:
        assert errors == []
        assert sum(r.allocated for r in results) == 5

        check = Session()
        placed = [g for g in guest_rows(check, event_id) if g.allocated_floor]
        entries = activity_rows(check, event_id)
        check.close()
        assert len(placed) == 5
        assert len(entries) == 8
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()
