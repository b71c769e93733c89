# app/services/allocation_service.py
"""
Guest → floor/wing allocation for an event.

auto_allocate            the AI allocator. Zone Builder + Priority Sorter + Assignment
                         Engine, then writes placements and one activity entry.
allocate_manually        agent override (drag-and-drop board). No capacity or
                         proximity checks; all guest ids are validated before any write.
get_allocation_overview  zones with occupancy plus unallocated/orphaned guests.

Runs for the same event are serialized by a per-event lock, and each run commits
once, so a failed run leaves nothing behind and can simply be retried.
"""

import threading
import weakref
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Optional, Tuple
from sqlalchemy.orm import Session
from app.config import settings
from app.models.event import Event
from app.models.guest import Guest
from app.models.room_block import RoomBlock
from app.services import activity_service
from app.services.assignment_engine import AllocationContext, Placement, assign_guests
from app.services.priority_sorter import select_unallocated, sort_by_priority
from app.services.zone_builder import Zone, allocation_key, build_zones, find_orphaned_allocations
from app.utils.labels import clean_label
from app.utils.logger import get_logger

logger = get_logger(__name__)

NOTHING_TO_ALLOCATE = "All guests are already allocated"


class AllocationError(Exception):
    """Base class for allocation failures surfaced to the caller."""


class EventNotFoundError(AllocationError):
    def __init__(self, event_id: int):
        super().__init__(f"Event {event_id} not found")
        self.event_id = event_id


class GuestNotInEventError(AllocationError):
    def __init__(self, guest_id: int, event_id: int):
        super().__init__(f"Guest {guest_id} not found in this event")
        self.guest_id = guest_id
        self.event_id = event_id


@dataclass
class AutoAllocationResult:
    event_id: int
    allocations: dict[int, Placement] = field(default_factory=dict)
    zones_considered: int = 0
    unallocated_guest_ids: list[int] = field(default_factory=list)
    nothing_to_allocate: bool = False

    @property
    def allocated(self) -> int:
        return len(self.allocations)

    @property
    def message(self) -> str:
        if self.nothing_to_allocate:
            return NOTHING_TO_ALLOCATE
        return f"Allocated {self.allocated} guests across {self.zones_considered} zones"


@dataclass
class ManualAllocationResult:
    event_id: int
    allocated: int
    over_capacity_zones: list[Zone] = field(default_factory=list)


@dataclass
class ZoneSummary:
    zone: Zone
    guests: list = field(default_factory=list)


@dataclass
class AllocationOverview:
    event_id: int
    zones: list[ZoneSummary]
    unallocated: list
    orphaned: list


# ── Per-event serialization ──────────────────────────────────────────────────
# Locks live only while some run holds a reference to them
_event_locks: "weakref.WeakValueDictionary[int, threading.Lock]" = weakref.WeakValueDictionary()
_event_locks_guard = threading.Lock()


def get_event_lock(event_id: int) -> threading.Lock:
    with _event_locks_guard:
        lock = _event_locks.get(event_id)
        if lock is None:
            lock = _event_locks[event_id] = threading.Lock()
        return lock


@contextmanager
def event_lock(event_id: int):
    """Hold the event's allocation lock for the duration of a run."""
    lock = get_event_lock(event_id)
    with lock:
        yield


# ── Loading ──────────────────────────────────────────────────────────────────
def _get_event(db: Session, event_id: int) -> Event:
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        raise EventNotFoundError(event_id)
    return event


def _load_guests(db: Session, event_id: int) -> list[Guest]:
    # Insertion order keeps the stable priority sort deterministic
    return db.query(Guest).filter(Guest.event_id == event_id).order_by(Guest.id).all()


def _load_room_blocks(db: Session, event_id: int) -> list[RoomBlock]:
    return db.query(RoomBlock).filter(RoomBlock.event_id == event_id).order_by(RoomBlock.id).all()


# ── Auto allocation ──────────────────────────────────────────────────────────
def auto_allocate(db: Session, event_id: int, actor: Optional[str] = None) -> AutoAllocationResult:
    with event_lock(event_id):
        _get_event(db, event_id)
        guests = _load_guests(db, event_id)

        pending = select_unallocated(guests)
        if not pending:
            logger.info(f"[ALLOCATOR] event={event_id}: nothing to allocate")
            return AutoAllocationResult(event_id=event_id, nothing_to_allocate=True)

        zones = build_zones(_load_room_blocks(db, event_id), guests)
        context = AllocationContext.from_guests(zones, guests)
        placements = assign_guests(sort_by_priority(pending), context)

        by_id = {g.id: g for g in pending}
        try:
            for guest_id, placement in placements.items():
                guest = by_id[guest_id]
                guest.allocated_floor = placement.floor
                guest.allocated_wing = placement.wing

            activity_service.log_activity(
                db, event_id, activity_service.AUTO_ALLOCATED,
                f"AI auto-allocated {len(placements)} guests across {len(zones)} zones",
                actor or settings.ALLOCATOR_ACTOR,
                commit=False,
            )
            db.commit()
        except Exception:
            db.rollback()
            logger.error(f"[ALLOCATOR] event={event_id}: failed to save allocations", exc_info=True)
            raise

        result = AutoAllocationResult(
            event_id=event_id,
            allocations=placements,
            zones_considered=len(zones),
            unallocated_guest_ids=[g.id for g in pending if g.id not in placements],
        )
        logger.info(
            f"[ALLOCATOR] event={event_id}: {result.allocated}/{len(pending)} guests placed "
            f"across {result.zones_considered} zones, {len(result.unallocated_guest_ids)} left unallocated"
        )
        return result


# ── Manual allocation ────────────────────────────────────────────────────────
def allocate_manually(db: Session, event_id: int, allocations: dict[int, Tuple[str, str]],
                      actor: Optional[str] = None) -> ManualAllocationResult:
    """
    Write explicit guest → (floor, wing) choices as given.

    All-or-nothing: every guest id is checked against the event before the first
    write, and the whole batch commits once. Capacity is NOT enforced here; zones
    pushed past capacity are returned and logged for review.
    """
    with event_lock(event_id):
        _get_event(db, event_id)
        guests = _load_guests(db, event_id)
        by_id = {g.id: g for g in guests}

        for guest_id in allocations:
            if guest_id not in by_id:
                raise GuestNotInEventError(guest_id, event_id)

        count = len(allocations)
        try:
            for guest_id, (floor, wing) in allocations.items():
                guest = by_id[guest_id]
                guest.allocated_floor = clean_label(floor)
                guest.allocated_wing = clean_label(wing)

            activity_service.log_activity(
                db, event_id, activity_service.ALLOCATION_UPDATED,
                f"Room allocations saved for {count} guest{'s' if count != 1 else ''}",
                actor or settings.MANUAL_ALLOCATION_ACTOR,
                commit=False,
            )
            db.commit()
        except Exception:
            db.rollback()
            logger.error(f"[ALLOCATOR] event={event_id}: failed to save manual allocations", exc_info=True)
            raise

        zones = build_zones(_load_room_blocks(db, event_id), guests)
        over_capacity = [z for z in zones.values() if z.current_count > z.capacity]
        for zone in over_capacity:
            logger.warning(
                f"[ALLOCATOR] event={event_id}: manual override puts zone {zone.floor}/{zone.wing} "
                f"over capacity ({zone.current_count}/{zone.capacity})"
            )
        return ManualAllocationResult(event_id=event_id, allocated=count,
                                      over_capacity_zones=over_capacity)


# ── Overview ─────────────────────────────────────────────────────────────────
def get_allocation_overview(db: Session, event_id: int) -> AllocationOverview:
    _get_event(db, event_id)
    guests = _load_guests(db, event_id)
    zones = build_zones(_load_room_blocks(db, event_id), guests)

    summaries = {key: ZoneSummary(zone=zone) for key, zone in zones.items()}
    unallocated = []
    for guest in guests:
        key = allocation_key(guest)
        if key is None:
            unallocated.append(guest)
        elif key in summaries:
            summaries[key].guests.append(guest)

    return AllocationOverview(
        event_id=event_id,
        zones=sorted(summaries.values(), key=lambda s: s.zone.floor),
        unallocated=unallocated,
        orphaned=find_orphaned_allocations(zones, guests),
    )
