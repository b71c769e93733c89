# app/routers/allocations.py
"""
Guest allocation endpoints.
POST /events/{event_id}/auto-allocate: AI allocator (proximity, group, priority)
POST /events/{event_id}/allocate     : manual override from the allocator board
GET  /events/{event_id}/allocation   : allocator board: zones, occupancy, guests
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.allocation import (
    AllocationOverviewOut, AutoAllocationOut, BoardGuestOut, ManualAllocationOut,
    ManualAllocationRequest, PlacementOut, ZoneBoardOut, ZoneOut,
)
from app.services.allocation_service import (
    EventNotFoundError, GuestNotInEventError,
    allocate_manually, auto_allocate, get_allocation_overview,
)
from app.services.zone_builder import Zone

router = APIRouter()


def _guests_out(guests) -> list[BoardGuestOut]:
    return [BoardGuestOut.model_validate(g) for g in guests]


def _zone_out(zone: Zone) -> dict:
    return {
        "floor": zone.floor,
        "wing": zone.wing,
        "capacity": zone.capacity,
        "current_count": zone.current_count,
        "remaining": zone.remaining,
        "occupancy_percent": zone.occupancy_percent,
        "is_full": not zone.has_space,
    }


@router.post("/events/{event_id}/auto-allocate", response_model=AutoAllocationOut,
             summary="Auto-allocate unplaced guests to floors/wings")
def run_auto_allocation(event_id: int, db: Session = Depends(get_db)):
    """
    Places every unallocated, non-cancelled guest it can.
    Guests left over when zones fill up are listed in unallocated_guest_ids.
    """
    try:
        result = auto_allocate(db, event_id)
    except EventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return AutoAllocationOut(
        message=result.message,
        allocated=result.allocated,
        allocations={
            guest_id: PlacementOut(floor=p.floor, wing=p.wing, rule=p.rule.value)
            for guest_id, p in result.allocations.items()
        },
        zones_considered=result.zones_considered,
        unallocated_guest_ids=result.unallocated_guest_ids,
    )


@router.post("/events/{event_id}/allocate", response_model=ManualAllocationOut,
             summary="Save manual floor/wing allocations")
def save_manual_allocation(event_id: int, body: ManualAllocationRequest, db: Session = Depends(get_db)):
    """
    Writes the given floor/wing for each guest as-is (no capacity check).
    Rejects the whole batch if any guest does not belong to the event.
    """
    try:
        result = allocate_manually(
            db, event_id,
            {guest_id: (a.floor, a.wing) for guest_id, a in body.allocations.items()},
            actor=body.actor,
        )
    except EventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except GuestNotInEventError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return ManualAllocationOut(
        allocated=result.allocated,
        over_capacity_zones=[ZoneOut(**_zone_out(z)) for z in result.over_capacity_zones],
    )


@router.get("/events/{event_id}/allocation", response_model=AllocationOverviewOut,
            summary="Allocator board for an event")
def get_allocation_board(event_id: int, db: Session = Depends(get_db)):
    try:
        overview = get_allocation_overview(db, event_id)
    except EventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return AllocationOverviewOut(
        event_id=overview.event_id,
        zones=[
            ZoneBoardOut(**_zone_out(s.zone), guests=_guests_out(s.guests))
            for s in overview.zones
        ],
        unallocated=_guests_out(overview.unallocated),
        orphaned=_guests_out(overview.orphaned),
    )
