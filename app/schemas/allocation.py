# app/schemas/allocation.py
from pydantic import BaseModel, field_validator
from typing import Optional


class ZoneAssignment(BaseModel):
    floor: str
    wing: str

    @field_validator("floor", "wing")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = " ".join(value.split())
        if not value:
            raise ValueError("floor and wing must not be blank")
        return value


class ManualAllocationRequest(BaseModel):
    allocations: dict[int, ZoneAssignment]   # guest_id -> {floor, wing}
    actor: Optional[str] = None


class PlacementOut(ZoneAssignment):
    rule: str                                # proximity | group | priority


class AutoAllocationOut(BaseModel):
    success: bool = True
    message: str
    allocated: int
    allocations: dict[int, PlacementOut]
    zones_considered: int
    unallocated_guest_ids: list[int]


class ZoneOut(BaseModel):
    floor: str
    wing: str
    capacity: int
    current_count: int
    remaining: int
    occupancy_percent: float
    is_full: bool


class ManualAllocationOut(BaseModel):
    success: bool = True
    allocated: int
    over_capacity_zones: list[ZoneOut]


class BoardGuestOut(BaseModel):
    id: int
    name: str
    group: Optional[str]
    status: str
    proximity_request: Optional[str]
    allocated_floor: Optional[str]
    allocated_wing: Optional[str]

    class Config:
        from_attributes = True


class ZoneBoardOut(ZoneOut):
    guests: list[BoardGuestOut]


class AllocationOverviewOut(BaseModel):
    event_id: int
    zones: list[ZoneBoardOut]
    unallocated: list[BoardGuestOut]
    orphaned: list[BoardGuestOut]
