# app/services/zone_builder.py
"""
Zone Builder: derives floor × wing capacity zones from an event's room blocks
and counts the guests already sitting in each one.

Zones are transient: they are rebuilt from room blocks + guest rows on every
allocation run and never persisted. Only guest.allocated_floor / allocated_wing
are stored.

A guest whose floor/wing pair no longer matches any room block (inventory
changed after placement) is an "orphaned allocation": it is left out of the
capacity accounting rather than treated as an error.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple
from app.config import settings
from app.utils.labels import clean_label, label_key
from app.utils.logger import get_logger

logger = get_logger(__name__)

ZoneKey = Tuple[str, str]   # (floor key, wing key), casefolded


@dataclass
class Zone:
    floor: str               # display label, spelled as on the first room block
    wing: str
    capacity: int = 0
    current_count: int = 0

    @property
    def key(self) -> ZoneKey:
        return zone_key(self.floor, self.wing)

    @property
    def has_space(self) -> bool:
        return self.current_count < self.capacity

    @property
    def remaining(self) -> int:
        return max(0, self.capacity - self.current_count)

    @property
    def occupancy_percent(self) -> float:
        return round(self.current_count / self.capacity * 100, 1) if self.capacity else 0.0

    def take_slot(self):
        self.current_count += 1


def zone_key(floor: Optional[str], wing: Optional[str]) -> ZoneKey:
    """Key for a floor/wing pair, applying the configured defaults for missing labels."""
    return (
        label_key(floor) or label_key(settings.ZONE_DEFAULT_FLOOR),
        label_key(wing) or label_key(settings.ZONE_DEFAULT_WING),
    )


def allocation_key(guest) -> Optional[ZoneKey]:
    """Zone key of a guest's current allocation, or None if the guest is not fully placed."""
    floor = clean_label(guest.allocated_floor)
    wing = clean_label(guest.allocated_wing)
    if not floor or not wing:
        return None
    return zone_key(floor, wing)


def build_zones(room_blocks: Iterable, guests: Iterable = ()) -> dict[ZoneKey, Zone]:
    """
    Group room blocks by floor/wing into zones (capacity = sum of total_qty),
    then count guests already allocated to each zone.
    Zones keep the order in which their first room block appears.
    """
    zones: dict[ZoneKey, Zone] = {}
    for block in room_blocks:
        floor = clean_label(block.floor) or settings.ZONE_DEFAULT_FLOOR
        wing = clean_label(block.wing) or settings.ZONE_DEFAULT_WING
        key = zone_key(floor, wing)
        zone = zones.get(key)
        if zone is None:
            zone = zones[key] = Zone(floor=floor, wing=wing)
        zone.capacity += block.total_qty or 0

    orphaned = 0
    for guest in guests:
        key = allocation_key(guest)
        if key is None:
            continue
        zone = zones.get(key)
        if zone is None:
            orphaned += 1
            continue
        zone.current_count += 1

    if orphaned:
        logger.debug(f"{orphaned} orphaned allocation(s) ignored for capacity")
    return zones


def find_orphaned_allocations(zones: dict[ZoneKey, Zone], guests: Iterable) -> list:
    """Guests holding a floor/wing pair that matches no zone."""
    orphaned = []
    for guest in guests:
        key = allocation_key(guest)
        if key is not None and key not in zones:
            orphaned.append(guest)
    return orphaned
