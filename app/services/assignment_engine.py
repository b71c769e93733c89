# app/services/assignment_engine.py
"""
Assignment Engine: greedy, one-guest-at-a-time placement into zones.

For each guest (already in priority order) the first rule that succeeds wins:
  1. proximity  "near <name>" joins the zone of that already-placed guest
  2. group      joins the zone anchored by the guest's group earlier in this run
  3. priority   first zone with space. VIPs walk floors from the top down,
                everyone else from the bottom up. The first group member placed
                this way anchors the group.
A guest no zone can take is simply left out of the result.

Every placement is committed to the AllocationContext before the next guest is
considered, so later guests see earlier ones. The engine never exceeds a zone's
capacity.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional
from app.services.priority_sorter import GuestGroup, resolve_group
from app.services.zone_builder import Zone, ZoneKey, allocation_key
from app.utils.labels import label_key
from app.utils.logger import get_logger

logger = get_logger(__name__)

_PROXIMITY_PREFIXES = (
    re.compile(r"^\s*near\b", re.IGNORECASE),
    re.compile(r"^\s*next\s+to\b", re.IGNORECASE),
)


class PlacementRule(str, Enum):
    PROXIMITY = "proximity"
    GROUP = "group"
    PRIORITY = "priority"


@dataclass(frozen=True)
class Placement:
    guest_id: int
    floor: str
    wing: str
    rule: PlacementRule


@dataclass
class AllocationContext:
    """Mutable state shared by every placement in one run."""
    zones: dict[ZoneKey, Zone]
    group_anchors: dict[str, ZoneKey] = field(default_factory=dict)   # group key -> zone
    placed_by_name: dict[str, ZoneKey] = field(default_factory=dict)  # guest name key -> zone

    @classmethod
    def from_guests(cls, zones: dict[ZoneKey, Zone], guests: Iterable) -> "AllocationContext":
        """Seed the name lookup with every guest that already holds a floor/wing."""
        context = cls(zones=zones)
        for guest in guests:
            key = allocation_key(guest)
            name = label_key(guest.name)
            if key is not None and name:
                context.placed_by_name[name] = key
        return context

    def zone_with_space(self, key: Optional[ZoneKey]) -> Optional[Zone]:
        zone = self.zones.get(key) if key is not None else None
        return zone if zone is not None and zone.has_space else None

    def commit(self, guest, zone: Zone, rule: PlacementRule) -> Placement:
        zone.take_slot()
        name = label_key(guest.name)
        if name:
            self.placed_by_name[name] = zone.key
        return Placement(guest_id=guest.id, floor=zone.floor, wing=zone.wing, rule=rule)


def proximity_target(request: Optional[str]) -> Optional[str]:
    """Name key from a proximity request: "Near Priya Sharma" -> "priya sharma"."""
    if not request:
        return None
    # "near" first, then "next to", so "near next to Alice" names Alice
    for prefix in _PROXIMITY_PREFIXES:
        request = prefix.sub("", request, count=1)
    return label_key(request)


def candidate_zones(zones: Iterable[Zone], vip: bool) -> list[Zone]:
    """Zones by floor label (string order): descending for VIPs, ascending otherwise."""
    return sorted(zones, key=lambda z: z.floor, reverse=vip)


def place_guest(guest, context: AllocationContext) -> Optional[Placement]:
    # 1. Proximity request
    target = proximity_target(guest.proximity_request)
    if target:
        zone = context.zone_with_space(context.placed_by_name.get(target))
        if zone is not None:
            return context.commit(guest, zone, PlacementRule.PROXIMITY)

    # 2. Group cohesion
    group = label_key(guest.group)
    if group:
        zone = context.zone_with_space(context.group_anchors.get(group))
        if zone is not None:
            return context.commit(guest, zone, PlacementRule.GROUP)

    # 3. Priority fallback
    vip = resolve_group(guest.group) is GuestGroup.VIP
    for zone in candidate_zones(context.zones.values(), vip):
        if zone.has_space:
            if group and group not in context.group_anchors:
                context.group_anchors[group] = zone.key
            return context.commit(guest, zone, PlacementRule.PRIORITY)

    return None


def assign_guests(guests: Iterable, context: AllocationContext) -> dict[int, Placement]:
    """Place guests in the given order. Guests that do not fit are omitted."""
    placements: dict[int, Placement] = {}
    for guest in guests:
        placement = place_guest(guest, context)
        if placement is None:
            logger.debug(f"No zone with space for guest {guest.id} ({guest.name})")
            continue
        placements[guest.id] = placement
        logger.debug(
            f"Guest {guest.id} ({guest.name}) → {placement.floor}/{placement.wing} "
            f"[{placement.rule.value}]"
        )
    return placements
