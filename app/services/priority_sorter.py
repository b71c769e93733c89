# app/services/priority_sorter.py
"""
Priority Sorter: picks the guests the allocator should place and orders them.

Eligible: no allocated floor and no allocated wing, status not "cancelled".
Order: fixed group priority table (VIP first), ties keep the input order.
"""

from enum import Enum
from typing import Iterable, Optional
from app.utils.labels import clean_label, label_key


class GuestGroup(str, Enum):
    VIP = "VIP"
    BRIDE_SIDE = "Bride Side"
    GROOM_SIDE = "Groom Side"
    FAMILY = "Family"
    FRIENDS = "Friends"


GROUP_PRIORITY = {
    GuestGroup.VIP: 0,
    GuestGroup.BRIDE_SIDE: 1,
    GuestGroup.GROOM_SIDE: 2,
    GuestGroup.FAMILY: 3,
    GuestGroup.FRIENDS: 4,
}
UNRANKED_PRIORITY = 99   # any other group, including none

CANCELLED_STATUS = "cancelled"

_GROUPS_BY_KEY = {label_key(g.value): g for g in GuestGroup}


def resolve_group(label: Optional[str]) -> Optional[GuestGroup]:
    """Map a free-text group label to a known GuestGroup (case/whitespace-insensitive)."""
    return _GROUPS_BY_KEY.get(label_key(label))


def priority_rank(label: Optional[str]) -> int:
    group = resolve_group(label)
    return GROUP_PRIORITY[group] if group is not None else UNRANKED_PRIORITY


def is_eligible(guest) -> bool:
    if clean_label(guest.allocated_floor) or clean_label(guest.allocated_wing):
        return False
    return label_key(guest.status) != CANCELLED_STATUS


def select_unallocated(guests: Iterable) -> list:
    return [g for g in guests if is_eligible(g)]


def sort_by_priority(guests: Iterable) -> list:
    """Stable sort by group rank; equal ranks keep their input order."""
    return sorted(guests, key=lambda g: priority_rank(g.group))
