"""Three-slot activity history per machine."""

from datetime import datetime
from typing import Tuple

from scan_engine.domain.models.machine import SLOT_NAMES, ActivityStatus, ScanSlot, ScanSlots

# Once every slot is taken, new scans land here; scan1 and scan2 are never evicted.
OVERFLOW_SLOT = "scan3"


def next_slot(scans: ScanSlots) -> str:
    """First empty slot in order, else the overflow slot."""
    for name in SLOT_NAMES:
        if scans.get(name) is None:
            return name
    return OVERFLOW_SLOT


def record_activity(
    scans: ScanSlots,
    new_status: ActivityStatus,
    operator_id: str,
    time: datetime,
) -> Tuple[ScanSlots, str]:
    """Return the updated slots and the name of the slot that was written."""
    slot = next_slot(scans)
    entry = ScanSlot(time=time, status=new_status, operator_id=operator_id)
    return scans.with_slot(slot, entry), slot
