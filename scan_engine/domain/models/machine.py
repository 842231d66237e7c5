"""Domain model for tracked machines. Pure business semantics, no ORM or infrastructure."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class ActivityStatus(str, Enum):
    """Whether the machine is currently producing."""

    RUNNING = "RUNNING"
    IDLE = "IDLE"
    NOT_WORKING = "NOT_WORKING"


class HealthStatus(str, Enum):
    """Physical serviceability, independent of activity."""

    WORKING = "WORKING"
    HALF_WORKING = "HALF_WORKING"
    BREAKDOWN = "BREAKDOWN"
    REMOVED = "REMOVED"


# Health states under which a machine may not be set RUNNING
UNSERVICEABLE: frozenset = frozenset({HealthStatus.BREAKDOWN, HealthStatus.REMOVED})


class MachineField(str, Enum):
    """The two fields a scan may replace."""

    STATUS = "status"
    OPERATIONAL_STATUS = "operational_status"


SLOT_NAMES = ("scan1", "scan2", "scan3")


@dataclass(frozen=True)
class ScanSlot:
    """One recorded activity scan."""

    time: datetime
    status: ActivityStatus
    operator_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "time": self.time.isoformat(),
            "status": self.status.value,
            "operator_id": self.operator_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScanSlot":
        return cls(
            time=datetime.fromisoformat(data["time"]),
            status=ActivityStatus(data["status"]),
            operator_id=data.get("operator_id") or "",
        )


@dataclass(frozen=True)
class ScanSlots:
    """Bounded history of the three most recent activity scans."""

    scan1: Optional[ScanSlot] = None
    scan2: Optional[ScanSlot] = None
    scan3: Optional[ScanSlot] = None

    def get(self, name: str) -> Optional[ScanSlot]:
        return getattr(self, name)

    def with_slot(self, name: str, slot: ScanSlot) -> "ScanSlots":
        if name not in SLOT_NAMES:
            raise ValueError(f"Unknown scan slot {name}")
        return replace(self, **{name: slot})

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for name in SLOT_NAMES:
            slot = self.get(name)
            if slot is not None:
                out[name] = slot.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ScanSlots":
        data = data or {}
        return cls(
            **{
                name: ScanSlot.from_dict(data[name])
                for name in SLOT_NAMES
                if data.get(name)
            }
        )


@dataclass(frozen=True)
class Machine:
    """
    Snapshot of one machine as read from the registry.
    Immutable: the core never edits a snapshot, it issues field replaces to the store.
    """

    id: str
    name: str
    status: ActivityStatus = ActivityStatus.IDLE
    operational_status: HealthStatus = HealthStatus.WORKING
    scans: ScanSlots = field(default_factory=ScanSlots)
    last_updated: Optional[datetime] = None
    section: Optional[str] = None
    machine_type: Optional[str] = None
    model_no: Optional[str] = None
    serial_no: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None

    @property
    def is_serviceable(self) -> bool:
        return self.operational_status not in UNSERVICEABLE


def health_from_label(label: Optional[str]) -> HealthStatus:
    """
    Map a free-text condition label (spreadsheet column) to a health state.
    "P/Breakdown" is a permanent breakdown and counts as REMOVED.
    """
    text = (label or "").strip().upper()
    if "P/BREAKDOWN" in text or "REMOVED" in text:
        return HealthStatus.REMOVED
    if "BREAKDOWN" in text:
        return HealthStatus.BREAKDOWN
    if "HALF" in text:
        return HealthStatus.HALF_WORKING
    return HealthStatus.WORKING
