"""Pydantic schemas for the scan terminal API. Strict validation, no DB or infrastructure."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from scan_engine.domain.models.machine import ActivityStatus, HealthStatus, Machine, SLOT_NAMES
from scan_engine.domain.models.session import ScanMode


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class ScanSubmitRequest(BaseModel):
    """Manual or camera-decoded identifier. mode omitted = use the terminal's auto-run switch."""

    raw: str = Field(..., description="Scanned or typed identifier")
    mode: Optional[ScanMode] = None


class KeystrokeRequest(BaseModel):
    """A burst of raw scanner keystrokes; newline/carriage return terminate an identifier."""

    keys: str
    editable_target: bool = False
    mode: Optional[ScanMode] = None


class ConfirmActivityRequest(BaseModel):
    value: ActivityStatus


class ConfirmHealthRequest(BaseModel):
    value: HealthStatus


class AutoRunRequest(BaseModel):
    enabled: bool


class MachineCreateRequest(BaseModel):
    section: str = Field(..., min_length=1)
    machine_type: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    model_no: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None


class MachineImportRequest(BaseModel):
    """Spreadsheet rows keyed by column header."""

    rows: List[Dict[str, Optional[str]]]


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class ScanSlotResponse(BaseModel):
    time: datetime
    status: ActivityStatus
    operator_id: str


class MachineResponse(BaseModel):
    id: str
    name: str
    status: ActivityStatus
    operational_status: HealthStatus
    scans: Dict[str, ScanSlotResponse] = Field(default_factory=dict)
    last_updated: Optional[datetime] = None
    section: Optional[str] = None
    machine_type: Optional[str] = None
    model_no: Optional[str] = None
    serial_no: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def from_domain(cls, machine: Machine) -> "MachineResponse":
        scans = {}
        for name in SLOT_NAMES:
            slot = machine.scans.get(name)
            if slot is not None:
                scans[name] = ScanSlotResponse(
                    time=slot.time, status=slot.status, operator_id=slot.operator_id
                )
        return cls(
            id=machine.id,
            name=machine.name,
            status=machine.status,
            operational_status=machine.operational_status,
            scans=scans,
            last_updated=machine.last_updated,
            section=machine.section,
            machine_type=machine.machine_type,
            model_no=machine.model_no,
            serial_no=machine.serial_no,
            location=machine.location,
            notes=machine.notes,
        )
