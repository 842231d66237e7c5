"""Fleet service: registry-wide operations outside the scan loop: registration, import, start of day."""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Mapping, Optional

from scan_engine.application.exceptions import StoreWriteFailedError
from scan_engine.application.machine_registry import MachineRegistry
from scan_engine.domain.exceptions import DomainValidationError
from scan_engine.domain.models.machine import (
    ActivityStatus,
    HealthStatus,
    Machine,
    MachineField,
    ScanSlots,
    health_from_label,
)
from scan_engine.domain.models.session import Operator
from scan_engine.governance.audit_logger import AuditLogger
from scan_engine.governance.exceptions import AuditWriteFailedError

START_DAY_ACTION = "Start of day reset"
REGISTER_ACTION = "Machine registered"

_WHITESPACE = re.compile(r"\s+")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _clean(value: Optional[str]) -> str:
    """Blank out spreadsheet error markers."""
    text = "" if value is None else str(value).strip()
    if text in ("#REF!", "NaN", "undefined", "#N/A"):
        return ""
    return text


def generate_machine_id(section: str, machine_type: str, existing: Iterable[Machine]) -> str:
    """
    SECTION-TYPE-NNN, NNN starting one past the number of machines already in that
    section/type and moving up past any id that is already taken.
    """
    section_key = section.strip().upper()
    type_key = machine_type.strip().upper()
    if not section_key or not type_key:
        raise DomainValidationError("section and machine_type are required")
    machines = list(existing)
    taken = {machine.id.upper() for machine in machines}
    number = 1 + sum(
        1
        for machine in machines
        if (machine.section or "").upper() == section_key
        and (machine.machine_type or "").upper() == type_key
    )
    while f"{section_key}-{type_key}-{number:03d}" in taken:
        number += 1
    return f"{section_key}-{type_key}-{number:03d}"


@dataclass(frozen=True)
class ImportSummary:
    imported: int
    skipped: int
    machine_ids: List[str]


@dataclass(frozen=True)
class StartDaySummary:
    reset: int
    kept_not_working: int
    audit_failures: int


class FleetService:
    """Application-layer orchestration only. No HTTP, no direct infrastructure."""

    def __init__(
        self,
        registry: MachineRegistry,
        audit_logger: AuditLogger,
        logger: logging.Logger,
        *,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._registry = registry
        self._audit = audit_logger
        self._logger = logger
        self._now = now

    async def list_machines(self) -> List[Machine]:
        return await self._registry.list_machines()

    async def add_machine(
        self,
        *,
        section: str,
        machine_type: str,
        name: str,
        operator: Operator,
        model_no: Optional[str] = None,
        location: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Machine:
        """Register a new machine: IDLE, WORKING, empty scan history."""
        existing = await self._registry.list_machines()
        machine_id = generate_machine_id(section, machine_type, existing)
        if await self._registry.get(machine_id) is not None:
            raise DomainValidationError(f"Machine {machine_id} already exists")
        now = self._now()
        machine = Machine(
            id=machine_id,
            name=name.strip(),
            status=ActivityStatus.IDLE,
            operational_status=HealthStatus.WORKING,
            scans=ScanSlots(),
            last_updated=now,
            section=section.strip().upper(),
            machine_type=machine_type.strip().upper(),
            model_no=model_no,
            location=location,
            notes=notes,
        )
        await self._write(self._registry.upsert(machine), machine_id)
        await self._audit_quietly(machine_id, operator, REGISTER_ACTION, MachineField.STATUS, ActivityStatus.IDLE.value, now)
        self._logger.info("machine_registered", extra={"machine_id": machine_id})
        return machine

    async def import_machines(self, rows: Iterable[Mapping[str, str]]) -> ImportSummary:
        """
        Merge spreadsheet rows into the registry. Id is SECTION-TYPE-SERIAL with all whitespace
        dropped from the type (which falls back to the Section column). Rows without a
        serial number are skipped. Imported machines start IDLE; scan history is kept.
        """
        imported: List[str] = []
        skipped = 0
        now = self._now()
        for row in rows:
            section = _clean(row.get("section") or row.get("SECTION")).upper() or "UNKNOWN"
            raw_type = _clean(row.get("type") or row.get("Section"))
            serial = _clean(row.get("serialNo") or row.get("serial_no") or row.get("Serial No."))
            if not serial:
                skipped += 1
                continue
            machine_id = f"{section}-{_WHITESPACE.sub('', raw_type.upper())}-{serial}"
            machine = Machine(
                id=machine_id,
                name=_clean(row.get("name") or row.get("DECRIPTION")).lower(),
                status=ActivityStatus.IDLE,
                operational_status=health_from_label(
                    row.get("operationalStatus") or row.get("Status")
                ),
                last_updated=now,
                section=section,
                machine_type=raw_type or None,
                model_no=_clean(row.get("modelNo") or row.get("MC NO.")) or None,
                serial_no=serial,
                location=_clean(row.get("location") or row.get("Location")) or None,
            )
            await self._write(self._registry.upsert(machine), machine_id)
            imported.append(machine_id)
        self._logger.info(
            "machines_imported",
            extra={"imported": len(imported), "skipped": skipped},
        )
        return ImportSummary(imported=len(imported), skipped=skipped, machine_ids=imported)

    async def start_day(self, *, operator: Operator) -> StartDaySummary:
        """Clear every machine's scans; status back to IDLE unless NOT_WORKING."""
        machines = await self._registry.list_machines()
        now = self._now()
        reset = kept = audit_failures = 0
        for machine in machines:
            if machine.status == ActivityStatus.NOT_WORKING:
                next_status = ActivityStatus.NOT_WORKING
                kept += 1
            else:
                next_status = ActivityStatus.IDLE
                reset += 1
            await self._write(
                self._registry.reset_activity(machine.id, next_status, updated_at=now),
                machine.id,
            )
            if not await self._audit_quietly(
                machine.id, operator, START_DAY_ACTION, MachineField.STATUS, next_status.value, now
            ):
                audit_failures += 1
        self._logger.info(
            "start_of_day",
            extra={"reset": reset, "kept_not_working": kept, "audit_failures": audit_failures},
        )
        return StartDaySummary(reset=reset, kept_not_working=kept, audit_failures=audit_failures)

    async def _write(self, call, machine_id: str) -> None:
        try:
            await call
        except Exception as e:
            self._logger.error(
                "store_write_failed",
                extra={"machine_id": machine_id, "error": str(e)},
            )
            raise StoreWriteFailedError(f"Could not update {machine_id}: {e}") from e

    async def _audit_quietly(
        self,
        machine_id: str,
        operator: Operator,
        action: str,
        field: MachineField,
        new_value: str,
        now: datetime,
    ) -> bool:
        """Audit failures are reported, not raised: the registry write already happened."""
        try:
            await self._audit.log_change(
                machine_id=machine_id,
                operator_id=operator.id,
                operator_name=operator.display_name,
                action=action,
                field=field.value,
                new_value=new_value,
                timestamp=now,
            )
        except AuditWriteFailedError:
            return False
        return True
