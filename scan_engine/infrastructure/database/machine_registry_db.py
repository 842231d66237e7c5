"""DB-backed machine registry. Implements MachineRegistry protocol with last-write-wins field replaces."""

from datetime import datetime, timezone
from typing import List, Optional, Union

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import async_sessionmaker

from scan_engine.domain.models.machine import (
    ActivityStatus,
    HealthStatus,
    Machine,
    MachineField,
    ScanSlots,
)
from scan_engine.infrastructure.database.models import MachineRow


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite drops tzinfo on the way back
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_domain(row: MachineRow) -> Machine:
    return Machine(
        id=row.id,
        name=row.name or "",
        status=ActivityStatus(row.status),
        operational_status=HealthStatus(row.operational_status or HealthStatus.WORKING.value),
        scans=ScanSlots.from_dict(row.scans),
        last_updated=_aware(row.last_updated),
        section=row.section,
        machine_type=row.machine_type,
        model_no=row.model_no,
        serial_no=row.serial_no,
        location=row.location,
        notes=row.notes,
    )


class DbMachineRegistry:
    """One short session per call; no multi-record transactions."""

    def __init__(self, session_factory: async_sessionmaker) -> None:
        self._session_factory = session_factory

    async def list_machines(self) -> List[Machine]:
        async with self._session_factory() as session:
            result = await session.execute(select(MachineRow).order_by(MachineRow.id))
            return [_to_domain(row) for row in result.scalars().all()]

    async def get(self, machine_id: str) -> Optional[Machine]:
        async with self._session_factory() as session:
            row = await session.get(MachineRow, machine_id)
            return None if row is None else _to_domain(row)

    async def update_field(
        self,
        machine_id: str,
        field: MachineField,
        value: Union[ActivityStatus, HealthStatus],
        *,
        updated_at: datetime,
        scans: Optional[ScanSlots] = None,
    ) -> None:
        values = {field.value: value.value, "last_updated": updated_at}
        if scans is not None:
            values["scans"] = scans.to_dict()
        await self._update(machine_id, values)

    async def reset_activity(
        self,
        machine_id: str,
        status: ActivityStatus,
        *,
        updated_at: datetime,
    ) -> None:
        await self._update(
            machine_id,
            {"status": status.value, "scans": {}, "last_updated": updated_at},
        )

    async def upsert(self, machine: Machine) -> None:
        async with self._session_factory() as session:
            row = await session.get(MachineRow, machine.id)
            if row is None:
                row = MachineRow(id=machine.id, scans=machine.scans.to_dict())
                session.add(row)
            row.name = machine.name
            row.status = machine.status.value
            row.operational_status = machine.operational_status.value
            row.last_updated = machine.last_updated
            row.section = machine.section
            row.machine_type = machine.machine_type
            row.model_no = machine.model_no
            row.serial_no = machine.serial_no
            row.location = machine.location
            row.notes = machine.notes
            await session.commit()

    async def _update(self, machine_id: str, values: dict) -> None:
        async with self._session_factory() as session:
            result = await session.execute(
                update(MachineRow).where(MachineRow.id == machine_id).values(**values)
            )
            if result.rowcount == 0:
                await session.rollback()
                raise LookupError(f"Machine {machine_id} does not exist")
            await session.commit()
