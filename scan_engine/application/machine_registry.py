"""Machine registry protocol. Application layer depends on this; infrastructure implements it."""

from datetime import datetime
from typing import List, Optional, Protocol, Union

from scan_engine.domain.models.machine import (
    ActivityStatus,
    HealthStatus,
    Machine,
    MachineField,
    ScanSlots,
)


class MachineRegistry(Protocol):
    """
    Snapshot reads and single-record replaces. No multi-record transactions;
    concurrent writers to the same machine resolve as last-write-wins.
    """

    async def list_machines(self) -> List[Machine]:
        """Snapshot of every machine, in stable registry order."""
        ...

    async def get(self, machine_id: str) -> Optional[Machine]:
        """Return one machine or None."""
        ...

    async def update_field(
        self,
        machine_id: str,
        field: MachineField,
        value: Union[ActivityStatus, HealthStatus],
        *,
        updated_at: datetime,
        scans: Optional[ScanSlots] = None,
    ) -> None:
        """Replace one field (plus last_updated, and scans when given). Raises on failure."""
        ...

    async def reset_activity(
        self,
        machine_id: str,
        status: ActivityStatus,
        *,
        updated_at: datetime,
    ) -> None:
        """Set status and clear every scan slot."""
        ...

    async def upsert(self, machine: Machine) -> None:
        """Insert or merge a machine record. Existing scan history is kept."""
        ...
