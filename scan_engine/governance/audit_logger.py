"""Append-only audit logging for machine state changes. No FastAPI."""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from scan_engine.governance.audit_models import AuditRecord
from scan_engine.governance.audit_repository import AuditRepository
from scan_engine.governance.exceptions import AuditWriteFailedError

logger = logging.getLogger(__name__)


class AuditLogger:
    """
    Writes immutable audit records via repository.
    Must include: when (UTC), machine, operator, action, new value.
    Never updates or deletes.
    """

    def __init__(self, repository: AuditRepository) -> None:
        self._repository = repository

    async def append(self, record: AuditRecord) -> None:
        """Persist one record. Raises AuditWriteFailedError if the sink fails."""
        try:
            await self._repository.save(record)
        except Exception as e:
            logger.error(
                "audit_write_failed",
                extra={"machine_id": record.machine_id, "error": str(e)},
            )
            raise AuditWriteFailedError(
                f"Audit append failed for {record.machine_id}: {e}"
            ) from e

    async def log_change(
        self,
        *,
        machine_id: str,
        operator_id: str,
        operator_name: str,
        action: str,
        field: str,
        new_value: str,
        correlation_id: Optional[str] = None,
        timestamp: Optional[datetime] = None,
    ) -> AuditRecord:
        """Build and append a record. Timestamp defaults to now (UTC)."""
        record = AuditRecord(
            timestamp=timestamp or datetime.now(timezone.utc),
            machine_id=machine_id,
            operator_id=operator_id,
            operator_name=operator_name,
            action=action,
            field=field,
            new_value=new_value,
            correlation_id=correlation_id,
        )
        await self.append(record)
        return record

    async def recent(self, limit: int = 100) -> List[AuditRecord]:
        """Newest first. Read-only view of the trail."""
        if limit < 1:
            raise ValueError("limit must be positive")
        return await self._repository.list_recent(limit=limit)
