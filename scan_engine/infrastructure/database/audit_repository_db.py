"""DB-backed audit repository. Insert-only."""

from datetime import timezone
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker

from scan_engine.governance.audit_models import AuditRecord
from scan_engine.infrastructure.database.models import AuditLogRow


class DbAuditRepository:
    """Implements AuditRepository protocol."""

    def __init__(self, session_factory: async_sessionmaker) -> None:
        self._session_factory = session_factory

    async def save(self, record: AuditRecord) -> None:
        async with self._session_factory() as session:
            session.add(
                AuditLogRow(
                    timestamp=record.timestamp,
                    machine_id=record.machine_id,
                    operator_id=record.operator_id,
                    operator_name=record.operator_name,
                    action=record.action,
                    field=record.field,
                    new_value=record.new_value,
                    correlation_id=record.correlation_id,
                )
            )
            await session.commit()

    async def list_recent(self, limit: int = 100) -> List[AuditRecord]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(AuditLogRow)
                .order_by(AuditLogRow.timestamp.desc(), AuditLogRow.id.desc())
                .limit(limit)
            )
            records = []
            for row in result.scalars().all():
                timestamp = row.timestamp
                if timestamp.tzinfo is None:
                    timestamp = timestamp.replace(tzinfo=timezone.utc)
                records.append(
                    AuditRecord(
                        timestamp=timestamp,
                        machine_id=row.machine_id,
                        operator_id=row.operator_id,
                        operator_name=row.operator_name,
                        action=row.action,
                        field=row.field,
                        new_value=row.new_value,
                        correlation_id=row.correlation_id,
                    )
                )
            return records
