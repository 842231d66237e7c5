# scan_engine/infrastructure/database/models.py

from sqlalchemy import JSON, Column, DateTime, Integer, String
from sqlalchemy.sql import func

from scan_engine.infrastructure.database.session import Base


class MachineRow(Base):
    """ORM model for tracked machines. Scan slots are stored as one JSON document."""

    __tablename__ = "machines"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False, default="")
    status = Column(String, nullable=False, default="IDLE")
    operational_status = Column(String, nullable=False, default="WORKING")
    scans = Column(JSON, nullable=False, default=dict)
    last_updated = Column(DateTime(timezone=True), nullable=True)

    section = Column(String, nullable=True, index=True)
    machine_type = Column(String, nullable=True)
    model_no = Column(String, nullable=True)
    serial_no = Column(String, nullable=True)
    location = Column(String, nullable=True)
    notes = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())


class AuditLogRow(Base):
    """Append-only audit trail. Rows are inserted, never updated."""

    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    timestamp = Column(DateTime(timezone=True), nullable=False, index=True)
    machine_id = Column(String, nullable=False, index=True)
    operator_id = Column(String, nullable=False)
    operator_name = Column(String, nullable=False)
    action = Column(String, nullable=False)
    field = Column(String, nullable=False)
    new_value = Column(String, nullable=False)
    correlation_id = Column(String, nullable=True)


class TerminalSettingRow(Base):
    """Key/value terminal configuration (auto-run switch)."""

    __tablename__ = "terminal_settings"

    key = Column(String, primary_key=True)
    value = Column(String, nullable=False)
