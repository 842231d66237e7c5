"""Shared fakes: in-memory machine registry, audit repository, terminal settings, manual clock."""

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from scan_engine.application.scan_context import ScanContext
from scan_engine.application.scan_processor import ScanEventProcessor
from scan_engine.domain.models.machine import (
    ActivityStatus,
    HealthStatus,
    Machine,
    MachineField,
    ScanSlots,
)
from scan_engine.domain.models.session import Operator
from scan_engine.governance.audit_logger import AuditLogger
from scan_engine.observability.metrics import MetricsCollector


class FakeMachineRegistry:
    """In-memory registry recording every write."""

    def __init__(self, machines=None):
        self._machines = {m.id: m for m in (machines or [])}
        self.writes = []
        self.fail_writes = False

    async def list_machines(self):
        return list(self._machines.values())

    async def get(self, machine_id):
        return self._machines.get(machine_id)

    async def update_field(self, machine_id, field, value, *, updated_at, scans=None):
        if self.fail_writes:
            raise RuntimeError("store unavailable")
        self.writes.append((machine_id, field, value))
        machine = self._machines[machine_id]
        changes = {"last_updated": updated_at}
        if field == MachineField.STATUS:
            changes["status"] = value
        else:
            changes["operational_status"] = value
        if scans is not None:
            changes["scans"] = scans
        self._machines[machine_id] = replace(machine, **changes)

    async def reset_activity(self, machine_id, status, *, updated_at):
        if self.fail_writes:
            raise RuntimeError("store unavailable")
        self.writes.append((machine_id, MachineField.STATUS, status))
        self._machines[machine_id] = replace(
            self._machines[machine_id], status=status, scans=ScanSlots(), last_updated=updated_at
        )

    async def upsert(self, machine):
        if self.fail_writes:
            raise RuntimeError("store unavailable")
        existing = self._machines.get(machine.id)
        if existing is not None:
            machine = replace(machine, scans=existing.scans)
        self._machines[machine.id] = machine


class FakeAuditRepository:
    def __init__(self):
        self.records = []
        self.fail = False

    async def save(self, record):
        if self.fail:
            raise RuntimeError("audit sink down")
        self.records.append(record)

    async def list_recent(self, limit=100):
        return list(reversed(self.records))[:limit]


class FakeSettingsStore:
    def __init__(self, auto_run=False):
        self.auto_run = auto_run

    async def get_auto_run(self):
        return self.auto_run

    async def set_auto_run(self, enabled):
        self.auto_run = enabled


class ManualClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class SteppingNow:
    """UTC timestamps one second apart, so slot times are distinguishable."""

    def __init__(self):
        self._current = datetime(2026, 1, 5, 6, 0, tzinfo=timezone.utc)

    def __call__(self):
        self._current += timedelta(seconds=1)
        return self._current


def make_machine(machine_id="KNIT-LOCK-001", name="Aurora 001", **kwargs):
    return Machine(id=machine_id, name=name, **kwargs)


@pytest.fixture
def operator():
    return Operator(id="op-1", name="Nimal")


@pytest.fixture
def machines():
    return [
        make_machine("KNIT-LOCK-001", "Aurora 001"),
        make_machine("KNIT-LOCK-002", "Juki 7", operational_status=HealthStatus.BREAKDOWN),
        make_machine("SEW-FLAT-001", "Brother flat", operational_status=HealthStatus.REMOVED),
        make_machine("SEW-FLAT-002", "Singer", status=ActivityStatus.NOT_WORKING),
    ]


@pytest.fixture
def registry(machines):
    return FakeMachineRegistry(machines)


@pytest.fixture
def audit_repository():
    return FakeAuditRepository()


@pytest.fixture
def settings_store():
    return FakeSettingsStore()


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def metrics():
    return MetricsCollector()


@pytest.fixture
def context(clock):
    return ScanContext(cooldown_seconds=2.0, clock=clock)


@pytest.fixture
def processor(registry, audit_repository, settings_store, context, metrics):
    return ScanEventProcessor(
        registry=registry,
        audit_logger=AuditLogger(repository=audit_repository),
        settings_store=settings_store,
        logger=MagicMock(),
        context=context,
        metrics=metrics,
        now=SteppingNow(),
    )
