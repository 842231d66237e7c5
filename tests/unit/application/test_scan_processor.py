"""ScanEventProcessor: auto-run, interactive confirmation, health diversion, debounce, failures."""

import asyncio

import pytest

from scan_engine.application.exceptions import NoActiveSessionError, StoreWriteFailedError
from scan_engine.application.scan_processor import ScanResult
from scan_engine.domain.exceptions import DomainValidationError, HealthBlockedError
from scan_engine.domain.models.machine import ActivityStatus, HealthStatus, MachineField
from scan_engine.domain.models.session import ScanMode, SessionState


# ---------- 1. Not found ----------


async def test_unknown_identifier_writes_nothing(processor, registry, audit_repository, operator):
    outcome = await processor.submit("GHOST-404", ScanMode.AUTO_RUN, operator=operator)

    assert outcome.result == ScanResult.NOT_FOUND
    assert registry.writes == []
    assert audit_repository.records == []
    assert "GHOST-404" in processor.last_error
    assert processor.state == SessionState.IDLE_LISTENING
    assert processor.processing is False


async def test_empty_input_surfaces_error_and_releases(processor, registry, operator):
    outcome = await processor.submit("   ", ScanMode.INTERACTIVE, operator=operator)
    assert outcome.result == ScanResult.NOT_FOUND
    assert processor.last_error
    assert not processor.processing
    assert registry.writes == []


# ---------- 2. Auto-run ----------


async def test_auto_run_writes_running_once_and_audits_once(processor, registry, audit_repository, operator):
    outcome = await processor.submit("aurora", ScanMode.AUTO_RUN, operator=operator)

    assert outcome.result == ScanResult.APPLIED
    assert outcome.machine_id == "KNIT-LOCK-001"
    assert outcome.slot == "scan1"
    assert registry.writes == [("KNIT-LOCK-001", MachineField.STATUS, ActivityStatus.RUNNING)]
    assert len(audit_repository.records) == 1
    record = audit_repository.records[0]
    assert record.machine_id == "KNIT-LOCK-001"
    assert record.operator_name == "Nimal"
    assert record.new_value == "RUNNING"
    assert record.action == "Scanned slot scan1"

    machine = await registry.get("KNIT-LOCK-001")
    assert machine.status == ActivityStatus.RUNNING
    assert machine.scans.scan1.operator_id == "op-1"


@pytest.mark.parametrize("raw,health", [("KNIT-LOCK-002", "BREAKDOWN"), ("SEW-FLAT-001", "REMOVED")])
async def test_auto_run_on_unserviceable_machine_diverts(processor, registry, audit_repository, operator, raw, health):
    outcome = await processor.submit(raw, ScanMode.AUTO_RUN, operator=operator)

    assert outcome.result == ScanResult.DIVERTED
    assert health in outcome.warning
    assert registry.writes == []
    assert audit_repository.records == []
    assert processor.state == SessionState.AWAITING_CONFIRMATION
    assert processor.session.resolved_machine_id == raw


async def test_mode_defaults_to_persisted_switch(processor, settings_store, registry, operator):
    settings_store.auto_run = True
    outcome = await processor.submit("KNIT-LOCK-001", operator=operator)
    assert outcome.result == ScanResult.APPLIED

    processor.context.release()
    settings_store.auto_run = False
    outcome = await processor.submit("KNIT-LOCK-001", operator=operator)
    assert outcome.result == ScanResult.AWAITING_CONFIRMATION


# ---------- 3. Debounce ----------


async def test_submissions_during_cooldown_are_dropped(processor, registry, clock, operator):
    first = await processor.submit("KNIT-LOCK-001", ScanMode.AUTO_RUN, operator=operator)
    second = await processor.submit("KNIT-LOCK-001", ScanMode.AUTO_RUN, operator=operator)
    third = await processor.submit("SEW-FLAT-002", ScanMode.AUTO_RUN, operator=operator)

    assert first.result == ScanResult.APPLIED
    assert second.result == ScanResult.DROPPED
    assert third.result == ScanResult.DROPPED  # global, not per machine
    assert len(registry.writes) == 1
    assert processor.state == SessionState.COOLDOWN

    clock.advance(2.0)
    assert processor.processing is False
    again = await processor.submit("KNIT-LOCK-001", ScanMode.AUTO_RUN, operator=operator)
    assert again.result == ScanResult.APPLIED
    assert len(registry.writes) == 2


async def test_submission_dropped_while_awaiting_confirmation(processor, registry, operator):
    await processor.submit("KNIT-LOCK-001", ScanMode.INTERACTIVE, operator=operator)
    dropped = await processor.submit("SEW-FLAT-002", ScanMode.AUTO_RUN, operator=operator)
    assert dropped.result == ScanResult.DROPPED
    assert processor.session.resolved_machine_id == "KNIT-LOCK-001"
    assert registry.writes == []


async def test_awaiting_confirmation_has_no_timeout_by_default(processor, clock, operator):
    await processor.submit("KNIT-LOCK-001", ScanMode.INTERACTIVE, operator=operator)
    clock.advance(3600)
    assert processor.state == SessionState.AWAITING_CONFIRMATION


# ---------- 4. Interactive ----------


async def test_interactive_confirm_activity(processor, registry, audit_repository, operator):
    opened = await processor.submit("juki", ScanMode.INTERACTIVE, operator=operator)
    assert opened.result == ScanResult.AWAITING_CONFIRMATION
    assert registry.writes == []

    # juki is BREAKDOWN: IDLE is fine
    outcome = await processor.confirm_activity("IDLE")
    assert outcome.result == ScanResult.APPLIED
    assert registry.writes == [("KNIT-LOCK-002", MachineField.STATUS, ActivityStatus.IDLE)]
    assert len(audit_repository.records) == 1
    assert processor.state == SessionState.COOLDOWN


async def test_confirm_running_on_blocked_machine_keeps_session_open(processor, registry, operator):
    await processor.submit("KNIT-LOCK-002", ScanMode.INTERACTIVE, operator=operator)

    with pytest.raises(HealthBlockedError):
        await processor.confirm_activity(ActivityStatus.RUNNING)

    assert registry.writes == []
    assert processor.state == SessionState.AWAITING_CONFIRMATION
    assert "BREAKDOWN" in processor.last_error


async def test_health_fix_then_running_after_diversion(processor, registry, audit_repository, clock, operator):
    await processor.submit("KNIT-LOCK-002", ScanMode.AUTO_RUN, operator=operator)
    health = await processor.confirm_health(HealthStatus.WORKING)
    assert health.result == ScanResult.APPLIED
    assert health.field == MachineField.OPERATIONAL_STATUS
    assert health.slot is None
    assert audit_repository.records[0].action == "Health set to WORKING"

    machine = await registry.get("KNIT-LOCK-002")
    assert machine.operational_status == HealthStatus.WORKING
    assert machine.scans.scan1 is None  # health writes do not consume scan slots

    clock.advance(5)
    outcome = await processor.submit("KNIT-LOCK-002", ScanMode.AUTO_RUN, operator=operator)
    assert outcome.result == ScanResult.APPLIED
    assert registry.writes[-1] == ("KNIT-LOCK-002", MachineField.STATUS, ActivityStatus.RUNNING)


async def test_confirm_rejects_not_working_choice(processor, operator):
    await processor.submit("KNIT-LOCK-001", ScanMode.INTERACTIVE, operator=operator)
    with pytest.raises(DomainValidationError):
        await processor.confirm_activity("NOT_WORKING")
    assert processor.state == SessionState.AWAITING_CONFIRMATION


async def test_ignore_writes_nothing_and_releases(processor, registry, audit_repository, operator):
    await processor.submit("KNIT-LOCK-001", ScanMode.INTERACTIVE, operator=operator)

    outcome = processor.ignore()

    assert outcome.result == ScanResult.IGNORED
    assert registry.writes == []
    assert audit_repository.records == []
    assert processor.processing is False
    assert processor.session is None


async def test_confirm_without_session_raises(processor):
    with pytest.raises(NoActiveSessionError):
        await processor.confirm_health("WORKING")
    with pytest.raises(NoActiveSessionError):
        processor.ignore()


async def test_four_activity_scans_fill_slots(processor, registry, clock, operator):
    for _ in range(4):
        await processor.submit("KNIT-LOCK-001", ScanMode.AUTO_RUN, operator=operator)
        clock.advance(2.0)
    machine = await registry.get("KNIT-LOCK-001")
    assert machine.scans.scan1.time < machine.scans.scan2.time < machine.scans.scan3.time
    assert len(registry.writes) == 4


# ---------- 5. Failures ----------


async def test_store_failure_surfaces_and_returns_to_idle(processor, registry, audit_repository, operator):
    registry.fail_writes = True

    with pytest.raises(StoreWriteFailedError):
        await processor.submit("KNIT-LOCK-001", ScanMode.AUTO_RUN, operator=operator)

    assert audit_repository.records == []
    assert processor.state == SessionState.IDLE_LISTENING
    assert "KNIT-LOCK-001" in processor.last_error
    machine = await registry.get("KNIT-LOCK-001")
    assert machine.status == ActivityStatus.IDLE


async def test_audit_failure_is_warning_and_write_stands(processor, registry, audit_repository, metrics, operator):
    audit_repository.fail = True

    outcome = await processor.submit("KNIT-LOCK-001", ScanMode.AUTO_RUN, operator=operator)

    assert outcome.result == ScanResult.APPLIED
    assert outcome.warning and "audit" in outcome.warning
    assert (await registry.get("KNIT-LOCK-001")).status == ActivityStatus.RUNNING
    assert metrics.get_counter("audit_failures") == 1


async def test_snapshot_reports_session(processor, operator):
    await processor.submit("KNIT-LOCK-001", ScanMode.INTERACTIVE, operator=operator)
    snap = processor.snapshot()
    assert snap["state"] == "AWAITING_CONFIRMATION"
    assert snap["processing"] is True
    assert snap["session"]["machine_id"] == "KNIT-LOCK-001"
    assert snap["session"]["mode"] == "INTERACTIVE"


# ---------- Cancellation ----------


async def test_cancelled_submit_releases_the_lock(processor, registry, operator, monkeypatch):
    entered = asyncio.Event()
    never = asyncio.Event()

    async def stalled_list_machines():
        entered.set()
        await never.wait()

    monkeypatch.setattr(registry, "list_machines", stalled_list_machines)
    task = asyncio.create_task(processor.submit("aurora", ScanMode.AUTO_RUN, operator=operator))
    await entered.wait()
    assert processor.state == SessionState.RESOLVING

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert processor.state == SessionState.IDLE_LISTENING
    monkeypatch.undo()
    outcome = await processor.submit("aurora", ScanMode.AUTO_RUN, operator=operator)
    assert outcome.result == ScanResult.APPLIED


async def test_cancelled_confirmation_releases_the_lock(processor, registry, operator, monkeypatch):
    await processor.submit("KNIT-LOCK-001", ScanMode.INTERACTIVE, operator=operator)
    entered = asyncio.Event()
    never = asyncio.Event()

    async def stalled_get(machine_id):
        entered.set()
        await never.wait()

    monkeypatch.setattr(registry, "get", stalled_get)
    task = asyncio.create_task(processor.confirm_activity(ActivityStatus.RUNNING))
    await entered.wait()
    assert processor.state == SessionState.APPLYING

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert processor.state == SessionState.IDLE_LISTENING
    assert registry.writes == []


# ---------- Metrics labels ----------


async def test_applied_mutation_is_labelled_by_field_and_mode(processor, metrics, operator):
    await processor.submit("aurora", ScanMode.AUTO_RUN, operator=operator)

    labels = metrics.export_metrics()["counters_by_labels"]["mutations_applied"]
    assert labels == {"mutations_applied:field=status,mode=AUTO_RUN": 1}
