"""Scan event processor: resolves a raw identifier, gates it on health, applies one field write, audits."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Optional, Union

from scan_engine.application.exceptions import NoActiveSessionError, StoreWriteFailedError
from scan_engine.application.machine_registry import MachineRegistry
from scan_engine.application.scan_context import ScanContext
from scan_engine.application.terminal_settings import TerminalSettingsStore
from scan_engine.domain.exceptions import (
    DomainError,
    DomainValidationError,
    MachineNotFoundError,
)
from scan_engine.domain.health_gate import can_transition, check_transition, coerce_value
from scan_engine.domain.models.machine import (
    ActivityStatus,
    HealthStatus,
    Machine,
    MachineField,
)
from scan_engine.domain.models.session import Operator, ScanMode, ScanSession, SessionState
from scan_engine.domain.resolver import resolve
from scan_engine.domain.scan_slots import record_activity
from scan_engine.governance.audit_logger import AuditLogger
from scan_engine.governance.exceptions import AuditWriteFailedError
from scan_engine.observability import metrics as m
from scan_engine.observability.metrics import MetricsCollector

# Values an operator may pick for activity from the confirmation step
CONFIRMABLE_ACTIVITY = frozenset({ActivityStatus.RUNNING, ActivityStatus.IDLE})


class ScanResult(str, Enum):
    APPLIED = "APPLIED"
    AWAITING_CONFIRMATION = "AWAITING_CONFIRMATION"
    DIVERTED = "DIVERTED"
    DROPPED = "DROPPED"
    NOT_FOUND = "NOT_FOUND"
    IGNORED = "IGNORED"


@dataclass(frozen=True)
class ScanOutcome:
    """What happened to one submission or confirmation."""

    result: ScanResult
    raw_input: Optional[str] = None
    machine_id: Optional[str] = None
    machine_name: Optional[str] = None
    field: Optional[MachineField] = None
    value: Optional[str] = None
    slot: Optional[str] = None
    warning: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "result": self.result.value,
            "raw_input": self.raw_input,
            "machine_id": self.machine_id,
            "machine_name": self.machine_name,
            "field": self.field.value if self.field else None,
            "value": self.value,
            "slot": self.slot,
            "warning": self.warning,
            "error": self.error,
        }


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ScanEventProcessor:
    """
    One scan in flight for the whole process. States:
    IDLE_LISTENING -> RESOLVING -> (AUTO_APPLYING | AWAITING_CONFIRMATION) -> COOLDOWN -> IDLE_LISTENING.
    Submissions arriving while the lock is held are dropped, never queued.
    Machine write and audit append are two calls; an audit failure does not undo the write.
    """

    def __init__(
        self,
        registry: MachineRegistry,
        audit_logger: AuditLogger,
        settings_store: TerminalSettingsStore,
        logger: logging.Logger,
        *,
        context: Optional[ScanContext] = None,
        metrics: Optional[MetricsCollector] = None,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._registry = registry
        self._audit = audit_logger
        self._settings = settings_store
        self._logger = logger
        self._context = context or ScanContext()
        self._metrics = metrics or MetricsCollector()
        self._now = now

    # ------------------------------------------------------------------
    # Observables
    # ------------------------------------------------------------------

    @property
    def context(self) -> ScanContext:
        return self._context

    @property
    def state(self) -> SessionState:
        return self._context.state

    @property
    def processing(self) -> bool:
        return self._context.processing

    @property
    def last_error(self) -> Optional[str]:
        return self._context.last_error

    @property
    def session(self) -> Optional[ScanSession]:
        return self._context.session

    def snapshot(self) -> Dict[str, Any]:
        session = self._context.session
        return {
            "state": self._context.state.value,
            "processing": self._context.processing,
            "last_error": self._context.last_error,
            "last_warning": self._context.last_warning,
            "session": None
            if session is None
            else {
                "raw_input": session.raw_input,
                "machine_id": session.resolved_machine_id,
                "mode": session.mode.value,
                "operator_id": session.operator.id,
            },
        }

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def submit(
        self,
        raw: str,
        mode: Optional[ScanMode] = None,
        *,
        operator: Operator,
        correlation_id: Optional[str] = None,
    ) -> ScanOutcome:
        """Resolve and handle one raw identifier. Returns DROPPED if another scan holds the lock."""
        self._metrics.increment(m.SCANS_SUBMITTED)
        # Claimed before the first await so concurrent submissions cannot interleave.
        if not self._context.try_claim():
            self._metrics.increment(m.SCANS_DROPPED)
            self._logger.info(
                "scan_dropped",
                extra={"raw_input": raw, "state": self._context.state.value},
            )
            return ScanOutcome(result=ScanResult.DROPPED, raw_input=raw)

        started = self._context.now()
        try:
            return await self._handle_claimed(raw, mode, operator, correlation_id)
        except Exception as e:
            self._context.last_error = getattr(e, "message", None) or str(e)
            self._context.release()
            raise
        finally:
            # CancelledError bypasses the except clause above.
            if self._context.release_if_in_flight():
                self._logger.warning("scan_abandoned", extra={"raw_input": raw})
            self._metrics.observe_latency(
                m.SCAN_LATENCY, (self._context.now() - started) * 1000.0
            )

    async def _handle_claimed(
        self,
        raw: str,
        mode: Optional[ScanMode],
        operator: Operator,
        correlation_id: Optional[str],
    ) -> ScanOutcome:
        if mode is None:
            mode = ScanMode.AUTO_RUN if await self._settings.get_auto_run() else ScanMode.INTERACTIVE

        machines = await self._registry.list_machines()
        try:
            machine = resolve(raw, machines)
        except (MachineNotFoundError, DomainValidationError) as e:
            self._context.last_error = e.message
            self._context.release()
            self._metrics.increment(m.SCANS_NOT_FOUND)
            self._logger.warning(
                "scan_not_found",
                extra={"raw_input": raw, "correlation_id": correlation_id},
            )
            return ScanOutcome(result=ScanResult.NOT_FOUND, raw_input=raw, error=e.message)

        self._logger.info(
            "scan_resolved",
            extra={
                "raw_input": raw,
                "machine_id": machine.id,
                "mode": mode.value,
                "correlation_id": correlation_id,
            },
        )

        if mode == ScanMode.AUTO_RUN:
            decision = can_transition(
                machine.operational_status, MachineField.STATUS, ActivityStatus.RUNNING
            )
            if decision.allowed:
                self._context.enter(SessionState.AUTO_APPLYING)
                outcome = await self._apply(
                    machine,
                    MachineField.STATUS,
                    ActivityStatus.RUNNING,
                    operator,
                    correlation_id,
                    raw_input=raw,
                    mode=mode,
                )
                self._context.start_cooldown()
                return outcome

            warning = (
                f"Auto-Run bypassed: machine {machine.id} is in "
                f"{machine.operational_status.value} state"
            )
            self._context.last_warning = warning
            self._metrics.increment(m.SCANS_DIVERTED)
            self._logger.warning(
                "auto_run_blocked",
                extra={
                    "machine_id": machine.id,
                    "health": machine.operational_status.value,
                    "reason": decision.reason,
                },
            )
            self._open_session(raw, machine, mode, operator)
            return ScanOutcome(
                result=ScanResult.DIVERTED,
                raw_input=raw,
                machine_id=machine.id,
                machine_name=machine.name,
                warning=warning,
            )

        self._open_session(raw, machine, mode, operator)
        return ScanOutcome(
            result=ScanResult.AWAITING_CONFIRMATION,
            raw_input=raw,
            machine_id=machine.id,
            machine_name=machine.name,
        )

    def _open_session(self, raw: str, machine: Machine, mode: ScanMode, operator: Operator) -> None:
        self._context.open_session(
            ScanSession(
                raw_input=raw,
                resolved_machine_id=machine.id,
                mode=mode,
                operator=operator,
                opened_at=self._context.now(),
            )
        )

    # ------------------------------------------------------------------
    # Confirmation callbacks
    # ------------------------------------------------------------------

    async def confirm_activity(
        self,
        value: Union[str, ActivityStatus],
        *,
        correlation_id: Optional[str] = None,
    ) -> ScanOutcome:
        """Set RUNNING or IDLE on the machine awaiting confirmation."""
        status = coerce_value(MachineField.STATUS, value)
        if status not in CONFIRMABLE_ACTIVITY:
            raise DomainValidationError(f"Activity can only be confirmed as RUNNING or IDLE, got {status.value}")
        return await self._confirm(MachineField.STATUS, status, correlation_id)

    async def confirm_health(
        self,
        value: Union[str, HealthStatus],
        *,
        correlation_id: Optional[str] = None,
    ) -> ScanOutcome:
        """Set the health state of the machine awaiting confirmation. Always permitted."""
        health = coerce_value(MachineField.OPERATIONAL_STATUS, value)
        return await self._confirm(MachineField.OPERATIONAL_STATUS, health, correlation_id)

    def ignore(self) -> ScanOutcome:
        """Discard the open confirmation. No write, no audit record."""
        session = self._require_session()
        self._context.release()
        self._metrics.increment(m.SCANS_IGNORED)
        self._logger.info("scan_ignored", extra={"machine_id": session.resolved_machine_id})
        return ScanOutcome(
            result=ScanResult.IGNORED,
            raw_input=session.raw_input,
            machine_id=session.resolved_machine_id,
        )

    def _require_session(self) -> ScanSession:
        session = self._context.session
        if self._context.state != SessionState.AWAITING_CONFIRMATION or session is None:
            raise NoActiveSessionError("No scan is awaiting confirmation")
        return session

    async def _confirm(
        self,
        field: MachineField,
        value: Union[ActivityStatus, HealthStatus],
        correlation_id: Optional[str],
    ) -> ScanOutcome:
        session = self._require_session()
        self._context.enter(SessionState.APPLYING)
        try:
            return await self._confirm_claimed(session, field, value, correlation_id)
        finally:
            if self._context.release_if_in_flight():
                self._logger.warning(
                    "confirmation_abandoned",
                    extra={"machine_id": session.resolved_machine_id},
                )

    async def _confirm_claimed(
        self,
        session: ScanSession,
        field: MachineField,
        value: Union[ActivityStatus, HealthStatus],
        correlation_id: Optional[str],
    ) -> ScanOutcome:
        try:
            machine = await self._registry.get(session.resolved_machine_id)
            if machine is None:
                raise MachineNotFoundError(session.resolved_machine_id)
            check_transition(machine.id, machine.operational_status, field, value)
        except DomainError as e:
            self._context.last_error = e.message
            if isinstance(e, MachineNotFoundError):
                self._context.release()
            else:
                # Blocked choice: keep the confirmation open so health can be corrected first.
                self._context.open_session(session)
            raise
        except Exception as e:
            self._context.last_error = str(e)
            self._context.release()
            raise

        try:
            outcome = await self._apply(
                machine,
                field,
                value,
                session.operator,
                correlation_id,
                raw_input=session.raw_input,
                mode=session.mode,
            )
        except Exception as e:
            self._context.last_error = getattr(e, "message", None) or str(e)
            self._context.release()
            raise
        self._context.start_cooldown()
        return outcome

    # ------------------------------------------------------------------
    # Write + audit
    # ------------------------------------------------------------------

    async def _apply(
        self,
        machine: Machine,
        field: MachineField,
        value: Union[ActivityStatus, HealthStatus],
        operator: Operator,
        correlation_id: Optional[str],
        *,
        raw_input: Optional[str] = None,
        mode: Optional[ScanMode] = None,
    ) -> ScanOutcome:
        now = self._now()
        slot = None
        scans = None
        if field == MachineField.STATUS:
            scans, slot = record_activity(machine.scans, value, operator.id, now)
            action = f"Scanned slot {slot}"
        else:
            action = f"Health set to {value.value}"

        try:
            await self._registry.update_field(
                machine.id, field, value, updated_at=now, scans=scans
            )
        except Exception as e:
            self._metrics.increment(m.STORE_FAILURES)
            self._logger.error(
                "store_write_failed",
                extra={
                    "machine_id": machine.id,
                    "field": field.value,
                    "value": value.value,
                    "error": str(e),
                    "correlation_id": correlation_id,
                },
            )
            raise StoreWriteFailedError(
                f"Could not update {machine.id}: {e}"
            ) from e

        self._metrics.increment(
            m.MUTATIONS_APPLIED,
            field=field.value,
            mode=mode.value if mode else None,
        )
        self._logger.info(
            "scan_applied",
            extra={
                "machine_id": machine.id,
                "field": field.value,
                "value": value.value,
                "slot": slot,
                "correlation_id": correlation_id,
            },
        )

        warning = None
        try:
            await self._audit.log_change(
                machine_id=machine.id,
                operator_id=operator.id,
                operator_name=operator.display_name,
                action=action,
                field=field.value,
                new_value=value.value,
                correlation_id=correlation_id,
                timestamp=now,
            )
        except AuditWriteFailedError as e:
            # Machine write stands; report the gap instead of hiding it.
            warning = f"State updated but audit record failed: {e.message}"
            self._context.last_warning = warning
            self._metrics.increment(m.AUDIT_FAILURES)

        return ScanOutcome(
            result=ScanResult.APPLIED,
            raw_input=raw_input,
            machine_id=machine.id,
            machine_name=machine.name,
            field=field,
            value=value.value,
            slot=slot,
            warning=warning,
        )
