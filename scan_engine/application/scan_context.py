"""Owned session state for the scan processor. Replaces an ambient 'processing' flag."""

import time
from typing import Callable, Optional

from scan_engine.domain.models.session import ScanSession, SessionState

# Transient states owned by a running handler; nothing else may leave the context in one
IN_FLIGHT = frozenset(
    {SessionState.RESOLVING, SessionState.AUTO_APPLYING, SessionState.APPLYING}
)


class ScanContext:
    """
    Holds the single in-flight scan session for the whole process.
    Any state other than IDLE_LISTENING means the lock is held.
    COOLDOWN and (optionally) AWAITING_CONFIRMATION expire lazily against the clock.
    """

    def __init__(
        self,
        *,
        cooldown_seconds: float = 2.0,
        confirmation_timeout_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._cooldown_seconds = cooldown_seconds
        self._confirmation_timeout = confirmation_timeout_seconds
        self._clock = clock
        self._state = SessionState.IDLE_LISTENING
        self._session: Optional[ScanSession] = None
        self._cooldown_until: Optional[float] = None
        self.last_error: Optional[str] = None
        self.last_warning: Optional[str] = None

    def now(self) -> float:
        return self._clock()

    @property
    def state(self) -> SessionState:
        self._expire()
        return self._state

    @property
    def session(self) -> Optional[ScanSession]:
        self._expire()
        return self._session

    @property
    def processing(self) -> bool:
        return self.state != SessionState.IDLE_LISTENING

    def _expire(self) -> None:
        now = self._clock()
        if self._state == SessionState.COOLDOWN:
            if self._cooldown_until is None or now >= self._cooldown_until:
                self.release()
        elif (
            self._state == SessionState.AWAITING_CONFIRMATION
            and self._confirmation_timeout is not None
            and self._session is not None
            and now - self._session.opened_at >= self._confirmation_timeout
        ):
            self.release()

    def try_claim(self) -> bool:
        """Take the lock for a new submission. False if anything is in flight."""
        if self.state != SessionState.IDLE_LISTENING:
            return False
        self._state = SessionState.RESOLVING
        self.last_error = None
        self.last_warning = None
        return True

    def enter(self, state: SessionState) -> None:
        self._state = state

    def open_session(self, session: ScanSession) -> None:
        self._session = session
        self._state = SessionState.AWAITING_CONFIRMATION

    def start_cooldown(self) -> None:
        """Keep the lock for the cool-down interval after an applied mutation."""
        self._session = None
        if self._cooldown_seconds <= 0:
            self.release()
            return
        self._cooldown_until = self._clock() + self._cooldown_seconds
        self._state = SessionState.COOLDOWN

    def release_if_in_flight(self) -> bool:
        """Release a claim whose handler exited (e.g. cancelled) without settling on a state."""
        if self._state in IN_FLIGHT:
            self.release()
            return True
        return False

    def release(self) -> None:
        self._state = SessionState.IDLE_LISTENING
        self._session = None
        self._cooldown_until = None
