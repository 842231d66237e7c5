"""Governance-layer exceptions. Typed, no HTTP."""


class GovernanceError(Exception):
    """Base for all governance-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class AuditWriteFailedError(GovernanceError):
    """Raised when the audit sink rejects a record. The audited change is not rolled back."""
