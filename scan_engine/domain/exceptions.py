"""Domain-specific exceptions. Pure domain layer, no infrastructure."""


class DomainError(Exception):
    """Base for all domain-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class DomainValidationError(DomainError):
    """Raised when domain validation rules are violated."""


class EmptyIdentifierError(DomainValidationError):
    """Raised when a scanned or typed identifier is empty or whitespace only."""


class MachineNotFoundError(DomainError):
    """Raised when an identifier matches no machine in the registry snapshot."""

    def __init__(self, raw: str) -> None:
        self.raw = raw
        super().__init__(f'No machine found matching "{raw}"')


class HealthBlockedError(DomainError):
    """Raised when RUNNING is requested while the machine is unserviceable."""

    def __init__(self, machine_id: str, health: str, reason: str) -> None:
        self.machine_id = machine_id
        self.health = health
        self.reason = reason
        super().__init__(f"Machine {machine_id} is in {health} state: {reason}")
