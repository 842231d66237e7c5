"""Application-layer exceptions. Do not reuse domain exceptions."""


class ApplicationError(Exception):
    """Base for all application-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class StoreWriteFailedError(ApplicationError):
    """Raised when the machine store rejects an update. Machine state is unchanged; retry is manual."""


class NoActiveSessionError(ApplicationError):
    """Raised when a confirmation arrives while no scan is awaiting one."""
