from __future__ import annotations


class ProvisionerException(Exception):
    def __init__(self, message: str, *, details: str | None = None) -> None:
        super().__init__(message)
        self.details = details


class UnauthenticatedException(ProvisionerException):
    pass


class NotFoundException(ProvisionerException):
    pass


class ConflictException(ProvisionerException):
    pass


class IntegrityException(ProvisionerException):
    pass


class PersistenceException(ProvisionerException):
    pass


class UpstreamException(ProvisionerException):
    """A control-panel failure surfaced with the upstream's own status code."""

    def __init__(self, message: str, *, status_code: int, details: str | None = None) -> None:
        super().__init__(message, details=details)
        self.status_code = status_code
