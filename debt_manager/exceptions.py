"""Exception hierarchy for debt-manager."""


class DebtManagerError(Exception):
    """Base exception for all debt-manager errors."""


class ValidationError(DebtManagerError):
    """Raised when a required field is missing or a value is rejected."""


class ConflictError(DebtManagerError):
    """Raised when a customer id is already taken."""


class NotFoundError(DebtManagerError):
    """Raised when an update targets a customer that does not exist."""


class TransportError(DebtManagerError):
    """Raised by the API client on connectivity failures or non-2xx responses."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class UpstreamUnavailable(DebtManagerError):
    """Raised inside the advisory adapter when the text service fails."""
