"""
Domain exceptions shared by the service layer.

Caller-correctable errors subclass ValueError; route handlers map each
class to an HTTP status.
"""


class InvalidInputError(ValueError):
    """Raised when required fields are missing or malformed."""


class NotFoundError(ValueError):
    """Raised when a referenced record does not exist."""


class PermissionDeniedError(ValueError):
    """Raised when the acting user may not perform a transition."""


class ConflictError(ValueError):
    """Raised on a uniqueness or state-transition violation."""


class CapacityError(ConflictError):
    """Raised when a tee time has no available spots."""


class StorageFailureError(RuntimeError):
    """Raised when the record store fails mid-operation."""


class DependencyFailureError(RuntimeError):
    """Raised by best-effort dependencies (notifications, achievements)."""
