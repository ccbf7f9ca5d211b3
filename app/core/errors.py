"""
Domain error taxonomy for the ranking and nickname core.

Every error carries the HTTP status the API layer should answer with,
so route handlers never translate them one by one.  See
``app.main`` for the exception handler.
"""


class DomainError(Exception):
    """Base class for errors surfaced to the immediate caller."""

    status_code: int = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(DomainError):
    """Malformed preference submission or precondition not met.

    Raised before anything is persisted.
    """

    status_code = 422


class NotFoundError(DomainError):
    """Referenced application or event record does not exist."""

    status_code = 404


class PoolExhaustedError(DomainError):
    """Every nickname of the category pool is taken for the event."""

    status_code = 409


class TransientAllocationError(DomainError):
    """Nickname commit kept conflicting; the caller may retry later."""

    status_code = 503
