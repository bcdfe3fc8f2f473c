"""Domain errors raised by the service layer.

Learn: Services never build HTTP responses. They raise one of these, and
the handlers registered in main.py turn them into JSON with the matching
status code. Each class carries a detail that is safe to show a client —
the internal reason, if any, goes to the log instead.
"""

from typing import Any, Optional


class DomainError(Exception):
    """Base class. Subclasses set the status code and a default detail."""

    status_code: int = 500
    default_detail: str = "Internal server error"

    def __init__(self, detail: Optional[Any] = None):
        self.detail = detail if detail is not None else self.default_detail
        super().__init__(str(self.detail))


class ValidationError(DomainError):
    """Malformed input that passed schema parsing (e.g. bad day tokens)."""

    status_code = 422
    default_detail = "Validation error"


class InvalidRequest(DomainError):
    status_code = 400
    default_detail = "Invalid request"


class Conflict(DomainError):
    """A uniqueness rule would be broken — username, email, friendship."""

    status_code = 409
    default_detail = "Already exists"


class Unauthenticated(DomainError):
    """Missing/invalid/expired token, or a failed login.

    The detail never says which of those it was.
    """

    status_code = 401
    default_detail = "Unauthorized"


class NotFound(DomainError):
    status_code = 404
    default_detail = "Not found"


class InternalError(DomainError):
    status_code = 500
    default_detail = "Internal server error"
