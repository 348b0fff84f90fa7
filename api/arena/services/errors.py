"""Reservation service exceptions.

Services raise these; the API layer renders them with a single exception
handler (see arena.main). Nothing here is retried automatically.
"""

from typing import Any


class ReservationError(Exception):
    """Base exception for reservation errors."""

    status_code = 400
    code = "reservation_error"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {"error": self.code, "message": self.message, "details": self.details}


class InvalidInput(ReservationError):
    code = "invalid_input"


class NotFound(ReservationError):
    status_code = 404
    code = "not_found"


class Forbidden(ReservationError):
    status_code = 403
    code = "forbidden"


class ResourceConflict(ReservationError):
    """Raised when the availability check fails at booking time."""

    status_code = 409
    code = "resource_conflict"

    def __init__(self, conflicts: list[dict[str, Any]], message: str = "Resources not available"):
        self.conflicts = conflicts
        super().__init__(message, {"conflicts": conflicts})


class AlreadyCancelled(ReservationError):
    code = "already_cancelled"


class AlreadyWaiting(ReservationError):
    code = "already_waiting"
