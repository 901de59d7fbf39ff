# barbershop/errors.py
"""
Failure kinds raised by the scheduling core.

Each kind carries a stable code, a human message and optional details so the
client can render an actionable message. The HTTP layer maps them to status
codes in one place (see barbershop.main); nothing below the routers builds
HTTP responses.
"""

from typing import Any, Optional


class SchedulingError(Exception):
    code = "SCHEDULING_ERROR"
    status_code = 400

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        error = {"code": self.code, "message": self.message}
        if self.details:
            error["details"] = self.details
        return {"error": error, "status": "error"}


class ValidationError(SchedulingError):
    """Malformed request: bad date, unknown barber, off-grid slot..."""
    code = "VALIDATION_ERROR"
    status_code = 400


class NotFoundError(SchedulingError):
    code = "NOT_FOUND"
    status_code = 404


class SlotUnavailableError(SchedulingError):
    """Slot is taken, hidden, outside the roster or the roster expired."""
    code = "SLOT_UNAVAILABLE"
    status_code = 409


class ConflictError(SchedulingError):
    """A concurrent writer won the race for the same slot."""
    code = "SLOT_CONFLICT"
    status_code = 409


class InsufficientPointsError(SchedulingError):
    code = "INSUFFICIENT_POINTS"
    status_code = 402

    def __init__(self, required: int, available: int):
        self.required = required
        self.available = available
        self.shortfall = required - available
        super().__init__(
            f"Not enough points: {required} required, {available} available",
            {"required": required, "available": available, "shortfall": self.shortfall},
        )


class InvalidTransitionError(SchedulingError):
    code = "INVALID_TRANSITION"
    status_code = 409


class AuthorizationError(SchedulingError):
    code = "FORBIDDEN"
    status_code = 403
