"""
Application error taxonomy.

Every error raised on purpose by the service derives from AppError and
carries the HTTP status and machine-readable code used to render the
failure envelope.

    ValidationError   bad or missing input                  400
    NotFoundError     referenced entity does not exist      404
    StoreError        catalog / blob store failure          mapped from the store code
    RateOrQuotaError  reserved for quota enforcement        429
"""

from typing import Any, Dict, Optional


# PostgREST / Postgres error codes -> HTTP status
STORE_STATUS_CODES: Dict[str, int] = {
    "PGRST116": 404,  # no rows for .single()
    "PGRST204": 204,
    "23505": 400,     # unique violation
    "23503": 400,     # foreign key violation
    "23514": 400,     # check violation
    "42501": 403,     # insufficient privilege
    "PGRST301": 400,
    "PGRST304": 400,
    # Storage API (StorageApiError.code)
    "Duplicate": 409,
    "409": 409,
}


def map_store_status(code: Optional[str]) -> int:
    """Map a store error code to an HTTP status (500 when unknown)."""
    if not code:
        return 500
    return STORE_STATUS_CODES.get(str(code), 500)


class AppError(Exception):
    """Base class for errors rendered as a failure envelope."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Any = None,
    ):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.details = details


class ValidationError(AppError):
    status_code = 400
    code = "VALIDATION_ERROR"


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"


class StoreError(AppError):
    """
    A catalog or blob store call failed.

    ``store_code`` keeps the raw PostgREST/Postgres code; the HTTP status is
    derived from it through STORE_STATUS_CODES.
    """

    code = "STORE_ERROR"

    def __init__(
        self,
        message: str,
        *,
        store_code: Optional[str] = None,
        details: Any = None,
        hint: Optional[str] = None,
    ):
        super().__init__(
            message,
            code=store_code or self.code,
            status_code=map_store_status(store_code),
            details=details,
        )
        self.store_code = store_code
        self.hint = hint


class RateOrQuotaError(AppError):
    status_code = 429
    code = "RATE_LIMITED"
