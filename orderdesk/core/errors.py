# orderdesk/core/errors.py
"""
Domain error taxonomy.

Every error is an HTTPException so FastAPI renders it without a custom
handler. The response body is:

    {"detail": {"kind": "<kind>", "message": "<text>", ...extra}}

`kind` is stable and meant for client-side localization.

A duplicate conflict is NOT an error: see `DuplicateConflict` in
`orderdesk.schemas.order`.
"""
from typing import Any

from fastapi import HTTPException, status


class OrderDeskError(HTTPException):
    kind: str = "error"
    http_status: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, **extra: Any):
        self.message = message
        super().__init__(
            status_code=self.http_status,
            detail={"kind": self.kind, "message": message, **extra},
        )


class ValidationError(OrderDeskError):
    """Malformed input detected by business rules (after schema validation)."""

    kind = "validation_error"
    http_status = status.HTTP_400_BAD_REQUEST


class NotFound(OrderDeskError):
    kind = "not_found"
    http_status = status.HTTP_404_NOT_FOUND


class Forbidden(OrderDeskError):
    kind = "forbidden"
    http_status = status.HTTP_403_FORBIDDEN


class InvalidTransition(OrderDeskError):
    """Order status machine rule violated."""

    kind = "invalid_transition"
    http_status = status.HTTP_409_CONFLICT


class TooEarly(OrderDeskError):
    """Nullification attempted before the cooldown elapsed."""

    kind = "too_early"
    http_status = status.HTTP_409_CONFLICT


class TransientError(OrderDeskError):
    """Storage or lookup failure. Safe to retry."""

    kind = "transient_error"
    http_status = status.HTTP_503_SERVICE_UNAVAILABLE
