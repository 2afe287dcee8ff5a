"""Error envelope returned when a validated payload is rejected."""

from __future__ import annotations

from pydantic import BaseModel


class ErrorDetail(BaseModel):
    """One rejected field, addressed by its dotted path."""

    field: str
    issue: str


class ErrorObject(BaseModel):
    """Canonical error payload object."""

    code: str
    message: str
    details: list[ErrorDetail] | None = None


class ErrorResponse(BaseModel):
    """Top-level error response envelope."""

    error: ErrorObject
