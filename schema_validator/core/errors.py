"""Error envelope for rejected payloads and FastAPI exception handler registration."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from fastapi import FastAPI
from fastapi import Request
from fastapi import status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from schema_validator.schemas.error import ErrorDetail
from schema_validator.schemas.error import ErrorObject
from schema_validator.schemas.error import ErrorResponse
from schema_validator.schemas.validation import ErrorNode
from schema_validator.schemas.validation import ValidationResult
from schema_validator.validation.classifier import flatten_error_tree


class APIError(Exception):
    """Base application exception for explicit API error responses."""

    def __init__(
        self,
        *,
        status_code: int,
        code: str,
        message: str,
        details: Sequence[ErrorDetail] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = list(details) if details else None


class SchemaValidationError(APIError):
    """Raised when a payload fails schema validation.

    Unexpected-field failures are listed first and decide the error code.
    """

    def __init__(self, result: ValidationResult) -> None:
        if result.has_unexpected_fields:
            code = "unexpected_fields"
            message = "Request contains fields the schema does not declare"
        else:
            code = "validation_error"
            message = "Request validation failed"

        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            code=code,
            message=message,
            details=error_tree_details(result.non_whitelisted) + error_tree_details(result.whitelisted),
        )
        self.result = result


def error_tree_details(errors: Sequence[ErrorNode]) -> list[ErrorDetail]:
    """Flatten an error tree into one detail per failed constraint."""
    details: list[ErrorDetail] = []
    for path, node in flatten_error_tree(errors):
        if not node.constraints:
            details.append(ErrorDetail(field=path, issue="Invalid value"))
            continue
        details.extend(ErrorDetail(field=path, issue=message) for message in node.constraints.values())
    return details


def _build_error_response(
    *,
    status_code: int,
    code: str,
    message: str,
    details: Sequence[ErrorDetail] | None = None,
) -> JSONResponse:
    payload = ErrorResponse(error=ErrorObject(code=code, message=message, details=list(details) if details else None))
    return JSONResponse(status_code=status_code, content=payload.model_dump(exclude_none=True))


def _http_error_code(status_code: int) -> str:
    if status_code == status.HTTP_404_NOT_FOUND:
        return "not_found"
    if status_code == status.HTTP_400_BAD_REQUEST:
        return "validation_error"
    if status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        return "method_not_allowed"
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        return "internal_error"
    return "bad_request"


def _format_location(location: tuple[Any, ...] | list[Any] | Any) -> str:
    if not isinstance(location, (tuple, list)):
        return str(location)

    prefixes = {"body", "query", "path", "header", "cookie"}
    filtered = [str(part) for part in location if part not in prefixes]
    if filtered:
        return ".".join(filtered)

    if not location:
        return "request"

    return str(location[0])


async def request_validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    """Normalize FastAPI's own request validation errors to the shared envelope."""

    details = [
        ErrorDetail(field=_format_location(issue.get("loc", ())), issue=str(issue.get("msg", "Invalid value")))
        for issue in exc.errors()
    ]
    return _build_error_response(
        status_code=status.HTTP_400_BAD_REQUEST,
        code="validation_error",
        message="Request validation failed",
        details=details,
    )


async def http_exception_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Normalize HTTP exceptions to the shared envelope."""

    message = str(exc.detail) if isinstance(exc.detail, str) and exc.detail else "Request failed"
    return _build_error_response(
        status_code=exc.status_code,
        code=_http_error_code(exc.status_code),
        message=message,
    )


async def api_error_handler(_: Request, exc: APIError) -> JSONResponse:
    """Return explicit application errors, schema rejections included, in the shared envelope."""

    return _build_error_response(
        status_code=exc.status_code,
        code=exc.code,
        message=exc.message,
        details=exc.details,
    )


async def unhandled_exception_handler(_: Request, __: Exception) -> JSONResponse:
    """Avoid leaking internal exceptions while keeping response shape stable."""

    return _build_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code="internal_error",
        message="Internal server error",
    )


def register_error_handlers(app: FastAPI) -> None:
    """Attach the shared error handlers to a FastAPI app instance."""

    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
