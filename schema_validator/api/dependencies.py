"""FastAPI dependencies that validate request bodies against a schema."""

from __future__ import annotations

from collections.abc import Awaitable
from collections.abc import Callable
import logging
from typing import TypeVar

from fastapi import Request
from fastapi import status
from pydantic import BaseModel

from schema_validator.core.errors import APIError
from schema_validator.core.errors import SchemaValidationError
from schema_validator.schemas.error import ErrorDetail
from schema_validator.validation.engine import strip_unexpected_fields
from schema_validator.validation.mapper import ObjectMappingError
from schema_validator.validation.mapper import map_to_schema
from schema_validator.validation.validator import validate_against_schema

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def _raise_body_error(message: str) -> None:
    raise APIError(
        status_code=status.HTTP_400_BAD_REQUEST,
        code="validation_error",
        message=message,
        details=[ErrorDetail(field="body", issue=message)],
    )


def validated_body(
    schema_type: type[SchemaT],
    *,
    forbid_unexpected_fields: bool | None = None,
) -> Callable[[Request], Awaitable[SchemaT]]:
    """Build a dependency returning the request body as a validated ``schema_type``.

    Rejected bodies raise :class:`SchemaValidationError`; bodies that are not
    JSON objects raise :class:`APIError`.
    """

    async def dependency(request: Request) -> SchemaT:
        try:
            body = await request.json()
        except ValueError:
            _raise_body_error("Request body must be valid JSON")

        try:
            result = await validate_against_schema(schema_type, body, forbid_unexpected_fields)
        except ObjectMappingError as exc:
            _raise_body_error(str(exc))

        if not result.is_valid:
            logger.info(
                "Rejected %s body for %s: whitelisted=%d non_whitelisted=%d",
                request.url.path,
                schema_type.__name__,
                len(result.whitelisted),
                len(result.non_whitelisted),
            )
            raise SchemaValidationError(result)

        clean, _ = strip_unexpected_fields(schema_type, map_to_schema(schema_type, body))
        return schema_type.model_validate(clean)

    return dependency
