"""Validate raw input against a schema and split the failures by cause."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel

from schema_validator.core.config import get_validator_settings
from schema_validator.schemas.validation import ValidationResult
from schema_validator.validation.classifier import classify_errors
from schema_validator.validation.engine import ValidationOptions
from schema_validator.validation.engine import validate
from schema_validator.validation.mapper import map_to_schema

logger = logging.getLogger(__name__)


async def validate_against_schema(
    schema_type: type[BaseModel],
    raw_input: Any,
    forbid_unexpected_fields: bool | None = None,
) -> ValidationResult:
    """Validate ``raw_input`` against ``schema_type``.

    Failures caused by fields the schema does not declare are returned under
    ``non_whitelisted``; every other failure under ``whitelisted``. When
    ``forbid_unexpected_fields`` is false, undeclared fields are stripped
    silently and ``non_whitelisted`` is always empty. ``None`` uses the
    configured default.

    Mapping and engine errors propagate unchanged.
    """
    settings = get_validator_settings()
    if forbid_unexpected_fields is None:
        forbid_unexpected_fields = settings.forbid_unexpected_fields

    payload = map_to_schema(schema_type, raw_input)
    logger.debug(
        "Validating payload against %s with forbid_unexpected_fields=%s settings=%s",
        schema_type.__name__,
        forbid_unexpected_fields,
        settings.safe_for_logging(),
    )

    errors = await validate(
        schema_type,
        payload,
        ValidationOptions(
            whitelist=True,
            forbid_non_whitelisted=forbid_unexpected_fields,
            error_includes_target=settings.error_includes_target,
            error_includes_value=settings.error_includes_value,
        ),
    )

    whitelisted, non_whitelisted = classify_errors(errors)
    logger.debug(
        "Validated payload against %s: whitelisted=%d non_whitelisted=%d",
        schema_type.__name__,
        len(whitelisted),
        len(non_whitelisted),
    )
    return ValidationResult(whitelisted=whitelisted, non_whitelisted=non_whitelisted)
