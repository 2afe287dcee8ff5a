"""Validate input against pydantic schemas and split failures by cause."""

from schema_validator.schemas.validation import UNEXPECTED_FIELD_KIND
from schema_validator.schemas.validation import ErrorNode
from schema_validator.schemas.validation import ValidationResult
from schema_validator.validation.classifier import Classification
from schema_validator.validation.classifier import classify_errors
from schema_validator.validation.validator import validate_against_schema

__all__ = [
    "Classification",
    "ErrorNode",
    "UNEXPECTED_FIELD_KIND",
    "ValidationResult",
    "classify_errors",
    "validate_against_schema",
]
