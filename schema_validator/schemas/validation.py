"""Pydantic schemas for schema-validation error trees and their partitions."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

UNEXPECTED_FIELD_KIND = "extra_forbidden"


class ErrorNode(BaseModel):
    """A failed field, either a leaf carrying constraints or a branch of nested failures."""

    model_config = ConfigDict(frozen=True)

    field: str
    constraints: dict[str, str] | None = None
    children: list[ErrorNode] = Field(default_factory=list)
    value: Any = None
    target: dict[str, Any] | None = None

    @property
    def is_branch(self) -> bool:
        return len(self.children) > 0

    @property
    def constraint_kind(self) -> str | None:
        """Governing constraint-kind of a leaf, or None when it carries none."""
        if not self.constraints:
            return None
        return next(iter(self.constraints))


ErrorTree = list[ErrorNode]


class ValidationResult(BaseModel):
    """Validation failures split by whether an undeclared field caused them."""

    whitelisted: list[ErrorNode] = Field(default_factory=list)
    non_whitelisted: list[ErrorNode] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.whitelisted and not self.non_whitelisted

    @property
    def has_unexpected_fields(self) -> bool:
        return len(self.non_whitelisted) > 0
