"""Validator configuration helpers."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os

DEFAULT_FORBID_UNEXPECTED_FIELDS = True
DEFAULT_ERROR_INCLUDES_TARGET = False
DEFAULT_ERROR_INCLUDES_VALUE = False

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def _get_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default

    normalized = raw.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"Environment variable {name} must be a boolean flag, got {raw!r}")


@dataclass(frozen=True)
class ValidatorSettings:
    """Defaults applied when a caller does not pass explicit validation options."""

    forbid_unexpected_fields: bool
    error_includes_target: bool
    error_includes_value: bool

    def safe_for_logging(self) -> dict[str, bool]:
        """Return validator settings as a plain dict for logs."""
        return {
            "forbid_unexpected_fields": self.forbid_unexpected_fields,
            "error_includes_target": self.error_includes_target,
            "error_includes_value": self.error_includes_value,
        }


@lru_cache(maxsize=1)
def get_validator_settings() -> ValidatorSettings:
    """Load validator settings from the environment."""
    return ValidatorSettings(
        forbid_unexpected_fields=_get_bool_env(
            "SCHEMA_VALIDATOR_FORBID_UNEXPECTED_FIELDS",
            DEFAULT_FORBID_UNEXPECTED_FIELDS,
        ),
        error_includes_target=_get_bool_env(
            "SCHEMA_VALIDATOR_ERROR_INCLUDES_TARGET",
            DEFAULT_ERROR_INCLUDES_TARGET,
        ),
        error_includes_value=_get_bool_env(
            "SCHEMA_VALIDATOR_ERROR_INCLUDES_VALUE",
            DEFAULT_ERROR_INCLUDES_VALUE,
        ),
    )
