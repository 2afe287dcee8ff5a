"""Shared pytest fixtures for schema-validator test suites."""

from collections.abc import Generator
from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Isolate every test from validator settings cached or set by another."""
    from schema_validator.core.config import get_validator_settings

    for name in (
        "SCHEMA_VALIDATOR_FORBID_UNEXPECTED_FIELDS",
        "SCHEMA_VALIDATOR_ERROR_INCLUDES_TARGET",
        "SCHEMA_VALIDATOR_ERROR_INCLUDES_VALUE",
    ):
        monkeypatch.delenv(name, raising=False)

    get_validator_settings.cache_clear()
    yield
    get_validator_settings.cache_clear()
