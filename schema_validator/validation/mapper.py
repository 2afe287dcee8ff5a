"""Map loosely-typed input records onto the shape of a pydantic schema."""

from __future__ import annotations

from collections.abc import Mapping
from collections.abc import Sequence
import types
from typing import Any
from typing import Union
from typing import get_args
from typing import get_origin

from pydantic import BaseModel

_SEQUENCE_ORIGINS = frozenset({list, tuple, set, frozenset, Sequence})


class ObjectMappingError(ValueError):
    """Raised when an input record cannot be mapped onto a schema."""


def nested_schema(annotation: Any) -> type[BaseModel] | None:
    """Return the nested model type declared by a field annotation, if any.

    Understands ``Model``, ``Model | None``, and homogeneous sequences such as
    ``list[Model]`` or ``tuple[Model, ...]``.
    """
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return annotation

    origin = get_origin(annotation)
    if origin is None:
        return None

    if origin is Union or origin is types.UnionType:
        members = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            return nested_schema(members[0])
        return None

    if origin in _SEQUENCE_ORIGINS:
        args = [arg for arg in get_args(annotation) if arg is not Ellipsis]
        if len(args) == 1:
            return nested_schema(args[0])

    return None


def field_keys(schema_type: type[BaseModel]) -> dict[str, str]:
    """Map every input key accepted by ``schema_type`` to its field name."""
    keys: dict[str, str] = {}
    for name, info in schema_type.model_fields.items():
        keys[name] = name
        if info.alias:
            keys[info.alias] = name
        if isinstance(info.validation_alias, str):
            keys[info.validation_alias] = name
    return keys


def map_to_schema(schema_type: type[BaseModel], raw: Any) -> dict[str, Any]:
    """Coerce ``raw`` into a fresh payload shaped after ``schema_type``.

    Nested records under nested-model fields are mapped recursively. Keys the
    schema does not declare are copied through untouched.
    """
    if not (isinstance(schema_type, type) and issubclass(schema_type, BaseModel)):
        raise TypeError(f"Schema type must be a pydantic model class, got {schema_type!r}")

    if isinstance(raw, BaseModel):
        raw = raw.model_dump(by_alias=True)
    if not isinstance(raw, Mapping):
        raise ObjectMappingError(
            f"Expected a mapping to validate against {schema_type.__name__}, got {type(raw).__name__}"
        )

    keys = field_keys(schema_type)
    mapped: dict[str, Any] = {}
    for key, value in raw.items():
        if not isinstance(key, str):
            raise ObjectMappingError(f"Record keys must be strings, got {key!r}")
        field_name = keys.get(key)
        if field_name is None:
            mapped[key] = value
            continue
        nested = nested_schema(schema_type.model_fields[field_name].annotation)
        mapped[key] = _map_value(nested, value) if nested is not None else value
    return mapped


def _map_value(nested: type[BaseModel], value: Any) -> Any:
    if isinstance(value, (Mapping, BaseModel)):
        return map_to_schema(nested, value)
    if isinstance(value, (list, tuple)):
        return [_map_value(nested, item) for item in value]
    return value
