"""Schema engine: run pydantic validation and report failures as an error tree."""

from __future__ import annotations

from collections.abc import Mapping
from collections.abc import Sequence
from dataclasses import dataclass
from dataclasses import field
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError

from schema_validator.schemas.validation import UNEXPECTED_FIELD_KIND
from schema_validator.schemas.validation import ErrorNode
from schema_validator.validation.mapper import field_keys
from schema_validator.validation.mapper import nested_schema

ROOT_FIELD = "__root__"

FieldPath = tuple[str, ...]


@dataclass(frozen=True)
class ValidationOptions:
    """Options recognised by :func:`validate`."""

    whitelist: bool = True
    forbid_non_whitelisted: bool = False
    error_includes_target: bool = False
    error_includes_value: bool = False


@dataclass(frozen=True)
class UnexpectedField:
    """An undeclared key found while whitelisting a payload."""

    path: FieldPath
    value: Any
    target: dict[str, Any]


@dataclass
class _Draft:
    constraints: dict[str, str] = field(default_factory=dict)
    children: dict[str, _Draft] = field(default_factory=dict)
    value: Any = None
    target: dict[str, Any] | None = None


def strip_unexpected_fields(
    schema_type: type[BaseModel],
    payload: Mapping[str, Any],
) -> tuple[dict[str, Any], list[UnexpectedField]]:
    """Drop keys ``schema_type`` does not declare, at every nested depth.

    Returns the cleaned payload and the removed keys, in payload order.
    """
    unexpected: list[UnexpectedField] = []
    clean = _strip(schema_type, payload, (), unexpected)
    return clean, unexpected


def _strip(
    schema_type: type[BaseModel],
    payload: Mapping[str, Any],
    path: FieldPath,
    unexpected: list[UnexpectedField],
) -> dict[str, Any]:
    keys = field_keys(schema_type)
    clean: dict[str, Any] = {}
    for key, value in payload.items():
        field_name = keys.get(key)
        if field_name is None:
            unexpected.append(UnexpectedField(path=path + (key,), value=value, target=dict(payload)))
            continue

        nested = nested_schema(schema_type.model_fields[field_name].annotation)
        if nested is None:
            clean[key] = value
        elif isinstance(value, Mapping):
            clean[key] = _strip(nested, value, path + (key,), unexpected)
        elif isinstance(value, list):
            clean[key] = [
                _strip(nested, item, path + (key, str(index)), unexpected) if isinstance(item, Mapping) else item
                for index, item in enumerate(value)
            ]
        else:
            clean[key] = value
    return clean


async def validate(
    schema_type: type[BaseModel],
    payload: Mapping[str, Any],
    options: ValidationOptions | None = None,
) -> list[ErrorNode]:
    """Validate ``payload`` against ``schema_type`` and return the failed fields.

    An empty list means the payload is valid.
    """
    options = options or ValidationOptions()

    unexpected: list[UnexpectedField] = []
    if options.whitelist:
        payload, unexpected = strip_unexpected_fields(schema_type, payload)

    root = _Draft()
    try:
        schema_type.model_validate(payload)
    except ValidationError as exc:
        for issue in exc.errors(include_url=False):
            location = tuple(str(part) for part in issue.get("loc", ()))
            _record(
                root,
                location,
                kind=str(issue["type"]),
                message=str(issue["msg"]),
                value=issue.get("input"),
                target=_containing_record(payload, location),
                options=options,
            )

    if options.whitelist and options.forbid_non_whitelisted:
        for item in unexpected:
            _record(
                root,
                item.path,
                kind=UNEXPECTED_FIELD_KIND,
                message=f"property {item.path[-1]} should not exist",
                value=item.value,
                target=item.target,
                options=options,
            )

    return _freeze(root.children)


def _record(
    root: _Draft,
    path: FieldPath,
    *,
    kind: str,
    message: str,
    value: Any,
    target: dict[str, Any] | None,
    options: ValidationOptions,
) -> None:
    node = root
    for part in path or (ROOT_FIELD,):
        node = node.children.setdefault(part, _Draft())

    node.constraints.setdefault(kind, message)
    if options.error_includes_value:
        node.value = value
    if options.error_includes_target:
        node.target = target


def _containing_record(payload: Any, location: Sequence[str]) -> dict[str, Any] | None:
    current = payload
    for part in location[:-1]:
        if isinstance(current, Mapping):
            current = current.get(part)
        elif isinstance(current, list) and part.isdigit() and int(part) < len(current):
            current = current[int(part)]
        else:
            return None
    return dict(current) if isinstance(current, Mapping) else None


def _freeze(drafts: dict[str, _Draft]) -> list[ErrorNode]:
    return [_freeze_node(name, draft) for name, draft in drafts.items()]


def _freeze_node(name: str, draft: _Draft) -> ErrorNode:
    if not draft.children:
        return ErrorNode(
            field=name,
            constraints=draft.constraints or None,
            value=draft.value,
            target=draft.target,
        )

    children = _freeze(draft.children)
    if draft.constraints:
        # Branches never carry constraints; a failure of the branch itself becomes its first leaf.
        own = ErrorNode(
            field=ROOT_FIELD,
            constraints=draft.constraints,
            value=draft.value,
            target=draft.target,
        )
        children = [own] + children
    return ErrorNode(field=name, children=children)
