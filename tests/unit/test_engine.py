"""Unit tests for the pydantic-backed schema engine."""

from __future__ import annotations

import asyncio

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import model_validator

from schema_validator.schemas.validation import UNEXPECTED_FIELD_KIND
from schema_validator.schemas.validation import ErrorNode
from schema_validator.validation.engine import ROOT_FIELD
from schema_validator.validation.engine import ValidationOptions
from schema_validator.validation.engine import strip_unexpected_fields
from schema_validator.validation.engine import validate


class Item(BaseModel):
    name: str = Field(min_length=1)
    quantity: float | None = None


class Order(BaseModel):
    id: int
    items: list[Item]
    shipping: Item | None = None


class StrictOrder(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: int


class Window(BaseModel):
    start: int
    end: int

    @model_validator(mode="after")
    def check_bounds(self) -> Window:
        if self.end < self.start:
            raise ValueError("end must not precede start")
        return self


def _run(schema_type: type[BaseModel], payload: dict, **options: bool) -> list[ErrorNode]:
    return asyncio.run(validate(schema_type, payload, ValidationOptions(**options)))


def test_validate_returns_empty_tree_for_valid_payload() -> None:
    assert _run(Order, {"id": 1, "items": [{"name": "pen", "quantity": 2}]}) == []


def test_validate_nests_failures_under_their_field_path() -> None:
    errors = _run(
        Order,
        {"id": 1, "items": [{"name": 5, "colour": "red"}]},
        forbid_non_whitelisted=True,
    )

    assert len(errors) == 1
    items = errors[0]
    assert items.field == "items"
    assert items.constraints is None
    assert [child.field for child in items.children] == ["0"]

    leaves = items.children[0].children
    assert [leaf.field for leaf in leaves] == ["name", "colour"]
    assert leaves[0].constraint_kind == "string_type"
    assert leaves[0].children == []
    assert leaves[1].constraints == {UNEXPECTED_FIELD_KIND: "property colour should not exist"}


def test_validate_reports_unexpected_fields_at_every_depth() -> None:
    errors = _run(
        Order,
        {"id": 1, "items": [], "shipping": {"name": "box", "fragile": True}, "note": "x"},
        forbid_non_whitelisted=True,
    )

    assert [node.field for node in errors] == ["shipping", "note"]
    assert errors[0].children[0].field == "fragile"
    assert errors[1].constraint_kind == UNEXPECTED_FIELD_KIND


def test_validate_strips_unexpected_fields_silently_when_not_forbidden() -> None:
    errors = _run(Order, {"id": 1, "items": [{"name": "pen", "colour": "red"}], "note": "x"})

    assert errors == []


def test_whitelisting_overrides_schema_extra_forbid() -> None:
    assert _run(StrictOrder, {"id": 1, "note": "x"}) == []


def test_validate_without_whitelist_defers_to_schema_config() -> None:
    errors = _run(StrictOrder, {"id": 1, "note": "x"}, whitelist=False, forbid_non_whitelisted=True)

    assert len(errors) == 1
    assert errors[0].field == "note"
    assert errors[0].constraint_kind == UNEXPECTED_FIELD_KIND


def test_validate_places_model_level_errors_on_root_node() -> None:
    errors = _run(Window, {"start": 5, "end": 1})

    assert len(errors) == 1
    assert errors[0].field == ROOT_FIELD
    assert errors[0].constraint_kind == "value_error"
    assert "end must not precede start" in errors[0].constraints["value_error"]


def test_validate_omits_value_and_target_by_default() -> None:
    errors = _run(Order, {"id": "abc", "items": []})

    assert errors[0].field == "id"
    assert errors[0].value is None
    assert errors[0].target is None


def test_validate_includes_value_and_target_on_request() -> None:
    errors = _run(
        Order,
        {"id": 1, "items": [{"name": 5}], "note": "x"},
        forbid_non_whitelisted=True,
        error_includes_value=True,
        error_includes_target=True,
    )

    assert [node.field for node in errors] == ["items", "note"]

    note = errors[1]
    assert note.value == "x"
    assert note.target == {"id": 1, "items": [{"name": 5}], "note": "x"}

    name = errors[0].children[0].children[0]
    assert name.value == 5
    assert name.target == {"name": 5}


def test_strip_unexpected_fields_returns_clean_payload_and_paths() -> None:
    clean, unexpected = strip_unexpected_fields(
        Order,
        {"id": 1, "items": [{"name": "pen", "colour": "red"}, "junk"], "note": "x"},
    )

    assert clean == {"id": 1, "items": [{"name": "pen"}, "junk"]}
    assert [item.path for item in unexpected] == [("items", "0", "colour"), ("note",)]


class LimitedOrder(BaseModel):
    items: list[Item] = Field(max_length=1)


class Booking(BaseModel):
    window: Window


def test_branch_failure_becomes_its_own_leaf_beside_unexpected_fields() -> None:
    errors = _run(
        LimitedOrder,
        {"items": [{"name": "a", "x": 1}, {"name": "b"}]},
        forbid_non_whitelisted=True,
    )

    items = errors[0]
    assert items.field == "items"
    assert items.constraints is None
    assert [child.field for child in items.children] == [ROOT_FIELD, "0"]
    assert items.children[0].constraint_kind == "too_long"
    assert items.children[0].children == []
    assert items.children[1].children[0].constraint_kind == UNEXPECTED_FIELD_KIND


def test_nested_model_failure_becomes_its_own_leaf_beside_unexpected_fields() -> None:
    errors = _run(
        Booking,
        {"window": {"start": 5, "end": 1, "tz": "UTC"}},
        forbid_non_whitelisted=True,
        error_includes_value=True,
    )

    window = errors[0]
    assert window.constraints is None
    assert window.value is None
    assert [child.field for child in window.children] == [ROOT_FIELD, "tz"]
    assert window.children[0].constraint_kind == "value_error"
    assert window.children[1].value == "UTC"
