"""Split a schema-validation error tree into unexpected-field and constraint failures."""

from __future__ import annotations

from collections.abc import Callable
from collections.abc import Iterator
from collections.abc import Sequence
import logging
from typing import NamedTuple

from schema_validator.schemas.validation import UNEXPECTED_FIELD_KIND
from schema_validator.schemas.validation import ErrorNode

logger = logging.getLogger(__name__)

KindPredicate = Callable[[str | None], bool]


class Classification(NamedTuple):
    """Two independently pruned copies of one error tree."""

    whitelisted: list[ErrorNode]
    non_whitelisted: list[ErrorNode]


def is_unexpected_field(kind: str | None) -> bool:
    """Return whether a constraint-kind marks an undeclared field."""
    return kind == UNEXPECTED_FIELD_KIND


def classify_errors(
    errors: Sequence[ErrorNode],
    is_forbidden: KindPredicate = is_unexpected_field,
) -> Classification:
    """Partition every failed leaf of ``errors`` by the forbidden-kind predicate.

    Each bucket keeps only the branches that still lead to at least one of its
    leaves, and preserves sibling order at every depth. The input is not
    modified.
    """
    non_whitelisted = _prune(errors, is_forbidden)
    whitelisted = _prune(errors, lambda kind: not is_forbidden(kind))
    return Classification(whitelisted=whitelisted, non_whitelisted=non_whitelisted)


def _prune(nodes: Sequence[ErrorNode], keep: KindPredicate) -> list[ErrorNode]:
    kept: list[ErrorNode] = []
    for node in nodes:
        pruned = _prune_node(node, keep)
        if pruned is not None:
            kept.append(pruned)
    return kept


def _prune_node(node: ErrorNode, keep: KindPredicate) -> ErrorNode | None:
    if node.is_branch:
        children = _prune(node.children, keep)
        if not children:
            return None
        return node.model_copy(update={"children": children})

    if node.constraints is not None and len(node.constraints) > 1:
        logger.warning(
            "Error leaf %r carries %d constraint kinds; classifying by %r",
            node.field,
            len(node.constraints),
            node.constraint_kind,
        )

    if keep(node.constraint_kind):
        return node
    return None


def flatten_error_tree(errors: Sequence[ErrorNode], prefix: str = "") -> Iterator[tuple[str, ErrorNode]]:
    """Yield every leaf of ``errors`` with its dotted field path, in tree order.

    A branch that also carries constraints is yielded ahead of its children.
    """
    for node in errors:
        path = f"{prefix}.{node.field}" if prefix else node.field
        if node.is_branch:
            if node.constraints:
                yield path, node
            yield from flatten_error_tree(node.children, path)
        else:
            yield path, node
