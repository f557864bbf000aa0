"""Catalog browsing helpers: grouping counts, hidden tags, filters.

These are the read-only views the CLI (or any other front end) puts on top
of a :class:`~specdesk.models.Catalog`.  The set of hidden tags is always
passed in by the caller, normally from
:attr:`~specdesk.models.GlobalConfig.hidden_tags`.
"""

from __future__ import annotations

from collections import Counter
from typing import AbstractSet, Iterable, Optional

from specdesk.models import ParameterLocation, ParsedOperation

ALL = "All"


def count_by_app(operations: Iterable[ParsedOperation]) -> list[tuple[str, int]]:
    """Return ``(app, count)`` pairs sorted by app name."""
    return sorted(Counter(op.app for op in operations).items())


def count_by_tag(operations: Iterable[ParsedOperation]) -> list[tuple[str, int]]:
    """Return ``(tag, count)`` pairs sorted by tag name."""
    return sorted(Counter(op.tag for op in operations).items())


def visible_operations(
    operations: Iterable[ParsedOperation],
    hidden_tags: AbstractSet[str],
    show_hidden: bool = False,
) -> list[ParsedOperation]:
    """Drop operations whose tag is in *hidden_tags* unless *show_hidden* is set."""
    if show_hidden:
        return list(operations)
    return [op for op in operations if op.tag not in hidden_tags]


def filter_operations(
    operations: Iterable[ParsedOperation],
    app: str = ALL,
    tag: str = ALL,
    search: str = "",
) -> list[ParsedOperation]:
    """Filter by exact app and tag (``"All"`` matches anything) and a search term.

    The search is a case-insensitive substring match against path, summary,
    id, tag and app.
    """
    needle = search.strip().lower()
    result: list[ParsedOperation] = []
    for op in operations:
        if app != ALL and op.app != app:
            continue
        if tag != ALL and op.tag != tag:
            continue
        if needle and not any(
            needle in field.lower()
            for field in (op.path, op.summary, op.id, op.tag, op.app)
        ):
            continue
        result.append(op)
    return result


def select_operation(
    operations: list[ParsedOperation],
    operation_id: Optional[str] = None,
) -> Optional[ParsedOperation]:
    """Return the operation with *operation_id*, else the first one, else ``None``."""
    if operation_id is not None:
        for op in operations:
            if op.id == operation_id:
                return op
    return operations[0] if operations else None


def initial_param_values(
    operation: ParsedOperation,
    location: ParameterLocation | str,
) -> dict[str, str]:
    """Return ``{name: default_value}`` for the parameters at *location*."""
    return {param.name: param.default_value for param in operation.parameters_in(location)}
