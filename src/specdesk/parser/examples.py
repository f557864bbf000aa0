"""Synthesize representative example values from schema definitions.

:func:`synthesize_example` turns a schema node into a value that has the
right shape for a request body or a response preview.  Explicit
``example``/``default``/``enum`` values win over structure; composition
operators are honoured (``oneOf``/``anyOf`` take the first alternative,
``allOf`` merges every member); objects and arrays recurse.

Schemas may refer to themselves, directly or through a cycle of
references.  There is no visited-set: recursion is bounded by
:data:`MAX_EXAMPLE_DEPTH` and anything deeper collapses to ``{}``.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from specdesk.models import SchemaNode
from specdesk.parser.resolver import resolve_schema

MAX_EXAMPLE_DEPTH = 5
"""Deepest recursion level that still produces a value; deeper yields ``{}``."""

ADDITIONAL_PROPERTIES_KEY = "example_key"
"""Key used for the single entry synthesized from ``additionalProperties``."""

DATE_TIME_EXAMPLE = "2026-01-01T00:00:00Z"
DATE_EXAMPLE = "2026-01-01"
STRING_EXAMPLE = "string"


def synthesize_example(
    schema: Optional[SchemaNode],
    schemas: Mapping[str, Any],
    depth: int = 0,
) -> Any:
    """Return a representative value for *schema*.

    Args:
        schema: The schema node, possibly an unresolved ``$ref``.
        schemas: The document's schema table.
        depth: Current recursion depth; callers leave the default.

    Returns:
        A JSON-compatible value.  The same inputs always give the same
        output, and the inputs are never modified.
    """
    if schema is None or depth > MAX_EXAMPLE_DEPTH:
        return {}
    resolved = resolve_schema(schema, schemas)
    if not isinstance(resolved, dict):
        return {}

    if "example" in resolved:
        return resolved["example"]
    if "default" in resolved:
        return resolved["default"]
    enum_values = resolved.get("enum")
    if isinstance(enum_values, list) and enum_values:
        return enum_values[0]

    for key in ("oneOf", "anyOf"):
        alternatives = resolved.get(key)
        if isinstance(alternatives, list) and alternatives:
            return synthesize_example(alternatives[0], schemas, depth + 1)

    members = resolved.get("allOf")
    if isinstance(members, list) and members:
        merged: dict[str, Any] = {}
        for member in members:
            value = synthesize_example(member, schemas, depth + 1)
            if isinstance(value, dict):
                merged.update(value)
        return merged

    schema_type = resolved.get("type")
    if schema_type == "object":
        return _object_example(resolved, schemas, depth)
    if schema_type == "array":
        return [synthesize_example(resolved.get("items"), schemas, depth + 1)]
    if schema_type in ("integer", "number"):
        return 1
    if schema_type == "boolean":
        return True

    fmt = resolved.get("format")
    if fmt == "date-time":
        return DATE_TIME_EXAMPLE
    if fmt == "date":
        return DATE_EXAMPLE
    return STRING_EXAMPLE


def _object_example(
    schema: SchemaNode,
    schemas: Mapping[str, Any],
    depth: int,
) -> dict[str, Any]:
    properties = schema.get("properties") or {}
    result: dict[str, Any] = {}
    if isinstance(properties, dict):
        for name, prop in properties.items():
            result[name] = synthesize_example(prop, schemas, depth + 1)

    extra = schema.get("additionalProperties")
    if not result and isinstance(extra, dict):
        result[ADDITIONAL_PROPERTIES_KEY] = synthesize_example(extra, schemas, depth + 1)
    return result


def media_example(
    content: Optional[Mapping[str, Any]],
    schemas: Mapping[str, Any],
) -> Any:
    """Return the example for the first media type of a ``content`` map.

    The media entry's own ``example`` wins, then the ``value`` of its first
    ``examples`` entry, then the synthesized example of its schema.

    Returns:
        The example value, or ``None`` when *content* has no media entry.
    """
    if not content or not isinstance(content, Mapping):
        return None
    media = next(iter(content.values()), None)
    if not isinstance(media, dict):
        return None

    if media.get("example") is not None:
        return media["example"]
    examples = media.get("examples")
    if isinstance(examples, dict) and examples:
        first = next(iter(examples.values()))
        if isinstance(first, dict) and first.get("value") is not None:
            return first["value"]
    return synthesize_example(media.get("schema"), schemas)
