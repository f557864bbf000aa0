"""Resolve named schema references against the document's schema table.

OpenAPI documents use ``{"$ref": "#/components/schemas/Pet"}`` to point at a
shared definition.  Resolution here is deliberately shallow: one lookup by
name in ``components.schemas``, no deep copy and no recursive walk.  Callers
that descend into a schema resolve again at every level, which is what lets
the example synthesizer handle self-referencing schemas with a depth cap
instead of an expanded (and possibly infinite) tree.

A dangling reference is not an error.  The reference node itself is returned
and downstream code treats it as an untyped value.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from specdesk.models import SchemaNode


def ref_name(ref: str) -> str:
    """Return the last ``/`` segment of a reference pointer.

    Example::

        >>> ref_name("#/components/schemas/Pet")
        'Pet'
    """
    return ref.rsplit("/", 1)[-1]


def resolve_schema(
    schema: Optional[SchemaNode],
    schemas: Mapping[str, Any],
) -> Optional[SchemaNode]:
    """Return the concrete schema *schema* denotes.

    Args:
        schema: A schema node, possibly a ``$ref`` node, or ``None``.
        schemas: The document's schema table (``components.schemas``).

    Returns:
        ``None`` for ``None``; the node itself when it is not a reference;
        the table entry for a known reference; the unchanged reference node
        when the name is not in the table.  Neither argument is modified.
    """
    if schema is None:
        return None
    if not isinstance(schema, dict):
        return schema
    ref = schema.get("$ref")
    if not isinstance(ref, str):
        return schema
    target = schemas.get(ref_name(ref))
    if isinstance(target, dict):
        return target
    return schema


def schema_table(document: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``components.schemas`` of *document*, or an empty dict."""
    components = document.get("components") or {}
    if not isinstance(components, dict):
        return {}
    schemas = components.get("schemas") or {}
    return schemas if isinstance(schemas, dict) else {}
