"""Assemble the final, sorted operation catalog for a document.

:func:`build_catalog` is the compiler's front door: it validates the
document, normalizes every operation, sorts them by ``(tag, path, method)``
and attaches :class:`~specdesk.models.DocMeta` derived from the ``info``
object.  The result is immutable and either complete or not produced at all.
"""

from __future__ import annotations

import re
from typing import Any, Iterable, Mapping, Sequence

from specdesk.models import AppGroup, Catalog, DocMeta, ParsedOperation
from specdesk.parser.loader import validate_document
from specdesk.parser.normalizer import DEFAULT_APP_GROUPS, normalize_operations
from specdesk.parser.text import english_only

DEFAULT_TITLE = "API Documentation"
DEFAULT_VERSION = "unknown"
DEFAULT_BASE_URLS: tuple[str, ...] = ("https://api.tikhub.io", "https://api.tikhub.dev")

_BASE_URL_RE = re.compile(r"https://api\.tikhub\.(?:io|dev)")


def build_catalog(
    document: Mapping[str, Any],
    app_groups: Sequence[AppGroup] = DEFAULT_APP_GROUPS,
) -> Catalog:
    """Compile *document* into a :class:`~specdesk.models.Catalog`.

    Args:
        document: The deserialised OpenAPI document.
        app_groups: Ordered app-inference table (first match wins).

    Returns:
        The catalog, operations sorted by ``(tag, path, method)``.

    Raises:
        SpecParseError: If *document* is not a mapping with a ``paths``
            mapping.  Nothing below the document level raises.

    Example::

        raw = load_document("openapi.json")
        catalog = build_catalog(raw)
        for op in catalog.operations:
            print(op.method.value.upper(), op.path, op.summary)
    """
    validate_document(document)
    operations = sort_operations(normalize_operations(document, app_groups))
    return Catalog(meta=doc_meta(document), operations=tuple(operations))


def sort_operations(operations: Iterable[ParsedOperation]) -> list[ParsedOperation]:
    """Return *operations* sorted by ``(tag, path, method)``, plain string order."""
    return sorted(operations, key=lambda op: (op.tag, op.path, op.method.value))


def parse_base_urls(description: str | None) -> tuple[str, ...]:
    """Return the production base URLs mentioned in *description*.

    Matches keep their first-occurrence order and are deduplicated.  With no
    match (or no description) the two default hosts are returned.
    """
    if not description:
        return DEFAULT_BASE_URLS
    found = list(dict.fromkeys(_BASE_URL_RE.findall(description)))
    return tuple(found) if found else DEFAULT_BASE_URLS


def doc_meta(document: Mapping[str, Any]) -> DocMeta:
    """Extract title, version, description and base URLs from ``info``."""
    info = document.get("info") or {}
    if not isinstance(info, dict):
        info = {}
    raw_description = info.get("description")
    if not isinstance(raw_description, str):
        raw_description = ""

    return DocMeta(
        title=english_only(str(info.get("title") or DEFAULT_TITLE)),
        version=str(info.get("version") or DEFAULT_VERSION),
        description=english_only(raw_description),
        base_urls=parse_base_urls(raw_description),
    )
