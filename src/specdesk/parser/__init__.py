"""Document compiler -- load an OpenAPI document and build the operation catalog.

Typical usage::

    from specdesk.parser import build_catalog, load_document

    raw = load_document("https://api.tikhub.io/openapi.json")
    catalog = build_catalog(raw)

Sub-modules:

* :mod:`~specdesk.parser.loader` -- I/O layer (URL, file, stdin) plus
  JSON/YAML detection and document shape validation.
* :mod:`~specdesk.parser.resolver` -- one-hop schema reference resolution.
* :mod:`~specdesk.parser.examples` -- example synthesis from schemas.
* :mod:`~specdesk.parser.text` -- English-only label heuristic.
* :mod:`~specdesk.parser.normalizer` -- per-operation normalization.
* :mod:`~specdesk.parser.catalog` -- sorting and document metadata.

Everything except the loader is pure: no I/O, no shared state.
"""

from specdesk.parser.catalog import build_catalog, doc_meta, parse_base_urls
from specdesk.parser.examples import media_example, synthesize_example
from specdesk.parser.loader import load_document, validate_document
from specdesk.parser.normalizer import infer_app, normalize_operations
from specdesk.parser.resolver import resolve_schema
from specdesk.parser.text import english_only

__all__ = [
    "build_catalog",
    "doc_meta",
    "english_only",
    "infer_app",
    "load_document",
    "media_example",
    "normalize_operations",
    "parse_base_urls",
    "resolve_schema",
    "synthesize_example",
    "validate_document",
]
