"""Load API documents from a URL, local file, or stdin.

This module is the only I/O in the compile pipeline.  It fetches raw bytes,
deserialises them as JSON or YAML, and checks that the result is something
the compiler can work with.

* :func:`load_document` -- load and parse from any supported source.
* :func:`validate_document` -- reject values that are not a document with
  a ``paths`` table.

Every failure surfaces as a single :class:`~specdesk.exceptions.SpecParseError`;
there is no partial result.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Mapping

import httpx
import yaml

from specdesk.exceptions import SpecParseError

FETCH_TIMEOUT = 30.0


def load_document(source: str) -> dict[str, Any]:
    """Load an API document from URL, file path, or stdin (``-``).

    Args:
        source: An ``http(s)://`` URL, a file path, or ``-`` for stdin.

    Returns:
        The deserialised document.

    Raises:
        SpecParseError: If the source cannot be read or parsed.
    """
    if source == "-":
        return _load_from_stdin()
    if source.startswith(("http://", "https://")):
        return _load_from_url(source)
    return _load_from_file(source)


def _load_from_stdin() -> dict[str, Any]:
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise SpecParseError("No input received from stdin")
    return _parse_content(content)


def _load_from_url(url: str) -> dict[str, Any]:
    """Fetch a document over HTTP; the content type hints at the format."""
    try:
        response = httpx.get(url, timeout=FETCH_TIMEOUT, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching document from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch document from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"
    return _parse_content(response.text, hint=hint)


def _load_from_file(path: str) -> dict[str, Any]:
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecParseError(f"Document not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecParseError(f"Failed to read document {path}: {exc}") from exc

    if not content.strip():
        raise SpecParseError(f"Document is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"
    return _parse_content(content, hint=hint)


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse *content* as JSON, falling back to YAML unless hinted otherwise.

    Raises:
        SpecParseError: If neither format yields a mapping.
    """
    json_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc
            json_error = exc
        else:
            return _require_mapping(result)

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        msg = "Failed to parse document as JSON or YAML"
        if json_error:
            msg += f"\n  JSON error: {json_error}"
        msg += f"\n  YAML error: {exc}"
        raise SpecParseError(msg) from exc
    return _require_mapping(result)


def _require_mapping(result: Any) -> dict[str, Any]:
    if not isinstance(result, dict):
        kind = type(result).__name__ if result is not None else "empty document"
        raise SpecParseError(f"Document must be a JSON/YAML object (got {kind})")
    return result


def validate_document(document: Any) -> Mapping[str, Any]:
    """Check that *document* can be compiled.

    Only the outer shape is checked: a mapping with a ``paths`` mapping.
    Everything below that is handled fail-soft by the compiler.

    Returns:
        The document, unchanged.

    Raises:
        SpecParseError: If the value is not a mapping or lacks ``paths``.
    """
    if not isinstance(document, Mapping):
        raise SpecParseError(
            f"Document must be an object (got {type(document).__name__})"
        )
    if "swagger" in document and "openapi" not in document:
        raise SpecParseError(
            f"Swagger {document['swagger']} documents are not supported; "
            "convert to OpenAPI 3.x first"
        )
    paths = document.get("paths")
    if not isinstance(paths, Mapping):
        raise SpecParseError("Document has no 'paths' table")
    return document
