"""Render copy-paste code snippets for a catalog operation.

Each language has a Jinja2 template in ``snippets/templates/``.  The request
itself (URL, headers, body) is assembled once by :mod:`specdesk.request`, the
same way :class:`~specdesk.client.RequestRunner` assembles it, and the
templates only lay it out in the target language's syntax.

String values go through a per-language quoting filter so the snippet stays
valid whatever the user typed: JSON string literals for Python and
JavaScript, literals with interpolation characters escaped for Ruby and PHP,
and single-quoted words for the shell.
"""

from __future__ import annotations

import json
import pprint
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from specdesk.exceptions import InvalidUsageError
from specdesk.models import ParsedOperation
from specdesk.request import (
    API_KEY_PLACEHOLDER,
    RequestValues,
    build_headers,
    build_url,
    is_json_body,
    pick_api_key,
    request_body,
)

TEMPLATE_DIR = Path(__file__).parent / "templates"

LANGUAGES: tuple[str, ...] = ("shell", "node", "ruby", "php", "python")
DEFAULT_LANGUAGE = "python"

LEXERS: dict[str, str] = {
    "shell": "bash",
    "node": "javascript",
    "ruby": "ruby",
    "php": "php",
    "python": "python",
}
"""Pygments lexer name per language, for syntax highlighting."""


@dataclass
class SnippetContext:
    """Everything besides the operation that goes into a snippet."""

    base_url: str
    global_api_key: str = ""
    endpoint_api_key: Optional[str] = None
    values: RequestValues = field(default_factory=RequestValues)


def build_snippet(language: str, operation: ParsedOperation, ctx: SnippetContext) -> str:
    """Return a snippet that sends *operation* in *language*.

    Without an API key, operations that require auth get a
    ``Bearer YOUR_API_KEY`` placeholder header.

    Raises:
        InvalidUsageError: If *language* is not one of :data:`LANGUAGES`.
    """
    if language not in LANGUAGES:
        raise InvalidUsageError(
            f"Unknown snippet language '{language}'. "
            f"Choose from: {', '.join(LANGUAGES)}"
        )

    env = _create_jinja_env()
    template = env.get_template(f"{language}.j2")
    return template.render(**_build_context(operation, ctx)).rstrip("\n")


def _create_jinja_env() -> Environment:
    """Jinja2 environment for the snippet templates.

    The templates produce source code, not HTML, so autoescape is off for
    ``.j2`` files.
    """
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(disabled_extensions=("j2",)),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["quote"] = _json_quote
    env.filters["ruby_quote"] = _ruby_quote
    env.filters["php_quote"] = _php_quote
    env.filters["pyliteral"] = _python_literal
    env.filters["compact_json"] = lambda value: json.dumps(value, ensure_ascii=False)
    return env


def _build_context(operation: ParsedOperation, ctx: SnippetContext) -> dict[str, Any]:
    values = ctx.values
    key = pick_api_key(ctx.global_api_key, ctx.endpoint_api_key)
    url = build_url(operation, ctx.base_url, values.path, values.query)
    headers = build_headers(
        operation,
        key,
        values,
        placeholder=API_KEY_PLACEHOLDER,
        accept="application/json",
    )
    method = operation.method.value.upper()

    body_text = request_body(operation, values.body)
    body_kind: Optional[str] = None
    body_value: Any = None
    if body_text is not None:
        body_kind, body_value = "text", body_text
        if is_json_body(operation, body_text):
            try:
                body_kind, body_value = "json", json.loads(body_text)
            except json.JSONDecodeError:
                # Malformed JSON is sent as typed.
                pass

    args = [f"--request {method}", f"--url {_shell_quote(url)}"]
    args.extend(f"--header {_shell_quote(f'{k}: {v}')}" for k, v in headers.items())
    if body_text is not None:
        args.append(f"--data {_shell_quote(body_text)}")

    return {
        "url": url,
        "method": method,
        "headers": headers,
        "body_kind": body_kind,
        "body_value": body_value,
        "body_text": body_text,
        "args": args,
    }


def _json_quote(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def _ruby_quote(value: str) -> str:
    return _json_quote(value).replace("#{", "\\#{")


def _php_quote(value: str) -> str:
    return _json_quote(value).replace("$", "\\$")


def _shell_quote(value: str) -> str:
    return "'" + value.replace("'", "'\\''") + "'"


def _python_literal(value: Any) -> str:
    return pprint.pformat(value, sort_dicts=False)
