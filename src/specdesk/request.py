"""Turn an operation plus user-entered values into a concrete HTTP request.

The functions here are shared by the request executor
(:mod:`specdesk.client`) and the snippet renderer (:mod:`specdesk.snippets`)
so that what the user runs and what they copy are the same request.

Values the user leaves blank are left out: empty query parameters are not
sent, and blank header or cookie values produce no header.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Mapping, Optional
from urllib.parse import quote, urlencode

from specdesk.browse import initial_param_values
from specdesk.models import ParameterLocation, ParsedOperation

_PLACEHOLDER_RE = re.compile(r"\{([^}]+)\}")

API_KEY_PLACEHOLDER = "YOUR_API_KEY"


@dataclass
class RequestValues:
    """User-entered values for one operation, keyed by parameter name."""

    path: dict[str, str] = field(default_factory=dict)
    query: dict[str, str] = field(default_factory=dict)
    header: dict[str, str] = field(default_factory=dict)
    cookie: dict[str, str] = field(default_factory=dict)
    body: str = ""

    @classmethod
    def defaults_for(cls, operation: ParsedOperation) -> RequestValues:
        """Values pre-filled from the operation's parameter defaults and body template."""
        return cls(
            path=initial_param_values(operation, ParameterLocation.PATH),
            query=initial_param_values(operation, ParameterLocation.QUERY),
            header=initial_param_values(operation, ParameterLocation.HEADER),
            cookie=initial_param_values(operation, ParameterLocation.COOKIE),
            body=operation.request_body_template,
        )


def _encode(value: str) -> str:
    # Same safe set as JavaScript's encodeURIComponent.
    return quote(value, safe="-_.!~*'()")


def pick_api_key(global_key: str, endpoint_key: Optional[str] = None) -> str:
    """Return the per-endpoint key when set, else the global one (both trimmed)."""
    if endpoint_key and endpoint_key.strip():
        return endpoint_key.strip()
    return global_key.strip()


def build_url(
    operation: ParsedOperation,
    base_url: str,
    path_values: Mapping[str, str],
    query_values: Mapping[str, str],
) -> str:
    """Return the full request URL.

    ``{name}`` placeholders are replaced by percent-encoded values (a missing
    value leaves the encoded placeholder).  Declared query parameters with a
    non-empty value are appended in declaration order.

    Example::

        >>> build_url(op, "https://api.example.com/", {"id": "42"}, {"limit": "10"})
        'https://api.example.com/users/42/posts?limit=10'
    """

    def _substitute(match: re.Match[str]) -> str:
        key = match.group(1)
        return _encode(path_values.get(key, "{" + key + "}"))

    path = _PLACEHOLDER_RE.sub(_substitute, operation.path)

    query: list[tuple[str, str]] = []
    for param in operation.parameters_in(ParameterLocation.QUERY):
        value = query_values.get(param.name)
        if value is not None and value != "":
            query.append((param.name, value))

    base = base_url[:-1] if base_url.endswith("/") else base_url
    url = f"{base}{path}"
    if query:
        url += "?" + urlencode(query)
    return url


def build_cookie_header(
    operation: ParsedOperation,
    cookie_values: Mapping[str, str],
) -> str:
    """Return ``name=value`` pairs of the non-blank cookie parameters, joined by ``"; "``."""
    pairs: list[str] = []
    for param in operation.parameters_in(ParameterLocation.COOKIE):
        value = (cookie_values.get(param.name) or "").strip()
        if value:
            pairs.append(f"{_encode(param.name)}={_encode(value)}")
    return "; ".join(pairs)


def build_headers(
    operation: ParsedOperation,
    api_key: str,
    values: RequestValues,
    placeholder: Optional[str] = None,
    accept: Optional[str] = None,
) -> dict[str, str]:
    """Return the outbound headers for *operation*.

    * ``Authorization: Bearer <key>`` when the operation requires auth and a
      key (or *placeholder*, used by snippets) is available.
    * ``Content-Type`` when the operation declares a body type.
    * Every non-blank header parameter.
    * One combined ``Cookie`` header from the cookie parameters.
    """
    headers: dict[str, str] = {}
    if accept:
        headers["accept"] = accept
    key = api_key.strip() or (placeholder or "")
    if operation.requires_auth and key:
        headers["Authorization"] = f"Bearer {key}"
    if operation.request_body_type:
        headers["Content-Type"] = operation.request_body_type

    for param in operation.parameters_in(ParameterLocation.HEADER):
        value = (values.header.get(param.name) or "").strip()
        if value:
            headers[param.name] = value

    cookie = build_cookie_header(operation, values.cookie)
    if cookie:
        headers["Cookie"] = cookie
    return headers


def request_body(operation: ParsedOperation, body_text: str) -> Optional[str]:
    """Return the body to send, or ``None``.

    The text is sent as-is for every media type; only an operation with a
    body type and non-blank text sends a body.
    """
    if operation.request_body_type and body_text.strip():
        return body_text
    return None


def is_json_body(operation: ParsedOperation, body_text: str) -> bool:
    """``True`` when the body type is a JSON media type and there is body text."""
    return bool(
        operation.request_body_type
        and "json" in operation.request_body_type
        and body_text.strip()
    )
