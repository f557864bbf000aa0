"""Relay logic: check a payload against the allow-list and forward it.

The relay lets a client that cannot call the API host directly (a browser
page, a locked-down network) send one request through a trusted server.  It
only forwards HTTPS requests to allow-listed hosts with allow-listed methods,
and every rejection is a :class:`~specdesk.exceptions.RelayError` carrying the
HTTP status the relay answers with.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional
from urllib.parse import urlparse

import httpx

from specdesk.exceptions import (
    HostNotAllowedError,
    MethodNotAllowedError,
    RelayPayloadError,
    UpstreamFailedError,
    UpstreamTimeoutError,
)
from specdesk.models import RelayConfig, RelayPayload

logger = logging.getLogger(__name__)

DROPPED_HEADERS = frozenset({"host", "origin", "content-length"})


@dataclass
class RelayResponse:
    """What the upstream answered, passed back verbatim."""

    status: int
    body: str
    content_type: Optional[str] = None


def validate_target(payload: RelayPayload, config: RelayConfig) -> tuple[str, str]:
    """Return ``(url, method)`` for an allowed payload.

    Raises:
        RelayPayloadError: Missing or unparseable URL (400).
        HostNotAllowedError: Not HTTPS, or host outside the allow-list (403).
        MethodNotAllowedError: Method outside the allow-list (405).
    """
    url = (payload.url or "").strip()
    if not url:
        raise RelayPayloadError("Missing target URL")

    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
        httpx.URL(url)
    except (ValueError, httpx.InvalidURL) as exc:
        raise RelayPayloadError("Invalid target URL") from exc
    if not parsed.scheme or not hostname:
        raise RelayPayloadError("Invalid target URL")

    if parsed.scheme != "https" or hostname not in config.allowed_hosts:
        raise HostNotAllowedError("Target host is not allowed")

    method = (payload.method or "GET").upper()
    if method not in {m.upper() for m in config.allowed_methods}:
        raise MethodNotAllowedError("Method is not allowed")
    return url, method


def forward_headers(headers: Mapping[str, Any]) -> dict[str, str]:
    """Drop hop-specific headers and any non-string values; keep original casing."""
    return {
        name: value
        for name, value in headers.items()
        if isinstance(value, str) and name.lower() not in DROPPED_HEADERS
    }


async def relay_request(
    payload: RelayPayload,
    config: RelayConfig,
    client: httpx.AsyncClient,
) -> RelayResponse:
    """Validate *payload* and forward it with *client*.

    A body is only sent for methods other than GET.

    Raises:
        RelayError: Any of the validation errors from :func:`validate_target`,
            :class:`UpstreamTimeoutError` (504) when the upstream is too slow,
            or :class:`UpstreamFailedError` (502) for other transport failures.
    """
    url, method = validate_target(payload, config)
    content = payload.body if payload.body is not None and method != "GET" else None

    logger.info("Relaying %s %s", method, url)
    try:
        upstream = await client.request(
            method,
            url,
            headers=forward_headers(payload.headers),
            content=content,
            timeout=config.timeout,
        )
    except httpx.TimeoutException as exc:
        logger.warning("Upstream timed out: %s %s", method, url)
        raise UpstreamTimeoutError("Upstream request timed out") from exc
    except (httpx.HTTPError, httpx.InvalidURL, UnicodeEncodeError) as exc:
        # Header values httpx cannot encode surface as UnicodeEncodeError.
        logger.warning("Upstream failed: %s %s: %s", method, url, exc)
        raise UpstreamFailedError("Upstream request failed") from exc

    logger.debug("Upstream answered %s for %s %s", upstream.status_code, method, url)
    return RelayResponse(
        status=upstream.status_code,
        body=upstream.text,
        content_type=upstream.headers.get("content-type"),
    )
