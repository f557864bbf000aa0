"""FastAPI application exposing the relay at ``POST /api/proxy``.

Run it with any ASGI server, e.g.::

    uvicorn --factory specdesk.relay:create_relay_app
"""

from __future__ import annotations

import json
import logging
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, Response
from pydantic import ValidationError

from specdesk import __version__
from specdesk.exceptions import RelayError, RelayPayloadError
from specdesk.models import RelayConfig, RelayPayload
from specdesk.relay.core import relay_request

logger = logging.getLogger(__name__)

PROXY_PATH = "/api/proxy"


def create_relay_app(
    config: Optional[RelayConfig] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Build the relay app.

    Args:
        config: Allow-lists and timeout; defaults to :class:`RelayConfig`.
        transport: Optional httpx transport for the upstream client (tests).
    """
    relay_config = config or RelayConfig()
    app = FastAPI(title="specdesk relay", version=__version__)

    @app.exception_handler(RelayError)
    async def _relay_error(request: Request, exc: RelayError) -> Response:
        logger.warning("Relay rejected request: %s (%s)", exc, exc.status_code)
        return PlainTextResponse(str(exc), status_code=exc.status_code)

    @app.post(PROXY_PATH)
    async def proxy(request: Request) -> Response:
        payload = _parse_payload(await request.body())
        async with httpx.AsyncClient(transport=transport, timeout=relay_config.timeout) as client:
            upstream = await relay_request(payload, relay_config, client)

        headers = {"cache-control": "no-store"}
        if upstream.content_type:
            headers["content-type"] = upstream.content_type
        return Response(content=upstream.body, status_code=upstream.status, headers=headers)

    return app


def _parse_payload(raw: bytes) -> RelayPayload:
    """Decode the request body; an empty body is an empty payload."""
    if not raw.strip():
        return RelayPayload()
    try:
        data = json.loads(raw)
        return RelayPayload.model_validate(data)
    except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as exc:
        raise RelayPayloadError("Invalid JSON payload") from exc
