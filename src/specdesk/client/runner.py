"""Execute one catalog operation over HTTP, directly or through the relay.

:class:`RequestRunner` wraps :class:`httpx.Client`.  It turns a
:class:`~specdesk.models.ParsedOperation` plus
:class:`~specdesk.request.RequestValues` into a request using the helpers in
:mod:`specdesk.request`, sends it, and returns a :class:`RunResult`.

Any HTTP status counts as a result; only transport failures (connection
errors, timeouts) raise :class:`~specdesk.exceptions.RequestFailedError`.
Requests are sent once, never retried.

When a relay URL is configured the request is wrapped in a
:class:`~specdesk.models.RelayPayload` and posted to the relay, which
answers with the upstream status and body.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from specdesk.exceptions import RequestFailedError
from specdesk.models import ParsedOperation, RelayPayload, RequestConfig
from specdesk.output import get_output
from specdesk.request import (
    RequestValues,
    build_headers,
    build_url,
    request_body,
)


@dataclass
class RunResult:
    """Outcome of one executed request."""

    status: int
    elapsed_ms: int
    body: str
    headers: dict[str, str] = field(default_factory=dict)
    url: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def content_type(self) -> str:
        return self.headers.get("content-type", "")


class RequestRunner:
    """Send catalog operations with a shared :class:`httpx.Client`.

    Must be used as a context manager so the connection pool is closed.

    Args:
        config: Timeout and SSL settings.
        relay_url: When set, every request is posted to this relay endpoint.
        transport: Optional httpx transport, for tests.

    Example::

        with RequestRunner(RequestConfig(), relay_url=None) as runner:
            result = runner.run(op, "https://api.tikhub.io", values, api_key)
    """

    def __init__(
        self,
        config: Optional[RequestConfig] = None,
        relay_url: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._config = config or RequestConfig()
        self._relay_url = relay_url
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    def __enter__(self) -> RequestRunner:
        kwargs: dict[str, Any] = {
            "timeout": self._config.timeout,
            "verify": self._config.verify_ssl,
            "follow_redirects": True,
        }
        if self._transport is not None:
            kwargs["transport"] = self._transport
        self._client = httpx.Client(**kwargs)
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    def run(
        self,
        operation: ParsedOperation,
        base_url: str,
        values: RequestValues,
        api_key: str = "",
    ) -> RunResult:
        """Build and send the request for *operation*.

        Raises:
            RequestFailedError: On connection errors or timeouts.
        """
        assert self._client is not None, "RequestRunner must be used as a context manager"

        method = operation.method.value.upper()
        url = build_url(operation, base_url, values.path, values.query)
        headers = build_headers(operation, api_key, values)
        body = request_body(operation, values.body)

        output = get_output()
        output.debug(f"{method} {url}")
        if self._relay_url:
            output.debug(f"via relay {self._relay_url}")

        started = time.perf_counter()
        try:
            if self._relay_url:
                payload = RelayPayload(url=url, method=method, headers=headers, body=body)
                response = self._client.post(self._relay_url, json=payload.model_dump())
            else:
                response = self._client.request(
                    method, url, headers=headers, content=body,
                )
        except httpx.TimeoutException as exc:
            raise RequestFailedError(
                f"Request timed out after {self._config.timeout}s: {method} {url}"
            ) from exc
        except (httpx.ConnectError, httpx.NetworkError) as exc:
            raise RequestFailedError(f"Failed to connect to {url}: {exc}") from exc
        except httpx.HTTPError as exc:
            raise RequestFailedError(f"Request failed: {exc}") from exc
        elapsed_ms = round((time.perf_counter() - started) * 1000)

        output.debug(f"HTTP {response.status_code} in {elapsed_ms} ms")
        return RunResult(
            status=response.status_code,
            elapsed_ms=elapsed_ms,
            body=response.text,
            headers={k.lower(): v for k, v in response.headers.items()},
            url=url,
        )
