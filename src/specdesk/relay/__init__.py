"""HTTPS relay for clients that cannot reach the API host directly.

* :mod:`~specdesk.relay.core` -- allow-list checks and forwarding.
* :mod:`~specdesk.relay.app` -- the FastAPI app (``POST /api/proxy``).
"""

from specdesk.relay.app import create_relay_app
from specdesk.relay.core import RelayResponse, forward_headers, relay_request, validate_target

__all__ = [
    "RelayResponse",
    "create_relay_app",
    "forward_headers",
    "relay_request",
    "validate_target",
]
