"""Print a :class:`~specdesk.client.runner.RunResult` through the output system.

The status line goes to stderr, the body to stdout, so ``specdesk run ... |
jq`` sees only the response body.
"""

from __future__ import annotations

import json
from typing import Any

from specdesk.client.runner import RunResult
from specdesk.output import get_output


def format_run_result(result: RunResult) -> None:
    """Write ``HTTP <status> (<ms> ms)`` to stderr and the body to stdout."""
    output = get_output()
    status_line = f"HTTP {result.status} ({result.elapsed_ms} ms)"
    if result.ok:
        output.success(status_line)
    else:
        output.warning(status_line)

    data = extract_body(result)
    if data is not None:
        output.format_response(data, result.content_type or "application/json")


def extract_body(result: RunResult) -> Any:
    """Return the decoded JSON body, the raw text, or ``None`` when empty."""
    if not result.body:
        return None
    try:
        return json.loads(result.body)
    except json.JSONDecodeError:
        return result.body
