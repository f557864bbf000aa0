"""Request execution for catalog operations.

:class:`RequestRunner` sends a single operation (directly or through the
relay) and returns a :class:`RunResult`; :func:`format_run_result` prints it.

Example::

    from specdesk.client import RequestRunner, format_run_result

    with RequestRunner(config.request, relay_url=config.relay.url) as runner:
        format_run_result(runner.run(op, base_url, values, api_key))
"""

from specdesk.client.response import extract_body, format_run_result
from specdesk.client.runner import RequestRunner, RunResult

__all__ = ["RequestRunner", "RunResult", "extract_body", "format_run_result"]
