"""specdesk -- interactive documentation and request runner for OpenAPI documents.

This package compiles an OpenAPI document into a sorted, UI-ready catalog of
callable operations, complete with synthesized example values and payloads,
and lets the user fill in and execute sample requests against the real
backend.

Typical workflow::

    specdesk --document openapi.json list --app TikTok
    specdesk show fetch_user_profile
    specdesk run fetch_user_profile --query unique_id=tiktok --api-key env:TIKHUB_KEY

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the package.
    parser: Document loading and the document-to-catalog compiler.
    browse: Catalog filtering and grouping helpers.
    request: URL, header and cookie construction for one operation.
    client: httpx-based request executor.
    snippets: Jinja2 code-snippet rendering.
    relay: Allow-listed forwarding endpoint (FastAPI).
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
