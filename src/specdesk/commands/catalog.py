"""Catalog commands -- browse the operations of an API document and call them.

Registered directly on the root app: ``info``, ``apps``, ``tags``, ``list``,
``show``, ``snippet`` and ``run``.  Every command loads the document named by
``--document`` (or the configured default), compiles it into a
:class:`~specdesk.models.Catalog` and works from there.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

from specdesk.browse import (
    ALL,
    count_by_app,
    count_by_tag,
    filter_operations,
    visible_operations,
)
from specdesk.exceptions import ConfigError, InvalidUsageError, NotFoundError, SpecdeskError
from specdesk.models import Catalog, GlobalConfig, ParameterLocation, ParsedOperation
from specdesk.output import OutputFormat, get_output
from specdesk.request import RequestValues


def _fail(exc: SpecdeskError) -> typer.Exit:
    get_output().error(str(exc))
    return typer.Exit(code=exc.exit_code)


def _resolve(ctx: typer.Context, relay_url: Optional[str] = None) -> GlobalConfig:
    from specdesk.config import resolve_config

    obj = ctx.obj or {}
    try:
        return resolve_config(cli_document=obj.get("document"), cli_relay_url=relay_url)
    except SpecdeskError as exc:
        raise _fail(exc) from None


def _load_catalog(config: GlobalConfig) -> Catalog:
    """Load and compile the configured document."""
    from specdesk.parser import build_catalog, load_document
    from specdesk.parser.normalizer import DEFAULT_APP_GROUPS

    output = get_output()
    if not config.document:
        output.info("Pass --document <url|file> or run: specdesk config set document <url>")
        raise _fail(ConfigError("No API document configured"))

    output.debug(f"Loading document: {config.document}")
    try:
        raw = load_document(config.document)
        catalog = build_catalog(raw, config.app_groups or DEFAULT_APP_GROUPS)
    except SpecdeskError as exc:
        raise _fail(exc) from None
    output.debug(f"Compiled {len(catalog)} operations")
    return catalog


def _get_operation(catalog: Catalog, operation_id: str) -> ParsedOperation:
    operation = catalog.get(operation_id)
    if operation is None:
        get_output().info("Run 'specdesk list' to see operation ids")
        raise _fail(NotFoundError(f"No operation with id '{operation_id}'"))
    return operation


def _parse_pairs(items: Optional[list[str]], option: str) -> dict[str, str]:
    """Parse repeated ``name=value`` options into a dict."""
    pairs: dict[str, str] = {}
    for item in items or []:
        name, sep, value = item.partition("=")
        if not sep or not name.strip():
            raise _fail(InvalidUsageError(f"Expected name=value for {option}, got: {item}"))
        pairs[name.strip()] = value
    return pairs


def _read_body(body: Optional[str]) -> Optional[str]:
    """``@path`` reads the body from a file; anything else is the body itself."""
    if body is None or not body.startswith("@"):
        return body
    path = Path(body[1:]).expanduser()
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise _fail(InvalidUsageError(f"Cannot read body file {path}: {exc}")) from None


def _request_values(
    operation: ParsedOperation,
    path: Optional[list[str]],
    query: Optional[list[str]],
    header: Optional[list[str]],
    cookie: Optional[list[str]],
    body: Optional[str],
) -> RequestValues:
    """Start from the operation's defaults and apply the user's overrides."""
    values = RequestValues.defaults_for(operation)
    output = get_output()
    for location, items, target in (
        (ParameterLocation.PATH, path, values.path),
        (ParameterLocation.QUERY, query, values.query),
        (ParameterLocation.HEADER, header, values.header),
        (ParameterLocation.COOKIE, cookie, values.cookie),
    ):
        overrides = _parse_pairs(items, f"--{location.value}")
        for name in overrides:
            if name not in target:
                output.warning(f"'{name}' is not a declared {location.value} parameter")
        target.update(overrides)

    body_text = _read_body(body)
    if body_text is not None:
        values.body = body_text
    return values


def _base_url(config: GlobalConfig, catalog: Catalog, cli_base_url: Optional[str]) -> str:
    return cli_base_url or config.base_url or catalog.meta.base_urls[0]


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #


def info_command(ctx: typer.Context) -> None:
    """Show document title, version, base URLs and operation count."""
    config = _resolve(ctx)
    catalog = _load_catalog(config)
    meta = catalog.meta
    get_output().print_record(
        {
            "title": meta.title,
            "version": meta.version,
            "base_urls": list(meta.base_urls),
            "operations": len(catalog),
            "description": meta.description,
        },
        title=meta.title,
    )


def apps_command(
    ctx: typer.Context,
    show_hidden: bool = typer.Option(False, "--all", "-a", help="Include hidden tags."),
) -> None:
    """List apps with their operation counts.

    Example::

        specdesk apps
        specdesk apps --json
    """
    config = _resolve(ctx)
    catalog = _load_catalog(config)
    operations = visible_operations(catalog.operations, set(config.hidden_tags), show_hidden)
    rows = [[app, str(count)] for app, count in count_by_app(operations)]
    get_output().print_table(["App", "Operations"], rows, title=f"Apps ({len(rows)})")


def tags_command(
    ctx: typer.Context,
    app: str = typer.Option(ALL, "--app", help="Only tags of this app."),
    show_hidden: bool = typer.Option(False, "--all", "-a", help="Include hidden tags."),
) -> None:
    """List tags with their operation counts."""
    config = _resolve(ctx)
    catalog = _load_catalog(config)
    operations = filter_operations(
        visible_operations(catalog.operations, set(config.hidden_tags), show_hidden),
        app=app,
    )
    rows = [[tag, str(count)] for tag, count in count_by_tag(operations)]
    get_output().print_table(["Tag", "Operations"], rows, title=f"Tags ({len(rows)})")


def list_command(
    ctx: typer.Context,
    app: str = typer.Option(ALL, "--app", help="Filter by app."),
    tag: str = typer.Option(ALL, "--tag", help="Filter by tag."),
    search: str = typer.Option("", "--search", "-s", help="Search path, summary, id, tag and app."),
    show_hidden: bool = typer.Option(False, "--all", "-a", help="Include hidden tags."),
) -> None:
    """List operations in (tag, path, method) order.

    Example::

        specdesk list --app TikTok --search user
        specdesk list --tag Demo-API --all
    """
    config = _resolve(ctx)
    catalog = _load_catalog(config)
    operations = filter_operations(
        visible_operations(catalog.operations, set(config.hidden_tags), show_hidden),
        app=app,
        tag=tag,
        search=search,
    )

    rows = [
        [op.id, op.method.value.upper(), op.path, op.summary, op.app, op.tag]
        for op in operations
    ]
    output = get_output()
    output.print_table(
        ["ID", "Method", "Path", "Summary", "App", "Tag"],
        rows,
        title=f"{catalog.meta.title} -- Operations ({len(rows)})",
    )
    if not rows:
        output.info("No operations match.")


def show_command(
    ctx: typer.Context,
    operation_id: str = typer.Argument(help="Operation id (see 'specdesk list')."),
) -> None:
    """Show one operation: parameters, body template and response examples."""
    config = _resolve(ctx)
    catalog = _load_catalog(config)
    op = _get_operation(catalog, operation_id)
    output = get_output()

    if output.format == OutputFormat.JSON:
        output.print_data(json.dumps(op.model_dump(mode="json"), indent=2, ensure_ascii=False))
        return

    output.print_record(
        {
            "id": op.id,
            "method": op.method.value.upper(),
            "path": op.path,
            "summary": op.summary,
            "app": op.app,
            "tag": op.tag,
            "requires_auth": op.requires_auth,
            "body_type": op.request_body_type or "-",
            "responses": list(op.response_codes),
            "description": op.description,
        },
        title=op.id,
    )
    if op.parameters:
        output.print_table(
            ["Name", "In", "Type", "Required", "Default", "Description"],
            [
                [
                    p.name,
                    p.location.value,
                    p.type,
                    "yes" if p.required else "",
                    p.default_value,
                    p.description,
                ]
                for p in op.parameters
            ],
            title="Parameters",
        )
    if op.request_body_template:
        output.info("Request body:")
        output.print_code(op.request_body_template, "json")
    output.info("Success example:")
    output.format_response(op.success_example)
    output.info("Error example:")
    output.format_response(op.error_example)


def snippet_command(
    ctx: typer.Context,
    operation_id: str = typer.Argument(help="Operation id."),
    lang: str = typer.Option("python", "--lang", "-l", help="shell, node, ruby, php or python."),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="Override the base URL."),
    api_key: Optional[str] = typer.Option(
        None, "--api-key", help="API key, or env:VAR / file:PATH / prompt."
    ),
    path: Optional[list[str]] = typer.Option(None, "--path", help="Path parameter name=value."),
    query: Optional[list[str]] = typer.Option(None, "--query", help="Query parameter name=value."),
    header: Optional[list[str]] = typer.Option(None, "--header", help="Header parameter name=value."),
    cookie: Optional[list[str]] = typer.Option(None, "--cookie", help="Cookie parameter name=value."),
    body: Optional[str] = typer.Option(None, "--body", help="Request body, or @file."),
) -> None:
    """Print a code snippet that calls one operation.

    Without an API key the snippet uses a YOUR_API_KEY placeholder.

    Example::

        specdesk snippet fetch_user_profile --lang shell --query unique_id=tiktok
    """
    from specdesk.config import resolve_api_key
    from specdesk.snippets import LEXERS, SnippetContext, build_snippet

    config = _resolve(ctx)
    catalog = _load_catalog(config)
    op = _get_operation(catalog, operation_id)
    values = _request_values(op, path, query, header, cookie, body)

    try:
        snippet = build_snippet(
            lang,
            op,
            SnippetContext(
                base_url=_base_url(config, catalog, base_url),
                global_api_key=resolve_api_key(api_key),
                values=values,
            ),
        )
    except SpecdeskError as exc:
        raise _fail(exc) from None
    get_output().print_code(snippet, LEXERS[lang])


def run_command(
    ctx: typer.Context,
    operation_id: str = typer.Argument(help="Operation id."),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="Override the base URL."),
    api_key: Optional[str] = typer.Option(
        None, "--api-key", help="API key, or env:VAR / file:PATH / prompt."
    ),
    relay: Optional[str] = typer.Option(None, "--relay", help="Send through this relay endpoint."),
    path: Optional[list[str]] = typer.Option(None, "--path", help="Path parameter name=value."),
    query: Optional[list[str]] = typer.Option(None, "--query", help="Query parameter name=value."),
    header: Optional[list[str]] = typer.Option(None, "--header", help="Header parameter name=value."),
    cookie: Optional[list[str]] = typer.Option(None, "--cookie", help="Cookie parameter name=value."),
    body: Optional[str] = typer.Option(None, "--body", help="Request body, or @file."),
) -> None:
    """Send one operation and print the response.

    The status line goes to stderr and the body to stdout.  The exit code is
    0 for any HTTP response; only transport failures exit non-zero.

    Example::

        specdesk run fetch_user_profile --query unique_id=tiktok --api-key env:TIKHUB_KEY
    """
    from specdesk.client import RequestRunner, format_run_result
    from specdesk.config import resolve_api_key

    config = _resolve(ctx, relay_url=relay)
    catalog = _load_catalog(config)
    op = _get_operation(catalog, operation_id)
    values = _request_values(op, path, query, header, cookie, body)

    output = get_output()
    try:
        key = resolve_api_key(api_key)
        if op.requires_auth and not key:
            output.warning("This operation requires auth and no API key was given")
        with RequestRunner(config.request, relay_url=config.relay.url) as runner:
            result = runner.run(op, _base_url(config, catalog, base_url), values, key)
    except SpecdeskError as exc:
        raise _fail(exc) from None
    format_run_result(result)
