"""Normalize every path + method of an OpenAPI document into operation records.

This module walks the ``paths`` object and builds one
:class:`~specdesk.models.ParsedOperation` per declared method.  Each record
carries everything the UI, the request builder and the snippet renderer
need: merged parameters with pre-filled text values, an English label, the
inferred product grouping, a request-body template and example payloads
for the success and error responses.

The single public entry point is :func:`normalize_operations`.  The helpers
each handle one concern:

* ``_merge_parameters`` -- path-level and operation-level parameter merge.
* ``_parse_parameter`` -- coarse type tag and default text per parameter.
* :func:`infer_app` -- keyword-table product grouping.
* ``_request_body`` -- body media type, example and template text.
* ``_response_examples`` -- preferred success and error payloads.

Nothing here raises on incomplete declarations; every missing field has a
default so that one sloppy operation never sinks the whole document.
"""

from __future__ import annotations

import json
from typing import Any, Mapping, Optional, Sequence

from specdesk.models import (
    AppGroup,
    HTTPMethod,
    ParameterLocation,
    ParsedOperation,
    ParsedParameter,
    SchemaNode,
)
from specdesk.parser.examples import media_example
from specdesk.parser.resolver import ref_name, resolve_schema, schema_table
from specdesk.parser.text import english_only

DEFAULT_TAG = "Other"
DEFAULT_APP = "Other"

METHODS_WITHOUT_BODY = frozenset({HTTPMethod.GET, HTTPMethod.HEAD, HTTPMethod.TRACE})
EMPTY_BODY_TEMPLATE = "{\n  \n}"

# Specific products first: the umbrella entry would also match many of them.
DEFAULT_APP_GROUPS: tuple[AppGroup, ...] = (
    AppGroup(label="TikTok", keywords=("tiktok",)),
    AppGroup(label="Douyin", keywords=("douyin",)),
    AppGroup(label="Instagram", keywords=("instagram",)),
    AppGroup(label="Xiaohongshu", keywords=("xiaohongshu",)),
    AppGroup(label="Lemon8", keywords=("lemon8",)),
    AppGroup(label="YouTube", keywords=("youtube",)),
    AppGroup(label="Twitter", keywords=("twitter",)),
    AppGroup(label="Threads", keywords=("threads",)),
    AppGroup(label="Reddit", keywords=("reddit",)),
    AppGroup(label="Bilibili", keywords=("bilibili",)),
    AppGroup(label="Kuaishou", keywords=("kuaishou",)),
    AppGroup(label="Weibo", keywords=("weibo",)),
    AppGroup(label="WeChat", keywords=("wechat",)),
    AppGroup(label="Zhihu", keywords=("zhihu",)),
    AppGroup(label="Sora2", keywords=("sora2",)),
    AppGroup(label="Toutiao", keywords=("toutiao",)),
    AppGroup(label="Xigua", keywords=("xigua",)),
    AppGroup(label="Pipixia", keywords=("pipixia",)),
    AppGroup(label="LinkedIn", keywords=("linkedin",)),
    AppGroup(
        label="TikHub Core",
        keywords=("tikhub", "health", "demo", "temp_mail", "temp-mail"),
    ),
)


def normalize_operations(
    document: Mapping[str, Any],
    app_groups: Sequence[AppGroup] = DEFAULT_APP_GROUPS,
) -> list[ParsedOperation]:
    """Build one :class:`~specdesk.models.ParsedOperation` per path + method.

    Paths are visited in document order and methods in
    :class:`~specdesk.models.HTTPMethod` order, so the output order (and the
    winner of any operation-id collision) is deterministic.

    Args:
        document: The deserialised OpenAPI document.
        app_groups: Ordered app-inference table; first match wins.

    Returns:
        The operations in walk order (unsorted).
    """
    schemas = schema_table(document)
    parameter_table = _component_table(document, "parameters")
    paths = document.get("paths") or {}
    if not isinstance(paths, dict):
        return []
    operations: list[ParsedOperation] = []
    seen_ids: set[str] = set()

    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            continue
        path_params = _resolve_parameters(path_item.get("parameters"), parameter_table)

        for method in HTTPMethod:
            operation = path_item.get(method.value)
            if not isinstance(operation, dict):
                continue

            op_params = _resolve_parameters(operation.get("parameters"), parameter_table)
            merged = _merge_parameters(path_params, op_params)

            tags = operation.get("tags") or []
            tag = str(tags[0]) if isinstance(tags, list) and tags else DEFAULT_TAG
            op_id = _unique_id(
                _text(operation.get("operationId")) or f"{method.value}_{path}", seen_ids
            )

            body_type, body_raw, body_template = _request_body(
                operation.get("requestBody"), method, schemas
            )
            responses = operation.get("responses") or {}
            if not isinstance(responses, dict):
                responses = {}
            codes = tuple(str(code) for code in responses)
            success, error = _response_examples(responses, codes, schemas)

            security = operation.get("security")
            operations.append(
                ParsedOperation(
                    id=op_id,
                    app=infer_app(tag, path, op_id, app_groups),
                    tag=tag,
                    method=method,
                    path=path,
                    summary=english_only(_text(operation.get("summary"))) or op_id,
                    description=english_only(_text(operation.get("description"))),
                    requires_auth=isinstance(security, list) and len(security) > 0,
                    parameters=tuple(_parse_parameter(p, schemas) for p in merged),
                    request_body_type=body_type,
                    request_body_template=body_template,
                    request_body_raw=body_raw,
                    response_codes=codes,
                    success_example=success,
                    error_example=error,
                )
            )

    return operations


def infer_app(
    tag: str,
    path: str,
    operation_id: str,
    app_groups: Sequence[AppGroup] = DEFAULT_APP_GROUPS,
) -> str:
    """Return the label of the first group whose keyword occurs in the operation.

    The haystack is ``"<tag> <path> <operation_id>"`` lower-cased; matching
    is plain substring containment.

    Example::

        >>> infer_app("TikTok-Web-API", "/api/v1/tiktok/web/fetch_user", "fetch_user")
        'TikTok'
    """
    haystack = f"{tag} {path} {operation_id}".lower()
    for group in app_groups:
        if any(keyword.lower() in haystack for keyword in group.keywords):
            return group.label
    return DEFAULT_APP


def _text(value: Any) -> str:
    # YAML scalars such as `2024` or `yes` load as int or bool.
    return "" if value is None else str(value)


def _unique_id(candidate: str, seen: set[str]) -> str:
    # First-seen keeps the plain id; later duplicates get a numeric suffix.
    op_id = candidate
    counter = 2
    while op_id in seen:
        op_id = f"{candidate}_{counter}"
        counter += 1
    seen.add(op_id)
    return op_id


def _component_table(document: Mapping[str, Any], section: str) -> dict[str, Any]:
    components = document.get("components") or {}
    if not isinstance(components, dict):
        return {}
    table = components.get(section) or {}
    return table if isinstance(table, dict) else {}


def _resolve_parameters(
    params: Any,
    parameter_table: Mapping[str, Any],
) -> list[dict[str, Any]]:
    """Return the parameter dicts of a declaration list, resolving ``$ref`` entries once."""
    if not isinstance(params, list):
        return []
    resolved: list[dict[str, Any]] = []
    for param in params:
        if not isinstance(param, dict):
            continue
        ref = param.get("$ref")
        if isinstance(ref, str):
            target = parameter_table.get(ref_name(ref))
            if not isinstance(target, dict):
                continue
            param = target
        resolved.append(param)
    return resolved


def _param_key(param: Mapping[str, Any]) -> tuple[str, str]:
    return (str(param.get("name", "")), str(param.get("in", "")))


def _merge_parameters(
    path_params: list[dict[str, Any]],
    op_params: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Merge path-level and operation-level parameters.

    Path-level entries come first, followed by operation-level entries not
    already present.  When both levels declare the same ``(name, in)`` pair
    the operation-level declaration takes the path-level slot.  Within a
    level, the first occurrence of a pair wins.
    """
    op_first: dict[tuple[str, str], dict[str, Any]] = {}
    for param in op_params:
        op_first.setdefault(_param_key(param), param)

    merged: list[dict[str, Any]] = []
    placed: set[tuple[str, str]] = set()
    for param in [*path_params, *op_params]:
        key = _param_key(param)
        if key in placed:
            continue
        placed.add(key)
        merged.append(op_first.get(key, param))
    return merged


def schema_type(schema: Optional[SchemaNode]) -> str:
    """Return the coarse type tag of a (resolved) schema.

    ``"enum"`` when enumerated values are declared, otherwise the declared
    type (the first non-null entry of an OpenAPI 3.1 type array), defaulting
    to ``"string"``.
    """
    if not isinstance(schema, dict):
        return "string"
    enum_values = schema.get("enum")
    if isinstance(enum_values, list) and enum_values:
        return "enum"
    type_value = schema.get("type")
    if isinstance(type_value, list):
        non_null = [t for t in type_value if t != "null"]
        return str(non_null[0]) if non_null else "string"
    return str(type_value) if type_value else "string"


def to_text(value: Any) -> str:
    """Render an example or default value as input-field text."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=str)
    return str(value)


def default_parameter_value(
    param: Mapping[str, Any],
    schema: Optional[SchemaNode],
) -> str:
    """Return the text pre-filled for a parameter.

    Priority: parameter ``example``, schema ``example``, schema ``default``,
    first enum value, then ``"1"`` for numbers, ``"true"`` for booleans and
    ``""`` otherwise.
    """
    if param.get("example") is not None:
        return to_text(param["example"])
    if isinstance(schema, dict):
        if schema.get("example") is not None:
            return to_text(schema["example"])
        if schema.get("default") is not None:
            return to_text(schema["default"])
        enum_values = schema.get("enum")
        if isinstance(enum_values, list) and enum_values:
            return to_text(enum_values[0])
    coarse = schema_type(schema)
    if coarse in ("integer", "number"):
        return "1"
    if coarse == "boolean":
        return "true"
    return ""


def _parse_parameter(param: Mapping[str, Any], schemas: Mapping[str, Any]) -> ParsedParameter:
    try:
        location = ParameterLocation(param.get("in", "query"))
    except ValueError:
        location = ParameterLocation.QUERY

    schema = resolve_schema(param.get("schema"), schemas)
    return ParsedParameter(
        name=str(param.get("name", "")),
        required=bool(param.get("required", False)),
        location=location,
        description=english_only(_text(param.get("description"))),
        type=schema_type(schema),
        default_value=default_parameter_value(param, schema),
    )


def _request_body(
    body: Any,
    method: HTTPMethod,
    schemas: Mapping[str, Any],
) -> tuple[Optional[str], Any, str]:
    """Return ``(media type, raw example, template text)`` for a request body."""
    content = body.get("content") if isinstance(body, dict) else None
    if not isinstance(content, dict):
        content = None

    body_type = next(iter(content), None) if content else None
    raw = media_example(content, schemas)
    if raw is not None:
        template = json.dumps(raw, indent=2, ensure_ascii=False, default=str)
    elif method in METHODS_WITHOUT_BODY:
        template = ""
    else:
        template = EMPTY_BODY_TEMPLATE
    return body_type, raw, template


def _response_examples(
    responses: Mapping[str, Any],
    codes: tuple[str, ...],
    schemas: Mapping[str, Any],
) -> tuple[Any, Any]:
    """Return the ``(success, error)`` example payloads."""
    if not codes:
        return {}, {}

    success_code = "200" if "200" in codes else codes[0]
    if "422" in codes:
        error_code = "422"
    else:
        error_code = next((c for c in codes if c.startswith(("4", "5"))), success_code)

    return (
        _response_example(responses, success_code, codes[0], schemas),
        _response_example(responses, error_code, codes[0], schemas),
    )


def _response_example(
    responses: Mapping[str, Any],
    preferred: str,
    first: str,
    schemas: Mapping[str, Any],
) -> Any:
    for code in (preferred, first):
        response = _lookup_response(responses, code)
        content = response.get("content") if isinstance(response, dict) else None
        example = media_example(content, schemas)
        if example is not None:
            return example
    return {}


def _lookup_response(responses: Mapping[str, Any], code: str) -> Any:
    # YAML documents may key responses by int.
    if code in responses:
        return responses[code]
    if code.isdigit():
        return responses.get(int(code))
    return None
