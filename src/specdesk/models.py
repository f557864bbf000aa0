"""Canonical Pydantic models shared across all specdesk modules.

This is the single source of truth for data shapes in the project. The models
fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`RequestConfig`, :class:`RelayConfig`, :class:`OutputConfig`,
    :class:`AppGroup` and :class:`GlobalConfig`.

**Compiler output models** -- produced by :mod:`specdesk.parser` and consumed
by the CLI, the request builder and the snippet renderer:
    :class:`HTTPMethod`, :class:`ParameterLocation`, :class:`ParsedParameter`,
    :class:`ParsedOperation`, :class:`DocMeta` and :class:`Catalog`.

Compiler output models are frozen. A catalog is built once per document load
and replaced wholesale on reload, so it can be shared read-only.

Schemas themselves are not modelled: a *schema node* is the plain mapping
found in the document (see :data:`SchemaNode`) and is never mutated.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

SchemaNode = dict[str, Any]
"""A JSON-Schema-like mapping taken verbatim from the document."""


# --- Configuration ---


DEFAULT_HIDDEN_TAGS: tuple[str, ...] = (
    "Bilibili-App-API",
    "Bilibili-Web-API",
    "Demo-API",
    "Douyin-App-V3-API",
    "Douyin-Billboard-API",
    "Douyin-Creator-API",
    "Douyin-Creator-V2-API",
    "Douyin-Search-API",
    "Douyin-Web-API",
    "Douyin-Xingtu-API",
    "Douyin-Xingtu-V2-API",
    "Health-Check",
    "Hybrid-Parsing",
    "Kuaishou-App-API",
    "Kuaishou-Web-API",
    "Lemon8-App-API",
    "Temp-Mail-API",
    "Threads-Web-API",
    "Toutiao-App-API",
    "Toutiao-Web-API",
    "Weibo-App-API",
    "Weibo-Web-API",
    "Weibo-Web-V2-API",
    "Xiaohongshu-App-API",
    "Xiaohongshu-Web-API",
    "Xiaohongshu-Web-V2-API",
    "Xigua-App-V2-API",
    "Zhihu-Web-API",
)
"""Tags hidden from listings unless the user asks for them."""


class AppGroup(BaseModel):
    """One entry of the app-inference table: a label and its keywords.

    The table is always an ordered sequence of these; the first entry whose
    keyword occurs in the operation text wins.
    """

    model_config = ConfigDict(frozen=True)

    label: str
    keywords: tuple[str, ...]


class RequestConfig(BaseModel):
    """Settings for requests executed by :class:`~specdesk.client.RequestRunner`."""

    timeout: float = Field(default=45.0, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class RelayConfig(BaseModel):
    """Allow-list and timeout enforced by the relay, plus where to find one.

    ``url`` is only used by clients: when set, requests are posted to the
    relay instead of going straight to the API host.
    """

    url: Optional[str] = Field(default=None, description="Relay endpoint for clients")
    allowed_hosts: list[str] = Field(
        default_factory=lambda: ["api.tikhub.io", "api.tikhub.dev"]
    )
    allowed_methods: list[str] = Field(
        default_factory=lambda: ["GET", "POST", "PUT", "PATCH", "DELETE"]
    )
    timeout: float = Field(default=30.0, description="Upstream timeout in seconds")


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/specdesk/config.json``.

    Loaded and saved by :func:`~specdesk.config.load_global_config` and
    :func:`~specdesk.config.save_global_config`. See
    :func:`~specdesk.config.resolve_config` for the precedence chain.
    """

    document: Optional[str] = Field(
        default=None, description="URL or file path of the API document"
    )
    base_url: Optional[str] = Field(
        default=None, description="Override the base URL discovered in the document"
    )
    hidden_tags: list[str] = Field(default_factory=lambda: list(DEFAULT_HIDDEN_TAGS))
    app_groups: Optional[list[AppGroup]] = Field(
        default=None, description="Replace the built-in app-inference table"
    )
    request: RequestConfig = Field(default_factory=RequestConfig)
    relay: RelayConfig = Field(default_factory=RelayConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- Compiler output ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised under a path item, in walk order."""

    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"
    OPTIONS = "options"
    HEAD = "head"
    TRACE = "trace"


class ParameterLocation(str, enum.Enum):
    """Locations where an API parameter can appear, per OpenAPI ``in`` field."""

    QUERY = "query"
    PATH = "path"
    HEADER = "header"
    COOKIE = "cookie"


class ParsedParameter(BaseModel):
    """A single parameter of a :class:`ParsedOperation`.

    ``type`` is a coarse tag (``enum``, ``string``, ``integer``, ...) and
    ``default_value`` is the text pre-filled in the input field.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    required: bool = False
    location: ParameterLocation
    description: str = ""
    type: str = "string"
    default_value: str = ""


class ParsedOperation(BaseModel):
    """One normalized (path, method) pair, ready for display and execution.

    ``request_body_raw`` is the synthesized body value and
    ``request_body_template`` its pretty-printed text. The two example
    payloads are synthesized from the preferred success and error responses.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    app: str
    tag: str
    method: HTTPMethod
    path: str
    summary: str = ""
    description: str = ""
    requires_auth: bool = False
    parameters: tuple[ParsedParameter, ...] = ()
    request_body_type: Optional[str] = None
    request_body_template: str = ""
    request_body_raw: Any = None
    response_codes: tuple[str, ...] = ()
    success_example: Any = Field(default_factory=dict)
    error_example: Any = Field(default_factory=dict)

    def parameters_in(self, location: ParameterLocation | str) -> list[ParsedParameter]:
        """Return the parameters declared at *location*, in declaration order."""
        loc = ParameterLocation(location)
        return [param for param in self.parameters if param.location == loc]


class DocMeta(BaseModel):
    """Document-level metadata shown above the catalog."""

    model_config = ConfigDict(frozen=True)

    title: str
    version: str
    description: str = ""
    base_urls: tuple[str, ...] = ()


class Catalog(BaseModel):
    """The compiled, sorted collection of operations plus document metadata.

    See Also:
        :func:`~specdesk.parser.catalog.build_catalog`: The only producer.
    """

    model_config = ConfigDict(frozen=True)

    meta: DocMeta
    operations: tuple[ParsedOperation, ...] = ()

    def __len__(self) -> int:
        return len(self.operations)

    def get(self, operation_id: str) -> Optional[ParsedOperation]:
        """Return the operation with *operation_id*, or ``None``."""
        for operation in self.operations:
            if operation.id == operation_id:
                return operation
        return None


class RelayPayload(BaseModel):
    """Body of a relay request: where to send what."""

    url: Optional[str] = None
    method: Optional[str] = "GET"
    headers: dict[str, Any] = Field(default_factory=dict)
    body: Optional[str] = None
