"""Tests for per-operation normalization (specdesk.parser.normalizer)."""

from __future__ import annotations

import datetime
from typing import Any

import pytest
import yaml

from specdesk.models import AppGroup, HTTPMethod, ParameterLocation, ParsedOperation
from specdesk.parser.catalog import build_catalog
from specdesk.parser.normalizer import (
    DEFAULT_APP,
    DEFAULT_TAG,
    EMPTY_BODY_TEMPLATE,
    default_parameter_value,
    infer_app,
    normalize_operations,
    schema_type,
    to_text,
)


def _doc(paths: dict[str, Any], **extra: Any) -> dict[str, Any]:
    return {"openapi": "3.1.0", "info": {"title": "t", "version": "1"}, "paths": paths, **extra}


def _by_id(operations: list[ParsedOperation]) -> dict[str, ParsedOperation]:
    return {op.id: op for op in operations}


# ---------------------------------------------------------------------------
# Walk and identity
# ---------------------------------------------------------------------------


class TestWalk:
    def test_one_operation_per_method(self, sample_raw: dict[str, Any]) -> None:
        operations = normalize_operations(sample_raw)
        assert len(operations) == 8

    def test_walk_order_is_document_then_method_order(self) -> None:
        doc = _doc({
            "/b": {"delete": {"operationId": "b_delete"}, "get": {"operationId": "b_get"}},
            "/a": {"post": {"operationId": "a_post"}},
        })
        assert [op.id for op in normalize_operations(doc)] == ["b_get", "b_delete", "a_post"]

    def test_non_method_keys_ignored(self) -> None:
        doc = _doc({"/a": {"summary": "x", "parameters": [], "get": {}}})
        assert len(normalize_operations(doc)) == 1

    def test_synthesized_id(self) -> None:
        doc = _doc({"/health": {"get": {}}})
        (op,) = normalize_operations(doc)
        assert op.id == "get_/health"
        assert op.summary == "get_/health"

    def test_duplicate_ids_get_suffixes(self) -> None:
        doc = _doc({
            "/a": {"get": {"operationId": "dup"}},
            "/b": {"get": {"operationId": "dup"}},
            "/c": {"get": {"operationId": "dup"}},
        })
        ops = normalize_operations(doc)
        assert [op.id for op in ops] == ["dup", "dup_2", "dup_3"]
        assert [op.path for op in ops] == ["/a", "/b", "/c"]

    def test_sample_duplicate(self, sample_raw: dict[str, Any]) -> None:
        ops = _by_id(normalize_operations(sample_raw))
        assert ops["fetch_user_profile"].path == "/api/v1/tiktok/web/fetch_user_profile"
        assert ops["fetch_user_profile_2"].path == "/api/v1/demo/echo"

    def test_missing_tags_default(self) -> None:
        (op,) = normalize_operations(_doc({"/x": {"get": {"tags": []}}}))
        assert op.tag == DEFAULT_TAG

    def test_malformed_entries_are_skipped(self) -> None:
        doc = _doc({"/a": "nope", "/b": {"get": "nope", "post": {"operationId": "ok"}}})
        assert [op.id for op in normalize_operations(doc)] == ["ok"]


# ---------------------------------------------------------------------------
# Labels and auth
# ---------------------------------------------------------------------------


class TestLabels:
    def test_english_summary(self, profile_op: ParsedOperation) -> None:
        assert profile_op.summary == "Get user profile"

    def test_cjk_only_description_is_empty(self, profile_op: ParsedOperation) -> None:
        assert profile_op.description == ""

    def test_cjk_only_summary_falls_back_to_id(self) -> None:
        (op,) = normalize_operations(_doc({"/x": {"get": {"operationId": "x", "summary": "仅中文"}}}))
        assert op.summary == "x"

    def test_requires_auth(self, sample_raw: dict[str, Any]) -> None:
        ops = _by_id(normalize_operations(sample_raw))
        assert ops["fetch_user_profile"].requires_auth is True
        assert ops["fetch_video"].requires_auth is False  # security: []
        assert ops["delete_note"].requires_auth is False  # no security key


# ---------------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------------


class TestParameters:
    def test_merge_order_and_override(self, profile_op: ParsedOperation) -> None:
        names = [(p.name, p.location) for p in profile_op.parameters]
        assert names == [
            ("unique_id", ParameterLocation.QUERY),
            ("X-Trace", ParameterLocation.HEADER),
            ("count", ParameterLocation.QUERY),
            ("session", ParameterLocation.COOKIE),
        ]
        unique_id = profile_op.parameters[0]
        assert unique_id.required is True
        assert unique_id.description == "Unique id"
        assert unique_id.default_value == "tiktok"

    def test_path_level_kept_when_not_overridden(self, profile_op: ParsedOperation) -> None:
        trace = profile_op.parameters[1]
        assert trace.default_value == ""
        assert trace.type == "string"

    def test_first_occurrence_wins_within_level(self) -> None:
        doc = _doc({
            "/x": {
                "get": {
                    "parameters": [
                        {"name": "q", "in": "query", "description": "first"},
                        {"name": "q", "in": "query", "description": "second"},
                    ]
                }
            }
        })
        (op,) = normalize_operations(doc)
        assert len(op.parameters) == 1
        assert op.parameters[0].description == "first"

    def test_same_name_different_location_kept(self) -> None:
        doc = _doc({
            "/x": {
                "get": {
                    "parameters": [
                        {"name": "id", "in": "query"},
                        {"name": "id", "in": "header"},
                    ]
                }
            }
        })
        (op,) = normalize_operations(doc)
        assert [p.location for p in op.parameters] == [
            ParameterLocation.QUERY,
            ParameterLocation.HEADER,
        ]

    def test_parameter_refs_are_resolved(self) -> None:
        doc = _doc(
            {"/x": {"get": {"parameters": [{"$ref": "#/components/parameters/Limit"}]}}},
            components={
                "parameters": {
                    "Limit": {"name": "limit", "in": "query", "schema": {"type": "integer"}}
                }
            },
        )
        (op,) = normalize_operations(doc)
        assert op.parameters[0].name == "limit"
        assert op.parameters[0].default_value == "1"

    def test_unknown_location_becomes_query(self) -> None:
        doc = _doc({"/x": {"get": {"parameters": [{"name": "f", "in": "formData"}]}}})
        (op,) = normalize_operations(doc)
        assert op.parameters[0].location == ParameterLocation.QUERY

    def test_defaults(self, profile_op: ParsedOperation) -> None:
        by_name = {p.name: p for p in profile_op.parameters}
        assert by_name["count"].type == "integer"
        assert by_name["count"].default_value == "1"
        assert by_name["session"].default_value == "abc"


class TestParameterHelpers:
    @pytest.mark.parametrize(
        "schema, expected",
        [
            (None, "string"),
            ({}, "string"),
            ({"type": "integer"}, "integer"),
            ({"type": "string", "enum": ["a"]}, "enum"),
            ({"type": ["null", "boolean"]}, "boolean"),
            ({"type": ["null"]}, "string"),
        ],
    )
    def test_schema_type(self, schema: Any, expected: str) -> None:
        assert schema_type(schema) == expected

    @pytest.mark.parametrize(
        "param, schema, expected",
        [
            ({"example": 5}, {"example": 6}, "5"),
            ({}, {"example": True}, "true"),
            ({}, {"default": False}, "false"),
            ({}, {"enum": ["x", "y"]}, "x"),
            ({}, {"type": "number"}, "1"),
            ({}, {"type": "boolean"}, "true"),
            ({}, {"type": "string"}, ""),
            ({}, None, ""),
            ({"example": [1, 2]}, None, "[1,2]"),
        ],
    )
    def test_default_parameter_value(self, param: Any, schema: Any, expected: str) -> None:
        assert default_parameter_value(param, schema) == expected

    def test_to_text(self) -> None:
        assert to_text({"a": "é"}) == '{"a":"é"}'
        assert to_text(None) == ""
        assert to_text(3.5) == "3.5"


# ---------------------------------------------------------------------------
# Request body and responses
# ---------------------------------------------------------------------------


class TestRequestBody:
    def test_json_body_template(self, note_op: ParsedOperation) -> None:
        assert note_op.request_body_type == "application/json"
        assert note_op.request_body_raw == {
            "id": 1,
            "text": "string",
            "tags": ["string"],
            "created_at": "2026-01-01T00:00:00Z",
        }
        assert note_op.request_body_template.startswith('{\n  "id": 1,')

    def test_no_body_on_get(self, profile_op: ParsedOperation) -> None:
        assert profile_op.request_body_type is None
        assert profile_op.request_body_template == ""

    def test_placeholder_for_bodyless_write(self, sample_raw: dict[str, Any]) -> None:
        op = _by_id(normalize_operations(sample_raw))["delete_note"]
        assert op.request_body_type is None
        assert op.request_body_template == EMPTY_BODY_TEMPLATE

    def test_text_body(self, echo_op: ParsedOperation) -> None:
        assert echo_op.request_body_type == "text/plain"
        assert echo_op.request_body_raw == "string"


class TestResponses:
    def test_codes_in_declaration_order(self, note_op: ParsedOperation) -> None:
        assert note_op.response_codes == ("201", "500")

    def test_success_and_422_error(self, profile_op: ParsedOperation) -> None:
        assert profile_op.success_example == {
            "code": 1,
            "ok": True,
            "user": {"nickname": "TikTok", "joined": "2026-01-01", "level": "gold"},
        }
        assert profile_op.error_example == {"detail": [{"loc": ["string"], "msg": "string"}]}

    def test_first_error_code_and_empty_success(self, note_op: ParsedOperation) -> None:
        assert note_op.success_example == {}
        assert note_op.error_example == {"detail": "boom"}

    def test_error_falls_back_to_success(self, video_op: ParsedOperation) -> None:
        expected = {"code": 200, "data": {"aweme_id": "7300000000"}}
        assert video_op.success_example == expected
        assert video_op.error_example == expected

    def test_no_responses(self) -> None:
        (op,) = normalize_operations(_doc({"/x": {"get": {}}}))
        assert op.response_codes == ()
        assert op.success_example == {}
        assert op.error_example == {}

    def test_int_response_keys(self) -> None:
        doc = _doc({
            "/x": {
                "get": {
                    "responses": {
                        200: {"content": {"application/json": {"example": {"ok": 1}}}}
                    }
                }
            }
        })
        (op,) = normalize_operations(doc)
        assert op.response_codes == ("200",)
        assert op.success_example == {"ok": 1}


# ---------------------------------------------------------------------------
# App inference
# ---------------------------------------------------------------------------


class TestInferApp:
    def test_first_match_wins(self) -> None:
        assert infer_app("TikTok-Web-API", "/api/v1/tiktok/web/x", "x") == "TikTok"

    def test_umbrella_entry_is_last(self) -> None:
        assert infer_app("TikHub-Tiktok", "/api/v1/tikhub/x", "x") == "TikTok"
        assert infer_app("TikHub-User-API", "/api/v1/tikhub/user", "get_user") == "TikHub Core"

    def test_match_in_operation_id(self) -> None:
        assert infer_app("Misc", "/x", "fetch_youtube_video") == "YouTube"

    def test_no_match(self) -> None:
        assert infer_app("Tree-API", "/api/v1/recursive/tree", "get_tree") == DEFAULT_APP

    def test_custom_table(self) -> None:
        groups = [AppGroup(label="Pets", keywords=("pet", "dog"))]
        assert infer_app("Animals", "/dogs", "list", groups) == "Pets"
        assert infer_app("Tiktok", "/x", "x", groups) == DEFAULT_APP

    def test_sample_apps(self, sample_raw: dict[str, Any]) -> None:
        ops = _by_id(normalize_operations(sample_raw))
        assert ops["fetch_video"].app == "Douyin"
        assert ops["get_/api/v1/health/check"].app == "TikHub Core"
        assert ops["fetch_user_profile_2"].app == "TikHub Core"
        assert ops["dangling"].app == "TikTok"
        assert ops["get_tree"].app == "Other"


class TestMethods:
    def test_method_enum(self, note_op: ParsedOperation) -> None:
        assert note_op.method is HTTPMethod.POST


# ---------------------------------------------------------------------------
# YAML scalar types
# ---------------------------------------------------------------------------


YAML_DOCUMENT = """\
openapi: 3.0.3
info:
  title: Dated API
  version: 1
paths:
  /reports:
    post:
      operationId: 12345
      summary: 2024
      description: true
      parameters:
        - name: since
          in: query
          description: 2024
          schema:
            type: string
            example: 2024-05-01
      requestBody:
        content:
          application/json:
            example:
              day: 2024-05-01
              tags: [2024-05-02]
      responses:
        200:
          description: ok
          content:
            application/json:
              example:
                created: 2024-05-01
"""


class TestYamlScalars:
    @pytest.fixture()
    def yaml_op(self) -> ParsedOperation:
        (op,) = normalize_operations(yaml.safe_load(YAML_DOCUMENT))
        return op

    def test_numeric_operation_id_becomes_text(self, yaml_op: ParsedOperation) -> None:
        assert yaml_op.id == "12345"

    def test_numeric_summary_and_bool_description(self, yaml_op: ParsedOperation) -> None:
        assert yaml_op.summary == "2024"
        assert yaml_op.description == "True"
        assert yaml_op.parameters[0].description == "2024"

    def test_date_examples_render_as_text(self, yaml_op: ParsedOperation) -> None:
        assert yaml_op.parameters[0].default_value == "2024-05-01"
        assert yaml_op.request_body_template == (
            '{\n  "day": "2024-05-01",\n  "tags": [\n    "2024-05-02"\n  ]\n}'
        )
        assert yaml_op.request_body_raw == {"day": datetime.date(2024, 5, 1), "tags": [datetime.date(2024, 5, 2)]}

    def test_int_response_keys(self, yaml_op: ParsedOperation) -> None:
        assert yaml_op.response_codes == ("200",)
        assert yaml_op.success_example == {"created": datetime.date(2024, 5, 1)}

    def test_date_container_default(self) -> None:
        param = {"example": {"on": datetime.date(2024, 5, 1)}}
        assert default_parameter_value(param, None) == '{"on":"2024-05-01"}'

    def test_build_catalog_accepts_yaml(self) -> None:
        catalog = build_catalog(yaml.safe_load(YAML_DOCUMENT))
        assert [op.id for op in catalog.operations] == ["12345"]
        assert catalog.meta.version == "1"
