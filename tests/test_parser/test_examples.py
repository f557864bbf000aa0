"""Tests for example synthesis (specdesk.parser.examples)."""

from __future__ import annotations

import copy
from typing import Any

from specdesk.parser.examples import (
    ADDITIONAL_PROPERTIES_KEY,
    DATE_EXAMPLE,
    DATE_TIME_EXAMPLE,
    media_example,
    synthesize_example,
)


SCHEMAS: dict[str, Any] = {
    "Base": {"type": "object", "properties": {"id": {"type": "integer"}}},
    "Extra": {"type": "object", "properties": {"name": {"type": "string"}}},
    "Node": {
        "type": "object",
        "properties": {
            "name": {"type": "string"},
            "children": {"type": "array", "items": {"$ref": "#/components/schemas/Node"}},
        },
    },
    "Loop": {"$ref": "#/components/schemas/Loop"},
}


# ---------------------------------------------------------------------------
# Explicit values
# ---------------------------------------------------------------------------


class TestExplicitValues:
    def test_example_wins(self) -> None:
        schema = {"type": "integer", "example": 42, "default": 7, "enum": [1]}
        assert synthesize_example(schema, {}) == 42

    def test_default_before_enum(self) -> None:
        assert synthesize_example({"type": "string", "default": "d", "enum": ["e"]}, {}) == "d"

    def test_first_enum_value(self) -> None:
        assert synthesize_example({"type": "string", "enum": ["gold", "silver"]}, {}) == "gold"

    def test_falsy_example_kept(self) -> None:
        assert synthesize_example({"type": "integer", "example": 0}, {}) == 0
        assert synthesize_example({"type": "boolean", "default": False}, {}) is False


# ---------------------------------------------------------------------------
# Types and formats
# ---------------------------------------------------------------------------


class TestTypes:
    def test_scalars(self) -> None:
        assert synthesize_example({"type": "integer"}, {}) == 1
        assert synthesize_example({"type": "number"}, {}) == 1
        assert synthesize_example({"type": "boolean"}, {}) is True
        assert synthesize_example({"type": "string"}, {}) == "string"

    def test_formats(self) -> None:
        assert synthesize_example({"type": "string", "format": "date-time"}, {}) == DATE_TIME_EXAMPLE
        assert synthesize_example({"type": "string", "format": "date"}, {}) == DATE_EXAMPLE

    def test_untyped_is_string(self) -> None:
        assert synthesize_example({}, {}) == "string"

    def test_none_is_empty_object(self) -> None:
        assert synthesize_example(None, {}) == {}

    def test_array(self) -> None:
        assert synthesize_example({"type": "array", "items": {"type": "integer"}}, {}) == [1]

    def test_array_without_items(self) -> None:
        assert synthesize_example({"type": "array"}, {}) == [{}]

    def test_object(self) -> None:
        schema = {
            "type": "object",
            "properties": {"a": {"type": "string"}, "b": {"type": "boolean"}},
        }
        assert synthesize_example(schema, {}) == {"a": "string", "b": True}

    def test_additional_properties(self) -> None:
        schema = {"type": "object", "additionalProperties": {"type": "integer"}}
        assert synthesize_example(schema, {}) == {ADDITIONAL_PROPERTIES_KEY: 1}

    def test_additional_properties_ignored_with_properties(self) -> None:
        schema = {
            "type": "object",
            "properties": {"a": {"type": "integer"}},
            "additionalProperties": {"type": "string"},
        }
        assert synthesize_example(schema, {}) == {"a": 1}


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------


class TestComposition:
    def test_one_of_takes_first(self) -> None:
        schema = {"oneOf": [{"type": "integer"}, {"type": "string"}]}
        assert synthesize_example(schema, {}) == 1

    def test_any_of_takes_first(self) -> None:
        schema = {"anyOf": [{"type": "boolean"}, {"type": "string"}]}
        assert synthesize_example(schema, {}) is True

    def test_all_of_merges_members(self) -> None:
        schema = {
            "allOf": [
                {"$ref": "#/components/schemas/Base"},
                {"$ref": "#/components/schemas/Extra"},
            ]
        }
        assert synthesize_example(schema, SCHEMAS) == {"id": 1, "name": "string"}

    def test_all_of_ignores_non_object_members(self) -> None:
        schema = {"allOf": [{"type": "string"}, {"$ref": "#/components/schemas/Base"}]}
        assert synthesize_example(schema, SCHEMAS) == {"id": 1}


# ---------------------------------------------------------------------------
# References and recursion
# ---------------------------------------------------------------------------


class TestReferences:
    def test_dangling_ref_is_string(self) -> None:
        assert synthesize_example({"$ref": "#/components/schemas/Missing"}, SCHEMAS) == "string"

    def test_recursive_schema_is_depth_capped(self) -> None:
        result = synthesize_example({"$ref": "#/components/schemas/Node"}, SCHEMAS)
        assert result == {
            "name": "string",
            "children": [
                {
                    "name": "string",
                    "children": [{"name": "string", "children": [{}]}],
                }
            ],
        }

    def test_self_loop_terminates(self) -> None:
        """A reference to itself never gains structure; it degrades to a string."""
        assert synthesize_example({"$ref": "#/components/schemas/Loop"}, SCHEMAS) == "string"

    def test_deterministic_and_pure(self) -> None:
        schemas = copy.deepcopy(SCHEMAS)
        first = synthesize_example({"$ref": "#/components/schemas/Node"}, schemas)
        second = synthesize_example({"$ref": "#/components/schemas/Node"}, schemas)
        assert first == second
        assert schemas == SCHEMAS


# ---------------------------------------------------------------------------
# media_example
# ---------------------------------------------------------------------------


class TestMediaExample:
    def test_no_content(self) -> None:
        assert media_example(None, {}) is None
        assert media_example({}, {}) is None

    def test_media_example_first(self) -> None:
        content = {
            "application/json": {
                "example": {"a": 1},
                "examples": {"x": {"value": {"b": 2}}},
                "schema": {"type": "integer"},
            }
        }
        assert media_example(content, {}) == {"a": 1}

    def test_first_named_example(self) -> None:
        content = {
            "application/json": {
                "examples": {"x": {"value": {"b": 2}}, "y": {"value": {"c": 3}}},
                "schema": {"type": "integer"},
            }
        }
        assert media_example(content, {}) == {"b": 2}

    def test_null_example_falls_through_to_schema(self) -> None:
        content = {"application/json": {"example": None, "schema": {"type": "boolean"}}}
        assert media_example(content, {}) is True

    def test_only_first_media_type_is_used(self) -> None:
        content = {
            "text/plain": {"schema": {"type": "string"}},
            "application/json": {"example": {"a": 1}},
        }
        assert media_example(content, {}) == "string"

    def test_media_without_schema(self) -> None:
        assert media_example({"application/json": {}}, {}) == {}
