"""
Tests for the JSON Schema importer.
"""

from __future__ import annotations

import pytest

from json_schema_standard.pipeline import Dialect, ImporterConfig, MalformedImport
from json_schema_standard.pipeline.importer import DialectImporter, import_json_schema
from json_schema_standard.pipeline.merge.fragments import ULID_PATTERN
from json_schema_standard.pipeline.standard_ast import (
    Arrays,
    FilterGroup,
    Literal,
    Never,
    Null,
    Number,
    ObjectKeyword,
    Objects,
    Reference,
    String,
    Union,
    Unknown,
)

DRAFT_07 = "http://json-schema.org/draft-07/schema"
DRAFT_2020_12 = "https://json-schema.org/draft/2020-12/schema"


def tags(node):
    return [check.meta.tag if check.meta is not None else None for check in node.checks]


def test_boolean_schemas():
    assert import_json_schema(True).schema == Unknown()
    assert import_json_schema(False).schema == Never()


def test_annotation_only_schema():
    schema = import_json_schema({"description": "anything"}).schema
    assert isinstance(schema, Unknown)
    assert schema.annotations.description == "anything"


def test_enum_with_null():
    schema = import_json_schema({"enum": ["a", None]}).schema
    assert schema == Union(types=[Literal(literal="a"), Null()])


def test_const():
    assert import_json_schema({"const": 1}).schema == Literal(literal=1)


def test_type_list():
    schema = import_json_schema({"type": ["string", "null"], "description": "d"}).schema
    assert isinstance(schema, Union)
    assert schema.annotations.description == "d"
    assert [type(t) for t in schema.types] == [String, Null]
    assert all(t.annotations is None for t in schema.types)


def test_object_keyword():
    assert import_json_schema({"anyOf": [{"type": "object"}, {"type": "array"}]}).schema == ObjectKeyword()


def test_custom_format_becomes_extension():
    schema = import_json_schema({"type": "string", "format": "email"}).schema
    assert schema.checks == []
    assert schema.annotations.extensions == {"format": "email"}


def test_uuid_format_becomes_check():
    schema = import_json_schema({"type": "string", "format": "uuid"}).schema
    assert tags(schema) == ["isUUID"]
    assert schema.annotations is None


def test_pattern_tags():
    schema = import_json_schema({"type": "string", "pattern": ULID_PATTERN}).schema
    assert tags(schema) == ["isULID"]


def test_int32_range():
    schema = import_json_schema({"type": "integer", "minimum": -2147483648, "maximum": 2147483647}).schema
    assert isinstance(schema, Number)
    assert len(schema.checks) == 1
    assert isinstance(schema.checks[0], FilterGroup)
    assert schema.checks[0].meta.tag == "isInt32"


def test_allof_patch_merges_properties():
    document = {
        "allOf": [
            {"type": "object", "properties": {"a": {"type": "string"}}, "required": ["a"]},
            {"properties": {"b": {"type": "number"}}, "required": ["b"]},
        ]
    }
    schema = import_json_schema(document).schema
    assert isinstance(schema, Objects)
    assert [ps.name for ps in schema.property_signatures] == ["a", "b"]
    assert not any(ps.is_optional for ps in schema.property_signatures)


def test_allof_collision_keeps_order():
    schema = import_json_schema({"type": "string", "minLength": 2, "allOf": [{"minLength": 1}]}).schema
    assert [check.meta.params for check in schema.checks] == [{"minLength": 1}, {"minLength": 2}]


def test_ref_with_siblings_is_inlined():
    document = {
        "$defs": {"A": {"type": "string"}},
        "type": "object",
        "properties": {"a": {"$ref": "#/$defs/A", "description": "d"}},
        "required": ["a"],
        "additionalProperties": False,
    }
    result = import_json_schema(document)
    a = result.schema.property_signatures[0].type
    assert isinstance(a, String)
    assert a.annotations.description == "d"
    # The target is still registered
    assert list(result.definitions) == ["A"]


def test_only_reachable_definitions_are_imported():
    document = {
        "$defs": {"A": {"type": "string"}, "Unused": {"type": "number"}},
        "$ref": "#/$defs/A",
    }
    result = import_json_schema(document)
    assert result.schema == Reference(ref="A")
    assert list(result.definitions) == ["A"]
    assert result.definitions["A"].annotations.identifier == "A"


def test_missing_reference():
    with pytest.raises(MalformedImport) as exc_info:
        import_json_schema({"$ref": "#/$defs/Missing"})
    assert str(exc_info.value) == "unresolvable reference '#/$defs/Missing' at root"


def test_external_reference_is_opaque():
    result = import_json_schema({"$ref": "https://example.com/a.json"})
    assert result.schema == Reference(ref="https://example.com/a.json")
    assert result.definitions == {}


def test_definition_name_collision():
    document = {
        "$defs": {"A": {"type": "string"}},
        "definitions": {"A": {"type": "number"}},
        "anyOf": [{"$ref": "#/$defs/A"}, {"$ref": "#/definitions/A"}],
    }
    result = import_json_schema(document)
    assert result.schema == Union(types=[Reference(ref="A"), Reference(ref="A-1")])
    assert isinstance(result.definitions["A"], String)
    assert isinstance(result.definitions["A-1"], Number)


def test_recursive_reference():
    document = {
        "$schema": DRAFT_2020_12,
        "$ref": "#/$defs/Category",
        "$defs": {
            "Category": {
                "type": "object",
                "properties": {"children": {"type": "array", "items": {"$ref": "#/$defs/Category"}}},
                "required": ["children"],
                "additionalProperties": False,
            }
        },
    }
    result = import_json_schema(document)
    children = result.definitions["Category"].property_signatures[0].type
    assert children.rest == [Reference(ref="Category")]


@pytest.mark.parametrize(
    "document",
    [
        {"$schema": DRAFT_07, "type": "array", "prefixItems": [{"type": "string"}]},
        {"$schema": DRAFT_2020_12, "type": "array", "items": [{"type": "string"}]},
        {"type": "unknown-type"},
        {"type": "object", "properties": {"a": 1}},
        {"enum": []},
    ],
)
def test_malformed(document):
    with pytest.raises(MalformedImport):
        import_json_schema(document)


def test_malformed_path():
    with pytest.raises(MalformedImport) as exc_info:
        import_json_schema({"type": "object", "properties": {"a": {"type": "bogus"}}})
    assert exc_info.value.path == ("a",)


class TestArrays:
    def test_open_tuple(self):
        schema = import_json_schema({"type": "array", "prefixItems": [{"type": "string"}]}).schema
        assert isinstance(schema, Arrays)
        assert schema.rest == [Unknown()]

    def test_max_items_closes_tuple(self):
        document = {"type": "array", "prefixItems": [{"type": "string"}], "maxItems": 1}
        schema = import_json_schema(document).schema
        assert schema.rest == []
        assert schema.checks == []

    def test_min_items_marks_optional_elements(self):
        document = {
            "type": "array",
            "prefixItems": [{"type": "string"}, {"type": "number"}],
            "items": False,
            "minItems": 1,
        }
        schema = import_json_schema(document).schema
        assert [e.is_optional for e in schema.elements] == [False, True]
        assert schema.checks == []

    def test_draft_07_fallback_dialect(self):
        document = {"type": "array", "items": [{"type": "string"}], "additionalItems": {"type": "number"}}
        schema = import_json_schema(document, Dialect.DRAFT_07).schema
        assert len(schema.elements) == 1
        assert schema.rest == [Number()]

    def test_schema_uri_wins_over_fallback(self):
        document = {"$schema": DRAFT_07, "type": "array", "items": [{"type": "string"}]}
        schema = import_json_schema(document, Dialect.DRAFT_2020_12).schema
        assert len(schema.elements) == 1


class TestObjects:
    def test_additional_properties_default(self):
        schema = import_json_schema({"type": "object", "properties": {"a": {"type": "string"}}}).schema
        assert schema.property_signatures[0].is_optional
        assert len(schema.index_signatures) == 1
        assert schema.index_signatures[0].type == Unknown()

    def test_number_keys(self):
        document = {"type": "object", "patternProperties": {"^[0-9]+$": {"type": "string"}}}
        schema = import_json_schema(document).schema
        assert schema.index_signatures[0].parameter == Number()

    def test_pattern_keys(self):
        document = {"type": "object", "patternProperties": {"^a": {"type": "string"}}}
        schema = import_json_schema(document).schema
        parameter = schema.index_signatures[0].parameter
        assert tags(parameter) == ["isPattern"]


class TestMultiDocuments:
    def test_import_multi(self):
        data = {
            "dialect": "draft-07",
            "schemas": [{"$ref": "#/definitions/A"}, {"type": "number"}],
            "definitions": {"A": {"type": "string"}},
        }
        multi = DialectImporter().import_multi(data)
        assert multi.schemas == [Reference(ref="A"), Number()]
        assert list(multi.definitions) == ["A"]

    def test_openapi_config(self):
        importer = DialectImporter(ImporterConfig(dialect=Dialect.OPENAPI_3_1))
        assert importer._detect_dialect({"$schema": DRAFT_2020_12}) == Dialect.OPENAPI_3_1
