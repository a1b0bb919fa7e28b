"""
Tests for the Standard AST JSON form.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from json_schema_standard.pipeline import MalformedImport, UnsupportedShape
from json_schema_standard.pipeline.analyzer import resolve_identifiers
from json_schema_standard.pipeline.standard_ast import Literal, Override, SymbolKey
from json_schema_standard.pipeline.standard_ast.builders import (
    annotate,
    array,
    declaration,
    enum_,
    int_,
    literals,
    mutable_key,
    nullable,
    number,
    optional_key,
    string,
    struct,
    suspend,
    tuple_,
    unique_symbol,
)
from json_schema_standard.pipeline.standard_ast.checks import is_int32, is_min_length, is_pattern
from json_schema_standard.pipeline.standard_ast.serializer import (
    document_from_json,
    document_to_json,
    from_json,
    to_json,
)

TEST_DATA = Path(__file__).parent / "test_data"


def test_string_with_check():
    assert to_json(string(is_min_length(1))) == {
        "_tag": "String",
        "checks": [{"_tag": "Filter", "meta": {"_tag": "isMinLength", "minLength": 1}}],
    }


def test_filter_group():
    out = to_json(number(is_int32()))
    group = out["checks"][0]
    assert group["_tag"] == "FilterGroup"
    assert group["meta"] == {"_tag": "isInt32"}
    assert [c["meta"]["_tag"] for c in group["checks"]] == ["isInt", "isBetween"]


def test_struct():
    node = struct({"a": string(), "b": optional_key(mutable_key(number()))})
    assert to_json(node) == {
        "_tag": "Objects",
        "propertySignatures": [
            {"name": "a", "type": {"_tag": "String", "checks": []}, "isOptional": False, "isMutable": False},
            {"name": "b", "type": {"_tag": "Number", "checks": []}, "isOptional": True, "isMutable": True},
        ],
        "indexSignatures": [],
        "checks": [],
    }


def test_symbol_key():
    out = to_json(struct({SymbolKey("id"): string()}))
    assert out["propertySignatures"][0]["name"] == {"_tag": "SymbolKey", "description": "id"}


def test_annotations_are_flat():
    node = annotate(string(), title="T", default=None, identifier="A", brands=["B"], x_extra=1)
    assert to_json(node)["annotations"] == {
        "title": "T",
        "identifier": "A",
        "default": None,
        "brands": ["B"],
        "x_extra": 1,
    }


def test_hooks_are_not_serialized():
    node = annotate(string(), json_schema=Override(lambda ctx: {}))
    assert "annotations" not in to_json(node)


@pytest.mark.parametrize(
    "node",
    [
        string(is_min_length(1), is_pattern("^a", "i")),
        int_(),
        number(is_int32()),
        annotate(string(), default=None, description="d"),
        struct({"a": string(), SymbolKey("s"): optional_key(number())}, records=[(string(), number())]),
        tuple_(string(), optional_key(number()), rest=[string()]),
        array(nullable(string())),
        literals("a", "b"),
        Literal(literal=1, bigint=True),
        enum_({"A": 1, "B": "b"}),
        unique_symbol("u"),
        declaration(encoded=string(), type_parameters=[number()]),
    ],
    ids=lambda node: node.TAG,
)
def test_from_json_inverts_to_json(node):
    assert from_json(to_json(node)) == node


def test_suspend_is_forced():
    out = to_json(suspend(lambda: string()))
    assert out == {"_tag": "Suspend", "thunk": {"_tag": "String", "checks": []}, "checks": []}


def test_unresolved_recursion():
    schema = struct({"as": array(suspend(lambda: schema))})
    with pytest.raises(UnsupportedShape, match="unresolved recursive Suspend"):
        to_json(schema)


def test_resolved_recursion():
    category = annotate(
        struct({"children": array(suspend(lambda: category))}),
        identifier="Category",
    )
    data = document_to_json(resolve_identifiers(category))
    assert data["schema"] == {"_tag": "Reference", "$ref": "Category"}
    children = data["definitions"]["Category"]["propertySignatures"][0]["type"]
    assert children["rest"][0]["thunk"] == {"_tag": "Reference", "$ref": "Category"}

    document = document_from_json(json.loads(json.dumps(data)))
    assert document_to_json(document) == data


def test_unknown_tag():
    with pytest.raises(MalformedImport) as exc_info:
        from_json({"_tag": "Bogus"})
    assert str(exc_info.value) == "unknown node tag 'Bogus' at root"


def test_unknown_check_tag():
    with pytest.raises(MalformedImport, match="unknown check tag"):
        from_json({"_tag": "String", "checks": [{"_tag": "Nope"}]})


def test_fixture():
    with open(TEST_DATA / "standard_document.json") as f:
        data = json.load(f)
    document = document_from_json(data)
    assert list(document.definitions) == ["Id"]
    assert document_to_json(document) == data
