"""
Tests for the Python surface renderer.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from json_schema_standard.pipeline import CompilerConfig, Dialect, RendererConfig, StandardCompiler
from json_schema_standard.pipeline.analyzer import resolve_identifiers, resolve_identifiers_many
from json_schema_standard.pipeline.renderer import PythonRenderer, render_python
from json_schema_standard.pipeline.standard_ast import Annotations, Literal, Override, String
from json_schema_standard.pipeline.standard_ast.builders import (
    annotate,
    array,
    int_,
    literals,
    never,
    nullable,
    number,
    object_keyword,
    optional_key,
    record,
    string,
    struct,
    suspend,
    tuple_,
    union,
)
from json_schema_standard.pipeline.standard_ast.checks import is_min_length, is_pattern, is_uuid

TEST_DATA = Path(__file__).parent / "test_data" / "roundtrip_cases.json"

QUIET = RendererConfig(add_generation_comment=False)


def category():
    node = annotate(
        struct({"name": string(), "children": array(suspend(lambda: node))}),
        identifier="Category",
    )
    return node


def execute(code: str) -> dict:
    namespace: dict = {}
    exec(compile(code, "<rendered>", "exec"), namespace)
    return namespace


def test_render_recursive_module():
    code = render_python(resolve_identifiers(category()), QUIET)
    assert code == (
        "from __future__ import annotations\n"
        "\n"
        "from json_schema_standard.pipeline.standard_ast.builders import annotate, array, string, struct, suspend\n"
        "\n"
        "# Category: dict[str, Any] (recursive)\n"
        "Category = annotate(struct({'name': string(), 'children': array(suspend(lambda: Category))}), "
        "identifier='Category')\n"
        "\n"
        "# schema: Category\n"
        "schema = Category\n"
    )


def test_rendered_module_rebuilds_the_schema():
    compiler = StandardCompiler()
    code = render_python(resolve_identifiers(category()), QUIET)
    assert compiler.to_json_schema(execute(code)["schema"]) == compiler.to_json_schema(category())


def test_generation_comment():
    code = render_python(resolve_identifiers(string()))
    assert code.startswith("# Generated by json_schema_standard v")


def test_no_type_comments():
    config = RendererConfig(add_generation_comment=False, add_type_comments=False)
    code = render_python(resolve_identifiers(annotate(string(), identifier="A")), config)
    assert "#" not in code


def test_dependencies_are_rendered_first():
    a = annotate(string(is_uuid()), identifier="Id")
    user = annotate(struct({"id": a, "friends": array(a)}), identifier="User")
    code = render_python(resolve_identifiers(user), QUIET)
    assert code.index("Id = ") < code.index("User = ")
    assert "from json_schema_standard.pipeline.standard_ast.checks import is_uuid" in code
    assert "'friends': array(Id)" in code


def test_root_name():
    config = RendererConfig(add_generation_comment=False, root_name="Root")
    code = render_python(resolve_identifiers(string()), config)
    assert "Root = string()" in code


def test_definition_names_avoid_builders():
    node = struct({"a": annotate(string(), identifier="string"), "b": annotate(number(), identifier="schema")})
    code = render_python(resolve_identifiers(node), QUIET)
    assert "string_ = annotate(string(), identifier='string')" in code
    assert "schema_ = annotate(number(), identifier='schema')" in code
    assert execute(code)["schema"].property_signatures[0].type.identifier == "string"


def test_multi_document():
    a = annotate(string(), identifier="A")
    code = render_python(resolve_identifiers_many([a, struct({"a": a})]), QUIET)
    assert "schemas = [\n    A,\n    struct({'a': A}),\n]\n" in code
    roots = execute(code)["schemas"]
    assert len(roots) == 2


def test_check_annotations_and_unknown_checks():
    node = string(
        is_min_length(1, annotations=Annotations(description="not empty")),
        is_pattern("^a", "i"),
    )
    code = render_python(resolve_identifiers(node), QUIET)
    assert "is_min_length(1, annotations=Annotations(description='not empty'))" in code
    assert "is_pattern('^a', 'i')" in code
    assert execute(code)["schema"] == node


def test_content_strings_and_bigint_literals():
    node = struct(
        {
            "payload": String(content_media_type="application/json", content_schema=number()),
            "big": Literal(literal=1, bigint=True),
        }
    )
    code = render_python(resolve_identifiers(node), QUIET)
    assert "from json_schema_standard.pipeline.standard_ast import Literal, String" in code
    assert execute(code)["schema"] == node


def test_hooks_are_dropped(caplog):
    node = annotate(string(), json_schema=Override(lambda ctx: {"type": "string"}))
    code = render_python(resolve_identifiers(node), QUIET)
    assert "schema = string()" in code
    assert "Cannot render Override hook" in caplog.text


@pytest.mark.parametrize(
    "node,expected",
    [
        (string(), "str"),
        (int_(), "int"),
        (number(), "float"),
        (array(string()), "list[str]"),
        (tuple_(string(), number()), "tuple[str, float]"),
        (tuple_(string(), rest=[number()]), "tuple[str, *tuple[float, ...]]"),
        (literals("a", "b"), "Literal['a'] | Literal['b']"),
        (nullable(int_()), "int | None"),
        (union(string(), string()), "str"),
        (record(string(), number()), "dict[str, float]"),
        (struct({"a": optional_key(string())}), "dict[str, Any]"),
        (object_keyword(), "dict | list"),
        (never(), "NoReturn"),
    ],
)
def test_type_hint(node, expected):
    assert PythonRenderer().type_hint(node) == expected


def load_cases():
    with open(TEST_DATA) as f:
        return json.load(f)


@pytest.mark.parametrize("test_case", load_cases(), ids=lambda tc: tc["name"])
def test_render_imported_documents(test_case):
    config = CompilerConfig(renderer=QUIET)
    config.importer.dialect = config.emitter.dialect = Dialect(test_case["dialect"])
    compiler = StandardCompiler(config)
    code = compiler.render(compiler.from_json_schema(test_case["schema"]))
    assert compiler.to_json_schema(execute(code)["schema"]) == test_case["schema"]


def test_format_with_black():
    pytest.importorskip("black")
    config = RendererConfig(add_generation_comment=False)
    config.formatter.enabled = True
    config.formatter.line_length = 60
    code = render_python(resolve_identifiers(category()), config)
    assert 'identifier="Category"' in code
    assert all(len(line) <= 60 for line in code.splitlines() if not line.startswith("from "))
    assert execute(code)["schema"].identifier == "Category"
