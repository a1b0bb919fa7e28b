"""
Tests for the definition topological sorter.
"""

from __future__ import annotations

import pytest

from json_schema_standard.pipeline.analyzer import collect_references, topological_sort
from json_schema_standard.pipeline.standard_ast.builders import (
    array,
    reference,
    string,
    struct,
    suspend,
    union,
)


def names(result):
    return [entry.ref for entry in result.non_recursives]


def test_dependencies_come_first():
    definitions = {
        "A": string(),
        "B": struct({"a": reference("A")}),
        "C": struct({"b": reference("B")}),
        "D": array(reference("A")),
    }
    result = topological_sort(definitions)
    assert names(result) == ["A", "B", "D", "C"]
    assert result.recursives == {}


def test_insertion_order_is_kept_when_independent():
    result = topological_sort({"Z": string(), "Y": string(), "X": string()})
    assert names(result) == ["Z", "Y", "X"]


def test_dependents_declared_before_dependencies():
    definitions = {"C": struct({"b": reference("B")}), "B": struct({"a": reference("A")}), "A": string()}
    assert names(topological_sort(definitions)) == ["A", "B", "C"]


def test_self_reference_is_recursive():
    definitions = {"A": string(), "Tree": struct({"children": array(suspend(lambda: reference("Tree")))})}
    result = topological_sort(definitions)
    assert names(result) == ["A"]
    assert list(result.recursives) == ["Tree"]


def test_mutual_recursion():
    definitions = {
        "A": struct({"b": reference("B")}),
        "B": struct({"a": union(reference("A"), string())}),
        "C": struct({"a": reference("A")}),
    }
    result = topological_sort(definitions)
    assert sorted(result.recursives) == ["A", "B"]
    # Edges to recursive definitions do not delay dependents
    assert names(result) == ["C"]


def test_external_references_are_ignored():
    definitions = {"A": struct({"x": reference("https://example.com/x.json")})}
    result = topological_sort(definitions)
    assert names(result) == ["A"]


@pytest.mark.parametrize(
    "node,expected",
    [
        (string(), []),
        (struct({"a": reference("A"), "b": reference("B"), "c": reference("A")}), ["A", "B"]),
        (union(array(reference("X")), reference("Y")), ["X", "Y"]),
    ],
)
def test_collect_references(node, expected):
    assert collect_references(node) == expected


def test_collect_references_filters_names():
    node = struct({"a": reference("A"), "b": reference("External")})
    assert collect_references(node, {"A": string()}) == ["A"]
