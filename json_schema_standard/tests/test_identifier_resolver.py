"""
Tests for the identifier resolver.
"""

from __future__ import annotations

import unittest

from json_schema_standard.pipeline import MissingIdentifier
from json_schema_standard.pipeline.analyzer import resolve_identifiers, resolve_identifiers_many
from json_schema_standard.pipeline.standard_ast import Document, Reference, String, Suspend
from json_schema_standard.pipeline.standard_ast.builders import (
    annotate,
    array,
    number,
    string,
    struct,
    suspend,
)


class TestIdentifierResolver(unittest.TestCase):
    """Naming of identified and recursive schemas."""

    def test_unnamed_schema_is_unchanged(self):
        node = struct({"a": string()})
        document = resolve_identifiers(node)
        self.assertEqual(document.schema, node)
        self.assertEqual(document.definitions, {})

    def test_identified_root(self):
        document = resolve_identifiers(annotate(string(), identifier="A"))
        self.assertEqual(document.schema, Reference(ref="A"))
        self.assertEqual(list(document.definitions), ["A"])
        self.assertIsInstance(document.definitions["A"], String)

    def test_shared_node_is_defined_once(self):
        a = annotate(string(), identifier="A")
        document = resolve_identifiers(struct({"x": a, "y": a}))
        self.assertEqual(list(document.definitions), ["A"])
        types = [ps.type for ps in document.schema.property_signatures]
        self.assertEqual(types, [Reference(ref="A"), Reference(ref="A")])

    def test_collision_gets_suffix(self):
        node = struct({"x": annotate(string(), identifier="A"), "y": annotate(number(), identifier="A")})
        document = resolve_identifiers(node)
        self.assertEqual(list(document.definitions), ["A", "A-1"])

    def test_identical_bodies_are_deduplicated(self):
        node = struct({"x": annotate(string(), identifier="A"), "y": annotate(string(), identifier="A")})
        document = resolve_identifiers(node)
        self.assertEqual(list(document.definitions), ["A"])
        types = [ps.type for ps in document.schema.property_signatures]
        self.assertEqual(types, [Reference(ref="A"), Reference(ref="A")])

    def test_recursive_schema(self):
        category = annotate(
            struct({"name": string(), "children": array(suspend(lambda: category))}),
            identifier="Category",
        )
        document = resolve_identifiers(category)
        self.assertEqual(document.schema, Reference(ref="Category"))
        children = document.definitions["Category"].property_signatures[1].type
        suspended = children.rest[0]
        self.assertIsInstance(suspended, Suspend)
        self.assertEqual(suspended.force(), Reference(ref="Category"))

    def test_identifier_on_suspend(self):
        document = resolve_identifiers(struct({"s": suspend(lambda: string(), identifier="S")}))
        self.assertEqual(list(document.definitions), ["S"])
        self.assertIsInstance(document.definitions["S"], String)

    def test_non_recursive_suspend_is_inlined(self):
        document = resolve_identifiers(struct({"s": suspend(lambda: string())}))
        self.assertEqual(document.definitions, {})
        self.assertEqual(document.schema.property_signatures[0].type.force(), string())

    def test_missing_identifier(self):
        schema = struct({"a": string(), "as": array(suspend(lambda: schema))})
        with self.assertRaises(MissingIdentifier) as cm:
            resolve_identifiers(schema)
        self.assertEqual(str(cm.exception), 'Suspended schema without identifier detected at ["as"][0]')
        self.assertEqual(cm.exception.path, ("as", 0))

    def test_resolution_is_deterministic(self):
        def build():
            a = annotate(string(), identifier="A")
            return struct({"x": a, "y": annotate(number(), identifier="A"), "z": a})

        self.assertEqual(resolve_identifiers(build()), resolve_identifiers(build()))


class TestResolveMany(unittest.TestCase):
    def test_shared_pool(self):
        a = annotate(string(), identifier="A")
        multi = resolve_identifiers_many([a, struct({"a": a})])
        self.assertEqual(list(multi.definitions), ["A"])
        self.assertEqual(multi.schemas[0], Reference(ref="A"))
        self.assertEqual(multi.schemas[1].property_signatures[0].type, Reference(ref="A"))

    def test_documents(self):
        multi = resolve_identifiers_many([string(), number()])
        documents = multi.documents()
        self.assertEqual(len(documents), 2)
        self.assertIs(documents[0].definitions, multi.definitions)


class TestDocument(unittest.TestCase):
    def test_lookup(self):
        document = resolve_identifiers(annotate(string(), identifier="A"))
        self.assertIsInstance(document.get_definition("A"), String)
        self.assertIsInstance(document.resolve(document.schema), String)
        with self.assertRaises(KeyError):
            document.get_definition("B")

    def test_resolve_stops_on_cycles_and_external_refs(self):
        document = Document(schema=Reference(ref="A"), definitions={"A": Reference(ref="A")})
        self.assertEqual(document.resolve(document.schema), Reference(ref="A"))
        self.assertEqual(document.resolve(Reference(ref="X")), Reference(ref="X"))


if __name__ == "__main__":
    unittest.main()
