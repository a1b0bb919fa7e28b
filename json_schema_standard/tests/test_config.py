"""
Tests for configuration classes and loading.
"""

import json
import unittest
from pathlib import Path

from json_schema_standard.pipeline.config import (
    AdditionalPropertiesStrategy,
    CompilerConfig,
    Dialect,
    EmitterConfig,
    FormatterConfig,
    ReferenceStrategy,
)


class TestDialect(unittest.TestCase):
    def test_uri(self):
        self.assertEqual(Dialect.DRAFT_07.uri, "http://json-schema.org/draft-07/schema")
        self.assertEqual(Dialect.DRAFT_2020_12.uri, "https://json-schema.org/draft/2020-12/schema")
        self.assertEqual(Dialect.OPENAPI_3_1.uri, Dialect.DRAFT_2020_12.uri)

    def test_definitions_key(self):
        self.assertEqual(Dialect.DRAFT_07.definitions_key, "definitions")
        self.assertEqual(Dialect.DRAFT_2020_12.definitions_key, "$defs")
        self.assertEqual(Dialect.OPENAPI_3_1.definitions_key, "$defs")

    def test_from_uri(self):
        self.assertEqual(Dialect.from_uri("http://json-schema.org/draft-07/schema#"), Dialect.DRAFT_07)
        self.assertEqual(Dialect.from_uri("https://json-schema.org/draft/2020-12/schema"), Dialect.DRAFT_2020_12)
        self.assertIsNone(Dialect.from_uri("http://json-schema.org/draft-04/schema#"))


class TestCompilerConfig(unittest.TestCase):
    def test_defaults(self):
        config = CompilerConfig()
        self.assertEqual(config.emitter.dialect, Dialect.DRAFT_2020_12)
        self.assertEqual(config.emitter.top_level_reference_strategy, ReferenceStrategy.KEEP)
        self.assertEqual(config.emitter.additional_properties_strategy, AdditionalPropertiesStrategy.STRICT)
        self.assertIsNone(config.emitter.definitions)
        self.assertEqual(config.importer.dialect, Dialect.DRAFT_2020_12)
        self.assertTrue(config.renderer.add_generation_comment)
        self.assertFalse(config.renderer.formatter.enabled)

    def test_from_dict(self):
        config = CompilerConfig.from_dict(
            {
                "emitter": {
                    "dialect": "openapi-3.1",
                    "top_level_reference_strategy": "skip",
                    "additional_properties_strategy": "allow",
                },
                "importer": {"dialect": "draft-07"},
                "renderer": {"root_name": "Root", "formatter": {"enabled": True, "line_length": 88}},
            }
        )
        self.assertEqual(config.emitter.dialect, Dialect.OPENAPI_3_1)
        self.assertEqual(config.emitter.top_level_reference_strategy, ReferenceStrategy.SKIP)
        self.assertEqual(config.emitter.additional_properties_strategy, AdditionalPropertiesStrategy.ALLOW)
        self.assertEqual(config.importer.dialect, Dialect.DRAFT_07)
        self.assertEqual(config.renderer.root_name, "Root")
        self.assertEqual(config.renderer.formatter, FormatterConfig(enabled=True, line_length=88))

    def test_unknown_renderer_keys_are_ignored(self):
        config = CompilerConfig.from_dict({"renderer": {"no_such_option": 1}})
        self.assertFalse(hasattr(config.renderer, "no_such_option"))

    def test_invalid_dialect(self):
        with self.assertRaises(ValueError):
            CompilerConfig.from_dict({"emitter": {"dialect": "draft-04"}})

    def test_to_dict_round_trip(self):
        config = CompilerConfig(emitter=EmitterConfig(dialect=Dialect.DRAFT_07))
        data = json.loads(json.dumps(config.to_dict()))
        self.assertEqual(CompilerConfig.from_dict(data).to_dict(), data)

    def test_example_config_file(self):
        path = Path(__file__).parent / "test_data" / "config.json"
        with open(path) as f:
            config = CompilerConfig.from_dict(json.load(f))
        self.assertEqual(config.emitter.dialect, Dialect.DRAFT_07)
        self.assertEqual(config.emitter.top_level_reference_strategy, ReferenceStrategy.SKIP)


if __name__ == "__main__":
    unittest.main()
