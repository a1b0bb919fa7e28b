"""
Configuration for the Standard schema compiler.

Options that can live in a JSON config file are plain values and enums;
callables (`get_ref`, `on_missing_annotation`) can only be set from code.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Dialect(str, Enum):
    """JSON Schema dialects understood by the emitters and the importer."""

    DRAFT_07 = "draft-07"
    DRAFT_2020_12 = "draft-2020-12"
    OPENAPI_3_1 = "openapi-3.1"

    @property
    def uri(self) -> str:
        """Meta-schema URI written to `$schema`."""
        if self is Dialect.DRAFT_07:
            return "http://json-schema.org/draft-07/schema"
        return "https://json-schema.org/draft/2020-12/schema"

    @property
    def definitions_key(self) -> str:
        """Name of the definitions container in an emitted document."""
        if self is Dialect.DRAFT_07:
            return "definitions"
        return "$defs"

    @staticmethod
    def from_uri(uri: str) -> Dialect | None:
        """Guess the dialect from a `$schema` URI."""
        if "draft-07" in uri:
            return Dialect.DRAFT_07
        if "2020-12" in uri:
            return Dialect.DRAFT_2020_12
        return None


class ReferenceStrategy(str, Enum):
    """How a root schema with its own identifier is emitted."""

    KEEP = "keep"  # Default: the root is a $ref into its own definition
    SKIP = "skip"  # The root definition is inlined


class AdditionalPropertiesStrategy(str, Enum):
    """Value of `additionalProperties` for objects without index signatures."""

    STRICT = "strict"  # Default: additionalProperties: false
    ALLOW = "allow"  # additionalProperties: true


@dataclass
class EmitterConfig:
    """Configuration of a dialect emitter.

    Attributes:
        dialect: Target dialect
        top_level_reference_strategy: Keep or inline a root $ref
        additional_properties_strategy: Closed or open objects
        definitions: Externally supplied map that receives the emitted definitions
        get_ref: Maps a definition name to a $ref pointer
        on_missing_annotation: Fallback for nodes without a JSON Schema encoding;
            called with (node, path), returns a replacement fragment or None
    """

    dialect: Dialect = Dialect.DRAFT_2020_12
    top_level_reference_strategy: ReferenceStrategy = ReferenceStrategy.KEEP
    additional_properties_strategy: AdditionalPropertiesStrategy = AdditionalPropertiesStrategy.STRICT
    definitions: dict[str, Any] | None = None
    get_ref: Callable[[str], str] | None = None
    on_missing_annotation: Callable[[Any, tuple], dict | None] | None = None


@dataclass
class ImporterConfig:
    """Configuration of the dialect importer."""

    # Dialect used when the document has no recognizable $schema
    dialect: Dialect = Dialect.DRAFT_2020_12


@dataclass
class FormatterConfig:
    """Configuration for post-processing rendered code."""

    # Whether formatting is enabled
    enabled: bool = False

    # Line length for the formatter
    line_length: int = 100

    # Python version target (e.g., "py312", "py313")
    target_version: str = "py312"

    # Whether to use string normalization (convert single quotes to double)
    string_normalization: bool = True

    # Whether to honor magic trailing commas
    magic_trailing_comma: bool = True


@dataclass
class RendererConfig:
    """Configuration of the Python surface renderer."""

    # Add a "Generated by" comment at the top of the module
    add_generation_comment: bool = True

    # Add a type hint comment above each definition
    add_type_comments: bool = True

    # Name given to the root schema(s) of a rendered document
    root_name: str = "schema"

    formatter: FormatterConfig = field(default_factory=FormatterConfig)


@dataclass
class CompilerConfig:
    """Aggregate configuration, loadable from a JSON config file."""

    emitter: EmitterConfig = field(default_factory=EmitterConfig)
    importer: ImporterConfig = field(default_factory=ImporterConfig)
    renderer: RendererConfig = field(default_factory=RendererConfig)

    @staticmethod
    def from_dict(d: dict) -> CompilerConfig:
        """Create a config from a dictionary."""
        config = CompilerConfig()
        emitter = d.get("emitter", {})
        if "dialect" in emitter:
            config.emitter.dialect = Dialect(emitter["dialect"])
        if "top_level_reference_strategy" in emitter:
            config.emitter.top_level_reference_strategy = ReferenceStrategy(emitter["top_level_reference_strategy"])
        if "additional_properties_strategy" in emitter:
            config.emitter.additional_properties_strategy = AdditionalPropertiesStrategy(
                emitter["additional_properties_strategy"]
            )
        importer = d.get("importer", {})
        if "dialect" in importer:
            config.importer.dialect = Dialect(importer["dialect"])
        renderer = d.get("renderer", {})
        for k, v in renderer.items():
            if k == "formatter" and isinstance(v, dict):
                config.renderer.formatter = FormatterConfig(**v)
            elif hasattr(config.renderer, k):
                setattr(config.renderer, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "emitter": {
                "dialect": self.emitter.dialect.value,
                "top_level_reference_strategy": self.emitter.top_level_reference_strategy.value,
                "additional_properties_strategy": self.emitter.additional_properties_strategy.value,
            },
            "importer": {
                "dialect": self.importer.dialect.value,
            },
            "renderer": {
                "add_generation_comment": self.renderer.add_generation_comment,
                "add_type_comments": self.renderer.add_type_comments,
                "root_name": self.renderer.root_name,
                "formatter": {
                    "enabled": self.renderer.formatter.enabled,
                    "line_length": self.renderer.formatter.line_length,
                    "target_version": self.renderer.formatter.target_version,
                    "string_normalization": self.renderer.formatter.string_normalization,
                    "magic_trailing_comma": self.renderer.formatter.magic_trailing_comma,
                },
            },
        }
