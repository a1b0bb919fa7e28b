"""
Pipeline - Standard AST to JSON Schema compiler.

1. Standard AST: dialect independent schema tree (standard_ast)
2. Analyzer: identifier resolution and definition ordering (analyzer)
3. Merge: annotation and constraint fragments (merge)
4. Emitters: Draft-07, Draft 2020-12 and OpenAPI 3.1 output (emitters)
5. Importer: JSON Schema back to Standard AST (importer)
6. Renderer: optional Python builder code output (renderer)
"""

from __future__ import annotations

from .compiler import StandardCompiler
from .config import (
    AdditionalPropertiesStrategy,
    CompilerConfig,
    Dialect,
    EmitterConfig,
    FormatterConfig,
    ImporterConfig,
    ReferenceStrategy,
    RendererConfig,
)
from .errors import MalformedImport, MissingIdentifier, StandardSchemaError, UnsupportedNode, UnsupportedShape

__all__ = [
    "StandardCompiler",
    "AdditionalPropertiesStrategy",
    "CompilerConfig",
    "Dialect",
    "EmitterConfig",
    "FormatterConfig",
    "ImporterConfig",
    "ReferenceStrategy",
    "RendererConfig",
    "MalformedImport",
    "MissingIdentifier",
    "StandardSchemaError",
    "UnsupportedNode",
    "UnsupportedShape",
]
