"""JSON Schema Standard

A Python package for describing data schemas as a dialect independent
Standard AST and compiling them to JSON Schema (Draft-07, Draft 2020-12 and
OpenAPI 3.1), importing JSON Schema back, and rendering schemas as Python
builder code.
"""

__version__ = "1.0.0"
__author__ = "François Lagunas"

from .pipeline import (
    CompilerConfig,
    Dialect,
    EmitterConfig,
    ImporterConfig,
    RendererConfig,
    StandardCompiler,
    StandardSchemaError,
)

__all__ = [
    "StandardCompiler",
    "CompilerConfig",
    "Dialect",
    "EmitterConfig",
    "ImporterConfig",
    "RendererConfig",
    "StandardSchemaError",
]
