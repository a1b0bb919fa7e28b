"""
Dialect importer: JSON Schema documents to Standard AST documents.
"""

from __future__ import annotations

from .importer import DialectImporter, ImportContext, import_json_schema

__all__ = [
    "DialectImporter",
    "ImportContext",
    "import_json_schema",
]
