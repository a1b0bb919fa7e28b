"""
Entry point tying the pipeline phases together.

1. Resolve: Standard AST tree -> Document (named definitions)
2. Emit: Document -> JSON Schema in the configured dialect
3. Import: JSON Schema -> Document
4. Render: Document -> Python builder code
"""

from __future__ import annotations

import logging
from typing import Any

from .analyzer import resolve_identifiers, resolve_identifiers_many
from .config import CompilerConfig
from .emitters import get_emitter
from .importer import DialectImporter
from .renderer import PythonRenderer
from .standard_ast.document import Document, MultiDocument
from .standard_ast.nodes import StandardNode

logger = logging.getLogger(__name__)


class StandardCompiler:
    """Compiles Standard AST trees to JSON Schema and back."""

    def __init__(self, config: CompilerConfig | None = None):
        self.config = config or CompilerConfig()

    def resolve(self, node: StandardNode) -> Document:
        return resolve_identifiers(node)

    def to_json_schema(self, node: StandardNode | Document) -> dict[str, Any]:
        """
        Emit a standalone JSON Schema document.

        Args:
            node: Standard AST root, or an already resolved Document

        Returns:
            The root object, with `$schema` and the definitions container
        """
        document = node if isinstance(node, Document) else self.resolve(node)
        return get_emitter(self.config.emitter).emit(document).to_dict()

    def to_json_schema_many(self, nodes: list[StandardNode] | MultiDocument) -> dict[str, Any]:
        """Emit several roots sharing one definitions pool."""
        multi = nodes if isinstance(nodes, MultiDocument) else resolve_identifiers_many(nodes)
        return get_emitter(self.config.emitter).emit_multi(multi)

    def from_json_schema(self, document: dict[str, Any] | bool) -> Document:
        return DialectImporter(self.config.importer).import_document(document)

    def convert(self, document: dict[str, Any] | bool) -> dict[str, Any]:
        """Import a JSON Schema document and emit it in the configured dialect."""
        imported = self.from_json_schema(document)
        logger.debug("Imported %d definitions", len(imported.definitions))
        return self.to_json_schema(imported)

    def render(self, document: Document | MultiDocument) -> str:
        return PythonRenderer(self.config.renderer).render(document)
