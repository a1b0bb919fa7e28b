"""
Documents: root schemas paired with their definitions table.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .nodes import Reference, StandardNode


@dataclass
class Document:
    """A root schema and the definitions it references by name."""

    schema: StandardNode
    definitions: dict[str, StandardNode] = field(default_factory=dict)

    def get_definition(self, name: str) -> StandardNode:
        """Look up a definition by name.

        Raises:
            KeyError: If no definition has this name
        """
        return self.definitions[name]

    def resolve(self, node: StandardNode) -> StandardNode:
        """Follow internal references until a non-Reference node is reached."""
        seen: set[str] = set()
        while isinstance(node, Reference) and node.ref in self.definitions and node.ref not in seen:
            seen.add(node.ref)
            node = self.definitions[node.ref]
        return node


@dataclass
class MultiDocument:
    """Several root schemas sharing one definitions pool."""

    schemas: list[StandardNode] = field(default_factory=list)
    definitions: dict[str, StandardNode] = field(default_factory=dict)

    def documents(self) -> list[Document]:
        """Split into one Document per root schema, all sharing the same pool."""
        return [Document(schema, self.definitions) for schema in self.schemas]
