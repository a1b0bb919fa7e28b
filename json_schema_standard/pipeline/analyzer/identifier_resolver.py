"""
Identifier resolver.

Turns a schema tree that may contain shared or self-referential sub-schemas
into a root schema plus a flat table of named definitions.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace

from ..errors import MissingIdentifier
from ..standard_ast.document import Document, MultiDocument
from ..standard_ast.nodes import (
    Arrays,
    Declaration,
    IndexSignature,
    Objects,
    Reference,
    StandardNode,
    String,
    Suspend,
    SymbolKey,
    TemplateLiteral,
    Union,
)

logger = logging.getLogger(__name__)


def path_segment(name: str | SymbolKey) -> str:
    """Path segment used in error messages for a property name."""
    if isinstance(name, SymbolKey):
        return f"Symbol({name.description})"
    return name


def suffixed(name: str, n: int) -> str:
    """Name of the n-th collision of `name` (0 is the name itself)."""
    return name if n == 0 else f"{name}-{n}"


@dataclass
class ResolverContext:
    """State of one resolution call."""

    definitions: dict[str, StandardNode] = field(default_factory=dict)
    # id(node) -> assigned definition name
    names_by_node: dict[int, str] = field(default_factory=dict)
    # Keeps named nodes alive so their id() cannot be reused during the call
    named_nodes: list[StandardNode] = field(default_factory=list)
    # ids of unnamed nodes currently being resolved
    forcing: list[int] = field(default_factory=list)
    # Names whose definition is registered but whose body is still being built
    pending: set[str] = field(default_factory=set)
    # Names that were referenced while pending
    referenced: set[str] = field(default_factory=set)


class IdentifierResolver:
    """Assigns stable names to identified and recursive schemas.

    A node becomes a definition when it carries an `identifier` annotation,
    or when it is the target of a Suspend that carries one (on the Suspend
    itself or on its target). Names are assigned in depth-first pre-order;
    collisions get `-1`, `-2`, ... suffixes unless the colliding body is
    structurally identical, in which case the existing name is reused.
    """

    def resolve(self, node: StandardNode) -> Document:
        """
        Resolve a single schema.

        Args:
            node: Root of the schema tree

        Returns:
            Document whose root is the resolved node or a Reference to it

        Raises:
            MissingIdentifier: If a recursive Suspend has no nameable target
        """
        context = ResolverContext()
        schema = self._resolve(node, (), context)
        return Document(schema=schema, definitions=context.definitions)

    def resolve_many(self, nodes: list[StandardNode]) -> MultiDocument:
        """
        Resolve several schemas into one shared definitions pool.

        Args:
            nodes: Root schemas, resolved in order

        Returns:
            MultiDocument with one resolved schema per input
        """
        context = ResolverContext()
        schemas = [self._resolve(node, (), context) for node in nodes]
        return MultiDocument(schemas=schemas, definitions=context.definitions)

    def _resolve(self, node: StandardNode, path: tuple, context: ResolverContext) -> StandardNode:
        if isinstance(node, Suspend):
            return self._resolve_suspend(node, path, context)
        identifier = node.identifier
        if identifier is not None:
            return self._define(node, identifier, path, context)
        context.forcing.append(id(node))
        try:
            return self._resolve_structure(node, path, context)
        finally:
            context.forcing.pop()

    def _resolve_suspend(self, node: Suspend, path: tuple, context: ResolverContext) -> Suspend:
        target = node.force()
        identifier = node.identifier or target.identifier
        if id(target) in context.names_by_node:
            name = context.names_by_node[id(target)]
            context.referenced.add(name)
            resolved: StandardNode = Reference(ref=name)
        elif identifier is not None:
            resolved = self._define(target, identifier, path, context)
        elif id(target) in context.forcing:
            raise MissingIdentifier(path)
        else:
            resolved = self._resolve(target, path, context)
        return Suspend(annotations=node.annotations, thunk=resolved, checks=list(node.checks))

    def _define(self, node: StandardNode, identifier: str, path: tuple, context: ResolverContext) -> Reference:
        """Register `node` as a definition and return a Reference to it."""
        existing = context.names_by_node.get(id(node))
        if existing is not None:
            context.referenced.add(existing)
            return Reference(ref=existing)

        n = 0
        while suffixed(identifier, n) in context.definitions:
            n += 1
        name = suffixed(identifier, n)

        # Registered before the body is built so self references resolve
        context.definitions[name] = Reference(ref=name)
        context.pending.add(name)
        context.names_by_node[id(node)] = name
        context.named_nodes.append(node)
        try:
            body = self._resolve_structure(node, path, context)
        finally:
            context.pending.discard(name)

        if name not in context.referenced:
            twin = self._find_identical(identifier, name, body, context)
            if twin is not None:
                logger.debug("Reusing definition %s for identifier %s", twin, identifier)
                del context.definitions[name]
                context.names_by_node[id(node)] = twin
                return Reference(ref=twin)

        if n > 0:
            logger.debug("Identifier %s already taken, registering %s", identifier, name)
        else:
            logger.debug("Registering definition %s", name)
        context.definitions[name] = body
        return Reference(ref=name)

    def _find_identical(
        self, identifier: str, name: str, body: StandardNode, context: ResolverContext
    ) -> str | None:
        pattern = re.compile(re.escape(identifier) + r"(-\d+)?")
        for candidate, definition in context.definitions.items():
            if candidate == name or candidate in context.pending:
                continue
            if pattern.fullmatch(candidate) and definition == body:
                return candidate
        return None

    def _resolve_structure(self, node: StandardNode, path: tuple, context: ResolverContext) -> StandardNode:
        """Resolve the sub-nodes of `node`, ignoring its own identifier."""
        if isinstance(node, String):
            if node.content_schema is None:
                return node
            return replace(node, content_schema=self._resolve(node.content_schema, path, context))
        if isinstance(node, TemplateLiteral):
            return replace(node, parts=[self._resolve(p, path, context) for p in node.parts])
        if isinstance(node, Arrays):
            elements = [
                replace(e, type=self._resolve(e.type, path + (i,), context)) for i, e in enumerate(node.elements)
            ]
            rest_path = path + (len(node.elements),)
            rest = [self._resolve(r, rest_path, context) for r in node.rest]
            return replace(node, elements=elements, rest=rest)
        if isinstance(node, Objects):
            property_signatures = [
                replace(ps, type=self._resolve(ps.type, path + (path_segment(ps.name),), context))
                for ps in node.property_signatures
            ]
            index_signatures = [
                IndexSignature(
                    parameter=self._resolve(i.parameter, path, context),
                    type=self._resolve(i.type, path, context),
                )
                for i in node.index_signatures
            ]
            return replace(node, property_signatures=property_signatures, index_signatures=index_signatures)
        if isinstance(node, Union):
            return replace(node, types=[self._resolve(t, path, context) for t in node.types])
        if isinstance(node, Suspend):
            return self._resolve_suspend(node, path, context)
        if isinstance(node, Declaration):
            return replace(
                node,
                type_parameters=[self._resolve(t, path, context) for t in node.type_parameters],
                encoded=self._resolve(node.encoded, path, context) if node.encoded is not None else None,
            )
        return node


def resolve_identifiers(node: StandardNode) -> Document:
    """Convenience wrapper around `IdentifierResolver().resolve`."""
    return IdentifierResolver().resolve(node)


def resolve_identifiers_many(nodes: list[StandardNode]) -> MultiDocument:
    """Convenience wrapper around `IdentifierResolver().resolve_many`."""
    return IdentifierResolver().resolve_many(nodes)
