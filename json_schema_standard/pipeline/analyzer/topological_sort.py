"""
Topological sorter for definition tables.

Separates definitions into an acyclic part, ordered so that dependencies
come before their dependents, and the mutually recursive groups.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field

from ..standard_ast.nodes import Reference, StandardNode, child_nodes

logger = logging.getLogger(__name__)


@dataclass
class DefinitionEntry:
    """A definition name with its schema."""

    ref: str
    schema: StandardNode


@dataclass
class TopologicalSort:
    """Result of `topological_sort`.

    Attributes:
        non_recursives: Acyclic definitions, dependencies first
        recursives: Definitions that belong to a cycle (no meaningful order)
    """

    non_recursives: list[DefinitionEntry] = field(default_factory=list)
    recursives: dict[str, StandardNode] = field(default_factory=dict)


def collect_references(node: StandardNode, names: dict[str, StandardNode] | None = None) -> list[str]:
    """
    Collect the names referenced anywhere below `node`.

    Args:
        node: Schema to walk
        names: When given, only names present in this table are kept

    Returns:
        Referenced names in first-seen order, without duplicates
    """
    found: list[str] = []
    seen_nodes: set[int] = set()
    stack = [node]
    while stack:
        current = stack.pop()
        if id(current) in seen_nodes:
            continue
        seen_nodes.add(id(current))
        if isinstance(current, Reference):
            if (names is None or current.ref in names) and current.ref not in found:
                found.append(current.ref)
            continue
        stack.extend(reversed(list(child_nodes(current))))
    return found


def _strongly_connected_components(graph: dict[str, list[str]]) -> list[list[str]]:
    """Tarjan's algorithm, iterative."""
    index_of: dict[str, int] = {}
    lowlink: dict[str, int] = {}
    on_stack: set[str] = set()
    stack: list[str] = []
    components: list[list[str]] = []
    counter = 0

    for root in graph:
        if root in index_of:
            continue
        work = [(root, 0)]
        while work:
            vertex, i = work.pop()
            if i == 0:
                index_of[vertex] = lowlink[vertex] = counter
                counter += 1
                stack.append(vertex)
                on_stack.add(vertex)
            recursed = False
            edges = graph[vertex]
            while i < len(edges):
                target = edges[i]
                i += 1
                if target not in index_of:
                    work.append((vertex, i))
                    work.append((target, 0))
                    recursed = True
                    break
                if target in on_stack:
                    lowlink[vertex] = min(lowlink[vertex], index_of[target])
            if recursed:
                continue
            if lowlink[vertex] == index_of[vertex]:
                component = []
                while True:
                    member = stack.pop()
                    on_stack.discard(member)
                    component.append(member)
                    if member == vertex:
                        break
                components.append(component)
            if work:
                parent = work[-1][0]
                lowlink[parent] = min(lowlink[parent], lowlink[vertex])
    return components


def topological_sort(definitions: dict[str, StandardNode]) -> TopologicalSort:
    """
    Partition definitions into ordered non-recursive and recursive ones.

    Edges are references to names present in `definitions`; external
    references are ignored. A strongly connected component with more than
    one member, or with a self edge, is recursive. The remaining definitions
    are ordered with Kahn's algorithm, seeded in insertion order; edges to
    recursive definitions do not count.

    Args:
        definitions: Definition name to schema

    Returns:
        TopologicalSort
    """
    graph = {name: collect_references(schema, definitions) for name, schema in definitions.items()}

    recursive: set[str] = set()
    for component in _strongly_connected_components(graph):
        if len(component) > 1 or component[0] in graph[component[0]]:
            recursive.update(component)
    if recursive:
        logger.debug("Recursive definitions: %s", sorted(recursive))

    remaining = [name for name in definitions if name not in recursive]
    in_degree = {name: 0 for name in remaining}
    dependents: dict[str, list[str]] = {name: [] for name in remaining}
    for name in remaining:
        for dependency in graph[name]:
            if dependency in recursive:
                continue
            in_degree[name] += 1
            dependents[dependency].append(name)

    queue = deque(name for name in remaining if in_degree[name] == 0)
    ordered: list[str] = []
    while queue:
        name = queue.popleft()
        ordered.append(name)
        for dependent in dependents[name]:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                queue.append(dependent)

    return TopologicalSort(
        non_recursives=[DefinitionEntry(ref=name, schema=definitions[name]) for name in ordered],
        recursives={name: definitions[name] for name in definitions if name in recursive},
    )
