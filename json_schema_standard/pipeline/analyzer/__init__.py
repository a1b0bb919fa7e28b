"""
Analysis passes over Standard AST trees and definition tables.
"""

from __future__ import annotations

from .identifier_resolver import (
    IdentifierResolver,
    ResolverContext,
    resolve_identifiers,
    resolve_identifiers_many,
)
from .topological_sort import DefinitionEntry, TopologicalSort, collect_references, topological_sort

__all__ = [
    "IdentifierResolver",
    "ResolverContext",
    "resolve_identifiers",
    "resolve_identifiers_many",
    "DefinitionEntry",
    "TopologicalSort",
    "collect_references",
    "topological_sort",
]
