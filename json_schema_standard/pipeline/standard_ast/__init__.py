"""
Standard AST: the dialect independent schema tree.
"""

from .annotations import (
    Annotations,
    Constraint,
    ConstraintContext,
    Override,
    OverrideContext,
    merge_annotations,
)
from .checks import Check, CheckMeta, Filter, FilterGroup
from .document import Document, MultiDocument
from .nodes import (
    NODE_CLASSES,
    Any,
    Arrays,
    BigInt,
    Boolean,
    Declaration,
    Element,
    Enum,
    IndexSignature,
    Literal,
    Never,
    Null,
    Number,
    ObjectKeyword,
    Objects,
    PropertySignature,
    Reference,
    StandardNode,
    String,
    Suspend,
    Symbol,
    SymbolKey,
    TemplateLiteral,
    Undefined,
    Union,
    UniqueSymbol,
    Unknown,
    Void,
    child_nodes,
    with_annotations,
)

__all__ = [
    "Annotations",
    "Constraint",
    "ConstraintContext",
    "Override",
    "OverrideContext",
    "merge_annotations",
    "Check",
    "CheckMeta",
    "Filter",
    "FilterGroup",
    "Document",
    "MultiDocument",
    "NODE_CLASSES",
    "Any",
    "Arrays",
    "BigInt",
    "Boolean",
    "Declaration",
    "Element",
    "Enum",
    "IndexSignature",
    "Literal",
    "Never",
    "Null",
    "Number",
    "ObjectKeyword",
    "Objects",
    "PropertySignature",
    "Reference",
    "StandardNode",
    "String",
    "Suspend",
    "Symbol",
    "SymbolKey",
    "TemplateLiteral",
    "Undefined",
    "Union",
    "UniqueSymbol",
    "Unknown",
    "Void",
    "child_nodes",
    "with_annotations",
]
