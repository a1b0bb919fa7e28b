"""
Standard AST node definitions.

The Standard AST is a closed set of tagged variants describing a data shape
independently of any JSON Schema dialect. Every variant carries a class-level
`TAG` (its wire `_tag`) and optional `annotations`.

Trees are immutable by convention: transformations return copies built with
`dataclasses.replace`.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field, replace
from typing import ClassVar

from .annotations import Annotations, merge_annotations
from .checks import Check

# Largest integer a JSON number carries without loss
MAX_SAFE_INTEGER = 2**53 - 1


@dataclass(kw_only=True)
class StandardNode:
    """Base class for all Standard AST nodes."""

    TAG: ClassVar[str] = ""

    annotations: Annotations | None = None

    @property
    def identifier(self) -> str | None:
        """The `identifier` annotation, if any."""
        return self.annotations.identifier if self.annotations is not None else None


@dataclass
class Null(StandardNode):
    TAG: ClassVar[str] = "Null"


@dataclass
class Undefined(StandardNode):
    TAG: ClassVar[str] = "Undefined"


@dataclass
class Void(StandardNode):
    TAG: ClassVar[str] = "Void"


@dataclass
class Never(StandardNode):
    TAG: ClassVar[str] = "Never"


@dataclass
class Any(StandardNode):
    TAG: ClassVar[str] = "Any"


@dataclass
class Unknown(StandardNode):
    TAG: ClassVar[str] = "Unknown"


@dataclass
class Boolean(StandardNode):
    TAG: ClassVar[str] = "Boolean"


@dataclass
class Symbol(StandardNode):
    TAG: ClassVar[str] = "Symbol"


@dataclass
class ObjectKeyword(StandardNode):
    """Any non-primitive value: an object or an array."""

    TAG: ClassVar[str] = "ObjectKeyword"


@dataclass
class String(StandardNode):
    """A string, optionally carrying a string-encoded nested document."""

    TAG: ClassVar[str] = "String"

    checks: list[Check] = field(default_factory=list)
    content_media_type: str | None = None
    content_schema: StandardNode | None = None


@dataclass
class Number(StandardNode):
    TAG: ClassVar[str] = "Number"

    checks: list[Check] = field(default_factory=list)


@dataclass
class BigInt(StandardNode):
    TAG: ClassVar[str] = "BigInt"

    checks: list[Check] = field(default_factory=list)


@dataclass
class Literal(StandardNode):
    """A single constant value.

    `bigint` marks integer literals that model arbitrary precision integers.
    """

    TAG: ClassVar[str] = "Literal"

    literal: str | int | float | bool = ""
    bigint: bool = False

    def is_bigint(self) -> bool:
        if self.bigint:
            return True
        return (
            isinstance(self.literal, int)
            and not isinstance(self.literal, bool)
            and abs(self.literal) > MAX_SAFE_INTEGER
        )


@dataclass
class UniqueSymbol(StandardNode):
    TAG: ClassVar[str] = "UniqueSymbol"

    symbol: str = ""


@dataclass
class Enum(StandardNode):
    """Ordered (name, value) pairs of an enumeration."""

    TAG: ClassVar[str] = "Enum"

    enums: list[tuple[str, str | int | float]] = field(default_factory=list)


@dataclass
class TemplateLiteral(StandardNode):
    """A string built from literal parts and String/Number/Literal/Union parts."""

    TAG: ClassVar[str] = "TemplateLiteral"

    parts: list[StandardNode] = field(default_factory=list)


@dataclass
class Element:
    """A positional element of a tuple.

    Annotations here are key-level: they apply to this occurrence only.
    """

    type: StandardNode
    is_optional: bool = False
    annotations: Annotations | None = None


@dataclass(frozen=True)
class SymbolKey:
    """A symbol used as a property key."""

    description: str = ""


@dataclass
class PropertySignature:
    """A named property of an object.

    Annotations here are key-level: they apply to this occurrence only.
    """

    name: str | SymbolKey
    type: StandardNode
    is_optional: bool = False
    is_mutable: bool = False
    annotations: Annotations | None = None


@dataclass
class IndexSignature:
    """Maps keys matching `parameter` to values of `type`."""

    parameter: StandardNode
    type: StandardNode


@dataclass
class Arrays(StandardNode):
    """Fixed tuples, optional tail elements and homogeneous arrays.

    `rest` holds zero, one or more trailing rest types; more than one models
    a typed rest followed by fixed trailing elements.
    """

    TAG: ClassVar[str] = "Arrays"

    elements: list[Element] = field(default_factory=list)
    rest: list[StandardNode] = field(default_factory=list)
    checks: list[Check] = field(default_factory=list)


@dataclass
class Objects(StandardNode):
    """Closed structs and open records."""

    TAG: ClassVar[str] = "Objects"

    property_signatures: list[PropertySignature] = field(default_factory=list)
    index_signatures: list[IndexSignature] = field(default_factory=list)
    checks: list[Check] = field(default_factory=list)


@dataclass
class Union(StandardNode):
    TAG: ClassVar[str] = "Union"

    types: list[StandardNode] = field(default_factory=list)
    mode: str = "anyOf"  # "anyOf" or "oneOf"


@dataclass
class Suspend(StandardNode):
    """A deferred node used to express recursive shapes.

    The thunk is only evaluated by `force()`, which memoizes its result.
    """

    TAG: ClassVar[str] = "Suspend"

    thunk: StandardNode | Callable[[], StandardNode] | None = None
    checks: list[Check] = field(default_factory=list)
    _forced: StandardNode | None = field(default=None, compare=False, repr=False)

    def force(self) -> StandardNode:
        if self._forced is None:
            self._forced = self.thunk() if callable(self.thunk) else self.thunk
        return self._forced


@dataclass
class Reference(StandardNode):
    """A named pointer into a definitions table (wire key `$ref`)."""

    TAG: ClassVar[str] = "Reference"

    ref: str = ""


@dataclass
class Declaration(StandardNode):
    """An opaque host type whose wire shape is described by `encoded`."""

    TAG: ClassVar[str] = "Declaration"

    type_parameters: list[StandardNode] = field(default_factory=list)
    checks: list[Check] = field(default_factory=list)
    encoded: StandardNode | None = None


NODE_CLASSES: dict[str, type[StandardNode]] = {
    cls.TAG: cls
    for cls in (
        Null,
        Undefined,
        Void,
        Never,
        Any,
        Unknown,
        Boolean,
        Symbol,
        ObjectKeyword,
        String,
        Number,
        BigInt,
        Literal,
        UniqueSymbol,
        Enum,
        TemplateLiteral,
        Arrays,
        Objects,
        Union,
        Suspend,
        Reference,
        Declaration,
    )
}


def with_annotations(node: StandardNode, annotations: Annotations | None) -> StandardNode:
    """Copy of `node` whose annotations are merged with `annotations`."""
    if annotations is None:
        return node
    return replace(node, annotations=merge_annotations(node.annotations, annotations))


def child_nodes(node: StandardNode, force: bool = True) -> Iterator[StandardNode]:
    """Iterate over the direct sub-nodes of a node in traversal order.

    Args:
        node: Node to inspect
        force: Whether to force Suspend thunks

    Yields:
        Sub-nodes, left to right
    """
    if isinstance(node, String):
        if node.content_schema is not None:
            yield node.content_schema
    elif isinstance(node, TemplateLiteral):
        yield from node.parts
    elif isinstance(node, Arrays):
        for element in node.elements:
            yield element.type
        yield from node.rest
    elif isinstance(node, Objects):
        for ps in node.property_signatures:
            yield ps.type
        for index in node.index_signatures:
            yield index.parameter
            yield index.type
    elif isinstance(node, Union):
        yield from node.types
    elif isinstance(node, Suspend):
        if force:
            yield node.force()
    elif isinstance(node, Declaration):
        yield from node.type_parameters
        if node.encoded is not None:
            yield node.encoded
