"""
Constructor helpers for building Standard AST trees.

These are used by tests and by rendered Python modules, e.g.

    Person = annotate(
        struct({"name": string(), "age": optional_key(number())}),
        identifier="Person",
    )
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any as AnyValue

from .annotations import Annotations, merge_annotations
from .checks import Check, is_int
from .nodes import (
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
    with_annotations,
)


@dataclass
class Key:
    """A schema used as a property or tuple element, with key-level options."""

    type: StandardNode
    is_optional: bool = False
    is_mutable: bool = False
    annotations: Annotations | None = None


def _as_key(value: StandardNode | Key) -> Key:
    if isinstance(value, Key):
        return value
    return Key(type=value)


def optional_key(value: StandardNode | Key) -> Key:
    """Mark a property or tuple element as optional."""
    return replace(_as_key(value), is_optional=True)


def mutable_key(value: StandardNode | Key) -> Key:
    """Mark a property as mutable."""
    return replace(_as_key(value), is_mutable=True)


def annotate_key(value: StandardNode | Key, **annotations: AnyValue) -> Key:
    """Attach annotations to this occurrence of a property or tuple element."""
    key = _as_key(value)
    return replace(key, annotations=merge_annotations(key.annotations, Annotations.from_dict(annotations)))


def annotate(node: StandardNode, **annotations: AnyValue) -> StandardNode:
    """Copy of `node` with extra annotations, the new ones winning."""
    return with_annotations(node, Annotations.from_dict(annotations))


def brand(node: StandardNode, name: str) -> StandardNode:
    return with_annotations(node, Annotations(brands=[name]))


def check(node: StandardNode, *checks: Check) -> StandardNode:
    """Copy of `node` with `checks` appended in application order.

    Raises:
        TypeError: If the node kind does not carry checks
    """
    if not hasattr(node, "checks"):
        raise TypeError(f"{node.TAG} does not support checks")
    return replace(node, checks=[*node.checks, *checks])


def null() -> Null:
    return Null()


def undefined() -> Undefined:
    return Undefined()


def void() -> Void:
    return Void()


def never() -> Never:
    return Never()


def any_() -> Any:
    return Any()


def unknown() -> Unknown:
    return Unknown()


def boolean() -> Boolean:
    return Boolean()


def symbol() -> Symbol:
    return Symbol()


def unique_symbol(description: str) -> UniqueSymbol:
    return UniqueSymbol(symbol=description)


def object_keyword() -> ObjectKeyword:
    return ObjectKeyword()


def string(*checks: Check) -> String:
    return String(checks=list(checks))


def number(*checks: Check) -> Number:
    return Number(checks=list(checks))


def int_() -> Number:
    return Number(checks=[is_int()])


def bigint(*checks: Check) -> BigInt:
    return BigInt(checks=list(checks))


def literal(value: str | int | float | bool) -> Literal:
    return Literal(literal=value)


def literals(*values: str | int | float | bool) -> Union:
    """Union of literals, e.g. literals("a", "b")."""
    return Union(types=[Literal(literal=v) for v in values])


def enum_(pairs: dict[str, str | int | float]) -> Enum:
    return Enum(enums=list(pairs.items()))


def template_literal(*parts: StandardNode | str | int | float) -> TemplateLiteral:
    """Template literal; plain values become Literal parts."""
    return TemplateLiteral(parts=[p if isinstance(p, StandardNode) else Literal(literal=p) for p in parts])


def struct(
    fields: dict[str | SymbolKey, StandardNode | Key],
    records: list[tuple[StandardNode, StandardNode]] | None = None,
) -> Objects:
    """An object with named properties and optional index signatures.

    Args:
        fields: Property name to schema or `Key`, in order
        records: (key schema, value schema) index signatures

    Returns:
        The Objects node
    """
    property_signatures = []
    for name, value in fields.items():
        key = _as_key(value)
        property_signatures.append(
            PropertySignature(
                name=name,
                type=key.type,
                is_optional=key.is_optional,
                is_mutable=key.is_mutable,
                annotations=key.annotations,
            )
        )
    index_signatures = [IndexSignature(parameter=k, type=v) for k, v in records or []]
    return Objects(property_signatures=property_signatures, index_signatures=index_signatures)


def record(key: StandardNode, value: StandardNode) -> Objects:
    return Objects(index_signatures=[IndexSignature(parameter=key, type=value)])


def tuple_(*elements: StandardNode | Key, rest: list[StandardNode] | None = None) -> Arrays:
    """A tuple; `rest` adds trailing rest types."""
    keys = [_as_key(e) for e in elements]
    return Arrays(
        elements=[Element(type=k.type, is_optional=k.is_optional, annotations=k.annotations) for k in keys],
        rest=list(rest or []),
    )


def array(item: StandardNode) -> Arrays:
    return Arrays(rest=[item])


def union(*types: StandardNode, mode: str = "anyOf") -> Union:
    return Union(types=list(types), mode=mode)


def nullable(node: StandardNode) -> Union:
    return Union(types=[node, Null()])


def reference(name: str) -> Reference:
    return Reference(ref=name)


def suspend(thunk: Callable[[], StandardNode], **annotations: AnyValue) -> Suspend:
    """A deferred schema, e.g. suspend(lambda: Category)."""
    node = Suspend(thunk=thunk)
    if annotations:
        return annotate(node, **annotations)
    return node


def declaration(
    encoded: StandardNode | None = None,
    type_parameters: list[StandardNode] | None = None,
    **annotations: AnyValue,
) -> Declaration:
    node = Declaration(type_parameters=list(type_parameters or []), encoded=encoded)
    if annotations:
        return annotate(node, **annotations)
    return node
