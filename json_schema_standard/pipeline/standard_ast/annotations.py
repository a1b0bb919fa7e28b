"""
Annotations attached to Standard AST nodes, checks and keys.

Annotations are a fixed record of well-known optional fields plus one
explicit extension map. A field that is not set is absent: it is neither
serialized nor emitted.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, fields, replace
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..config import Dialect


@dataclass
class OverrideContext:
    """Arguments passed to an Override hook.

    Attributes:
        dialect: Dialect being emitted
        json_schema: Structural encoding the emitter would have produced, or
            None when the node has no structural encoding (e.g. Declaration)
        type_parameters: Emitted encodings of a Declaration's type parameters
        make: Emits any Standard node in the current emission context
    """

    dialect: Dialect
    json_schema: dict | None
    type_parameters: list[dict] = field(default_factory=list)
    make: Callable[[Any], dict] | None = None


@dataclass
class ConstraintContext:
    """Arguments passed to a Constraint hook."""

    dialect: Dialect
    type: str  # "string", "number", "bigint", "array" or "object"


@dataclass
class Override:
    """Replace the structural encoding of a node by the hook's output."""

    override: Callable[[OverrideContext], dict]


@dataclass
class Constraint:
    """Augment the fragment derived from a check with the hook's output."""

    constraint: Callable[[ConstraintContext], dict | None]


@dataclass
class Annotations:
    """Well-known annotation fields of a node.

    Attributes:
        title: Short title
        description: Longer description
        default: Default value, only meaningful when `has_default` is set
        has_default: Whether a default is present (None is a valid default)
        examples: Example values
        identifier: Name of the definition this node becomes
        brands: Nominal brands, in application order
        json_schema: Override or Constraint hook
        extensions: Open map of extra annotations, emitted verbatim
    """

    title: str | None = None
    description: str | None = None
    default: Any = None
    has_default: bool = False
    examples: list[Any] | None = None
    identifier: str | None = None
    brands: list[str] = field(default_factory=list)
    json_schema: Override | Constraint | None = None
    extensions: dict[str, Any] = field(default_factory=dict)

    def is_empty(self) -> bool:
        """True when no field is present."""
        return self == Annotations()

    def without_identifier(self) -> Annotations | None:
        """Copy without the identifier, None when nothing remains."""
        stripped = replace(self, identifier=None)
        return None if stripped.is_empty() else stripped

    def documentation(self) -> dict[str, Any]:
        """The JSON Schema keywords carried by these annotations.

        Returns:
            Dictionary with title, description, default, examples and extensions
        """
        result: dict[str, Any] = {}
        if self.title is not None:
            result["title"] = self.title
        if self.description is not None:
            result["description"] = self.description
        if self.has_default:
            result["default"] = self.default
        if self.examples is not None:
            result["examples"] = list(self.examples)
        result.update(self.extensions)
        return result

    @staticmethod
    def from_dict(d: dict[str, Any]) -> Annotations:
        """Create annotations from keyword-style arguments.

        `default` is considered present whenever the key exists.
        """
        annotations = Annotations()
        for key, value in d.items():
            if key == "default":
                annotations.default = value
                annotations.has_default = True
            elif key == "brands":
                annotations.brands = list(value)
            elif key == "extensions":
                annotations.extensions = dict(value)
            elif key in _FIELD_NAMES:
                setattr(annotations, key, value)
            else:
                annotations.extensions[key] = value
        return annotations


_FIELD_NAMES = {f.name for f in fields(Annotations)}


def merge_annotations(inner: Annotations | None, outer: Annotations | None) -> Annotations | None:
    """Merge two annotation layers.

    The outer (latest applied) layer wins per scalar field, brands accumulate
    in application order and extensions merge key-wise.

    Args:
        inner: Annotations applied first
        outer: Annotations applied last

    Returns:
        The merged annotations, None when both layers are absent
    """
    if inner is None:
        return outer
    if outer is None:
        return inner
    merged = replace(inner, brands=list(inner.brands), extensions=dict(inner.extensions))
    for name in ("title", "description", "examples", "identifier", "json_schema"):
        value = getattr(outer, name)
        if value is not None:
            setattr(merged, name, value)
    if outer.has_default:
        merged.default = outer.default
        merged.has_default = True
    merged.brands.extend(outer.brands)
    merged.extensions.update(outer.extensions)
    return merged
