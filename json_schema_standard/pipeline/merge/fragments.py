"""
JSON level half of the annotation and constraint merge engine.

Checks are lowered to JSON Schema fragments, one per check, and layered
onto a structural encoding. When a constraint kind is applied more than
once, the last applied fragment is inlined flat and every earlier
occurrence is kept, in application order, inside `allOf`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ...utils import escape_regex
from ..errors import UnsupportedShape
from ..standard_ast.annotations import Annotations, Constraint, ConstraintContext
from ..standard_ast.checks import Check, FilterGroup
from ..standard_ast.nodes import Literal, Number, StandardNode, String, TemplateLiteral, Union

if TYPE_CHECKING:
    from ..config import Dialect

logger = logging.getLogger(__name__)

ULID_PATTERN = "^[0-7][0-9A-HJKMNP-TV-Z]{25}$"
TRIMMED_PATTERN = r"^\S[\s\S]*\S$|^\S$|^$"
LOWERCASED_PATTERN = "^[^A-Z]*$"
UPPERCASED_PATTERN = "^[^a-z]*$"
CAPITALIZED_PATTERN = "^[^a-z]?.*$"
UNCAPITALIZED_PATTERN = "^[^A-Z]?.*$"

STRING_PART_PATTERN = r"[\s\S]*?"
NUMBER_PART_PATTERN = r"[+-]?\d*\.?\d+(?:[Ee][+-]?\d+)?"

# Pattern used for index signatures keyed by numbers
NUMBER_KEY_PATTERN = "^[0-9]+$"

# Patterns produced by parameterless string checks, reversed by the importer
PATTERN_TAGS = {
    ULID_PATTERN: "isULID",
    TRIMMED_PATTERN: "isTrimmed",
    LOWERCASED_PATTERN: "isLowercased",
    UPPERCASED_PATTERN: "isUppercased",
    CAPITALIZED_PATTERN: "isCapitalized",
    UNCAPITALIZED_PATTERN: "isUncapitalized",
}


def annotation_keywords(annotations: Annotations | None) -> dict[str, Any]:
    """The JSON Schema documentation keywords of an annotation layer."""
    if annotations is None:
        return {}
    return annotations.documentation()


def _string_constraint(tag: str, params: dict[str, Any]) -> dict[str, Any]:
    match tag:
        case "isMinLength":
            return {"minLength": params["minLength"]}
        case "isMaxLength":
            return {"maxLength": params["maxLength"]}
        case "isLength":
            return {"minLength": params["length"], "maxLength": params["length"]}
        case "isPattern":
            return {"pattern": params["regExp"]["source"]}
        case "isUUID":
            return {"format": "uuid"}
        case "isULID":
            return {"pattern": ULID_PATTERN}
        case "isBase64":
            return {"contentEncoding": "base64"}
        case "isBase64Url":
            return {"contentEncoding": "base64url"}
        case "isTrimmed":
            return {"pattern": TRIMMED_PATTERN}
        case "isLowercased":
            return {"pattern": LOWERCASED_PATTERN}
        case "isUppercased":
            return {"pattern": UPPERCASED_PATTERN}
        case "isCapitalized":
            return {"pattern": CAPITALIZED_PATTERN}
        case "isUncapitalized":
            return {"pattern": UNCAPITALIZED_PATTERN}
        case "isStartsWith":
            return {"pattern": "^" + escape_regex(params["startsWith"])}
        case "isEndsWith":
            return {"pattern": escape_regex(params["endsWith"]) + "$"}
        case "isIncludes":
            return {"pattern": escape_regex(params["includes"])}
    return {}


def _number_constraint(tag: str, params: dict[str, Any]) -> dict[str, Any]:
    match tag:
        case "isInt":
            return {"type": "integer"}
        case "isMultipleOf":
            return {"multipleOf": params["divisor"]}
        case "isGreaterThanOrEqualTo":
            return {"minimum": params["minimum"]}
        case "isLessThanOrEqualTo":
            return {"maximum": params["maximum"]}
        case "isGreaterThan":
            return {"exclusiveMinimum": params["exclusiveMinimum"]}
        case "isLessThan":
            return {"exclusiveMaximum": params["exclusiveMaximum"]}
        case "isBetween":
            return {"minimum": params["minimum"], "maximum": params["maximum"]}
    return {}


def _array_constraint(tag: str, params: dict[str, Any]) -> dict[str, Any]:
    match tag:
        case "isMinLength":
            return {"minItems": params["minLength"]}
        case "isMaxLength":
            return {"maxItems": params["maxLength"]}
        case "isLength":
            return {"minItems": params["length"], "maxItems": params["length"]}
        case "isUnique":
            return {"uniqueItems": True}
    return {}


def _object_constraint(tag: str, params: dict[str, Any]) -> dict[str, Any]:
    match tag:
        case "isMinProperties":
            return {"minProperties": params["minProperties"]}
        case "isMaxProperties":
            return {"maxProperties": params["maxProperties"]}
    return {}


_CONSTRAINTS = {
    "string": _string_constraint,
    "number": _number_constraint,
    "bigint": _number_constraint,
    "array": _array_constraint,
    "object": _object_constraint,
}


def _collides(accumulated: dict[str, Any], fragment: dict[str, Any]) -> bool:
    return any(key in accumulated for key in fragment if key != "type")


def check_fragment(check: Check, kind: str, dialect: Dialect) -> dict[str, Any]:
    """Lower one check to a JSON Schema fragment.

    Args:
        check: Filter or FilterGroup
        kind: "string", "number", "bigint", "array" or "object"
        dialect: Dialect being emitted, passed to Constraint hooks

    Returns:
        The fragment, empty when the check has no JSON Schema counterpart
    """
    if isinstance(check, FilterGroup):
        members = [f for f in (check_fragment(c, kind, dialect) for c in check.checks) if f]
        fragment: dict[str, Any] = {}
        if any(_collides(members[i], members[j]) for i in range(len(members)) for j in range(i)):
            fragment["allOf"] = members
        else:
            for member in members:
                fragment.update(member)
    elif check.meta is not None:
        fragment = dict(_CONSTRAINTS[kind](check.meta.tag, check.meta.params))
        if not fragment and check.meta.tag not in ("isFinite", "isInt"):
            logger.debug("No JSON Schema keyword for %s check %s", kind, check.meta.tag)
    else:
        fragment = {}

    if check.annotations is not None and isinstance(check.annotations.json_schema, Constraint):
        extra = check.annotations.json_schema.constraint(ConstraintContext(dialect=dialect, type=kind))
        if extra:
            fragment.update(extra)
    keywords = annotation_keywords(check.annotations)
    if keywords:
        fragment = {**keywords, **fragment}
    return fragment


def check_fragments(checks: list[Check], kind: str, dialect: Dialect) -> list[dict[str, Any]]:
    """Lower checks to their non-empty fragments, in application order."""
    return [f for f in (check_fragment(c, kind, dialect) for c in checks) if f]


def append_fragments(schema: dict[str, Any], fragments: list[dict[str, Any]]) -> dict[str, Any]:
    """Layer check fragments onto a structural encoding.

    The last applied fragment is merged flat. An earlier fragment sharing a
    keyword with what is already inlined goes to `allOf`, which keeps the
    application order. A fragment `type` refines the base type.

    Args:
        schema: Structural encoding
        fragments: Check fragments in application order

    Returns:
        The combined schema
    """
    if not fragments:
        return schema
    if "$ref" in schema:
        return {"allOf": [schema, *fragments]}

    out = dict(schema)
    preserved: list[dict[str, Any]] = []
    type_refined = False
    for fragment in reversed(fragments):
        rest = {k: v for k, v in fragment.items() if k != "type"}
        if "type" in fragment and not type_refined:
            out["type"] = fragment["type"]
            type_refined = True
        if not rest:
            continue
        if _collides(out, rest):
            preserved.insert(0, rest)
        else:
            out.update(rest)
    if preserved:
        out["allOf"] = [*out.get("allOf", []), *preserved]
    return out


def overwrite_annotations(schema: dict[str, Any], annotations: Annotations | None) -> dict[str, Any]:
    """Apply an annotation layer; its documentation keywords win outright.

    A `$ref` cannot carry siblings in every dialect, so it is wrapped in
    `allOf` first.
    """
    keywords = annotation_keywords(annotations)
    if not keywords:
        return schema
    if "$ref" in schema:
        return {"allOf": [schema], **keywords}
    return {**schema, **keywords}


def unwrap(schema: dict[str, Any]) -> dict[str, Any]:
    """Collapse a single member anyOf/oneOf/allOf wrapper."""
    if len(schema) == 1:
        for key in ("anyOf", "oneOf", "allOf"):
            members = schema.get(key)
            if isinstance(members, list) and len(members) == 1:
                return members[0]
    return schema


def _part_pattern(part: StandardNode, path: tuple) -> str:
    if isinstance(part, String):
        return STRING_PART_PATTERN
    if isinstance(part, Number):
        return NUMBER_PART_PATTERN
    if isinstance(part, Literal):
        value = part.literal
        if isinstance(value, bool):
            value = "true" if value else "false"
        return escape_regex(str(value))
    if isinstance(part, TemplateLiteral):
        return "".join(_part_pattern(p, path) for p in part.parts)
    if isinstance(part, Union):
        return "|".join(_part_pattern(t, path) for t in part.types)
    raise UnsupportedShape(f"unsupported template literal part {part.TAG}", path)


def template_literal_pattern(node: TemplateLiteral, path: tuple = ()) -> str:
    """Anchored regular expression matching a template literal.

    Example:
        `a${string}` -> "^(a)([\\s\\S]*?)$"
    """
    return "^" + "".join(f"({_part_pattern(p, path)})" for p in node.parts) + "$"
