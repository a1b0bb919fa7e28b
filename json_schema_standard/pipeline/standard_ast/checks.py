"""
Refinement constraints attached to String, Number, BigInt, Arrays, Objects,
Suspend and Declaration nodes.

A check is either a single `Filter` or a named `FilterGroup` of checks.
The parameters of a check live in a `CheckMeta`, whose `params` use the
same keys as the Standard AST JSON form (e.g. `{"minLength": 1}`).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .annotations import Annotations


@dataclass
class CheckMeta:
    """Tagged constraint parameters, e.g. CheckMeta("isMinLength", {"minLength": 1})."""

    tag: str
    params: dict[str, Any] = field(default_factory=dict)

    def __getitem__(self, key: str) -> Any:
        return self.params[key]


@dataclass
class Filter:
    """An atomic constraint. A Filter without meta only carries annotations."""

    meta: CheckMeta | None = None
    annotations: Annotations | None = None


@dataclass
class FilterGroup:
    """A named composite constraint, e.g. isInt32 = isInt + isBetween."""

    checks: list[Filter | FilterGroup] = field(default_factory=list)
    meta: CheckMeta | None = None
    annotations: Annotations | None = None


Check = Filter | FilterGroup


def _filter(tag: str, annotations: Annotations | None = None, **params: Any) -> Filter:
    return Filter(meta=CheckMeta(tag, params), annotations=annotations)


def regexp(source: str, flags: str = "") -> dict[str, str]:
    """Build the `regExp` parameter of pattern based checks."""
    return {"source": source, "flags": flags}


# String checks


def is_min_length(min_length: int, annotations: Annotations | None = None) -> Filter:
    return _filter("isMinLength", annotations, minLength=min_length)


def is_max_length(max_length: int, annotations: Annotations | None = None) -> Filter:
    return _filter("isMaxLength", annotations, maxLength=max_length)


def is_length(length: int, annotations: Annotations | None = None) -> Filter:
    return _filter("isLength", annotations, length=length)


def is_pattern(source: str, flags: str = "", annotations: Annotations | None = None) -> Filter:
    return _filter("isPattern", annotations, regExp=regexp(source, flags))


def is_uuid(version: int | None = None, annotations: Annotations | None = None) -> Filter:
    if version is None:
        return _filter("isUUID", annotations)
    return _filter("isUUID", annotations, version=version)


def is_ulid(annotations: Annotations | None = None) -> Filter:
    return _filter("isULID", annotations)


def is_base64(annotations: Annotations | None = None) -> Filter:
    return _filter("isBase64", annotations)


def is_base64_url(annotations: Annotations | None = None) -> Filter:
    return _filter("isBase64Url", annotations)


def is_trimmed(annotations: Annotations | None = None) -> Filter:
    return _filter("isTrimmed", annotations)


def is_lowercased(annotations: Annotations | None = None) -> Filter:
    return _filter("isLowercased", annotations)


def is_uppercased(annotations: Annotations | None = None) -> Filter:
    return _filter("isUppercased", annotations)


def is_capitalized(annotations: Annotations | None = None) -> Filter:
    return _filter("isCapitalized", annotations)


def is_uncapitalized(annotations: Annotations | None = None) -> Filter:
    return _filter("isUncapitalized", annotations)


def is_starts_with(starts_with: str, annotations: Annotations | None = None) -> Filter:
    return _filter("isStartsWith", annotations, startsWith=starts_with)


def is_ends_with(ends_with: str, annotations: Annotations | None = None) -> Filter:
    return _filter("isEndsWith", annotations, endsWith=ends_with)


def is_includes(includes: str, annotations: Annotations | None = None) -> Filter:
    return _filter("isIncludes", annotations, includes=includes)


# Number checks


def is_int(annotations: Annotations | None = None) -> Filter:
    return _filter("isInt", annotations)


def is_finite(annotations: Annotations | None = None) -> Filter:
    return _filter("isFinite", annotations)


def is_multiple_of(divisor: int | float, annotations: Annotations | None = None) -> Filter:
    return _filter("isMultipleOf", annotations, divisor=divisor)


def is_greater_than_or_equal_to(minimum: int | float, annotations: Annotations | None = None) -> Filter:
    return _filter("isGreaterThanOrEqualTo", annotations, minimum=minimum)


def is_less_than_or_equal_to(maximum: int | float, annotations: Annotations | None = None) -> Filter:
    return _filter("isLessThanOrEqualTo", annotations, maximum=maximum)


def is_greater_than(exclusive_minimum: int | float, annotations: Annotations | None = None) -> Filter:
    return _filter("isGreaterThan", annotations, exclusiveMinimum=exclusive_minimum)


def is_less_than(exclusive_maximum: int | float, annotations: Annotations | None = None) -> Filter:
    return _filter("isLessThan", annotations, exclusiveMaximum=exclusive_maximum)


def is_between(minimum: int | float, maximum: int | float, annotations: Annotations | None = None) -> Filter:
    return _filter("isBetween", annotations, minimum=minimum, maximum=maximum)


def is_int32(annotations: Annotations | None = None) -> FilterGroup:
    """Integer within the signed 32 bit range."""
    return FilterGroup(
        checks=[is_int(), is_between(-2147483648, 2147483647)],
        meta=CheckMeta("isInt32"),
        annotations=annotations,
    )


def is_uint32(annotations: Annotations | None = None) -> FilterGroup:
    """Integer within the unsigned 32 bit range."""
    return FilterGroup(
        checks=[is_int(), is_between(0, 4294967295)],
        meta=CheckMeta("isUint32"),
        annotations=annotations,
    )


# Array checks


def is_min_items(min_items: int, annotations: Annotations | None = None) -> Filter:
    return _filter("isMinLength", annotations, minLength=min_items)


def is_max_items(max_items: int, annotations: Annotations | None = None) -> Filter:
    return _filter("isMaxLength", annotations, maxLength=max_items)


def is_unique(annotations: Annotations | None = None) -> Filter:
    return _filter("isUnique", annotations)


# Object checks


def is_min_properties(min_properties: int, annotations: Annotations | None = None) -> Filter:
    return _filter("isMinProperties", annotations, minProperties=min_properties)


def is_max_properties(max_properties: int, annotations: Annotations | None = None) -> Filter:
    return _filter("isMaxProperties", annotations, maxProperties=max_properties)


def annotation_filter(annotations: Annotations) -> Filter:
    """A Filter that only carries annotations (no constraint)."""
    return Filter(meta=None, annotations=annotations)
