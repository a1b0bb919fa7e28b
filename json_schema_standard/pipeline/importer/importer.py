"""
Dialect importer: JSON Schema documents to Standard AST documents.

Inverts the emitters for the subset of JSON Schema they produce, and
accepts the common hand-written shapes around it (`allOf` patches, `$ref`
with siblings, `type` arrays, `enum`/`const`).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any

from ...utils import unescape_json_pointer
from ..config import Dialect, ImporterConfig
from ..errors import MalformedImport
from ..merge.fragments import NUMBER_KEY_PATTERN, PATTERN_TAGS
from ..standard_ast import checks as c
from ..standard_ast.annotations import Annotations
from ..standard_ast.checks import Check, CheckMeta, Filter
from ..standard_ast.document import Document, MultiDocument
from ..standard_ast.nodes import (
    Arrays,
    Boolean,
    Element,
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
    Union,
    Unknown,
    with_annotations,
)

logger = logging.getLogger(__name__)

# Keys describing the document rather than the schema
META_KEYS = {"$schema", "$defs", "definitions", "$id", "$comment"}

ANNOTATION_KEYS = ("title", "description", "default", "examples")

# Keys understood by the importer; anything else is kept as an extension annotation
STRUCTURAL_KEYS = {
    "$ref",
    "allOf",
    "anyOf",
    "oneOf",
    "not",
    "type",
    "const",
    "enum",
    "properties",
    "required",
    "additionalProperties",
    "patternProperties",
    "items",
    "prefixItems",
    "additionalItems",
    "contentMediaType",
    "contentSchema",
}

STRING_CONSTRAINTS = ("minLength", "maxLength", "pattern", "format", "contentEncoding")
NUMBER_CONSTRAINTS = ("multipleOf", "minimum", "maximum", "exclusiveMinimum", "exclusiveMaximum")
ARRAY_CONSTRAINTS = ("minItems", "maxItems", "uniqueItems")
OBJECT_CONSTRAINTS = ("minProperties", "maxProperties")

CONSTRAINT_KEYS = set(STRING_CONSTRAINTS + NUMBER_CONSTRAINTS + ARRAY_CONSTRAINTS + OBJECT_CONSTRAINTS)

INT32_RANGE = (-2147483648, 2147483647)
UINT32_RANGE = (0, 4294967295)

OBJECT_KEYWORD = [{"type": "object"}, {"type": "array"}]


@dataclass
class ImportContext:
    """State of one import call."""

    root: Any
    dialect: Dialect
    definitions: dict[str, StandardNode] = field(default_factory=dict)
    names_by_pointer: dict[str, str] = field(default_factory=dict)


class DialectImporter:
    """Parses JSON Schema documents into Standard AST documents."""

    def __init__(self, config: ImporterConfig | None = None):
        """
        Initialize the importer.

        Args:
            config: Importer configuration; its dialect is used when the
                document has no recognizable `$schema`
        """
        self.config = config or ImporterConfig()

    def import_document(self, document: dict[str, Any] | bool) -> Document:
        """
        Import a JSON Schema document.

        Args:
            document: Root schema, possibly carrying `$schema` and a
                definitions container

        Returns:
            Document holding only the definitions reached through `$ref`

        Raises:
            MalformedImport: If the document is outside the importable subset
        """
        context = ImportContext(root=document, dialect=self._detect_dialect(document))
        schema = self._import(document, (), context)
        return Document(schema=schema, definitions=context.definitions)

    def import_multi(self, data: dict[str, Any]) -> MultiDocument:
        """
        Import the MultiDocument wire form `{dialect, schemas, definitions}`.
        """
        dialect = Dialect(data["dialect"]) if "dialect" in data else self.config.dialect
        root = {dialect.definitions_key: data.get("definitions", {})}
        context = ImportContext(root=root, dialect=dialect)
        schemas = [self._import(s, (i,), context) for i, s in enumerate(data.get("schemas", []))]
        return MultiDocument(schemas=schemas, definitions=context.definitions)

    def _detect_dialect(self, document: Any) -> Dialect:
        if isinstance(document, dict) and isinstance(document.get("$schema"), str):
            dialect = Dialect.from_uri(document["$schema"])
            if dialect is not None:
                # 2020-12 URIs are shared with OpenAPI 3.1
                if dialect == Dialect.DRAFT_2020_12 and self.config.dialect == Dialect.OPENAPI_3_1:
                    return Dialect.OPENAPI_3_1
                return dialect
        return self.config.dialect

    # References

    def _resolve_pointer(self, ref: str, path: tuple, context: ImportContext) -> Any:
        target = context.root
        if ref in ("#", "#/"):
            return target
        for token in ref[2:].split("/"):
            token = unescape_json_pointer(token)
            if isinstance(target, dict) and token in target:
                target = target[token]
            elif isinstance(target, list) and token.isdigit() and int(token) < len(target):
                target = target[int(token)]
            else:
                raise MalformedImport(f"unresolvable reference {ref!r}", path)
        return target

    def _definition_name(self, ref: str, context: ImportContext) -> str:
        base = unescape_json_pointer(ref.rstrip("/").split("/")[-1]) if ref not in ("#", "#/") else "root"
        name = base
        n = 0
        while name in context.definitions:
            n += 1
            name = f"{base}-{n}"
        return name

    def _import_reference(self, ref: str, path: tuple, context: ImportContext) -> Reference:
        """Register the target of an internal `$ref` and return a Reference to it."""
        if not ref.startswith("#"):
            return Reference(ref=ref)
        if ref in context.names_by_pointer:
            return Reference(ref=context.names_by_pointer[ref])
        target = self._resolve_pointer(ref, path, context)
        name = self._definition_name(ref, context)
        logger.debug("Importing %s as definition %s", ref, name)
        context.names_by_pointer[ref] = name
        # Placeholder keeps definitions in first-reached order and breaks cycles
        context.definitions[name] = Reference(ref=name)
        node = self._import(target, path, context)
        context.definitions[name] = with_annotations(node, Annotations(identifier=name))
        return Reference(ref=name)

    def _dereference(self, schema: dict[str, Any], path: tuple, context: ImportContext) -> dict[str, Any]:
        """Inline the target of a `$ref` that has sibling keys; siblings win."""
        ref = schema["$ref"]
        siblings = {k: v for k, v in schema.items() if k != "$ref"}
        if not ref.startswith("#"):
            raise MalformedImport(f"cannot inline external reference {ref!r}", path)
        self._import_reference(ref, path, context)
        target = self._resolve_pointer(ref, path, context)
        if target is True:
            target = {}
        elif target is False:
            target = {"not": {}}
        elif not isinstance(target, dict):
            raise MalformedImport(f"reference {ref!r} does not point at a schema", path)
        if "$ref" in target and len(target) > 1:
            target = self._dereference(target, path, context)
        return {**target, **siblings}

    # Schemas

    def _import(self, schema: Any, path: tuple, context: ImportContext) -> StandardNode:
        if schema is True:
            return Unknown()
        if schema is False:
            return Never()
        if not isinstance(schema, dict):
            raise MalformedImport(f"expected a schema object, got {type(schema).__name__}", path)
        schema = {k: v for k, v in schema.items() if k not in META_KEYS}

        if "$ref" in schema:
            if len(schema) == 1:
                return self._import_reference(schema["$ref"], path, context)
            return self._import(self._dereference(schema, path, context), path, context)

        if "allOf" in schema:
            return self._import_all_of(schema, path, context)

        annotations = self._extract_annotations(schema)

        if "const" in schema:
            return self._node(self._import_value(schema["const"]), annotations)
        if "enum" in schema:
            return self._import_enum(schema, path, annotations)
        if "anyOf" in schema or "oneOf" in schema:
            return self._import_union(schema, path, context, annotations)
        if schema.get("not") == {}:
            return self._node(Never(), annotations)

        schema_type = schema.get("type", self._infer_type(schema))
        if isinstance(schema_type, list):
            types = [self._import({**schema, "type": t}, path, context) for t in schema_type]
            # Annotations belong to the union, not to its members
            types = [replace(t, annotations=None) for t in types]
            return self._node(Union(types=types), annotations)

        match schema_type:
            case "string":
                node: StandardNode = self._import_string(schema, path, context)
            case "number" | "integer":
                node = self._import_number(schema, path)
            case "boolean":
                node = Boolean()
            case "null":
                node = Null()
            case "object":
                node = self._import_object(schema, path, context)
            case "array":
                node = self._import_array(schema, path, context)
            case None:
                node = Unknown()
            case _:
                raise MalformedImport(f"unknown type {schema_type!r}", path)
        return self._node(node, annotations)

    @staticmethod
    def _node(node: StandardNode, annotations: Annotations | None) -> StandardNode:
        if annotations is None:
            return node
        return replace(node, annotations=annotations)

    def _extract_annotations(self, schema: dict[str, Any]) -> Annotations | None:
        values: dict[str, Any] = {}
        for key in ANNOTATION_KEYS:
            if key in schema:
                values[key] = schema[key]
        extensions = {
            k: v
            for k, v in schema.items()
            if k not in STRUCTURAL_KEYS and k not in CONSTRAINT_KEYS and k not in ANNOTATION_KEYS
        }
        # Non-standard formats and encodings are kept verbatim
        if "format" in schema and schema["format"] != "uuid":
            extensions["format"] = schema["format"]
        if "contentEncoding" in schema and schema["contentEncoding"] not in ("base64", "base64url"):
            extensions["contentEncoding"] = schema["contentEncoding"]
        if extensions:
            values["extensions"] = extensions
        if not values:
            return None
        return Annotations.from_dict(values)

    @staticmethod
    def _infer_type(schema: dict[str, Any]) -> str | None:
        if any(k in schema for k in ("properties", "additionalProperties", "patternProperties", *OBJECT_CONSTRAINTS)):
            return "object"
        if any(k in schema for k in ("items", "prefixItems", "additionalItems", *ARRAY_CONSTRAINTS)):
            return "array"
        if any(k in schema for k in NUMBER_CONSTRAINTS):
            return "number"
        if any(k in schema for k in ("minLength", "maxLength", "pattern", "contentMediaType", "contentSchema")):
            return "string"
        return None

    @staticmethod
    def _import_value(value: Any) -> StandardNode:
        if value is None:
            return Null()
        if isinstance(value, (str, int, float, bool)):
            return Literal(literal=value)
        return Unknown()

    def _import_enum(self, schema: dict[str, Any], path: tuple, annotations: Annotations | None) -> StandardNode:
        values = schema["enum"]
        if not isinstance(values, list) or not values:
            raise MalformedImport("enum must be a non-empty list", path)
        members = [self._import_value(v) for v in values]
        if len(members) == 1:
            return self._node(members[0], annotations)
        return self._node(Union(types=members), annotations)

    def _import_union(
        self, schema: dict[str, Any], path: tuple, context: ImportContext, annotations: Annotations | None
    ) -> StandardNode:
        mode = "oneOf" if "oneOf" in schema else "anyOf"
        members = schema[mode]
        if mode == "anyOf" and members == OBJECT_KEYWORD:
            return self._node(ObjectKeyword(), annotations)
        if not isinstance(members, list):
            raise MalformedImport(f"{mode} must be a list", path)
        types = [self._import(m, path, context) for m in members]
        return self._node(Union(types=types, mode=mode), annotations)

    def _import_all_of(self, schema: dict[str, Any], path: tuple, context: ImportContext) -> StandardNode:
        """Merge allOf members into the schema as left-to-right patches.

        A member whose constraint keywords collide with the accumulated ones
        becomes extra checks, placed before the flat ones.
        """
        accumulated = {k: v for k, v in schema.items() if k != "allOf"}
        outer_annotations = {k for k in ANNOTATION_KEYS if k in accumulated}
        preserved: list[dict[str, Any]] = []
        for member in self._all_of_members(schema["allOf"], path, context):
            constraint_keys = {k for k in member if k in CONSTRAINT_KEYS}
            if any(k in accumulated for k in constraint_keys):
                preserved.append(member)
                continue
            for key, value in member.items():
                if key in outer_annotations:
                    continue
                if key == "properties" and isinstance(accumulated.get("properties"), dict):
                    accumulated["properties"] = {**accumulated["properties"], **value}
                elif key == "required" and isinstance(accumulated.get("required"), list):
                    accumulated["required"] = accumulated["required"] + [
                        r for r in value if r not in accumulated["required"]
                    ]
                else:
                    accumulated[key] = value

        node = self._import(accumulated, path, context)
        if not preserved:
            return node
        match node:
            case String():
                kind = "string"
            case Number():
                kind = "number"
            case Arrays():
                kind = "array"
            case Objects():
                kind = "object"
            case _:
                raise MalformedImport(f"constraints cannot apply to {node.TAG}", path)
        extra: list[Check] = []
        for member in preserved:
            extra.extend(self._fragment_checks(member, kind))
        return replace(node, checks=[*extra, *node.checks])

    def _all_of_members(self, members: Any, path: tuple, context: ImportContext) -> list[dict[str, Any]]:
        """allOf members as plain dicts: references inlined, nested allOf flattened."""
        if not isinstance(members, list):
            raise MalformedImport("allOf must be a list", path)
        out: list[dict[str, Any]] = []
        for member in members:
            if member is True:
                continue
            if member is False:
                member = {"not": {}}
            if not isinstance(member, dict):
                raise MalformedImport("allOf members must be schemas", path)
            if "$ref" in member:
                if not member["$ref"].startswith("#"):
                    raise MalformedImport(f"cannot merge external reference {member['$ref']!r}", path)
                member = self._dereference(member, path, context)
            if "allOf" in member:
                nested = member["allOf"]
                out.append({k: v for k, v in member.items() if k != "allOf"})
                out.extend(self._all_of_members(nested, path, context))
            else:
                out.append(member)
        return out

    def _fragment_checks(self, fragment: dict[str, Any], kind: str) -> list[Check]:
        """Checks of a preserved allOf fragment; its annotations go on the last check."""
        match kind:
            case "string":
                checks = self._string_checks(fragment)
            case "number":
                checks = self._number_checks(fragment, is_integer=fragment.get("type") == "integer")
            case "array":
                checks = self._array_checks(fragment, set())
            case _:
                checks = self._object_checks(fragment)
        annotations = self._extract_annotations(fragment)
        if annotations is not None:
            if checks:
                checks[-1] = replace(checks[-1], annotations=annotations)
            else:
                checks.append(Filter(meta=None, annotations=annotations))
        return checks

    # Strings

    def _string_checks(self, schema: dict[str, Any]) -> list[Check]:
        checks: list[Check] = []
        for key, value in schema.items():
            match key:
                case "minLength":
                    if schema.get("maxLength") == value:
                        checks.append(c.is_length(value))
                    else:
                        checks.append(c.is_min_length(value))
                case "maxLength":
                    if schema.get("minLength") != value:
                        checks.append(c.is_max_length(value))
                case "pattern":
                    tag = PATTERN_TAGS.get(value)
                    checks.append(Filter(meta=CheckMeta(tag)) if tag else c.is_pattern(value))
                case "format" if value == "uuid":
                    checks.append(c.is_uuid())
                case "contentEncoding" if value == "base64":
                    checks.append(c.is_base64())
                case "contentEncoding" if value == "base64url":
                    checks.append(c.is_base64_url())
        return checks

    def _import_string(self, schema: dict[str, Any], path: tuple, context: ImportContext) -> String:
        content_schema = None
        if "contentSchema" in schema:
            content_schema = self._import(schema["contentSchema"], path, context)
        return String(
            checks=self._string_checks(schema),
            content_media_type=schema.get("contentMediaType"),
            content_schema=content_schema,
        )

    # Numbers

    def _number_checks(self, schema: dict[str, Any], is_integer: bool) -> list[Check]:
        checks: list[Check] = []
        bounds = (schema.get("minimum"), schema.get("maximum"))
        if is_integer and bounds in (INT32_RANGE, UINT32_RANGE):
            checks.append(c.is_int32() if bounds == INT32_RANGE else c.is_uint32())
            schema = {k: v for k, v in schema.items() if k not in ("minimum", "maximum")}
        elif is_integer:
            checks.append(c.is_int())
        for key, value in schema.items():
            match key:
                case "multipleOf":
                    checks.append(c.is_multiple_of(value))
                case "minimum":
                    if "maximum" in schema:
                        checks.append(c.is_between(value, schema["maximum"]))
                    else:
                        checks.append(c.is_greater_than_or_equal_to(value))
                case "maximum":
                    if "minimum" not in schema:
                        checks.append(c.is_less_than_or_equal_to(value))
                case "exclusiveMinimum":
                    checks.append(c.is_greater_than(value))
                case "exclusiveMaximum":
                    checks.append(c.is_less_than(value))
        return checks

    def _import_number(self, schema: dict[str, Any], path: tuple) -> Number:
        return Number(checks=self._number_checks(schema, is_integer=schema.get("type") == "integer"))

    # Objects

    def _object_checks(self, schema: dict[str, Any]) -> list[Check]:
        checks: list[Check] = []
        for key, value in schema.items():
            match key:
                case "minProperties":
                    checks.append(c.is_min_properties(value))
                case "maxProperties":
                    checks.append(c.is_max_properties(value))
        return checks

    def _import_object(self, schema: dict[str, Any], path: tuple, context: ImportContext) -> Objects:
        properties = schema.get("properties", {})
        required = schema.get("required", [])
        if not isinstance(properties, dict) or not isinstance(required, list):
            raise MalformedImport("properties must be an object and required a list", path)
        property_signatures = [
            PropertySignature(
                name=name,
                type=self._import(value, path + (name,), context),
                is_optional=name not in required,
            )
            for name, value in properties.items()
        ]

        index_signatures = []
        for pattern, value in schema.get("patternProperties", {}).items():
            if pattern == NUMBER_KEY_PATTERN:
                parameter: StandardNode = Number()
            else:
                parameter = String(checks=[c.is_pattern(pattern)])
            index_signatures.append(IndexSignature(parameter=parameter, type=self._import(value, path, context)))

        additional = schema.get("additionalProperties", True)
        if additional is True:
            if "patternProperties" not in schema:
                index_signatures.append(IndexSignature(parameter=String(), type=Unknown()))
        elif additional is not False:
            index_signatures.append(IndexSignature(parameter=String(), type=self._import(additional, path, context)))

        return Objects(
            property_signatures=property_signatures,
            index_signatures=index_signatures,
            checks=self._object_checks(schema),
        )

    # Arrays

    def _array_checks(self, schema: dict[str, Any], structural: set[str]) -> list[Check]:
        checks: list[Check] = []
        for key, value in schema.items():
            if key in structural:
                continue
            match key:
                case "minItems":
                    if schema.get("maxItems") == value and "maxItems" not in structural:
                        checks.append(c.is_length(value))
                    else:
                        checks.append(c.is_min_items(value))
                case "maxItems":
                    if schema.get("minItems") != value or "minItems" in structural:
                        checks.append(c.is_max_items(value))
                case "uniqueItems" if value is True:
                    checks.append(c.is_unique())
        return checks

    def _import_array(self, schema: dict[str, Any], path: tuple, context: ImportContext) -> Arrays:
        items = schema.get("items")
        if context.dialect == Dialect.DRAFT_07:
            if "prefixItems" in schema:
                raise MalformedImport("prefixItems is not supported by draft-07", path)
            if isinstance(items, list):
                prefix, rest_schema = items, schema.get("additionalItems")
            else:
                prefix, rest_schema = [], items
        else:
            if isinstance(items, list):
                raise MalformedImport(f"items must not be a list in {context.dialect.value}", path)
            prefix, rest_schema = schema.get("prefixItems", []), items
        if not isinstance(prefix, list):
            raise MalformedImport("tuple items must be a list", path)

        structural: set[str] = set()
        min_items = schema.get("minItems")
        if prefix and isinstance(min_items, int) and min_items < len(prefix):
            structural.add("minItems")
            first_optional = min_items
        else:
            first_optional = len(prefix)
        elements = [
            Element(type=self._import(item, path + (i,), context), is_optional=i >= first_optional)
            for i, item in enumerate(prefix)
        ]

        rest: list[StandardNode] = []
        if rest_schema is None:
            if prefix and schema.get("maxItems") == len(prefix):
                structural.add("maxItems")
            else:
                rest = [Unknown()]
        elif rest_schema is not False:
            rest = [self._import(rest_schema, path + (len(prefix),), context)]

        return Arrays(elements=elements, rest=rest, checks=self._array_checks(schema, structural))


def import_json_schema(document: dict[str, Any] | bool, dialect: Dialect | None = None) -> Document:
    """Convenience wrapper around `DialectImporter.import_document`."""
    config = ImporterConfig(dialect=dialect) if dialect is not None else None
    return DialectImporter(config).import_document(document)
