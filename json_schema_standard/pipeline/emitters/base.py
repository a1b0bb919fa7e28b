"""
Base class for dialect emitters.

The structural lowering of the Standard AST to JSON Schema is shared by all
dialects. Subclasses only decide the tuple encoding, the definitions
container and the handling of content-encoded strings.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar

from ...utils import escape_json_pointer
from ..analyzer.identifier_resolver import path_segment
from ..analyzer.topological_sort import collect_references
from ..config import AdditionalPropertiesStrategy, Dialect, EmitterConfig, ReferenceStrategy
from ..errors import MissingIdentifier, UnsupportedNode, UnsupportedShape
from ..merge.fragments import (
    NUMBER_KEY_PATTERN,
    append_fragments,
    check_fragments,
    overwrite_annotations,
    template_literal_pattern,
    unwrap,
)
from ..standard_ast.annotations import Override, OverrideContext
from ..standard_ast.document import Document, MultiDocument
from ..standard_ast.nodes import Any as AnyNode
from ..standard_ast.nodes import (
    Arrays,
    BigInt,
    Boolean,
    Declaration,
    Enum,
    Literal,
    Never,
    Null,
    Number,
    ObjectKeyword,
    Objects,
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

logger = logging.getLogger(__name__)

JsonSchema = dict[str, Any]


@dataclass
class JsonSchemaDocument:
    """An emitted JSON Schema document.

    Attributes:
        dialect: Dialect of the document
        uri: Meta-schema URI
        schema: Root schema
        definitions: Emitted definitions, keyed by name
    """

    dialect: Dialect
    uri: str
    schema: JsonSchema
    definitions: dict[str, JsonSchema] = field(default_factory=dict)

    def to_dict(self) -> JsonSchema:
        """Standalone root object: `$schema`, the root schema and its definitions."""
        out: JsonSchema = {"$schema": self.uri, **self.schema}
        if self.definitions:
            out[self.dialect.definitions_key] = dict(self.definitions)
        return out


@dataclass
class EmitContext:
    """State of one emission call."""

    definitions: dict[str, StandardNode]
    # ids of Suspend nodes being emitted
    forcing: list[int] = field(default_factory=list)


def contains_undefined(node: StandardNode) -> bool:
    if isinstance(node, Undefined):
        return True
    if isinstance(node, Union):
        return any(contains_undefined(t) for t in node.types)
    return False


def literal_type(value: Any) -> str:
    """JSON Schema type of a literal value."""
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, str):
        return "string"
    return "number"


class DialectEmitter(ABC):
    """Abstract base class for dialect emitters."""

    DIALECT: ClassVar[Dialect]

    def __init__(self, config: EmitterConfig | None = None):
        """
        Initialize the emitter.

        Args:
            config: Emitter configuration; its dialect is ignored in favor of
                the emitter's own
        """
        self.config = config or EmitterConfig()

    @property
    def dialect(self) -> Dialect:
        return self.DIALECT

    @property
    def uri(self) -> str:
        return self.DIALECT.uri

    def pointer(self, name: str) -> str:
        """The `$ref` value pointing at a definition."""
        if self.config.get_ref is not None:
            return self.config.get_ref(name)
        return f"#/{self.DIALECT.definitions_key}/{escape_json_pointer(name)}"

    # Dialect specific encodings

    @abstractmethod
    def encode_tuple(self, out: JsonSchema, items: list[JsonSchema], rest: JsonSchema | bool) -> None:
        """
        Write the items of a tuple with at least one element into `out`.

        Args:
            out: Array schema being built
            items: Encoded elements
            rest: Encoded rest type, or False for a closed tuple
        """

    def encode_content(self, node: String, out: JsonSchema, path: tuple, context: EmitContext) -> None:
        """Write `contentMediaType` / `contentSchema` of a string into `out`."""
        if node.content_media_type is not None:
            out["contentMediaType"] = node.content_media_type
        if node.content_schema is not None:
            out["contentSchema"] = self._emit(node.content_schema, path, context)

    # Documents

    def emit(self, document: Document) -> JsonSchemaDocument:
        """
        Emit a Document.

        Args:
            document: Resolved document

        Returns:
            JsonSchemaDocument for this emitter's dialect

        Raises:
            UnsupportedNode: If a node has no encoding and no fallback applies
            UnsupportedShape: If a structure cannot be encoded
        """
        context = EmitContext(definitions=document.definitions)
        root, names = self._root(document.schema, document.definitions)
        schema = self._emit(root, (), context)
        definitions = {name: self._emit(document.definitions[name], (), context) for name in names}
        self._publish(definitions)
        return JsonSchemaDocument(dialect=self.DIALECT, uri=self.uri, schema=schema, definitions=definitions)

    def emit_multi(self, multi: MultiDocument) -> JsonSchema:
        """
        Emit a MultiDocument to its wire form `{dialect, schemas, definitions}`.
        """
        context = EmitContext(definitions=multi.definitions)
        roots = []
        reachable: list[str] = []
        for schema in multi.schemas:
            root, names = self._root(schema, multi.definitions)
            roots.append(root)
            reachable.extend(n for n in names if n not in reachable)
        schemas = [self._emit(root, (i,), context) for i, root in enumerate(roots)]
        definitions = {
            name: self._emit(node, (), context) for name, node in multi.definitions.items() if name in reachable
        }
        self._publish(definitions)
        return {"dialect": self.DIALECT.value, "schemas": schemas, "definitions": definitions}

    def _root(self, schema: StandardNode, definitions: dict[str, StandardNode]) -> tuple[StandardNode, list[str]]:
        """Apply the top level reference strategy.

        Returns:
            The root node to emit and the definition names to emit with it
        """
        if (
            self.config.top_level_reference_strategy == ReferenceStrategy.SKIP
            and isinstance(schema, Reference)
            and schema.ref in definitions
        ):
            root = with_annotations(definitions[schema.ref], schema.annotations)
            return root, self._reachable(root, definitions)
        if self.config.top_level_reference_strategy == ReferenceStrategy.SKIP:
            return schema, self._reachable(schema, definitions)
        return schema, list(definitions)

    def _reachable(self, root: StandardNode, definitions: dict[str, StandardNode]) -> list[str]:
        found: set[str] = set()
        pending = collect_references(root, definitions)
        while pending:
            name = pending.pop()
            if name in found:
                continue
            found.add(name)
            pending.extend(collect_references(definitions[name], definitions))
        dropped = [name for name in definitions if name not in found]
        if dropped:
            logger.debug("Dropping unreachable definitions %s", dropped)
        return [name for name in definitions if name in found]

    def _publish(self, definitions: dict[str, JsonSchema]) -> None:
        """Copy emitted definitions into the caller supplied map."""
        external = self.config.definitions
        if external is None:
            return
        for name, schema in definitions.items():
            if name in external:
                if external[name] != schema:
                    raise UnsupportedShape(f"definition {name!r} conflicts with an existing definition")
                logger.debug("Reusing existing definition %s", name)
            else:
                external[name] = schema

    # Structural lowering

    def make(self, node: StandardNode, path: tuple = ()) -> JsonSchema:
        """Emit a single node with no definitions in scope."""
        return self._emit(node, path, EmitContext(definitions={}))

    def _emit(self, node: StandardNode, path: tuple, context: EmitContext) -> JsonSchema:
        hook = node.annotations.json_schema if node.annotations is not None else None
        if isinstance(hook, Override):
            override_context = OverrideContext(
                dialect=self.DIALECT,
                json_schema=self._structural(node, path, context),
                type_parameters=[self._emit(t, path, context) for t in getattr(node, "type_parameters", [])],
                make=lambda n: self._emit(n, path, context),
            )
            out = unwrap(hook.override(override_context))
            return overwrite_annotations(out, node.annotations)
        out = self._structural(node, path, context)
        if out is None:
            out = self._missing(node, path)
        return overwrite_annotations(out, node.annotations)

    def _structural(self, node: StandardNode, path: tuple, context: EmitContext) -> JsonSchema | None:
        """Base encoding with checks applied, None when the node has none."""
        out = self._base(node, path, context)
        if out is None:
            return None
        checks = getattr(node, "checks", None)
        if checks:
            out = append_fragments(out, check_fragments(checks, self._check_kind(node, context), self.DIALECT))
        return out

    def _check_kind(self, node: StandardNode, context: EmitContext) -> str:
        """Keyword family for checks on a node, looking through indirections."""
        seen: set[str] = set()
        while True:
            if isinstance(node, Suspend):
                node = node.force()
            elif isinstance(node, Declaration) and node.encoded is not None:
                node = node.encoded
            elif isinstance(node, Reference) and node.ref in context.definitions and node.ref not in seen:
                seen.add(node.ref)
                node = context.definitions[node.ref]
            else:
                break
        if isinstance(node, Arrays):
            return "array"
        if isinstance(node, Objects):
            return "object"
        if isinstance(node, BigInt):
            return "bigint"
        if isinstance(node, Number):
            return "number"
        return "string"

    def _missing(self, node: StandardNode, path: tuple) -> JsonSchema:
        """Fallback for nodes without a JSON Schema encoding."""
        kind = "bigint Literal" if isinstance(node, Literal) else node.TAG
        if self.config.on_missing_annotation is not None:
            out = self.config.on_missing_annotation(node, path)
            if out is not None:
                logger.debug("Using fallback encoding for %s at %s", kind, path)
                return out
        raise UnsupportedNode(kind, path)

    def _base(self, node: StandardNode, path: tuple, context: EmitContext) -> JsonSchema | None:
        match node:
            case Null():
                return {"type": "null"}
            case Undefined() | BigInt() | Symbol() | UniqueSymbol():
                return None
            case Void() | Unknown() | AnyNode():
                return {}
            case Never():
                return {"not": {}}
            case Boolean():
                return {"type": "boolean"}
            case String():
                out: JsonSchema = {"type": "string"}
                if node.content_media_type is not None or node.content_schema is not None:
                    self.encode_content(node, out, path, context)
                return out
            case Number():
                return {"type": "number"}
            case ObjectKeyword():
                return {"anyOf": [{"type": "object"}, {"type": "array"}]}
            case Literal():
                if node.is_bigint():
                    return None
                return {"type": literal_type(node.literal), "enum": [node.literal]}
            case Enum():
                return self._base(Union(types=[Literal(literal=v) for _, v in node.enums]), path, context)
            case TemplateLiteral():
                return {"type": "string", "pattern": template_literal_pattern(node, path)}
            case Arrays():
                return self._arrays(node, path, context)
            case Objects():
                return self._objects(node, path, context)
            case Union():
                return self._union(node, path, context)
            case Suspend():
                if id(node) in context.forcing:
                    raise MissingIdentifier(path)
                context.forcing.append(id(node))
                try:
                    return self._emit(node.force(), path, context)
                finally:
                    context.forcing.pop()
            case Reference():
                return {"$ref": self.pointer(node.ref)}
            case Declaration():
                if node.encoded is not None:
                    return self._emit(node.encoded, path, context)
                return None
        raise UnsupportedNode(node.TAG, path)

    def _arrays(self, node: Arrays, path: tuple, context: EmitContext) -> JsonSchema:
        if len(node.rest) > 1:
            raise UnsupportedShape("post-rest elements are not supported", path)
        out: JsonSchema = {"type": "array"}
        items = [
            overwrite_annotations(self._emit(e.type, path + (i,), context), e.annotations)
            for i, e in enumerate(node.elements)
        ]
        first_optional = next((i for i, e in enumerate(node.elements) if e.is_optional), None)
        if first_optional is not None:
            out["minItems"] = first_optional
        rest: JsonSchema | bool = False
        if node.rest:
            rest = self._emit(node.rest[0], path + (len(node.elements),), context)
        if items:
            self.encode_tuple(out, items, rest)
        else:
            out["items"] = rest
        return out

    def _objects(self, node: Objects, path: tuple, context: EmitContext) -> JsonSchema:
        if not node.property_signatures and not node.index_signatures:
            return {"anyOf": [{"type": "object"}, {"type": "array"}]}
        out: JsonSchema = {"type": "object", "properties": {}, "required": []}
        for ps in node.property_signatures:
            property_path = path + (path_segment(ps.name),)
            if isinstance(ps.name, SymbolKey):
                raise UnsupportedNode(f"symbol key {path_segment(ps.name)}", property_path)
            out["properties"][ps.name] = overwrite_annotations(
                self._emit(ps.type, property_path, context), ps.annotations
            )
            if self._is_required(ps.type, ps.is_optional):
                out["required"].append(ps.name)

        if self.config.additional_properties_strategy == AdditionalPropertiesStrategy.ALLOW:
            out["additionalProperties"] = True
        else:
            out["additionalProperties"] = False
        pattern_properties: JsonSchema = {}
        has_string_index = False
        for index in node.index_signatures:
            value = self._emit(index.type, path, context)
            pattern = self._index_pattern(index.parameter, path, context)
            if pattern is not None:
                pattern_properties[pattern] = value
            elif has_string_index:
                raise UnsupportedShape("multiple string index signatures are not supported", path)
            else:
                has_string_index = True
                out["additionalProperties"] = value
        if pattern_properties:
            out["patternProperties"] = pattern_properties
            if not has_string_index:
                del out["additionalProperties"]
        return out

    def _is_required(self, node: StandardNode, is_optional: bool) -> bool:
        hook = node.annotations.json_schema if node.annotations is not None else None
        if isinstance(hook, Override):
            return not is_optional
        return not is_optional and not contains_undefined(node)

    def _index_pattern(self, parameter: StandardNode, path: tuple, context: EmitContext) -> str | None:
        """Pattern of an index signature key, None for plain string keys."""
        match parameter:
            case String():
                encoded = self._structural(parameter, path, context)
                lost = sorted(set(encoded) - {"type", "pattern"})
                if lost:
                    raise UnsupportedShape(f"index signature key keywords {lost} are not supported", path)
                pattern = encoded.get("pattern")
                return pattern if isinstance(pattern, str) else None
            case Number():
                return NUMBER_KEY_PATTERN
            case TemplateLiteral():
                return template_literal_pattern(parameter, path)
            case Symbol():
                raise UnsupportedNode("Symbol", path)
        raise UnsupportedShape(f"unsupported index signature parameter {parameter.TAG}", path)

    def _union(self, node: Union, path: tuple, context: EmitContext) -> JsonSchema:
        members = [t for t in node.types if not isinstance(t, Undefined)]
        if not members:
            return {"not": {}}
        if node.mode == "anyOf" and len(members) > 1 and self._is_literal_group(members):
            return {"type": literal_type(members[0].literal), "enum": [m.literal for m in members]}
        return unwrap({node.mode: [self._emit(t, path, context) for t in members]})

    @staticmethod
    def _is_literal_group(members: list[StandardNode]) -> bool:
        """Same typed literals without annotations collapse into one enum."""
        if not all(isinstance(m, Literal) and m.annotations is None and not m.is_bigint() for m in members):
            return False
        return len({literal_type(m.literal) for m in members}) == 1
