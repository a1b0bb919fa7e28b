"""
Python surface renderer.

Renders a Document or MultiDocument as a Python module of builder calls
that rebuilds the same Standard AST. This is a one-way, best-effort
convenience: Override and Constraint hooks cannot be rendered and are
dropped with a warning.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import jinja2

from ... import __version__
from ...cli_utils import reconstruct_command_line
from ...utils import to_python_identifier
from ..analyzer.topological_sort import topological_sort
from ..config import RendererConfig
from ..formatters import BlackFormatter
from ..standard_ast.annotations import Annotations
from ..standard_ast.checks import Check, FilterGroup
from ..standard_ast.document import Document, MultiDocument
from ..standard_ast.nodes import (
    Any,
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
)

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent.parent.parent / "templates" / "python"

# Builders of parameterless nodes
LEAF_BUILDERS = {
    Null: "null",
    Undefined: "undefined",
    Void: "void",
    Never: "never",
    Any: "any_",
    Unknown: "unknown",
    Boolean: "boolean",
    Symbol: "symbol",
    ObjectKeyword: "object_keyword",
}

CHECK_CLASSES = {"CheckMeta", "Filter", "FilterGroup"}

# Check tag -> (factory, parameter names in call order)
CHECK_FACTORIES = {
    "isMinLength": ("is_min_length", ("minLength",)),
    "isMaxLength": ("is_max_length", ("maxLength",)),
    "isLength": ("is_length", ("length",)),
    "isUUID": ("is_uuid", ("version",)),
    "isULID": ("is_ulid", ()),
    "isBase64": ("is_base64", ()),
    "isBase64Url": ("is_base64_url", ()),
    "isTrimmed": ("is_trimmed", ()),
    "isLowercased": ("is_lowercased", ()),
    "isUppercased": ("is_uppercased", ()),
    "isCapitalized": ("is_capitalized", ()),
    "isUncapitalized": ("is_uncapitalized", ()),
    "isStartsWith": ("is_starts_with", ("startsWith",)),
    "isEndsWith": ("is_ends_with", ("endsWith",)),
    "isIncludes": ("is_includes", ("includes",)),
    "isInt": ("is_int", ()),
    "isFinite": ("is_finite", ()),
    "isMultipleOf": ("is_multiple_of", ("divisor",)),
    "isGreaterThanOrEqualTo": ("is_greater_than_or_equal_to", ("minimum",)),
    "isLessThanOrEqualTo": ("is_less_than_or_equal_to", ("maximum",)),
    "isGreaterThan": ("is_greater_than", ("exclusiveMinimum",)),
    "isLessThan": ("is_less_than", ("exclusiveMaximum",)),
    "isBetween": ("is_between", ("minimum", "maximum")),
    "isInt32": ("is_int32", ()),
    "isUint32": ("is_uint32", ()),
    "isUnique": ("is_unique", ()),
    "isMinProperties": ("is_min_properties", ("minProperties",)),
    "isMaxProperties": ("is_max_properties", ("maxProperties",)),
}


# Names imported by rendered modules, never used for definitions
RESERVED_NAMES = {
    *LEAF_BUILDERS.values(),
    *(factory for factory, _ in CHECK_FACTORIES.values()),
    *CHECK_CLASSES,
    "is_pattern",
    "string",
    "number",
    "int_",
    "bigint",
    "literal",
    "literals",
    "unique_symbol",
    "enum_",
    "template_literal",
    "struct",
    "record",
    "tuple_",
    "array",
    "union",
    "suspend",
    "reference",
    "declaration",
    "check",
    "annotate",
    "annotate_key",
    "optional_key",
    "mutable_key",
    "Annotations",
    "String",
    "Literal",
    "SymbolKey",
}


@dataclass
class RenderedDefinition:
    """A definition ready to be written by the template."""

    name: str
    identifier: str
    expression: str
    type_hint: str = ""
    recursive: bool = False


@dataclass
class RenderContext:
    """State of one rendering call."""

    identifiers: dict[str, str] = field(default_factory=dict)
    recursives: set[str] = field(default_factory=set)
    builders: set[str] = field(default_factory=set)
    checks: set[str] = field(default_factory=set)
    nodes: set[str] = field(default_factory=set)
    needs_annotations: bool = False


class PythonRenderer:
    """Renders Standard AST documents as Python builder code."""

    def __init__(self, config: RendererConfig | None = None):
        """
        Initialize the renderer.

        Args:
            config: Renderer configuration
        """
        self.config = config or RendererConfig()
        self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
            lstrip_blocks=True,
            trim_blocks=True,
        )
        self.prefix_template = self.jinja_env.get_template("prefix.py.jinja2")
        self.definition_template = self.jinja_env.get_template("definition.py.jinja2")
        self.suffix_template = self.jinja_env.get_template("suffix.py.jinja2")

    def render(self, document: Document | MultiDocument) -> str:
        """
        Render a document as a Python module.

        Args:
            document: Document or MultiDocument to render

        Returns:
            Module source code
        """
        context = RenderContext()
        sort = topological_sort(document.definitions)
        context.recursives = set(sort.recursives)
        self._assign_identifiers(document.definitions, context)

        definitions = []
        for entry in sort.non_recursives:
            definitions.append(self._definition(entry.ref, entry.schema, context, recursive=False))
        for name, schema in sort.recursives.items():
            definitions.append(self._definition(name, schema, context, recursive=True))

        multi = isinstance(document, MultiDocument)
        schemas = document.schemas if multi else [document.schema]
        roots = [self._root_expression(s, context) for s in schemas]
        root_hints = [self.type_hint(s, context) for s in schemas]

        # Imports are only known once every expression is rendered
        parts = [
            self.prefix_template.render(
                generation_comment=self._generation_comment(),
                builders=sorted(context.builders),
                checks=sorted(context.checks | (context.nodes & CHECK_CLASSES)),
                nodes=sorted(context.nodes - CHECK_CLASSES),
                needs_annotations=context.needs_annotations,
            )
        ]
        for definition in definitions:
            parts.append(
                self.definition_template.render(
                    definition=definition,
                    add_type_comments=self.config.add_type_comments,
                )
            )
        parts.append(
            self.suffix_template.render(
                root_name=self.config.root_name,
                roots=roots,
                root_hints=root_hints,
                multi=multi,
                add_type_comments=self.config.add_type_comments,
            )
        )
        code = "\n\n".join(part.strip("\n") for part in parts) + "\n"

        if self.config.formatter.enabled:
            code = BlackFormatter().format(code, self.config.formatter)
        return code

    def _root_expression(self, node: StandardNode, context: RenderContext) -> str:
        # Every definition is bound by the time the roots are assigned
        if isinstance(node, Reference) and node.annotations is None and node.ref in context.identifiers:
            return context.identifiers[node.ref]
        return self._expression(node, context)

    def _generation_comment(self) -> str:
        if not self.config.add_generation_comment:
            return ""
        command_line = reconstruct_command_line()
        return f"# Generated by json_schema_standard v{__version__} : {command_line}"

    def _assign_identifiers(self, definitions: dict[str, StandardNode], context: RenderContext) -> None:
        taken = {self.config.root_name, f"{self.config.root_name}s", *RESERVED_NAMES}
        for name in definitions:
            identifier = to_python_identifier(name)
            while identifier in taken:
                identifier += "_"
            taken.add(identifier)
            context.identifiers[name] = identifier

    def _definition(
        self, name: str, schema: StandardNode, context: RenderContext, recursive: bool
    ) -> RenderedDefinition:
        return RenderedDefinition(
            name=name,
            identifier=context.identifiers[name],
            expression=self._expression(schema, context),
            type_hint=self.type_hint(schema, context),
            recursive=recursive,
        )

    # Expressions

    def _builder(self, name: str, context: RenderContext) -> str:
        context.builders.add(name)
        return name

    def _annotations(self, annotations: Annotations | None, constructor: bool = False) -> list[str]:
        """Keyword arguments reproducing an annotation layer.

        With `constructor` set, the arguments target `Annotations(...)`
        instead of the `annotate` builders.
        """
        if annotations is None:
            return []
        if annotations.json_schema is not None:
            logger.warning("Cannot render %s hook, dropping it", type(annotations.json_schema).__name__)
        kwargs = []
        for key in ("title", "description", "identifier", "examples"):
            value = getattr(annotations, key)
            if value is not None:
                kwargs.append(f"{key}={value!r}")
        if annotations.has_default:
            kwargs.append(f"default={annotations.default!r}")
            if constructor:
                kwargs.append("has_default=True")
        if annotations.brands:
            kwargs.append(f"brands={annotations.brands!r}")
        if annotations.extensions:
            kwargs.append(f"extensions={annotations.extensions!r}")
        return kwargs

    def _annotations_value(self, annotations: Annotations, context: RenderContext) -> str:
        context.needs_annotations = True
        return f"Annotations({', '.join(self._annotations(annotations, constructor=True))})"

    def _check(self, check: Check, context: RenderContext) -> str:
        meta = check.meta
        if meta is not None and meta.tag in CHECK_FACTORIES:
            factory, params = CHECK_FACTORIES[meta.tag]
            args = [repr(meta.params[p]) for p in params if p in meta.params]
        elif meta is not None and meta.tag == "isPattern":
            factory = "is_pattern"
            pattern = meta.params["regExp"]
            args = [repr(pattern["source"])]
            if pattern.get("flags"):
                args.append(repr(pattern["flags"]))
        else:
            args = []
            if isinstance(check, FilterGroup):
                factory = "FilterGroup"
                args.append(f"checks=[{', '.join(self._checks(check.checks, context))}]")
            else:
                factory = "Filter"
            if meta is not None:
                context.nodes.add("CheckMeta")
                args.append(f"meta=CheckMeta({meta.tag!r}, {meta.params!r})")
            if check.annotations is not None:
                args.append(f"annotations={self._annotations_value(check.annotations, context)}")
            context.nodes.add(factory)
            return f"{factory}({', '.join(args)})"
        context.checks.add(factory)
        if check.annotations is not None:
            args.append(f"annotations={self._annotations_value(check.annotations, context)}")
        return f"{factory}({', '.join(args)})"

    def _checks(self, checks: list[Check], context: RenderContext) -> list[str]:
        return [self._check(c, context) for c in checks]

    def _with_checks(self, expression: str, checks: list[Check], context: RenderContext) -> str:
        if not checks:
            return expression
        return f"{self._builder('check', context)}({expression}, {', '.join(self._checks(checks, context))})"

    def _key(self, expression: str, is_optional: bool, is_mutable: bool, annotations, context: RenderContext) -> str:
        kwargs = self._annotations(annotations)
        if kwargs:
            expression = f"{self._builder('annotate_key', context)}({expression}, {', '.join(kwargs)})"
        if is_optional:
            expression = f"{self._builder('optional_key', context)}({expression})"
        if is_mutable:
            expression = f"{self._builder('mutable_key', context)}({expression})"
        return expression

    def _expression(self, node: StandardNode, context: RenderContext) -> str:
        """Builder expression for a node, including its annotations."""
        expression = self._structure(node, context)
        kwargs = self._annotations(node.annotations)
        if kwargs:
            expression = f"{self._builder('annotate', context)}({expression}, {', '.join(kwargs)})"
        return expression

    def _structure(self, node: StandardNode, context: RenderContext) -> str:
        if type(node) in LEAF_BUILDERS:
            return f"{self._builder(LEAF_BUILDERS[type(node)], context)}()"
        match node:
            case String() if node.content_media_type is not None or node.content_schema is not None:
                context.nodes.add("String")
                args = [f"checks=[{', '.join(self._checks(node.checks, context))}]"]
                if node.content_media_type is not None:
                    args.append(f"content_media_type={node.content_media_type!r}")
                if node.content_schema is not None:
                    args.append(f"content_schema={self._expression(node.content_schema, context)}")
                return f"String({', '.join(args)})"
            case String():
                return f"{self._builder('string', context)}({', '.join(self._checks(node.checks, context))})"
            case Number():
                if self._is_plain_int(node):
                    return f"{self._builder('int_', context)}()"
                return f"{self._builder('number', context)}({', '.join(self._checks(node.checks, context))})"
            case BigInt():
                return f"{self._builder('bigint', context)}({', '.join(self._checks(node.checks, context))})"
            case Literal():
                if node.bigint:
                    context.nodes.add("Literal")
                    return f"Literal(literal={node.literal!r}, bigint=True)"
                return f"{self._builder('literal', context)}({node.literal!r})"
            case UniqueSymbol():
                return f"{self._builder('unique_symbol', context)}({node.symbol!r})"
            case Enum():
                return f"{self._builder('enum_', context)}({dict(node.enums)!r})"
            case TemplateLiteral():
                parts = []
                for p in node.parts:
                    if isinstance(p, Literal) and p.annotations is None and not p.bigint:
                        parts.append(repr(p.literal))
                    else:
                        parts.append(self._expression(p, context))
                return f"{self._builder('template_literal', context)}({', '.join(parts)})"
            case Arrays():
                return self._with_checks(self._arrays(node, context), node.checks, context)
            case Objects():
                return self._with_checks(self._objects(node, context), node.checks, context)
            case Union():
                if node.mode == "anyOf" and node.types and all(
                    isinstance(t, Literal) and t.annotations is None and not t.bigint for t in node.types
                ):
                    values = ", ".join(repr(t.literal) for t in node.types)
                    return f"{self._builder('literals', context)}({values})"
                members = [self._expression(t, context) for t in node.types]
                if node.mode == "oneOf":
                    members.append('mode="oneOf"')
                return f"{self._builder('union', context)}({', '.join(members)})"
            case Suspend():
                target = node.force()
                if isinstance(target, Reference) and target.ref in context.identifiers and target.annotations is None:
                    inner = context.identifiers[target.ref]
                else:
                    inner = self._expression(target, context)
                suspended = f"{self._builder('suspend', context)}(lambda: {inner})"
                return self._with_checks(suspended, node.checks, context)
            case Reference():
                if node.ref not in context.identifiers:
                    return f"{self._builder('reference', context)}({node.ref!r})"
                identifier = context.identifiers[node.ref]
                if node.ref in context.recursives:
                    return f"{self._builder('suspend', context)}(lambda: {identifier})"
                return identifier
            case Declaration():
                args = []
                if node.encoded is not None:
                    args.append(f"encoded={self._expression(node.encoded, context)}")
                if node.type_parameters:
                    type_parameters = ", ".join(self._expression(t, context) for t in node.type_parameters)
                    args.append(f"type_parameters=[{type_parameters}]")
                expression = f"{self._builder('declaration', context)}({', '.join(args)})"
                return self._with_checks(expression, node.checks, context)
        raise ValueError(f"cannot render {node.TAG}")

    @staticmethod
    def _is_plain_int(node: Number) -> bool:
        if len(node.checks) != 1:
            return False
        only = node.checks[0]
        return only.meta is not None and only.meta.tag == "isInt" and only.annotations is None

    def _arrays(self, node: Arrays, context: RenderContext) -> str:
        if not node.elements and len(node.rest) == 1:
            return f"{self._builder('array', context)}({self._expression(node.rest[0], context)})"
        args = [
            self._key(self._expression(e.type, context), e.is_optional, False, e.annotations, context)
            for e in node.elements
        ]
        if node.rest:
            args.append(f"rest=[{', '.join(self._expression(r, context) for r in node.rest)}]")
        return f"{self._builder('tuple_', context)}({', '.join(args)})"

    def _objects(self, node: Objects, context: RenderContext) -> str:
        if not node.property_signatures and len(node.index_signatures) == 1:
            index = node.index_signatures[0]
            key = self._expression(index.parameter, context)
            value = self._expression(index.type, context)
            return f"{self._builder('record', context)}({key}, {value})"
        fields = []
        for ps in node.property_signatures:
            if isinstance(ps.name, SymbolKey):
                context.nodes.add("SymbolKey")
                name = f"SymbolKey({ps.name.description!r})"
            else:
                name = repr(ps.name)
            value = self._key(
                self._expression(ps.type, context), ps.is_optional, ps.is_mutable, ps.annotations, context
            )
            fields.append(f"{name}: {value}")
        args = ["{" + ", ".join(fields) + "}"]
        if node.index_signatures:
            records = ", ".join(
                f"({self._expression(i.parameter, context)}, {self._expression(i.type, context)})"
                for i in node.index_signatures
            )
            args.append(f"records=[{records}]")
        return f"{self._builder('struct', context)}({', '.join(args)})"

    # Type hints

    def type_hint(self, node: StandardNode, context: RenderContext | None = None) -> str:
        """
        Python type hint describing the values accepted by a node.

        Args:
            node: Node to describe
            context: Rendering context, used to name definitions

        Returns:
            Type hint, e.g. "list[str]" or "Literal['a'] | None"
        """
        identifiers = context.identifiers if context is not None else {}
        match node:
            case String() | TemplateLiteral():
                return "str"
            case Number():
                if any(c.meta is not None and c.meta.tag in ("isInt", "isInt32", "isUint32") for c in node.checks):
                    return "int"
                return "float"
            case BigInt():
                return "int"
            case Boolean():
                return "bool"
            case Null() | Undefined() | Void():
                return "None"
            case Never():
                return "NoReturn"
            case Literal():
                return f"Literal[{node.literal!r}]"
            case Enum():
                return f"Literal[{', '.join(repr(v) for _, v in node.enums)}]"
            case Arrays():
                if not node.elements and len(node.rest) == 1:
                    return f"list[{self.type_hint(node.rest[0], context)}]"
                members = [self.type_hint(e.type, context) for e in node.elements]
                if node.rest:
                    members.append(f"*tuple[{self.type_hint(node.rest[0], context)}, ...]")
                return f"tuple[{', '.join(members)}]" if members else "tuple[()]"
            case Objects():
                if not node.property_signatures and len(node.index_signatures) == 1:
                    index = node.index_signatures[0]
                    key = self.type_hint(index.parameter, context)
                    return f"dict[{key}, {self.type_hint(index.type, context)}]"
                return "dict[str, Any]"
            case ObjectKeyword():
                return "dict | list"
            case Union():
                hints: list[str] = []
                for t in node.types:
                    hint = self.type_hint(t, context)
                    if hint not in hints:
                        hints.append(hint)
                return " | ".join(hints) if hints else "NoReturn"
            case Suspend():
                return self.type_hint(node.force(), context)
            case Reference():
                return identifiers.get(node.ref, "Any")
            case Declaration() if node.encoded is not None:
                return self.type_hint(node.encoded, context)
        return "Any"


def render_python(document: Document | MultiDocument, config: RendererConfig | None = None) -> str:
    """Convenience wrapper around `PythonRenderer.render`."""
    return PythonRenderer(config).render(document)
