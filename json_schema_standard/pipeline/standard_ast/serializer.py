"""
JSON form of the Standard AST.

Nodes are objects tagged by `_tag` with camelCase fields. Annotations are a
flat object; absent fields are omitted. `checks` is always present on the
kinds that carry checks. Override and Constraint hooks are host callables
and are never serialized.
"""

from __future__ import annotations

import logging
from typing import Any

from ..errors import MalformedImport, UnsupportedShape
from .annotations import Annotations
from .checks import Check, CheckMeta, Filter, FilterGroup
from .document import Document, MultiDocument
from .nodes import (
    NODE_CLASSES,
    Arrays,
    BigInt,
    Declaration,
    Element,
    Enum,
    IndexSignature,
    Literal,
    Number,
    Objects,
    PropertySignature,
    Reference,
    StandardNode,
    String,
    Suspend,
    SymbolKey,
    TemplateLiteral,
    Union,
    UniqueSymbol,
)

logger = logging.getLogger(__name__)

_ANNOTATION_KEYS = ("title", "description", "examples", "identifier")


def annotations_to_json(annotations: Annotations | None) -> dict[str, Any] | None:
    if annotations is None:
        return None
    out: dict[str, Any] = {}
    for key in _ANNOTATION_KEYS:
        value = getattr(annotations, key)
        if value is not None:
            out[key] = value
    if annotations.has_default:
        out["default"] = annotations.default
    if annotations.brands:
        out["brands"] = list(annotations.brands)
    if annotations.json_schema is not None:
        logger.debug("Dropping %s hook from serialized annotations", type(annotations.json_schema).__name__)
    out.update(annotations.extensions)
    return out or None


def annotations_from_json(data: dict[str, Any] | None) -> Annotations | None:
    if not data:
        return None
    return Annotations.from_dict(data)


def check_to_json(check: Check) -> dict[str, Any]:
    if isinstance(check, FilterGroup):
        out: dict[str, Any] = {"_tag": "FilterGroup"}
        if check.meta is not None:
            out["meta"] = {"_tag": check.meta.tag, **check.meta.params}
        out["checks"] = [check_to_json(c) for c in check.checks]
    else:
        out = {"_tag": "Filter"}
        if check.meta is not None:
            out["meta"] = {"_tag": check.meta.tag, **check.meta.params}
    annotations = annotations_to_json(check.annotations)
    if annotations is not None:
        out["annotations"] = annotations
    return out


def check_from_json(data: dict[str, Any], path: tuple = ()) -> Check:
    meta = None
    if data.get("meta") is not None:
        params = dict(data["meta"])
        meta = CheckMeta(params.pop("_tag"), params)
    annotations = annotations_from_json(data.get("annotations"))
    tag = data.get("_tag")
    if tag == "FilterGroup":
        checks = [check_from_json(c, path) for c in data.get("checks", [])]
        return FilterGroup(checks=checks, meta=meta, annotations=annotations)
    if tag == "Filter":
        return Filter(meta=meta, annotations=annotations)
    raise MalformedImport(f"unknown check tag {tag!r}", path)


def _property_name_to_json(name: str | SymbolKey) -> Any:
    if isinstance(name, SymbolKey):
        return {"_tag": "SymbolKey", "description": name.description}
    return name


def _property_name_from_json(name: Any) -> str | SymbolKey:
    if isinstance(name, dict):
        return SymbolKey(name.get("description", ""))
    return name


def to_json(node: StandardNode) -> dict[str, Any]:
    """Serialize a node.

    Suspend thunks are forced. A tree whose Suspend nodes cycle back onto
    themselves must be resolved into a Document first.

    Raises:
        UnsupportedShape: If an unresolved recursive Suspend is reached
    """
    return _to_json(node, [], ())


def _to_json(node: StandardNode, forcing: list[int], path: tuple) -> dict[str, Any]:
    out: dict[str, Any] = {"_tag": node.TAG}
    annotations = annotations_to_json(node.annotations)
    if annotations is not None:
        out["annotations"] = annotations

    if isinstance(node, String):
        out["checks"] = [check_to_json(c) for c in node.checks]
        if node.content_media_type is not None:
            out["contentMediaType"] = node.content_media_type
        if node.content_schema is not None:
            out["contentSchema"] = _to_json(node.content_schema, forcing, path)
    elif isinstance(node, (Number, BigInt)):
        out["checks"] = [check_to_json(c) for c in node.checks]
    elif isinstance(node, Literal):
        out["literal"] = node.literal
        if node.bigint:
            out["bigint"] = True
    elif isinstance(node, UniqueSymbol):
        out["symbol"] = node.symbol
    elif isinstance(node, Enum):
        out["enums"] = [[name, value] for name, value in node.enums]
    elif isinstance(node, TemplateLiteral):
        out["parts"] = [_to_json(p, forcing, path) for p in node.parts]
    elif isinstance(node, Arrays):
        elements = []
        for i, element in enumerate(node.elements):
            e = {"isOptional": element.is_optional, "type": _to_json(element.type, forcing, path + (i,))}
            element_annotations = annotations_to_json(element.annotations)
            if element_annotations is not None:
                e["annotations"] = element_annotations
            elements.append(e)
        out["elements"] = elements
        out["rest"] = [_to_json(r, forcing, path + (len(node.elements),)) for r in node.rest]
        out["checks"] = [check_to_json(c) for c in node.checks]
    elif isinstance(node, Objects):
        property_signatures = []
        for ps in node.property_signatures:
            p = {
                "name": _property_name_to_json(ps.name),
                "type": _to_json(ps.type, forcing, path + (str(ps.name),)),
                "isOptional": ps.is_optional,
                "isMutable": ps.is_mutable,
            }
            ps_annotations = annotations_to_json(ps.annotations)
            if ps_annotations is not None:
                p["annotations"] = ps_annotations
            property_signatures.append(p)
        out["propertySignatures"] = property_signatures
        out["indexSignatures"] = [
            {"parameter": _to_json(i.parameter, forcing, path), "type": _to_json(i.type, forcing, path)}
            for i in node.index_signatures
        ]
        out["checks"] = [check_to_json(c) for c in node.checks]
    elif isinstance(node, Union):
        out["types"] = [_to_json(t, forcing, path) for t in node.types]
        out["mode"] = node.mode
    elif isinstance(node, Suspend):
        if id(node) in forcing:
            raise UnsupportedShape("cannot serialize an unresolved recursive Suspend", path)
        forcing.append(id(node))
        try:
            out["thunk"] = _to_json(node.force(), forcing, path)
        finally:
            forcing.pop()
        out["checks"] = [check_to_json(c) for c in node.checks]
    elif isinstance(node, Reference):
        out["$ref"] = node.ref
    elif isinstance(node, Declaration):
        out["typeParameters"] = [_to_json(t, forcing, path) for t in node.type_parameters]
        out["checks"] = [check_to_json(c) for c in node.checks]
        if node.encoded is not None:
            out["encoded"] = _to_json(node.encoded, forcing, path)
    return out


def from_json(data: dict[str, Any], path: tuple = ()) -> StandardNode:
    """Deserialize a node.

    Raises:
        MalformedImport: If a tag is unknown
    """
    if not isinstance(data, dict) or data.get("_tag") not in NODE_CLASSES:
        tag = data.get("_tag") if isinstance(data, dict) else data
        raise MalformedImport(f"unknown node tag {tag!r}", path)
    cls = NODE_CLASSES[data["_tag"]]
    annotations = annotations_from_json(data.get("annotations"))
    checks = [check_from_json(c, path) for c in data.get("checks", [])]

    if cls is String:
        content_schema = data.get("contentSchema")
        return String(
            annotations=annotations,
            checks=checks,
            content_media_type=data.get("contentMediaType"),
            content_schema=from_json(content_schema, path) if content_schema is not None else None,
        )
    if cls in (Number, BigInt):
        return cls(annotations=annotations, checks=checks)
    if cls is Literal:
        return Literal(annotations=annotations, literal=data["literal"], bigint=data.get("bigint", False))
    if cls is UniqueSymbol:
        return UniqueSymbol(annotations=annotations, symbol=data.get("symbol", ""))
    if cls is Enum:
        return Enum(annotations=annotations, enums=[(name, value) for name, value in data.get("enums", [])])
    if cls is TemplateLiteral:
        return TemplateLiteral(annotations=annotations, parts=[from_json(p, path) for p in data.get("parts", [])])
    if cls is Arrays:
        elements = [
            Element(
                type=from_json(e["type"], path + (i,)),
                is_optional=e.get("isOptional", False),
                annotations=annotations_from_json(e.get("annotations")),
            )
            for i, e in enumerate(data.get("elements", []))
        ]
        rest = [from_json(r, path + (len(elements),)) for r in data.get("rest", [])]
        return Arrays(annotations=annotations, elements=elements, rest=rest, checks=checks)
    if cls is Objects:
        property_signatures = [
            PropertySignature(
                name=_property_name_from_json(p["name"]),
                type=from_json(p["type"], path + (str(p["name"]),)),
                is_optional=p.get("isOptional", False),
                is_mutable=p.get("isMutable", False),
                annotations=annotations_from_json(p.get("annotations")),
            )
            for p in data.get("propertySignatures", [])
        ]
        index_signatures = [
            IndexSignature(parameter=from_json(i["parameter"], path), type=from_json(i["type"], path))
            for i in data.get("indexSignatures", [])
        ]
        return Objects(
            annotations=annotations,
            property_signatures=property_signatures,
            index_signatures=index_signatures,
            checks=checks,
        )
    if cls is Union:
        return Union(
            annotations=annotations,
            types=[from_json(t, path) for t in data.get("types", [])],
            mode=data.get("mode", "anyOf"),
        )
    if cls is Suspend:
        return Suspend(annotations=annotations, thunk=from_json(data["thunk"], path), checks=checks)
    if cls is Reference:
        return Reference(annotations=annotations, ref=data["$ref"])
    if cls is Declaration:
        encoded = data.get("encoded")
        return Declaration(
            annotations=annotations,
            type_parameters=[from_json(t, path) for t in data.get("typeParameters", [])],
            checks=checks,
            encoded=from_json(encoded, path) if encoded is not None else None,
        )
    return cls(annotations=annotations)


def document_to_json(document: Document) -> dict[str, Any]:
    return {
        "schema": to_json(document.schema),
        "definitions": {name: to_json(d) for name, d in document.definitions.items()},
    }


def document_from_json(data: dict[str, Any]) -> Document:
    return Document(
        schema=from_json(data["schema"]),
        definitions={name: from_json(d, (name,)) for name, d in data.get("definitions", {}).items()},
    )


def multi_document_to_json(multi: MultiDocument) -> dict[str, Any]:
    return {
        "schemas": [to_json(s) for s in multi.schemas],
        "definitions": {name: to_json(d) for name, d in multi.definitions.items()},
    }


def multi_document_from_json(data: dict[str, Any]) -> MultiDocument:
    return MultiDocument(
        schemas=[from_json(s, (i,)) for i, s in enumerate(data.get("schemas", []))],
        definitions={name: from_json(d, (name,)) for name, d in data.get("definitions", {}).items()},
    )
