"""
Draft-07 emitter.
"""

from __future__ import annotations

import logging

from ...utils import format_path
from ..config import Dialect
from ..standard_ast.nodes import String
from .base import DialectEmitter, EmitContext, JsonSchema

logger = logging.getLogger(__name__)


class Draft07Emitter(DialectEmitter):
    """Emits Draft-07 documents.

    Tuples use `items: [...]` with `additionalItems`, and definitions live
    under `definitions`. Draft-07 has no `contentSchema`, so content-encoded
    strings are emitted as plain strings.
    """

    DIALECT = Dialect.DRAFT_07

    def encode_tuple(self, out: JsonSchema, items: list[JsonSchema], rest: JsonSchema | bool) -> None:
        out["items"] = items
        out["additionalItems"] = rest

    def encode_content(self, node: String, out: JsonSchema, path: tuple, context: EmitContext) -> None:
        logger.warning("Dropping contentMediaType/contentSchema at %s: not supported by draft-07", format_path(path))
