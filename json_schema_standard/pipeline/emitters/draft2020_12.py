"""
Draft-2020-12 emitter.
"""

from __future__ import annotations

from ..config import Dialect
from .base import DialectEmitter, JsonSchema


class Draft202012Emitter(DialectEmitter):
    """Emits Draft-2020-12 documents.

    Tuples use `prefixItems: [...]` with `items` (`false` when closed), and
    definitions live under `$defs`.
    """

    DIALECT = Dialect.DRAFT_2020_12

    def encode_tuple(self, out: JsonSchema, items: list[JsonSchema], rest: JsonSchema | bool) -> None:
        out["prefixItems"] = items
        out["items"] = rest
