"""
Dialect emitters: Standard AST documents to JSON Schema.
"""

from __future__ import annotations

from ..config import Dialect, EmitterConfig
from .base import DialectEmitter, JsonSchemaDocument
from .draft07 import Draft07Emitter
from .draft2020_12 import Draft202012Emitter
from .openapi31 import OpenApi31Emitter

EMITTERS: dict[Dialect, type[DialectEmitter]] = {
    Dialect.DRAFT_07: Draft07Emitter,
    Dialect.DRAFT_2020_12: Draft202012Emitter,
    Dialect.OPENAPI_3_1: OpenApi31Emitter,
}


def get_emitter(config: EmitterConfig | None = None) -> DialectEmitter:
    """Create the emitter for `config.dialect`."""
    config = config or EmitterConfig()
    return EMITTERS[config.dialect](config)


__all__ = [
    "DialectEmitter",
    "JsonSchemaDocument",
    "Draft07Emitter",
    "Draft202012Emitter",
    "OpenApi31Emitter",
    "EMITTERS",
    "get_emitter",
]
