"""
OpenAPI-3.1 emitter.
"""

from __future__ import annotations

from ..config import Dialect
from .draft2020_12 import Draft202012Emitter


class OpenApi31Emitter(Draft202012Emitter):
    """Emits OpenAPI-3.1 schema objects.

    OpenAPI 3.1 schema objects are Draft-2020-12 schemas, so the encoding is
    structurally identical; only the dialect marker differs.
    """

    DIALECT = Dialect.OPENAPI_3_1
