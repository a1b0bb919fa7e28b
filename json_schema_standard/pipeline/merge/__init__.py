"""
JSON level merging of annotations and constraint fragments.
"""

from __future__ import annotations

from .fragments import (
    append_fragments,
    check_fragment,
    check_fragments,
    overwrite_annotations,
    template_literal_pattern,
    unwrap,
)

__all__ = [
    "append_fragments",
    "check_fragment",
    "check_fragments",
    "overwrite_annotations",
    "template_literal_pattern",
    "unwrap",
]
