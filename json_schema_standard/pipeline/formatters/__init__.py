"""
Post-processing formatters for rendered code.
"""

from __future__ import annotations

from .base import Formatter
from .black_formatter import BlackFormatter, format_with_black

__all__ = [
    "Formatter",
    "BlackFormatter",
    "format_with_black",
]
