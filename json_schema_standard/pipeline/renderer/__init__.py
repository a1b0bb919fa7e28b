"""
Renderers turning Standard AST documents into source code.
"""

from __future__ import annotations

from .python_renderer import PythonRenderer, render_python

__all__ = [
    "PythonRenderer",
    "render_python",
]
