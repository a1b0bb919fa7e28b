"""
Error taxonomy of the Standard schema compiler.

Every error is raised synchronously, carries the traversal path where it was
detected, and aborts the whole call: there is no partial document recovery.
"""

from __future__ import annotations

from ..utils import format_path


class StandardSchemaError(Exception):
    """Base class for all compiler errors.

    Attributes:
        message: Human readable description without the path suffix
        path: Property names and positions leading to the offending node
    """

    def __init__(self, message: str, path: tuple = ()):
        self.message = message
        self.path = tuple(path)
        super().__init__(f"{message} at {format_path(self.path)}")


class UnsupportedNode(StandardSchemaError):
    """Raised when a node kind has no JSON Schema representation.

    The caller may supply an `on_missing_annotation` hook to replace the
    node with a literal JSON Schema fragment instead.
    """

    def __init__(self, kind: str, path: tuple = ()):
        self.kind = kind
        super().__init__(f"cannot generate JSON Schema for {kind}", path)


class MissingIdentifier(StandardSchemaError):
    """Raised when a recursive Suspend is reached without a nameable target."""

    def __init__(self, path: tuple = ()):
        super().__init__("Suspended schema without identifier detected", path)


class UnsupportedShape(StandardSchemaError):
    """Raised when a structure cannot be encoded, e.g. post-rest tuple elements."""


class MalformedImport(StandardSchemaError):
    """Raised when a JSON Schema document falls outside the importable subset."""
