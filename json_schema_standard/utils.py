"""
Utility functions shared by the Standard schema compiler.
"""

import json
import keyword
import re

# Characters that carry a meaning inside a regular expression
_REGEX_SPECIAL = re.compile(r"[/\\^$*+?.()|\[\]{}]")

_NON_IDENTIFIER = re.compile(r"\W")


def escape_json_pointer(token: str) -> str:
    """Escape a reference token for use inside a JSON Pointer.

    Examples:
        "ID" -> "ID"
        "ID~a/b" -> "ID~0a~1b"
    """
    return token.replace("~", "~0").replace("/", "~1")


def unescape_json_pointer(token: str) -> str:
    """Reverse `escape_json_pointer`."""
    return token.replace("~1", "/").replace("~0", "~")


def escape_regex(text: str) -> str:
    """Escape the regex metacharacters of a literal string."""
    return _REGEX_SPECIAL.sub(lambda m: "\\" + m.group(0), text)


def format_path(path: tuple | list) -> str:
    """Format a traversal path for error messages.

    Property names are rendered as quoted keys and positions as bare
    indexes, e.g. ("a", 0) -> '["a"][0]'. An empty path is "root".

    Args:
        path: Sequence of property names (str) and positions (int)

    Returns:
        Human readable path
    """
    if not path:
        return "root"
    parts = []
    for segment in path:
        if isinstance(segment, int):
            parts.append(f"[{segment}]")
        else:
            parts.append(f"[{json.dumps(str(segment))}]")
    return "".join(parts)


def to_python_identifier(name: str) -> str:
    """Turn a definition name into a valid Python identifier.

    Examples:
        "Category" -> "Category"
        "ID-1" -> "ID_1"
        "1st" -> "_1st"
        "class" -> "class_"
    """
    if not name:
        return "_"
    identifier = _NON_IDENTIFIER.sub("_", name)
    if identifier[0].isdigit():
        identifier = "_" + identifier
    if keyword.iskeyword(identifier):
        identifier += "_"
    return identifier
