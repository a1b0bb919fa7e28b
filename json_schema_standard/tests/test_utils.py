import pytest

from json_schema_standard.utils import (
    escape_json_pointer,
    escape_regex,
    format_path,
    to_python_identifier,
    unescape_json_pointer,
)


@pytest.mark.parametrize(
    "path,expected",
    [
        ((), "root"),
        (("a",), '["a"]'),
        (("as", 0), '["as"][0]'),
        (("a b", 1, "c"), '["a b"][1]["c"]'),
        (('quo"te',), '["quo\\"te"]'),
    ],
)
def test_format_path(path, expected):
    assert format_path(path) == expected


@pytest.mark.parametrize(
    "token,escaped",
    [
        ("ID", "ID"),
        ("a/b", "a~1b"),
        ("a~b", "a~0b"),
        ("~/", "~0~1"),
    ],
)
def test_json_pointer_escaping(token, escaped):
    assert escape_json_pointer(token) == escaped
    assert unescape_json_pointer(escaped) == token


def test_escape_regex():
    assert escape_regex("a.b*c") == r"a\.b\*c"
    assert escape_regex("(x)") == r"\(x\)"
    assert escape_regex("plain") == "plain"


@pytest.mark.parametrize(
    "name,expected",
    [
        ("Category", "Category"),
        ("ID-1", "ID_1"),
        ("1st", "_1st"),
        ("class", "class_"),
        ("", "_"),
    ],
)
def test_to_python_identifier(name, expected):
    assert to_python_identifier(name) == expected
