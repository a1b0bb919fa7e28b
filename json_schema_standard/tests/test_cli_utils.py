#!/usr/bin/env python3

import click
import pytest

from json_schema_standard.cli_utils import reconstruct_command_line
from json_schema_standard.json_schema_standard import convert, json_schema_standard


class TestCliUtils:
    """Test cases for CLI utilities"""

    def test_reconstruct_command_line_without_context(self):
        """Test command reconstruction without active Click context (fallback)"""
        assert reconstruct_command_line(convert) == "json_schema_standard"
        assert reconstruct_command_line() == "json_schema_standard"

    def test_reconstruct_command_line_with_context(self):
        """Arguments come first, then the options that differ from their default"""
        parent = click.Context(json_schema_standard, info_name="json_schema_standard")
        ctx = click.Context(convert, parent=parent, info_name="convert")
        ctx.params = {
            "config": None,
            "source": None,
            "target": "draft-07",
            "reference_strategy": None,
            "additional_properties": None,
            "path": "/does/not/exist/in.json",
            "output": "/does/not/exist/out.json",
        }
        with ctx:
            result = reconstruct_command_line()
        assert result == "json_schema_standard convert /does/not/exist/in.json /does/not/exist/out.json --to draft-07"

    def test_existing_paths_are_shortened(self, tmp_path):
        schema = tmp_path / "schema.json"
        schema.write_text("{}")
        parent = click.Context(json_schema_standard, info_name="json_schema_standard")
        ctx = click.Context(convert, parent=parent, info_name="convert")
        ctx.params = {"path": str(schema), "output": str(tmp_path / "missing.json")}
        with ctx:
            result = reconstruct_command_line()
        assert result == f"json_schema_standard convert schema.json {tmp_path / 'missing.json'}"


if __name__ == "__main__":
    pytest.main([__file__])
