"""Tests for project packaging metadata."""

import tomllib
from pathlib import Path

PYPROJECT = Path(__file__).resolve().parent.parent / "pyproject.toml"


class TestPyproject:
    """Tests for pyproject.toml."""

    def test_long_description_is_not_design_notes(self) -> None:
        """Test internal design notes are not published as the readme."""
        project = tomllib.loads(PYPROJECT.read_text(encoding="utf-8"))["project"]
        assert project.get("readme") != "DESIGN.md"

    def test_console_script(self) -> None:
        """Test the dcrun entry point."""
        project = tomllib.loads(PYPROJECT.read_text(encoding="utf-8"))["project"]
        assert project["scripts"] == {"dcrun": "dcrun:main"}
