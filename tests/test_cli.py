"""
Tests for the modeguard command line interface.
"""

import json
from pathlib import Path

import pytest

from modeguard.constants import (
    EXIT_ALLOWED,
    EXIT_DENIED,
    EXIT_PATH_VIOLATION,
    EXIT_USAGE_ERROR,
)
from modeguard.main import main, parse_params


@pytest.fixture
def state_file(tmp_path: Path) -> Path:
    path = tmp_path / "state.json"
    path.write_text(json.dumps({
        "version": "1.0",
        "mode": "docs",
        "customModes": [{
            "slug": "docs",
            "name": "Docs Writer",
            "roleDefinition": "You write documentation.",
            "groups": ["read", ["edit", {"fileRegex": "\\.md$"}]],
        }],
        "customModePrompts": {"docs": {"customInstructions": "Keep it short."}},
    }), encoding="utf-8")
    return path


class TestCheckCommand:
    """Tests for `modeguard check`."""

    def test_allowed(self):
        assert main(["check", "read_file", "--mode", "ask"]) == EXIT_ALLOWED

    def test_denied(self, capsys):
        assert main(["check", "execute_command", "--mode", "ask"]) == EXIT_DENIED
        assert "not_in_mode" in capsys.readouterr().out

    def test_path_violation(self, capsys):
        code = main([
            "check", "write_to_file",
            "--mode", "architect",
            "--param", "path=app.ts",
            "--param", "content=x",
        ])

        assert code == EXIT_PATH_VIOLATION
        assert "app.ts" in capsys.readouterr().out

    def test_path_without_payload_allowed(self):
        assert main([
            "check", "write_to_file", "--mode", "architect", "--param", "path=app.ts",
        ]) == EXIT_ALLOWED

    def test_no_tools(self):
        assert main(["check", "read_file", "--mode", "code", "--no-tools"]) == EXIT_DENIED
        assert main(["check", "attempt_completion", "--mode", "code", "--no-tools"]) == EXIT_ALLOWED

    def test_disable(self):
        assert main(["check", "read_file", "--mode", "code", "--disable", "read_file"]) == EXIT_DENIED
        assert main(["check", "list_files", "--mode", "code", "--disable", "read_file"]) == EXIT_ALLOWED

    def test_experiment(self):
        assert main(["check", "search_and_replace", "--mode", "code"]) == EXIT_DENIED
        assert main([
            "check", "search_and_replace", "--mode", "code", "--experiment", "search_and_replace",
        ]) == EXIT_ALLOWED

    def test_state_mode_is_default(self, state_file: Path):
        assert main(["check", "write_to_file", "--state", str(state_file),
                     "--param", "path=README.md", "--param", "content=x"]) == EXIT_ALLOWED
        assert main(["check", "write_to_file", "--state", str(state_file),
                     "--param", "path=main.py", "--param", "content=x"]) == EXIT_PATH_VIOLATION

    def test_bad_param(self):
        assert main(["check", "read_file", "--param", "novalue"]) == EXIT_USAGE_ERROR


class TestModesCommand:
    """Tests for `modeguard modes` and `modeguard show`."""

    def test_modes_lists_builtins(self, capsys):
        assert main(["modes"]) == EXIT_ALLOWED

        out = capsys.readouterr().out
        for slug in ("code", "architect", "ask", "debug", "orchestrator"):
            assert slug in out

    def test_modes_includes_custom(self, state_file: Path, capsys):
        assert main(["modes", "--state", str(state_file)]) == EXIT_ALLOWED
        assert "docs" in capsys.readouterr().out

    def test_show(self, state_file: Path, capsys):
        assert main(["show", "docs", "--state", str(state_file)]) == EXIT_ALLOWED

        out = capsys.readouterr().out
        assert "You write documentation." in out
        assert "Keep it short." in out

    def test_show_unknown_mode(self, capsys):
        assert main(["show", "nonexistent"]) == EXIT_USAGE_ERROR
        assert "No mode found for slug: nonexistent" in capsys.readouterr().out

    def test_invalid_state_file(self, tmp_path: Path):
        path = tmp_path / "state.json"
        path.write_text("{not json", encoding="utf-8")

        assert main(["modes", "--state", str(path)]) == EXIT_USAGE_ERROR

    def test_missing_state_file(self, tmp_path: Path):
        assert main(["modes", "--state", str(tmp_path / "missing.json")]) == EXIT_USAGE_ERROR


def test_parse_params():
    assert parse_params(["path=a.md", "content=x=y"]) == {"path": "a.md", "content": "x=y"}

    with pytest.raises(ValueError):
        parse_params(["=x"])
