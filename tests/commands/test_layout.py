"""Tests for the layout command."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from coterie.cli import cli


def _json(runner: CliRunner, *args: str) -> dict[str, Any]:
    result = runner.invoke(cli, ["--json", *args])
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)


@pytest.mark.usefixtures("_isolated_project")
class TestLayoutCommand:
    def test_places_once(self, cli_runner: CliRunner) -> None:
        _json(cli_runner, "object", "add", "company", "Acme", "--type", "studio")
        first = _json(cli_runner, "layout")["data"]
        assert first["placed"] == 1
        position = first["positions"][0]
        assert (position["x"], position["y"]) == (300.0, 1350.0)
        assert _json(cli_runner, "layout")["data"]["placed"] == 0
        assert _json(cli_runner, "layout", "--force")["data"]["placed"] == 1

    def test_dry_run(self, cli_runner: CliRunner) -> None:
        _json(cli_runner, "object", "add", "company", "Acme")
        assert _json(cli_runner, "layout", "--dry-run")["data"]["placed"] == 1
        items = _json(cli_runner, "object", "list")["data"]["items"]
        assert items[0]["position"] is None

    def test_layout_config(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / "coterie.toml").write_text("[layout]\nstart_x = 0.0\n", encoding="utf-8")
        _json(cli_runner, "object", "add", "company", "Acme")
        assert _json(cli_runner, "layout")["data"]["positions"][0]["x"] == 0.0

    def test_human_output(self, cli_runner: CliRunner) -> None:
        _json(cli_runner, "object", "add", "company", "Acme")
        result = cli_runner.invoke(cli, ["layout"])
        assert result.exit_code == 0
        assert "auto_layout" in result.output
        assert "placed: 1" in result.output
