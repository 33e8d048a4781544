"""Tests for the root CLI group and an end-to-end workflow."""

from __future__ import annotations

import json
from typing import Any

import pytest
from click.testing import CliRunner

from coterie import __version__
from coterie.cli import cli


def _json(runner: CliRunner, *args: str) -> dict[str, Any]:
    result = runner.invoke(cli, ["--json", *args])
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)


class TestRootGroup:
    def test_help_lists_commands(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for name in ("init", "object", "link", "layout", "match", "import", "taxonomy"):
            assert name in result.output

    def test_no_subcommand_prints_help(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, [])
        assert result.exit_code == 0
        assert "Usage" in result.output

    def test_version(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_unknown_command(self, cli_runner: CliRunner) -> None:
        assert cli_runner.invoke(cli, ["nope"]).exit_code == 2


@pytest.mark.usefixtures("_isolated_project")
class TestStoreErrors:
    def test_remote_without_credentials(
        self, cli_runner: CliRunner, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("COTERIE_STORE__BACKEND", "remote")
        monkeypatch.delenv("COTERIE_REMOTE__URL", raising=False)
        monkeypatch.delenv("COTERIE_REMOTE__API_KEY", raising=False)
        result = cli_runner.invoke(cli, ["--json", "taxonomy"])
        assert result.exit_code == 1
        assert result.stdout == ""
        payload = json.loads(result.stderr)
        assert payload["op"] == "open_store"
        assert payload["error"]["code"] == "VALIDATION_ERROR"

    def test_memory_backend_from_env(
        self, cli_runner: CliRunner, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("COTERIE_STORE__BACKEND", "memory")
        data = _json(cli_runner, "object", "add", "company", "Acme")
        assert data["ok"] is True
        # Nothing persists between invocations.
        assert _json(cli_runner, "object", "list")["data"]["count"] == 0


@pytest.mark.usefixtures("_isolated_project")
class TestWorkflow:
    def test_build_and_layout_graph(self, cli_runner: CliRunner) -> None:
        acme = _json(cli_runner, "object", "add", "company", "Acme Studios", "--type", "studio")
        jane = _json(cli_runner, "object", "add", "person", "Jane Doe", "--type", "executive")
        film = _json(cli_runner, "object", "add", "project", "Night Train", "--type", "feature")
        _json(cli_runner, "link", "add", "Jane Doe", "employed_by", "Acme Studios")
        _json(cli_runner, "link", "add", "Acme Studios", "produces", "Night Train")

        layout = _json(cli_runner, "layout")
        assert layout["data"]["placed"] == 3

        shown = _json(cli_runner, "object", "show", acme["data"]["id"])
        assert shown["data"]["position"] == {"x": 300.0, "y": 1350.0}
        assert {r["name"] for r in shown["data"]["related"]} == {"Jane Doe", "Night Train"}

        listed = _json(cli_runner, "object", "list")["data"]["items"]
        positions = {o["id"]: o["position"] for o in listed}
        assert positions[jane["data"]["id"]] == {"x": 420.0, "y": 1450.0}
        assert positions[film["data"]["id"]] == {"x": 180.0, "y": 1350.0}

        _json(cli_runner, "object", "delete", "Acme Studios")
        assert _json(cli_runner, "link", "list")["data"]["count"] == 0
