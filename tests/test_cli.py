"""Tests for CLI commands."""

from __future__ import annotations

import json

from click.testing import CliRunner

from tokentax.cli import cli
from tokentax.commands.browse import run_list, run_show, run_spec, run_summary
from tokentax.commands.edit import run_delete, run_scaffold
from tokentax.config import ServiceConfig


def test_summary(config, capsys):
    assert run_summary(config) == 0
    out = capsys.readouterr().out
    assert "1.0" in out
    assert "TokenTemplate" in out


def test_summary_missing_tree(tmp_path, capsys):
    assert run_summary(ServiceConfig(artifact_path=tmp_path / "none")) == 1
    assert "Cannot load taxonomy" in capsys.readouterr().err


def test_list_json(config, capsys):
    assert run_list(config, "behaviors", output_json=True) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["totalItemsInCollection"] == 2
    assert [i["artifact"]["artifactSymbol"]["toolingSymbol"] for i in data["items"]] == ["d", "t"]


def test_list_table(config, capsys):
    assert run_list(config, "base") == 0
    out = capsys.readouterr().out
    assert "Fungible" in out
    assert "of 2" in out


def test_list_invalid_page(config, capsys):
    assert run_list(config, "base", max_items=0) == 2
    assert "max_item_return" in capsys.readouterr().err


def test_show(config, capsys):
    assert run_show(config, "Base", "F", output_json=True) == 0
    assert json.loads(capsys.readouterr().out)["artifact"]["name"] == "Fungible"

    assert run_show(config, "Base", "X") == 1
    assert "No Base" in capsys.readouterr().err


def test_spec_reports_unresolved(config, capsys):
    assert run_spec(config, "tF{d,t}") == 0
    assert run_spec(config, name="Hybrid") == 1
    assert "missing" in capsys.readouterr().out


def test_scaffold_then_delete(config, artifact_root, capsys):
    assert run_scaffold(config, "behaviors", "Burnable", tooling="b") == 0
    assert (artifact_root / "behaviors" / "Burnable" / "Burnable.json").exists()

    assert run_delete(config, "behaviors", "b") == 0
    assert not (artifact_root / "behaviors" / "Burnable").exists()

    assert run_delete(config, "behaviors", "b") == 1
    assert "NotFound" in capsys.readouterr().err


def test_scaffold_collision(config, capsys):
    assert run_scaffold(config, "base", "fungible") == 1
    assert "Scaffold failed" in capsys.readouterr().err


def test_cli_wiring(artifact_root):
    runner = CliRunner()
    result = runner.invoke(cli, ["--artifacts", str(artifact_root), "list", "token-templates", "--json"])
    assert result.exit_code == 0, result.output
    assert "tF{d,t}" in result.output

    result = runner.invoke(cli, ["--artifacts", str(artifact_root), "delete", "base", "NF"], input="n\n")
    assert result.exit_code == 1
    assert (artifact_root / "base" / "non-fungible").exists()


def test_cli_spec_needs_argument(artifact_root):
    result = CliRunner().invoke(cli, ["--artifacts", str(artifact_root), "spec"])
    assert result.exit_code == 2
