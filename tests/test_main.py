"""Tests for the psdvault CLI."""
from __future__ import annotations

import json
from unittest.mock import patch

import pytest

from psdvault.config import CONFIG_FILENAME
from psdvault.main import main

from conftest import make_tree, snapshot


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("PSDVAULT_7Z_PATH", "PSDVAULT_WAIT_ATTEMPTS", "PSDVAULT_WAIT_INTERVAL"):
        monkeypatch.delenv(var, raising=False)


def run_cli(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


class TestTestCommand:

    def test_compliant_tree_exits_zero(self, vault, capsys):
        make_tree(vault, {"a.7z": b"z", "a.png": b"p"})
        assert run_cli(["test", "--root", str(vault)]) == 0
        assert "COMPLIANT: 2 files scanned, no violations" in capsys.readouterr().out

    def test_violations_exit_one_and_are_all_listed(self, vault, capsys):
        make_tree(vault, {"a.psd": b"a", "b.psd": b"b", "b.png": b"p"})
        assert run_cli(["test", "--root", str(vault)]) == 1
        out = capsys.readouterr().out
        assert "a.psd" in out and "b.psd" in out
        assert "psdvault fix" in out
        assert snapshot(vault) == {"a.psd", "b.psd", "b.png"}

    def test_audit_alias_json(self, vault, capsys):
        make_tree(vault, {"a.7z": b"z"})
        assert run_cli(["audit", "--root", str(vault), "--json"]) == 1
        data = json.loads(capsys.readouterr().out)
        assert data["mode"] == "audit"
        assert data["violations"][0]["category"] == "missing_preview"

    def test_bad_config_exits_two(self, vault):
        (vault / CONFIG_FILENAME).write_text("colour: blue\n")
        assert run_cli(["test", "--root", str(vault)]) == 2

    def test_missing_root_exits_two(self, tmp_path):
        assert run_cli(["test", "--root", str(tmp_path / "absent")]) == 2


class TestFixCommand:

    def test_fix_reconciles_tree(self, vault, generator, capsys):
        make_tree(vault, {"a.psd": b"a"})
        with patch("psdvault.main.ArtifactGenerator.default", return_value=generator):
            assert run_cli(["fix", "--root", str(vault)]) == 0
        assert snapshot(vault) == {"a.7z", "a.png"}
        assert "generate_preview" in capsys.readouterr().out

    def test_fix_then_test_passes(self, vault, generator):
        make_tree(vault, {"a.psd": b"a", "b.psd": b"b", "b.png": b"p"})
        with patch("psdvault.main.ArtifactGenerator.default", return_value=generator):
            run_cli(["fix", "--root", str(vault)])
        assert run_cli(["test", "--root", str(vault)]) == 0

    def test_fix_writes_ledger(self, vault, tmp_path, generator):
        make_tree(vault, {"a.psd": b"a"})
        ledger = tmp_path / "fix.jsonl"
        with patch("psdvault.main.ArtifactGenerator.default", return_value=generator):
            run_cli(["fix", "--root", str(vault), "--ledger", str(ledger)])
        lines = ledger.read_text().splitlines()
        assert json.loads(lines[0])["action"] == "generate_preview"

    def test_fix_json(self, vault, generator, capsys):
        make_tree(vault, {"a.psd": b"a", "a.png": b"p"})
        with patch("psdvault.main.ArtifactGenerator.default", return_value=generator):
            assert run_cli(["fix", "--root", str(vault), "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["actions"][0]["action"] == "compress_and_remove"
        assert data["success"] is True


def test_no_command_prints_help(capsys):
    assert run_cli([]) == 2
    assert "usage" in capsys.readouterr().out.lower()
