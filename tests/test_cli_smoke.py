from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import pytest

from gclaction.cli import main


def test_cli_version() -> None:
    p = subprocess.run(
        [sys.executable, "-m", "gclaction", "--version"],
        capture_output=True,
        text=True,
        check=False,
    )
    assert p.returncode == 0
    assert p.stdout.startswith("gclaction ")


def test_config_show_masks_token(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("INPUT_GITHUB-TOKEN", "ghs_secret")
    (tmp_path / ".gclaction.yml").write_text("version: v2.1\n", encoding="utf-8")

    assert main(["config", "show", str(tmp_path)]) == 0
    out = capsys.readouterr().out
    assert "version: v2.1" in out
    assert "ghs_secret" not in out
    assert "github_token: '***'" in out


def test_config_validate(tmp_path: Path) -> None:
    (tmp_path / ".gclaction.yml").write_text("version: v2.1\nonly-new-issues: sometimes\n", encoding="utf-8")
    assert main(["config", "validate", str(tmp_path)]) == 1
    (tmp_path / ".gclaction.yml").write_text("version: v2.1\n", encoding="utf-8")
    assert main(["config", "validate", str(tmp_path)]) == 0


def test_resolve_version_without_network(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["resolve-version", str(tmp_path), "--version", "v2.1.6"]) == 0
    assert capsys.readouterr().out.strip().endswith("v2.1.6")


def test_resolve_version_rejects_old_release(tmp_path: Path) -> None:
    assert main(["resolve-version", str(tmp_path), "--version", "v1.64.8"]) == 1
    assert main(["resolve-version", str(tmp_path), "--version", "v2.0.2"]) == 1


def test_run_fails_on_bad_working_directory(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INPUT_WORKING-DIRECTORY", "missing")
    assert main(["run", str(tmp_path)]) == 1
