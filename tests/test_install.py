from __future__ import annotations

import io
import tarfile
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from gclaction.errors import InstallError
from gclaction.install import asset_url, binary_name, install_binary
from gclaction.version.models import VersionInfo


def test_asset_url_from_platform() -> None:
    info = VersionInfo(target_version="v2.1.6")
    assert asset_url(info, "Linux", "x86_64") == (
        "https://github.com/golangci/golangci-lint/releases/download/v2.1.6/golangci-lint-2.1.6-linux-amd64.tar.gz"
    )
    assert asset_url(info, "Windows", "AMD64").endswith("golangci-lint-2.1.6-windows-amd64.zip")
    assert asset_url(info, "Darwin", "arm64").endswith("-darwin-arm64.tar.gz")


def test_asset_url_from_mapping_wins() -> None:
    info = VersionInfo(target_version="v2.1.6", asset_url="https://mirror.example.invalid/gcl.tar.gz")
    assert asset_url(info, "Linux", "x86_64") == "https://mirror.example.invalid/gcl.tar.gz"


def test_binary_name() -> None:
    assert binary_name("Windows") == "golangci-lint.exe"
    assert binary_name("Linux") == "golangci-lint"


def _release_archive() -> bytes:
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        data = b"#!/bin/sh\necho fake\n"
        member = tarfile.TarInfo("golangci-lint-2.1.6-linux-amd64/golangci-lint")
        member.size = len(data)
        member.mode = 0o644
        tar.addfile(member, io.BytesIO(data))
    return buf.getvalue()


def _session(status: int, body: bytes) -> MagicMock:
    res = MagicMock()
    res.status_code = status
    res.url = "https://example.invalid"
    res.iter_content.return_value = [body]
    session = MagicMock()
    session.get.return_value.__enter__.return_value = res
    return session


def test_install_binary_extracts_release(tmp_path: Path) -> None:
    session = _session(200, _release_archive())
    lint_path = install_binary(VersionInfo(target_version="v2.1.6"), tmp_path, session, "Linux", "x86_64")

    assert lint_path == tmp_path / "golangci-lint-2.1.6-linux-amd64" / "golangci-lint"
    assert lint_path.stat().st_mode & 0o111


def test_install_binary_download_failure(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("gclaction.util.retry.time.sleep", lambda _s: None)
    session = _session(404, b"")
    with pytest.raises(InstallError):
        install_binary(VersionInfo(target_version="v2.1.6"), tmp_path, session, "Linux", "x86_64")
