from __future__ import annotations

import logging
import platform
import shutil
import tarfile
import tempfile
import time
import zipfile
from pathlib import Path

import requests

from gclaction.errors import GclActionError, InstallError
from gclaction.lint.env import build_env
from gclaction.util.http import download_file
from gclaction.util.process import format_command, print_output, run_command
from gclaction.version.models import Era, VersionInfo

log = logging.getLogger(__name__)

DOWNLOAD_URL = "https://github.com/golangci/golangci-lint/releases/download"
BINARY_NAME = "golangci-lint"

_SYSTEMS = {"linux": "linux", "darwin": "darwin", "windows": "windows", "freebsd": "freebsd"}
_MACHINES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "x64": "amd64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7l": "armv7",
    "armv6l": "armv6",
}


def binary_name(system: str | None = None) -> str:
    system = (system or platform.system()).lower()
    return f"{BINARY_NAME}.exe" if system == "windows" else BINARY_NAME


def asset_url(info: VersionInfo, system: str | None = None, machine: str | None = None) -> str:
    if info.asset_url:
        return info.asset_url
    os_name = (system or platform.system()).lower()
    os_name = _SYSTEMS.get(os_name, os_name)
    arch = (machine or platform.machine()).lower()
    arch = _MACHINES.get(arch, arch)
    ext = "zip" if os_name == "windows" else "tar.gz"
    tag = info.target_version
    return f"{DOWNLOAD_URL}/{tag}/{BINARY_NAME}-{tag[1:]}-{os_name}-{arch}.{ext}"


def _archive_dir_name(url: str) -> str:
    name = url.rsplit("/", 1)[-1]
    for ext in (".tar.gz", ".zip"):
        if name.endswith(ext):
            return name[: -len(ext)]
    return name


def install_binary(
    info: VersionInfo,
    install_dir: Path,
    session: requests.Session,
    system: str | None = None,
    machine: str | None = None,
) -> Path:
    """Download a release archive and return the path of the extracted binary."""
    log.info("Installing golangci-lint binary %s...", info.target_version)
    started = time.monotonic()
    url = asset_url(info, system, machine)
    log.info("Downloading binary %s ...", url)

    install_dir.mkdir(parents=True, exist_ok=True)
    with tempfile.TemporaryDirectory() as tmp:
        archive = Path(tmp) / url.rsplit("/", 1)[-1]
        try:
            download_file(session, url, archive, operation=f"download {url}")
            if url.endswith(".zip"):
                with zipfile.ZipFile(archive) as zf:
                    zf.extractall(install_dir)
            else:
                with tarfile.open(archive, "r:gz") as tar:
                    tar.extractall(install_dir, filter="data")
        except (GclActionError, OSError, tarfile.TarError, zipfile.BadZipFile) as e:
            raise InstallError(f"failed to install golangci-lint from {url}: {e}") from e

    lint_path = install_dir / _archive_dir_name(url) / binary_name(system)
    if not lint_path.exists():
        raise InstallError(f"golangci-lint binary not found at {lint_path} after extraction")
    lint_path.chmod(lint_path.stat().st_mode | 0o111)
    log.info(
        "Installed golangci-lint into %s in %dms",
        lint_path,
        int((time.monotonic() - started) * 1000),
    )
    return lint_path


def install_with_go(info: VersionInfo, era: Era, install_dir: Path) -> Path:
    """Build the linter from source with ``go install``."""
    log.info("Installing golangci-lint %s with go install...", info.target_version)
    started = time.monotonic()
    go = shutil.which("go")
    if go is None:
        raise InstallError("install-mode goinstall requires Go on PATH")
    install_dir.mkdir(parents=True, exist_ok=True)
    args = [go, "install", f"{era.module_path}/cmd/{BINARY_NAME}@{info.target_version}"]
    log.info("Running [%s] ...", format_command(args))
    res = run_command(args, env=build_env(extra={"GOBIN": str(install_dir), "CGO_ENABLED": "1"}))
    print_output(res)
    if res.returncode != 0:
        raise InstallError(f"go install of golangci-lint failed with exit code {res.returncode}")
    lint_path = install_dir / binary_name()
    log.info(
        "Installed golangci-lint into %s in %dms",
        lint_path,
        int((time.monotonic() - started) * 1000),
    )
    return lint_path


def find_installed() -> Path:
    found = shutil.which(BINARY_NAME)
    if found is None:
        raise InstallError("install-mode none requires golangci-lint on PATH")
    log.info("Using golangci-lint from PATH: %s", found)
    return Path(found)
