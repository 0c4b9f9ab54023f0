from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path

import yaml

from gclaction.errors import InstallError
from gclaction.util.process import format_command, print_output, run_command

log = logging.getLogger(__name__)

CUSTOM_CONFIG_NAMES = [".custom-gcl.yml", ".custom-gcl.yaml", ".custom-gcl.json"]


@dataclass(frozen=True)
class CustomBuild:
    """The bits of a module-plugin build manifest that matter here."""

    config_path: Path
    version: str = ""
    name: str = "custom-gcl"
    destination: str = "."


def find_custom_config(root: Path) -> Path | None:
    for name in CUSTOM_CONFIG_NAMES:
        path = root / name
        if path.is_file():
            log.info("Found configuration for the plugin module system: %s", path)
            return path
    return None


def load_custom_build(path: Path) -> CustomBuild:
    try:
        # YAML is a superset of the JSON flavour these manifests use.
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise InstallError(f"failed to read {path}: {e}") from e
    if not isinstance(raw, dict):
        raise InstallError(f"{path} must contain a mapping")
    return CustomBuild(
        config_path=path,
        version=str(raw.get("version") or ""),
        name=str(raw.get("name") or "custom-gcl"),
        destination=str(raw.get("destination") or "."),
    )


def build_custom_binary(lint_path: Path, root: Path, target_version: str = "") -> Path | None:
    """Build a custom binary with module plugins when the project asks for one."""
    config_path = find_custom_config(root)
    if config_path is None:
        return None

    build = load_custom_build(config_path)
    if target_version and build.version and build.version != target_version:
        log.warning(
            "The golangci-lint version (%s) defined inside %s does not match the version defined in the action (%s)",
            build.version,
            config_path,
            target_version,
        )

    destination = root / build.destination
    if not destination.exists():
        log.info("Creating destination directory: %s", destination)
        destination.mkdir(parents=True, exist_ok=True)

    log.info("Building and installing custom golangci-lint binary...")
    started = time.monotonic()
    args = [str(lint_path), "custom"]
    log.info("Running [%s] in [%s] ...", format_command(args), root)
    res = run_command(args, cwd=root)
    print_output(res)
    if res.returncode != 0:
        raise InstallError(f"Failed to build custom golangci-lint binary: exit code {res.returncode}")

    custom_path = destination / build.name
    log.info("Built custom golangci-lint binary in %dms", int((time.monotonic() - started) * 1000))
    return custom_path
