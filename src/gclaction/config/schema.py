from __future__ import annotations

from dataclasses import dataclass, field

INSTALL_MODES = {"binary", "goinstall", "none"}
INSTALL_MODE_ALIASES = {"go-install": "goinstall", "go_install": "goinstall"}
ERAS = {"v1", "v2"}
FAILURE_SEVERITIES = {"notice", "warning", "failure"}
DEBUG_FLAGS = {"cache", "verbose"}


@dataclass(frozen=True)
class ActionConfig:
    version: str = ""
    version_file: str = ""
    install_mode: str = "binary"
    working_directory: str = ""
    only_new_issues: bool = False
    skip_cache: bool = False
    skip_save_cache: bool = False
    cache_invalidation_interval: int = 7
    cache_dir: str = ""
    debug: list[str] = field(default_factory=list)
    args: str = ""
    failure_severity: str = ""
    annotations: bool = True
    github_token: str = ""
    era: str = "v2"

    def debug_enabled(self, flag: str) -> bool:
        return flag in self.debug
