from __future__ import annotations

from pathlib import Path

import pytest

from gclaction.config.loader import inputs_from_env, load_config
from gclaction.errors import InvalidInputError


def test_defaults(tmp_path: Path) -> None:
    cfg = load_config(tmp_path, environ={})
    assert cfg.install_mode == "binary"
    assert cfg.cache_invalidation_interval == 7
    assert cfg.era == "v2"
    assert cfg.annotations is True


def test_inputs_override_config_file(tmp_path: Path) -> None:
    (tmp_path / ".gclaction.yml").write_text(
        "version: v2.1\nonly-new-issues: true\nargs: --timeout=5m\ndebug: [cache]\n", encoding="utf-8"
    )
    env = {"INPUT_VERSION": "v2.2", "INPUT_ONLY-NEW-ISSUES": "", "INPUT_INSTALL-MODE": "go-install"}
    cfg = load_config(tmp_path, environ=env)

    assert cfg.version == "v2.2"
    assert cfg.only_new_issues is True
    assert cfg.args == "--timeout=5m"
    assert cfg.install_mode == "goinstall"
    assert cfg.debug_enabled("cache")


def test_multiple_config_files_merge_in_order(tmp_path: Path) -> None:
    a = tmp_path / "a.yml"
    b = tmp_path / "b.yml"
    a.write_text("version: v2.1\nskip-cache: true\n", encoding="utf-8")
    b.write_text("version: v2.2\nunknown-thing: 1\n", encoding="utf-8")
    cfg = load_config(tmp_path, [a, Path("b.yml")], environ={})
    assert cfg.version == "v2.2"
    assert cfg.skip_cache is True


def test_underscore_input_names(tmp_path: Path) -> None:
    assert inputs_from_env({"INPUT_SKIP_SAVE_CACHE": "true"}) == {"skip_save_cache": "true"}
    cfg = load_config(tmp_path, environ={"INPUT_CACHE-INVALIDATION-INTERVAL": "0"})
    assert cfg.cache_invalidation_interval == 0


def test_debug_flags_are_filtered(tmp_path: Path) -> None:
    cfg = load_config(tmp_path, environ={"INPUT_DEBUG": "cache, verbose,bogus"})
    assert cfg.debug == ["cache", "verbose"]


@pytest.mark.parametrize(
    "env",
    [
        {"INPUT_ONLY-NEW-ISSUES": "maybe"},
        {"INPUT_CACHE-INVALIDATION-INTERVAL": "weekly"},
        {"INPUT_INSTALL-MODE": "docker"},
        {"INPUT_ERA": "v3"},
    ],
)
def test_invalid_inputs_are_fatal(tmp_path: Path, env: dict[str, str]) -> None:
    with pytest.raises(InvalidInputError):
        load_config(tmp_path, environ=env)


def test_invalid_bool_message(tmp_path: Path) -> None:
    with pytest.raises(InvalidInputError) as exc:
        load_config(tmp_path, environ={"INPUT_ONLY-NEW-ISSUES": "maybe"})
    assert str(exc.value) == 'invalid value of "only-new-issues": "maybe", expected "true" or "false"'
