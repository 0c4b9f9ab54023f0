from __future__ import annotations

from pathlib import Path

from gclaction.config.validate import validate_config_paths, validate_raw_config


def test_validate_raw_config_flags_unknown_key() -> None:
    errors = validate_raw_config({"unknown_key": True})
    assert "Unknown key: unknown_key" in errors


def test_validate_raw_config_types_and_choices() -> None:
    errors = validate_raw_config(
        {
            "only-new-issues": "yes",
            "cache-invalidation-interval": "7",
            "install-mode": "docker",
            "failure-severity": "fatal",
            "debug": ["cache", "trace"],
        }
    )
    assert "only_new_issues must be a boolean" in errors
    assert "cache_invalidation_interval must be an integer" in errors
    assert any(e.startswith("install_mode must be one of") for e in errors)
    assert any(e.startswith("failure_severity must be one of") for e in errors)
    assert "debug has unsupported flags: trace" in errors


def test_validate_accepts_good_config() -> None:
    assert validate_raw_config({"version": "v2.1", "install-mode": "go-install", "era": "v2", "debug": "cache"}) == []


def test_validate_config_paths(tmp_path: Path) -> None:
    good = tmp_path / "good.yml"
    good.write_text("version: v2.1\n", encoding="utf-8")
    bad = tmp_path / "bad.yml"
    bad.write_text("- a\n- b\n", encoding="utf-8")
    errors = validate_config_paths([good, bad, tmp_path / "missing.yml"])
    assert errors == [f"{bad}: config must be a mapping", f"{tmp_path / 'missing.yml'}: not found"]
