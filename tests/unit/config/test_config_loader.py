import json
from pathlib import Path

import pytest

from reflim.config.loader import load_config_file, load_config_with_precedence
from reflim.exceptions import ConfigValidationError

DEFAULTS = {"n_quantiles": 100, "apply_rounding": False, "model": "auto"}
CASTERS = {"n_quantiles": int, "apply_rounding": lambda v: str(v).lower() in {"1", "true", "yes", "on"}}


def test_defaults_when_no_sources(monkeypatch):
    monkeypatch.delenv("REFLIM_N_QUANTILES", raising=False)
    merged = load_config_with_precedence(None, "REFLIM_", {}, DEFAULTS, CASTERS)
    assert merged == DEFAULTS


def test_precedence_file_env_cli(tmp_path: Path, monkeypatch):
    cfg = tmp_path / "reflim.json"
    cfg.write_text(json.dumps({"n_quantiles": 60, "apply_rounding": True, "model": "lognormal"}))
    monkeypatch.setenv("REFLIM_N_QUANTILES", "80")

    merged = load_config_with_precedence(
        cfg, "REFLIM_", {"model": "normal", "apply_rounding": None}, DEFAULTS, CASTERS
    )
    assert merged["n_quantiles"] == 80
    assert merged["apply_rounding"] is True
    assert merged["model"] == "normal"


def test_yaml_config_file(tmp_path: Path):
    cfg = tmp_path / "reflim.yaml"
    cfg.write_text("n_quantiles: 40\napply_rounding: yes\n")
    assert load_config_file(cfg) == {"n_quantiles": 40, "apply_rounding": True}


def test_unknown_suffix_rejected(tmp_path: Path):
    cfg = tmp_path / "reflim.toml"
    cfg.write_text("n_quantiles = 40")
    with pytest.raises(ConfigValidationError):
        load_config_file(cfg)


def test_missing_file_rejected(tmp_path: Path):
    with pytest.raises(ConfigValidationError):
        load_config_file(tmp_path / "absent.json")


def test_bad_cast_raises_config_error(monkeypatch):
    monkeypatch.setenv("REFLIM_N_QUANTILES", "many")
    with pytest.raises(ConfigValidationError):
        load_config_with_precedence(None, "REFLIM_", {}, DEFAULTS, CASTERS)


def test_unknown_file_keys_rejected(tmp_path: Path):
    cfg = tmp_path / "reflim.json"
    cfg.write_text(json.dumps({"n_quantile": 60}))
    with pytest.raises(ConfigValidationError):
        load_config_with_precedence(cfg, "REFLIM_", {}, DEFAULTS, CASTERS)
