import pytest

from motion_backend.config import RoundSettings, load_config

def test_defaults_without_file(tmp_path, monkeypatch):
    monkeypatch.delenv("PORT", raising=False)
    monkeypatch.delenv("HOST", raising=False)
    cfg = load_config(tmp_path / "missing.yaml")
    assert cfg["tracking"]["proximity_tolerance"] == 60.0
    assert cfg["tracking"]["coverage_target"] == 0.70
    assert cfg["grading"]["max_off_track"] == 10
    assert cfg["tracking"]["round_time_s"] == 20.0
    assert cfg["server"]["port"] == 8000

def test_yaml_values_and_env_override(tmp_path, monkeypatch):
    path = tmp_path / "settings.yaml"
    path.write_text("tracking:\n  proximity_tolerance: 45\nserver:\n  port: 9000\n", encoding="utf-8")
    monkeypatch.setenv("PORT", "9100")
    cfg = load_config(path)
    assert cfg["tracking"]["proximity_tolerance"] == 45
    assert cfg["tracking"]["snap_distance"] == 80.0
    assert cfg["server"]["port"] == 9100

def test_round_settings_ignore_unknown_keys():
    s = RoundSettings.from_cfg({"tracking": {"proximity_tolerance": 40, "legacy_flag": True}})
    assert s.proximity_tolerance == 40
    assert s.off_track_factor == 2.0

def test_round_time_default_and_validation():
    assert RoundSettings.from_cfg({}).round_time_s == 20.0
    assert RoundSettings.from_cfg({"tracking": {"round_time_s": 0}}).round_time_s == 0
    with pytest.raises(ValueError):
        RoundSettings.from_cfg({"tracking": {"round_time_s": -1}})
