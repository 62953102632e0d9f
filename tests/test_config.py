import json

import pytest

from clocksync.config import CLOCK_ALLOWLIST, SyncConfig, config_from_dict, load_config


def test_defaults():
    config = SyncConfig()
    assert config.nominal_fps == 30.0
    assert config.max_samples == 60
    assert config.frame_size == (1920, 1080)
    assert config.region_size == (600, 200)
    assert config.threshold == 150
    assert config.tolerance == 0.2
    assert config.allowlist == CLOCK_ALLOWLIST == "0123456789:."


def test_invalid_values_rejected():
    with pytest.raises(ValueError):
        SyncConfig(tolerance=0)
    with pytest.raises(ValueError):
        SyncConfig(max_samples=0)
    with pytest.raises(ValueError):
        SyncConfig(threshold=300)
    with pytest.raises(ValueError):
        SyncConfig(frame_size=(320, 240))


def test_with_overrides_ignores_none():
    config = SyncConfig().with_overrides(tolerance=None, max_samples=120, gpu=False)
    assert config.tolerance == 0.2
    assert config.max_samples == 120
    assert config.gpu is False


def test_load_config_flat(tmp_path):
    path = tmp_path / "sync.json"
    path.write_text(json.dumps({"tolerance": 0.1, "frame_size": [1280, 720], "region_size": [400, 120]}))
    config = load_config(path)
    assert config.tolerance == 0.1
    assert config.frame_size == (1280, 720)
    assert config.region_size == (400, 120)


def test_load_config_section(tmp_path):
    path = tmp_path / "sync.json"
    path.write_text(json.dumps({"sync": {"max_samples": 30}}))
    assert load_config(path).max_samples == 30


def test_unknown_keys_rejected():
    with pytest.raises(ValueError, match="samples"):
        config_from_dict({"samples": 10})


def test_load_config_requires_object(tmp_path):
    path = tmp_path / "sync.json"
    path.write_text("[1, 2]")
    with pytest.raises(ValueError):
        load_config(path)


def test_non_integer_counts_rejected():
    with pytest.raises(ValueError, match="max_samples must be an integer"):
        config_from_dict({"max_samples": 60.5})
    with pytest.raises(ValueError, match="threshold must be an integer"):
        config_from_dict({"threshold": 149.5})
    with pytest.raises(ValueError):
        SyncConfig(max_samples=True)
