import dataclasses

import pytest

from Seating.config import ConfigManager, Defaults, PRESETS, calculate_corridor_width


def test_defaults_and_derived_corridor_width(config):
    assert config.get("ROWS") == 20
    assert config.get("COLS") == 68
    assert config.get("NUM_AGENTS") == 384
    assert config.get("FEATURE_ASSIGNED_SEATS") is True
    assert config["CORRIDOR_WIDTH"] == 2
    assert config.get("MISSING", "fallback") == "fallback"


def test_calculate_corridor_width():
    assert calculate_corridor_width(68, 4) == (2, 14)
    assert calculate_corridor_width(40, 6) == (2, 4)
    assert calculate_corridor_width(200, 2) == (2, 97)


@pytest.mark.parametrize("key, value", [
    ("NUM_AGENTS", 10),
    ("NUM_AGENTS", 501),
    ("NUM_AGENTS", True),
    ("NUM_AGENTS", "100"),
    ("MAX_TIME", 199),
    ("NUM_BLOCKS", 7),
    ("BACK_PREF", -1),
    ("ROWS", 19),
    ("FEATURE_ASSIGNED_SEATS", 1),
])
def test_set_rejects_invalid_values(config, key, value):
    before = config.get(key)
    assert config.set(key, value) is False
    assert config.get(key) == before


def test_set_accepts_boundaries_and_unknown_keys(config):
    assert config.set("NUM_AGENTS", 50)
    assert config.set("NUM_AGENTS", 500)
    assert config.get("NUM_AGENTS") == 500
    assert config.set("FEATURE_COLOR_BY_BLOCK", False)
    assert config.set("SOMETHING_NEW", 7)
    assert config.get("SOMETHING_NEW") == 7


def test_invalid_overrides_are_dropped():
    cfg = ConfigManager(NUM_AGENTS=5, BACK_PREF=0)
    assert cfg.get("NUM_AGENTS") == Defaults.PARAMETERS["NUM_AGENTS"]
    assert cfg.get("BACK_PREF") == 0


def test_listeners_are_isolated_from_each_other(config):
    calls = []

    def broken(key, value):
        raise RuntimeError("boom")

    config.add_listener(broken)
    config.add_listener(lambda key, value: calls.append((key, value)))

    assert config.set("NUM_BLOCKS", 3)
    assert calls == [("NUM_BLOCKS", 3)]
    assert config.get("CORRIDOR_WIDTH") == 2


def test_rejected_set_does_not_notify(config):
    calls = []
    config.add_listener(lambda key, value: calls.append(key))
    config.set("NUM_BLOCKS", 99)
    assert calls == []


def test_remove_listener(config):
    calls = []

    def listener(key, value):
        calls.append(key)

    config.add_listener(listener)
    config.add_listener(listener)
    config.set("SPEED", 100)
    config.remove_listener(listener)
    config.set("SPEED", 200)
    assert calls == ["SPEED"]


def test_snapshot_is_detached(config):
    snap = config.snapshot()
    config.set("NUM_AGENTS", 100)
    assert snap["NUM_AGENTS"] == 384


def test_update_reports_each_key(config):
    assert config.update({"NUM_AGENTS": 100, "MAX_TIME": 5}) == {"NUM_AGENTS": True, "MAX_TIME": False}


def test_save_and_load(tmp_path, config):
    config.set("NUM_AGENTS", 123)
    config.set("FEATURE_ASSIGNED_SEATS", False)
    path = tmp_path / "params.json"
    config.save(str(path))

    loaded = ConfigManager.load(str(path))
    assert loaded.snapshot() == config.snapshot()


def test_presets():
    presets = ConfigManager.presets()
    assert set(presets) == set(PRESETS)
    assert presets["small_event"].get("NUM_AGENTS") == 50
    assert presets["front_fillers"].get("BACK_PREF") == 0
    assert presets["default"].snapshot() == ConfigManager().snapshot()


def test_defaults_constants_are_read_only():
    with pytest.raises(TypeError):
        Defaults.PARAMETERS["NUM_AGENTS"] = 1
    with pytest.raises(TypeError):
        Defaults.VALIDATION_RANGES["NUM_AGENTS"] = (0, 1)

    fields = {f.name for f in dataclasses.fields(Defaults)}
    assert {"GATE_POSITIONS", "FALLBACK_STANDING_OFFSET", "ARRIVAL_PHASES", "BLOCK_COLORS"} <= fields
    with pytest.raises(dataclasses.FrozenInstanceError):
        Defaults().GATE_POSITIONS = (1,)
    assert ConfigManager().get("NUM_AGENTS") == Defaults.PARAMETERS["NUM_AGENTS"]
