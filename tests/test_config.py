import logging

import pytest
import yaml

from capkit.configs import DEFAULT_CONFIG_PATH, ConfigManager, configure_logging
from capkit.exercises import QUACKABLE, ElectronicDuck
from capkit.runtime import build_checker, build_registry, build_trace_sink


def _write(path, data):
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


def test_bundled_config_loads():
    config = ConfigManager()
    assert config.config_path == DEFAULT_CONFIG_PATH
    assert config.get("registry.name") == "default"
    assert config.get("logging.level") == "INFO"
    assert config.get("trace.enabled") is False


def test_missing_file_uses_defaults(tmp_path):
    config = ConfigManager(tmp_path / "absent.yml")
    assert config.get("registry.name") == "default"
    assert config.get_section("checker") == {"states": []}
    assert config.get("nope.deeper", 7) == 7


def test_file_overrides_defaults(tmp_path):
    path = _write(tmp_path / "capkit.yml", {"registry": {"name": "doors"}, "checker": {"states": ["on"]}})
    config = ConfigManager(path)
    assert config.get("registry.name") == "doors"
    assert config.get("checker.states.0") == "on"
    assert config.get("logging.level") == "INFO"


@pytest.mark.parametrize(
    "data, message",
    [
        ({"registry": "oops"}, "'registry' must be a dict"),
        ({"logging": {"level": "LOUD"}}, "Unknown logging level"),
        ({"checker": {"states": "on"}}, "'checker.states' must be a list"),
    ],
)
def test_invalid_config_rejected(tmp_path, data, message):
    path = _write(tmp_path / "bad.yml", data)
    with pytest.raises(ValueError, match=message):
        ConfigManager(path)


def test_non_mapping_root_rejected(tmp_path):
    path = tmp_path / "list.yml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError, match="mapping"):
        ConfigManager(path)


def test_set_save_reload_and_callbacks(tmp_path):
    path = tmp_path / "capkit.yml"
    config = ConfigManager(path)
    changes = []
    config.register_change_callback(lambda key, value: changes.append(key))

    config.set("registry.name", "ducks")
    config.save()
    assert yaml.safe_load(path.read_text(encoding="utf-8"))["registry"]["name"] == "ducks"

    config.reload()
    assert changes == ["registry.name", "*"]
    assert ConfigManager(path).get("registry.name") == "ducks"
    assert config.export_to_dict()["registry"] == {"name": "ducks"}


def test_failing_callback_does_not_break_set(tmp_path):
    config = ConfigManager(tmp_path / "capkit.yml")

    def broken(key, value):
        raise RuntimeError("listener down")

    config.register_change_callback(broken)
    config.set("registry.name", "x")
    assert config.get("registry.name") == "x"


def test_configure_logging(tmp_path):
    path = _write(tmp_path / "capkit.yml", {"logging": {"level": "debug"}})
    configure_logging(ConfigManager(path))
    assert logging.getLogger("capkit").level == logging.DEBUG


def test_runtime_builders(tmp_path):
    trace_path = tmp_path / "trace" / "run.jsonl"
    path = _write(
        tmp_path / "capkit.yml",
        {
            "registry": {"name": "pond"},
            "checker": {"states": ["on"]},
            "trace": {"enabled": True, "path": str(trace_path)},
        },
    )
    config = ConfigManager(path)
    registry = build_registry(config)
    checker = build_checker(config)
    sink = build_trace_sink(config)

    assert registry.name == "pond"
    assert checker.states == ("on",)
    assert sink is not None and sink.path == trace_path
    assert build_trace_sink(ConfigManager(tmp_path / "absent.yml")) is None

    duck = ElectronicDuck("robo")
    registry.register(QUACKABLE, duck)
    sink.record_notification(registry.notify_all(QUACKABLE, "quack"))
    sink.record_check(checker.check(QUACKABLE, [duck]))

    entries = sink.read()
    assert [e["type"] for e in entries] == ["notification", "substitutability"]
    assert entries[0]["order"] == ["robo"]
    assert entries[1]["ok"] is True
    assert "ts" in entries[0]


@pytest.mark.parametrize("path", ["registry.name.x", "", "registry..name"])
def test_set_rejects_invalid_paths(tmp_path, path):
    config = ConfigManager(tmp_path / "capkit.yml")
    changes = []
    config.register_change_callback(lambda key, value: changes.append(key))

    with pytest.raises(ValueError):
        config.set(path, 1)

    assert config.get("registry.name") == "default"
    assert changes == []


def test_set_creates_missing_sections(tmp_path):
    config = ConfigManager(tmp_path / "capkit.yml")
    config.set("extras.owner.name", "ops")
    assert config.get_section("extras") == {"owner": {"name": "ops"}}
