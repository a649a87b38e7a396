import logging
from pathlib import Path

import pytest

from common.errors import ConfigError
from session.settings import ReenactSettings, load_settings, settings_from_dict

EXAMPLE_CONFIG = Path(__file__).resolve().parent.parent / "config" / "reenact.example.yml"


def test_example_config_loads() -> None:
    settings = load_settings(EXAMPLE_CONFIG)
    assert settings.recorder.sampling_frequency == 30.0
    assert settings.recorder.stop_after_first_release is True
    assert settings.player.reset_objects_on_start is True
    assert settings.registry.auto_generate_ids is True
    assert settings.logging.level == "INFO"


def test_values_are_read_from_yaml(tmp_path) -> None:
    path = tmp_path / "reenact.yml"
    path.write_text(
        """
reenact:
  recorder:
    sampling_frequency: 60
    record_continuous_transforms: false
    stop_after_first_release: false
  player:
    reset_objects_on_start: false
  registry:
    auto_discover: false
  logging:
    level: debug
""",
        encoding="utf-8",
    )

    settings = load_settings(path)

    assert settings.recorder.sampling_frequency == 60.0
    assert settings.recorder.sampling_period == pytest.approx(1 / 60)
    assert settings.recorder.record_continuous_transforms is False
    assert settings.recorder.stop_after_first_release is False
    assert settings.player.reset_objects_on_start is False
    assert settings.registry.auto_discover is False
    assert settings.registry.auto_generate_ids is True
    assert settings.logging.level == "DEBUG"


def test_empty_root_uses_defaults(tmp_path) -> None:
    path = tmp_path / "reenact.yml"
    path.write_text("reenact:\n", encoding="utf-8")

    settings = load_settings(path)

    assert settings == ReenactSettings()


def test_missing_file_raises(tmp_path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        load_settings(tmp_path / "nope.yml")


def test_missing_root_key_raises(tmp_path) -> None:
    path = tmp_path / "other.yml"
    path.write_text("recorder:\n  sampling_frequency: 30\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="reenact"):
        load_settings(path)


def test_invalid_yaml_raises(tmp_path) -> None:
    path = tmp_path / "broken.yml"
    path.write_text("reenact: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_settings(path)


@pytest.mark.parametrize(
    "cfg",
    [
        {"recorder": {"sampling_frequency": 0}},
        {"recorder": {"sampling_frequency": -5}},
        {"recorder": {"sampling_frequency": "fast"}},
        {"recorder": "not-a-mapping"},
        {"logging": {"level": "chatty"}},
    ],
)
def test_invalid_values_raise(cfg) -> None:
    with pytest.raises(ConfigError):
        settings_from_dict(cfg)


def test_unknown_sections_are_logged(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="session.settings"):
        settings_from_dict({"renderer": {}})
    assert "renderer" in caplog.text
