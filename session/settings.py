"""
YAML settings for Reenact hosts.

A settings file has a single `reenact` root key:

    reenact:
      recorder:
        sampling_frequency: 30
        record_continuous_transforms: true
        stop_after_first_release: true
      player:
        reset_objects_on_start: true
      registry:
        auto_discover: true
        auto_generate_ids: true
      logging:
        level: INFO

Every section and key is optional; missing values fall back to the
component defaults. See config/reenact.example.yml.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Union

import yaml  # Requires PyYAML

from common.errors import ConfigError
from playback.player import PlayerConfig
from recording.recorder import RecorderConfig
from scene.state_provider import RegistryConfig

LOG = logging.getLogger(__name__)

ROOT_KEY = "reenact"
DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

_KNOWN_SECTIONS = ("recorder", "player", "registry", "logging")


@dataclass
class LoggingSettings:
    level: str = "INFO"
    format: str = DEFAULT_LOG_FORMAT


@dataclass
class ReenactSettings:
    """Component configs assembled from one settings file."""

    recorder: RecorderConfig = field(default_factory=RecorderConfig)
    player: PlayerConfig = field(default_factory=PlayerConfig)
    registry: RegistryConfig = field(default_factory=RegistryConfig)
    logging: LoggingSettings = field(default_factory=LoggingSettings)


# --------------------------------------------------------------------------- #
# Loading
# --------------------------------------------------------------------------- #


def load_settings(path: Union[str, Path]) -> ReenactSettings:
    """
    Read a YAML settings file.

    Raises:
        ConfigError if the file is missing, is not valid YAML, lacks the
        `reenact` root key, or holds invalid values.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    with path.open("r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(data, Mapping) or ROOT_KEY not in data:
        raise ConfigError(f"Config root must contain a '{ROOT_KEY}' key")

    LOG.debug("Loaded settings from %s", path)
    return settings_from_dict(data[ROOT_KEY] or {})


def settings_from_dict(cfg: Mapping[str, Any]) -> ReenactSettings:
    """Build ReenactSettings from the mapping under the `reenact` key."""
    if not isinstance(cfg, Mapping):
        raise ConfigError(f"'{ROOT_KEY}' must be a mapping, got {type(cfg).__name__}")

    for key in cfg:
        if key not in _KNOWN_SECTIONS:
            LOG.warning("Ignoring unknown settings section %r", key)

    return ReenactSettings(
        recorder=build_recorder_config(_section(cfg, "recorder")),
        player=build_player_config(_section(cfg, "player")),
        registry=build_registry_config(_section(cfg, "registry")),
        logging=build_logging_settings(_section(cfg, "logging")),
    )


def _section(cfg: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = cfg.get(name) or {}
    if not isinstance(section, Mapping):
        raise ConfigError(f"Settings section '{name}' must be a mapping")
    return section


# --------------------------------------------------------------------------- #
# Section builders
# --------------------------------------------------------------------------- #


def build_recorder_config(rec_cfg: Mapping[str, Any]) -> RecorderConfig:
    try:
        config = RecorderConfig(
            sampling_frequency=float(rec_cfg.get("sampling_frequency", 30.0)),
            record_continuous_transforms=bool(rec_cfg.get("record_continuous_transforms", True)),
            stop_after_first_release=bool(rec_cfg.get("stop_after_first_release", True)),
        )
        config.validate()
    except (TypeError, ValueError) as exc:
        # InvalidArgumentError is a ValueError
        raise ConfigError(f"Invalid recorder settings: {exc}") from exc
    return config


def build_player_config(player_cfg: Mapping[str, Any]) -> PlayerConfig:
    return PlayerConfig(
        reset_objects_on_start=bool(player_cfg.get("reset_objects_on_start", True)),
    )


def build_registry_config(registry_cfg: Mapping[str, Any]) -> RegistryConfig:
    return RegistryConfig(
        auto_discover=bool(registry_cfg.get("auto_discover", True)),
        auto_generate_ids=bool(registry_cfg.get("auto_generate_ids", True)),
    )


def build_logging_settings(log_cfg: Mapping[str, Any]) -> LoggingSettings:
    level = str(log_cfg.get("level", "INFO")).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigError(f"Unknown logging level: {level!r}")
    return LoggingSettings(
        level=level,
        format=str(log_cfg.get("format", DEFAULT_LOG_FORMAT)),
    )


def configure_logging(settings: LoggingSettings) -> None:
    """Install a root handler. Only entry points should call this."""
    logging.basicConfig(level=settings.level, format=settings.format)


__all__ = [
    "ROOT_KEY",
    "LoggingSettings",
    "ReenactSettings",
    "load_settings",
    "settings_from_dict",
    "build_recorder_config",
    "build_player_config",
    "build_registry_config",
    "build_logging_settings",
    "configure_logging",
]
