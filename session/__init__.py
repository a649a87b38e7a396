"""
Session orchestration for Reenact hosts.

- HostLoop fixes the per-tick order (deliver notifications, then sample).
- InteractionSessionController carries the record / playback / reset
  mode logic a host UI binds its buttons to.
- settings loads component configs from a YAML file.
"""

from .host_loop import HostLoop
from .controller import InteractionSessionController, SessionMode
from .settings import (
    LoggingSettings,
    ReenactSettings,
    configure_logging,
    load_settings,
    settings_from_dict,
)

__all__ = [
    "HostLoop",
    "InteractionSessionController",
    "SessionMode",
    "LoggingSettings",
    "ReenactSettings",
    "configure_logging",
    "load_settings",
    "settings_from_dict",
]
