"""
Exception types shared by the Reenact packages.

Only conditions that callers must handle are raised. Illegal state
transitions (starting twice, stopping while idle), missing collaborators
and inconsistent recordings are logged by the component that detects
them and leave it in a well-defined state instead.
"""

from __future__ import annotations


class ReenactError(Exception):
    """Base class for all Reenact errors."""


class InvalidArgumentError(ReenactError, ValueError):
    """
    Raised when a caller passes an unusable argument, e.g. starting
    playback without a recording or configuring a non-positive sampling
    frequency.
    """


class ConfigError(ReenactError):
    """
    Raised when a settings file is missing or does not have the
    expected structure.
    """


__all__ = [
    "ReenactError",
    "InvalidArgumentError",
    "ConfigError",
]
