"""System configuration — the settings a session boots with.

A ``SystemConfig`` is assembled in three layers, later layers winning:

1. Built-in defaults (``SystemConfig()``).
2. An optional JSON file, read with ``load_config(path)``.
3. Environment flags: ``IRISOS_SAFE_MODE`` and ``IRISOS_VERBOSE``
   (``"true"`` turns a flag on, anything else leaves it off).

Example config file::

    {"hostname": "irisos", "username": "user", "home": "/home/user"}

Unknown keys are rejected so a typo doesn't silently fall back to a
default.
"""

from __future__ import annotations

import dataclasses
import json
import os
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

DEFAULT_VERSION = "1.0"
SAFE_MODE_VAR = "IRISOS_SAFE_MODE"
VERBOSE_VAR = "IRISOS_VERBOSE"

_STRING_FIELDS = ("hostname", "username", "home", "version")
_BOOL_FIELDS = ("safe_mode", "verbose")


class ConfigError(RuntimeError):
    """Raise when a configuration source cannot be read or is invalid."""


@dataclass(frozen=True)
class SystemConfig:
    """Settings for one run of the system.

    Attributes:
        hostname: Machine name shown in the prompt.
        username: The single session user.
        home: Absolute path of the user's home directory (``cd ~``).
        version: Version string shown in banners and ``sysinfo``.
        safe_mode: Terminal-only boot with a visible warning.
        verbose: Include the full boot log in the welcome banner.
        log_capacity: Maximum log entries kept (None = unbounded).

    """

    hostname: str = "irisos"
    username: str = "user"
    home: str = "/home/user"
    version: str = DEFAULT_VERSION
    safe_mode: bool = False
    verbose: bool = False
    log_capacity: int | None = 1000

    def __post_init__(self) -> None:
        """Validate field types and values."""
        for name in _STRING_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, str):
                msg = f"{name} must be a string, got {value!r}"
                raise ConfigError(msg)
        for name in _BOOL_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, bool):
                msg = f"{name} must be true or false, got {value!r}"
                raise ConfigError(msg)
        capacity = self.log_capacity
        if capacity is not None and (
            isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0
        ):
            msg = f"log_capacity must be a positive integer or null, got {capacity!r}"
            raise ConfigError(msg)
        if not self.home.startswith("/"):
            msg = f"home must be an absolute path, got {self.home!r}"
            raise ConfigError(msg)
        if not self.username or not self.hostname:
            msg = "username and hostname must not be empty"
            raise ConfigError(msg)


def _from_mapping(base: SystemConfig, data: Mapping[str, Any]) -> SystemConfig:
    """Overlay *data* onto *base*, rejecting unknown keys."""
    known = {f.name for f in dataclasses.fields(SystemConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        msg = f"Unknown config keys: {', '.join(unknown)}"
        raise ConfigError(msg)
    return dataclasses.replace(base, **data)


def _flag(value: str | None) -> bool | None:
    """Interpret an environment flag; None when the variable is unset."""
    if value is None:
        return None
    return value == "true"


def apply_environment(
    config: SystemConfig, environ: Mapping[str, str] | None = None
) -> SystemConfig:
    """Return *config* with the ``IRISOS_*`` environment flags applied."""
    env = os.environ if environ is None else environ
    overrides: dict[str, bool] = {}
    safe_mode = _flag(env.get(SAFE_MODE_VAR))
    if safe_mode is not None:
        overrides["safe_mode"] = safe_mode
    verbose = _flag(env.get(VERBOSE_VAR))
    if verbose is not None:
        overrides["verbose"] = verbose
    return dataclasses.replace(config, **overrides)


def load_config(
    path: Path | None = None, *, environ: Mapping[str, str] | None = None
) -> SystemConfig:
    """Build the effective configuration.

    Args:
        path: Optional JSON file with config overrides.
        environ: Environment to read flags from (default: ``os.environ``).

    Raises:
        ConfigError: If the file cannot be read, is not a JSON object,
            or contains unknown keys or invalid values.

    """
    config = SystemConfig()
    if path is not None:
        try:
            data = json.loads(path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            msg = f"Cannot load config: {e}"
            raise ConfigError(msg) from e
        if not isinstance(data, dict):
            msg = "Config file must contain a JSON object"
            raise ConfigError(msg)
        config = _from_mapping(config, data)  # pyright: ignore[reportUnknownArgumentType]
    return apply_environment(config, environ)
