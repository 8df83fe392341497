"""Configuration loading, environment-variable interpolation, and validation.

Resolution order for ``${VAR}`` placeholders:
    CLI overrides → environment variables → raw config value.

``${VAR}`` (no default) raises if unresolvable.
``${VAR:-default}`` falls back to *default*.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import jsonschema
import orjson

logger = logging.getLogger(__name__)

_VAR_RE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-(.*?))?\}")

_SCHEMA_PATH = Path(__file__).resolve().parent.parent.parent / "config" / "config.schema.json"


@dataclass
class ControllerConfig:
    """UniFi controller connection settings."""

    url: str = "https://127.0.0.1:8443"
    user: str = "influx"
    password: str = ""
    verify_ssl: bool = False
    sites: list[str] = field(default_factory=lambda: ["default"])
    timeout_seconds: float = 10.0


@dataclass
class InfluxConfig:
    """InfluxDB 1.x connection settings."""

    host: str = "127.0.0.1"
    port: int = 8086
    database: str = "unifi"
    username: str = "unifi"
    password: str = ""
    ssl: bool = False
    verify_ssl: bool = False


@dataclass
class PollerConfig:
    """Polling loop settings."""

    interval_seconds: int = 30
    output: str = "influx"


@dataclass
class LogFileConfig:
    """Optional rotating log file; stderr logging is always on."""

    enabled: bool = False
    path: str = "/var/log/unifi-poller/poller.log"
    max_size_bytes: int = 10485760   # 10 MB
    backup_count: int = 5


@dataclass
class LoggingConfig:
    """Logging settings."""

    level: str = "info"
    file: LogFileConfig = field(default_factory=LogFileConfig)


@dataclass
class AppConfig:
    """Top-level application configuration."""

    controller: ControllerConfig = field(default_factory=ControllerConfig)
    influx: InfluxConfig = field(default_factory=InfluxConfig)
    poller: PollerConfig = field(default_factory=PollerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def secret_values(self) -> list[str]:
        """Passwords that must never reach the logs."""
        return [v for v in (self.controller.password, self.influx.password) if v]


def _interpolate_value(value: str, overrides: dict[str, str] | None = None) -> str:
    """Replace ``${VAR}`` / ``${VAR:-default}`` in *value*."""

    def _replacer(match: re.Match) -> str:
        var_name = match.group(1)
        default = match.group(2)  # None when no ``:-`` present

        if overrides and var_name in overrides:
            return overrides[var_name]
        env_val = os.environ.get(var_name)
        if env_val is not None:
            return env_val
        if default is not None:
            return default

        raise ValueError(
            f"Required variable ${{{var_name}}} is not set in environment or CLI overrides"
        )

    return _VAR_RE.sub(_replacer, value)


def _walk_and_interpolate(obj: Any, overrides: dict[str, str] | None = None) -> Any:
    """Recursively interpolate all string values in a JSON-like structure."""
    if isinstance(obj, str):
        return _interpolate_value(obj, overrides)
    if isinstance(obj, dict):
        return {k: _walk_and_interpolate(v, overrides) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_walk_and_interpolate(item, overrides) for item in obj]
    return obj


def _section(cls: type, raw: dict[str, Any]) -> Any:
    """Build dataclass *cls* from the keys of *raw* it knows about."""
    known = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in raw.items() if k in known})


def _dict_to_config(raw: dict[str, Any]) -> AppConfig:
    """Convert a raw dict into a typed :class:`AppConfig`."""
    logging_raw = dict(raw.get("logging", {}))
    log_file = _section(LogFileConfig, logging_raw.pop("file", {}))

    return AppConfig(
        controller=_section(ControllerConfig, raw.get("controller", {})),
        influx=_section(InfluxConfig, raw.get("influx", {})),
        poller=_section(PollerConfig, raw.get("poller", {})),
        logging=LoggingConfig(level=logging_raw.get("level", "info"), file=log_file),
    )


def load_config(
    path: str | Path,
    overrides: dict[str, str] | None = None,
    schema_path: str | Path | None = None,
) -> AppConfig:
    """Load, interpolate, validate, and return the application config.

    Parameters
    ----------
    path:
        Filesystem path to ``config.json``.
    overrides:
        CLI-supplied variable overrides.
    schema_path:
        Path to the JSON Schema file.  Defaults to
        ``config/config.schema.json`` relative to the project root.

    Returns
    -------
    AppConfig
        Fully resolved and validated configuration.

    Raises
    ------
    ValueError
        If a required ``${VAR}`` cannot be resolved.
    jsonschema.ValidationError
        If the config fails schema validation.
    """
    raw_bytes = Path(path).read_bytes()
    raw: dict[str, Any] = orjson.loads(raw_bytes)

    interpolated = _walk_and_interpolate(raw, overrides=overrides)

    # --- schema validation ---
    sp = Path(schema_path) if schema_path else _SCHEMA_PATH
    if sp.exists():
        schema = orjson.loads(sp.read_bytes())
        jsonschema.validate(instance=interpolated, schema=schema)
        logger.debug("Config passed schema validation")
    else:
        logger.warning("Schema file not found at %s, skipping validation", sp)

    return _dict_to_config(interpolated)
