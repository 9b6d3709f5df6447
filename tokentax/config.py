"""
Service configuration.

Settings come from ``tokentax.toml`` (top-level keys or a ``[tokentax]``
table) and are then overridden by ``TOKENTAX_*`` environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from datetime import timedelta
from pathlib import Path
from typing import Any, Mapping

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

CONFIG_FILENAME = "tokentax.toml"
ENV_PREFIX = "TOKENTAX_"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}
_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


@dataclass
class ServiceConfig:
    artifact_path: Path = Path("artifacts")
    cache_ttl_seconds: int = 86400
    max_template_depth: int = 32
    git_enabled: bool = False
    commit_on_mutation: bool = False
    log_level: str = "INFO"

    @property
    def cache_ttl(self) -> timedelta:
        return timedelta(seconds=self.cache_ttl_seconds)

    def validate(self) -> "ServiceConfig":
        if self.cache_ttl_seconds <= 0:
            raise ValueError(f"cache_ttl_seconds must be positive, got {self.cache_ttl_seconds}")
        if self.max_template_depth <= 0:
            raise ValueError(f"max_template_depth must be positive, got {self.max_template_depth}")
        self.log_level = self.log_level.upper()
        if self.log_level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log_level: {self.log_level}")
        return self


def _coerce(name: str, kind: Any, value: Any) -> Any:
    if kind in (bool, "bool"):
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
        raise ValueError(f"{name}: expected a boolean, got {value!r}")
    if kind in (int, "int"):
        if isinstance(value, bool):
            raise ValueError(f"{name}: expected an integer, got {value!r}")
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise ValueError(f"{name}: expected an integer, got {value!r}") from e
    if kind in (Path, "Path"):
        return Path(value)
    return str(value)


def read_config_file(path: Path) -> dict[str, Any]:
    """
    Parse a config TOML file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the TOML is malformed
    """
    with open(path, "rb") as f:
        try:
            data = tomllib.load(f)
        except Exception as e:
            raise ValueError(f"Failed to parse config TOML: {e}") from e
    section = data.get("tokentax", data)
    if not isinstance(section, dict):
        raise ValueError("[tokentax] must be a table")
    return section


def load_config(path: Path | str | None = None, env: Mapping[str, str] | None = None) -> ServiceConfig:
    """
    Build the effective configuration.

    Args:
        path: Config file; defaults to ``tokentax.toml`` in the working
            directory when that exists
        env: Environment mapping; defaults to ``os.environ``

    Returns:
        Validated ServiceConfig. A relative ``artifact_path`` from the file
        is resolved against the file's directory.
    """
    env = os.environ if env is None else env
    known = {f.name: f.type for f in fields(ServiceConfig)}
    values: dict[str, Any] = {}

    config_path = Path(path) if path is not None else Path.cwd() / CONFIG_FILENAME
    if path is not None or config_path.exists():
        for key, value in read_config_file(config_path).items():
            if key not in known:
                raise ValueError(f"Unknown config key: {key}")
            values[key] = _coerce(key, known[key], value)
        artifact_path = values.get("artifact_path")
        if artifact_path is not None and not artifact_path.is_absolute():
            values["artifact_path"] = config_path.parent / artifact_path

    for key, kind in known.items():
        raw = env.get(ENV_PREFIX + key.upper())
        if raw is not None:
            values[key] = _coerce(key, kind, raw)

    return ServiceConfig(**values).validate()
