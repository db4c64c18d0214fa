"""Facade configuration: YAML file + env var overrides.

Priority: env var > YAML file > default.
Env vars use the BINDLOG_{FIELD_NAME} convention
(e.g. BINDLOG_DETECT_LOGGER_NAME_MISMATCH=true).
YAML file default: ~/.bindlog/config.yaml (override with BINDLOG_CONFIG).

Reading configuration never raises: a malformed file or value falls back
to the default, since the facade must stay usable before anything else
in the process is.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field, fields
from pathlib import Path

import yaml

_TRUTHY = {"1", "true", "on", "yes"}
_FALSY = {"0", "false", "off", "no"}
_DEFAULT_PATH = Path("~/.bindlog/config.yaml").expanduser()

DEFAULT_ENTRY_POINT_GROUP = "bindlog.bindings"


@dataclass
class BindlogConfig:
    # Report get_logger(cls) calls made from a module other than cls's own
    detect_logger_name_mismatch: bool = False
    # Platforms whose vendor string contains "android" cannot list bindings
    platform_vendor: str = field(default_factory=lambda: sys.platform)
    entry_point_group: str = DEFAULT_ENTRY_POINT_GROUP

    # Used by the bundled bindings only
    log_level: str = "INFO"
    log_format: str = "json"  # "json" | "console"

    @classmethod
    def load(cls, path: Path | None = None) -> BindlogConfig:
        """Load config from YAML file, then override with env vars."""
        file_path = path or _config_path()
        file_values: dict[str, object] = {}

        try:
            if file_path.exists():
                raw = yaml.safe_load(file_path.read_text()) or {}
                if isinstance(raw, dict):
                    file_values = raw
        except (OSError, yaml.YAMLError):
            file_values = {}

        kwargs: dict[str, object] = {}
        for f in fields(cls):
            name = f.name
            env_key = f"BINDLOG_{name.upper()}"
            is_bool = f.type in ("bool", bool)

            if env_key in os.environ:
                raw_value: object = os.environ[env_key]
            elif name in file_values:
                raw_value = file_values[name]
            else:
                continue

            if is_bool:
                parsed = _parse_bool(raw_value)
                if parsed is not None:
                    kwargs[name] = parsed
            elif isinstance(raw_value, str) and raw_value:
                kwargs[name] = raw_value

        return cls(**kwargs)

    def to_dict(self) -> dict[str, object]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @property
    def is_constrained_platform(self) -> bool:
        """True where binding registrations cannot be enumerated."""
        return "android" in (self.platform_vendor or "").lower()


def _config_path() -> Path:
    override = os.environ.get("BINDLOG_CONFIG")
    return Path(override).expanduser() if override else _DEFAULT_PATH


def _parse_bool(value: object) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUTHY:
            return True
        if lowered in _FALSY:
            return False
    return None


# Singleton
_config: BindlogConfig | None = None


def get_config(path: Path | None = None) -> BindlogConfig:
    """Get the singleton BindlogConfig instance."""
    global _config
    if _config is None:
        _config = BindlogConfig.load(path)
    return _config


def reset_config() -> None:
    """Reset for testing."""
    global _config
    _config = None
