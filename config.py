"""Environment-aware configuration for the txgraph renderer."""
from __future__ import annotations

import copy
import os
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from errors import ConfigurationError


CHART_TYPES = ("TB", "LR", "BT", "RL")
DIRECTION_TYPES = ("unidirectional", "bidirectional")
STORAGE_DISPLAY_MODES = ("diff", "full")
TABLE_INFO_STYLES = ("mermaid", "simple")

DEFAULT_OUTPUT_DIR = "build/graph/"


@dataclass
class RenderSettings:
    direction_type: str = "bidirectional"
    chart_type: str = "TB"
    hide_ok_values: bool = True
    display_index: bool = True
    display_op: bool = True
    display_value: bool = True
    display_fees: bool = True
    display_details: bool = True
    display_exit_code: bool = True
    display_action_result: bool = True
    display_deploy: bool = False
    display_destroyed: bool = True
    display_aborted: bool = True
    display_success: bool = False
    disable_styles: bool = False
    show_origin: bool = False
    # "diff", "full" or False
    display_storage: Any = "diff"
    storage_divider: str = " > "
    table_info: str = "mermaid"
    color_forward: str = "#ff4747"
    color_backward: str = "#02dbdb"
    color_excess: str = "#0400f0"
    color_table: bool = True

    def validate(self) -> None:
        if self.chart_type not in CHART_TYPES:
            raise ConfigurationError(f"Invalid chart type: {self.chart_type!r}")
        if self.direction_type not in DIRECTION_TYPES:
            raise ConfigurationError(f"Invalid direction type: {self.direction_type!r}")
        if self.display_storage is not False and self.display_storage not in STORAGE_DISPLAY_MODES:
            raise ConfigurationError(f"Invalid storage display mode: {self.display_storage!r}")
        if self.table_info not in TABLE_INFO_STYLES:
            raise ConfigurationError(f"Invalid table info style: {self.table_info!r}")
        if not self.storage_divider:
            raise ConfigurationError("Storage divider must be a non-empty string.")
        for name in ("color_forward", "color_backward", "color_excess"):
            if not getattr(self, name):
                raise ConfigurationError(f"Render color '{name}' must be provided.")


@dataclass
class TableSettings:
    line_len: Optional[int] = 48
    max_display_len: Optional[int] = 150
    min_display_len: int = 48
    hash_name: str = "sha256"

    def validate(self) -> None:
        if self.min_display_len <= 0:
            raise ConfigurationError("Minimal display length must be positive.")
        if self.line_len is not None and self.line_len < 10:
            raise ConfigurationError(f"Table line length must be at least 10 (got {self.line_len}).")
        if self.max_display_len is not None and self.max_display_len < self.min_display_len:
            raise ConfigurationError(
                f"Max display length must be at least {self.min_display_len} (got {self.max_display_len})."
            )
        if not self.hash_name:
            raise ConfigurationError("Hash function name must be provided.")


@dataclass
class OutputSettings:
    folder: str = DEFAULT_OUTPUT_DIR

    def validate(self) -> None:
        if not self.folder:
            raise ConfigurationError("Output folder must be configured.")


@dataclass
class LoggingSettings:
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"

    def validate(self) -> None:
        if not self.level:
            raise ConfigurationError("Logging level must be provided.")
        if not self.format:
            raise ConfigurationError("Logging format must be provided.")


@dataclass
class Settings:
    env: str
    render: RenderSettings
    table: TableSettings
    output: OutputSettings
    logging: LoggingSettings

    def validate(self) -> None:
        self.render.validate()
        self.table.validate()
        self.output.validate()
        self.logging.validate()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "env": self.env,
            "render": asdict(self.render),
            "table": asdict(self.table),
            "output": asdict(self.output),
            "logging": asdict(self.logging),
        }


BASE_DEFAULTS: Dict[str, Any] = {
    "render": asdict(RenderSettings()),
    "table": asdict(TableSettings()),
    "output": asdict(OutputSettings()),
    "logging": asdict(LoggingSettings()),
}

ENVIRONMENT_OVERRIDES: Dict[str, Dict[str, Any]] = {
    "development": {},
    "test": {
        "logging": {"level": "DEBUG"},
    },
    "production": {
        "logging": {"level": "WARNING"},
    },
}


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"not a boolean: {value!r}")


def _parse_optional_int(value: str) -> Optional[int]:
    if value.strip().lower() in ("", "none", "null"):
        return None
    return int(value)


def _parse_storage_mode(value: str) -> Any:
    lowered = value.strip().lower()
    if lowered in ("0", "false", "off", "none"):
        return False
    return lowered


_ENV_VALUE_CASTERS: Dict[str, Any] = {
    "TXGRAPH_OUTPUT_DIR": ("output", "folder", str),
    "TXGRAPH_CHART_TYPE": ("render", "chart_type", lambda value: value.strip().upper()),
    "TXGRAPH_DIRECTION_TYPE": ("render", "direction_type", lambda value: value.strip().lower()),
    "TXGRAPH_DISABLE_STYLES": ("render", "disable_styles", _parse_bool),
    "TXGRAPH_SHOW_ORIGIN": ("render", "show_origin", _parse_bool),
    "TXGRAPH_DISPLAY_STORAGE": ("render", "display_storage", _parse_storage_mode),
    "TXGRAPH_STORAGE_DIVIDER": ("render", "storage_divider", str),
    "TXGRAPH_TABLE_INFO": ("render", "table_info", lambda value: value.strip().lower()),
    "TXGRAPH_LINE_LEN": ("table", "line_len", _parse_optional_int),
    "TXGRAPH_MAX_DISPLAY_LEN": ("table", "max_display_len", _parse_optional_int),
    "TXGRAPH_HASH": ("table", "hash_name", lambda value: value.strip().lower()),
    "TXGRAPH_LOG_LEVEL": ("logging", "level", str),
    "TXGRAPH_LOG_FORMAT": ("logging", "format", str),
    "TXGRAPH_LOG_DATEFMT": ("logging", "datefmt", str),
}


def _deep_merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def _overrides_from_env() -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for env_key, (section, key, caster) in _ENV_VALUE_CASTERS.items():
        raw = os.environ.get(env_key)
        if raw is None:
            continue
        try:
            parsed = caster(raw)
        except Exception as exc:  # pragma: no cover - configuration error path
            raise ConfigurationError(f"Failed to coerce environment variable {env_key}: {exc}") from exc
        overrides.setdefault(section, {})[key] = parsed
    return overrides


def _settings_from_dict(env: str, payload: Dict[str, Any]) -> Settings:
    try:
        return Settings(
            env=env,
            render=RenderSettings(**payload["render"]),
            table=TableSettings(**payload["table"]),
            output=OutputSettings(**payload["output"]),
            logging=LoggingSettings(**payload["logging"]),
        )
    except TypeError as exc:
        raise ConfigurationError(f"Unknown configuration key: {exc}") from exc


def load_settings(env: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> Settings:
    env_name = (env or os.environ.get("TXGRAPH_ENV", "development")).lower()
    base = copy.deepcopy(BASE_DEFAULTS)
    env_specific = ENVIRONMENT_OVERRIDES.get(env_name, {})
    base = _deep_merge(base, copy.deepcopy(env_specific))
    base = _deep_merge(base, _overrides_from_env())
    if overrides:
        base = _deep_merge(base, copy.deepcopy(overrides))
    settings_obj = _settings_from_dict(env_name, base)
    settings_obj.validate()
    return settings_obj


def reload_settings(env: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> Settings:
    global settings
    settings = load_settings(env=env or settings.env, overrides=overrides)
    return settings


settings: Settings = load_settings()

__all__ = [
    "settings",
    "load_settings",
    "reload_settings",
    "Settings",
    "RenderSettings",
    "TableSettings",
    "OutputSettings",
    "LoggingSettings",
    "CHART_TYPES",
    "DIRECTION_TYPES",
    "STORAGE_DISPLAY_MODES",
    "TABLE_INFO_STYLES",
    "DEFAULT_OUTPUT_DIR",
]
