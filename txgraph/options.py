"""
options.py

Render options and their layered resolution: built-in defaults (from
``config.settings``) < builder instance defaults < per-render overrides.
Every resolution produces a fresh ``RenderOptions``; no layer is mutated.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Union

import config
from errors import ConfigurationError

from .address import AddressMap, str_address
from .captions import DEFAULT_CAPTION_MAP, CaptionHandler
from .codes import CodesMap
from .identity import BRACKET_TYPES
from .styling import resolve_color_table
from .transaction import FEE_FIELDS

StorageParser = Callable[[Any], Dict[str, Any]]

# options merged entry-wise across layers instead of being replaced
_MERGED_MAPS = ("captions_map", "storage_map")


@dataclass
class RenderOptions:
    direction_type: str = "bidirectional"
    chart_type: str = "TB"
    folder: str = config.DEFAULT_OUTPUT_DIR
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
    display_storage: Union[bool, str] = "diff"
    storage_divider: str = " > "
    table_info: str = "mermaid"
    fee_details: Union[bool, Dict[str, bool]] = False
    color_forward: str = "#ff4747"
    color_backward: str = "#02dbdb"
    color_excess: str = "#0400f0"
    color_table: Union[bool, Dict[str, str]] = True
    address_map: AddressMap = field(default_factory=AddressMap)
    bracket_map: AddressMap = field(default_factory=AddressMap)
    storage_map: AddressMap = field(default_factory=AddressMap)
    captions_map: Dict[int, CaptionHandler] = field(default_factory=lambda: dict(DEFAULT_CAPTION_MAP))
    op_map: Optional[CodesMap] = None
    err_map: Optional[CodesMap] = None

    def validate(self) -> None:
        if self.chart_type not in config.CHART_TYPES:
            raise ConfigurationError(f"Invalid chart type: {self.chart_type!r}")
        if self.direction_type not in config.DIRECTION_TYPES:
            raise ConfigurationError(f"Invalid direction type: {self.direction_type!r}")
        if self.display_storage is not False and self.display_storage not in config.STORAGE_DISPLAY_MODES:
            raise ConfigurationError(f"Invalid storage display mode: {self.display_storage!r}")
        if self.table_info not in config.TABLE_INFO_STYLES:
            raise ConfigurationError(f"Invalid table info style: {self.table_info!r}")
        if not self.storage_divider:
            raise ConfigurationError("Storage divider must be a non-empty string.")
        if isinstance(self.fee_details, dict):
            unknown = set(self.fee_details) - set(FEE_FIELDS)
            if unknown:
                raise ConfigurationError(f"Unknown fee detail fields: {', '.join(sorted(unknown))}")
        for address, bracket in self.bracket_map.items():
            if bracket not in BRACKET_TYPES:
                raise ConfigurationError(f"Unknown bracket type {bracket!r} for {address}")
        if self.color_table is True:
            raise ConfigurationError("Color table must be resolved to a color dict before rendering.")

    def display_label(self, address: Any) -> str:
        label = self.address_map.get(address)
        return label if label is not None else str_address(address)

    def bracket_for(self, address: Any) -> Optional[str]:
        return self.bracket_map.get(address)


OPTION_NAMES = tuple(f.name for f in dataclasses.fields(RenderOptions))


def _as_address_map(value: Any) -> AddressMap:
    if isinstance(value, AddressMap):
        return value.copy()
    return AddressMap(value)


_COERCERS: Dict[str, Callable[[Any], Any]] = {
    "address_map": _as_address_map,
    "bracket_map": _as_address_map,
    "storage_map": _as_address_map,
    "captions_map": lambda value: dict(value),
    "op_map": lambda value: dict(value),
    "err_map": lambda value: dict(value),
    "fee_details": lambda value: dict(value) if isinstance(value, Mapping) else value,
}


def builtin_layer() -> Dict[str, Any]:
    """Scalar defaults from the active settings, env overrides included."""
    layer = dataclasses.asdict(config.settings.render)
    layer["folder"] = config.settings.output.folder
    return layer


def merge_options(*layers: Optional[Mapping[str, Any]]) -> RenderOptions:
    """
    Resolve option layers in order, later layers winning per key.

    ``None`` values mean "not given" and never override a lower layer.
    ``captions_map`` and ``storage_map`` are merged entry-wise; the
    captions map always starts from the built-in decoders.
    """
    base = RenderOptions()
    resolved: Dict[str, Any] = {name: getattr(base, name) for name in OPTION_NAMES}
    for layer in layers:
        if not layer:
            continue
        for key, value in layer.items():
            if key not in resolved:
                raise ConfigurationError(f"Unknown render option: {key!r}")
            if value is None:
                continue
            coerce = _COERCERS.get(key)
            value = coerce(value) if coerce else value
            if key in _MERGED_MAPS:
                merged = resolved[key].copy()
                merged.update(value)
                value = merged
            resolved[key] = value

    resolved["color_table"] = resolve_color_table(resolved["color_table"])
    options = RenderOptions(**resolved)
    options.validate()
    return options


__all__ = ["OPTION_NAMES", "RenderOptions", "StorageParser", "builtin_layer", "merge_options"]
