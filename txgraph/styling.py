"""Classification of table cell text into display styles, and long-value hashing."""
from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union

from blake3 import blake3

from errors import ConfigurationError

from .address import is_address_string
from .formatting import flatten_display_label, is_number_str, pretty_number

DEFAULT_TABLE_COLORS: Dict[str, str] = {
    "null_color": "#569CD6",
    "undef_color": "#569CD6",
    "addr_color": "#D656B2",
    "num_color": "#B0A104",
    "diff_plus_color": "#1DB515",
    "diff_minus_color": "#F70B14",
    "str_color": "#E700FF",
}

ColorTable = Union[bool, Dict[str, str]]


@dataclass(frozen=True)
class HashFunction:
    label: str
    function: Callable[[bytes], bytes]

    def hexdigest(self, src: Union[str, bytes]) -> str:
        data = src.encode("utf-8") if isinstance(src, str) else src
        return self.function(data).hex()


def _sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def _blake3(data: bytes) -> bytes:
    return blake3(data).digest()


_HASH_FUNCTIONS: Dict[str, HashFunction] = {
    "sha256": HashFunction("sha256", _sha256),
    "blake3": HashFunction("blake3", _blake3),
}


def register_hash_function(label: str, function: Callable[[bytes], bytes]) -> HashFunction:
    if not label:
        raise ConfigurationError("Hash function label must be provided.")
    hash_function = HashFunction(label, function)
    _HASH_FUNCTIONS[label] = hash_function
    return hash_function


def get_hash_function(name: str) -> HashFunction:
    try:
        return _HASH_FUNCTIONS[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown hash function {name!r}; known: {', '.join(sorted(_HASH_FUNCTIONS))}"
        ) from None


def maybe_replace_with_hash(src: str, max_len: Optional[int], hash_function: HashFunction) -> str:
    if max_len and len(src) > max_len:
        return f"{hash_function.label}: {hash_function.hexdigest(src)}"
    return src


def resolve_color_table(src: Any) -> Union[bool, Dict[str, str]]:
    """``True`` selects the default colors, a dict overrides some of them, falsy disables."""
    if not src:
        return False
    if src is True:
        return dict(DEFAULT_TABLE_COLORS)
    if not isinstance(src, dict):
        raise ConfigurationError(f"Color table must be a boolean or a dict, got {type(src).__name__}")
    unknown = set(src) - set(DEFAULT_TABLE_COLORS)
    if unknown:
        raise ConfigurationError(f"Unknown table colors: {', '.join(sorted(unknown))}")
    colors = dict(DEFAULT_TABLE_COLORS)
    colors.update({key: value for key, value in src.items() if value is not None})
    return colors


def style_cell(
    src: str,
    color_table: ColorTable,
    address_label: Optional[Callable[[str], str]] = None,
    special: Optional[str] = None,
) -> Dict[str, Any]:
    color: Optional[str] = None
    highlight: Optional[str] = None
    if color_table:
        if color_table is True or not isinstance(color_table, dict):
            raise ConfigurationError("need full color object")
        if special == "diff":
            if "+" in src:
                color = color_table["diff_plus_color"]
            elif len(src) > 1:
                color = color_table["diff_minus_color"]
            if color:
                sign = "+" if "+" in src else ""
                src = sign + pretty_number(src.lstrip("+"))
        elif src == "null":
            color = color_table["null_color"]
            highlight = "bold"
        elif src == "undef":
            color = color_table["undef_color"]
            highlight = "bold"
        elif is_number_str(src):
            color = color_table["num_color"]
            src = pretty_number(src)
        elif is_address_string(src):
            label = address_label(src) if address_label else src
            src = flatten_display_label(label)
            color = color_table["addr_color"]
        else:
            color = color_table["str_color"]
    return {"text": src, "color": color, "highlight": highlight}


__all__ = [
    "DEFAULT_TABLE_COLORS",
    "HashFunction",
    "get_hash_function",
    "maybe_replace_with_hash",
    "register_hash_function",
    "resolve_color_table",
    "style_cell",
]
