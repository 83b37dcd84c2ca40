"""
flatten.py

Turns nested storage structures into flat ``dotted > path`` records and
computes before/after differences between two such records.
Cyclic structures are not detected; callers must pass finite trees.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Dict, Optional, Tuple, Union

from pytoniq_core import Address

from .address import to_canonical


class _Undefined:
    """Marker for a value that does not exist on one side of a comparison."""

    _instance: Optional["_Undefined"] = None

    def __new__(cls) -> "_Undefined":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __copy__(self) -> "_Undefined":
        return self

    def __deepcopy__(self, memo: Dict[int, Any]) -> "_Undefined":
        return self


UNDEFINED = _Undefined()

FlattenedValue = Union[bool, str, int, float, None, _Undefined]
FlattenedObject = Dict[str, FlattenedValue]
DiffRow = Tuple[str, str, str]

_SCALAR_TYPES = (bool, str, int, float, type(None), _Undefined)


def _key_str(key: Any) -> str:
    if isinstance(key, Address):
        return to_canonical(key)
    return str(key)


def _merge_prefix(old: Optional[str], src: Any, divider: str) -> str:
    return f"{old}{divider}{_key_str(src)}" if old else _key_str(src)


def _collect(target: FlattenedObject, key: str, value: Any) -> None:
    if isinstance(value, dict):
        target.update(value)
    else:
        target[key] = value


def flatten_array(src: Union[list, tuple], divider: str, prefix: Optional[str] = None) -> FlattenedObject:
    flattened: FlattenedObject = {}
    for index, item in enumerate(src):
        key = _merge_prefix(prefix, index, divider)
        _collect(flattened, key, flatten_value(item, divider, key))
    return flattened


def flatten_map(src: Dict[Any, Any], divider: str, prefix: Optional[str] = None) -> FlattenedObject:
    flattened: FlattenedObject = {}
    for map_key, item in src.items():
        key = _merge_prefix(prefix, map_key, divider)
        _collect(flattened, key, flatten_value(item, divider, key))
    return flattened


def flatten_object(src: Any, divider: str, prefix: Optional[str] = None) -> FlattenedObject:
    if isinstance(src, dict):
        return flatten_map(src, divider, prefix)
    if dataclasses.is_dataclass(src) and not isinstance(src, type):
        fields = {field.name: getattr(src, field.name) for field in dataclasses.fields(src)}
        return flatten_map(fields, divider, prefix)
    return flatten_map(vars(src), divider, prefix)


def flatten_value(src: Any, divider: str, prefix: Optional[str] = None) -> Union[FlattenedObject, FlattenedValue]:
    """Flatten ``src``; scalars come back unchanged, composites as a flat dict."""
    if isinstance(src, Address):
        return to_canonical(src)
    if isinstance(src, _SCALAR_TYPES):
        return src
    if isinstance(src, (bytes, bytearray)):
        return bytes(src).hex()
    if isinstance(src, (list, tuple)):
        return flatten_array(src, divider, prefix)
    if isinstance(src, dict):
        return flatten_map(src, divider, prefix)
    if dataclasses.is_dataclass(src) and not isinstance(src, type):
        return flatten_object(src, divider, prefix)
    if hasattr(src, "__dict__"):
        return flatten_object(src, divider, prefix)
    return str(src)


def flatten(src: Any, divider: str, prefix: Optional[str] = None) -> FlattenedObject:
    """Always return a flat record; a bare scalar needs a prefix to be kept."""
    flattened = flatten_value(src, divider, prefix)
    if isinstance(flattened, dict):
        return flattened
    return {prefix: flattened} if prefix else {}


def display_scalar(src: Any) -> str:
    if src is UNDEFINED:
        return "undef"
    if src is None:
        return "null"
    if isinstance(src, bool):
        return "true" if src else "false"
    return str(src)


def _is_numeric(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _same(old: Any, new: Any) -> bool:
    return type(old) is type(new) and old == new


def compile_difference(
    before: Any,
    after: Any,
    divider: str,
    mode: str = "diff",
) -> Dict[str, DiffRow]:
    """
    Flatten both sides and return ``{key: (before, after, delta)}`` display rows.

    Rows are kept only for differing values unless ``mode`` is ``"full"``.
    The delta is computed when both sides are integers and differ,
    otherwise it is ``-``.
    """
    flat_old = flatten(before, divider)
    flat_new = flatten(after, divider)
    result: Dict[str, DiffRow] = {}
    for key in {**flat_old, **flat_new}:
        old_val = flat_old.get(key, UNDEFINED)
        new_val = flat_new.get(key, UNDEFINED)
        unchanged = _same(old_val, new_val)
        if unchanged and mode != "full":
            continue

        delta: Any = "-"
        if not unchanged and _is_numeric(old_val) and type(old_val) is type(new_val):
            delta = new_val - old_val
            if delta > 0:
                delta = f"+{delta}"
        result[key] = (display_scalar(old_val), display_scalar(new_val), display_scalar(delta))
    return result


__all__ = [
    "UNDEFINED",
    "FlattenedObject",
    "FlattenedValue",
    "compile_difference",
    "display_scalar",
    "flatten",
    "flatten_array",
    "flatten_map",
    "flatten_object",
    "flatten_value",
]
