"""Scalar text helpers shared by the graph labels and the storage tables."""
from __future__ import annotations

import re
from typing import Optional, Union

_BN_STR_RE = re.compile(r"^-?\d+$")
_NUMBER_STR_RE = re.compile(r"^-?\d+(\.\d+)?$")
_LABEL_BREAK_RE = re.compile(r"<br/>|\n|<br>")
_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def from_nanos(value: Union[int, str], decimals: int = 9) -> str:
    """Render an integer amount of nano-units as a decimal string without trailing zeros."""
    amount = int(value)
    sign = "-" if amount < 0 else ""
    amount = abs(amount)
    if decimals <= 0:
        return f"{sign}{amount}"
    whole, frac = divmod(amount, 10 ** decimals)
    frac_str = str(frac).rjust(decimals, "0").rstrip("0")
    if frac_str:
        return f"{sign}{whole}.{frac_str}"
    return f"{sign}{whole}"


def pretty_fees(fee: Optional[int]) -> Optional[str]:
    if fee is None:
        return None
    return f"{from_nanos(fee, 2)}%"


def pretty_number(src: Union[int, float, str]) -> str:
    """Group integer digits by three with ``_``; the decimal part is left as is."""
    parts = str(src).split(".")
    sign = "-" if "-" in parts[0] else ""
    digits = parts[0].replace("-", "")
    groups = []
    while len(digits) > 3:
        groups.insert(0, digits[-3:])
        digits = digits[:-3]
    groups.insert(0, digits)
    parts[0] = "_".join(groups)
    return sign + ".".join(parts)


def to_hex_str(code: int) -> str:
    return f"0x{code:x}"


def to_snake_case(name: str) -> str:
    return _CAMEL_BOUNDARY_RE.sub("_", name).lower()


def is_bn_str(src: object) -> bool:
    return isinstance(src, str) and bool(_BN_STR_RE.match(src))


def is_number_str(src: object) -> bool:
    return isinstance(src, str) and bool(_NUMBER_STR_RE.match(src))


def flatten_display_label(src: str) -> str:
    return " ".join(_LABEL_BREAK_RE.split(src))
