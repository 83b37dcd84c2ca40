"""Address parsing and canonical-string normalization."""
from __future__ import annotations

from typing import Any, Dict, Iterable, Optional, Tuple, Union

from pytoniq_core import Address

from errors import AddressParseError

AddressLike = Union[Address, str, Any]


def pad_raw_hex_address(address_hex: str) -> str:
    return ("0" * 64 + address_hex)[-64:]


def raw_number_to_address(address: Union[str, int], workchain: int = 0) -> Address:
    if isinstance(address, str):
        return parse_address(f"{workchain}:{pad_raw_hex_address(address)}")
    return parse_address(f"{workchain}:{pad_raw_hex_address(format(int(address), 'x'))}")


def parse_address(inp: str) -> Address:
    """Parse a raw (``wc:hex``) or user-friendly address string."""
    if not isinstance(inp, str):
        raise AddressParseError(f"could not parse {inp!r} as address")
    try:
        return Address(inp)
    except Exception as exc:
        raise AddressParseError(f"could not parse '{inp}' string as address") from exc


def to_canonical(address: Address) -> str:
    return address.to_str(is_user_friendly=True, is_url_safe=True, is_bounceable=True)


HOLE_ADDRESS = parse_address("EQAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAM9c")


def str_address(src: AddressLike) -> str:
    """Return the canonical string used for every address comparison and lookup."""
    if isinstance(src, str):
        return to_canonical(parse_address(src))
    if isinstance(src, Address):
        return to_canonical(src)
    inner = getattr(src, "address", None)
    if isinstance(inner, Address):
        return to_canonical(inner)
    raise AddressParseError(f"{src!r} is not address-like")


def is_hole(addr: Optional[AddressLike]) -> bool:
    if addr is None:
        return False
    return str_address(HOLE_ADDRESS) == str_address(addr)


def is_address_string(src: Any) -> bool:
    if not isinstance(src, str):
        return False
    try:
        parse_address(src)
    except AddressParseError:
        return False
    return True


class AddressMap(dict):
    """Dict keyed by canonical address strings; any address-like key is accepted."""

    def __init__(self, entries: Optional[Union[Dict[Any, Any], Iterable[Tuple[Any, Any]]]] = None) -> None:
        super().__init__()
        if entries is None:
            return
        items = entries.items() if isinstance(entries, dict) else entries
        for key, value in items:
            self[key] = value

    def __getitem__(self, key: AddressLike) -> Any:
        return super().__getitem__(str_address(key))

    def __setitem__(self, key: AddressLike, value: Any) -> None:
        super().__setitem__(str_address(key), value)

    def __delitem__(self, key: AddressLike) -> None:
        super().__delitem__(str_address(key))

    def __contains__(self, key: object) -> bool:
        try:
            return super().__contains__(str_address(key))
        except AddressParseError:
            return False

    def get(self, key: AddressLike, default: Any = None) -> Any:
        return super().get(str_address(key), default)

    def pop(self, key: AddressLike, *args: Any) -> Any:
        return super().pop(str_address(key), *args)

    def update(self, other: Any = (), **kwargs: Any) -> None:
        items = other.items() if hasattr(other, "items") else other
        for key, value in items:
            self[key] = value
        for key, value in kwargs.items():
            self[key] = value

    def copy(self) -> "AddressMap":
        return AddressMap(self.items())


__all__ = [
    "Address",
    "AddressLike",
    "AddressMap",
    "HOLE_ADDRESS",
    "is_address_string",
    "is_hole",
    "pad_raw_hex_address",
    "parse_address",
    "raw_number_to_address",
    "str_address",
    "to_canonical",
]
