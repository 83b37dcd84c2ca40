"""
identity.py

Assigns short mermaid node ids (``A0``, ``A1``, ...) to participant
addresses and builds their node declarations.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Tuple

from .address import str_address


def _bracket(template: str) -> Callable[[Any], str]:
    return lambda label: template.format(label=label)


BRACKET_TYPES: Dict[str, Callable[[Any], str]] = {
    "square": _bracket('["{label}"]'),
    "diamond": _bracket('{{"{label}"}}'),
    "fillet": _bracket('("{label}")'),
    "rounded": _bracket('(["{label}"])'),
    "circle": _bracket('(("{label}"))'),
    "circle2": _bracket('((("{label}")))'),
    "hex": _bracket('{{{{"{label}"}}}}'),
    "sub": _bracket('[["{label}"]]'),
    "flag": _bracket('>"{label}"]'),
    "db": _bracket('[("{label}")]'),
    "parallelR": _bracket('[/"{label}"/]'),
    "parallelL": _bracket('[\\"{label}"\\]'),
    "trapezoidT": _bracket('[/"{label}"\\]'),
    "trapezoidB": _bracket('[\\"{label}"/]'),
}
DEFAULT_BRACKET = "square"


class _ExternalOrigin:
    """Synthetic sender for externally originated transactions."""

    key = "<external>"
    label = "external"

    def __repr__(self) -> str:
        return "EXTERNAL"


EXTERNAL = _ExternalOrigin()


def node_key(address: Any) -> str:
    if address is None or address is EXTERNAL:
        return EXTERNAL.key
    return str_address(address)


def node_index(node_id: str) -> int:
    return int(node_id[1:])


def edge_direction(from_id: str, to_id: str) -> Tuple[str, bool]:
    """Solid arrow for edges pointing at a same-or-later node, dashed otherwise."""
    forward = node_index(from_id) <= node_index(to_id)
    return ("-->" if forward else "-.->"), forward


class NodeRegistry:
    """
    Per-render mapping from canonical address to node id.

    Ids are allocated in first-seen order. With ``unidirectional`` direction
    every destination gets a fresh node so request/response pairs are drawn
    as separate participants.
    """

    def __init__(
        self,
        direction_type: str = "bidirectional",
        address_label: Optional[Callable[[Any], str]] = None,
        bracket_for: Optional[Callable[[Any], Optional[str]]] = None,
    ) -> None:
        self.direction_type = direction_type
        self._address_label = address_label or str_address
        self._bracket_for = bracket_for or (lambda _address: None)
        self._mapping: Dict[str, str] = {}
        self._declarations: List[str] = []
        self._count = 0

    @property
    def mapping(self) -> Dict[str, str]:
        return dict(self._mapping)

    @property
    def declarations(self) -> str:
        return "".join(self._declarations)

    def __len__(self) -> int:
        return self._count

    def assign(self, address: Any, is_destination: bool = False) -> str:
        key = node_key(address)
        if key not in self._mapping or (is_destination and self.direction_type == "unidirectional"):
            index = self._count
            self._count += 1
            self._mapping[key] = f"A{index}"
            self._declarations.append(self.declaration(address, index))
        return self._mapping[key]

    def label(self, address: Any) -> str:
        if address is None or address is EXTERNAL:
            return EXTERNAL.label
        return self._address_label(address)

    def declaration(self, address: Any, index: int) -> str:
        bracket = None
        if address is not None and address is not EXTERNAL:
            bracket = self._bracket_for(address)
        shape = BRACKET_TYPES[bracket or DEFAULT_BRACKET]
        return f"\tA{index}{shape(self.label(address))}\n"


__all__ = [
    "BRACKET_TYPES",
    "DEFAULT_BRACKET",
    "EXTERNAL",
    "NodeRegistry",
    "edge_direction",
    "node_index",
    "node_key",
]
