"""
table.py

Markdown pipe-table builder with per-cell styling, column default styles,
optional titles and soft line wrapping of long cells.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from errors import ConfigurationError


LINE_BREAK = "<br>"
HIGHLIGHT_TYPES = (None, "bold", "italic")

StyleDict = Dict[str, Any]
ColumnSpec = Union[str, StyleDict]
EntrySpec = Union[str, StyleDict]


@dataclass
class MdEntry:
    text: str
    highlight: Optional[str] = None
    is_code: bool = False
    color: Optional[str] = None


@dataclass
class MdColumn(MdEntry):
    default_entry_style: Optional[StyleDict] = None


def _check_style(style: StyleDict) -> None:
    if style.get("highlight") not in HIGHLIGHT_TYPES:
        raise ConfigurationError(f"Unknown highlight type: {style.get('highlight')!r}")
    if style.get("is_code") and style.get("color"):
        raise ConfigurationError("A cell cannot be both code and colored.")


class MdTable:
    MIN_LINE_LEN = 10

    def __init__(self, *columns: ColumnSpec) -> None:
        self._columns: List[MdColumn] = []
        self._entries: List[List[MdEntry]] = []
        self._line_len: Optional[int] = None
        self._title = ""
        for column in columns:
            if isinstance(column, str):
                self._columns.append(MdColumn(text=column))
                continue
            _check_style(column)
            default_style = column.get("default_entry_style")
            if default_style:
                _check_style(default_style)
            self._columns.append(
                MdColumn(
                    text=column["text"],
                    highlight=column.get("highlight"),
                    is_code=bool(column.get("is_code")),
                    color=column.get("color"),
                    default_entry_style=default_style,
                )
            )

    def set_title(self, title: Union[str, Dict[str, Any]], info: Optional[str] = None) -> None:
        level = 1
        if isinstance(title, str):
            text = title
        else:
            level = title.get("level") or level
            text = title["text"]
        info_block = f"{info}\n\n" if info else ""
        self._title = f"{'#' * level} {text}\n\n" + info_block

    @property
    def title(self) -> str:
        return self._title

    @property
    def min_line_len(self) -> int:
        return self.MIN_LINE_LEN

    @property
    def line_len(self) -> Optional[int]:
        return self._line_len

    @line_len.setter
    def line_len(self, length: Optional[Union[int, float]]) -> None:
        self._line_len = check_length_value(length, self.MIN_LINE_LEN)

    def _split_line(self, src: str) -> str:
        if self._line_len:
            return LINE_BREAK.join(re.findall(f".{{1,{self._line_len}}}", src))
        return src

    def _merge_with_default(self, entry: EntrySpec, default_style: Optional[StyleDict]) -> MdEntry:
        if isinstance(entry, str):
            style = default_style or {}
            return MdEntry(
                text=self._split_line(entry),
                highlight=style.get("highlight"),
                is_code=bool(style.get("is_code")),
                color=style.get("color"),
            )

        _check_style(entry)
        text = self._split_line(entry["text"])
        if not default_style:
            return MdEntry(
                text=text,
                highlight=entry.get("highlight"),
                is_code=bool(entry.get("is_code")),
                color=entry.get("color"),
            )

        # Explicit None/False on the entry switches a default field off.
        if "highlight" in entry and entry["highlight"] is None:
            highlight = None
        else:
            highlight = entry.get("highlight") or default_style.get("highlight")

        if ("is_code" in entry and not entry["is_code"]) or entry.get("color"):
            is_code = False
        else:
            is_code = bool(entry.get("is_code") or default_style.get("is_code"))

        if ("color" in entry and entry["color"] is None) or entry.get("is_code"):
            color = None
        else:
            color = entry.get("color") or default_style.get("color")
        if is_code:
            color = None

        return MdEntry(text=text, highlight=highlight, is_code=is_code, color=color)

    def add_entry(self, *entry: EntrySpec) -> None:
        if len(entry) != len(self._columns):
            raise ConfigurationError(
                f"Table has {len(self._columns)} columns, entry has {len(entry)} cells."
            )
        row = [
            self._merge_with_default(cell, column.default_entry_style)
            for cell, column in zip(entry, self._columns)
        ]
        self._entries.append(row)

    @staticmethod
    def _render_style(src: MdEntry, suppress_style: bool = False) -> str:
        res = src.text
        if suppress_style:
            return res
        if src.is_code:
            res = f"`{res}`"
        if src.highlight == "italic":
            res = f"*{res}*"
        if src.highlight == "bold":
            res = f"**{res}**"
        if src.color:
            res = f'<span style="color:{src.color}">{res}</span>'
        return res

    def _render_entry(self, src: List[MdEntry], suppress_style: bool = False) -> str:
        return "| " + " | ".join(self._render_style(cell, suppress_style) for cell in src) + " |"

    def _render_entries(self, suppress_style: bool = False) -> str:
        if not self._entries:
            return "NO DATA\n"
        return "\n".join(self._render_entry(row, suppress_style) for row in self._entries) + "\n"

    def _render_header(self, suppress_style: bool = False) -> str:
        if not self._entries:
            return ""
        divider = "| " + " | ".join("---" for _ in self._columns) + " |"
        return self._render_entry(self._columns, suppress_style) + "\n" + divider + "\n"

    def _render_internal(self, suppress_style: bool = False) -> str:
        return self._title + self._render_header(suppress_style) + self._render_entries(suppress_style)

    def render(self) -> str:
        return self._render_internal()

    def __str__(self) -> str:
        return self._render_internal(suppress_style=True)

    def __repr__(self) -> str:
        return f"MdTable(columns={len(self._columns)}, rows={len(self._entries)})"

    def __len__(self) -> int:
        return len(self._entries)


def check_length_value(length: Optional[Union[int, float]], minimum: int) -> Optional[int]:
    """Validate a length option: ``None`` or a whole number not below ``minimum``."""
    if length is None:
        return None
    if isinstance(length, bool) or not isinstance(length, (int, float)):
        raise ConfigurationError(f"length must be a whole number, got {length!r}")
    if isinstance(length, float) and not length.is_integer():
        raise ConfigurationError("only whole numbers allowed")
    if length < minimum:
        raise ConfigurationError(f"min len is {minimum}")
    return int(length)


__all__ = ["LINE_BREAK", "MdColumn", "MdEntry", "MdTable", "check_length_value"]
