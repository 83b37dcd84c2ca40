"""
graph.py

Compiles an ordered list of transactions into a mermaid flowchart followed by
per-transaction storage difference tables.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

import config
from errors import DecodeError

from .captions import CaptionHandlerParams, Captions
from .codes import EXCESSES_OP
from .flatten import UNDEFINED, DiffRow, compile_difference, display_scalar
from .formatting import flatten_display_label, from_nanos, to_hex_str
from .identity import NodeRegistry, edge_direction, node_index
from .options import RenderOptions, StorageParser, builtin_layer, merge_options
from .styling import HashFunction, get_hash_function, maybe_replace_with_hash, style_cell
from .table import MdTable, check_length_value
from .transaction import FEE_FIELDS, FEE_LABELS, Transaction

logger = logging.getLogger(__name__)

LABEL_BREAK = "<br/>"
SIMPLE_TABLE_ARROW = "**--->**"

TransactionLike = Union[Transaction, Mapping[str, Any]]


@dataclass
class _RenderState:
    """Accumulator for one render call; never shared between calls."""

    nodes: NodeRegistry
    links: List[str] = field(default_factory=list)
    styles: List[str] = field(default_factory=list)
    tables: List[str] = field(default_factory=list)
    edge_count: int = 0


@dataclass
class _Edge:
    index: int
    tx: Transaction
    from_id: str
    to_id: str
    arrow: str
    color: str
    info: List[str]


def _mermaid_graph(chart_type: str, names: str, links: str, styles: str) -> str:
    return f"```mermaid\nflowchart {chart_type}\n{names}\n{links}\n{styles}\n```\n"


def _edge_string(info: List[str], from_id: str, to_id: str, arrow: str) -> str:
    return f"\t{from_id} {arrow} |{LABEL_BREAK.join(info)}| {to_id}\n"


def _style_string(index: int, color: str) -> str:
    return f"\tlinkStyle {index} stroke:{color},color:{color}\n"


class TransactionGraph:
    """
    Mermaid flowchart builder for transaction traces.

    Options given to the constructor become this instance's defaults; each
    ``render`` call may override them again. Render state is rebuilt on every
    call, so one instance must not be used by concurrent renders.
    """

    def __init__(self, defaults: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> None:
        self._defaults: Dict[str, Any] = {**(defaults or {}), **kwargs}
        # fail fast on invalid instance options
        merge_options(builtin_layer(), self._defaults)

        table_settings = config.settings.table
        self._min_display_len = table_settings.min_display_len
        self._table_len = check_length_value(table_settings.line_len, MdTable.MIN_LINE_LEN)
        self._max_display_len = check_length_value(table_settings.max_display_len, self._min_display_len)
        self._hash_function = get_hash_function(table_settings.hash_name)

    @property
    def defaults(self) -> Dict[str, Any]:
        return dict(self._defaults)

    @property
    def table_len(self) -> Optional[int]:
        return self._table_len

    @table_len.setter
    def table_len(self, length: Optional[int]) -> None:
        self._table_len = check_length_value(length, MdTable.MIN_LINE_LEN)

    @property
    def min_display_len(self) -> int:
        return self._min_display_len

    @property
    def max_display_len(self) -> Optional[int]:
        return self._max_display_len

    @max_display_len.setter
    def max_display_len(self, length: Optional[int]) -> None:
        self._max_display_len = check_length_value(length, self._min_display_len)

    @property
    def hash_function(self) -> HashFunction:
        return self._hash_function

    @hash_function.setter
    def hash_function(self, src: Union[str, HashFunction]) -> None:
        self._hash_function = get_hash_function(src) if isinstance(src, str) else src

    def resolve_options(self, overrides: Optional[Mapping[str, Any]] = None) -> RenderOptions:
        return merge_options(builtin_layer(), self._defaults, overrides)

    def render(
        self,
        transactions: Iterable[TransactionLike],
        name: Optional[str] = None,
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """Render ``transactions``; when ``name`` is given also write ``<folder>/<name>.md``."""
        options = self.resolve_options(overrides)
        state = _RenderState(
            nodes=NodeRegistry(options.direction_type, options.display_label, options.bracket_for)
        )

        for raw_tx in transactions:
            tx = raw_tx if isinstance(raw_tx, Transaction) else Transaction.from_dict(raw_tx)
            if tx.sender is None and not options.show_origin:
                continue
            self._add_link(options, state, tx, state.edge_count)
            state.edge_count += 1

        graph = self._compile(options, state)
        logger.info("Rendered %d edges between %d nodes", state.edge_count, len(state.nodes))
        if name is not None:
            out_file = os.path.join(options.folder, f"{name}.md")
            out_dir = os.path.dirname(out_file)
            if out_dir:
                os.makedirs(out_dir, exist_ok=True)
            with open(out_file, "w", encoding="utf-8") as handle:
                handle.write(graph)
            logger.info("Transaction graph written to %s", out_file)
        return graph

    def _edge_info(self, options: RenderOptions, tx: Transaction, index: int) -> List[str]:
        info: List[str] = []

        def add_info(label: str, data: Any) -> None:
            info.append(f"{label}: {display_scalar(data)}")

        hide_ok = options.hide_ok_values

        if options.display_index:
            add_info("index", index)
        if options.display_value and tx.value is not None:
            add_info("value", from_nanos(tx.value))
        if options.display_fees and tx.total_fees is not None:
            if options.fee_details:
                selected = FEE_FIELDS
                if isinstance(options.fee_details, dict):
                    selected = tuple(name for name in FEE_FIELDS if options.fee_details.get(name))
                add_info("totalFee", from_nanos(tx.total_fees))
                for fee_name in selected:
                    fee = tx.fee(fee_name)
                    if fee:
                        add_info(FEE_LABELS[fee_name], from_nanos(fee))
            else:
                add_info("fees", from_nanos(tx.total_fees))
        if options.display_op and tx.op is not None:
            add_info("op", (options.op_map or {}).get(tx.op) or to_hex_str(tx.op))
        if options.display_details and tx.op is not None and tx.body is not None:
            try:
                captions = self._decode_captions(options, tx)
            except DecodeError as exc:
                logger.warning("%s", exc)
                captions = {}
            for key, value in captions.items():
                add_info(key, value)
        if options.display_exit_code and tx.exit_code is not None and (not hide_ok or tx.exit_code):
            add_info("exit", self._error_code(options, tx.exit_code))
        if (
            options.display_action_result
            and tx.action_result_code is not None
            and (not hide_ok or tx.action_result_code)
        ):
            add_info("action", self._error_code(options, tx.action_result_code))
        if options.display_deploy and (not hide_ok or tx.deploy):
            add_info("deploy", tx.deploy)
        if options.display_aborted and tx.aborted is not None and (not hide_ok or tx.aborted):
            add_info("abort", tx.aborted)
        if options.display_destroyed and tx.destroyed is not None and (not hide_ok or tx.destroyed):
            add_info("destroy", tx.destroyed)
        if options.display_success and tx.success is not None and (not hide_ok or tx.success):
            add_info("success", tx.success)
        return info

    @staticmethod
    def _error_code(options: RenderOptions, code: int) -> Any:
        name = (options.err_map or {}).get(code)
        return name if name is not None else code

    @staticmethod
    def _decode_captions(options: RenderOptions, tx: Transaction) -> Captions:
        handler = options.captions_map.get(tx.op)
        if handler is None:
            return {}
        params = CaptionHandlerParams(
            body=tx.body,
            op_map=options.op_map,
            err_map=options.err_map,
            hide_ok_values=options.hide_ok_values,
        )
        try:
            return dict(handler(params))
        except Exception as exc:
            raise DecodeError(f"Caption handler for op {to_hex_str(tx.op)} failed: {exc}") from exc

    def _add_link(self, options: RenderOptions, state: _RenderState, tx: Transaction, index: int) -> None:
        from_id = state.nodes.assign(tx.sender)
        to_id = state.nodes.assign(tx.to, is_destination=True)
        arrow, forward = edge_direction(from_id, to_id)
        color = options.color_forward if forward else options.color_backward
        if tx.op == EXCESSES_OP:
            color = options.color_excess

        info = self._edge_info(options, tx, index)
        edge = _Edge(index=index, tx=tx, from_id=from_id, to_id=to_id, arrow=arrow, color=color, info=info)

        if (
            options.display_storage
            and (tx.old_storage is not None or tx.new_storage is not None)
            and tx.sender is not None
        ):
            parser = options.storage_map.get(tx.to)
            if parser is not None:
                try:
                    old_data, new_data = self._parse_storages(parser, tx.old_storage, tx.new_storage)
                except DecodeError as exc:
                    logger.warning("Skipping storage table for transaction %d: %s", index, exc)
                else:
                    rows = compile_difference(old_data, new_data, options.storage_divider, options.display_storage)
                    self._add_table(options, state, edge, self._difference_table(options, rows))

        state.styles.append(_style_string(index, color))
        state.links.append(_edge_string(info, from_id, to_id, arrow))

    @staticmethod
    def _parse_storages(parser: StorageParser, old_storage: Any, new_storage: Any) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        try:
            old_data = dict(parser(old_storage)) if old_storage is not None else {}
            new_data = dict(parser(new_storage)) if new_storage is not None else {}
        except Exception as exc:
            raise DecodeError(f"storage parser failed: {exc}") from exc
        if old_storage is not None and new_storage is None:
            new_data = {key: UNDEFINED for key in old_data}
        if new_storage is not None and old_storage is None:
            old_data = {key: UNDEFINED for key in new_data}
        return old_data, new_data

    def _difference_table(self, options: RenderOptions, rows: Dict[str, DiffRow]) -> MdTable:
        table = MdTable("Name", "Before", "After", "Diff")
        table.line_len = self._table_len
        for key, (before, after, delta) in rows.items():
            table.add_entry(
                {"text": key, "is_code": True},
                style_cell(self._shorten(before), options.color_table, options.display_label),
                style_cell(self._shorten(after), options.color_table, options.display_label),
                style_cell(delta, options.color_table, options.display_label, special="diff"),
            )
        return table

    def _shorten(self, src: str) -> str:
        return maybe_replace_with_hash(src, self._max_display_len, self._hash_function)

    def _add_table(self, options: RenderOptions, state: _RenderState, edge: _Edge, table: MdTable) -> None:
        info = ""
        if options.table_info == "simple":
            from_label = flatten_display_label(state.nodes.label(edge.tx.sender))
            to_label = flatten_display_label(state.nodes.label(edge.tx.to))
            info = f"`{from_label}` {SIMPLE_TABLE_ARROW} `{to_label}`"
        elif options.table_info == "mermaid":
            names = state.nodes.declaration(edge.tx.sender, node_index(edge.from_id)) + state.nodes.declaration(
                edge.tx.to, node_index(edge.to_id)
            )
            info = _mermaid_graph(
                "LR",
                names,
                _edge_string(edge.info, edge.from_id, edge.to_id, edge.arrow),
                _style_string(0, edge.color),
            )
        table.set_title({"text": f"Index: {edge.index}", "level": 2}, info)
        state.tables.append(table.render() + "\n")

    @staticmethod
    def _compile(options: RenderOptions, state: _RenderState) -> str:
        tables = ""
        if state.tables:
            mode = "difference" if options.display_storage == "diff" else "full"
            tables = f"# Storage Tables ({mode})\n\n" + "".join(state.tables)
        styles = "" if options.disable_styles else "".join(state.styles)
        return _mermaid_graph(options.chart_type, state.nodes.declarations, "".join(state.links), styles) + tables


def create_md_graph(
    transactions: Iterable[TransactionLike],
    output: str = "build/graph.md",
    display_tokens: Optional[bool] = None,
    **options: Any,
) -> str:
    """One-shot helper: render ``transactions`` into the markdown file ``output``."""
    folder = os.path.dirname(output) or "."
    base = os.path.basename(output)
    if base.endswith(".md"):
        base = base[: -len(".md")]
    if display_tokens is not None:
        options["display_details"] = display_tokens
    graph = TransactionGraph(folder=folder, **options)
    return graph.render(transactions, base)


__all__ = ["LABEL_BREAK", "SIMPLE_TABLE_ARROW", "TransactionGraph", "create_md_graph"]
