"""Mermaid transaction graph renderer with storage difference tables."""

from .address import AddressMap, parse_address, str_address
from .captions import CaptionHandler, CaptionHandlerParams, DEFAULT_CAPTION_MAP, op_entries
from .codes import (
    DEX_V1_OP_CODES,
    DEX_V2_OP_CODES,
    STD_FT_OP_CODES,
    STD_NFT_OP_CODES,
    TVM_EXIT_CODES,
    parse_codes,
    to_graph_map,
)
from .flatten import UNDEFINED, compile_difference, flatten
from .graph import TransactionGraph, create_md_graph
from .options import RenderOptions, merge_options
from .styling import HashFunction, register_hash_function
from .table import MdTable
from .transaction import Transaction

__all__ = [
    "AddressMap",
    "CaptionHandler",
    "CaptionHandlerParams",
    "DEFAULT_CAPTION_MAP",
    "DEX_V1_OP_CODES",
    "DEX_V2_OP_CODES",
    "HashFunction",
    "MdTable",
    "RenderOptions",
    "STD_FT_OP_CODES",
    "STD_NFT_OP_CODES",
    "TVM_EXIT_CODES",
    "Transaction",
    "TransactionGraph",
    "UNDEFINED",
    "compile_difference",
    "create_md_graph",
    "flatten",
    "merge_options",
    "op_entries",
    "parse_address",
    "parse_codes",
    "register_hash_function",
    "str_address",
    "to_graph_map",
]
