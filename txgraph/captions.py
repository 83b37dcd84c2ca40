"""
captions.py

Per-opcode payload decoders ("caption handlers"). A handler receives the
message body cell and returns the named fields to print on the edge label.
Handlers may raise on malformed payloads; the graph builder contains that.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

from pytoniq_core import Cell

from errors import ConfigurationError

from .codes import DEX_V1_OP_CODES, DEX_V2_OP_CODES, STD_FT_OP_CODES, CodesMap
from .formatting import from_nanos, to_hex_str

Captions = Dict[str, Any]


@dataclass
class CaptionHandlerParams:
    body: Cell
    op_map: Optional[CodesMap] = None
    err_map: Optional[CodesMap] = None
    hide_ok_values: bool = True


CaptionHandler = Callable[[CaptionHandlerParams], Captions]


def op_entries(mapping: Mapping[Any, CaptionHandler]) -> Dict[int, CaptionHandler]:
    """Build an int-keyed captions map; keys may be ints or numeric strings."""
    entries: Dict[int, CaptionHandler] = {}
    for key, handler in mapping.items():
        try:
            code = key if isinstance(key, int) else int(str(key), 0)
        except ValueError:
            raise ConfigurationError(f"only number keys are allowed in a captions map, got {key!r}") from None
        entries[code] = handler
    return entries


def _code_name(params: CaptionHandlerParams, code: int) -> str:
    return (params.op_map or {}).get(code) or to_hex_str(code)


def _skip_header(params: CaptionHandlerParams):
    slice_ = params.body.begin_parse()
    slice_.load_uint(32)  # op
    slice_.load_uint(64)  # query id
    return slice_


def internal_transfer_caption(params: CaptionHandlerParams) -> Captions:
    slice_ = _skip_header(params)
    return {"amount": from_nanos(slice_.load_coins())}


def transfer_caption(params: CaptionHandlerParams) -> Captions:
    res: Captions = {}
    slice_ = _skip_header(params)
    amount = slice_.load_coins()
    slice_.load_address()  # destination
    slice_.load_address()  # response destination
    slice_.load_uint(1)  # custom payload flag
    forward_amount = slice_.load_coins()
    if not params.hide_ok_values or forward_amount:
        res["fwdTon"] = from_nanos(forward_amount)
    res["amount"] = from_nanos(amount)
    try:
        slice_.load_uint(1)
        transfer_code = slice_.load_uint(32)
    except Exception:
        # forward payload is optional
        return res
    name = (params.op_map or {}).get(transfer_code) or (params.err_map or {}).get(transfer_code)
    res["txCode"] = name or to_hex_str(transfer_code)
    return res


def transfer_notification_caption(params: CaptionHandlerParams) -> Captions:
    res: Captions = {}
    slice_ = _skip_header(params)
    res["amount"] = from_nanos(slice_.load_coins())
    try:
        slice_.load_address()  # original sender
        if slice_.load_uint(1):
            forward_op = slice_.load_ref().begin_parse().load_uint(32)
        else:
            forward_op = slice_.load_uint(32)
    except Exception:
        # truncated after the amount
        return res
    if forward_op:
        res["fwdOp"] = _code_name(params, forward_op)
    return res


def swap_caption(params: CaptionHandlerParams) -> Captions:
    slice_ = _skip_header(params)
    slice_.load_address()  # token wallet
    amount = slice_.load_coins() + slice_.load_coins()
    return {"amount": from_nanos(amount)}


def _pay_to_caption(address_count: int) -> CaptionHandler:
    def handler(params: CaptionHandlerParams) -> Captions:
        slice_ = _skip_header(params)
        for _ in range(address_count):
            slice_.load_address()
        return {"pay": _code_name(params, slice_.load_uint(32))}

    return handler


def deposit_ref_fee_caption(params: CaptionHandlerParams) -> Captions:
    slice_ = _skip_header(params)
    return {"amount": from_nanos(slice_.load_coins())}


DEFAULT_CAPTION_MAP: Dict[int, CaptionHandler] = op_entries(
    {
        STD_FT_OP_CODES["internalTransfer"]: internal_transfer_caption,
        STD_FT_OP_CODES["transfer"]: transfer_caption,
        STD_FT_OP_CODES["transferNotification"]: transfer_notification_caption,
        DEX_V1_OP_CODES["swap"]: swap_caption,
        DEX_V2_OP_CODES["swapV2"]: swap_caption,
        DEX_V1_OP_CODES["payTo"]: _pay_to_caption(2),
        DEX_V2_OP_CODES["payToV2"]: _pay_to_caption(3),
        DEX_V2_OP_CODES["depositRefFeeV2"]: deposit_ref_fee_caption,
    }
)


__all__ = [
    "CaptionHandler",
    "CaptionHandlerParams",
    "Captions",
    "DEFAULT_CAPTION_MAP",
    "deposit_ref_fee_caption",
    "internal_transfer_caption",
    "op_entries",
    "swap_caption",
    "transfer_caption",
    "transfer_notification_caption",
]
