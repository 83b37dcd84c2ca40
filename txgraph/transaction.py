"""
transaction.py

Immutable transaction record consumed by the graph builder.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from pytoniq_core import Address, Cell

from errors import DecodeError, InvalidTransactionError

from .address import parse_address

FEE_FIELDS = ("compute_fee", "storage_fee", "total_fwd_fee", "in_forward_fee", "total_action_fee")

# edge label names
FEE_LABELS: Dict[str, str] = {
    "compute_fee": "computeFee",
    "storage_fee": "storageFee",
    "total_fwd_fee": "totalFwdFee",
    "in_forward_fee": "inForwardFee",
    "total_action_fee": "totalActionFee",
}

# camelCase names used by sandbox transaction dumps
_KEY_ALIASES: Dict[str, str] = {
    "from": "sender",
    "totalFees": "total_fees",
    "exitCode": "exit_code",
    "actionResultCode": "action_result_code",
    "oldStorage": "old_storage",
    "newStorage": "new_storage",
    "computeFee": "compute_fee",
    "storageFee": "storage_fee",
    "totalFwdFee": "total_fwd_fee",
    "inForwardFee": "in_forward_fee",
    "totalActionFee": "total_action_fee",
}


def _as_address(value: Any) -> Optional[Address]:
    if value is None or isinstance(value, Address):
        return value
    return parse_address(str(value))


def _as_cell(value: Any, field_name: str) -> Optional[Cell]:
    if value is None or isinstance(value, Cell):
        return value
    try:
        if isinstance(value, str):
            return Cell.one_from_boc(bytes.fromhex(value))
        return Cell.one_from_boc(bytes(value))
    except Exception as exc:
        raise DecodeError(f"Invalid BOC for {field_name}") from exc


def _as_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    return int(value)


@dataclass(frozen=True)
class Transaction:
    to: Address
    sender: Optional[Address] = None
    value: Optional[int] = None
    total_fees: Optional[int] = None
    op: Optional[int] = None
    body: Optional[Cell] = None
    exit_code: Optional[int] = None
    action_result_code: Optional[int] = None
    deploy: bool = False
    aborted: Optional[bool] = None
    destroyed: Optional[bool] = None
    success: Optional[bool] = None
    old_storage: Optional[Cell] = None
    new_storage: Optional[Cell] = None
    compute_fee: Optional[int] = None
    storage_fee: Optional[int] = None
    total_fwd_fee: Optional[int] = None
    in_forward_fee: Optional[int] = None
    total_action_fee: Optional[int] = None

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Transaction":
        data = {_KEY_ALIASES.get(key, key): value for key, value in payload.items()}
        if data.get("to") is None:
            raise InvalidTransactionError("Transaction destination 'to' is required")
        return cls(
            to=_as_address(data["to"]),
            sender=_as_address(data.get("sender")),
            value=_as_int(data.get("value")),
            total_fees=_as_int(data.get("total_fees")),
            op=_as_int(data.get("op")),
            body=_as_cell(data.get("body"), "body"),
            exit_code=_as_int(data.get("exit_code")),
            action_result_code=_as_int(data.get("action_result_code")),
            deploy=bool(data.get("deploy", False)),
            aborted=data.get("aborted"),
            destroyed=data.get("destroyed"),
            success=data.get("success"),
            old_storage=_as_cell(data.get("old_storage"), "old_storage"),
            new_storage=_as_cell(data.get("new_storage"), "new_storage"),
            **{name: _as_int(data.get(name)) for name in FEE_FIELDS},
        )

    def fee(self, name: str) -> Optional[int]:
        return getattr(self, name)


__all__ = ["FEE_FIELDS", "FEE_LABELS", "Transaction"]
