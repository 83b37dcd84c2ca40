"""Central exception hierarchy for the txgraph renderer."""
from __future__ import annotations


class TxGraphError(Exception):
    """Base exception for all custom errors raised by txgraph."""


class ConfigurationError(TxGraphError):
    """Raised when configuration loading or validation fails."""


class AddressParseError(TxGraphError):
    """Raised when a string cannot be parsed as a ledger address."""


class DecodeError(TxGraphError):
    """Raised when a caption handler or storage parser cannot decode a payload."""


class InvalidTransactionError(TxGraphError):
    """Raised when a transaction record lacks a required field."""
