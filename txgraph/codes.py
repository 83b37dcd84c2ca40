"""Operation and exit code tables used to label graph edges."""
from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, Mapping, Union

from .formatting import to_snake_case

CodesMap = Dict[int, str]

EXCESSES_OP = 0xD53276DB

STD_FT_OP_CODES: Dict[str, int] = {
    "transfer": 0x0F8A7EA5,
    "internalTransfer": 0x178D4519,
    "transferNotification": 0x7362D09C,
    "burn": 0x595F07BC,
    "burnNotification": 0x7BDD97DE,
    "provideWalletAddress": 0x2C76B973,
    "takeWalletAddress": 0xD1735400,
    "excesses": EXCESSES_OP,
}

STD_NFT_OP_CODES: Dict[str, int] = {
    "nftTransfer": 0x5FCC3D14,
    "ownershipAssigned": 0x05138D91,
    "getStaticData": 0x2FCB26A2,
    "reportStaticData": 0x8B771735,
    "getRoyaltyParams": 0x693D3950,
    "reportRoyaltyParams": 0xA8CB00AD,
    "excesses": EXCESSES_OP,
}

DEX_V1_OP_CODES: Dict[str, int] = {
    "swap": 0x25938561,
    "payTo": 0xF93BB43F,
}

DEX_V2_OP_CODES: Dict[str, int] = {
    "swapV2": 0x6664DE2A,
    "payToV2": 0x657B54F5,
    "depositRefFeeV2": 0x0490F09B,
}

TVM_EXIT_CODES: Dict[str, int] = {
    "stackUnderflow": 2,
    "stackOverflow": 3,
    "integerOverflow": 4,
    "integerOutOfRange": 5,
    "invalidOpcode": 6,
    "typeCheckError": 7,
    "cellOverflow": 8,
    "cellUnderflow": 9,
    "dictionaryError": 10,
    "unknownError": 11,
    "fatalError": 12,
    "outOfGas": 13,
    "virtualizationError": 14,
    "actionListInvalid": 32,
    "actionListTooLong": 33,
    "actionInvalid": 34,
    "invalidSrcAddress": 35,
    "invalidDstAddress": 36,
    "notEnoughTon": 37,
    "notEnoughExtraCurrencies": 38,
    "notEnoughFunds": 40,
    "limitsExceeded": 43,
}

_CONST_RE = re.compile(
    r"const\s+(?:int\s+)?(?P<name>[A-Za-z_][\w:]*)\s*=\s*(?P<value>-?0x[0-9a-fA-F]+|-?\d+)\s*;"
)


def to_graph_map(mapping: Mapping[str, int]) -> CodesMap:
    """Invert ``{camelName: code}`` into ``{code: snake_name}`` for edge labels."""
    return {code: to_snake_case(name) for name, code in mapping.items()}


def parse_codes_from_str(src: str) -> Dict[str, int]:
    """
    Read FunC-style constant declarations into ``{name: code}``.

    ``const int op::transfer = 0xf8a7ea5;`` yields ``{"transfer": 0xf8a7ea5}``;
    the namespace before ``::`` is dropped.
    """
    codes: Dict[str, int] = {}
    for match in _CONST_RE.finditer(src):
        name = match.group("name").split("::")[-1]
        raw = match.group("value")
        codes[name] = int(raw, 16) if "x" in raw.lower() else int(raw, 10)
    return codes


def parse_codes(path: Union[str, Path]) -> Dict[str, int]:
    return parse_codes_from_str(Path(path).read_text(encoding="utf-8"))


DEFAULT_CODE_MAP: CodesMap = to_graph_map(
    {
        **STD_FT_OP_CODES,
        **STD_NFT_OP_CODES,
        **TVM_EXIT_CODES,
        **DEX_V1_OP_CODES,
        **DEX_V2_OP_CODES,
    }
)


__all__ = [
    "CodesMap",
    "DEFAULT_CODE_MAP",
    "DEX_V1_OP_CODES",
    "DEX_V2_OP_CODES",
    "EXCESSES_OP",
    "STD_FT_OP_CODES",
    "STD_NFT_OP_CODES",
    "TVM_EXIT_CODES",
    "parse_codes",
    "parse_codes_from_str",
    "to_graph_map",
]
