"""
Mintable/burnable TRC-20 contract artifact.

The ABI is fixed. The bytecode is compiled outside this project (Solidity
0.8.20, optimizer on, 200 runs) and handed in through TRC20_BYTECODE or a
file at TRC20_BYTECODE_PATH, hex without the 0x prefix.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from tronconsole.config import settings
from tronconsole.core.errors import ContractArtifactError

CONTRACT_NAME = "TRC20Token"

CONSTRUCTOR_TYPES = ["string", "string", "uint8", "uint256"]

_HEX_RE = re.compile(r"^[0-9a-fA-F]+$")


def _fn(name: str, inputs: List[Dict[str, str]], outputs: List[Dict[str, str]], mutability: str) -> Dict[str, Any]:
    return {
        "inputs": inputs,
        "name": name,
        "outputs": outputs,
        "stateMutability": mutability,
        "type": "function",
    }


def _arg(name: str, type_: str) -> Dict[str, str]:
    return {"internalType": type_, "name": name, "type": type_}


def _event(name: str, inputs: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"anonymous": False, "inputs": inputs, "name": name, "type": "event"}


def _indexed(name: str, type_: str, indexed: bool) -> Dict[str, Any]:
    return {"indexed": indexed, "internalType": type_, "name": name, "type": type_}


TRC20_ABI: List[Dict[str, Any]] = [
    {
        "inputs": [
            _arg("_name", "string"),
            _arg("_symbol", "string"),
            _arg("_decimals", "uint8"),
            _arg("_initialSupply", "uint256"),
        ],
        "stateMutability": "nonpayable",
        "type": "constructor",
    },
    _event("Approval", [
        _indexed("owner", "address", True),
        _indexed("spender", "address", True),
        _indexed("value", "uint256", False),
    ]),
    _event("Burn", [_indexed("from", "address", True), _indexed("amount", "uint256", False)]),
    _event("Mint", [_indexed("to", "address", True), _indexed("amount", "uint256", False)]),
    _event("Transfer", [
        _indexed("from", "address", True),
        _indexed("to", "address", True),
        _indexed("value", "uint256", False),
    ]),
    _fn("name", [], [_arg("", "string")], "view"),
    _fn("symbol", [], [_arg("", "string")], "view"),
    _fn("decimals", [], [_arg("", "uint8")], "view"),
    _fn("totalSupply", [], [_arg("", "uint256")], "view"),
    _fn("owner", [], [_arg("", "address")], "view"),
    _fn("balanceOf", [_arg("", "address")], [_arg("", "uint256")], "view"),
    _fn("allowance", [_arg("", "address"), _arg("", "address")], [_arg("", "uint256")], "view"),
    _fn("transfer", [_arg("_to", "address"), _arg("_value", "uint256")], [_arg("", "bool")], "nonpayable"),
    _fn("approve", [_arg("_spender", "address"), _arg("_value", "uint256")], [_arg("", "bool")], "nonpayable"),
    _fn(
        "transferFrom",
        [_arg("_from", "address"), _arg("_to", "address"), _arg("_value", "uint256")],
        [_arg("", "bool")],
        "nonpayable",
    ),
    _fn("mint", [_arg("_amount", "uint256")], [_arg("", "bool")], "nonpayable"),
    _fn("burn", [_arg("_amount", "uint256")], [_arg("", "bool")], "nonpayable"),
]


def abi_json() -> str:
    return json.dumps(TRC20_ABI, separators=(",", ":"))


def load_bytecode(inline: Optional[str] = None, path: Optional[str] = None) -> str:
    code = (inline if inline is not None else settings.TRC20_BYTECODE).strip()
    if not code:
        p = Path(path if path is not None else settings.TRC20_BYTECODE_PATH)
        if p.is_file():
            code = p.read_text(encoding="utf-8").strip()

    if code.startswith(("0x", "0X")):
        code = code[2:]

    if not code:
        raise ContractArtifactError(
            "Contract bytecode not yet compiled. Compile TRC20Token.sol (Solidity 0.8.20, "
            "optimizer enabled, 200 runs) and set TRC20_BYTECODE or TRC20_BYTECODE_PATH."
        )
    if not _HEX_RE.match(code) or len(code) % 2:
        raise ContractArtifactError("Contract bytecode is not valid hex")
    return code
