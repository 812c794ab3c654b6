from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

import pytest

TRANSFER_SELECTOR = "0xa9059cbb"
BALANCE_OF_SELECTOR = "0x70a08231"
APPROVE_SELECTOR = "0x095ea7b3"
TRANSFER_FROM_SELECTOR = "0x23b872dd"
TOTAL_SUPPLY_SELECTOR = "0x18160ddd"
MINT_SELECTOR = "0x40c10f19"

TOKEN = "0x6b175474e89094c44da98b954eedeac495271d0f"
HOLDER = "0x1111111111111111111111111111111111111111"
RECIPIENT = "0x2222222222222222222222222222222222222222"


def _function(name: str, inputs: List[str], mutability: str | None = "nonpayable") -> Dict[str, Any]:
    item: Dict[str, Any] = {
        "type": "function",
        "name": name,
        "inputs": [{"name": f"arg{i}", "type": t} for i, t in enumerate(inputs)],
        "outputs": [],
    }
    if mutability is not None:
        item["stateMutability"] = mutability
    return item


@pytest.fixture
def erc20_abi() -> List[Dict[str, Any]]:
    return [
        _function("transfer", ["address", "uint256"]),
        _function("approve", ["address", "uint256"]),
        _function("transferFrom", ["address", "address", "uint256"]),
        _function("balanceOf", ["address"], "view"),
        _function("totalSupply", [], "view"),
        # Legacy entry without stateMutability
        _function("mint", ["address", "uint256"], None),
        {
            "type": "event",
            "name": "Transfer",
            "anonymous": False,
            "inputs": [
                {"name": "from", "type": "address", "indexed": True},
                {"name": "to", "type": "address", "indexed": True},
                {"name": "value", "type": "uint256", "indexed": False},
            ],
        },
        {"type": "constructor", "inputs": [], "stateMutability": "nonpayable"},
    ]


@pytest.fixture
def erc20_abi_file(tmp_path: Path, erc20_abi: List[Dict[str, Any]]) -> Path:
    path = tmp_path / "Token.json"
    path.write_text(json.dumps(erc20_abi), encoding="utf-8")
    return path


def make_row(call_data: str, block_number: int = 100, **overrides: Any) -> Dict[str, Any]:
    row: Dict[str, Any] = {
        "transaction_hash": "0x" + f"{block_number:064x}",
        "block_number": block_number,
        "block_timestamp": None,
        "trace_address": "0,1",
        "from_address": HOLDER,
        "to_address": TOKEN,
        "caller_address": HOLDER,
        "callee_address": TOKEN,
        "call_data": call_data,
        "call_output": "0x" + "0" * 63 + "1",
        "call_type": "call",
        "value": 0,
        "status": 1,
        "error": None,
    }
    row.update(overrides)
    return row


class FakeTraceSource:
    """Records queries and returns canned rows."""

    def __init__(self, rows: List[Dict[str, Any]] | None = None):
        self.rows = rows or []
        self.queries: List[str] = []

    def execute(self, query: str) -> List[Dict[str, Any]]:
        self.queries.append(query)
        return list(self.rows)
