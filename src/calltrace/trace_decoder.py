"""
Trace Decoder

Matches raw trace rows against the selector map and turns the matching
rows into contract call records.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional

# '0x' + 8 hex chars
SELECTOR_LENGTH = 10


@dataclass(frozen=True)
class ContractCall:
    """A decoded call. Identified by (transaction_hash, block_number, trace_address)."""
    transaction_hash: str
    block_number: int
    trace_address: str  # comma separated path in the call tree
    function_name: str
    from_address: str  # sender of the transaction
    to_address: str  # top-level contract called by the transaction
    caller_address: str
    callee_address: str
    call_data: str
    call_output: Optional[str]
    call_type: str
    value: int  # wei
    status: int  # 1 success, 0 failure
    error: Optional[str] = None

    def to_json_dict(self) -> Dict[str, Any]:
        """Camel-cased fields; value as a decimal string to keep full precision."""
        result = {
            "transactionHash": self.transaction_hash,
            "blockNumber": self.block_number,
            "traceAddress": self.trace_address,
            "functionName": self.function_name,
            "fromAddress": self.from_address,
            "toAddress": self.to_address,
            "callerAddress": self.caller_address,
            "calleeAddress": self.callee_address,
            "callData": self.call_data,
            "callOutput": self.call_output,
            "callType": self.call_type,
            "value": str(self.value),
            "status": self.status,
        }
        if self.error is not None:
            result["error"] = self.error
        return result


def get_selector_from_call_data(call_data: Optional[str]) -> str:
    if not call_data:
        return ""
    return call_data[:SELECTOR_LENGTH].lower()


def parse_value(value: Any) -> int:
    """Parse a wei amount given as int, str or Decimal."""
    if value is None:
        return 0
    if isinstance(value, int):
        return value
    return int(Decimal(str(value)))


def decode_trace(row: Mapping[str, Any], function_name: str) -> ContractCall:
    return ContractCall(
        transaction_hash=row['transaction_hash'],
        block_number=int(row['block_number']),
        trace_address=row.get('trace_address') or "",
        function_name=function_name,
        from_address=row.get('from_address'),
        to_address=row.get('to_address'),
        caller_address=row['caller_address'],
        callee_address=row['callee_address'],
        call_data=row['call_data'],
        call_output=row.get('call_output'),
        call_type=row['call_type'],
        value=parse_value(row.get('value')),
        status=int(row['status']),
        error=row.get('error'),
    )


def decode_traces(rows: Iterable[Mapping[str, Any]], selectors: Mapping[str, str]) -> List[ContractCall]:
    """
    Keep the rows whose call data starts with a known selector.

    Rows with any other selector are dropped; the query is allowed to be
    broader than the selector map. Input order is kept.
    """
    results = []
    for row in rows:
        selector = get_selector_from_call_data(row.get('call_data'))
        if selector in selectors:
            results.append(decode_trace(row, selectors[selector]))
    return results
