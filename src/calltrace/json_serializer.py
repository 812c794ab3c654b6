"""
JSON Serialization for calltrace output

Renders contract call records as newline-delimited JSON, or as a sequence
of indented objects when pretty printing is requested.
"""

import json
import sys
from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional, Sequence

from .trace_decoder import ContractCall


class CallSerializer:
    """Serializes contract calls to JSON text."""

    def __init__(self, pretty: bool = False):
        self.pretty = pretty

    def _convert_to_serializable(self, obj: Any) -> Any:
        """Convert non-serializable objects to JSON-serializable format."""
        if isinstance(obj, ContractCall):
            return self._convert_to_serializable(obj.to_json_dict())
        elif isinstance(obj, bytes):
            return '0x' + obj.hex()
        elif isinstance(obj, Decimal):
            return str(obj)
        elif isinstance(obj, datetime):
            return obj.isoformat()
        elif isinstance(obj, dict):
            return {k: self._convert_to_serializable(v) for k, v in obj.items()}
        elif isinstance(obj, (list, tuple)):
            return [self._convert_to_serializable(item) for item in obj]
        else:
            return obj

    def serialize_call(self, call: ContractCall) -> str:
        data = self._convert_to_serializable(call)
        if self.pretty:
            return json.dumps(data, indent=2)
        return json.dumps(data)

    def serialize_calls(self, calls: Sequence[ContractCall]) -> List[str]:
        return [self.serialize_call(call) for call in calls]

    def render(self, calls: Sequence[ContractCall]) -> str:
        """One JSON document per call, joined with newlines."""
        return '\n'.join(self.serialize_calls(calls))


def write_output(calls: Sequence[ContractCall], output_file: Optional[str] = None,
                 pretty: bool = False) -> None:
    """Write all calls at once to a file, or to stdout."""
    text = CallSerializer(pretty=pretty).render(calls)
    if output_file:
        with open(output_file, 'w', encoding='utf-8') as f:
            f.write(text)
    else:
        print(text)
        sys.stdout.flush()
