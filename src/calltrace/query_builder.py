"""
BigQuery query construction for contract call traces.

The query always has the same set of predicates; filters that were not
given are rendered as the tautology ``1=1`` so the clause list stays fixed.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Optional, Tuple

from .errors import ConfigurationError

DEFAULT_DATASET = "bigquery-public-data.crypto_ethereum"
ALWAYS_TRUE = "1=1"

_DATASET_RE = re.compile(r'^[A-Za-z0-9_-]+(\.[A-Za-z0-9_]+)+$')


class CallType(str, Enum):
    CALL = 'call'
    STATIC_CALL = 'staticcall'
    CALLCODE = 'callcode'
    DELEGATE_CALL = 'delegatecall'


@dataclass(frozen=True)
class FetchFilter:
    """Which calls to pull from the trace warehouse."""
    callee_addresses: Tuple[str, ...]
    caller_addresses: Tuple[str, ...] = ()
    call_types: Tuple[str, ...] = ()
    start_block: Optional[int] = None  # inclusive
    end_block: Optional[int] = None  # exclusive
    since: Optional[datetime] = None
    until: Optional[datetime] = None
    status_codes: Tuple[int, ...] = ()
    limit: Optional[int] = None


def quote_string(value: str) -> str:
    """Render a value as a BigQuery string literal."""
    escaped = str(value).replace('\\', '\\\\').replace("'", "\\'")
    escaped = escaped.replace('\n', '\\n').replace('\r', '\\r')
    return f"'{escaped}'"


def to_epoch_millis(moment: datetime) -> int:
    """Milliseconds since the Unix epoch; naive datetimes are taken as UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    delta = moment - datetime(1970, 1, 1, tzinfo=timezone.utc)
    return (delta.days * 86400 + delta.seconds) * 1000 + delta.microseconds // 1000


def _string_list(values: Iterable[str], lower: bool = False) -> str:
    return ','.join(quote_string(v.lower() if lower else v) for v in values)


def _number_list(values: Iterable[int]) -> str:
    return ','.join(str(int(v)) for v in values)


def _call_type_value(call_type) -> str:
    return call_type.value if isinstance(call_type, CallType) else str(call_type)


def build_predicates(opts: FetchFilter) -> Tuple[str, ...]:
    """Return the WHERE clauses in their fixed order."""
    if not opts.callee_addresses:
        raise ConfigurationError("At least one callee address is required")

    callees = _string_list(opts.callee_addresses, lower=True)
    callers = _string_list(opts.caller_addresses, lower=True)
    call_types = _string_list(_call_type_value(t) for t in opts.call_types)
    status_codes = _number_list(opts.status_codes)

    return (
        # Must not be a call to itself
        "c.from_address <> c.to_address",
        # Must be to a callee address
        f"lower(c.to_address) IN ({callees})",
        # Must be >= since
        f"c.block_timestamp >= TIMESTAMP_MILLIS({to_epoch_millis(opts.since)})"
        if opts.since is not None else ALWAYS_TRUE,
        # Must be <= until
        f"c.block_timestamp <= TIMESTAMP_MILLIS({to_epoch_millis(opts.until)})"
        if opts.until is not None else ALWAYS_TRUE,
        # Must be >= start block
        f"c.block_number >= {int(opts.start_block)}"
        if opts.start_block is not None else ALWAYS_TRUE,
        # Must be < end block
        f"c.block_number < {int(opts.end_block)}"
        if opts.end_block is not None else ALWAYS_TRUE,
        f"c.call_type IN ({call_types})" if call_types else ALWAYS_TRUE,
        f"c.status IN ({status_codes})" if status_codes else ALWAYS_TRUE,
        f"lower(c.from_address) IN ({callers})" if callers else ALWAYS_TRUE,
    )


def build_query(opts: FetchFilter, dataset: str = DEFAULT_DATASET) -> str:
    """Build the trace query for a fetch filter."""
    if not _DATASET_RE.match(dataset):
        raise ConfigurationError(f"Invalid BigQuery dataset: {dataset!r}")
    if opts.limit is not None and int(opts.limit) < 0:
        raise ConfigurationError(f"Limit must not be negative, got {opts.limit}")

    where = "\n            AND ".join(build_predicates(opts))
    limit = f"\n        LIMIT {int(opts.limit)}" if opts.limit else ""
    return f"""
        SELECT
            c.transaction_hash,
            c.block_number,
            c.block_timestamp,
            c.trace_address,
            t.from_address,
            t.to_address,
            c.from_address AS caller_address,
            c.to_address AS callee_address,
            c.input AS call_data,
            c.output AS call_output,
            c.call_type,
            c.value,
            c.status,
            c.error
        FROM `{dataset}.traces` c
        LEFT JOIN `{dataset}.transactions` t ON c.transaction_hash = t.hash
        WHERE
                {where}
        ORDER BY c.block_number ASC{limit}
    """
