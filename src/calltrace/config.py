"""
Run configuration for calltrace.

Everything the pipeline needs is gathered once into a frozen FetchConfig
and passed down explicitly.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Tuple

import dateparser
from eth_utils import is_address

from .errors import ConfigurationError
from .query_builder import DEFAULT_DATASET, FetchFilter
from .trace_source import DEFAULT_LOCATION

# 0x Exchange v2.0 and v2.1 on mainnet
DEFAULT_CALLEE_ADDRESSES = (
    "0x4f833a24e1f95d70f028921e27040ca56e09ab0b",
    "0x080bf510fcbf18b91105470639e9561022937712",
)

_DATEPARSER_SETTINGS = {
    'RETURN_AS_TIMEZONE_AWARE': True,
    'TIMEZONE': 'UTC',
    'TO_TIMEZONE': 'UTC',
}


@dataclass(frozen=True)
class FetchConfig:
    """Configuration for one run."""
    fetch_filter: FetchFilter
    abi_files: Tuple[str, ...] = ()  # empty means the bundled Exchange ABI
    functions: Tuple[str, ...] = ()
    include_constant_functions: bool = False
    output_file: Optional[str] = None
    pretty: bool = False
    credentials_file: Optional[str] = None
    location: str = DEFAULT_LOCATION
    dataset: str = DEFAULT_DATASET
    quiet: bool = False


def parse_time(text: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 or natural language time ("2 weeks ago", "yesterday").

    Returns a timezone-aware datetime; times without a zone are taken as UTC.
    """
    if text is None:
        return None
    text = text.strip()
    if not text:
        return None
    try:
        moment = datetime.fromisoformat(text.replace('Z', '+00:00'))
    except ValueError:
        moment = dateparser.parse(text, settings=_DATEPARSER_SETTINGS)
    if moment is None:
        raise ConfigurationError(f"Could not parse time: {text!r}")
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def normalize_addresses(addresses, kind: str = "address") -> Tuple[str, ...]:
    """Validate hex addresses and lowercase them."""
    result = []
    for addr in addresses or []:
        if not is_address(addr):
            raise ConfigurationError(f"Invalid {kind}: {addr!r}")
        result.append(addr.lower())
    return tuple(result)


def config_from_args(args) -> FetchConfig:
    """Build the run configuration from parsed command line arguments."""
    callees = normalize_addresses(args.callee, "callee address") or DEFAULT_CALLEE_ADDRESSES
    callers = normalize_addresses(args.caller, "caller address")

    if args.limit is not None and args.limit < 0:
        raise ConfigurationError(f"Limit must not be negative, got {args.limit}")

    fetch_filter = FetchFilter(
        callee_addresses=callees,
        caller_addresses=callers,
        call_types=tuple(args.call_type or ()),
        start_block=args.start_block,
        end_block=args.end_block,
        since=parse_time(args.since),
        until=parse_time(args.until),
        status_codes=tuple(args.status or ()),
        limit=args.limit,
    )
    return FetchConfig(
        fetch_filter=fetch_filter,
        abi_files=tuple(args.callee_abi or ()),
        functions=tuple(args.function or ()),
        include_constant_functions=args.include_constant_functions,
        output_file=args.output,
        pretty=args.pretty,
        credentials_file=args.credentials,
        location=args.location,
        dataset=args.dataset,
        quiet=args.quiet,
    )
