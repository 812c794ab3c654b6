#!/usr/bin/env python3
"""
Main entry point for calltrace
"""

import argparse
import sys

from . import __version__
from .call_fetcher import ContractCallFetcher
from .colors import error
from .config import config_from_args
from .errors import CallTraceError
from .json_serializer import write_output
from .query_builder import DEFAULT_DATASET, CallType
from .trace_source import DEFAULT_LOCATION, BigQueryTraceSource


def fetch_command(args):
    """Execute the fetch."""
    config = config_from_args(args)

    if args.print_query:
        # Only show the query, the trace source is never contacted
        fetcher = ContractCallFetcher(source=None, quiet_mode=config.quiet)
        fetcher.resolve_selectors(config)
        print(fetcher.build_query(config))
        return 0

    source = BigQueryTraceSource(config.credentials_file, location=config.location)
    fetcher = ContractCallFetcher(source, quiet_mode=config.quiet)
    calls = fetcher.fetch(config)
    write_output(calls, config.output_file, pretty=config.pretty)
    return 0


def build_parser():
    parser = argparse.ArgumentParser(
        prog='calltrace',
        description='Fetch calls to contract functions from the BigQuery Ethereum trace dataset')
    parser.add_argument('--version', '-v', action='version', version=f'%(prog)s {__version__}')

    # Block and time range
    parser.add_argument('--start-block', type=int, help='First block to include')
    parser.add_argument('--end-block', type=int, help='Block to stop at (exclusive)')
    parser.add_argument('--since', help='Earliest block time, ISO-8601 or natural language (e.g. "2 weeks ago")')
    parser.add_argument('--until', help='Latest block time, ISO-8601 or natural language')
    parser.add_argument('--limit', type=int, help='Maximum number of traces to fetch')

    # Call filters
    parser.add_argument('--callee', action='extend', nargs='+', metavar='ADDRESS',
                        help='Contract address called (default: 0x Exchange v2.0 and v2.1). Can be given multiple times')
    parser.add_argument('--caller', action='extend', nargs='+', metavar='ADDRESS',
                        help='Only calls made by this address. Can be given multiple times')
    parser.add_argument('--call-type', action='extend', nargs='+', choices=[t.value for t in CallType],
                        help='Only calls of this type. Can be given multiple times')
    parser.add_argument('--status', action='extend', nargs='+', type=int, choices=[0, 1],
                        help='Only calls with this status (1 success, 0 failure)')

    # Functions
    parser.add_argument('--callee-abi', action='extend', nargs='+', metavar='FILE',
                        help='ABI or compiler artifact JSON of the callee (default: bundled 0x Exchange ABI)')
    parser.add_argument('--function', '-f', action='extend', nargs='+', metavar='NAME',
                        help='Function name to capture, or !NAME to skip it (default: all mutator functions)')
    parser.add_argument('--include-constant-functions', action='store_true',
                        help='Also capture view and pure functions')

    # Output
    parser.add_argument('--output', '-o', help='Output file (default: stdout)')
    parser.add_argument('--pretty', action='store_true', help='Pretty print each JSON record')
    parser.add_argument('--print-query', action='store_true',
                        help='Print the generated SQL and exit without running it')
    parser.add_argument('--quiet', '-q', action='store_true', help='Suppress status messages on stderr')

    # BigQuery
    parser.add_argument('--credentials', '-c', help='Service account credentials JSON file')
    parser.add_argument('--location', default=DEFAULT_LOCATION, help=f'BigQuery job location (default: {DEFAULT_LOCATION})')
    parser.add_argument('--dataset', default=DEFAULT_DATASET, help=f'BigQuery dataset (default: {DEFAULT_DATASET})')
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        return fetch_command(args)
    except CallTraceError as e:
        print(error(f"Error: {e}"), file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
