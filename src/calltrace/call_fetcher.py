"""
Contract Call Fetcher

Runs the fetch pipeline once: resolve selectors, build the query, execute
it against the trace source, and decode the returned rows.
"""

import sys
from typing import List

from .abi_utils import load_abi_file, load_bundled_abi
from .colors import address, function_name, info, number
from .config import FetchConfig
from .errors import ConfigurationError
from .function_resolver import SelectorMap, resolve_function_selectors
from .query_builder import build_query
from .trace_decoder import ContractCall, decode_traces


class ContractCallFetcher:
    """
    Fetches and decodes calls to selected contract functions.

    The source only needs an ``execute(query) -> rows`` method.
    """

    def __init__(self, source, quiet_mode: bool = False):
        self.source = source
        self.quiet_mode = quiet_mode

    def _log(self, message: str):
        """Log a message to stderr if not in quiet mode."""
        if not self.quiet_mode:
            print(message, file=sys.stderr)

    def load_abis(self, config: FetchConfig) -> List[list]:
        if not config.abi_files:
            return [load_bundled_abi()]
        return [load_abi_file(path) for path in config.abi_files]

    def resolve_selectors(self, config: FetchConfig) -> SelectorMap:
        """Resolve the selectors to capture; fails if there are none."""
        selectors = resolve_function_selectors(
            self.load_abis(config),
            config.functions,
            config.include_constant_functions,
            quiet_mode=self.quiet_mode,
        )
        if not selectors:
            raise ConfigurationError("No function calls to capture!")
        return selectors

    def build_query(self, config: FetchConfig) -> str:
        return build_query(config.fetch_filter, dataset=config.dataset)

    def fetch(self, config: FetchConfig) -> List[ContractCall]:
        selectors = self.resolve_selectors(config)
        query = self.build_query(config)

        callees = ', '.join(address(a) for a in config.fetch_filter.callee_addresses)
        names = ', '.join(function_name(n) for n in sorted(selectors.values()))
        self._log(info(f"Fetching calls to {callees} functions: {names}..."))

        rows = self.source.execute(query)
        calls = decode_traces(rows, selectors)
        self._log(info(f"Matched {number(str(len(calls)))} of {number(str(len(rows)))} traces"))
        return calls
