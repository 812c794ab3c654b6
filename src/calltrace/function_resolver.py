"""
Function Resolver

Turns contract ABIs and function name filters into the map of 4-byte
selectors whose calls should be captured.
"""

import sys
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .abi_utils import function_selector
from .colors import warning

CONSTANT_MUTABILITIES = ('view', 'pure')

# selector -> function name
SelectorMap = Dict[str, str]


@dataclass(frozen=True)
class NameFilter:
    """Function names to capture and to skip."""
    wanted: Tuple[str, ...] = ()
    ignored: Tuple[str, ...] = ()

    def allows(self, name: str) -> bool:
        if name in self.ignored:
            return False
        return not self.wanted or name in self.wanted


def parse_name_filters(names: Optional[Iterable[str]]) -> NameFilter:
    """Split names into inclusions and '!'-prefixed exclusions."""
    names = list(names or [])
    ignored = tuple(n[1:] for n in names if n.startswith('!'))
    wanted = tuple(n for n in names if not n.startswith('!'))
    return NameFilter(wanted=wanted, ignored=ignored)


def is_function(abi_item: Dict[str, Any]) -> bool:
    # 'type' may be omitted for functions
    return abi_item.get('type', 'function') == 'function' and bool(abi_item.get('name'))


def is_mutator(abi_item: Dict[str, Any]) -> bool:
    """A function that can change state: mutability unspecified or not view/pure."""
    mutability = abi_item.get('stateMutability')
    return mutability is None or mutability not in CONSTANT_MUTABILITIES


def get_contract_functions(abi: List[Dict[str, Any]],
                           names: Optional[Iterable[str]] = None,
                           include_constants: bool = False) -> SelectorMap:
    """Return selector -> name for the functions of one ABI that pass the filters."""
    name_filter = parse_name_filters(names)
    results: SelectorMap = {}
    for item in abi:
        if not is_function(item):
            continue
        if not (is_mutator(item) or include_constants):
            continue
        if name_filter.allows(item['name']):
            results[function_selector(item)] = item['name']
    return results


def resolve_function_selectors(abis: Iterable[List[Dict[str, Any]]],
                               names: Optional[Iterable[str]] = None,
                               include_constants: bool = False,
                               quiet_mode: bool = False) -> SelectorMap:
    """
    Merge the selector maps of several ABIs.

    ABIs are merged in the order given; when two ABIs produce the same
    selector the later one wins.
    """
    names = list(names or [])
    merged: SelectorMap = {}
    for abi in abis:
        functions = get_contract_functions(abi, names, include_constants)
        for selector, name in functions.items():
            previous = merged.get(selector)
            if previous is not None and previous != name and not quiet_mode:
                print(warning(f"Warning: selector {selector} maps to both {previous} and {name}, using {name}"),
                      file=sys.stderr)
            merged[selector] = name
    return merged
