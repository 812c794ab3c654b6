"""
ABI loading and signature utilities for calltrace.
"""
import json
from pathlib import Path
from typing import Any, Dict, List

from web3 import Web3

from .errors import AbiFormatError

BUNDLED_ABI_DIR = Path(__file__).parent / "abis"
BUNDLED_ABI_NAME = "Exchange"


def is_contract_artifact(document: Any) -> bool:
    """Check whether a document is a compiler artifact rather than a raw ABI list."""
    return isinstance(document, dict) and ('compilerOutput' in document or 'abi' in document)


def normalize_abi(document: Any) -> List[Dict[str, Any]]:
    """Extract the raw ABI list from a raw ABI or an artifact wrapping one."""
    if is_contract_artifact(document):
        if 'compilerOutput' in document:
            compiler_output = document['compilerOutput']
            abi = compiler_output.get('abi') if isinstance(compiler_output, dict) else None
        else:
            abi = document['abi']
    else:
        abi = document
    if not isinstance(abi, list):
        raise AbiFormatError("ABI must be a JSON array or an artifact with 'compilerOutput.abi' or 'abi'")
    for item in abi:
        if not isinstance(item, dict):
            raise AbiFormatError(f"ABI entries must be objects, got {type(item).__name__}")
    return abi


def load_abi_file(abi_path: str) -> List[Dict[str, Any]]:
    """Load an ABI (raw or artifact) from a JSON file."""
    try:
        with open(abi_path, 'r', encoding='utf-8') as f:
            document = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise AbiFormatError(f"Could not load ABI from {abi_path}: {e}") from e
    try:
        return normalize_abi(document)
    except AbiFormatError as e:
        raise AbiFormatError(f"Invalid ABI in {abi_path}: {e}") from e


def load_bundled_abi(name: str = BUNDLED_ABI_NAME) -> List[Dict[str, Any]]:
    """Load one of the ABIs shipped with the package."""
    return load_abi_file(str(BUNDLED_ABI_DIR / f"{name}.json"))


def format_abi_type(abi_input: Dict[str, Any]) -> str:
    """Format ABI type, handling tuples and tuple arrays correctly."""
    abi_type = abi_input['type']
    if abi_type.startswith('tuple'):
        # Keep any array suffix, e.g. tuple[] or tuple[2][]
        suffix = abi_type[len('tuple'):]
        components = abi_input.get('components', [])
        component_types = [format_abi_type(comp) for comp in components]
        return f"({','.join(component_types)}){suffix}"
    return abi_type


def function_signature(abi_item: Dict[str, Any]) -> str:
    """Build the canonical signature, e.g. 'transfer(address,uint256)'."""
    input_types = ','.join(format_abi_type(inp) for inp in abi_item.get('inputs', []))
    return f"{abi_item['name']}({input_types})"


def function_selector(abi_item: Dict[str, Any]) -> str:
    """Calculate the 4-byte selector (first 4 bytes of keccak256 of the signature)."""
    selector_bytes = Web3.keccak(text=function_signature(abi_item))[:4]
    return Web3.to_hex(selector_bytes)
