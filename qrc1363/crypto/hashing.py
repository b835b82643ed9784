"""
qRC-1363 Crypto Hashing Module

Provides the hash helpers used by the protocol:
- keccak256: Web3 standard hash for selectors and contract addresses
- function_selector: first four bytes of keccak256 over a canonical signature
- interface_id: ERC-165 identifier (XOR of member selectors)
"""

from functools import reduce
from typing import Iterable, Union

from eth_utils import function_signature_to_4byte_selector, keccak


def keccak256(data: Union[bytes, str]) -> bytes:
    """
    Compute Keccak-256 hash (Ethereum standard).

    Args:
        data: Input bytes or hex string

    Returns:
        32-byte hash
    """
    if isinstance(data, str):
        if data.startswith('0x') or data.startswith('0X'):
            data = bytes.fromhex(data[2:])
        else:
            data = bytes.fromhex(data)
    return keccak(data)


def keccak256_hex(data: Union[bytes, str]) -> str:
    """Keccak-256 as a 0x-prefixed hex string."""
    return '0x' + keccak256(data).hex()


def function_selector(signature: str) -> bytes:
    """
    Compute the 4-byte selector of a canonical function signature.

    Args:
        signature: e.g. "transferAndCall(address,uint256)"

    Returns:
        4 bytes
    """
    if not signature or '(' not in signature or not signature.endswith(')'):
        raise ValueError(f"Not a canonical function signature: {signature!r}")
    if any(ch.isspace() for ch in signature):
        raise ValueError(f"Canonical signatures contain no whitespace: {signature!r}")
    return function_signature_to_4byte_selector(signature)


def interface_id(signatures: Iterable[str]) -> bytes:
    """
    ERC-165 interface identifier: XOR of all member function selectors.

    Two implementations that agree on the signature set agree on the id.
    """
    selectors = [function_selector(sig) for sig in signatures]
    if not selectors:
        raise ValueError("An interface needs at least one function signature")
    value = reduce(lambda acc, sel: acc ^ int.from_bytes(sel, 'big'), selectors, 0)
    return value.to_bytes(4, 'big')
