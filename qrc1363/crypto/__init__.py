"""
qRC-1363 Crypto Module

Hashing, selector and address helpers.
"""

from .hashing import keccak256, keccak256_hex, function_selector, interface_id
from .address import normalize_address, is_zero_address, is_valid_address
from .contract import generate_contract_address

__all__ = [
    "keccak256",
    "keccak256_hex",
    "function_selector",
    "interface_id",
    "normalize_address",
    "is_zero_address",
    "is_valid_address",
    "generate_contract_address",
]
