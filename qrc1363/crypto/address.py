"""
qRC-1363 Crypto Address Module

Ledger accounts are Ethereum-style 20-byte addresses kept in EIP-55
checksum form so that the same account never appears under two keys.
"""

from typing import Any

from eth_utils import is_hex_address, to_checksum_address

from ..constants import ZERO_ADDRESS
from ..exceptions import InvalidAddressError


def normalize_address(address: Any) -> str:
    """
    Return the checksum form of *address*.

    Raises:
        InvalidAddressError: if *address* is not a 0x-prefixed 20-byte hex string
    """
    if not isinstance(address, str) or not is_hex_address(address):
        raise InvalidAddressError(f"Invalid address: {address!r}")
    if not address.startswith(('0x', '0X')):
        raise InvalidAddressError(f"Address must be 0x-prefixed: {address!r}")
    return to_checksum_address(address)


def is_zero_address(address: str) -> bool:
    """Check if address is the reserved null identity."""
    return address.lower() == ZERO_ADDRESS


def is_valid_address(address: Any) -> bool:
    try:
        normalize_address(address)
    except InvalidAddressError:
        return False
    return True
