"""
Contract Address Generation

Ethereum-compatible contract address computation for deployed contracts.
"""

from eth_utils import keccak, to_checksum_address
import rlp


def generate_contract_address(sender: str, nonce: int) -> str:
    """
    Generate contract address using CREATE opcode logic.

    Address = keccak256(rlp([sender, nonce]))[-20:]

    Args:
        sender: Deployer address (0x-prefixed)
        nonce: Deployer nonce

    Returns:
        Contract address (Ethereum checksum format)
    """
    if nonce < 0:
        raise ValueError("Nonce cannot be negative")

    if sender.startswith('0x') or sender.startswith('0X'):
        sender_bytes = bytes.fromhex(sender[2:])
    else:
        sender_bytes = bytes.fromhex(sender)

    if len(sender_bytes) != 20:
        raise ValueError(f"Sender must be 20 bytes, got {len(sender_bytes)}")

    rlp_encoded = rlp.encode([sender_bytes, nonce])
    address_bytes = keccak(rlp_encoded)[-20:]
    return to_checksum_address('0x' + address_bytes.hex())
