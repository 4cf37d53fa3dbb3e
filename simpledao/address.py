"""
Address Handling

EIP-55 address normalisation and Ethereum-compatible contract address
computation for deployed SimpleDao instances.
"""

from eth_utils import is_address, keccak, to_checksum_address
import rlp

from .exceptions import InvalidAddressError


def normalize_address(address: str) -> str:
    """
    Validate *address* and return its EIP-55 checksum form.

    Raises:
        InvalidAddressError: if the value is not a 20-byte hex address
    """
    if not isinstance(address, str) or not is_address(address):
        raise InvalidAddressError(f"Invalid address: {address!r}")
    return to_checksum_address(address)


def generate_contract_address(sender: str, nonce: int) -> str:
    """
    Generate contract address using CREATE opcode logic.

    Address = keccak256(rlp([sender, nonce]))[-20:]

    Args:
        sender: Deployer address
        nonce: Deployer account nonce

    Returns:
        Contract address (checksum format)
    """
    sender_bytes = bytes.fromhex(normalize_address(sender)[2:])
    rlp_encoded = rlp.encode([sender_bytes, nonce])
    address_bytes = keccak(rlp_encoded)[-20:]
    return to_checksum_address('0x' + address_bytes.hex())


def format_address(address: str, short: bool = False) -> str:
    """Format address for display."""
    if short:
        return f"{address[:10]}...{address[-8:]}"
    return address
