"""
Identifier generation: event ids, transaction ids and addresses

Event ids are UUIDv7-like (time-ordered) so the event log sorts naturally.
Contract addresses are derived from the deployer and its nonce, which makes
deployments reproducible across independent chains.
"""

import hashlib
import re
import secrets
import time

from fundme.kernel.errors import InvalidAddress

ZERO_ADDRESS = "0x" + "0" * 40

_ADDRESS_PATTERN = re.compile(r"0x[0-9a-fA-F]{40}")


def generate_id() -> str:
    """
    Generate a UUIDv7-like identifier (time-ordered UUID)

    First 48 bits: Unix timestamp in milliseconds, then the version
    nibble, then random bits.

    Returns:
        Sortable UUID string (e.g., "01908e9a-3b87-7000-8000-123456789abc")
    """
    timestamp_48 = int(time.time() * 1000) & 0xFFFFFFFFFFFF
    rand_12 = secrets.randbits(12)
    rand_62 = secrets.randbits(62)

    time_high = (timestamp_48 >> 32) & 0xFFFF
    time_mid = (timestamp_48 >> 16) & 0xFFFF
    time_low = timestamp_48 & 0xFFFF
    version_and_rand = 0x7000 | rand_12
    variant_and_rand = 0x8000 | ((rand_62 >> 48) & 0x3FFF)
    node = rand_62 & 0xFFFFFFFFFFFF

    return (
        f"{time_high:04x}{time_mid:04x}-{time_low:04x}-"
        f"{version_and_rand:04x}-{variant_and_rand:04x}-{node:012x}"
    )


def generate_tx_id() -> str:
    """Generate a random 32-byte transaction id as 0x-prefixed hex"""
    return "0x" + secrets.token_hex(32)


def generate_address() -> str:
    """Generate a random externally owned account address"""
    return "0x" + secrets.token_hex(20)


def derive_contract_address(deployer: str, nonce: int) -> str:
    """
    Derive the address of a contract from its deployer and the deployer's nonce

    Args:
        deployer: Address of the deploying account
        nonce: Deployer's nonce at deployment time

    Returns:
        0x-prefixed 40 hex digit address
    """
    digest = hashlib.sha3_256(f"{deployer.lower()}:{nonce}".encode()).hexdigest()
    return "0x" + digest[-40:]


def normalize_address(address: str) -> str:
    """Lower-case an address so lookups are case-insensitive"""
    return address.lower()


def is_zero_address(address: str | None) -> bool:
    """
    Check whether an address is missing or the zero address

    Raises:
        InvalidAddress: If address is given but is not 0x plus 40 hex digits
    """
    if not address:
        return True
    if not isinstance(address, str) or not _ADDRESS_PATTERN.fullmatch(address):
        raise InvalidAddress(address)
    return int(address, 16) == 0
