"""Input validation utilities."""

import re

ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
HEX_DATA_RE = re.compile(r"^0x([0-9a-fA-F]{2})*$")
DECIMAL_RE = re.compile(r"^[0-9]+$")
HEX_INT_RE = re.compile(r"^0x[0-9a-fA-F]+$", re.IGNORECASE)

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
BURN_ADDRESS = "0x000000000000000000000000000000000000dead"
DEADBEEF_ADDRESS = "0xdeadbeefdeadbeefdeadbeefdeadbeefdeadbeef"


def is_valid_address(address) -> bool:
    return isinstance(address, str) and bool(ADDRESS_RE.match(address))


def is_hex_data(data) -> bool:
    return isinstance(data, str) and bool(HEX_DATA_RE.match(data))


def validate_address(address: str) -> str:
    """Validate and return an EVM address, lowercased. Raises ValueError if invalid."""
    if not is_valid_address(address):
        raise ValueError(f"Invalid address format: {address}")
    return address.lower()


def parse_uint(value) -> int | None:
    """Parse an unsigned integer from an int, a decimal string or a 0x hex string.

    Returns None for anything else (floats, negatives, garbage, bools).
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if not isinstance(value, str):
        return None
    text = value.strip()
    if DECIMAL_RE.match(text):
        return int(text)
    if HEX_INT_RE.match(text):
        return int(text, 16)
    return None
