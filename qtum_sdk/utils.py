"""
Utility functions for the Qtum SDK.
"""
import asyncio
from typing import Union

# Indirection so tests can replace backoff sleeps without touching asyncio.
sleep = asyncio.sleep


def ensure_hex0x(hexstr: str) -> str:
    """Add the 0x prefix to a hex string if it is missing."""
    if hexstr.startswith("0x"):
        return hexstr
    return "0x" + hexstr


def strip_hex0x(hexstr: str) -> str:
    """Remove the 0x prefix from a hex string if present."""
    if hexstr.startswith("0x"):
        return hexstr[2:]
    return hexstr


def to_int(value: Union[int, str, None]) -> Union[int, None]:
    """
    Convert an RPC quantity to int.

    Ethereum nodes encode quantities as 0x-prefixed hex strings while qtumd
    returns plain JSON numbers. Both are accepted.
    """
    if value is None or isinstance(value, int):
        return value
    if isinstance(value, str):
        if value.startswith(("0x", "0X")):
            return int(value, 16)
        return int(value)
    raise ValueError(f"Cannot convert {value!r} to int")


def to_quantity(value: int) -> str:
    """Encode an int as a JSON-RPC quantity (no leading zeros)."""
    return hex(value)
