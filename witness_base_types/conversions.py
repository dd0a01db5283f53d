"""Conversions from the JSON-RPC spellings of byte strings and quantities."""

import re
from typing import List, SupportsBytes, TypeAlias

BytesConvertible: TypeAlias = str | bytes | SupportsBytes | List[int]
FixedSizeBytesConvertible: TypeAlias = str | bytes | SupportsBytes | List[int] | int
NumberConvertible: TypeAlias = str | bytes | SupportsBytes | int

WHITESPACE = re.compile(r"\s+")


def strip_hex_prefix(value: str) -> str:
    """Remove whitespace and the optional `0x` prefix of a hex string."""
    value = WHITESPACE.sub("", value)
    return value[2:] if value[:2].lower() == "0x" else value


def to_bytes(value: BytesConvertible) -> bytes:
    """
    Convert a hex string, a bytes-like object or a list of byte values into bytes.

    Hex strings may have an odd number of digits (`0x1` is `b"\\x01"`) and digits of either
    case. Every failure raises `ValueError`, so that pydantic reports it as a validation error.
    """
    if isinstance(value, str):
        digits = strip_hex_prefix(value)
        if len(digits) % 2 == 1:
            digits = "0" + digits
        return bytes.fromhex(digits)
    if isinstance(value, (bytes, list, SupportsBytes)):
        return bytes(value)
    raise ValueError(f"cannot convert {type(value).__name__} to bytes")


def to_fixed_size_bytes(value: FixedSizeBytesConvertible, size: int) -> bytes:
    """
    Convert a value into exactly `size` bytes.

    Integers are encoded big-endian and padded. Other inputs must already have the right
    length.
    """
    if isinstance(value, int):
        if value < 0:
            raise ValueError(f"negative value cannot be converted to bytes: {value}")
        try:
            return value.to_bytes(size, byteorder="big")
        except OverflowError:
            raise ValueError(f"value does not fit in {size} bytes: {value}") from None
    result = to_bytes(value)
    if len(result) > size:
        raise ValueError(f"input is too large for fixed size bytes: {len(result)} > {size}")
    if len(result) < size:
        raise ValueError(f"input is too small for fixed size bytes: {len(result)} < {size}")
    return result


def to_number(value: NumberConvertible) -> int:
    """Convert a `0x`-hex or decimal string, big-endian bytes or an int into an int."""
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if stripped[:2].lower() == "0x":
            return int(stripped[2:], 16)
        return int(stripped, 10)
    if isinstance(value, (bytes, SupportsBytes)):
        return int.from_bytes(bytes(value), byteorder="big")
    raise ValueError(f"cannot convert {type(value).__name__} to a number")
