"""
Common definitions and types.
"""

from .base_types import (
    Address,
    Bytes,
    FixedSizeBytes,
    Hash,
    HexNumber,
    Number,
)
from .conversions import to_bytes, to_fixed_size_bytes, to_number
from .json import to_json
from .pydantic import CamelModel, WitnessBaseModel

__all__ = (
    "Address",
    "Bytes",
    "CamelModel",
    "FixedSizeBytes",
    "Hash",
    "HexNumber",
    "Number",
    "WitnessBaseModel",
    "to_bytes",
    "to_fixed_size_bytes",
    "to_json",
    "to_number",
)
