"""Errors raised while assembling a block witness."""

from dataclasses import dataclass
from typing import Collection, Dict, List

from witness_base_types import Address, Hash


class WitnessError(Exception):
    """Base class of the errors raised by the witness assembly pipeline."""

    pass


class GenesisBoundaryError(WitnessError):
    """The requested block is the genesis block, which has no predecessor to diff against."""

    def __init__(self, block_hash: Hash):
        """Initialize the error with the hash of the genesis block."""
        super().__init__(
            f"block 0x0 ({block_hash}) is the genesis block and has no previous block, "
            "a witness needs a block with a predecessor"
        )
        self.block_hash = block_hash


@dataclass(kw_only=True)
class InconsistentBlockError(WitnessError):
    """The previous block fetched from the node is not the parent of the current block."""

    expected_number: int
    expected_hash: Hash
    number: int
    hash: Hash

    def __str__(self) -> str:
        """Print exception string."""
        return (
            f"previous block {hex(self.number)} ({self.hash}) is not the parent of the current "
            f"block, expected {hex(self.expected_number)} ({self.expected_hash}); "
            "the chain may have been reorganized between requests"
        )


@dataclass(kw_only=True)
class ReceiptMismatchError(WitnessError):
    """The receipts returned by the node do not pair one-to-one with the block transactions."""

    transaction_hash: Hash
    receipt_hashes: List[Hash]

    def __str__(self) -> str:
        """Print exception string."""
        found = ", ".join(str(h) for h in self.receipt_hashes) or "none"
        return (
            f"expected exactly one receipt for transaction {self.transaction_hash}, got: {found}"
        )


@dataclass(kw_only=True)
class InconsistentSetError(WitnessError):
    """The account maps of an assembled witness do not cover the same set of addresses."""

    key_sets: Dict[str, Collection[Address]]

    def __str__(self) -> str:
        """Print exception string."""
        sizes = ", ".join(f"{name}={len(keys)}" for name, keys in self.key_sets.items())
        return f"witness account maps have diverging address sets ({sizes})"


class AssemblyCancelledError(WitnessError):
    """The assembly was cancelled before all fetches completed."""

    def __init__(self):
        """Initialize the error."""
        super().__init__("witness assembly was cancelled")
