"""
Extraction of self-contained block witnesses from an Ethereum JSON-RPC node.

A witness bundles a block's header, its predecessor's header, its transactions and their
receipts, and the before and after state and Merkle proofs of every account the block
touches.
"""

from .address_collector import AddressCollector
from .assembler import DEFAULT_MAX_WORKERS, WitnessAssembler
from .block_fetcher import BlockFetcher, parse_block_number
from .exceptions import (
    AssemblyCancelledError,
    GenesisBoundaryError,
    InconsistentBlockError,
    InconsistentSetError,
    ReceiptMismatchError,
    WitnessError,
)
from .logger import setup_logger
from .proof_fetcher import ProofFetcher
from .state_fetcher import StateSnapshotFetcher
from .types import AccountState, BlockWitness

__all__ = [
    "AccountState",
    "AddressCollector",
    "AssemblyCancelledError",
    "BlockFetcher",
    "BlockWitness",
    "DEFAULT_MAX_WORKERS",
    "GenesisBoundaryError",
    "InconsistentBlockError",
    "InconsistentSetError",
    "ProofFetcher",
    "ReceiptMismatchError",
    "StateSnapshotFetcher",
    "WitnessAssembler",
    "WitnessError",
    "parse_block_number",
    "setup_logger",
]
