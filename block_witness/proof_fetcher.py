"""Retrieval of account and storage Merkle proofs."""

import logging
from typing import Sequence

from witness_base_types import Address, Hash
from witness_rpc import AccountProof, BlockNumberType, DecodeError, RpcClient
from witness_rpc import to_block_identifier

logger = logging.getLogger(__name__)


class ProofFetcher:
    """Fetches the Merkle proof of an account, and of some of its storage slots, at a block."""

    def __init__(self, rpc: RpcClient):
        self.rpc = rpc

    def fetch(
        self,
        address: Address,
        storage_keys: Sequence[Hash],
        block_number: BlockNumberType,
    ) -> AccountProof:
        """
        Fetch the proof of `address` at `block_number`.

        With no `storage_keys` the proof only contains the account trie path and an empty
        storage proof list.
        """
        storage_keys = list(storage_keys)
        proof = self.rpc.get_proof(address, storage_keys, block_number)

        call = {
            "method": "eth_getProof",
            "params": (address, storage_keys, to_block_identifier(block_number)),
        }
        if proof.address != address:
            raise DecodeError(f"proof is for a different address: {proof.address}", **call)
        if len(proof.storage_proof) != len(storage_keys):
            raise DecodeError(
                f"expected {len(storage_keys)} storage proofs, got {len(proof.storage_proof)}",
                **call,
            )
        logger.debug(
            "fetched proof of %s at %s with %d nodes",
            address,
            call["params"][2],
            len(proof.account_proof),
        )
        return proof
