"""Test suite for `block_witness.proof_fetcher` module."""

import pytest

from witness_base_types import Hash
from witness_rpc import DecodeError, RpcError

from ..proof_fetcher import ProofFetcher
from .conftest import ADDRESS_AA, ADDRESS_BB


def test_account_only_proof(node):
    """Test that an empty key set yields an account proof without storage proofs."""
    proof = ProofFetcher(node).fetch(ADDRESS_AA, [], 0xF)
    assert proof.address == ADDRESS_AA
    assert proof.nonce == 0xF
    assert len(proof.account_proof) == 2
    assert proof.storage_proof == []
    assert node.calls == [("eth_getProof", (ADDRESS_AA, [], 0xF))]


def test_storage_proofs(node):
    """Test that one storage proof is returned per requested key."""
    keys = [Hash(0), Hash(1)]
    proof = ProofFetcher(node).fetch(ADDRESS_BB, keys, 0x10)
    assert [bytes(storage.key) for storage in proof.storage_proof] == [bytes(k) for k in keys]


def test_proof_for_other_address(node, monkeypatch):
    """Test that a proof of another account is rejected."""
    get_proof = node.get_proof
    monkeypatch.setattr(
        node, "get_proof", lambda address, keys, block: get_proof(ADDRESS_BB, keys, block)
    )
    with pytest.raises(DecodeError, match="different address"):
        ProofFetcher(node).fetch(ADDRESS_AA, [], 0xF)


def test_missing_storage_proofs(node, monkeypatch):
    """Test that a proof lacking some of the requested storage proofs is rejected."""
    get_proof = node.get_proof
    monkeypatch.setattr(
        node, "get_proof", lambda address, keys, block: get_proof(address, [], block)
    )
    with pytest.raises(DecodeError, match="storage proofs"):
        ProofFetcher(node).fetch(ADDRESS_AA, [Hash(1)], 0xF)


def test_proof_error(node):
    """Test that an error object from the node propagates."""
    node.failing[("eth_getProof", ADDRESS_AA, 0xF)] = RpcError(-32000, "missing trie node")
    with pytest.raises(RpcError, match="missing trie node"):
        ProofFetcher(node).fetch(ADDRESS_AA, [], 0xF)
