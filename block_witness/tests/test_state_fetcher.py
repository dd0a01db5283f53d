"""Test suite for `block_witness.state_fetcher` module."""

import logging

import pytest

from witness_rpc import DecodeError, RpcError

from ..state_fetcher import StateSnapshotFetcher
from ..types import AccountState
from .conftest import ADDRESS_AA, ADDRESS_BB


def test_batched_fetch(node):
    """Test that the five reads are sent as a single batch."""
    state = StateSnapshotFetcher(node).fetch(ADDRESS_BB, 0xF, 0x10)

    assert state == AccountState(
        balance_before=hex(1000 + 0xF),
        balance_after=hex(1000 + 0x10),
        nonce_before="0xf",
        nonce_after="0x10",
        code="0x6001600055",
    )
    assert len(node.batches) == 1
    assert [(call.method, call.params[1]) for call in node.batches[0]] == [
        ("eth_getBalance", "0xf"),
        ("eth_getBalance", "0x10"),
        ("eth_getTransactionCount", "0xf"),
        ("eth_getTransactionCount", "0x10"),
        ("eth_getCode", "0x10"),
    ]


def test_unbatched_fetch(node):
    """Test that the reads can be sent as individual calls."""
    batched = StateSnapshotFetcher(node).fetch(ADDRESS_AA, 0xF, 0x10)
    unbatched = StateSnapshotFetcher(node, batched=False).fetch(ADDRESS_AA, 0xF, 0x10)
    assert unbatched == batched
    assert len(node.batches) == 1


def test_code_only_read_at_current_height(node):
    """Test that code is never read at the previous height."""
    StateSnapshotFetcher(node, batched=False).fetch(ADDRESS_AA, 0xF, 0x10)
    code_calls = [params for method, params in node.calls if method == "eth_getCode"]
    assert code_calls == [(ADDRESS_AA, 0x10)]


@pytest.mark.parametrize("batched", [True, False], ids=["batched", "unbatched"])
def test_rpc_error_fails_fetch(node, batched):
    """Test that an error object for any read fails the fetch instead of defaulting."""
    error = RpcError(-32000, "header not found")
    node.failing[("eth_getTransactionCount", ADDRESS_AA, 0xF)] = error
    with pytest.raises(RpcError, match="header not found") as excinfo:
        StateSnapshotFetcher(node, batched=batched).fetch(ADDRESS_AA, 0xF, 0x10)
    assert excinfo.value.method == "eth_getTransactionCount"
    assert str(ADDRESS_AA) in str(excinfo.value)


def test_missing_value_is_unknown_sentinel(node, caplog):
    """Test that a read without a value is recorded as the empty sentinel and logged."""
    node.missing_state.add(("eth_getBalance", ADDRESS_AA, 0xF))
    with caplog.at_level(logging.WARNING):
        state = StateSnapshotFetcher(node).fetch(ADDRESS_AA, 0xF, 0x10)
    assert state.balance_before == ""
    assert state.balance_after == hex(1000 + 0x10)
    assert state.unknown_fields() == ["balance_before"]
    assert "balance_before" in caplog.text


def test_missing_value_in_strict_mode(node):
    """Test that strict mode refuses reads without a value."""
    node.missing_state.add(("eth_getCode", ADDRESS_AA, 0x10))
    with pytest.raises(DecodeError, match="code"):
        StateSnapshotFetcher(node, strict=True).fetch(ADDRESS_AA, 0xF, 0x10)


def test_non_hex_value_is_decode_error(node, monkeypatch):
    """Test that batch results that are not hex strings are rejected."""
    monkeypatch.setattr(node, "get_balance", lambda address, block: 42)
    with pytest.raises(DecodeError, match="balance_before"):
        StateSnapshotFetcher(node).fetch(ADDRESS_AA, 0xF, 0x10)


def test_short_batch_is_decode_error(node, monkeypatch):
    """Test that a batch answering fewer calls than sent is rejected."""
    monkeypatch.setattr(node, "batch", lambda calls: ["0x1"])
    with pytest.raises(DecodeError, match="batch results"):
        StateSnapshotFetcher(node).fetch(ADDRESS_AA, 0xF, 0x10)
