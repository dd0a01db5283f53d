"""Retrieval of blocks by number or tag."""

import logging
from typing import get_args

from witness_rpc import Block, BlockNumberType, RpcClient

logger = logging.getLogger(__name__)

BLOCK_TAGS = get_args(get_args(BlockNumberType)[1])


def parse_block_number(value: str) -> BlockNumberType:
    """
    Parse a block number given as a decimal string, a `0x`-prefixed hex string or a tag such
    as `latest`.
    """
    value = value.strip()
    if value.lower() in BLOCK_TAGS:
        return value.lower()  # type: ignore[return-value]
    try:
        if value[:2].lower() == "0x":
            number = int(value[2:], 16)
        else:
            number = int(value, 10)
    except ValueError:
        raise ValueError(
            f"invalid block number {value!r}, expected a decimal or 0x-hex number or one of "
            f"{', '.join(BLOCK_TAGS)}"
        ) from None
    if number < 0:
        raise ValueError(f"invalid block number {value!r}, block numbers are not negative")
    return number


class BlockFetcher:
    """Fetches a block header and body from the node."""

    def __init__(self, rpc: RpcClient):
        self.rpc = rpc

    def fetch(
        self, block_number: BlockNumberType | str = "latest", full_transactions: bool = True
    ) -> Block:
        """
        Fetch a block by number or tag.

        With `full_transactions` every element of `Block.transactions` is a full
        `Transaction`, otherwise it is a transaction hash.

        Raises `NotFoundError` when the node does not know the block, `TransportError` when
        the node cannot be reached and `DecodeError` when the block is malformed.
        """
        if isinstance(block_number, str):
            block_number = parse_block_number(block_number)
        block = self.rpc.get_block_by_number(block_number, full_transactions)
        logger.info(
            "fetched block %s (%s) with %d transactions",
            block.number,
            block.hash,
            len(block.transactions),
        )
        return block
