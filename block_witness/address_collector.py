"""Discovery of the accounts touched by a block."""

import logging
from typing import Set

from witness_base_types import Address, Hash
from witness_rpc import Block, Transaction

logger = logging.getLogger(__name__)


class AddressCollector:
    """
    Collects the sender and the recipient of every full transaction of a block.

    Transactions present only as hashes are skipped, so the block must be fetched with full
    transactions. Call data and receipt logs are not inspected, accounts only reached through
    them (e.g. token transfer participants) are not collected.
    """

    def collect(self, block: Block) -> Set[Address]:
        """Return the deduplicated set of accounts referenced by the block's transactions."""
        addresses: Set[Address] = set()
        skipped = 0
        for tx in block.transactions:
            match tx:
                case Transaction(sender=sender, to=to):
                    addresses.add(Address(sender))
                    # Contract creations have no recipient.
                    if to is not None:
                        addresses.add(Address(to))
                case Hash():
                    skipped += 1
        if skipped:
            logger.warning(
                "block %s: skipped %d transactions only present as hashes", block.number, skipped
            )
        logger.info("block %s: collected %d addresses", block.number, len(addresses))
        return addresses
