"""Models of the block witness document."""

from typing import Dict, List, Tuple

from witness_base_types import Address, WitnessBaseModel
from witness_rpc import AccountProof, Block, Transaction, TransactionReceipt


class AccountState(WitnessBaseModel):
    """
    Balance and nonce of an account before and after the execution of a block, and its code
    after the execution.

    Values are the hex strings returned by the node. An empty string marks a value the node
    did not return: it is unknown and must not be read as zero.
    """

    balance_before: str = ""
    balance_after: str = ""
    nonce_before: str = ""
    nonce_after: str = ""
    code: str = ""

    def unknown_fields(self) -> List[str]:
        """Return the names of the fields holding the empty "unknown" sentinel."""
        return [name for name, value in self if value == ""]


class BlockWitness(WitnessBaseModel):
    """
    Self-contained snapshot of a block, sufficient to audit it without access to a node.

    `pre_state`, `post_state` and `merkle_proofs` are keyed by the same set of addresses:
    every sender and recipient of the block's transactions. Each `merkle_proofs` entry holds
    the proof at the previous block height followed by the proof at the current block height.
    """

    block_header: Block
    prev_block_header: Block
    transactions: List[Transaction]
    receipts: List[TransactionReceipt]
    pre_state: Dict[Address, AccountState]
    post_state: Dict[Address, AccountState]
    merkle_proofs: Dict[Address, Tuple[AccountProof, AccountProof]]

    def to_json_string(self, indent: int | None = None) -> str:
        """Serialize the witness to its JSON document."""
        return self.model_dump_json(by_alias=True, indent=indent)

    @classmethod
    def from_json_string(cls, document: str | bytes) -> "BlockWitness":
        """Parse a witness from its JSON document."""
        return cls.model_validate_json(document)
