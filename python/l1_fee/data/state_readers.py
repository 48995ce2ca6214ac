"""
Parameter readers

Implementations of the read(address, slot) capability used to build a fee
context: an in-memory store and a JSON-RPC backed reader.
"""

import logging
from typing import Dict, Optional, Tuple

from ..core.fee_context import Word
from .rpc_client import BlockTag, EthereumRPCClient, RPCError

logger = logging.getLogger(__name__)


class InMemoryParameterReader:
    """
    Storage snapshot held in a dictionary.

    Slots that were never written read as zero. Addresses are matched
    case-insensitively. Every read is recorded in ``reads``.
    """

    def __init__(self, storage: Optional[Dict[Tuple[str, int], Word]] = None):
        self._storage: Dict[Tuple[str, int], Word] = {}
        self.reads = []
        for (address, slot), value in (storage or {}).items():
            self.set(address, slot, value)

    def set(self, address: str, slot: int, value: Word) -> None:
        self._storage[(address.lower(), slot)] = value

    def read(self, address: str, slot: int) -> Word:
        self.reads.append((address, slot))
        return self._storage.get((address.lower(), slot), 0)


class RPCParameterReader:
    """
    Reads contract storage through eth_getStorageAt.

    All reads are pinned to one block so a fee context built from them
    reflects a single state.
    """

    def __init__(self, client: EthereumRPCClient, block: BlockTag = "latest"):
        """
        Args:
            client: RPC client used for the reads
            block: Block number or tag every read is made against
        """
        self.client = client
        self.block = block

    @classmethod
    def at_latest_block(cls, client: EthereumRPCClient) -> "RPCParameterReader":
        """
        Create a reader pinned to the current head block number.

        "latest" may advance between reads; a fixed number does not.

        Raises:
            RPCError: If the head block number cannot be fetched
        """
        block_number = client.get_latest_block_number()
        if block_number is None:
            raise RPCError("Failed to get latest block number")
        logger.info(f"Reading fee parameters at block {block_number}")
        return cls(client, block=block_number)

    def read(self, address: str, slot: int) -> Word:
        """
        Raises:
            RPCError: If the slot could not be read from any endpoint
        """
        word = self.client.get_storage_at(address, slot, self.block)
        if word is None:
            raise RPCError(f"Failed to read slot {slot} of {address} at block {self.block}")
        return word
