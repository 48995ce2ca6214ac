"""
Ethereum JSON-RPC client with retry logic and URL rotation.
"""

import logging
import time
from typing import Any, List, Optional, Union

import requests

logger = logging.getLogger(__name__)

BlockTag = Union[int, str]


class RPCError(RuntimeError):
    """Raised when an RPC value could not be fetched from any endpoint"""
    pass


def format_block_tag(block: BlockTag) -> str:
    """Format a block number or tag ("latest", "pending", ...) for RPC params."""
    if isinstance(block, bool):
        raise ValueError("block must be a block number or tag")
    if isinstance(block, int):
        if block < 0:
            raise ValueError(f"block number cannot be negative, got {block}")
        return hex(block)
    return block


class EthereumRPCClient:
    """
    Ethereum RPC client with automatic failover and retry logic.

    Features:
    - Multiple RPC URL support with automatic rotation
    - Retry with exponential backoff
    - Request rate limiting
    """

    def __init__(
        self,
        rpc_urls: List[str],
        request_timeout: int = 30,
        rate_limit_delay: float = 0.0,
        max_retries: int = 3,
        backoff_factor: float = 1.0
    ):
        """
        Initialize the RPC client.

        Args:
            rpc_urls: List of Ethereum RPC endpoints
            request_timeout: Timeout for individual requests in seconds
            rate_limit_delay: Delay after each successful request in seconds
            max_retries: Attempts per endpoint before giving up
            backoff_factor: Exponential backoff multiplier

        Raises:
            ValueError: If no RPC URL is given
        """
        if not rpc_urls:
            raise ValueError("At least one RPC URL is required")

        self.rpc_urls = list(rpc_urls)
        self.current_url_index = 0
        self.request_timeout = request_timeout
        self.rate_limit_delay = rate_limit_delay
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor

    def _get_current_rpc_url(self) -> str:
        """Get the current RPC URL."""
        return self.rpc_urls[self.current_url_index % len(self.rpc_urls)]

    def _rotate_rpc_url(self):
        """Rotate to the next RPC URL."""
        self.current_url_index = (self.current_url_index + 1) % len(self.rpc_urls)
        logger.debug(f"Rotated to RPC URL: {self._get_current_rpc_url()}")

    def make_rpc_call(self, method: str, params: list) -> Optional[Any]:
        """
        Make an RPC call with retry logic and URL rotation.

        Args:
            method: RPC method name
            params: RPC method parameters

        Returns:
            RPC response result or None if all attempts failed
        """
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": 1
        }

        total_attempts = self.max_retries * len(self.rpc_urls)

        for attempt in range(total_attempts):
            url = self._get_current_rpc_url()
            try:
                response = requests.post(
                    url,
                    json=payload,
                    headers={'Content-Type': 'application/json'},
                    timeout=self.request_timeout
                )
                response.raise_for_status()

                result = response.json()

                if not isinstance(result, dict):
                    raise ValueError(f"Malformed RPC response: expected an object, got {type(result).__name__}")

                if 'error' in result:
                    logger.warning(f"RPC error from {url}: {result['error']}")
                    self._rotate_rpc_url()
                    time.sleep(self.backoff_factor * (attempt + 1))
                    continue

                if self.rate_limit_delay:
                    time.sleep(self.rate_limit_delay)
                return result.get('result')

            except (requests.RequestException, ValueError) as e:
                logger.warning(f"Request failed to {url}: {e}")
                self._rotate_rpc_url()
                delay = self.backoff_factor * (2 ** min(attempt, 5))  # Cap exponential growth
                time.sleep(delay)

        logger.error(f"All RPC attempts failed for method {method}")
        return None

    def get_storage_at(self, address: str, slot: int, block: BlockTag = "latest") -> Optional[str]:
        """
        Read a contract storage slot.

        Args:
            address: Contract address
            slot: Storage slot index
            block: Block number or tag

        Returns:
            32-byte hex word, or None if failed
        """
        return self.make_rpc_call(
            "eth_getStorageAt",
            [address, hex(slot), format_block_tag(block)]
        )

    def get_latest_block_number(self) -> Optional[int]:
        """
        Get the latest block number.

        Returns:
            Latest block number or None if failed
        """
        result = self.make_rpc_call("eth_blockNumber", [])
        if result:
            return int(result, 16)
        return None
