"""Registry of trusted EIP-712 verifying contracts."""

import logging
import threading

from walletguard.validation import is_valid_address

logger = logging.getLogger(__name__)

DEFAULT_TRUSTED_CONTRACTS = (
    "0xa0b86a33e6441b8e8b96e3e30c9e1fb3e8de0f0c",
    "0x7a250d5630b4cf539739df2c5dacb4c659f2488d",  # Uniswap V2 Router
    "0xe592427a0aece92de3edee1f18e0157c05861564",  # Uniswap V3 SwapRouter
)


class TrustRegistry:
    """Set of lowercase contract addresses. In-memory only; writes are locked."""

    def __init__(self, seed=DEFAULT_TRUSTED_CONTRACTS):
        self._lock = threading.Lock()
        self._contracts: set[str] = set()
        for address in seed:
            self.add_trusted_contract(address)

    def add_trusted_contract(self, address) -> bool:
        if not is_valid_address(address):
            return False
        with self._lock:
            self._contracts.add(address.lower())
        logger.info(f"Trusted contract added: {address}", extra={"address": address.lower()})
        return True

    def remove_trusted_contract(self, address) -> bool:
        if not isinstance(address, str):
            return False
        with self._lock:
            try:
                self._contracts.remove(address.lower())
            except KeyError:
                return False
        logger.info(f"Trusted contract removed: {address}", extra={"address": address.lower()})
        return True

    def get_trusted_contracts(self) -> list[str]:
        with self._lock:
            return list(self._contracts)

    def is_trusted(self, address) -> bool:
        return isinstance(address, str) and address.lower() in self._contracts

    def __len__(self) -> int:
        return len(self._contracts)
