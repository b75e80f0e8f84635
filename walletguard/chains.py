"""Supported EVM networks."""

from walletguard.validation import parse_uint

CHAIN_ID_TO_NETWORK = {
    1: "ethereum",
    8453: "base",
    84532: "base-sepolia",
    137: "polygon",
}

NETWORK_DISPLAY_NAMES = {
    1: "Ethereum",
    8453: "Base",
    84532: "Base Sepolia",
    137: "Polygon",
}

SUPPORTED_CHAIN_IDS = frozenset(CHAIN_ID_TO_NETWORK)
BASE_CHAIN_IDS = frozenset({8453, 84532})


def network_for_chain(chain_id) -> str | None:
    """Map a chain id (int, decimal or hex string) to its network name."""
    parsed = parse_uint(chain_id)
    if parsed is None:
        return None
    return CHAIN_ID_TO_NETWORK.get(parsed)


def network_name(chain_id) -> str:
    parsed = parse_uint(chain_id)
    if parsed in NETWORK_DISPLAY_NAMES:
        return NETWORK_DISPLAY_NAMES[parsed]
    return f"Chain {chain_id}"
