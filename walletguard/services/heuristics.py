"""Static heuristic tables used by the EIP-712 inspector.

These lists are seeds for a best-effort phishing screen, not a security
guarantee. Swap in a different InspectionRules to extend them.
"""

import re
from dataclasses import dataclass

from walletguard.chains import SUPPORTED_CHAIN_IDS
from walletguard.validation import BURN_ADDRESS, DEADBEEF_ADDRESS, ZERO_ADDRESS


@dataclass(frozen=True)
class InspectionRules:
    suspicious_contracts: frozenset[str]
    suspicious_field_addresses: frozenset[str]
    high_risk_types: frozenset[str]
    common_safe_types: frozenset[str]
    high_risk_domain_terms: tuple[str, ...]
    legit_domain_names: frozenset[str]
    typosquat_patterns: tuple[re.Pattern, ...]
    suspicious_message_patterns: tuple[re.Pattern, ...]
    critical_fields: tuple[str, ...]
    supported_chain_ids: frozenset[int]
    expected_domain_version: str = "1"
    high_value_threshold: int = 1000 * 10**18  # 1000 tokens at 18 decimals
    max_deadline_horizon_seconds: int = 24 * 3600


MAX_UINT256_HEX = "0x" + "f" * 64

DEFAULT_RULES = InspectionRules(
    suspicious_contracts=frozenset({ZERO_ADDRESS, DEADBEEF_ADDRESS}),
    suspicious_field_addresses=frozenset({ZERO_ADDRESS, BURN_ADDRESS, DEADBEEF_ADDRESS}),
    high_risk_types=frozenset({
        "Permit",
        "ApprovalForAll",
        "SetApprovalForAll",
        "EmergencyWithdraw",
        "AdminTransfer",
    }),
    common_safe_types=frozenset({"Mail", "Person", "Order", "Bid"}),
    high_risk_domain_terms=("Phishing", "FakeToken", "ScamNFT", "DrainWallet"),
    legit_domain_names=frozenset({"Uniswap", "OpenSea", "CoinbaseWallet", "ROJO"}),
    typosquat_patterns=(
        re.compile(r"un[il]swap", re.IGNORECASE),
        re.compile(r"open[s5]ea", re.IGNORECASE),
        re.compile(r"c[o0]inbase", re.IGNORECASE),
    ),
    suspicious_message_patterns=(
        re.compile(r"approve.*unlimited", re.IGNORECASE),
        re.compile(r"setApprovalForAll.*true", re.IGNORECASE),
        re.compile(r"emergencyWithdraw", re.IGNORECASE),
        re.compile(r"backdoor", re.IGNORECASE),
        re.compile(r"admin.*transfer", re.IGNORECASE),
    ),
    critical_fields=("owner", "spender", "to", "approved", "operator"),
    supported_chain_ids=SUPPORTED_CHAIN_IDS,
)
