"""Deterministic transaction policy evaluation.

Criterion checks are pure functions without I/O. Each returns a
CriterionResult; a rule matches when every criterion matches, and the first
matching rule of a policy decides the verdict. Wei and cent amounts are
Python ints throughout, so comparisons stay exact far beyond 2**53.
"""

import logging
import operator
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache

from web3 import Web3

from walletguard.chains import network_for_chain
from walletguard.models.policy import DEFAULT_POLICY_ID, Rule
from walletguard.services.policy_store import PolicyStore
from walletguard.validation import parse_uint

logger = logging.getLogger(__name__)

WEI_PER_MILLI_ETH = 10**15
DEFAULT_CENTS_PER_MILLI_ETH = 250  # $2500 / ETH

COMPARATORS = {
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
    "==": operator.eq,
}

# Function signatures behind the ABI shorthands accepted by evmData criteria
STANDARD_ABI_SIGNATURES = {
    "erc20": [
        "transfer(address,uint256)",
        "approve(address,uint256)",
        "transferFrom(address,address,uint256)",
    ],
    "erc721": [
        "approve(address,uint256)",
        "transferFrom(address,address,uint256)",
        "safeTransferFrom(address,address,uint256)",
        "safeTransferFrom(address,address,uint256,bytes)",
        "setApprovalForAll(address,bool)",
    ],
    "erc1155": [
        "safeTransferFrom(address,address,uint256,uint256,bytes)",
        "safeBatchTransferFrom(address,address,uint256[],uint256[],bytes)",
        "setApprovalForAll(address,bool)",
    ],
}


@dataclass
class CriterionResult:
    matches: bool
    reason: str


@dataclass
class Evaluation:
    allowed: bool
    reason: str
    policy_id: str
    rule: Rule | None = None

    def to_dict(self) -> dict:
        result = {"allowed": self.allowed, "reason": self.reason, "policyId": self.policy_id}
        if self.rule is not None:
            result["rule"] = self.rule.to_wire()
        return result


def _format_cents(cents: int) -> str:
    return f"${cents // 100}.{cents % 100:02d}"


@lru_cache(maxsize=256)
def function_selector(signature: str) -> str:
    """4-byte selector of a canonical function signature, e.g. ``0xa9059cbb``."""
    return "0x" + bytes(Web3.keccak(text=signature)[:4]).hex()


def _abi_signatures(abi) -> list[str]:
    if isinstance(abi, str):
        return STANDARD_ABI_SIGNATURES.get(abi, [])
    signatures = []
    for entry in abi:
        if not isinstance(entry, Mapping) or entry.get("type", "function") != "function":
            continue
        name = entry.get("name")
        if not isinstance(name, str) or not name:
            continue
        inputs = entry.get("inputs") or []
        types = ",".join(str(i.get("type", "")) for i in inputs if isinstance(i, Mapping))
        signatures.append(f"{name}({types})")
    return signatures


def selector_names(abi) -> dict[str, str]:
    """Map 4-byte selectors to function names for an ABI shorthand or ABI array."""
    return {function_selector(sig): sig.split("(", 1)[0] for sig in _abi_signatures(abi)}


def check_network(criterion, transaction: Mapping) -> CriterionResult:
    network = network_for_chain(transaction.get("chainId"))
    if network is None:
        return CriterionResult(False, "network not identified")

    in_list = network in criterion.networks
    matches = in_list if criterion.operator == "in" else not in_list
    return CriterionResult(matches, f"network {network} {'allowed' if matches else 'blocked'}")


def check_eth_value(criterion, transaction: Mapping) -> CriterionResult:
    tx_value = parse_uint(transaction.get("value") or "0")
    if tx_value is None:
        return CriterionResult(False, "invalid transaction value")

    limit = int(criterion.eth_value)
    matches = COMPARATORS[criterion.operator](tx_value, limit)
    return CriterionResult(matches, f"value {tx_value} {criterion.operator} {limit}")


def check_address(criterion, transaction: Mapping) -> CriterionResult:
    to = transaction.get("to")
    if not isinstance(to, str) or not to:
        return CriterionResult(False, "destination address not specified")

    address = to.lower()
    in_list = any(a.lower() == address for a in criterion.addresses)
    matches = in_list if criterion.operator == "in" else not in_list
    return CriterionResult(
        matches, f"address {address} {'authorized' if matches else 'not authorized'}"
    )


def check_usd_change(
    criterion, transaction: Mapping, cents_per_milli_eth: int = DEFAULT_CENTS_PER_MILLI_ETH
) -> CriterionResult:
    tx_value = parse_uint(transaction.get("value") or "0")
    if tx_value is None:
        return CriterionResult(False, "invalid transaction value")

    estimated = (tx_value // WEI_PER_MILLI_ETH) * cents_per_milli_eth
    matches = COMPARATORS[criterion.operator](estimated, criterion.change_cents)
    return CriterionResult(
        matches,
        f"estimated {_format_cents(estimated)} {criterion.operator} "
        f"{_format_cents(criterion.change_cents)}",
    )


def check_data(criterion, transaction: Mapping) -> CriterionResult:
    """Calldata check. Matches whenever calldata is present and conditions are declared.

    The selector is only labelled for the reason string; no ABI decoding or
    per-parameter matching happens here.
    """
    data = transaction.get("data")
    if not isinstance(data, str) or not data or data.lower() == "0x":
        return CriterionResult(False, "no function data")

    selector = data[:10].lower()
    matches = len(criterion.conditions) > 0
    name = selector_names(criterion.abi).get(selector)
    label = f"{selector} ({name})" if name else selector
    return CriterionResult(matches, f"function {label} {'evaluated' if matches else 'not allowed'}")


class PolicyEvaluator:
    """Evaluates transactions against the policies held by a PolicyStore."""

    def __init__(self, store: PolicyStore, cents_per_milli_eth: int = DEFAULT_CENTS_PER_MILLI_ETH):
        self.store = store
        self.cents_per_milli_eth = cents_per_milli_eth
        self._checks = {
            "evmNetwork": check_network,
            "ethValue": check_eth_value,
            "evmAddress": check_address,
            "netUSDChange": lambda c, tx: check_usd_change(c, tx, self.cents_per_milli_eth),
            "evmData": check_data,
        }

    def evaluate(self, policy_id, transaction) -> Evaluation:
        if policy_id is None or policy_id == "":
            policy_id = DEFAULT_POLICY_ID
        policy = self.store.get_policy(policy_id)
        if policy is None:
            return Evaluation(allowed=False, reason="policy not found", policy_id=policy_id)

        if not isinstance(transaction, Mapping):
            transaction = {}

        for rule in policy.rules:
            matches, reason = self.evaluate_rule(rule, transaction)
            if matches:
                allowed = rule.action == "accept"
                logger.info(
                    f"Rule applied: {rule.action} - {reason}",
                    extra={"policy_id": policy_id, "allowed": allowed},
                )
                return Evaluation(allowed=allowed, reason=reason, policy_id=policy_id, rule=rule)

        logger.info("No rule matched, denying", extra={"policy_id": policy_id, "allowed": False})
        return Evaluation(allowed=False, reason="no rule matched", policy_id=policy_id)

    def evaluate_rule(self, rule: Rule, transaction: Mapping) -> tuple[bool, str]:
        results = [self.evaluate_criterion(c, transaction) for c in rule.criteria]
        if all(r.matches for r in results):
            return True, "; ".join(r.reason for r in results)
        return False, "failed: " + ", ".join(r.reason for r in results if not r.matches)

    def evaluate_criterion(self, criterion, transaction: Mapping) -> CriterionResult:
        criterion_type = getattr(criterion, "type", None)
        check = self._checks.get(criterion_type)
        if check is None:
            return CriterionResult(False, f"unknown criterion type: {criterion_type}")
        return check(criterion, transaction)
