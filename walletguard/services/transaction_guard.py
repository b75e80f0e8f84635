"""Wallet-side transaction validation: policy verdict plus fixed sanity checks."""

import logging
from collections.abc import Mapping

from walletguard.chains import BASE_CHAIN_IDS
from walletguard.services.policy_engine import PolicyEvaluator
from walletguard.validation import is_valid_address, parse_uint

logger = logging.getLogger(__name__)

MAX_REASONABLE_VALUE_WEI = 10 * 10**18  # 10 ETH


def security_checks(transaction: Mapping) -> dict[str, bool]:
    value = parse_uint(transaction.get("value") or "0")
    return {
        "networkAllowed": parse_uint(transaction.get("chainId")) in BASE_CHAIN_IDS,
        "amountReasonable": value is not None and value < MAX_REASONABLE_VALUE_WEI,
        "addressValid": is_valid_address(transaction.get("to")),
    }


def validate_transaction(evaluator: PolicyEvaluator, policy_id, transaction) -> dict:
    """Combine the policy evaluation with the wallet's own network/amount/address checks."""
    if not isinstance(transaction, Mapping):
        transaction = {}

    evaluation = evaluator.evaluate(policy_id, transaction)
    checks = security_checks(transaction)
    allowed = evaluation.allowed and all(checks.values())
    recommendation = "APPROVE" if allowed else "REJECT"

    logger.info(
        f"Transaction validation: {recommendation}",
        extra={"policy_id": evaluation.policy_id, "checks": checks},
    )
    return {
        "allowed": allowed,
        "policyResult": evaluation.to_dict(),
        "securityChecks": checks,
        "recommendation": recommendation,
    }
