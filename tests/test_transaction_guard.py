"""Tests for wallet-side transaction validation."""

import pytest
from walletguard.services.policy_engine import PolicyEvaluator
from walletguard.services.policy_store import PolicyStore
from walletguard.services.transaction_guard import security_checks, validate_transaction

RECIPIENT = "0x742d35Cc6634C0532925a3b844Bc454e4438f44e"
ETH = 10**18


@pytest.fixture
def evaluator():
    return PolicyEvaluator(PolicyStore())


class TestSecurityChecks:
    def test_all_pass(self):
        checks = security_checks({"chainId": 8453, "to": RECIPIENT, "value": str(ETH)})
        assert checks == {"networkAllowed": True, "amountReasonable": True, "addressValid": True}

    def test_base_sepolia_hex_chain(self):
        assert security_checks({"chainId": "0x14a34", "to": RECIPIENT})["networkAllowed"] is True

    def test_mainnet_not_allowed(self):
        assert security_checks({"chainId": 1, "to": RECIPIENT})["networkAllowed"] is False

    def test_missing_value_counts_as_zero(self):
        assert security_checks({"chainId": 8453, "to": RECIPIENT})["amountReasonable"] is True

    def test_ten_eth_is_unreasonable(self):
        assert security_checks({"value": str(10 * ETH)})["amountReasonable"] is False

    def test_garbage_value_is_unreasonable(self):
        assert security_checks({"value": "ten"})["amountReasonable"] is False

    def test_bad_address(self):
        assert security_checks({"to": "0x1234"})["addressValid"] is False


class TestValidateTransaction:
    def test_small_base_transfer_approved(self, evaluator):
        validation = validate_transaction(
            evaluator, "default", {"chainId": 8453, "to": RECIPIENT, "value": str(ETH // 10)}
        )
        assert validation["allowed"] is True
        assert validation["recommendation"] == "APPROVE"
        assert validation["policyResult"]["policyId"] == "default"

    def test_policy_block_rejects(self, evaluator):
        validation = validate_transaction(
            evaluator, "default", {"chainId": 8453, "to": RECIPIENT, "value": str(2 * ETH)}
        )
        assert validation["policyResult"]["allowed"] is False
        assert validation["recommendation"] == "REJECT"

    def test_failed_check_rejects_even_if_policy_allows(self, evaluator):
        validation = validate_transaction(
            evaluator, "default", {"chainId": 8453, "to": "nobody", "value": "1"}
        )
        assert validation["policyResult"]["allowed"] is True
        assert validation["securityChecks"]["addressValid"] is False
        assert validation["allowed"] is False

    def test_unknown_policy(self, evaluator):
        validation = validate_transaction(evaluator, "missing", {"chainId": 8453, "to": RECIPIENT})
        assert validation["policyResult"]["reason"] == "policy not found"
        assert validation["recommendation"] == "REJECT"

    def test_non_mapping_transaction(self, evaluator):
        validation = validate_transaction(evaluator, "default", "0xdeadbeef")
        assert validation["allowed"] is False
        assert validation["securityChecks"]["networkAllowed"] is False
