"""Wallet pre-flight endpoints."""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from walletguard.deps import get_evaluator
from walletguard.metrics import POLICY_EVALUATIONS_TOTAL
from walletguard.models.policy import DEFAULT_POLICY_ID
from walletguard.services.policy_engine import PolicyEvaluator
from walletguard.services.transaction_guard import validate_transaction

router = APIRouter(prefix="/api/wallet", tags=["wallet"])


class ValidateTransactionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    transaction: Any = None
    policy_id: str = Field(default=DEFAULT_POLICY_ID, alias="policyId")


@router.post("/validate-transaction")
async def validate_wallet_transaction(
    req: ValidateTransactionRequest, evaluator: PolicyEvaluator = Depends(get_evaluator)
):
    """Policy verdict plus network, amount and address checks for a wallet send."""
    validation = validate_transaction(evaluator, req.policy_id, req.transaction)
    verdict = "allowed" if validation["policyResult"]["allowed"] else "blocked"
    POLICY_EVALUATIONS_TOTAL.labels(verdict=verdict).inc()
    return {"success": True, "validation": validation}
