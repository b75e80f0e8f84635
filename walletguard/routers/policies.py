"""Transaction policy endpoints."""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from walletguard.deps import get_evaluator, get_policy_store
from walletguard.metrics import POLICY_EVALUATIONS_TOTAL
from walletguard.services.policy_engine import PolicyEvaluator
from walletguard.services.policy_store import PolicyStore

router = APIRouter(prefix="/api/policies", tags=["policies"])
logger = logging.getLogger(__name__)


class AddPolicyRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    policy_id: str = Field(alias="policyId")
    # Validated by the store so schema violations come back as a 400 error list
    policy: Any = None


class EvaluateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    policy_id: Optional[str] = Field(default=None, alias="policyId")
    transaction: Any = None


@router.get("")
async def list_policies(store: PolicyStore = Depends(get_policy_store)):
    """List stored policies in insertion order."""
    return {"success": True, "policies": store.list_policies()}


@router.post("")
async def add_policy(req: AddPolicyRequest, store: PolicyStore = Depends(get_policy_store)):
    """Validate and store a policy document."""
    result = store.add_policy(req.policy_id, req.policy)
    if not result.success:
        return JSONResponse(status_code=400, content={"success": False, "error": result.errors})

    logger.info(f"Policy added: {req.policy_id}")
    return {"success": True, "policy": result.policy.to_wire()}


@router.post("/evaluate")
async def evaluate_transaction(
    req: EvaluateRequest, evaluator: PolicyEvaluator = Depends(get_evaluator)
):
    """Evaluate a candidate transaction against a policy (``default`` when omitted)."""
    evaluation = evaluator.evaluate(req.policy_id, req.transaction)
    POLICY_EVALUATIONS_TOTAL.labels(verdict="allowed" if evaluation.allowed else "blocked").inc()
    logger.info(
        f"Policy evaluation: {'ALLOWED' if evaluation.allowed else 'BLOCKED'} - {evaluation.reason}"
    )
    return {"success": True, "evaluation": evaluation.to_dict()}


@router.get("/{policy_id}")
async def get_policy(policy_id: str, store: PolicyStore = Depends(get_policy_store)):
    """Get a stored policy document."""
    policy = store.get_policy(policy_id)
    if policy is None:
        raise HTTPException(404, "Policy not found")
    return {"success": True, "id": policy_id, "policy": policy.to_wire()}


@router.delete("/{policy_id}")
async def remove_policy(policy_id: str, store: PolicyStore = Depends(get_policy_store)):
    """Remove a policy. The default policy is protected."""
    result = store.remove_policy(policy_id)
    if not result.success:
        return JSONResponse(status_code=400, content={"success": False, "error": result.error})
    if not result.removed:
        raise HTTPException(404, "Policy not found")
    return {"success": True, "removed": True}
