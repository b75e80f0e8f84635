"""EIP-712 inspection and trusted-contract endpoints."""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from walletguard.deps import get_inspector, get_trust_registry
from walletguard.metrics import EIP712_INSPECTIONS_TOTAL
from walletguard.services.eip712_inspector import MessageInspector, summarize
from walletguard.services.trust_registry import TrustRegistry

router = APIRouter(prefix="/api/eip712", tags=["eip712"])
logger = logging.getLogger(__name__)


class InspectRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    typed_data: Any = Field(default=None, alias="typedData")
    options: Optional[dict] = None


class TrustedContractRequest(BaseModel):
    address: Any = None


@router.post("/inspect")
async def inspect_typed_data(
    req: InspectRequest, inspector: MessageInspector = Depends(get_inspector)
):
    """Inspect a typed-data payload before the user signs it."""
    result = inspector.inspect(req.typed_data, req.options)
    EIP712_INSPECTIONS_TOTAL.labels(risk=result.risk.value).inc()
    return {"success": True, "inspection": result.to_dict(), "summary": summarize(result)}


@router.get("/trusted-contracts")
async def list_trusted_contracts(registry: TrustRegistry = Depends(get_trust_registry)):
    return {"success": True, "contracts": sorted(registry.get_trusted_contracts())}


@router.post("/trusted-contracts")
async def add_trusted_contract(
    req: TrustedContractRequest, registry: TrustRegistry = Depends(get_trust_registry)
):
    if not registry.add_trusted_contract(req.address):
        return JSONResponse(status_code=400, content={"success": False, "error": "Invalid address format"})
    return {"success": True, "message": "Contract added to trusted list"}


@router.delete("/trusted-contracts/{address}")
async def remove_trusted_contract(
    address: str, registry: TrustRegistry = Depends(get_trust_registry)
):
    return {"success": True, "removed": registry.remove_trusted_contract(address)}
