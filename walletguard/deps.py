"""FastAPI dependencies resolving the per-application service objects."""

from fastapi import Request

from walletguard.services.eip712_inspector import MessageInspector
from walletguard.services.policy_engine import PolicyEvaluator
from walletguard.services.policy_store import PolicyStore
from walletguard.services.trust_registry import TrustRegistry


def get_policy_store(request: Request) -> PolicyStore:
    return request.app.state.policy_store


def get_evaluator(request: Request) -> PolicyEvaluator:
    return request.app.state.evaluator


def get_trust_registry(request: Request) -> TrustRegistry:
    return request.app.state.trust_registry


def get_inspector(request: Request) -> MessageInspector:
    return request.app.state.inspector
