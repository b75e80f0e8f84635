"""In-memory registry of named transaction policies."""

import logging
import threading
from dataclasses import dataclass, field

from pydantic import ValidationError

from walletguard.models.policy import DEFAULT_POLICY_DOCUMENT, DEFAULT_POLICY_ID, Policy

logger = logging.getLogger(__name__)


class ProtectedPolicyError(Exception):
    """Raised when an operation would modify the built-in default policy."""


@dataclass
class PolicyAddResult:
    success: bool
    policy: Policy | None = None
    errors: list[dict] = field(default_factory=list)


@dataclass
class PolicyRemoveResult:
    success: bool
    removed: bool = False
    error: str | None = None


def format_validation_errors(exc: ValidationError) -> list[dict]:
    """Flatten a pydantic ValidationError into ``{path, message, type}`` entries."""
    return [
        {
            "path": ".".join(str(part) for part in err["loc"]),
            "message": err["msg"],
            "type": err["type"],
        }
        for err in exc.errors()
    ]


class PolicyStore:
    """Policy id -> validated Policy, seeded with an immutable ``default`` entry.

    Mutations run under a lock so concurrent request handlers never observe a
    half-updated map. Nothing is persisted.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._policies: dict[str, Policy] = {
            DEFAULT_POLICY_ID: Policy.model_validate(DEFAULT_POLICY_DOCUMENT),
        }

    def add_policy(self, policy_id, raw_policy) -> PolicyAddResult:
        """Validate ``raw_policy`` and store it under ``policy_id``."""
        if not isinstance(policy_id, str) or not policy_id.strip():
            return PolicyAddResult(
                success=False,
                errors=[{"path": "policyId", "message": "policy id must be a non-empty string", "type": "value_error"}],
            )
        try:
            self._guard(policy_id)
        except ProtectedPolicyError as e:
            return PolicyAddResult(
                success=False,
                errors=[{"path": "policyId", "message": str(e), "type": "protected"}],
            )

        try:
            policy = Policy.model_validate(raw_policy)
        except ValidationError as e:
            errors = format_validation_errors(e)
            logger.info(
                f"Policy {policy_id} rejected with {len(errors)} validation error(s)",
                extra={"policy_id": policy_id},
            )
            return PolicyAddResult(success=False, errors=errors)

        with self._lock:
            self._policies[policy_id] = policy
        logger.info(f"Policy stored: {policy_id}", extra={"policy_id": policy_id})
        return PolicyAddResult(success=True, policy=policy)

    def get_policy(self, policy_id) -> Policy | None:
        if not isinstance(policy_id, str):
            return None
        return self._policies.get(policy_id)

    def remove_policy(self, policy_id) -> PolicyRemoveResult:
        if not isinstance(policy_id, str):
            return PolicyRemoveResult(success=False, error="policy id must be a string")
        try:
            self._guard(policy_id)
        except ProtectedPolicyError as e:
            return PolicyRemoveResult(success=False, error=str(e))

        with self._lock:
            removed = self._policies.pop(policy_id, None) is not None
        if removed:
            logger.info(f"Policy removed: {policy_id}", extra={"policy_id": policy_id})
        return PolicyRemoveResult(success=True, removed=removed)

    def list_policies(self) -> list[dict]:
        with self._lock:
            entries = list(self._policies.items())
        return [
            {
                "id": policy_id,
                "scope": policy.scope,
                "description": policy.description,
                "ruleCount": len(policy.rules),
            }
            for policy_id, policy in entries
        ]

    def __len__(self) -> int:
        return len(self._policies)

    @staticmethod
    def _guard(policy_id) -> None:
        if policy_id == DEFAULT_POLICY_ID:
            raise ProtectedPolicyError("the default policy cannot be modified or removed")
