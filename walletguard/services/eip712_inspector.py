"""EIP-712 typed-data inspection ahead of signing.

The inspector runs a fixed pipeline of stages over a typed-data payload. Every
stage appends to one shared InspectionResult so a single call reports all
issues found, and the final stage turns the collected findings into a risk
level. A payload is never rejected by raising: unexpected faults are turned
into a critical, unsafe verdict.
"""

import enum
import json
import logging
import time
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone

from walletguard.chains import network_name
from walletguard.services.heuristics import DEFAULT_RULES, MAX_UINT256_HEX, InspectionRules
from walletguard.services.trust_registry import TrustRegistry
from walletguard.validation import is_valid_address, parse_uint

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("types", "primaryType", "domain", "message")


class RiskLevel(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


@dataclass
class InspectionResult:
    safe: bool = True
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    risk: RiskLevel = RiskLevel.low
    details: dict = field(default_factory=dict)

    def fail(self, error: str) -> None:
        self.errors.append(error)
        self.safe = False

    def to_dict(self) -> dict:
        data = asdict(self)
        data["risk"] = self.risk.value
        return data


def _missing(value) -> bool:
    return value is None or value == ""


def score_risk(result: InspectionResult) -> None:
    """Set ``result.risk`` from the collected findings.

    score = 10 per error + 3 per warning + 5 for an unlimited approval
            + 4 for a high-risk primary type + 2 unless the contract is trusted
    """
    score = len(result.errors) * 10 + len(result.warnings) * 3
    if result.details.get("unlimitedApproval"):
        score += 5
    if result.details.get("highRiskType"):
        score += 4
    if not result.details.get("contractTrusted"):
        score += 2

    if score >= 15:
        result.risk = RiskLevel.critical
        result.safe = False
    elif score >= 10:
        result.risk = RiskLevel.high
    elif score >= 5:
        result.risk = RiskLevel.medium
    else:
        result.risk = RiskLevel.low


class MessageInspector:
    def __init__(self, registry: TrustRegistry, rules: InspectionRules = DEFAULT_RULES, clock=time.time):
        self.registry = registry
        self.rules = rules
        self.clock = clock

    def inspect(self, typed_data, options: dict | None = None) -> InspectionResult:
        """Inspect a typed-data payload. ``options`` is accepted for API compatibility."""
        result = InspectionResult()
        try:
            domain, message = self.check_structure(typed_data, result)
            self.check_verifying_contract(domain, result)
            self.check_primary_type(typed_data.get("primaryType"), result)
            self.check_domain(domain, result)
            self.check_message_content(message, result)
            self.check_critical_fields(message, result)
            self.check_critical_values(message, result)
            score_risk(result)
        except Exception as e:
            logger.exception("EIP-712 inspection failed")
            result.errors.append(f"inspection failed: {e}")
            result.safe = False
            result.risk = RiskLevel.critical

        logger.info(
            f"EIP-712 inspection: {'SAFE' if result.safe else 'UNSAFE'} - risk: {result.risk.value}",
            extra={"risk": result.risk.value, "safe": result.safe},
        )
        return result

    # -- stages ----------------------------------------------------------

    def check_structure(self, typed_data: Mapping, result: InspectionResult) -> tuple[Mapping, Mapping]:
        complete = True
        for key in REQUIRED_KEYS:
            if _missing(typed_data.get(key)):
                result.fail(f'invalid EIP-712 structure: missing "{key}"')
                complete = False

        domain = typed_data.get("domain")
        message = typed_data.get("message")
        for key, value in (("domain", domain), ("message", message)):
            if not _missing(value) and not isinstance(value, Mapping):
                result.fail(f'invalid EIP-712 structure: "{key}" must be an object')
                complete = False

        if complete:
            result.details["structure"] = "valid"
        return (
            domain if isinstance(domain, Mapping) else {},
            message if isinstance(message, Mapping) else {},
        )

    def check_verifying_contract(self, domain: Mapping, result: InspectionResult) -> None:
        contract = domain.get("verifyingContract")
        if _missing(contract):
            result.warnings.append("no verifying contract specified")
            return

        if not is_valid_address(contract):
            result.fail(f"invalid verifying contract address: {contract}")
            return

        result.details["verifyingContract"] = contract
        trusted = self.registry.is_trusted(contract)
        result.details["contractTrusted"] = trusted
        if not trusted:
            result.warnings.append(f"unknown verifying contract: {contract}")

        if contract.lower() in self.rules.suspicious_contracts:
            result.fail(f"suspicious verifying contract: {contract}")

    def check_primary_type(self, primary_type, result: InspectionResult) -> None:
        result.details["primaryType"] = primary_type
        if primary_type in self.rules.high_risk_types:
            result.warnings.append(f"high risk type: {primary_type}")
            result.details["highRiskType"] = True
        if primary_type in self.rules.common_safe_types:
            result.details["commonSafeType"] = True

    def check_domain(self, domain: Mapping, result: InspectionResult) -> None:
        result.details["domain"] = dict(domain)

        name = domain.get("name")
        if isinstance(name, str) and name:
            if any(term in name for term in self.rules.high_risk_domain_terms):
                result.fail(f"suspicious domain name: {name}")

            if name not in self.rules.legit_domain_names:
                for pattern in self.rules.typosquat_patterns:
                    if pattern.search(name):
                        result.warnings.append(f"possible domain impersonation: {name}")

        version = domain.get("version")
        # Compared as text: an integer 1 is accepted the same as "1"
        if not _missing(version) and str(version) != self.rules.expected_domain_version:
            result.warnings.append(f"unusual domain version: {version}")

        chain_id = domain.get("chainId")
        if chain_id:
            if parse_uint(chain_id) not in self.rules.supported_chain_ids:
                result.warnings.append(f"unsupported chain id: {chain_id}")
            result.details["chainId"] = chain_id

    def check_message_content(self, message: Mapping, result: InspectionResult) -> None:
        serialized = json.dumps(message, separators=(",", ":"), default=str).lower()
        for pattern in self.rules.suspicious_message_patterns:
            if pattern.search(serialized):
                result.warnings.append(f"suspicious pattern detected: {pattern.pattern}")

        value = message.get("value")
        if not isinstance(value, str) or not value:
            return

        lowered = value.lower()
        if lowered == MAX_UINT256_HEX or "ffffffff" in lowered:
            result.warnings.append("unlimited approval amount detected")
            result.details["unlimitedApproval"] = True

        amount = parse_uint(value)
        if amount is not None and amount > self.rules.high_value_threshold:
            result.warnings.append(f"very high value detected: {amount}")

    def check_critical_fields(self, message: Mapping, result: InspectionResult) -> None:
        for name in self.rules.critical_fields:
            address = message.get(name)
            if not is_valid_address(address):
                continue
            if address.lower() in self.rules.suspicious_field_addresses:
                result.warnings.append(f"field {name} points to a suspicious address: {address}")
            result.details[f"{name}Address"] = address

    def check_critical_values(self, message: Mapping, result: InspectionResult) -> None:
        raw_deadline = message.get("deadline")
        if raw_deadline:
            if isinstance(raw_deadline, float):
                deadline = int(raw_deadline)
            else:
                deadline = parse_uint(raw_deadline)
            if deadline is None:
                raise ValueError(f"invalid deadline: {raw_deadline!r}")

            now = int(self.clock())
            if deadline < now:
                result.fail("deadline expired")
            elif deadline > now + self.rules.max_deadline_horizon_seconds:
                result.warnings.append("deadline too far in the future (>24h)")
            result.details["deadline"] = datetime.fromtimestamp(deadline, tz=timezone.utc).isoformat()

        if "nonce" in message:
            result.details["nonce"] = message["nonce"]


def summarize(result: InspectionResult) -> str:
    """Human-readable verdict for showing next to a signature prompt."""
    lines = ["Message security analysis:", ""]
    if result.safe:
        lines.append("The message looks safe to sign")
        lines.append(f"Risk level: {result.risk.value}")
    else:
        lines.append("DANGER: this message is NOT safe to sign")
        lines.append(f"Risk level: {result.risk.value.upper()}")
    lines.append("")

    if result.errors:
        lines.append("Critical errors:")
        lines.extend(f"  - {e}" for e in result.errors)
        lines.append("")
    if result.warnings:
        lines.append("Warnings:")
        lines.extend(f"  - {w}" for w in result.warnings)
        lines.append("")

    details = result.details
    lines.append("Details:")
    lines.append(f"  - Type: {details.get('primaryType')}")
    if details.get("verifyingContract"):
        lines.append(f"  - Contract: {details['verifyingContract']}")
        lines.append(f"  - Trusted: {'yes' if details.get('contractTrusted') else 'no'}")
    if details.get("chainId"):
        lines.append(f"  - Network: {network_name(details['chainId'])}")
    return "\n".join(lines) + "\n"
