"""HTTP API tests against a fresh app per test."""

import pytest
from httpx import AsyncClient, ASGITransport

from walletguard.config import Settings
from walletguard.main import create_app

RECIPIENT = "0x742d35Cc6634C0532925a3b844Bc454e4438f44e"
TRUSTED = "0x7a250d5630b4cf539739df2c5dacb4c659f2488d"
NEW_CONTRACT = "0x2222222222222222222222222222222222222222"

BASE_ONLY = {
    "scope": "account",
    "description": "Base only",
    "rules": [
        {
            "action": "accept",
            "operation": "sendEvmTransaction",
            "criteria": [{"type": "evmNetwork", "networks": ["base"], "operator": "in"}],
        }
    ],
}

MAIL = {
    "types": {"Mail": [{"name": "content", "type": "string"}]},
    "primaryType": "Mail",
    "domain": {"name": "ROJO", "version": "1", "chainId": 8453, "verifyingContract": TRUSTED},
    "message": {"content": "hello"},
}


@pytest.fixture
async def client():
    app = create_app(Settings(rate_limit_per_minute=1000, trusted_contracts=NEW_CONTRACT))
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


class TestHealthCheck:
    async def test_health(self, client):
        r = await client.get("/api/health")
        assert r.status_code == 200
        data = r.json()
        assert data["status"] == "ok"
        assert data["checks"] == {"policies": 1, "trusted_contracts": 4}

    async def test_metrics_exposed(self, client):
        await client.get("/api/health")
        r = await client.get("/metrics")
        assert r.status_code == 200
        assert "walletguard_http_requests_total" in r.text


class TestPolicies:
    async def test_list_has_default(self, client):
        r = await client.get("/api/policies")
        assert r.status_code == 200
        policies = r.json()["policies"]
        assert policies == [
            {"id": "default", "scope": "project", "description": "Base security policy", "ruleCount": 2}
        ]

    async def test_add_and_get_round_trip(self, client):
        r = await client.post("/api/policies", json={"policyId": "base-only", "policy": BASE_ONLY})
        assert r.status_code == 200
        assert r.json() == {"success": True, "policy": BASE_ONLY}

        r = await client.get("/api/policies/base-only")
        assert r.status_code == 200
        assert r.json()["policy"] == BASE_ONLY

        ids = [p["id"] for p in (await client.get("/api/policies")).json()["policies"]]
        assert ids == ["default", "base-only"]

    async def test_invalid_policy_returns_error_list(self, client):
        bad = dict(BASE_ONLY, rules=[{"action": "allow", "operation": "sendEvmTransaction", "criteria": []}])
        r = await client.post("/api/policies", json={"policyId": "bad", "policy": bad})
        assert r.status_code == 400
        body = r.json()
        assert body["success"] is False
        paths = {e["path"] for e in body["error"]}
        assert "rules.0.action" in paths
        assert "rules.0.criteria" in paths

        assert (await client.get("/api/policies/bad")).status_code == 404

    async def test_unknown_criterion_type(self, client):
        rule = {
            "action": "accept",
            "operation": "sendEvmTransaction",
            "criteria": [{"type": "gasPrice", "operator": "<"}],
        }
        r = await client.post("/api/policies", json={"policyId": "gas", "policy": dict(BASE_ONLY, rules=[rule])})
        assert r.status_code == 400

    async def test_missing_policy_id(self, client):
        r = await client.post("/api/policies", json={"policy": BASE_ONLY})
        assert r.status_code == 422

    async def test_default_is_protected(self, client):
        r = await client.post("/api/policies", json={"policyId": "default", "policy": BASE_ONLY})
        assert r.status_code == 400
        assert r.json()["error"][0]["path"] == "policyId"

        r = await client.delete("/api/policies/default")
        assert r.status_code == 400
        assert r.json()["success"] is False

    async def test_delete(self, client):
        await client.post("/api/policies", json={"policyId": "base-only", "policy": BASE_ONLY})
        r = await client.delete("/api/policies/base-only")
        assert r.json() == {"success": True, "removed": True}
        assert (await client.delete("/api/policies/base-only")).status_code == 404

    async def test_get_missing(self, client):
        r = await client.get("/api/policies/nope")
        assert r.status_code == 404
        assert r.json()["detail"] == "Policy not found"


class TestEvaluate:
    async def test_default_policy_allows_small_base_transfer(self, client):
        tx = {"to": RECIPIENT, "value": "100000000000000000", "chainId": 8453}
        r = await client.post("/api/policies/evaluate", json={"transaction": tx})
        assert r.status_code == 200
        evaluation = r.json()["evaluation"]
        assert evaluation["allowed"] is True
        assert evaluation["policyId"] == "default"
        assert evaluation["rule"]["action"] == "accept"

    async def test_default_policy_blocks_large_transfer(self, client):
        tx = {"to": RECIPIENT, "value": "2000000000000000000", "chainId": 8453}
        r = await client.post("/api/policies/evaluate", json={"policyId": "default", "transaction": tx})
        evaluation = r.json()["evaluation"]
        assert evaluation["allowed"] is False
        assert evaluation["rule"]["action"] == "reject"

    async def test_named_policy(self, client):
        await client.post("/api/policies", json={"policyId": "base-only", "policy": BASE_ONLY})
        r = await client.post(
            "/api/policies/evaluate", json={"policyId": "base-only", "transaction": {"chainId": 1}}
        )
        evaluation = r.json()["evaluation"]
        assert evaluation["allowed"] is False
        assert evaluation["reason"] == "no rule matched"

    async def test_unknown_policy(self, client):
        r = await client.post("/api/policies/evaluate", json={"policyId": "ghost", "transaction": {}})
        assert r.status_code == 200
        assert r.json()["evaluation"]["reason"] == "policy not found"


class TestEip712:
    async def test_inspect_safe(self, client):
        r = await client.post("/api/eip712/inspect", json={"typedData": MAIL})
        assert r.status_code == 200
        body = r.json()
        assert body["success"] is True
        assert body["inspection"]["safe"] is True
        assert body["inspection"]["risk"] == "low"
        assert "looks safe" in body["summary"]

    async def test_inspect_missing_payload(self, client):
        r = await client.post("/api/eip712/inspect", json={})
        assert r.status_code == 200
        inspection = r.json()["inspection"]
        assert inspection["safe"] is False
        assert inspection["risk"] == "critical"

    async def test_trusted_contract_lifecycle(self, client):
        contracts = (await client.get("/api/eip712/trusted-contracts")).json()["contracts"]
        assert NEW_CONTRACT in contracts
        assert TRUSTED in contracts

        address = "0x3333333333333333333333333333333333333333"
        r = await client.post("/api/eip712/trusted-contracts", json={"address": address})
        assert r.json() == {"success": True, "message": "Contract added to trusted list"}

        typed = dict(MAIL, domain=dict(MAIL["domain"], verifyingContract=address))
        inspection = (await client.post("/api/eip712/inspect", json={"typedData": typed})).json()["inspection"]
        assert inspection["details"]["contractTrusted"] is True

        r = await client.delete(f"/api/eip712/trusted-contracts/{address}")
        assert r.json() == {"success": True, "removed": True}
        r = await client.delete(f"/api/eip712/trusted-contracts/{address}")
        assert r.json()["removed"] is False

    async def test_add_invalid_contract(self, client):
        r = await client.post("/api/eip712/trusted-contracts", json={"address": "0xnope"})
        assert r.status_code == 400
        assert r.json() == {"success": False, "error": "Invalid address format"}


class TestWallet:
    async def test_validate_transaction(self, client):
        tx = {"to": RECIPIENT, "value": "100000000000000000", "chainId": 8453}
        r = await client.post("/api/wallet/validate-transaction", json={"transaction": tx})
        assert r.status_code == 200
        validation = r.json()["validation"]
        assert validation["recommendation"] == "APPROVE"
        assert validation["securityChecks"] == {
            "networkAllowed": True,
            "amountReasonable": True,
            "addressValid": True,
        }

    async def test_validate_rejects_mainnet(self, client):
        tx = {"to": RECIPIENT, "value": "1", "chainId": 1}
        r = await client.post("/api/wallet/validate-transaction", json={"transaction": tx})
        assert r.json()["validation"]["recommendation"] == "REJECT"
