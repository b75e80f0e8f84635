"""WalletGuard CLI - manage policies and trusted contracts, run pre-flight checks."""

import json
import os
import sys

import click
import httpx

BASE_URL = os.environ.get("WALLETGUARD_API_URL", "http://localhost:8000/api")


def api_get(path: str):
    r = httpx.get(f"{BASE_URL}{path}")
    r.raise_for_status()
    return r.json()


def api_post(path: str, data: dict):
    r = httpx.post(f"{BASE_URL}{path}", json=data)
    if r.status_code == 400:
        return r.json()
    r.raise_for_status()
    return r.json()


def api_delete(path: str):
    r = httpx.delete(f"{BASE_URL}{path}")
    if r.status_code == 400:
        return r.json()
    r.raise_for_status()
    return r.json()


def _load_json(path: str):
    with open(path) as f:
        return json.load(f)


@click.group()
@click.option("--api-url", default=None, help="API base URL (default: $WALLETGUARD_API_URL)")
def cli(api_url: str | None):
    """WalletGuard - transaction policy and EIP-712 signing guard"""
    global BASE_URL
    if api_url:
        BASE_URL = api_url.rstrip("/")


# --- Policy commands ---


@cli.group()
def policy():
    """Manage transaction policies."""
    pass


@policy.command("list")
def policy_list():
    """List policies."""
    result = api_get("/policies")
    for p in result["policies"]:
        description = p.get("description") or ""
        click.echo(f"  {p['id']}  scope={p['scope']}  rules={p['ruleCount']}  {description}")


@policy.command("show")
@click.argument("policy_id")
def policy_show(policy_id: str):
    """Show a policy document."""
    result = api_get(f"/policies/{policy_id}")
    click.echo(json.dumps(result["policy"], indent=2))


@policy.command("add")
@click.argument("policy_id")
@click.option("--file", "policy_file", required=True, type=click.Path(exists=True), help="JSON policy file")
def policy_add(policy_id: str, policy_file: str):
    """Add or replace a policy from a JSON file."""
    result = api_post("/policies", {"policyId": policy_id, "policy": _load_json(policy_file)})
    if not result["success"]:
        click.echo(f"Policy {policy_id} rejected:")
        for err in result["error"]:
            click.echo(f"  {err['path']}: {err['message']}")
        sys.exit(1)
    click.echo(f"Policy stored: {policy_id} ({len(result['policy']['rules'])} rules)")


@policy.command("remove")
@click.argument("policy_id")
def policy_remove(policy_id: str):
    """Remove a policy."""
    result = api_delete(f"/policies/{policy_id}")
    if not result["success"]:
        click.echo(f"Cannot remove {policy_id}: {result['error']}")
        sys.exit(1)
    click.echo(f"Policy removed: {policy_id}")


@policy.command("evaluate")
@click.option("--policy-id", default=None, help="Policy to evaluate against (default policy if omitted)")
@click.option("--file", "tx_file", required=True, type=click.Path(exists=True), help="JSON transaction file")
def policy_evaluate(policy_id: str | None, tx_file: str):
    """Evaluate a transaction against a policy."""
    result = api_post("/policies/evaluate", {"policyId": policy_id, "transaction": _load_json(tx_file)})
    evaluation = result["evaluation"]
    verdict = "ALLOWED" if evaluation["allowed"] else "BLOCKED"
    click.echo(f"{verdict} ({evaluation['policyId']}): {evaluation['reason']}")


# --- EIP-712 commands ---


@cli.group()
def eip712():
    """Inspect typed-data signing requests."""
    pass


@eip712.command("inspect")
@click.option("--file", "data_file", required=True, type=click.Path(exists=True), help="JSON typed-data file")
@click.option("--json", "as_json", is_flag=True, help="Print the raw inspection result")
def eip712_inspect(data_file: str, as_json: bool):
    """Inspect an EIP-712 payload before signing."""
    result = api_post("/eip712/inspect", {"typedData": _load_json(data_file)})
    if as_json:
        click.echo(json.dumps(result["inspection"], indent=2))
    else:
        click.echo(result["summary"])
    if not result["inspection"]["safe"]:
        sys.exit(2)


# --- Trusted contract commands ---


@cli.group()
def trusted():
    """Manage trusted verifying contracts."""
    pass


@trusted.command("list")
def trusted_list():
    """List trusted contracts."""
    for address in api_get("/eip712/trusted-contracts")["contracts"]:
        click.echo(f"  {address}")


@trusted.command("add")
@click.argument("address")
def trusted_add(address: str):
    """Trust a verifying contract."""
    result = api_post("/eip712/trusted-contracts", {"address": address})
    if not result["success"]:
        click.echo(f"Rejected: {result['error']}")
        sys.exit(1)
    click.echo(f"Trusted: {address.lower()}")


@trusted.command("remove")
@click.argument("address")
def trusted_remove(address: str):
    """Stop trusting a verifying contract."""
    result = api_delete(f"/eip712/trusted-contracts/{address}")
    click.echo(f"Removed: {address}" if result["removed"] else f"Not trusted: {address}")


# --- Wallet commands ---


@cli.group()
def wallet():
    """Wallet pre-flight checks."""
    pass


@wallet.command("validate")
@click.option("--policy-id", default="default")
@click.option("--file", "tx_file", required=True, type=click.Path(exists=True), help="JSON transaction file")
def wallet_validate(policy_id: str, tx_file: str):
    """Validate a wallet transaction (policy + network/amount/address checks)."""
    result = api_post("/wallet/validate-transaction", {"policyId": policy_id, "transaction": _load_json(tx_file)})
    validation = result["validation"]
    click.echo(f"Recommendation: {validation['recommendation']}")
    click.echo(f"  policy: {validation['policyResult']['reason']}")
    for check, passed in validation["securityChecks"].items():
        click.echo(f"  {check}: {'ok' if passed else 'FAILED'}")


if __name__ == "__main__":
    cli()
