"""Prometheus metrics definitions for WalletGuard."""

from prometheus_client import Counter, Histogram, Info

# ---------------------------------------------------------------------------
# HTTP layer
# ---------------------------------------------------------------------------

HTTP_REQUESTS_TOTAL = Counter(
    "walletguard_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

HTTP_REQUEST_DURATION = Histogram(
    "walletguard_http_request_duration_seconds",
    "HTTP request latency",
    ["method", "path"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
)

RATE_LIMIT_HITS_TOTAL = Counter(
    "walletguard_rate_limit_hits_total",
    "Number of requests rejected by rate limiter",
)

# ---------------------------------------------------------------------------
# Business: policies
# ---------------------------------------------------------------------------

POLICY_EVALUATIONS_TOTAL = Counter(
    "walletguard_policy_evaluations_total",
    "Transaction policy evaluations",
    ["verdict"],          # "allowed" | "blocked"
)

# ---------------------------------------------------------------------------
# Business: EIP-712
# ---------------------------------------------------------------------------

EIP712_INSPECTIONS_TOTAL = Counter(
    "walletguard_eip712_inspections_total",
    "EIP-712 typed-data inspections",
    ["risk"],             # "low" | "medium" | "high" | "critical"
)

# ---------------------------------------------------------------------------
# Service info
# ---------------------------------------------------------------------------

SERVICE_INFO = Info(
    "walletguard_service",
    "WalletGuard service metadata",
)
SERVICE_INFO.info({"version": "0.1.0"})
