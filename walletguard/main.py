"""WalletGuard API - pre-flight checks for wallet transactions and signatures."""

import logging
import logging.config
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from walletguard.config import Settings, settings
from walletguard.logging_setup import logging_config
from walletguard.middleware import RateLimitMiddleware, MetricsMiddleware
from walletguard.routers import eip712, policies, wallet
from walletguard.services.eip712_inspector import MessageInspector
from walletguard.services.policy_engine import PolicyEvaluator
from walletguard.services.policy_store import PolicyStore
from walletguard.services.trust_registry import DEFAULT_TRUSTED_CONTRACTS, TrustRegistry

logging.config.dictConfig(logging_config(settings.log_level))
logger = logging.getLogger(__name__)

EVALUATION_PATHS = (
    "/api/policies/evaluate",
    "/api/eip712/inspect",
    "/api/wallet/validate-transaction",
)


# ---------------------------------------------------------------------------
# App lifecycle
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        f"WalletGuard API ready: {len(app.state.policy_store)} policies loaded, "
        f"{len(app.state.trust_registry)} trusted contracts",
        extra={"event": "startup"},
    )
    yield
    logger.info("WalletGuard API shutting down", extra={"event": "shutdown"})


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Build the API with its own policy store and trust registry."""
    app_settings = app_settings or settings

    app = FastAPI(
        title="WalletGuard",
        description="Transaction policy and EIP-712 signing guard for wallets",
        version="0.1.0",
        lifespan=lifespan,
    )

    store = PolicyStore()
    registry = TrustRegistry(DEFAULT_TRUSTED_CONTRACTS + tuple(app_settings.trusted_contract_list()))
    app.state.settings = app_settings
    app.state.policy_store = store
    app.state.evaluator = PolicyEvaluator(store, app_settings.usd_cents_per_milli_eth)
    app.state.trust_registry = registry
    app.state.inspector = MessageInspector(registry)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origin_list(),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    evaluation_limit = app_settings.evaluation_rate_limit_per_minute
    app.add_middleware(
        RateLimitMiddleware,
        requests_per_minute=app_settings.rate_limit_per_minute,
        route_limits={path: evaluation_limit for path in EVALUATION_PATHS},
    )
    # Added last so it is outermost and also records rate-limit 429s
    app.add_middleware(MetricsMiddleware)

    app.include_router(policies.router)
    app.include_router(eip712.router)
    app.include_router(wallet.router)

    @app.get("/api/health")
    async def health(request: Request):
        """Liveness probe with registry sizes."""
        state = request.app.state
        return {
            "status": "ok",
            "service": "walletguard",
            "checks": {
                "policies": len(state.policy_store),
                "trusted_contracts": len(state.trust_registry),
            },
        }

    @app.get("/metrics", include_in_schema=False)
    async def metrics():
        """Expose Prometheus metrics for scraping."""
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app


app = create_app()
