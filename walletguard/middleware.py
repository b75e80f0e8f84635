"""Middleware for rate limiting and Prometheus metrics."""

import re
import time
from collections import deque

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from walletguard.metrics import HTTP_REQUESTS_TOTAL, HTTP_REQUEST_DURATION, RATE_LIMIT_HITS_TOTAL

WINDOW_SECONDS = 60.0


def _route_path(request: Request) -> str:
    """Return the route template (e.g. /api/policies/{policy_id}) instead of the
    resolved path, to avoid high-cardinality metric labels."""
    route = request.scope.get("route")
    if route and hasattr(route, "path"):
        return route.path
    # Fallback: collapse addresses so /api/eip712/trusted-contracts/0xabc… → …/{address}
    return re.sub(r"/0x[0-9a-fA-F]+", "/{address}", request.url.path)


class MetricsMiddleware(BaseHTTPMiddleware):
    """Record Prometheus HTTP metrics for every request."""

    async def dispatch(self, request: Request, call_next):
        method = request.method
        start = time.perf_counter()

        response = await call_next(request)

        duration = time.perf_counter() - start
        path = _route_path(request)
        status = str(response.status_code)

        HTTP_REQUESTS_TOTAL.labels(method=method, path=path, status=status).inc()
        HTTP_REQUEST_DURATION.labels(method=method, path=path).observe(duration)

        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Sliding one-minute window per client IP.

    Paths listed in ``route_limits`` are counted against their own budget
    instead of the general one. Clients idle for a whole window are swept out
    every ``sweep_interval`` seconds.
    """

    def __init__(
        self,
        app,
        requests_per_minute: int = 60,
        route_limits: dict[str, int] | None = None,
        sweep_interval: float = WINDOW_SECONDS,
        clock=time.monotonic,
    ):
        super().__init__(app)
        self.rpm = requests_per_minute
        self.route_limits = dict(route_limits or {})
        self.sweep_interval = sweep_interval
        self.clock = clock
        # (client_ip, bucket) -> request timestamps, oldest first
        self.windows: dict[tuple[str, str], deque[float]] = {}
        self._last_sweep = clock()

    def _bucket(self, path: str) -> tuple[str, int]:
        if path in self.route_limits:
            return path, self.route_limits[path]
        return "*", self.rpm

    def sweep(self, now: float) -> None:
        """Forget every client whose newest request has left the window."""
        cutoff = now - WINDOW_SECONDS
        stale = [key for key, hits in self.windows.items() if not hits or hits[-1] <= cutoff]
        for key in stale:
            del self.windows[key]
        self._last_sweep = now

    def allow(self, client_ip: str, path: str) -> bool:
        now = self.clock()
        if now - self._last_sweep >= self.sweep_interval:
            self.sweep(now)

        bucket, limit = self._bucket(path)
        key = (client_ip, bucket)
        hits = self.windows.get(key)
        if hits is None:
            hits = self.windows[key] = deque()

        cutoff = now - WINDOW_SECONDS
        while hits and hits[0] <= cutoff:
            hits.popleft()

        if len(hits) >= limit:
            return False
        hits.append(now)
        return True

    async def dispatch(self, request: Request, call_next):
        client_ip = request.client.host if request.client else "unknown"
        if not self.allow(client_ip, request.url.path):
            RATE_LIMIT_HITS_TOTAL.inc()
            return JSONResponse(
                status_code=429,
                content={"success": False, "error": "Rate limit exceeded. Try again later."},
            )
        return await call_next(request)
