"""FastAPI application factory"""

from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from ledgerly.api.middleware import RequestIDMiddleware, MetricsMiddleware
from ledgerly.api.v1 import transactions, goals, budgets, reports, rates
from ledgerly.domain.rates import RateCache
from ledgerly.infrastructure.clients.rates import ExchangeRateClient
from ledgerly.infrastructure.jobs.rate_refresher import RateRefresher
from ledgerly.infrastructure.observability.logging import setup_logging
from ledgerly.config import settings

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Keep the rate cache refreshed for the lifetime of the process"""
    refresher = None
    if settings.rate_refresh_enabled:
        refresher = RateRefresher(app.state.rate_cache, settings.rate_refresh_interval_seconds)
        await refresher.start()
    yield
    if refresher is not None:
        await refresher.stop()


def create_app(rate_cache: Optional[RateCache] = None) -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Ledgerly",
        description="Personal finance API with multi-currency reporting",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # One cache per process, shared by every request
    if rate_cache is None:
        rate_cache = RateCache(
            provider=ExchangeRateClient(),
            pivot_currency=settings.rate_pivot_currency,
        )
    app.state.rate_cache = rate_cache

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {
            "status": "ok",
            "service": settings.service_name,
            "rates_loaded": bool(app.state.rate_cache.get_table()),
        }

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(transactions.router, prefix="/v1", tags=["transactions"])
    app.include_router(goals.router, prefix="/v1", tags=["goals"])
    app.include_router(budgets.router, prefix="/v1", tags=["budgets"])
    app.include_router(reports.router, prefix="/v1", tags=["reports"])
    app.include_router(rates.router, prefix="/v1", tags=["rates"])

    return app


app = create_app()
