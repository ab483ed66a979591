"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Header, Request
from ledgerly.domain.conversion import TransactionNormalizer
from ledgerly.domain.rates import RateCache, RateResolver


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_current_user_id(x_user_id: str = Header(..., min_length=1, description="Acting user identifier")) -> str:
    """Identify the acting user from the X-User-ID header"""
    return x_user_id


def get_rate_cache(request: Request) -> RateCache:
    """Provide the process-wide rate cache owned by the app"""
    return request.app.state.rate_cache


def get_normalizer(cache: RateCache = Depends(get_rate_cache)) -> TransactionNormalizer:
    """Provide a per-request normalizer reading the shared cache"""
    return TransactionNormalizer(RateResolver(cache))
