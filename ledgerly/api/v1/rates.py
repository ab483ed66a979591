"""/v1/rates - published exchange rates and on-demand refresh"""

import logging
from fastapi import APIRouter, Depends, HTTPException

from ledgerly.api.v1.schemas import RateStatusResponse
from ledgerly.api.dependencies import get_rate_cache
from ledgerly.domain.rates import RateCache
from ledgerly.infrastructure.jobs.rate_refresher import refresh_rates

router = APIRouter()


def _status(cache: RateCache) -> RateStatusResponse:
    return RateStatusResponse(
        pivot_currency=cache.pivot_currency,
        last_updated=cache.last_refresh,
        rates={code: float(rate) for code, rate in cache.get_table().items()},
    )


@router.get("/rates", response_model=RateStatusResponse)
def get_rates(cache: RateCache = Depends(get_rate_cache)):
    """Current rate table (rates relative to the pivot currency) and its age"""
    return _status(cache)


@router.post("/rates/refresh", response_model=RateStatusResponse)
async def refresh(cache: RateCache = Depends(get_rate_cache)):
    """
    Refresh rates now instead of waiting for the background job.

    The previous table stays published when the provider fails.
    """
    if not await refresh_rates(cache):
        logging.warning("Manual rate refresh failed", extra={"step": "rate_refresh"})
        raise HTTPException(status_code=503, detail="Exchange rate provider unavailable")
    return _status(cache)
