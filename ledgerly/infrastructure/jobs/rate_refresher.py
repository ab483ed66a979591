"""Background job keeping the exchange rate cache fresh"""

import asyncio
import logging
from ledgerly.domain.rates import RateCache
from ledgerly.infrastructure.observability.metrics import record_refresh

logger = logging.getLogger(__name__)


async def refresh_rates(cache: RateCache) -> bool:
    """Run one refresh and record its outcome"""
    succeeded = await cache.refresh()
    record_refresh(succeeded, len(cache.get_table()))
    return succeeded


class RateRefresher:
    """
    Periodically refreshes a RateCache.

    A failed refresh leaves the previous table in place; the next tick simply
    tries again, there is no extra backoff.
    """

    def __init__(self, cache: RateCache, interval_seconds: float):
        self.cache = cache
        self.interval_seconds = interval_seconds
        self._task: asyncio.Task | None = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await refresh_rates(self.cache)
            except Exception as e:
                # keep the loop alive, the cache stays stale until the next tick
                logger.exception(f"Unexpected error refreshing rates: {e}", extra={"step": "rate_refresh"})

    async def start(self) -> None:
        """Refresh once right away, then keep refreshing on the interval"""
        await refresh_rates(self.cache)
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
