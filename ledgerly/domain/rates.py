"""Exchange rate cache and pairwise rate resolution"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from types import MappingProxyType
from typing import Mapping, Optional, Protocol

from ledgerly.domain.exceptions import RateNotFound, RatesUnavailable, RefreshFailed

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")


def round_rate(value: Decimal) -> Decimal:
    """Round a rate to two decimal places (half up)"""
    return Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


class RateProvider(Protocol):
    """Anything that can fetch a pivot-relative rate table"""

    async def fetch_rates(self) -> Mapping[str, Decimal]: ...


@dataclass(frozen=True)
class RateSnapshot:
    """Published table plus the time it was fetched"""

    table: Mapping[str, Decimal]
    refreshed_at: Optional[datetime]


EMPTY_SNAPSHOT = RateSnapshot(table=MappingProxyType({}), refreshed_at=None)


class RateCache:
    """
    Process-wide holder of the latest rate table.

    The table and its timestamp are published as one immutable snapshot and
    replaced with a single reference assignment, so concurrent readers see
    either the old table or the new one in full.
    """

    def __init__(
        self,
        provider: Optional[RateProvider] = None,
        pivot_currency: str = "EUR",
        table: Optional[Mapping[str, Decimal]] = None,
    ):
        self.provider = provider
        self.pivot_currency = pivot_currency
        self._snapshot = EMPTY_SNAPSHOT
        if table:
            self.publish(table)

    def get_table(self) -> Mapping[str, Decimal]:
        return self._snapshot.table

    @property
    def last_refresh(self) -> Optional[datetime]:
        return self._snapshot.refreshed_at

    def publish(self, table: Mapping[str, Decimal], refreshed_at: Optional[datetime] = None) -> None:
        """
        Round every rate and swap the whole table in.

        Raises:
            RefreshFailed: a rate is not a finite number; the current table stays
        """
        rounded = {}
        for code, value in table.items():
            try:
                rate = Decimal(str(value))
                if not rate.is_finite():
                    raise ArithmeticError("not a finite number")
                rounded[str(code).upper()] = round_rate(rate)
            except ArithmeticError as e:
                raise RefreshFailed(f"Invalid rate for {code}: {value!r}") from e
        self._snapshot = RateSnapshot(
            table=MappingProxyType(rounded),
            refreshed_at=refreshed_at or datetime.now(timezone.utc),
        )

    async def refresh(self) -> bool:
        """
        Fetch a fresh table from the provider and publish it.

        Returns False (keeping the previous table) when the fetch fails.
        """
        if self.provider is None:
            logger.warning("Rate refresh skipped: no provider configured", extra={"step": "rate_refresh"})
            return False

        try:
            table = await self.provider.fetch_rates()
            self.publish(table)
        except RefreshFailed as e:
            logger.error(f"Error updating exchange rates: {e}", extra={"step": "rate_refresh"})
            return False

        logger.info(
            "Exchange rates updated",
            extra={"step": "rate_refresh", "currency_count": len(self._snapshot.table)},
        )
        return True


class RateResolver:
    """Pairwise conversion factors computed from the cache's pivot-relative table"""

    def __init__(self, cache: RateCache):
        self.cache = cache

    def rate(self, from_currency: str, to_currency: str) -> Decimal:
        """
        Factor converting from_currency into to_currency.

        Raises:
            RatesUnavailable: cache has not been populated yet
            RateNotFound: either code is missing from the table
        """
        if from_currency == to_currency:
            return Decimal(1)

        table = self.cache.get_table()
        if not table:
            raise RatesUnavailable()

        rate_from = self._rate_of(table, from_currency)
        rate_to = self._rate_of(table, to_currency)
        return round_rate((Decimal(1) / rate_from) * rate_to)

    def _rate_of(self, table: Mapping[str, Decimal], code: str) -> Decimal:
        if code == self.cache.pivot_currency:
            return Decimal(1)
        rate = table.get(code)
        # a zero rate is as unusable as a missing one
        if not rate:
            raise RateNotFound(code)
        return rate
