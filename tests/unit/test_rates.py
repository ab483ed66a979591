"""Unit tests for the rate cache and pairwise rate resolution"""

import asyncio
import pytest
from decimal import Decimal
from typing import Dict
from ledgerly.domain.exceptions import RateNotFound, RatesUnavailable, RefreshFailed
from ledgerly.domain.rates import RateCache, RateResolver, round_rate


class StubProvider:
    def __init__(self, rates: Dict[str, object] | None = None, error: Exception | None = None):
        self.rates = rates or {}
        self.error = error

    async def fetch_rates(self):
        if self.error is not None:
            raise self.error
        return self.rates


def test_round_rate_half_up():
    assert round_rate(Decimal("1.105")) == Decimal("1.11")
    assert round_rate(Decimal("0.9166")) == Decimal("0.92")
    assert round_rate(Decimal("162.8149")) == Decimal("162.81")


def test_cache_starts_empty():
    cache = RateCache()
    assert cache.get_table() == {}
    assert cache.last_refresh is None


def test_publish_rounds_every_rate():
    cache = RateCache(table={"USD": Decimal("1.10345"), "gbp": 0.8291})

    assert cache.get_table() == {"USD": Decimal("1.10"), "GBP": Decimal("0.83")}
    assert cache.last_refresh is not None


def test_published_table_is_read_only():
    cache = RateCache(table={"USD": Decimal("1.10")})
    with pytest.raises(TypeError):
        cache.get_table()["USD"] = Decimal("2")


async def test_refresh_replaces_whole_table():
    cache = RateCache(provider=StubProvider({"USD": Decimal("1.2")}), table={"GBP": Decimal("0.85")})
    old_table = cache.get_table()

    assert await cache.refresh() is True

    assert cache.get_table() == {"USD": Decimal("1.20")}
    # readers holding the old reference keep a complete table
    assert old_table == {"GBP": Decimal("0.85")}


async def test_refresh_failure_keeps_stale_table():
    cache = RateCache(provider=StubProvider(error=RefreshFailed("timeout")), table={"USD": Decimal("1.10")})
    refreshed_at = cache.last_refresh

    assert await cache.refresh() is False

    assert cache.get_table() == {"USD": Decimal("1.10")}
    assert cache.last_refresh == refreshed_at


async def test_refresh_without_provider_is_a_noop():
    cache = RateCache()
    assert await cache.refresh() is False
    assert cache.get_table() == {}


@pytest.mark.parametrize("bad_rate", [float("nan"), float("inf"), Decimal("Infinity"), "n/a"])
async def test_refresh_with_unusable_rate_keeps_stale_table(bad_rate):
    cache = RateCache(
        provider=StubProvider({"USD": bad_rate, "GBP": Decimal("0.9")}),
        table={"USD": Decimal("1.10")},
    )

    assert await cache.refresh() is False

    assert cache.get_table() == {"USD": Decimal("1.10")}


def test_publish_rejects_non_finite_rate():
    cache = RateCache(table={"USD": Decimal("1.10")})

    with pytest.raises(RefreshFailed, match="USD"):
        cache.publish({"USD": float("nan")})

    assert cache.get_table() == {"USD": Decimal("1.10")}


async def test_concurrent_refreshes_publish_complete_tables():
    cache = RateCache(provider=StubProvider({"USD": Decimal("1.1"), "GBP": Decimal("0.9")}))

    results = await asyncio.gather(*(cache.refresh() for _ in range(5)))

    assert all(results)
    assert cache.get_table() == {"USD": Decimal("1.10"), "GBP": Decimal("0.90")}


def test_same_currency_is_exactly_one_without_rates():
    resolver = RateResolver(RateCache())
    assert resolver.rate("JPY", "JPY") == Decimal(1)


def test_empty_cache_raises_rates_unavailable():
    resolver = RateResolver(RateCache())
    with pytest.raises(RatesUnavailable):
        resolver.rate("EUR", "USD")


def test_missing_code_raises_rate_not_found():
    resolver = RateResolver(RateCache(table={"USD": Decimal("1.10")}))

    with pytest.raises(RateNotFound) as exc_info:
        resolver.rate("XYZ", "USD")

    assert exc_info.value.code == "XYZ"


def test_pivot_currency_needs_no_entry():
    resolver = RateResolver(RateCache(pivot_currency="EUR", table={"USD": Decimal("1.10")}))

    assert resolver.rate("EUR", "USD") == Decimal("1.10")
    assert resolver.rate("USD", "EUR") == Decimal("0.91")  # 1 / 1.10 = 0.909


def test_cross_rate_goes_through_pivot_and_rounds():
    resolver = RateResolver(RateCache(table={"USD": Decimal("1.10"), "GBP": Decimal("0.92")}))

    # (1 / 0.92) * 1.10 = 1.1956...
    assert resolver.rate("GBP", "USD") == Decimal("1.20")


@pytest.mark.parametrize(
    "table",
    [
        {"USD": Decimal("1.10"), "GBP": Decimal("0.83")},
        {"USD": Decimal("1.03"), "GBP": Decimal("0.87")},
        {"USD": Decimal("1.37"), "GBP": Decimal("0.91")},
    ],
)
def test_round_trip_stays_within_rounding_tolerance(table):
    resolver = RateResolver(RateCache(table=table))

    for a, b in [("EUR", "USD"), ("GBP", "USD"), ("EUR", "GBP")]:
        round_trip = resolver.rate(a, b) * resolver.rate(b, a)
        assert abs(round_trip - 1) <= Decimal("0.01")
