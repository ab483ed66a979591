"""Unit tests for the exchange rate provider client and refresh job"""

import asyncio
import httpx
import pytest
from decimal import Decimal
from ledgerly.domain.exceptions import RefreshFailed
from ledgerly.domain.rates import RateCache
from ledgerly.infrastructure.clients.rates import ExchangeRateClient
from ledgerly.infrastructure.jobs.rate_refresher import RateRefresher, refresh_rates
from mock_services.rate_server.main import app as mock_rate_app

BASE_URL = "http://rates.test"


def mock_client(path: str = "/api/latest", access_key: str = "test-key") -> ExchangeRateClient:
    return ExchangeRateClient(
        api_url=f"{BASE_URL}{path}",
        access_key=access_key,
        transport=httpx.ASGITransport(app=mock_rate_app),
    )


async def test_fetch_rates_parses_provider_payload():
    rates = await mock_client().fetch_rates()

    assert rates["USD"] == Decimal("1.10345")
    assert rates["EUR"] == Decimal("1")
    assert set(rates) == {"USD", "GBP", "JPY", "CAD", "CHF", "EUR"}


async def test_fetch_rates_http_error():
    with pytest.raises(RefreshFailed, match="401"):
        await mock_client(access_key="invalid").fetch_rates()


async def test_fetch_rates_missing_rates_field():
    with pytest.raises(RefreshFailed, match="No rates found"):
        await mock_client(path="/api/broken").fetch_rates()


async def test_fetch_rates_timeout():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    client = ExchangeRateClient(api_url=f"{BASE_URL}/api/latest", transport=httpx.MockTransport(handler))

    with pytest.raises(RefreshFailed, match="timeout"):
        await client.fetch_rates()


async def test_fetch_rates_invalid_json():
    client = ExchangeRateClient(
        api_url=f"{BASE_URL}/api/latest",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, text="<html>")),
    )

    with pytest.raises(RefreshFailed, match="invalid JSON"):
        await client.fetch_rates()


async def test_fetch_rates_non_numeric_rate():
    client = ExchangeRateClient(
        api_url=f"{BASE_URL}/api/latest",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"rates": {"USD": "n/a"}})),
    )

    with pytest.raises(RefreshFailed, match="Invalid rate value"):
        await client.fetch_rates()


@pytest.mark.parametrize(
    "payload",
    [
        '{"rates": {"USD": NaN}}',
        '{"rates": {"USD": 1e999, "GBP": 0.9}}',
        '{"rates": {"USD": 0}}',
        '{"rates": {"USD": -1.1}}',
    ],
)
async def test_fetch_rates_rejects_unusable_numbers(payload):
    client = ExchangeRateClient(
        api_url=f"{BASE_URL}/api/latest",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, text=payload)),
    )

    with pytest.raises(RefreshFailed, match="Invalid rate value"):
        await client.fetch_rates()


async def test_refresh_with_non_finite_payload_keeps_previous_table():
    client = ExchangeRateClient(
        api_url=f"{BASE_URL}/api/latest",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, text='{"rates": {"USD": 1e999}}')),
    )
    cache = RateCache(provider=client, table={"USD": Decimal("1.10")})

    assert await refresh_rates(cache) is False

    assert cache.get_table() == {"USD": Decimal("1.10")}


async def test_refresh_rates_publishes_rounded_provider_table():
    cache = RateCache(provider=mock_client(), pivot_currency="EUR")

    assert await refresh_rates(cache) is True

    assert cache.get_table()["USD"] == Decimal("1.10")
    assert cache.get_table()["JPY"] == Decimal("162.82")


async def test_refresh_rates_failure_keeps_previous_table():
    cache = RateCache(provider=mock_client(access_key="invalid"), table={"USD": Decimal("1.05")})

    assert await refresh_rates(cache) is False

    assert cache.get_table() == {"USD": Decimal("1.05")}


async def test_refresher_loads_on_start_and_stops_cleanly():
    cache = RateCache(provider=mock_client(), pivot_currency="EUR")
    refresher = RateRefresher(cache, interval_seconds=3600)

    await refresher.start()
    assert cache.get_table()["GBP"] == Decimal("0.83")

    await refresher.stop()
    await refresher.stop()  # second stop is harmless


async def test_refresher_keeps_refreshing_on_interval():
    calls = []

    class CountingProvider:
        async def fetch_rates(self):
            calls.append(1)
            return {"USD": Decimal(len(calls))}

    cache = RateCache(provider=CountingProvider())
    refresher = RateRefresher(cache, interval_seconds=0.01)

    await refresher.start()
    await asyncio.sleep(0.1)
    await refresher.stop()

    assert len(calls) >= 2
    assert cache.get_table()["USD"] >= Decimal(2)
