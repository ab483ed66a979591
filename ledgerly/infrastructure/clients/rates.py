"""Exchange rate provider HTTP client"""

import httpx
from decimal import Decimal, InvalidOperation
from typing import Dict, Optional
from ledgerly.domain.exceptions import RefreshFailed
from ledgerly.config import settings


class ExchangeRateClient:
    """Client for a fixer.io style rate API (rates relative to the provider's base)"""

    def __init__(
        self,
        api_url: str | None = None,
        access_key: str | None = None,
        timeout: float | None = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url or settings.exchange_rate_api_url
        self.access_key = access_key if access_key is not None else settings.exchange_rate_api_key
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def fetch_rates(self) -> Dict[str, Decimal]:
        """
        Fetch the latest rate table.

        Raises:
            RefreshFailed: On timeout, HTTP errors, or a response without usable rates
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(self.api_url, params={"access_key": self.access_key})
                response.raise_for_status()
                data = response.json()
            except httpx.TimeoutException as e:
                raise RefreshFailed(f"Rate API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise RefreshFailed(f"Rate API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise RefreshFailed(f"Rate API unreachable: {e}") from e
            except ValueError as e:
                raise RefreshFailed(f"Rate API returned invalid JSON: {e}") from e

        rates = data.get("rates") if isinstance(data, dict) else None
        if not isinstance(rates, dict) or not rates:
            raise RefreshFailed(f"No rates found in response: {data}")

        try:
            table = {str(code).upper(): Decimal(str(value)) for code, value in rates.items()}
        except (InvalidOperation, TypeError) as e:
            raise RefreshFailed(f"Invalid rate value in response: {e}") from e

        # json accepts NaN and 1e999, neither is a usable rate
        for code, value in table.items():
            if not value.is_finite() or value <= 0:
                raise RefreshFailed(f"Invalid rate value in response: {code}={value}")
        return table
