"""CoinGecko market data provider.

Fetches the current price, market cap and supply figures the analytics
stage needs. Total supply for dilution metrics is the max supply when
CoinGecko reports one, otherwise the total supply.
"""

import logging
import time
from typing import Any

import httpx

from ...core.exceptions import DataSourceError, RateLimitError
from ...core.models import MarketSnapshot
from ...core.types import DataSource
from ..base import CachedProvider

logger = logging.getLogger(__name__)


class CoinGeckoMarketProvider(CachedProvider):
    """Fetches market snapshots from CoinGecko."""

    SOURCE = DataSource.COINGECKO
    BASE_URL = "https://api.coingecko.com/api/v3"
    PRO_URL = "https://pro-api.coingecko.com/api/v3"

    def __init__(
        self,
        api_key: str | None = None,
        rate_limit_calls: int = 30,
        rate_limit_period: int = 60,
        cache_ttl_seconds: int = 1800,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Initialize CoinGecko market provider.

        Args:
            api_key: Optional CoinGecko Pro API key
            rate_limit_calls: Rate limit per period
            rate_limit_period: Period in seconds
            cache_ttl_seconds: Cache TTL
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        super().__init__(
            rate_limit_calls=rate_limit_calls,
            rate_limit_period=rate_limit_period,
            cache_ttl_seconds=cache_ttl_seconds,
        )
        self.api_key = api_key
        self.base_url = self.PRO_URL if api_key else self.BASE_URL
        self.timeout = timeout
        self.transport = transport

    def _client(self, timeout: float | None = None) -> httpx.Client:
        return httpx.Client(timeout=timeout or self.timeout, transport=self.transport)

    def is_available(self) -> bool:
        """Check if CoinGecko API is reachable."""
        try:
            self._wait_for_rate_limit()
            with self._client(timeout=10.0) as client:
                response = client.get(f"{self.base_url}/ping")
                return response.status_code == 200
        except httpx.HTTPError:
            return False

    def _make_request(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Make a rate-limited request to CoinGecko."""
        self._wait_for_rate_limit()
        start_time = time.time()

        headers = {}
        if self.api_key:
            headers["x-cg-pro-api-key"] = self.api_key

        url = f"{self.base_url}{endpoint}"

        try:
            with self._client() as client:
                response = client.get(url, params=params, headers=headers)

            duration_ms = int((time.time() - start_time) * 1000)

            if response.status_code == 429:
                self._record_audit(
                    action="fetch",
                    endpoint=endpoint,
                    success=False,
                    error_message="Rate limit exceeded",
                    duration_ms=duration_ms,
                )
                raise RateLimitError(
                    source="coingecko",
                    retry_after_seconds=60,
                    endpoint=endpoint,
                )

            response.raise_for_status()

            try:
                payload = response.json()
            except ValueError:
                self._record_audit(
                    action="fetch",
                    endpoint=endpoint,
                    success=False,
                    error_message="Response body is not JSON",
                    duration_ms=duration_ms,
                )
                raise DataSourceError(
                    source="coingecko",
                    message="Response body is not JSON",
                    endpoint=endpoint,
                    status_code=response.status_code,
                )

            self._record_audit(
                action="fetch",
                endpoint=endpoint,
                success=True,
                duration_ms=duration_ms,
            )

            return payload

        except httpx.HTTPStatusError as e:
            self._record_audit(
                action="fetch",
                endpoint=endpoint,
                success=False,
                error_message=f"HTTP {e.response.status_code}",
            )
            raise DataSourceError(
                source="coingecko",
                message=f"HTTP {e.response.status_code}",
                endpoint=endpoint,
                status_code=e.response.status_code,
            )
        except httpx.RequestError as e:
            self._record_audit(
                action="fetch",
                endpoint=endpoint,
                success=False,
                error_message=str(e),
            )
            raise DataSourceError(
                source="coingecko",
                message=str(e),
                endpoint=endpoint,
            )

    def get_snapshot(self, coingecko_id: str) -> MarketSnapshot | None:
        """
        Get the current market snapshot for a token.

        Args:
            coingecko_id: CoinGecko token ID

        Returns:
            MarketSnapshot, or None if CoinGecko has no market data for the ID

        Raises:
            DataSourceError: On HTTP or network failure, or an unusable payload
        """
        cache_key = f"market:{coingecko_id}"
        cached = self._get_from_cache(cache_key)
        if cached is not None:
            return cached

        data = self._make_request(
            "/coins/markets",
            params={"vs_currency": "usd", "ids": coingecko_id},
        )

        # Plan and quota errors come back as a {"status": {...}} object
        if not isinstance(data, list):
            raise DataSourceError(
                source="coingecko",
                message=f"Unexpected /coins/markets payload for {coingecko_id}",
                endpoint="/coins/markets",
            )

        if not data:
            logger.warning(f"No market data available for {coingecko_id}")
            return None

        snapshot = self._to_snapshot(data[0])
        self._set_cache(cache_key, snapshot)
        return snapshot

    def _to_snapshot(self, coin: dict[str, Any]) -> MarketSnapshot:
        """Map a /coins/markets entry to a MarketSnapshot."""
        max_supply = coin.get("max_supply")
        total_supply = max_supply or coin.get("total_supply") or 0

        return MarketSnapshot(
            name=coin.get("name") or coin.get("id", ""),
            symbol=(coin.get("symbol") or "").upper(),
            coingecko_id=coin.get("id", ""),
            image=coin.get("image") or "",
            current_price=coin.get("current_price") or 0.0,
            market_cap=coin.get("market_cap") or 0.0,
            circulating_supply=coin.get("circulating_supply") or 0.0,
            total_supply=total_supply,
            max_supply=max_supply,
            source=DataSource.COINGECKO,
        )
