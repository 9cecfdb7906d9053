"""CoinGecko fetcher.

Endpoint: https://api.coingecko.com/api/v3/simple/price?ids={ids}&vs_currencies=usd
Rate Limit: 30 calls/min (free), higher with API key
"""

import logging
from typing import Mapping

from ..PriceQuote import PriceQuote
from .base import BaseFetcher, IncompletePriceSet, SourceUnavailable

logger = logging.getLogger(__name__)


class CoinGeckoFetcher(BaseFetcher):
    """Fetcher for CoinGecko API.

    All requested coins are queried with a single /simple/price call.

    API tiers:
        - Free: api.coingecko.com (no key, 30 calls/min)
        - Demo: api.coingecko.com + x-cg-demo-api-key header
        - Pro: pro-api.coingecko.com + x-cg-pro-api-key header

    To use a demo key, prefix with "demo:": API_KEY_COINGECKO=demo:CG-xxxxx
    Pro keys need no prefix: API_KEY_COINGECKO=xxxxx
    """

    name = "coingecko"
    BASE_URL_FREE = "https://api.coingecko.com/api/v3"
    BASE_URL_PRO = "https://pro-api.coingecko.com/api/v3"
    QUOTE = "usd"

    def __init__(self, api_key: str | None = None, timeout: float | None = None):
        """Initialize with optional demo: prefix handling."""
        self._is_demo = False
        if api_key and api_key.lower().startswith("demo:"):
            self._is_demo = True
            api_key = api_key[5:]  # Strip "demo:" prefix
        super().__init__(api_key=api_key, timeout=timeout)

    @property
    def base_url(self) -> str:
        """Return appropriate base URL based on API key type."""
        if not self.has_api_key:
            return self.BASE_URL_FREE
        # Demo keys use free URL, pro keys use pro URL
        return self.BASE_URL_FREE if self._is_demo else self.BASE_URL_PRO

    @property
    def api_header(self) -> tuple[str, str] | None:
        """Return appropriate header name and value for API key."""
        if not self.api_key:
            return None
        header_name = "x-cg-demo-api-key" if self._is_demo else "x-cg-pro-api-key"
        return (header_name, self.api_key)

    async def fetch_prices(self, source_ids: Mapping[str, str]) -> dict[str, PriceQuote]:
        """Fetch USD prices for all tokens in a single API call.

        :param source_ids: Ordered mapping from token symbol to CoinGecko coin id.
        :returns: Dict mapping every requested symbol to its PriceQuote.
        :raises SourceUnavailable: On HTTP/transport errors or a non-JSON body.
        :raises IncompletePriceSet: If any coin is missing or has no positive price.
        """
        if not source_ids:
            return {}

        headers = {"Accept": "application/json"}
        if self.api_header:
            header_name, header_value = self.api_header
            headers[header_name] = header_value

        response = await self._get(
            f"{self.base_url}/simple/price",
            params={
                "ids": ",".join(source_ids.values()),
                "vs_currencies": self.QUOTE,
            },
            headers=headers,
        )

        try:
            data = response.json()
        except ValueError as e:
            raise SourceUnavailable(f"[coingecko] Invalid JSON response: {e}") from e

        if not isinstance(data, dict):
            raise IncompletePriceSet(
                list(source_ids),
                f"[coingecko] Unexpected response type: {type(data).__name__}",
            )

        # Map CoinGecko ids back to token symbols
        prices: dict[str, object] = {}
        for symbol, coin_id in source_ids.items():
            coin_data = data.get(coin_id)
            if not isinstance(coin_data, dict) or self.QUOTE not in coin_data:
                logger.warning(f"[coingecko] Coin {coin_id} ({symbol}) not in response")
                continue
            prices[symbol] = coin_data[self.QUOTE]

        return self._build_quotes(source_ids, prices)
