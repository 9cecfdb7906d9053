"""Base fetcher interface and shared HTTP client management.

A price fetcher turns a mapping of token symbols to price API ids into one
batched request and returns a validated PriceQuote for every symbol. A fetch
is all-or-nothing: either every requested symbol has a positive price or the
whole batch is rejected.

A shared httpx.AsyncClient is used across fetchers to avoid connection overhead.

.. code-block:: python

    class MyFetcher(BaseFetcher):
        name = "myfetcher"

        async def fetch_prices(
            self, source_ids: Mapping[str, str]
        ) -> dict[str, PriceQuote]:
            response = await self._get(
                "https://api.example.com/prices",
                params={"ids": ",".join(source_ids.values())},
            )
            return self._build_quotes(source_ids, response.json())
"""

import logging
from abc import ABC, abstractmethod
from typing import ClassVar, Mapping

import httpx

from ..PriceQuote import PriceQuote

logger = logging.getLogger(__name__)


class FetcherError(Exception):
    """Base exception for fetcher errors."""

    pass


class SourceUnavailable(FetcherError):
    """Raised when the price API cannot be reached or answers with an error."""

    pass


class FetcherHTTPError(SourceUnavailable):
    """Raised when HTTP request fails.

    :ivar status_code: HTTP status code from the failed request.
    """

    def __init__(self, status_code: int, message: str):
        """Initialize the HTTP error.

        :param status_code: HTTP status code.
        :param message: Error message from response.
        """
        self.status_code = status_code
        super().__init__(f"HTTP {status_code}: {message}")


class IncompletePriceSet(FetcherError):
    """Raised when a response lacks a valid price for a requested symbol.

    :ivar missing: Symbols with a missing or non-positive price.
    """

    def __init__(self, missing: list[str], message: str | None = None):
        self.missing = missing
        super().__init__(
            message or f"Failed to fetch price for {', '.join(missing)}"
        )


class BaseFetcher(ABC):
    """Abstract base class for price fetchers.

    Subclasses must implement:
        - name: Class variable identifying the source (e.g., "coingecko")
        - fetch_prices(): Async method fetching all requested prices at once

    :cvar name: Unique identifier for this fetcher.
    :cvar DEFAULT_TIMEOUT: Default HTTP request timeout in seconds.
    :ivar api_key: Optional API key for authenticated endpoints.
    :ivar timeout: Request timeout in seconds.
    """

    # Class-level shared HTTP client
    _shared_client: ClassVar[httpx.AsyncClient | None] = None

    # Fetcher identification
    name: ClassVar[str] = ""

    # Default timeout for HTTP requests (seconds)
    DEFAULT_TIMEOUT = 10.0

    def __init__(self, api_key: str | None = None, timeout: float | None = None):
        """Initialize the fetcher.

        :param api_key: Optional API key for authenticated endpoints.
        :param timeout: Request timeout in seconds (default: 10).
        """
        self.api_key = api_key
        self.timeout = timeout or self.DEFAULT_TIMEOUT

    @property
    def has_api_key(self) -> bool:
        """Check if this fetcher has an API key configured."""
        return self.api_key is not None and len(self.api_key) > 0

    @classmethod
    def get_shared_client(cls) -> httpx.AsyncClient:
        """Get or create the shared HTTP client.

        The client is shared across all fetcher instances to reuse connections.

        :returns: Shared httpx.AsyncClient instance.
        """
        if cls._shared_client is None or cls._shared_client.is_closed:
            BaseFetcher._shared_client = httpx.AsyncClient(
                timeout=httpx.Timeout(30.0, connect=10.0),
                limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
                follow_redirects=True,
            )
        return BaseFetcher._shared_client

    @classmethod
    def set_shared_client(cls, client: httpx.AsyncClient | None) -> None:
        """Replace the shared HTTP client (e.g., with a mock transport)."""
        BaseFetcher._shared_client = client

    @classmethod
    async def close_shared_client(cls) -> None:
        """Close the shared HTTP client."""
        client = BaseFetcher._shared_client
        if client is not None and not client.is_closed:
            await client.aclose()
        BaseFetcher._shared_client = None

    @abstractmethod
    async def fetch_prices(self, source_ids: Mapping[str, str]) -> dict[str, PriceQuote]:
        """Fetch current USD prices for all requested tokens in one request.

        :param source_ids: Ordered mapping from token symbol to price API id.
        :returns: Dict mapping every requested symbol to its PriceQuote.
        :raises SourceUnavailable: If the API cannot be reached or errors.
        :raises IncompletePriceSet: If any requested price is missing or invalid.
        """
        pass

    @staticmethod
    def _build_quotes(
        source_ids: Mapping[str, str], prices: Mapping[str, object]
    ) -> dict[str, PriceQuote]:
        """Validate raw prices keyed by symbol and build quotes.

        :param source_ids: Requested symbols (keys) in order.
        :param prices: Raw price values keyed by symbol.
        :returns: Dict mapping every requested symbol to its PriceQuote.
        :raises IncompletePriceSet: If any symbol lacks a positive price.
        """
        quotes: dict[str, PriceQuote] = {}
        missing: list[str] = []
        for symbol in source_ids:
            try:
                quotes[symbol] = PriceQuote(symbol, prices[symbol])
            except (KeyError, ValueError) as e:
                logger.debug("No valid price for %s: %s", symbol, e)
                missing.append(symbol)

        if missing:
            raise IncompletePriceSet(missing)
        return quotes

    async def _get(
        self,
        url: str,
        *,
        params: dict | None = None,
        headers: dict | None = None,
    ) -> httpx.Response:
        """Make an HTTP GET request using the shared client.

        :param url: Request URL.
        :param params: Optional query parameters.
        :param headers: Optional request headers.
        :returns: httpx.Response object.
        :raises FetcherHTTPError: On non-2xx response.
        :raises SourceUnavailable: On network/timeout errors.
        """
        client = self.get_shared_client()
        try:
            response = await client.get(
                url,
                params=params,
                headers=headers,
                timeout=self.timeout,
            )
            if not response.is_success:
                logger.debug(
                    "HTTP GET %s failed with status %s: %s",
                    url,
                    response.status_code,
                    response.text[:200],
                )
                raise FetcherHTTPError(response.status_code, response.text[:200])
            return response
        except httpx.TimeoutException as e:
            raise SourceUnavailable(f"Request timeout: {e}") from e
        except httpx.RequestError as e:
            raise SourceUnavailable(f"Request failed: {e}") from e
