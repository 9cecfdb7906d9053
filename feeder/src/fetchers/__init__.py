"""
Price fetchers for the feeder.

A fetcher queries one price API for all configured tokens at once and
returns a validated PriceQuote per token.

Usage:
    from feeder.src.fetchers import CoinGeckoFetcher

    fetcher = CoinGeckoFetcher(api_key="demo:CG-xxxxx")
    quotes = await fetcher.fetch_prices({"WETH": "ethereum", "USDC": "usd-coin"})
"""

from .base import (
    BaseFetcher,
    FetcherError,
    FetcherHTTPError,
    IncompletePriceSet,
    SourceUnavailable,
)
from .coingecko import CoinGeckoFetcher

__all__ = [
    # Base classes
    "BaseFetcher",
    "FetcherError",
    "FetcherHTTPError",
    "IncompletePriceSet",
    "SourceUnavailable",
    # Fetcher implementations
    "CoinGeckoFetcher",
]
