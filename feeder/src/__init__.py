"""
Oracle Price Feeder - On-Chain Price Feed Updater

This module keeps on-chain price feeds in sync with an off-chain price API:
- TokenSet: Ordered token symbols and their price API ids
- PriceQuote: Validated USD price and fixed-point conversion
- ChainClient: Feed contract resolution and confirmed submission
- PriceFeeder: Periodic fetch-and-submit loop
- CycleReport: Per-cycle submission outcomes
- fetchers: Price API fetcher implementations
"""

from .ChainClient import ChainClient, FeedError, FeedResolutionError, SubmissionError
from .CycleReport import CycleReport, SubmissionOutcome
from .PriceFeeder import DEFAULT_UPDATE_INTERVAL, PriceFeeder
from .PriceQuote import NUM_DECIMALS, PriceQuote, to_fixed_point
from .TokenSet import DEFAULT_SOURCE_IDS, TokenSet

__all__ = [
    "ChainClient",
    "CycleReport",
    "DEFAULT_SOURCE_IDS",
    "DEFAULT_UPDATE_INTERVAL",
    "FeedError",
    "FeedResolutionError",
    "NUM_DECIMALS",
    "PriceFeeder",
    "PriceQuote",
    "SubmissionError",
    "SubmissionOutcome",
    "TokenSet",
    "to_fixed_point",
]
