"""PriceFeeder: Periodic fetch-and-submit loop for on-chain price feeds.

Each cycle fetches USD prices for all configured tokens in one request and
pushes every price to its feed contract, one transaction at a time.

Architecture:
    - First cycle runs immediately, then one cycle every update_interval
    - A failed fetch ends the cycle without any submission
    - Feed resolution and submission failures are isolated per token
    - Any unexpected error is logged and the next cycle runs as scheduled
    - Nothing is carried over between cycles; equal prices are re-submitted
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from .CycleReport import CycleReport, SubmissionOutcome
from .fetchers import BaseFetcher, FetcherError
from .PriceQuote import NUM_DECIMALS

if TYPE_CHECKING:
    from .ChainClient import ChainClient
    from .PriceQuote import PriceQuote
    from .TokenSet import TokenSet

logger = logging.getLogger(__name__)

# Default seconds between cycles (30 minutes).
DEFAULT_UPDATE_INTERVAL = 30 * 60


class PriceFeeder:
    """Keeps on-chain price feeds in sync with an off-chain price source.

    :ivar fetcher: Price fetcher queried once per cycle.
    :ivar chain_client: Client resolving feeds and submitting answers.
    :ivar tokens: Ordered token set to update.
    :ivar update_interval: Seconds between the end of one cycle and the next.
    :ivar decimals: Fixed-point decimals of the feed answers.
    """

    def __init__(
        self,
        fetcher: BaseFetcher,
        chain_client: ChainClient,
        tokens: TokenSet,
        update_interval: float = DEFAULT_UPDATE_INTERVAL,
        decimals: int = NUM_DECIMALS,
    ) -> None:
        """Initialize the price feeder.

        :param fetcher: Price fetcher.
        :param chain_client: Connected chain client.
        :param tokens: Tokens to update, in update order.
        :param update_interval: Seconds between cycles (default: 1800).
        :param decimals: Feed answer decimals (default: 8).
        :raises ValueError: If update_interval is not positive.
        """
        if update_interval <= 0:
            raise ValueError("update_interval must be positive")

        self.fetcher = fetcher
        self.chain_client = chain_client
        self.tokens = tokens
        self.update_interval = update_interval
        self.decimals = decimals
        self.cycles = 0

    def _submit(self, quote: PriceQuote) -> SubmissionOutcome:
        """Push one quote to its feed. Never raises."""
        answer: int | None = None
        try:
            feed = self.chain_client.get_feed(quote.symbol)
            answer = quote.to_fixed_point(self.decimals)
            tx_hash = self.chain_client.set_price(feed, answer)
        except Exception as e:
            logger.warning(f"  {quote.symbol}: {e}")
            return SubmissionOutcome.failed(quote.symbol, str(e) or type(e).__name__, answer)

        logger.info(f"  {quote.symbol}: ${quote.usd_price:,} -> {answer} (tx: {tx_hash})")
        return SubmissionOutcome.succeeded(quote.symbol, answer, tx_hash)

    async def run_cycle(self) -> CycleReport:
        """Fetch all prices and push each one to its feed.

        :returns: Report with one outcome per token, or with fetch_error set
            if prices could not be fetched.
        """
        report = CycleReport()
        self.cycles += 1
        logger.info("=" * 60)
        logger.info(f"Starting price update cycle #{self.cycles}")
        logger.info("=" * 60)

        logger.info(f"Fetching prices from {self.fetcher.name}...")
        try:
            quotes = await self.fetcher.fetch_prices(self.tokens.source_ids)
        except FetcherError as e:
            report.fetch_error = str(e) or type(e).__name__
            logger.error(f"Update cycle failed: {report.fetch_error}")
            logger.error("Will retry on next cycle...")
            return report.finish()

        logger.info("Fetched prices:")
        for symbol in self.tokens:
            logger.info(f"  {symbol:<8}: ${quotes[symbol].usd_price:,}")

        logger.info("Updating price feeds...")
        for symbol in self.tokens:
            report.outcomes.append(self._submit(quotes[symbol]))

        report.finish()
        logger.info(report.summary())
        return report

    async def run(self, max_cycles: int | None = None) -> None:
        """Run cycles until cancelled, or until max_cycles have run.

        :param max_cycles: Optional number of cycles to run (None: forever, 0: none).
        """
        logger.info(
            f"PriceFeeder started: tokens={list(self.tokens)}, "
            f"update_interval={self.update_interval}s"
        )

        count = 0
        try:
            while max_cycles is None or count < max_cycles:
                if count > 0:
                    logger.info(f"Next update in {self.update_interval}s")
                    await asyncio.sleep(self.update_interval)

                try:
                    await self.run_cycle()
                except Exception as e:
                    logger.exception(f"Update cycle failed: {e}")
                    logger.error("Will retry on next cycle...")
                count += 1
        finally:
            # Clean up shared HTTP client
            await BaseFetcher.close_shared_client()
