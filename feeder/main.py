#!/usr/bin/env python3
"""Oracle Price Feeder.

Fetches token prices from CoinGecko and pushes them to on-chain
<SYMBOL>PriceFeed contracts on a fixed interval.

Run manually or under a process manager. See .env.example for configuration.
"""

import argparse
import asyncio
import logging
import os
import sys

from .src.ChainClient import DEFAULT_TX_TIMEOUT, ChainClient
from .src.ContractUtility import NETWORKS, ContractUtility, load_account
from .src.fetchers import CoinGeckoFetcher
from .src.PriceFeeder import PriceFeeder
from .src.TokenSet import DEFAULT_TOKENS, TokenSet, parse_source_ids

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser. Defaults come from environment variables."""
    parser = argparse.ArgumentParser(
        description="Oracle Price Feeder: keeps on-chain price feeds in sync with CoinGecko",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Known networks:
  {', '.join(NETWORKS)}

Examples:
  # Update the default feeds every 30 minutes on Mantle Sepolia
  python -m feeder.main --network mantleSepolia

  # Single update of two feeds with a demo API key
  python -m feeder.main --tokens WETH,USDC --api-key demo:CG-xxxxx --once

Environment variables (CLI args take precedence):
  NETWORK, RPC_URL, TOKENS, SOURCE_IDS, UPDATE_INTERVAL_MINUTES,
  DEPLOYMENTS_DIR, API_KEY_COINGECKO, FETCH_TIMEOUT, TX_TIMEOUT,
  ACCOUNT_KEY, ACCOUNT_KEY_FILE, ARBITRUM_ACCOUNT_KEY,
  ARBITRUM_SEPOLIA_ACCOUNT_KEY
""",
    )

    parser.add_argument(
        "--network",
        type=str,
        help=f"Network to connect to ({', '.join(NETWORKS)})",
        default=os.environ.get("NETWORK") or "mantleSepolia",
    )

    parser.add_argument(
        "--rpc-url",
        dest="rpc_url",
        type=str,
        help="RPC URL overriding the network default",
        default=os.environ.get("RPC_URL"),
    )

    parser.add_argument(
        "--tokens",
        type=str,
        help=f"Comma-separated token symbols (default: {DEFAULT_TOKENS})",
        default=os.environ.get("TOKENS") or DEFAULT_TOKENS,
    )

    parser.add_argument(
        "--source-ids",
        dest="source_ids",
        type=str,
        help="Comma-separated CoinGecko id overrides (e.g., WETH=ethereum,ARB=arbitrum)",
        default=os.environ.get("SOURCE_IDS"),
    )

    parser.add_argument(
        "--update-interval",
        dest="update_interval",
        type=float,
        help="Minutes between update cycles (minimum: 1, default: 30)",
        default=float(os.environ.get("UPDATE_INTERVAL_MINUTES") or "30"),
    )

    parser.add_argument(
        "--deployments-dir",
        dest="deployments_dir",
        type=str,
        help="hardhat-deploy deployments folder (default: deployments)",
        default=os.environ.get("DEPLOYMENTS_DIR") or "deployments",
    )

    parser.add_argument(
        "--api-key",
        dest="api_key",
        type=str,
        help='CoinGecko API key (prefix demo keys with "demo:")',
        default=os.environ.get("API_KEY_COINGECKO"),
    )

    parser.add_argument(
        "--fetch-timeout",
        dest="fetch_timeout",
        type=float,
        help="Timeout for price API requests in seconds (default: 10.0)",
        default=float(os.environ.get("FETCH_TIMEOUT") or "10.0"),
    )

    parser.add_argument(
        "--tx-timeout",
        dest="tx_timeout",
        type=float,
        help=f"Seconds to wait for a transaction to be mined (default: {DEFAULT_TX_TIMEOUT})",
        default=float(os.environ.get("TX_TIMEOUT") or DEFAULT_TX_TIMEOUT),
    )

    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single update cycle and exit",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the Oracle Price Feeder CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Configure logging level
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    # Validate arguments
    if args.update_interval < 1:
        parser.error("--update-interval must be at least 1 minute")

    if args.fetch_timeout <= 0:
        parser.error("--fetch-timeout must be positive")

    if args.tx_timeout <= 0:
        parser.error("--tx-timeout must be positive")

    try:
        tokens = TokenSet.from_string(args.tokens, parse_source_ids(args.source_ids))
    except ValueError as e:
        parser.error(str(e))

    try:
        account = load_account(args.network)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load signer: {e}")
        sys.exit(1)

    contract_utility = ContractUtility(args.network, rpc_url=args.rpc_url, account=account)
    fetcher = CoinGeckoFetcher(api_key=args.api_key, timeout=args.fetch_timeout)

    # Log configuration
    logger.info("=" * 60)
    logger.info("Oracle Price Feeder")
    logger.info("=" * 60)
    logger.info(f"Network:           {args.network}")
    logger.info(f"RPC:               {contract_utility.network}")
    logger.info(f"Signer:            {account.address if account else 'node default'}")
    logger.info(f"Deployments:       {args.deployments_dir}")
    logger.info(f"Tokens:            {', '.join(tokens)}")
    logger.info(f"Update Interval:   {args.update_interval:g} minutes")
    logger.info(f"Price API:         {fetcher.base_url}")
    logger.info("Press Ctrl+C to stop")
    logger.info("=" * 60)

    try:
        price_feeder = PriceFeeder(
            fetcher=fetcher,
            chain_client=ChainClient(
                contract_utility.w3,
                args.network,
                deployments_dir=args.deployments_dir,
                tx_timeout=args.tx_timeout,
            ),
            tokens=tokens,
            update_interval=args.update_interval * 60,
        )
        asyncio.run(price_feeder.run(max_cycles=1 if args.once else None))
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
