"""ChainClient: Price feed resolution and on-chain answer submission.

Each token has a ``<SYMBOL>PriceFeed`` contract exposing ``setAnswer(int256)``.
Feed handles are resolved from deployment artifacts once and cached for the
lifetime of the process.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from web3 import Web3
from web3.exceptions import Web3Exception
from web3.types import TxParams

from .ContractUtility import ContractUtility

if TYPE_CHECKING:
    from web3.contract import Contract

logger = logging.getLogger(__name__)

# Default receipt wait timeout in seconds.
DEFAULT_TX_TIMEOUT = 120.0


class FeedError(Exception):
    """Base exception for price feed errors."""

    pass


class FeedResolutionError(FeedError):
    """Raised when a token's feed contract cannot be found on the network."""

    pass


class SubmissionError(FeedError):
    """Raised when setting a feed answer is rejected, reverts or times out."""

    pass


def feed_name(symbol: str) -> str:
    """Return the deployment name of a token's price feed."""
    return f"{symbol}PriceFeed"


class ChainClient:
    """Resolves feed contracts and submits answers, waiting for confirmation.

    :ivar w3: Connected Web3 instance (with signer middleware if configured).
    :ivar network_name: Network whose deployments are used.
    :ivar deployments_dir: Root of the hardhat-deploy deployments folder.
    :ivar tx_timeout: Seconds to wait for a transaction receipt.
    """

    def __init__(
        self,
        w3: Web3,
        network_name: str,
        deployments_dir: str | Path = "deployments",
        tx_timeout: float = DEFAULT_TX_TIMEOUT,
    ) -> None:
        """Initialize the chain client.

        :param w3: Connected Web3 instance.
        :param network_name: Network name, used to locate deployment artifacts.
        :param deployments_dir: Deployments folder (default: "deployments").
        :param tx_timeout: Receipt wait timeout in seconds (default: 120).
        """
        self.w3 = w3
        self.network_name = network_name
        self.deployments_dir = Path(deployments_dir)
        self.tx_timeout = tx_timeout
        self._feeds: dict[str, Contract] = {}

    def get_feed(self, symbol: str) -> Contract:
        """Resolve the price feed contract for a token.

        :param symbol: Token symbol (e.g., "WETH").
        :returns: Contract instance bound to the feed address.
        :raises FeedResolutionError: If the feed is not deployed on this network.
        """
        if symbol in self._feeds:
            return self._feeds[symbol]

        name = feed_name(symbol)
        try:
            address, abi = ContractUtility.get_deployment(
                self.deployments_dir, self.network_name, name
            )
            address = Web3.to_checksum_address(address)
        except FileNotFoundError as e:
            raise FeedResolutionError(
                f"No deployment of {name} on {self.network_name}"
            ) from e
        except (KeyError, ValueError, TypeError) as e:
            # json.JSONDecodeError is a ValueError
            raise FeedResolutionError(f"Invalid deployment artifact for {name}: {e}") from e

        try:
            code = self.w3.eth.get_code(address)
        except (Web3Exception, OSError) as e:
            raise FeedResolutionError(
                f"Could not read code of {name} at {address}: {e}"
            ) from e
        if not code:
            raise FeedResolutionError(
                f"No contract code at {address} for {name} on {self.network_name}"
            )

        contract = self.w3.eth.contract(address=address, abi=abi)
        self._feeds[symbol] = contract
        logger.info(f"Resolved {name} at {address}")
        return contract

    def submit_tx(self, tx: TxParams) -> Any:
        """Send a transaction and wait until it is mined.

        :param tx: Transaction parameters.
        :returns: Transaction receipt.
        :raises SubmissionError: If the transaction reverted.
        """
        tx_hash = self.w3.eth.send_transaction(tx)
        logger.debug(f"Sent transaction {Web3.to_hex(tx_hash)}, waiting for receipt")

        tx_receipt = self.w3.eth.wait_for_transaction_receipt(
            tx_hash, timeout=self.tx_timeout
        )

        if tx_receipt["status"] != 1:
            raise SubmissionError(f"Transaction {Web3.to_hex(tx_hash)} reverted")
        return tx_receipt

    def _ensure_sender(self) -> None:
        """Fall back to the node's first account when no signer is configured.

        :raises SubmissionError: If the node has no accounts either.
        """
        if Web3.is_address(self.w3.eth.default_account):
            return

        accounts = self.w3.eth.accounts
        if not accounts:
            raise SubmissionError("No signer configured and the node has no accounts")
        self.w3.eth.default_account = accounts[0]
        logger.info(f"Sending transactions from node account {accounts[0]}")

    def set_price(self, feed: Contract, answer: int) -> str:
        """Submit a new answer to a price feed.

        :param feed: Feed contract from get_feed().
        :param answer: Fixed-point price.
        :returns: Hex transaction hash of the mined transaction.
        :raises SubmissionError: If the transaction fails, reverts or is not
            mined within tx_timeout.
        """
        try:
            self._ensure_sender()
            tx_params = feed.functions.setAnswer(answer).build_transaction(
                {"gasPrice": self.w3.eth.gas_price}
            )
            tx_receipt = self.submit_tx(tx_params)
        except SubmissionError:
            raise
        except (Web3Exception, ValueError, OSError) as e:
            raise SubmissionError(str(e) or type(e).__name__) from e

        return Web3.to_hex(tx_receipt["transactionHash"])
