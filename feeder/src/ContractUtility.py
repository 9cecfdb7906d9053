"""ContractUtility: Web3 initialization, signer loading and deployment artifacts."""

import json
import logging
import os
from pathlib import Path

from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_utils.exceptions import ValidationError
from web3 import Web3
from web3.middleware import SignAndSendRawMiddlewareBuilder

logger = logging.getLogger(__name__)

# Default RPC endpoints per network.
NETWORKS: dict[str, str] = {
    "mantle": "https://rpc.mantle.xyz",
    "mantleSepolia": "https://rpc.sepolia.mantle.xyz/",
    "arbitrum": "https://arb1.arbitrum.io/rpc",
    "arbitrumSepolia": "https://sepolia-rollup.arbitrum.io/rpc",
    "avalanche": "https://api.avax.network/ext/bc/C/rpc",
    "avalancheFuji": "https://api.avax-test.network/ext/bc/C/rpc",
    "sepolia": "https://ethereum-sepolia-rpc.publicnode.com",
    "baseSepolia": "https://sepolia.base.org",
    "botanix": "https://rpc.botanixlabs.com",
    "localhost": "http://127.0.0.1:8545",
}

# Network specific signer keys, checked before ACCOUNT_KEY.
NETWORK_ACCOUNT_KEY_ENV: dict[str, str] = {
    "arbitrumSepolia": "ARBITRUM_SEPOLIA_ACCOUNT_KEY",
    "arbitrum": "ARBITRUM_ACCOUNT_KEY",
}

KEYS_DIR = Path("keys")


def load_account(
    network_name: str,
    env: dict[str, str] | None = None,
    keys_dir: Path = KEYS_DIR,
) -> LocalAccount | None:
    """Load the signing account from the environment.

    Lookup order:
        1. Network specific key (e.g. ARBITRUM_SEPOLIA_ACCOUNT_KEY)
        2. ACCOUNT_KEY
        3. ACCOUNT_KEY_FILE, a JSON file in ``keys_dir`` holding either
           ``{"key": "0x..."}`` or ``{"mnemonic": "..."}``

    :param network_name: Name of the target network.
    :param env: Environment mapping (default: os.environ).
    :param keys_dir: Directory holding key files.
    :returns: Local account, or None if no credentials are configured.
    :raises ValueError: If the key file or its mnemonic is invalid.
    """
    env = dict(os.environ) if env is None else env

    network_key_env = NETWORK_ACCOUNT_KEY_ENV.get(network_name)
    if network_key_env and env.get(network_key_env):
        return Account.from_key(env[network_key_env])

    if env.get("ACCOUNT_KEY"):
        return Account.from_key(env["ACCOUNT_KEY"])

    key_file = env.get("ACCOUNT_KEY_FILE")
    if key_file:
        with open(Path(keys_dir) / key_file, "r") as file:
            data = json.load(file)
        if not isinstance(data, dict) or not data:
            raise ValueError("Invalid key file")

        if data.get("key"):
            try:
                return Account.from_key(data["key"])
            except (ValidationError, TypeError) as e:
                raise ValueError(f"Invalid key: {e}") from e

        mnemonic = data.get("mnemonic")
        if not mnemonic or not isinstance(mnemonic, str):
            raise ValueError("Invalid mnemonic")

        Account.enable_unaudited_hdwallet_features()
        try:
            return Account.from_mnemonic(mnemonic)
        except ValidationError as e:
            raise ValueError(f"Invalid mnemonic: {e}") from e

    return None


class ContractUtility:
    """Utility for Web3 connection and deployment artifact loading.

    :ivar network: Network RPC URL.
    :ivar account: Signing account, if credentials were configured.
    :ivar w3: Configured Web3 instance.
    """

    def __init__(
        self,
        network_name: str,
        rpc_url: str | None = None,
        account: LocalAccount | None = None,
    ) -> None:
        """Initialize the contract utility.

        :param network_name: Name of the network to connect to. Unknown names
            are used as the RPC URL.
        :param rpc_url: Optional RPC URL overriding the network default.
        :param account: Optional account used to sign transactions locally.
        """
        self.network_name = network_name
        self.network = rpc_url or NETWORKS.get(network_name, network_name)
        self.account = account

        self.w3 = Web3(Web3.HTTPProvider(self.network))
        if account is not None:
            self.w3.middleware_onion.add(SignAndSendRawMiddlewareBuilder.build(account))
            self.w3.eth.default_account = account.address
        else:
            logger.warning(
                "No signer configured, transactions are sent from the node's default account"
            )

    @staticmethod
    def get_deployment(
        deployments_dir: str | Path, network_name: str, contract_name: str
    ) -> tuple[str, list]:
        """Fetch address and ABI of a deployed contract.

        Reads the hardhat-deploy artifact
        ``<deployments_dir>/<network_name>/<contract_name>.json``.

        :param deployments_dir: Root of the deployments folder.
        :param network_name: Network the contract was deployed to.
        :param contract_name: Name of the deployment (e.g., "WETHPriceFeed").
        :returns: Tuple of (address, abi).
        :raises FileNotFoundError: If the artifact does not exist.
        :raises KeyError: If the artifact lacks an address or ABI.
        """
        output_path = (
            Path(deployments_dir) / network_name / f"{contract_name}.json"
        ).resolve()

        with open(output_path, "r") as file:
            contract_data = json.load(file)

        address = contract_data["address"]
        abi = contract_data["abi"]
        return address, abi
