"""Unit tests for ContractUtility."""

import json

import pytest

from feeder.src.ContractUtility import NETWORKS, ContractUtility, load_account

# Well-known hardhat/anvil development account #0.
DEV_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
DEV_MNEMONIC = "test test test test test test test test test test test junk"
DEV_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

OTHER_KEY = "0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d"
OTHER_ADDRESS = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"


class TestLoadAccount:
    """Test signer lookup from the environment."""

    def test_no_credentials(self, tmp_path) -> None:
        """No credentials means no local signer."""
        assert load_account("mantleSepolia", env={}, keys_dir=tmp_path) is None

    def test_account_key(self) -> None:
        """ACCOUNT_KEY is used for any network."""
        account = load_account("mantleSepolia", env={"ACCOUNT_KEY": DEV_KEY})
        assert account.address == DEV_ADDRESS

    def test_network_specific_key_wins(self) -> None:
        """Arbitrum networks prefer their own key."""
        env = {"ACCOUNT_KEY": DEV_KEY, "ARBITRUM_SEPOLIA_ACCOUNT_KEY": OTHER_KEY}
        assert load_account("arbitrumSepolia", env=env).address == OTHER_ADDRESS
        assert load_account("arbitrum", env=env).address == DEV_ADDRESS
        assert load_account("mantle", env=env).address == DEV_ADDRESS

    def test_key_file_with_key(self, tmp_path) -> None:
        """A key file may hold a raw private key."""
        (tmp_path / "feeder.json").write_text(json.dumps({"key": DEV_KEY}))
        account = load_account(
            "mantle", env={"ACCOUNT_KEY_FILE": "feeder.json"}, keys_dir=tmp_path
        )
        assert account.address == DEV_ADDRESS

    def test_key_file_with_mnemonic(self, tmp_path) -> None:
        """A key file may hold a mnemonic; the first account is used."""
        (tmp_path / "feeder.json").write_text(json.dumps({"mnemonic": DEV_MNEMONIC}))
        account = load_account(
            "mantle", env={"ACCOUNT_KEY_FILE": "feeder.json"}, keys_dir=tmp_path
        )
        assert account.address == DEV_ADDRESS

    def test_account_key_wins_over_key_file(self, tmp_path) -> None:
        """ACCOUNT_KEY is checked before ACCOUNT_KEY_FILE."""
        env = {"ACCOUNT_KEY": OTHER_KEY, "ACCOUNT_KEY_FILE": "missing.json"}
        assert load_account("mantle", env=env, keys_dir=tmp_path).address == OTHER_ADDRESS

    def test_empty_key_file(self, tmp_path) -> None:
        """An empty key file is rejected."""
        (tmp_path / "feeder.json").write_text("{}")
        with pytest.raises(ValueError, match="Invalid key file"):
            load_account("mantle", env={"ACCOUNT_KEY_FILE": "feeder.json"}, keys_dir=tmp_path)

    def test_key_file_without_mnemonic(self, tmp_path) -> None:
        """A key file without key or mnemonic is rejected."""
        (tmp_path / "feeder.json").write_text(json.dumps({"address": DEV_ADDRESS}))
        with pytest.raises(ValueError, match="Invalid mnemonic"):
            load_account("mantle", env={"ACCOUNT_KEY_FILE": "feeder.json"}, keys_dir=tmp_path)

    def test_key_file_not_an_object(self, tmp_path) -> None:
        """A key file holding a JSON list is rejected."""
        (tmp_path / "feeder.json").write_text(json.dumps([DEV_KEY]))
        with pytest.raises(ValueError, match="Invalid key file"):
            load_account("mantle", env={"ACCOUNT_KEY_FILE": "feeder.json"}, keys_dir=tmp_path)

    def test_key_file_with_bad_mnemonic(self, tmp_path) -> None:
        """A mnemonic that is not a valid phrase is rejected."""
        (tmp_path / "feeder.json").write_text(
            json.dumps({"mnemonic": "not a real mnemonic phrase"})
        )
        with pytest.raises(ValueError, match="Invalid mnemonic"):
            load_account("mantle", env={"ACCOUNT_KEY_FILE": "feeder.json"}, keys_dir=tmp_path)

    def test_missing_key_file(self, tmp_path) -> None:
        """A missing key file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_account("mantle", env={"ACCOUNT_KEY_FILE": "nope.json"}, keys_dir=tmp_path)


class TestContractUtility:
    """Test Web3 construction."""

    def test_known_network(self) -> None:
        """Known networks use their default RPC."""
        utility = ContractUtility("mantleSepolia")
        assert utility.network == NETWORKS["mantleSepolia"]
        assert utility.w3.provider.endpoint_uri == "https://rpc.sepolia.mantle.xyz/"

    def test_rpc_url_override(self) -> None:
        """An explicit RPC URL wins over the network default."""
        utility = ContractUtility("mantle", rpc_url="http://node:8545")
        assert utility.network == "http://node:8545"

    def test_unknown_network_is_url(self) -> None:
        """Unknown network names are used as RPC URLs."""
        utility = ContractUtility("http://10.0.0.1:8545")
        assert utility.network == "http://10.0.0.1:8545"

    def test_signer_sets_default_account(self) -> None:
        """With a signer, transactions are sent from its address."""
        account = load_account("localhost", env={"ACCOUNT_KEY": DEV_KEY})
        utility = ContractUtility("localhost", account=account)
        assert utility.account is account
        assert utility.w3.eth.default_account == DEV_ADDRESS


class TestGetDeployment:
    """Test hardhat-deploy artifact loading."""

    def test_reads_address_and_abi(self, tmp_path) -> None:
        """Address and ABI are read from <dir>/<network>/<name>.json."""
        abi = [{"type": "function", "name": "setAnswer", "inputs": []}]
        network_dir = tmp_path / "mantleSepolia"
        network_dir.mkdir()
        (network_dir / "WETHPriceFeed.json").write_text(
            json.dumps({"address": DEV_ADDRESS, "abi": abi, "receipt": {}})
        )

        address, loaded_abi = ContractUtility.get_deployment(
            tmp_path, "mantleSepolia", "WETHPriceFeed"
        )
        assert address == DEV_ADDRESS
        assert loaded_abi == abi

    def test_missing_artifact(self, tmp_path) -> None:
        """Missing artifacts raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            ContractUtility.get_deployment(tmp_path, "mantle", "BTCPriceFeed")

    def test_missing_address(self, tmp_path) -> None:
        """Artifacts without an address raise KeyError."""
        (tmp_path / "mantle").mkdir()
        (tmp_path / "mantle" / "BTCPriceFeed.json").write_text(json.dumps({"abi": []}))
        with pytest.raises(KeyError):
            ContractUtility.get_deployment(tmp_path, "mantle", "BTCPriceFeed")
