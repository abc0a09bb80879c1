"""Shared pytest fixtures for nft-deployer tests."""

import json
import shutil
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pytest
import responses
import rlp
from eth_account import Account
from eth_utils import keccak, to_checksum_address

from nft_deployer.chain import connect
from nft_deployer.config import load_network_profile
from nft_deployer.types import NetworkProfile

RPC_URL = "http://127.0.0.1:7545"

# Well-known development keys (Hardhat accounts #0 and #1)
DEPLOYER_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
DEPLOYER_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
SECOND_KEY = "0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d"
SECOND_ADDRESS = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
DEPLOYED_CODE = "0x608060405234801561001057600080fd5b50600436106100"
TRANSFER_TOPIC = "0x" + keccak(text="Transfer(address,address,uint256)").hex()

GETH_REVERT = {"code": 3, "message": "execution reverted: ERC721: caller is not token owner"}
GANACHE_REVERT = {"code": -32000, "message": "VM Exception while processing transaction: revert"}


def _address_topic(address: str) -> str:
    return "0x" + "00" * 12 + address.lower()[2:]


class FakeNode:
    """In-memory JSON-RPC node answering the calls web3.py makes."""

    def __init__(self, chain_id: int = 1337):
        self.chain_id = chain_id
        self.gas_price = 20_000_000_000
        self.gas_estimate = 1_000_000
        self.nonces: Dict[str, int] = {}
        self.block_number = 0

        # Behaviour switches
        self.pending_polls = 0  # receipt polls answered with null before mining
        self.mine = True
        self.receipt_status = 1
        self.revert_estimate: Optional[Dict[str, Any]] = None  # JSON-RPC error to return
        self.empty_code = False

        self.methods: List[str] = []
        self.raw_transactions: List[str] = []
        self.calls: List[Tuple[str, str]] = []  # (to, data) of contract calls
        self.receipts: Dict[str, Dict[str, Any]] = {}
        self.code: Dict[str, str] = {}
        self.queued_transfers: List[Tuple[str, str, int]] = []

    def emit_transfer(self, from_address: str, to_address: str, token_id: int) -> None:
        """Attach a Transfer event to the next contract call's receipt."""
        self.queued_transfers.append((from_address, to_address, token_id))

    def handle(self, request):
        body = json.loads(request.body)
        method = body["method"]
        self.methods.append(method)

        handler = getattr(self, f"_{method}", None)
        if handler is None:
            result, error = None, {
                "code": -32601,
                "message": f"the method {method} does not exist/is not available",
            }
        else:
            result, error = handler(body["params"])

        payload: Dict[str, Any] = {"jsonrpc": "2.0", "id": body["id"]}
        if error is not None:
            payload["error"] = error
        else:
            payload["result"] = result
        return (200, {}, json.dumps(payload))

    def _eth_chainId(self, params):
        return hex(self.chain_id), None

    def _eth_gasPrice(self, params):
        return hex(self.gas_price), None

    def _eth_getTransactionCount(self, params):
        return hex(self.nonces.get(params[0].lower(), 0)), None

    def _eth_estimateGas(self, params):
        if self.revert_estimate is not None:
            return None, self.revert_estimate
        return hex(self.gas_estimate), None

    def _transfer_log(self, contract: str, transfer, tx_hash: str, block_hash: str, index: int):
        from_address, to_address, token_id = transfer
        return {
            "address": contract,
            "topics": [
                TRANSFER_TOPIC,
                _address_topic(from_address),
                _address_topic(to_address),
                "0x" + token_id.to_bytes(32, "big").hex(),
            ],
            "data": "0x",
            "blockNumber": hex(self.block_number),
            "blockHash": block_hash,
            "transactionHash": tx_hash,
            "transactionIndex": "0x0",
            "logIndex": hex(index),
            "removed": False,
        }

    def _eth_sendRawTransaction(self, params):
        raw = params[0]
        self.raw_transactions.append(raw)
        sender = Account.recover_transaction(raw).lower()
        nonce = self.nonces.get(sender, 0)
        self.nonces[sender] = nonce + 1

        # Legacy transaction: [nonce, gasPrice, gas, to, value, data, v, r, s]
        fields = rlp.decode(bytes.fromhex(raw[2:]))
        to = "0x" + fields[3].hex() if fields[3] else None

        tx_hash = "0x" + keccak(hexstr=raw).hex()
        self.block_number += 1
        block_hash = "0x" + keccak(text=f"block:{self.block_number}").hex()

        receipt = {
            "transactionHash": tx_hash,
            "transactionIndex": "0x0",
            "blockHash": block_hash,
            "blockNumber": hex(self.block_number),
            "from": sender,
            "to": to,
            "cumulativeGasUsed": hex(self.gas_estimate - 1234),
            "gasUsed": hex(self.gas_estimate - 1234),
            "effectiveGasPrice": hex(self.gas_price),
            "status": hex(self.receipt_status),
            "contractAddress": None,
            "logs": [],
            "logsBloom": "0x" + "00" * 256,
            "type": "0x0",
        }

        if to is None:
            address = "0x" + keccak(text=f"{sender}:{nonce}").hex()[-40:]
            receipt["contractAddress"] = address
            if self.receipt_status == 1 and not self.empty_code:
                self.code[address] = DEPLOYED_CODE
        else:
            self.calls.append((to_checksum_address(to), "0x" + fields[5].hex()))
            if self.receipt_status == 1:
                contract = to_checksum_address(to)
                receipt["logs"] = [
                    self._transfer_log(contract, transfer, tx_hash, block_hash, i)
                    for i, transfer in enumerate(self.queued_transfers)
                ]
            self.queued_transfers = []

        self.receipts[tx_hash] = receipt
        return tx_hash, None

    def _eth_getTransactionReceipt(self, params):
        if not self.mine:
            return None, None
        if self.pending_polls > 0:
            self.pending_polls -= 1
            return None, None
        return self.receipts.get(params[0]), None

    def _eth_getCode(self, params):
        return self.code.get(params[0].lower(), "0x"), None

    @property
    def deployed_addresses(self) -> List[str]:
        return [
            to_checksum_address(r["contractAddress"])
            for r in self.receipts.values()
            if r["contractAddress"]
        ]


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def artifacts_dir(fixtures_dir: Path, tmp_path: Path) -> Path:
    """Copy the sample Hardhat artifacts into a temporary directory."""
    target = tmp_path / "artifacts"
    shutil.copytree(fixtures_dir / "artifacts", target)
    return target


@pytest.fixture
def mynft_artifact_path(artifacts_dir: Path) -> Path:
    """Return path to the sample MyNFT artifact."""
    return artifacts_dir / "contracts" / "MyNFT.sol" / "MyNFT.json"


@pytest.fixture
def write_artifact(artifacts_dir: Path):
    """Write an extra artifact file; returns a factory taking overrides."""

    def _write(
        contract_name: str,
        source_name: Optional[str] = None,
        **overrides: Any,
    ) -> Path:
        source_name = source_name or f"contracts/{contract_name}.sol"
        data = {
            "_format": "hh-sol-artifact-1",
            "contractName": contract_name,
            "sourceName": source_name,
            "abi": [],
            "bytecode": "0x6080604052",
            "deployedBytecode": "0x6080604052",
            "linkReferences": {},
            "deployedLinkReferences": {},
        }
        data.update(overrides)
        path = artifacts_dir / source_name / f"{contract_name}.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data))
        return path

    return _write


@pytest.fixture
def profile() -> NetworkProfile:
    """Ganache profile pointing at the mocked node."""
    return load_network_profile(
        "ganache",
        rpc_url=RPC_URL,
        chain_id=1337,
        private_keys=[DEPLOYER_KEY, SECOND_KEY],
    )


@pytest.fixture
def mocked_responses():
    """Activate responses; unregistered URLs raise ConnectionError."""
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


@pytest.fixture
def fake_node(mocked_responses) -> FakeNode:
    """Serve a FakeNode at RPC_URL."""
    node = FakeNode()
    mocked_responses.add_callback(
        responses.POST,
        RPC_URL,
        callback=node.handle,
        content_type="application/json",
    )
    return node


@pytest.fixture
def clean_env(monkeypatch):
    """Remove network settings that could leak in from the environment."""
    for var in (
        "GANACHE_RPC_URL",
        "GANACHE_CHAIN_ID",
        "GANACHE_PRIVATE_KEYS",
        "LOCALHOST_RPC_URL",
        "LOCALHOST_CHAIN_ID",
        "LOCALHOST_PRIVATE_KEYS",
        "SOLC_VERSION",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


@pytest.fixture
def w3(fake_node):
    """Web3 instance connected to the FakeNode."""
    return connect(RPC_URL)
