"""Shared pytest fixtures for evm-contract-deployer tests."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
import responses

from evm_deployer.artifacts import ArtifactStore
from evm_deployer.types import NetworkConfig

# Hardhat's first development account and its well-known key
DEPLOYER_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
DEPLOYER_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"

# Address of the first contract deployed by that account on a fresh node
CONTRACT_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
RPC_URL = "http://test-rpc.example.com"
TX_HASH = "0x" + "ab" * 32
INITIAL_SUPPLY = 1000000 * 10**18


def make_receipt(
    status: str = "0x1",
    contract_address: Optional[str] = CONTRACT_ADDRESS.lower(),
    transaction_hash: str = TX_HASH,
) -> Dict[str, Any]:
    """Build a receipt as returned by eth_getTransactionReceipt."""
    return {
        "transactionHash": transaction_hash,
        "blockNumber": "0x1",
        "blockHash": "0x" + "cd" * 32,
        "contractAddress": contract_address,
        "from": DEPLOYER_ADDRESS.lower(),
        "to": None,
        "gasUsed": "0x5208",
        "status": status,
        "logs": [],
    }


class FakeRpcClient:
    """
    In-memory stand-in for RpcClient.

    Receipts are served in order from `receipts`; the last one repeats.
    Exception instances in `receipts` are raised instead of returned.
    """

    endpoint_url = "http://fake-rpc.example.com"

    def __init__(self):
        self.chain = 31337
        self.node_accounts: List[str] = [DEPLOYER_ADDRESS.lower()]
        self.receipts: List[Any] = [make_receipt()]
        self.transaction: Optional[Dict[str, Any]] = {"hash": TX_HASH}
        self.send_error: Optional[Exception] = None
        self.calls: List[tuple] = []
        self.receipt_timeouts: List[Optional[float]] = []

    @property
    def submissions(self) -> List[tuple]:
        return [
            call
            for call in self.calls
            if call[0] in ("eth_sendTransaction", "eth_sendRawTransaction")
        ]

    def chain_id(self) -> int:
        self.calls.append(("eth_chainId",))
        return self.chain

    def accounts(self) -> List[str]:
        self.calls.append(("eth_accounts",))
        return self.node_accounts

    def get_transaction_count(self, address: str, block: str = "pending") -> int:
        self.calls.append(("eth_getTransactionCount", address, block))
        return 0

    def gas_price(self) -> int:
        self.calls.append(("eth_gasPrice",))
        return 1_000_000_000

    def estimate_gas(self, transaction: Dict[str, Any]) -> int:
        self.calls.append(("eth_estimateGas", transaction))
        if self.send_error is not None:
            raise self.send_error
        return 500_000

    def send_transaction(self, transaction: Dict[str, Any]) -> str:
        self.calls.append(("eth_sendTransaction", transaction))
        if self.send_error is not None:
            raise self.send_error
        return TX_HASH

    def send_raw_transaction(self, raw_transaction: str) -> str:
        self.calls.append(("eth_sendRawTransaction", raw_transaction))
        return TX_HASH

    def get_transaction_receipt(
        self, transaction_hash: str, timeout: Optional[float] = None
    ) -> Optional[Dict[str, Any]]:
        self.calls.append(("eth_getTransactionReceipt", transaction_hash))
        self.receipt_timeouts.append(timeout)
        receipt = self.receipts.pop(0) if len(self.receipts) > 1 else self.receipts[0]
        if isinstance(receipt, Exception):
            raise receipt
        return receipt

    def get_transaction(self, transaction_hash: str) -> Optional[Dict[str, Any]]:
        self.calls.append(("eth_getTransactionByHash", transaction_hash))
        return self.transaction


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def hardhat_project(fixtures_dir: Path) -> Path:
    """Return a project root with Hardhat artifacts."""
    return fixtures_dir / "hardhat_project"


@pytest.fixture
def foundry_project(fixtures_dir: Path) -> Path:
    """Return a project root with Foundry artifacts."""
    return fixtures_dir / "foundry_project"


@pytest.fixture
def stablecoin_artifact_path(hardhat_project: Path) -> Path:
    """Return path to the GoldSilverStablecoin Hardhat artifact."""
    return (
        hardhat_project
        / "artifacts"
        / "contracts"
        / "GoldSilverStablecoin.sol"
        / "GoldSilverStablecoin.json"
    )


@pytest.fixture
def artifact_store(hardhat_project: Path) -> ArtifactStore:
    return ArtifactStore(hardhat_project)


@pytest.fixture
def local_network() -> NetworkConfig:
    return NetworkConfig(name="local", endpoint_url="http://127.0.0.1:8545", chain_id=31337)


@pytest.fixture
def fake_client() -> FakeRpcClient:
    return FakeRpcClient()


class FakeNode:
    """
    responses callback answering JSON-RPC requests like a Hardhat node.

    Set `results[method]` to change an answer, `errors[method]` to an error
    object or `failures[method]` to an exception raised by the transport.
    Unknown methods get "Method not found".
    """

    def __init__(self):
        self.results: Dict[str, Any] = {
            "eth_chainId": hex(31337),
            "eth_accounts": [DEPLOYER_ADDRESS.lower()],
            "eth_sendTransaction": TX_HASH,
            "eth_getTransactionReceipt": make_receipt(),
            "eth_getTransactionByHash": {"hash": TX_HASH, "blockNumber": None},
        }
        self.errors: Dict[str, Dict[str, Any]] = {}
        self.failures: Dict[str, Exception] = {}
        self.requests: List[Dict[str, Any]] = []

    @property
    def methods(self) -> List[str]:
        return [request["method"] for request in self.requests]

    def __call__(self, request):
        body = json.loads(request.body)
        self.requests.append(body)
        method = body["method"]
        if method in self.failures:
            raise self.failures[method]

        payload: Dict[str, Any] = {"jsonrpc": "2.0", "id": body["id"]}
        if method in self.errors:
            payload["error"] = self.errors[method]
        elif method in self.results:
            payload["result"] = self.results[method]
        else:
            payload["error"] = {"code": -32601, "message": f"Method {method} not found"}

        return (200, {}, json.dumps(payload))


@pytest.fixture
def rpc_node():
    """Serve JSON-RPC at RPC_URL from a FakeNode."""
    node = FakeNode()
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        rsps.add_callback(
            responses.POST, RPC_URL, callback=node, content_type="application/json"
        )
        yield node
