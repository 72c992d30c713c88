"""JSON-RPC network client for evm-contract-deployer."""

import itertools
import re
from typing import Any, Dict, List, Optional

import requests
from eth_utils import is_address

from .constants import DEFAULT_RPC_TIMEOUT
from .exceptions import NetworkUnavailableError, RpcResponseError

# JSON-RPC error code used by geth and anvil for execution reverts
EXECUTION_REVERTED_CODE = 3

_TRANSACTION_HASH = re.compile(r"0x[0-9a-fA-F]{64}")


class RpcClient:
    """Minimal Ethereum JSON-RPC client over HTTP."""

    def __init__(
        self,
        endpoint_url: str,
        timeout: float = DEFAULT_RPC_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the client.

        Args:
            endpoint_url: JSON-RPC HTTP endpoint
            timeout: Per-request timeout in seconds
            session: requests session to reuse (a new one is created if None)
        """
        self.endpoint_url = endpoint_url
        self.timeout = timeout
        self._session = session if session is not None else requests.Session()
        self._ids = itertools.count(1)

    def call(
        self,
        method: str,
        params: Optional[List[Any]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """
        Perform a JSON-RPC call.

        Args:
            method: RPC method name, e.g. "eth_chainId"
            params: Positional parameters
            timeout: Request timeout overriding the client's own

        Returns:
            The "result" member of the response

        Raises:
            NetworkUnavailableError: If the endpoint is unreachable or answers
                with an HTTP error
            RpcResponseError: If the response carries a JSON-RPC error object
        """
        try:
            response = self._session.post(
                self.endpoint_url,
                json={
                    "jsonrpc": "2.0",
                    "method": method,
                    "params": params if params is not None else [],
                    "id": next(self._ids),
                },
                timeout=timeout if timeout is not None else self.timeout,
            )
        except requests.RequestException as e:
            raise NetworkUnavailableError(
                f"Network error during {method} call to {self.endpoint_url}: {e}"
            ) from e

        # Check for HTTP errors
        if response.status_code != 200:
            raise NetworkUnavailableError(
                f"RPC request {method} failed with status {response.status_code}"
            )

        try:
            result = response.json()
        except ValueError as e:
            raise NetworkUnavailableError(f"Invalid JSON in {method} response") from e

        if not isinstance(result, dict):
            raise NetworkUnavailableError(f"Malformed {method} response: {result!r}")

        # Check for RPC errors
        if "error" in result:
            error = result["error"]
            if isinstance(error, dict):
                raise RpcResponseError(
                    f"RPC error in {method}: {error.get('message', error)}",
                    code=error.get("code"),
                    data=error.get("data"),
                )
            raise RpcResponseError(f"RPC error in {method}: {error}")

        if "result" not in result:
            raise NetworkUnavailableError(f"Missing result in {method} response")

        return result["result"]

    def chain_id(self) -> int:
        return _quantity("eth_chainId", self.call("eth_chainId"))

    def accounts(self) -> List[str]:
        result = self.call("eth_accounts")
        if not isinstance(result, list) or not all(is_address(a) for a in result):
            raise NetworkUnavailableError(f"Malformed eth_accounts result: {result!r}")
        return result

    def get_transaction_count(self, address: str, block: str = "pending") -> int:
        return _quantity(
            "eth_getTransactionCount", self.call("eth_getTransactionCount", [address, block])
        )

    def gas_price(self) -> int:
        return _quantity("eth_gasPrice", self.call("eth_gasPrice"))

    def estimate_gas(self, transaction: Dict[str, Any]) -> int:
        return _quantity("eth_estimateGas", self.call("eth_estimateGas", [transaction]))

    def send_transaction(self, transaction: Dict[str, Any]) -> str:
        """Submit a transaction signed by a node-managed account; returns its hash."""
        return _transaction_hash(
            "eth_sendTransaction", self.call("eth_sendTransaction", [transaction])
        )

    def send_raw_transaction(self, raw_transaction: str) -> str:
        """Submit a signed, hex-encoded transaction; returns its hash."""
        return _transaction_hash(
            "eth_sendRawTransaction", self.call("eth_sendRawTransaction", [raw_transaction])
        )

    def get_transaction_receipt(
        self, transaction_hash: str, timeout: Optional[float] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Receipt of a mined transaction, None while it is pending or unknown.

        Args:
            transaction_hash: Hash of the transaction
            timeout: Request timeout overriding the client's own
        """
        return _object_or_none(
            "eth_getTransactionReceipt",
            self.call("eth_getTransactionReceipt", [transaction_hash], timeout=timeout),
        )

    def get_transaction(self, transaction_hash: str) -> Optional[Dict[str, Any]]:
        return _object_or_none(
            "eth_getTransactionByHash", self.call("eth_getTransactionByHash", [transaction_hash])
        )

    def get_code(self, address: str, block: str = "latest") -> str:
        return self.call("eth_getCode", [address, block])


def _quantity(method: str, value: Any) -> int:
    """Parse a hex-encoded QUANTITY result."""
    if isinstance(value, str) and value.startswith("0x"):
        try:
            return int(value, 16)
        except ValueError:
            pass
    raise NetworkUnavailableError(f"Malformed {method} result: {value!r}")


def _transaction_hash(method: str, value: Any) -> str:
    if isinstance(value, str) and _TRANSACTION_HASH.fullmatch(value):
        return value
    raise NetworkUnavailableError(f"Malformed {method} result: {value!r}")


def _object_or_none(method: str, value: Any) -> Optional[Dict[str, Any]]:
    if value is None or isinstance(value, dict):
        return value
    raise NetworkUnavailableError(f"Malformed {method} result: {value!r}")


def is_revert_error(error: RpcResponseError) -> bool:
    """
    Check whether an RPC error is a node rejecting a reverting transaction.

    Hardhat, anvil and geth all mention "revert" in the message; geth and
    anvil also use error code 3.
    """
    if error.code == EXECUTION_REVERTED_CODE:
        return True
    return "revert" in str(error).lower()
