"""Deployment account handling for evm-contract-deployer."""

from typing import Any, Dict, Optional

from eth_account import Account
from eth_utils import to_checksum_address, to_hex

from .constants import GAS_LIMIT_MULTIPLIER
from .exceptions import (
    AmbiguousSubmissionError,
    ConfigurationError,
    NetworkUnavailableError,
    RpcResponseError,
)
from .rpc import RpcClient


class NodeAccountSigner:
    """
    Pays with an account managed by the node itself.

    This is how Hardhat and anvil development nodes work: their accounts are
    unlocked and transactions go through eth_sendTransaction.
    """

    def __init__(self, address: Optional[str] = None):
        """
        Args:
            address: Account to use (defaults to the node's first account)
        """
        self._address = to_checksum_address(address) if address is not None else None

    def resolve_address(self, client: RpcClient) -> str:
        """
        Get the paying account.

        Raises:
            NetworkUnavailableError: If the node manages no (matching) account
        """
        accounts = [to_checksum_address(a) for a in client.accounts()]
        if not accounts:
            raise NetworkUnavailableError(
                f"Node at {client.endpoint_url} manages no accounts; "
                "set a private key to sign locally"
            )

        if self._address is None:
            return accounts[0]

        if self._address not in accounts:
            raise NetworkUnavailableError(
                f"Account {self._address} is not managed by node at {client.endpoint_url}"
            )
        return self._address

    def submit(self, client: RpcClient, transaction: Dict[str, Any], chain_id: int) -> str:
        """
        Have the node fill nonce, gas and fees, sign and broadcast.

        Raises:
            AmbiguousSubmissionError: If the connection failed mid-send
        """
        try:
            return client.send_transaction(transaction)
        except RpcResponseError:
            raise
        except NetworkUnavailableError as e:
            raise AmbiguousSubmissionError(
                f"Sending the deployment transaction failed ({e}); the node may "
                "have accepted it, check the deployer's recent transactions "
                "before redeploying"
            ) from e


class LocalAccountSigner:
    """Signs with a private key held by this process."""

    def __init__(self, private_key: str):
        """
        Args:
            private_key: Hex-encoded private key

        Raises:
            ConfigurationError: If the key is malformed
        """
        try:
            self._account = Account.from_key(private_key)
        except Exception as e:
            # Never echo the key itself
            raise ConfigurationError(f"Invalid private key: {type(e).__name__}") from None

    @property
    def address(self) -> str:
        return self._account.address

    def resolve_address(self, client: RpcClient) -> str:
        return self._account.address

    def submit(self, client: RpcClient, transaction: Dict[str, Any], chain_id: int) -> str:
        """
        Fill, sign and broadcast a transaction.

        Args:
            client: Network client
            transaction: Transaction with at least "from" and "data"
            chain_id: Chain id to sign for (EIP-155 replay protection)

        Returns:
            Transaction hash

        Raises:
            AmbiguousSubmissionError: If the connection failed mid-send
        """
        gas_estimate = client.estimate_gas(transaction)

        unsigned = {
            "data": transaction["data"],
            "value": 0,
            "nonce": client.get_transaction_count(self._account.address, "pending"),
            "gas": int(gas_estimate * GAS_LIMIT_MULTIPLIER),
            "gasPrice": client.gas_price(),
            "chainId": chain_id,
        }

        signed = self._account.sign_transaction(unsigned)
        transaction_hash = to_hex(signed.hash)
        try:
            return client.send_raw_transaction(to_hex(signed.raw_transaction))
        except RpcResponseError:
            raise
        except NetworkUnavailableError as e:
            raise AmbiguousSubmissionError(
                f"Sending transaction {transaction_hash} failed ({e}); it may still "
                "be mined, check its status before redeploying",
                transaction_hash=transaction_hash,
            ) from e
