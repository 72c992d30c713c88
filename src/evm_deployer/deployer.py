"""Main API for evm-contract-deployer."""

import asyncio
from typing import Any, Callable, Dict, NamedTuple, Optional, Union

from .artifacts import ArtifactStore
from .constants import (
    DEFAULT_CONFIRMATION_TIMEOUT,
    DEFAULT_POLL_INTERVAL,
    MIN_RECEIPT_REQUEST_TIMEOUT,
)
from .encoding import build_deploy_data
from .exceptions import (
    AmbiguousSubmissionError,
    ChainIdMismatchError,
    ConfirmationTimeoutError,
    NetworkMismatchError,
    NetworkUnavailableError,
    RpcResponseError,
    TransactionRevertedError,
)
from .logging import logger
from .rpc import RpcClient, is_revert_error
from .signers import LocalAccountSigner, NodeAccountSigner
from .types import DeploymentRequest, DeploymentResult, NetworkConfig


class Deployer:
    """Deploys compiled contracts to one network."""

    def __init__(
        self,
        network: NetworkConfig,
        artifacts: ArtifactStore,
        client: Optional[RpcClient] = None,
        signer: Optional[Union[NodeAccountSigner, LocalAccountSigner]] = None,
        confirmation_timeout: float = DEFAULT_CONFIRMATION_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        on_submitted: Optional[Callable[[str], None]] = None,
    ):
        """
        Initialize the deployer.

        Args:
            network: Target network, loaded once at startup
            artifacts: Source of compiled contracts (anything with load(name))
            client: Network client (defaults to an RpcClient for network.endpoint_url)
            signer: Paying account (defaults to the node's first account)
            confirmation_timeout: Seconds to wait for the transaction to be mined
            poll_interval: Seconds between receipt queries
            on_submitted: Called with the transaction hash right after broadcast
        """
        self.network = network
        self.artifacts = artifacts
        self.client = client if client is not None else RpcClient(network.endpoint_url)
        self.signer = signer if signer is not None else NodeAccountSigner()
        self.confirmation_timeout = confirmation_timeout
        self.poll_interval = poll_interval
        self.on_submitted = on_submitted

    async def deploy(self, request: DeploymentRequest) -> DeploymentResult:
        """
        Deploy a contract and wait until it is mined.

        Deploying is not idempotent: every successful call creates a new
        contract, at an address derived from the sender's nonce. Calling
        again with the same request deploys a second copy.

        Args:
            request: Contract name, constructor arguments and target network

        Returns:
            DeploymentResult of the mined creation transaction

        Raises:
            ArgumentMismatchError: If the arguments do not fit the constructor
                (raised before any network call)
            NetworkUnavailableError: If the endpoint fails before submission
            TransactionRevertedError: If the deployment reverted
            ConfirmationTimeoutError: If no receipt was seen in time; the
                contract may still be created later
            AmbiguousSubmissionError: If the connection failed while sending; a
                ConfirmationTimeoutError carrying the hash when it is known
            NetworkMismatchError: If request.network is not this deployer's network
            ArtifactNotFoundError: If the contract has no compiled artifact
            DefectiveArtifactError: If the artifact cannot be deployed
        """
        if request.network != self.network:
            raise NetworkMismatchError(
                f"Request targets network '{request.network.name}' "
                f"(chain {request.network.chain_id}), deployer is bound to "
                f"'{self.network.name}' (chain {self.network.chain_id})"
            )

        # Everything up to here is local: no network call on bad input
        artifact = self.artifacts.load(request.contract_name)
        data = build_deploy_data(artifact, request.constructor_args)

        try:
            transaction_hash = await self._submit(data)
        except AmbiguousSubmissionError as e:
            logger.warning(f"Deployment of {request.contract_name} may have been sent: {e}")
            if e.transaction_hash is not None:
                self._notify_submitted(e.transaction_hash)
            raise

        logger.info(
            f"Deployment transaction for {request.contract_name} sent: {transaction_hash}"
        )
        self._notify_submitted(transaction_hash)

        receipt = await self._wait_for_receipt(transaction_hash)
        try:
            result = DeploymentResult.from_receipt(receipt)
        except NetworkUnavailableError as e:
            raise ConfirmationTimeoutError(
                transaction_hash,
                None,
                f"Receipt for transaction {transaction_hash} is malformed ({e}); "
                "check its status before redeploying",
            ) from e

        logger.info(
            f"{request.contract_name} deployed to {result.contract_address} "
            f"in block {result.block_number}"
        )
        return result

    def deploy_sync(self, request: DeploymentRequest) -> DeploymentResult:
        """Blocking variant of deploy() for callers without an event loop."""
        return asyncio.run(self.deploy(request))

    def _notify_submitted(self, transaction_hash: str) -> None:
        if self.on_submitted is not None:
            self.on_submitted(transaction_hash)

    async def _submit(self, data: str) -> str:
        chain_id = await asyncio.to_thread(self.client.chain_id)
        if chain_id != self.network.chain_id:
            raise ChainIdMismatchError(expected=self.network.chain_id, actual=chain_id)

        sender = await asyncio.to_thread(self.signer.resolve_address, self.client)
        logger.info(f"Deploying from {sender} on {self.network.name} (chain {chain_id})")

        transaction: Dict[str, Any] = {"from": sender, "data": data}
        try:
            return await asyncio.to_thread(
                self.signer.submit, self.client, transaction, self.network.chain_id
            )
        except RpcResponseError as e:
            # Nodes refuse creation transactions whose execution reverts
            if is_revert_error(e):
                raise TransactionRevertedError(f"Node rejected deployment: {e}") from e
            raise

    async def _wait_for_receipt(self, transaction_hash: str) -> Dict[str, Any]:
        deadline = asyncio.get_running_loop().time() + self.confirmation_timeout
        try:
            return await asyncio.wait_for(
                self._poll_receipt(transaction_hash, deadline),
                timeout=self.confirmation_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Transaction {transaction_hash} not mined after "
                f"{self.confirmation_timeout:g}s; it may still be mined"
            )
            raise ConfirmationTimeoutError(transaction_hash, self.confirmation_timeout) from None
        except asyncio.CancelledError:
            # A broadcast transaction cannot be retracted
            logger.warning(
                f"Stopped waiting for transaction {transaction_hash}; it may still be mined"
            )
            raise

    async def _poll_receipt(self, transaction_hash: str, deadline: float) -> Dict[str, Any]:
        loop = asyncio.get_running_loop()
        while True:
            # A hung request must not outlive the confirmation timeout
            request_timeout = max(deadline - loop.time(), MIN_RECEIPT_REQUEST_TIMEOUT)
            try:
                receipt = await asyncio.to_thread(
                    self.client.get_transaction_receipt,
                    transaction_hash,
                    timeout=request_timeout,
                )
            except NetworkUnavailableError as e:
                logger.warning(f"Receipt query for {transaction_hash} failed, retrying: {e}")
            else:
                if receipt is not None and not isinstance(receipt, dict):
                    logger.warning(
                        f"Malformed receipt for {transaction_hash}, retrying: {receipt!r}"
                    )
                elif receipt is not None and receipt.get("blockNumber") is not None:
                    return receipt
            await asyncio.sleep(self.poll_interval)


class TransactionStatus(NamedTuple):
    """Where a previously submitted deployment transaction stands."""

    status: str  # "mined", "reverted", "pending" or "unknown"
    transaction_hash: str
    result: Optional[DeploymentResult] = None


def query_transaction(client: RpcClient, transaction_hash: str) -> TransactionStatus:
    """
    Look up a deployment transaction, e.g. after a ConfirmationTimeoutError.

    Args:
        client: Network client
        transaction_hash: Hash reported when the transaction was submitted

    Returns:
        TransactionStatus; result is set only when the contract was created

    Raises:
        NetworkUnavailableError: If the endpoint cannot be queried
    """
    receipt = client.get_transaction_receipt(transaction_hash)

    if receipt is None or receipt.get("blockNumber") is None:
        transaction = client.get_transaction(transaction_hash)
        status = "pending" if transaction is not None else "unknown"
        return TransactionStatus(status, transaction_hash)

    try:
        result = DeploymentResult.from_receipt(receipt)
    except TransactionRevertedError:
        return TransactionStatus("reverted", transaction_hash)

    return TransactionStatus("mined", transaction_hash, result)
