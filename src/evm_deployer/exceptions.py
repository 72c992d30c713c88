"""Custom exception classes for evm-contract-deployer."""

from typing import Any, Optional


class DeploymentError(Exception):
    """Base exception for deployment-related errors."""

    kind = "DeploymentError"


class ConfigurationError(DeploymentError, ValueError):
    """Raised when an environment variable holds an unusable value."""

    kind = "Configuration"


class NetworkNotFoundError(DeploymentError, ValueError):
    """Raised when requested network name is not known."""

    kind = "Configuration"


class NetworkMismatchError(DeploymentError, ValueError):
    """Raised when a request targets a network other than the deployer's."""

    kind = "Configuration"


class ArtifactNotFoundError(DeploymentError, FileNotFoundError):
    """Raised when no compiled artifact exists for a contract."""

    kind = "ArtifactNotFound"


class DefectiveArtifactError(DeploymentError, ValueError):
    """Raised when an artifact file cannot be used for deployment."""

    kind = "DefectiveArtifact"


class ArgumentMismatchError(DeploymentError, ValueError):
    """Raised when constructor arguments do not match the constructor ABI."""

    kind = "ArgumentMismatch"


class NetworkUnavailableError(DeploymentError, ConnectionError):
    """Raised when the endpoint is unreachable or an RPC call fails."""

    kind = "NetworkUnavailable"


class RpcResponseError(NetworkUnavailableError):
    """Raised when the endpoint answers with a JSON-RPC error object."""

    def __init__(self, message: str, code: Optional[int] = None, data: Any = None):
        super().__init__(message)
        self.code = code
        self.data = data


class ChainIdMismatchError(NetworkUnavailableError):
    """Raised when the endpoint serves a different chain than configured."""

    def __init__(self, expected: int, actual: int):
        super().__init__(
            f"Endpoint reports chain id {actual}, expected {expected}"
        )
        self.expected = expected
        self.actual = actual


class TransactionRevertedError(DeploymentError):
    """Raised when the chain reports the deployment transaction failed."""

    kind = "TransactionReverted"

    def __init__(self, message: str, transaction_hash: Optional[str] = None):
        super().__init__(message)
        self.transaction_hash = transaction_hash


class ConfirmationTimeoutError(DeploymentError, TimeoutError):
    """
    Raised when a submitted transaction is not seen mined in time.

    The transaction was already broadcast: a contract may exist on-chain even
    though the deployment is reported as failed. Query the transaction hash
    before deploying again.
    """

    kind = "Timeout"

    def __init__(
        self,
        transaction_hash: Optional[str],
        timeout: Optional[float],
        message: Optional[str] = None,
    ):
        if message is None:
            message = (
                f"Transaction {transaction_hash} not mined within {timeout:g}s; "
                "it may still be mined later, check its status before redeploying"
            )
        super().__init__(message)
        self.transaction_hash = transaction_hash
        self.timeout = timeout


class AmbiguousSubmissionError(ConfirmationTimeoutError):
    """
    Raised when the connection failed while the transaction was being sent.

    The node may have accepted it. transaction_hash is set when the
    transaction was signed locally, None for node-managed accounts.
    """

    def __init__(self, message: str, transaction_hash: Optional[str] = None):
        super().__init__(transaction_hash, None, message)
