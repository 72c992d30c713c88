"""
evm-contract-deployer: deploy compiled contracts to Ethereum-compatible networks
"""

from importlib.metadata import PackageNotFoundError, version

from .artifacts import ArtifactStore
from .config import load_network_config
from .deployer import Deployer, TransactionStatus, query_transaction
from .exceptions import (
    AmbiguousSubmissionError,
    ArgumentMismatchError,
    ArtifactNotFoundError,
    ChainIdMismatchError,
    ConfigurationError,
    ConfirmationTimeoutError,
    DefectiveArtifactError,
    DeploymentError,
    NetworkMismatchError,
    NetworkNotFoundError,
    NetworkUnavailableError,
    RpcResponseError,
    TransactionRevertedError,
)
from .rpc import RpcClient
from .signers import LocalAccountSigner, NodeAccountSigner
from .types import ArtifactFormat, ContractArtifact, DeploymentRequest, DeploymentResult, NetworkConfig

try:
    __version__ = version("evm-contract-deployer")
except PackageNotFoundError:
    __version__ = None

__all__ = [
    "Deployer",
    "query_transaction",
    "TransactionStatus",
    "load_network_config",
    "ArtifactStore",
    "RpcClient",
    "NodeAccountSigner",
    "LocalAccountSigner",
    "ArtifactFormat",
    "ContractArtifact",
    "DeploymentRequest",
    "DeploymentResult",
    "NetworkConfig",
    "DeploymentError",
    "ArgumentMismatchError",
    "NetworkUnavailableError",
    "RpcResponseError",
    "ChainIdMismatchError",
    "TransactionRevertedError",
    "ConfirmationTimeoutError",
    "AmbiguousSubmissionError",
    "ConfigurationError",
    "NetworkNotFoundError",
    "NetworkMismatchError",
    "ArtifactNotFoundError",
    "DefectiveArtifactError",
]
