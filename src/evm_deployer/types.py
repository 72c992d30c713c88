"""Data types and dataclasses for evm-contract-deployer."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from eth_utils import is_address, to_checksum_address

from .exceptions import NetworkUnavailableError, TransactionRevertedError


class ArtifactFormat(Enum):
    """
    Compiler output formats an artifact can be read from.

    Value strings define de/serialization law.
    """

    HARDHAT = "hardhat"
    FOUNDRY = "foundry"


@dataclass(frozen=True)
class NetworkConfig:
    """Connection details for the target network."""

    name: str  # e.g., "local"
    endpoint_url: str  # JSON-RPC HTTP endpoint
    chain_id: int  # e.g., 31337


@dataclass(frozen=True)
class ContractArtifact:
    """Compiled contract: ABI plus creation bytecode."""

    contract_name: str
    abi: List[Dict[str, Any]]
    bytecode: str  # 0x-prefixed creation bytecode
    source_format: Optional[ArtifactFormat] = None
    source_path: Optional[Path] = field(default=None, compare=False)


@dataclass(frozen=True)
class DeploymentRequest:
    """A single contract deployment to perform."""

    contract_name: str
    constructor_args: Tuple[Any, ...]
    network: NetworkConfig

    def __post_init__(self):
        # Accept any sequence, store it immutably
        if not isinstance(self.constructor_args, tuple):
            object.__setattr__(self, "constructor_args", tuple(self.constructor_args))


@dataclass(frozen=True)
class DeploymentResult:
    """
    Outcome of a confirmed deployment.

    Build it with from_receipt(): a result only exists for a transaction the
    node reports as mined successfully.
    """

    contract_address: str  # Checksummed address
    transaction_hash: str
    block_number: Optional[int] = None
    gas_used: Optional[int] = None

    @classmethod
    def from_receipt(cls, receipt: Dict[str, Any]) -> "DeploymentResult":
        """
        Build a result from an eth_getTransactionReceipt response.

        Args:
            receipt: Receipt object as returned by the node (hex quantities)

        Returns:
            DeploymentResult for the created contract

        Raises:
            TransactionRevertedError: If the receipt reports failure or no contract
            NetworkUnavailableError: If the receipt is malformed
        """
        transaction_hash = receipt.get("transactionHash")
        if not transaction_hash or receipt.get("blockNumber") is None:
            raise NetworkUnavailableError(
                f"Receipt is not for a mined transaction: {receipt!r}"
            )

        status = receipt.get("status")
        if status is not None and _to_int(status) != 1:
            raise TransactionRevertedError(
                f"Deployment transaction {transaction_hash} reverted",
                transaction_hash=transaction_hash,
            )

        address = receipt.get("contractAddress")
        if not address:
            raise TransactionRevertedError(
                f"Transaction {transaction_hash} did not create a contract",
                transaction_hash=transaction_hash,
            )
        if not is_address(address):
            raise NetworkUnavailableError(
                f"Node reported an invalid contract address: {address!r}"
            )

        gas_used = receipt.get("gasUsed")
        return cls(
            contract_address=to_checksum_address(address),
            transaction_hash=transaction_hash,
            block_number=_to_int(receipt["blockNumber"]),
            gas_used=_to_int(gas_used) if gas_used is not None else None,
        )


def _to_int(value: Any) -> int:
    """Parse an RPC quantity (hex string or int)."""
    try:
        if isinstance(value, str):
            return int(value, 16)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    except ValueError:
        pass
    raise NetworkUnavailableError(f"Malformed quantity in receipt: {value!r}")
