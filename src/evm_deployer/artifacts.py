"""Compiled contract artifact loading for evm-contract-deployer."""

import json
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .constants import HARDHAT_ARTIFACT_FORMAT
from .exceptions import ArtifactNotFoundError, DefectiveArtifactError
from .logging import logger
from .paths import get_artifact_dirs
from .types import ArtifactFormat, ContractArtifact

# Placeholder left in bytecode for libraries that still need linking
_LINK_PLACEHOLDER = re.compile(r"__\$[0-9a-fA-F]{34}\$__|__[A-Za-z0-9_:./]{36}__")


def detect_artifact_format(data: Dict[str, Any]) -> Optional[ArtifactFormat]:
    """
    Detect which compiler produced an artifact.

    Args:
        data: Parsed artifact JSON

    Returns:
        ArtifactFormat.HARDHAT for hh-sol-artifact-1 files (string bytecode)
        ArtifactFormat.FOUNDRY for forge output (bytecode.object)
        None if neither shape matches
    """
    bytecode = data.get("bytecode")

    if data.get("_format") == HARDHAT_ARTIFACT_FORMAT and isinstance(bytecode, str):
        return ArtifactFormat.HARDHAT

    if isinstance(bytecode, dict) and "object" in bytecode:
        return ArtifactFormat.FOUNDRY

    return None


def parse_artifact(file_path: Path, contract_name: Optional[str] = None) -> ContractArtifact:
    """
    Parse a Hardhat or Foundry artifact file.

    Args:
        file_path: Path to artifact JSON file
        contract_name: Name to record (defaults to the artifact's contractName,
            then the file stem)

    Returns:
        ContractArtifact with 0x-prefixed creation bytecode

    Raises:
        DefectiveArtifactError: If the file is not a deployable artifact
    """
    try:
        with open(file_path) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise DefectiveArtifactError(f"Artifact {file_path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise DefectiveArtifactError(f"Artifact {file_path} is not a JSON object")

    source_format = detect_artifact_format(data)
    if source_format is None:
        raise DefectiveArtifactError(f"Unrecognized artifact format: {file_path}")

    if source_format is ArtifactFormat.HARDHAT:
        bytecode = data["bytecode"]
    else:
        bytecode = data["bytecode"]["object"]

    abi = data.get("abi")
    if not isinstance(abi, list):
        raise DefectiveArtifactError(f"Missing ABI in artifact: {file_path}")

    if contract_name is None:
        contract_name = data.get("contractName") or file_path.stem

    return ContractArtifact(
        contract_name=contract_name,
        abi=abi,
        bytecode=_normalize_bytecode(bytecode, file_path),
        source_format=source_format,
        source_path=file_path,
    )


def _normalize_bytecode(bytecode: Any, file_path: Path) -> str:
    """Validate creation bytecode and return it 0x-prefixed."""
    if not isinstance(bytecode, str):
        raise DefectiveArtifactError(f"Bytecode is not a string in artifact: {file_path}")

    if not bytecode.startswith("0x"):
        bytecode = "0x" + bytecode

    # Interfaces and abstract contracts compile to empty bytecode
    if len(bytecode) <= 2:
        raise DefectiveArtifactError(
            f"Empty bytecode in {file_path}; abstract contracts and interfaces "
            "cannot be deployed"
        )

    if _LINK_PLACEHOLDER.search(bytecode):
        raise DefectiveArtifactError(f"Bytecode in {file_path} has unlinked libraries")

    try:
        bytes.fromhex(bytecode[2:])
    except ValueError:
        raise DefectiveArtifactError(f"Bytecode in {file_path} is not valid hex") from None

    return bytecode


class ArtifactStore:
    """Looks up compiled artifacts in a Hardhat and/or Foundry project."""

    def __init__(self, project_root: Optional[Union[Path, str]] = None):
        """
        Initialize the artifact store.

        Args:
            project_root: Project directory containing artifacts/ and/or out/
                          If None, uses the current directory
        """
        self._search_dirs = get_artifact_dirs(project_root)
        self._cache: Dict[str, ContractArtifact] = {}

    def find(self, contract_name: str) -> Path:
        """
        Locate the artifact file for a contract.

        Hardhat output is searched before Foundry output. A fully qualified
        name ("contracts/Token.sol:Token") restricts the match to that source
        file.

        Args:
            contract_name: Contract name, optionally fully qualified

        Returns:
            Path to the artifact JSON file

        Raises:
            ArtifactNotFoundError: If no artifact exists for the contract
            DefectiveArtifactError: If the name matches several artifacts
        """
        source_name: Optional[str] = None
        name = contract_name
        if ":" in contract_name:
            source, name = contract_name.rsplit(":", 1)
            source_name = Path(source).name

        for search_dir in self._search_dirs:
            if not search_dir.is_dir():
                continue

            candidates = [
                path
                for path in search_dir.rglob(f"{name}.json")
                if "build-info" not in path.parts
                and (source_name is None or path.parent.name == source_name)
            ]

            if len(candidates) > 1:
                raise DefectiveArtifactError(
                    f"Contract name '{contract_name}' is ambiguous, use a fully "
                    f"qualified name: {', '.join(str(p) for p in sorted(candidates))}"
                )
            if candidates:
                return candidates[0]

        searched = ", ".join(str(d) for d in self._search_dirs)
        raise ArtifactNotFoundError(
            f"No artifact found for contract '{contract_name}' in {searched}. "
            "Compile the project first (npx hardhat compile or forge build)."
        )

    def load(self, contract_name: str) -> ContractArtifact:
        """
        Load the artifact for a contract.

        Args:
            contract_name: Contract name, optionally fully qualified

        Returns:
            ContractArtifact

        Raises:
            ArtifactNotFoundError: If no artifact exists for the contract
            DefectiveArtifactError: If the artifact cannot be deployed
        """
        if contract_name not in self._cache:
            path = self.find(contract_name)
            logger.debug(f"Loading artifact for {contract_name} from {path}")
            self._cache[contract_name] = parse_artifact(
                path, contract_name.rsplit(":", 1)[-1]
            )
        return self._cache[contract_name]

    def contract_names(self) -> List[str]:
        """
        List contract names with artifacts in the project.

        Returns:
            Sorted list of contract names
        """
        names = set()
        for search_dir in self._search_dirs:
            if not search_dir.is_dir():
                continue
            for path in search_dir.rglob("*.json"):
                if "build-info" in path.parts or path.name.endswith(".dbg.json"):
                    continue
                # Artifacts live in <Source>.sol/<Contract>.json
                if path.parent.suffix == ".sol":
                    names.add(path.stem)
        return sorted(names)
