"""Path management utilities for evm-contract-deployer."""

from pathlib import Path
from typing import Optional, Union

from .constants import FOUNDRY_OUT_DIR, HARDHAT_ARTIFACTS_DIR


def get_default_project_root() -> Path:
    """
    Get default project root (current working directory).

    Returns:
        Path to ./
    """
    return Path.cwd()


def get_artifact_dirs(project_root: Optional[Union[Path, str]] = None) -> tuple[Path, Path]:
    """
    Get compiler output directories.

    Args:
        project_root: Project directory (defaults to the current directory)

    Returns:
        Tuple of (hardhat_artifacts_dir, foundry_out_dir)
    """
    if project_root is None:
        project_root = get_default_project_root()
    else:
        project_root = Path(project_root).absolute()

    hardhat_dir = project_root / HARDHAT_ARTIFACTS_DIR
    foundry_dir = project_root / FOUNDRY_OUT_DIR

    return (hardhat_dir, foundry_dir)
