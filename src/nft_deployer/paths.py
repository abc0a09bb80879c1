"""Path management utilities for nft-deployer."""

from pathlib import Path
from typing import Optional, Union


def get_default_artifacts_dir() -> Path:
    """
    Get default artifacts directory.

    Returns:
        Path to ./artifacts (Hardhat's build output directory)
    """
    return Path.cwd() / "artifacts"


def get_default_sources_dir() -> Path:
    """
    Get default Solidity sources directory.

    Returns:
        Path to ./contracts
    """
    return Path.cwd() / "contracts"


def get_artifact_path(
    source_name: str,
    contract_name: str,
    artifacts_root: Optional[Union[Path, str]] = None,
) -> Path:
    """
    Get the artifact file path for a contract.

    Hardhat stores each artifact under its source name, so MyNFT from
    contracts/MyNFT.sol lives at artifacts/contracts/MyNFT.sol/MyNFT.json.

    Args:
        source_name: Source file path relative to project root (e.g., "contracts/MyNFT.sol")
        contract_name: Contract name (e.g., "MyNFT")
        artifacts_root: Custom artifacts directory (defaults to ./artifacts)

    Returns:
        Path to the artifact JSON file
    """
    if artifacts_root is None:
        artifacts_root = get_default_artifacts_dir()
    else:
        artifacts_root = Path(artifacts_root).absolute()

    return artifacts_root / source_name / f"{contract_name}.json"
