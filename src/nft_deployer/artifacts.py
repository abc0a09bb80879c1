"""Hardhat artifact parsing and lookup for nft-deployer."""

import json
from pathlib import Path
from typing import List, Optional, Union

from .constants import HARDHAT_ARTIFACT_FORMAT
from .exceptions import AmbiguousArtifactError, ArtifactNotFoundError, DefectiveArtifactError
from .paths import get_artifact_path, get_default_artifacts_dir
from .types import ContractArtifact


def parse_hardhat_artifact(file_path: Path) -> ContractArtifact:
    """
    Parse a Hardhat artifact JSON file.

    Args:
        file_path: Path to artifacts/<sourceName>/<ContractName>.json

    Returns:
        ContractArtifact

    Raises:
        DefectiveArtifactError: If the file is not a usable Hardhat artifact
    """
    try:
        with open(file_path) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise DefectiveArtifactError(f"Artifact file is not valid JSON: {file_path}") from e

    if data.get("_format") != HARDHAT_ARTIFACT_FORMAT:
        raise DefectiveArtifactError(
            f"Unsupported artifact format {data.get('_format')!r} in {file_path}"
        )

    for required in ("contractName", "sourceName", "abi", "bytecode"):
        if required not in data:
            raise DefectiveArtifactError(f"Missing '{required}' in artifact file: {file_path}")

    return ContractArtifact(
        contract_name=data["contractName"],
        source_name=data["sourceName"],
        abi=data["abi"],
        bytecode=data["bytecode"],
        deployed_bytecode=data.get("deployedBytecode"),
        link_references=data.get("linkReferences") or {},
    )


def find_artifact_paths(contract_name: str, artifacts_root: Path) -> List[Path]:
    """
    Find every artifact file for a bare contract name.

    Debug files (*.dbg.json) and the build-info directory are skipped.

    Returns:
        Sorted list of matching artifact paths
    """
    build_info_dir = artifacts_root / "build-info"
    return sorted(
        p
        for p in artifacts_root.rglob(f"{contract_name}.json")
        if build_info_dir not in p.parents
    )


def resolve_artifact(
    name: str, artifacts_root: Optional[Union[Path, str]] = None
) -> ContractArtifact:
    """
    Resolve a contract artifact by name.

    Accepts both bare names ("MyNFT") and fully qualified names
    ("contracts/MyNFT.sol:MyNFT").

    Args:
        name: Contract name
        artifacts_root: Artifacts directory (defaults to ./artifacts)

    Returns:
        ContractArtifact ready to deploy

    Raises:
        ArtifactNotFoundError: If no artifact matches
        AmbiguousArtifactError: If a bare name matches several artifacts
        DefectiveArtifactError: If the artifact has no deployable bytecode
    """
    if artifacts_root is None:
        artifacts_root = get_default_artifacts_dir()
    artifacts_root = Path(artifacts_root).absolute()

    if not artifacts_root.is_dir():
        raise ArtifactNotFoundError(
            f"Artifacts directory not found at {artifacts_root}. Compile the contracts first."
        )

    if ":" in name:
        source_name, contract_name = name.rsplit(":", 1)
        artifact_path = get_artifact_path(source_name, contract_name, artifacts_root)
        if not artifact_path.exists():
            raise ArtifactNotFoundError(f'Artifact for contract "{name}" not found.')
    else:
        matches = find_artifact_paths(name, artifacts_root)
        if not matches:
            raise ArtifactNotFoundError(f'Artifact for contract "{name}" not found.')
        if len(matches) > 1:
            candidates = [
                f"{p.parent.relative_to(artifacts_root).as_posix()}:{name}" for p in matches
            ]
            raise AmbiguousArtifactError(
                f'There are multiple artifacts for contract "{name}", '
                f"please use a fully qualified name instead: {', '.join(candidates)}"
            )
        artifact_path = matches[0]

    artifact = parse_hardhat_artifact(artifact_path)
    check_deployable(artifact)
    return artifact


def check_deployable(artifact: ContractArtifact) -> None:
    """
    Check that an artifact carries creation bytecode that can be sent as-is.

    Raises:
        DefectiveArtifactError: For abstract contracts, interfaces, or
            bytecode with unlinked library placeholders
    """
    if artifact.bytecode in ("", "0x"):
        raise DefectiveArtifactError(
            f"{artifact.fully_qualified_name} has no bytecode "
            "(abstract contract or interface cannot be deployed)"
        )

    if artifact.link_references or "__$" in artifact.bytecode:
        raise DefectiveArtifactError(
            f"{artifact.fully_qualified_name} requires library linking, which is not supported"
        )
