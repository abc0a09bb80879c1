"""Solidity compilation into Hardhat-format artifacts."""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import solcx
from loguru import logger
from solcx.exceptions import (
    DownloadError,
    SolcError,
    SolcInstallationError,
    UnsupportedVersionError,
)

from .constants import HARDHAT_ARTIFACT_FORMAT
from .exceptions import CompilationError

OUTPUT_SELECTION = {
    "*": {
        "*": [
            "abi",
            "evm.bytecode.object",
            "evm.bytecode.linkReferences",
            "evm.deployedBytecode.object",
            "evm.deployedBytecode.linkReferences",
        ]
    }
}


def ensure_solc(solc_version: str) -> None:
    """
    Install the requested solc version unless it is already available.

    Raises:
        CompilationError: If the compiler cannot be installed
    """
    installed = {str(v) for v in solcx.get_installed_solc_versions()}
    if solc_version in installed:
        return

    logger.info(f"Installing solc {solc_version}...")
    try:
        solcx.install_solc(solc_version)
    except (DownloadError, SolcInstallationError, UnsupportedVersionError) as e:
        raise CompilationError(f"Failed to install solc {solc_version}: {e}") from e


def _node_module_remappings(project_root: Path) -> List[str]:
    """Remap scoped npm packages (e.g., @openzeppelin) to node_modules."""
    node_modules = project_root / "node_modules"
    if not node_modules.is_dir():
        return []
    return sorted(
        f"{d.name}/=node_modules/{d.name}/"
        for d in node_modules.iterdir()
        if d.is_dir() and d.name.startswith("@")
    )


def build_standard_input(sources_dir: Path, project_root: Path) -> Dict[str, Any]:
    """
    Build solc standard JSON input for every .sol file under sources_dir.

    Source names are paths relative to project_root, matching Hardhat's
    sourceName field (e.g., "contracts/MyNFT.sol").
    """
    sources = {
        sol_file.relative_to(project_root).as_posix(): {"content": sol_file.read_text()}
        for sol_file in sorted(sources_dir.rglob("*.sol"))
    }

    settings: Dict[str, Any] = {
        "optimizer": {"enabled": False, "runs": 200},
        "outputSelection": OUTPUT_SELECTION,
    }
    remappings = _node_module_remappings(project_root)
    if remappings:
        settings["remappings"] = remappings

    return {"language": "Solidity", "sources": sources, "settings": settings}


def _to_hardhat_artifact(
    source_name: str, contract_name: str, output: Dict[str, Any]
) -> Dict[str, Any]:
    evm = output.get("evm", {})
    bytecode = evm.get("bytecode", {})
    deployed = evm.get("deployedBytecode", {})
    return {
        "_format": HARDHAT_ARTIFACT_FORMAT,
        "contractName": contract_name,
        "sourceName": source_name,
        "abi": output.get("abi", []),
        "bytecode": "0x" + bytecode.get("object", ""),
        "deployedBytecode": "0x" + deployed.get("object", ""),
        "linkReferences": bytecode.get("linkReferences", {}),
        "deployedLinkReferences": deployed.get("linkReferences", {}),
    }


def compile_contracts(
    sources_dir: Path,
    artifacts_dir: Path,
    solc_version: str,
    project_root: Optional[Path] = None,
) -> List[Path]:
    """
    Compile Solidity sources and write one Hardhat artifact per contract.

    Args:
        sources_dir: Directory holding .sol files (e.g., ./contracts)
        artifacts_dir: Output directory (e.g., ./artifacts)
        solc_version: Compiler version (e.g., "0.8.28")
        project_root: Root that source names are relative to
                      (defaults to sources_dir's parent)

    Returns:
        Paths of the artifact files written

    Raises:
        CompilationError: If solc cannot be installed or reports errors
    """
    sources_dir = Path(sources_dir).absolute()
    if project_root is None:
        project_root = sources_dir.parent
    project_root = Path(project_root).absolute()

    input_data = build_standard_input(sources_dir, project_root)
    if not input_data["sources"]:
        logger.warning(f"No Solidity sources found in {sources_dir}")
        return []

    ensure_solc(solc_version)

    logger.info(
        f"Compiling {len(input_data['sources'])} Solidity file(s) with solc {solc_version}"
    )
    try:
        compiled = solcx.compile_standard(
            input_data,
            base_path=str(project_root),
            allow_paths=[str(project_root)],
            solc_version=solc_version,
        )
    except SolcError as e:
        raise CompilationError(f"Compilation failed: {e}") from e

    for warning in compiled.get("errors", []):
        logger.warning(warning.get("formattedMessage", warning.get("message", "")).strip())

    written = []
    for source_name, contracts in compiled.get("contracts", {}).items():
        for contract_name, output in contracts.items():
            artifact_path = Path(artifacts_dir) / source_name / f"{contract_name}.json"
            artifact_path.parent.mkdir(parents=True, exist_ok=True)
            with open(artifact_path, "w") as f:
                json.dump(_to_hardhat_artifact(source_name, contract_name, output), f, indent=2)
            written.append(artifact_path)

    pruned = prune_stale_artifacts(artifacts_dir, written)
    logger.info(f"Wrote {len(written)} artifact(s) to {artifacts_dir}")
    if pruned:
        logger.info(f"Removed {len(pruned)} obsolete artifact(s)")
    return written


def prune_stale_artifacts(
    artifacts_dir: Union[Path, str], keep: Iterable[Path]
) -> List[Path]:
    """
    Delete contract artifacts that the last compilation did not produce.

    Only files under `<source>.sol/` directories are considered; build-info
    and anything else in the artifacts directory is left alone. Each removed
    artifact takes its `.dbg.json` companion with it, and directories left
    empty are removed.

    Returns:
        Paths of the artifact files removed
    """
    artifacts_dir = Path(artifacts_dir)
    keep = {Path(p).resolve() for p in keep}
    removed = []

    for path in sorted(artifacts_dir.rglob("*.json")):
        relative = path.relative_to(artifacts_dir)
        if relative.parts[0] == "build-info" or path.name.endswith(".dbg.json"):
            continue
        if not path.parent.name.endswith(".sol") or path.resolve() in keep:
            continue

        logger.debug(f"Removing obsolete artifact {relative.as_posix()}")
        path.unlink()
        removed.append(path)
        debug_file = path.with_name(f"{path.stem}.dbg.json")
        if debug_file.exists():
            debug_file.unlink()

    for directory in sorted(
        (d for d in artifacts_dir.rglob("*") if d.is_dir()),
        key=lambda d: len(d.parts),
        reverse=True,
    ):
        if directory.name.endswith(".sol") and not any(directory.iterdir()):
            directory.rmdir()

    return removed
