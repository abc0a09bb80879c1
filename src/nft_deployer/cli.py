"""Command-line entry point: deploy MyNFT to the configured network."""

import os
import sys

from dotenv import find_dotenv, load_dotenv
from loguru import logger

from .compiler import compile_contracts
from .config import load_network_profile
from .constants import DEFAULT_CONTRACT_NAME, DEFAULT_NETWORK
from .deployer import deploy_contract
from .exceptions import DeploymentError
from .paths import get_default_artifacts_dir, get_default_sources_dir

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def configure_logging(level: str = "INFO") -> None:
    """
    Send loguru output to stderr at the given level.

    An unknown level name falls back to INFO with a warning.
    """
    logger.remove()
    try:
        logger.add(sys.stderr, format=LOG_FORMAT, level=level)
    except (TypeError, ValueError):
        logger.add(sys.stderr, format=LOG_FORMAT, level="INFO")
        logger.warning(f"Unknown LOG_LEVEL '{level}', using INFO")


def abort(error: BaseException) -> int:
    """Write the error to stderr regardless of the log level; return exit code 1."""
    print(f"{type(error).__name__}: {error}", file=sys.stderr)
    return 1


def run() -> str:
    """
    Compile (when sources are present), deploy and confirm the contract.

    Returns:
        Deployed contract address
    """
    profile = load_network_profile(DEFAULT_NETWORK)

    sources_dir = get_default_sources_dir()
    if sources_dir.is_dir():
        compile_contracts(sources_dir, get_default_artifacts_dir(), profile.solidity_version)

    logger.info(f"Deploying {DEFAULT_CONTRACT_NAME} contract...")
    record = deploy_contract(DEFAULT_CONTRACT_NAME, profile)
    return record.deployed_address


def main() -> int:
    load_dotenv(find_dotenv(usecwd=True))
    configure_logging(os.environ.get("LOG_LEVEL", "INFO").upper())

    try:
        address = run()
    except DeploymentError as e:
        return abort(e)
    except Exception as e:
        logger.opt(exception=e).debug("Unexpected error")
        return abort(e)

    print(f"{DEFAULT_CONTRACT_NAME} deployed to: {address}")
    return 0
