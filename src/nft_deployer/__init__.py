"""
nft-deployer: compile and deploy an NFT contract to a development chain
"""

from importlib.metadata import PackageNotFoundError, version

from .config import load_network_profile
from .chain import connect
from .deployer import ContractFactory, Deployment, deploy_contract, get_contract_factory
from .exceptions import (
    AmbiguousArtifactError,
    ArtifactNotFoundError,
    CompilationError,
    ConfigurationError,
    ContractArgumentError,
    DefectiveArtifactError,
    DeploymentError,
    DeploymentTimeoutError,
    EventNotFoundError,
    NetworkError,
    NetworkNotFoundError,
    RpcError,
    TransactionRevertedError,
)
from .nft import NFTContract
from .types import ContractArtifact, DeploymentRecord, MintResult, NetworkProfile

try:
    __version__ = version("nft-deployer")
except PackageNotFoundError:
    __version__ = None

__all__ = [
    "load_network_profile",
    "get_contract_factory",
    "deploy_contract",
    "connect",
    "NFTContract",
    "MintResult",
    "ContractFactory",
    "Deployment",
    "ContractArtifact",
    "DeploymentRecord",
    "NetworkProfile",
    "DeploymentError",
    "ConfigurationError",
    "NetworkNotFoundError",
    "ArtifactNotFoundError",
    "AmbiguousArtifactError",
    "DefectiveArtifactError",
    "CompilationError",
    "NetworkError",
    "RpcError",
    "TransactionRevertedError",
    "DeploymentTimeoutError",
    "ContractArgumentError",
    "EventNotFoundError",
]
