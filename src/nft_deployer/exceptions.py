"""Custom exception classes for nft-deployer."""

from typing import Optional


class DeploymentError(Exception):
    """Base exception for deployment-related errors."""

    pass


class ConfigurationError(DeploymentError, ValueError):
    """Raised when a network profile is missing or has invalid settings."""

    pass


class NetworkNotFoundError(DeploymentError, ValueError):
    """Raised when requested network is not a known network profile."""

    pass


class ArtifactNotFoundError(DeploymentError, FileNotFoundError):
    """Raised when no compiled artifact matches the requested contract name."""

    pass


class AmbiguousArtifactError(ArtifactNotFoundError):
    """Raised when several artifacts share the requested contract name."""

    pass


class DefectiveArtifactError(DeploymentError, ValueError):
    """Raised when an artifact file cannot be used for deployment."""

    pass


class CompilationError(DeploymentError, RuntimeError):
    """Raised when the Solidity compiler reports errors."""

    pass


class NetworkError(DeploymentError, ConnectionError):
    """Raised when the RPC node cannot be reached."""

    pass


class RpcError(DeploymentError, RuntimeError):
    """Raised when the RPC node answers with a JSON-RPC error."""

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.code = code


class TransactionRevertedError(DeploymentError, RuntimeError):
    """Raised when a transaction fails on-chain or reverts during estimation."""

    pass


class DeploymentTimeoutError(DeploymentError, TimeoutError):
    """Raised when a transaction is not mined in time."""

    pass


class ContractArgumentError(DeploymentError, ValueError):
    """Raised when arguments do not match the contract's ABI."""

    pass


class EventNotFoundError(DeploymentError, ValueError):
    """Raised when an expected event is missing from a transaction receipt."""

    pass
