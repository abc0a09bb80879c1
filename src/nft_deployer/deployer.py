"""Contract deployment API for nft-deployer."""

from pathlib import Path
from typing import Any, Dict, Optional, Union

from loguru import logger
from web3 import Web3
from web3.exceptions import Web3Exception

from .artifacts import resolve_artifact
from .chain import (
    build_transaction,
    check_chain_id,
    connect,
    sign_and_send,
    wait_for_receipt,
    web3_errors,
)
from .constants import DEFAULT_CONFIRMATION_TIMEOUT, DEFAULT_POLL_INTERVAL
from .exceptions import ContractArgumentError, DeploymentError, TransactionRevertedError
from .types import ContractArtifact, DeploymentRecord, NetworkProfile


class Deployment:
    """A submitted contract deployment that may not be confirmed yet."""

    def __init__(self, record: DeploymentRecord, w3: Web3):
        self.record = record
        self.w3 = w3

    @property
    def transaction_hash(self) -> str:
        return self.record.transaction_hash

    def wait_for_deployment(
        self,
        timeout: float = DEFAULT_CONFIRMATION_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> "Deployment":
        """
        Block until the deployment transaction is mined.

        Args:
            timeout: Seconds to wait for a receipt
            poll_interval: Seconds between receipt polls

        Returns:
            self, with record.deployed_address set

        Raises:
            DeploymentTimeoutError: If no receipt arrives within timeout
            TransactionRevertedError: If the transaction failed or left no code
        """
        if self.record.confirmed:
            return self

        logger.info("Waiting for confirmation...")
        receipt = wait_for_receipt(self.w3, self.transaction_hash, timeout, poll_interval)

        address = receipt.get("contractAddress")
        if not address:
            raise TransactionRevertedError(
                f"Receipt for {self.transaction_hash} has no contract address"
            )

        with web3_errors("eth_getCode"):
            code = self.w3.eth.get_code(address)
        if len(code) == 0:
            raise TransactionRevertedError(f"No contract code at {address} after deployment")

        self.record.deployed_address = Web3.to_checksum_address(address)
        self.record.block_number = receipt["blockNumber"]
        self.record.gas_used = receipt["gasUsed"]
        return self

    def get_address(self) -> str:
        """
        Get the deployed contract address.

        Raises:
            DeploymentError: If the deployment is not confirmed yet
        """
        if not self.record.confirmed:
            raise DeploymentError(
                f"{self.record.contract_name} is not confirmed yet; "
                "call wait_for_deployment() first"
            )
        return self.record.deployed_address


class ContractFactory:
    """Builds, signs and submits creation transactions for one artifact."""

    def __init__(
        self,
        artifact: ContractArtifact,
        profile: NetworkProfile,
        w3: Optional[Web3] = None,
    ):
        self.artifact = artifact
        self.profile = profile
        self.w3 = w3 if w3 is not None else connect(profile.rpc_url)
        self.contract = self.w3.eth.contract(abi=artifact.abi, bytecode=artifact.bytecode)

    def _constructor(self, args):
        # Encoding happens locally, before any RPC call
        try:
            return self.contract.constructor(*args)
        except (Web3Exception, TypeError, ValueError) as e:
            raise ContractArgumentError(
                f"Constructor arguments for {self.artifact.contract_name} "
                f"do not match its ABI: {e}"
            ) from e

    def build_deploy_transaction(self, *args: Any) -> Dict[str, Any]:
        """
        Build the unsigned creation transaction.

        Returns:
            Transaction dict with from, nonce, gasPrice, gas, value, data and chainId

        Raises:
            ContractArgumentError: If args do not match the constructor ABI
            ConfigurationError: If the node's chain id differs from the profile
            NetworkError: If the node cannot be reached
            TransactionRevertedError: If gas estimation reverts
        """
        constructor = self._constructor(args)
        check_chain_id(self.w3, self.profile)
        return build_transaction(
            self.w3,
            constructor,
            self.profile.deployer_address,
            self.profile.chain_id,
            f"deployment of {self.artifact.contract_name}",
        )

    def deploy(self, *args: Any) -> Deployment:
        """
        Sign and submit the creation transaction.

        Args:
            *args: Constructor arguments

        Returns:
            Deployment awaiting confirmation
        """
        sender = self.profile.deployer_address
        logger.info(
            f"Deploying {self.artifact.contract_name} from {sender} "
            f"on '{self.profile.name}' (chain {self.profile.chain_id})"
        )

        transaction = self.build_deploy_transaction(*args)
        transaction_hash = sign_and_send(self.w3, transaction, self.profile.private_keys[0])

        logger.info(f"Transaction sent: {transaction_hash}")

        record = DeploymentRecord(
            contract_name=self.artifact.contract_name,
            network=self.profile,
            deployer=sender,
            transaction_hash=transaction_hash,
        )
        return Deployment(record, self.w3)


def get_contract_factory(
    name: str,
    profile: NetworkProfile,
    artifacts_root: Optional[Union[Path, str]] = None,
    w3: Optional[Web3] = None,
) -> ContractFactory:
    """
    Resolve an artifact by name and bind it to a network.

    No RPC calls are made here, so a misnamed contract fails before
    any network traffic.

    Raises:
        ArtifactNotFoundError: If the artifact cannot be found
        DefectiveArtifactError: If the artifact cannot be deployed
    """
    artifact = resolve_artifact(name, artifacts_root)
    return ContractFactory(artifact, profile, w3)


def deploy_contract(
    contract_name: str,
    profile: NetworkProfile,
    *args: Any,
    artifacts_root: Optional[Union[Path, str]] = None,
    w3: Optional[Web3] = None,
    timeout: float = DEFAULT_CONFIRMATION_TIMEOUT,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
) -> DeploymentRecord:
    """
    Deploy a contract and wait for it to be confirmed.

    Args:
        contract_name: Bare or fully qualified contract name
        profile: Target network profile
        *args: Constructor arguments
        artifacts_root: Artifacts directory (defaults to ./artifacts)
        w3: Web3 instance (defaults to one for profile.rpc_url)
        timeout: Seconds to wait for confirmation
        poll_interval: Seconds between receipt polls

    Returns:
        Confirmed DeploymentRecord

    Raises:
        ArtifactNotFoundError: If the contract name is unknown
        NetworkError: If the node cannot be reached
        TransactionRevertedError: If the deployment fails on-chain
        DeploymentTimeoutError: If confirmation never arrives
    """
    factory = get_contract_factory(contract_name, profile, artifacts_root, w3)
    deployment = factory.deploy(*args)
    deployment.wait_for_deployment(timeout=timeout, poll_interval=poll_interval)
    return deployment.record
