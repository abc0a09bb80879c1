"""Data types and dataclasses for nft-deployer."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from eth_account import Account


@dataclass(frozen=True)
class NetworkProfile:
    """Connection and signing settings for one target network."""

    name: str  # e.g., "ganache"
    rpc_url: str  # e.g., "http://127.0.0.1:7545"
    chain_id: int  # e.g., 1337
    solidity_version: str  # e.g., "0.8.28"
    private_keys: Tuple[str, ...] = field(default=(), repr=False)  # 0x-prefixed, ordered

    @property
    def deployer_address(self) -> str:
        """Checksummed address of the first signing key."""
        return Account.from_key(self.private_keys[0]).address


@dataclass
class ContractArtifact:
    """Compiled contract loaded from a Hardhat artifact file."""

    contract_name: str  # e.g., "MyNFT"
    source_name: str  # e.g., "contracts/MyNFT.sol"
    abi: List[Dict[str, Any]]
    bytecode: str  # 0x-prefixed creation code

    deployed_bytecode: Optional[str] = None
    link_references: Dict[str, Any] = field(default_factory=dict)

    @property
    def fully_qualified_name(self) -> str:
        return f"{self.source_name}:{self.contract_name}"

    def constructor_abi(self) -> Optional[Dict[str, Any]]:
        """Return the constructor ABI entry, if the contract declares one."""
        for item in self.abi:
            if item.get("type") == "constructor":
                return item
        return None


@dataclass
class DeploymentRecord:
    """Outcome of a single contract deployment."""

    contract_name: str
    network: NetworkProfile
    deployer: str  # Checksummed sender address
    transaction_hash: str

    # Set only once the transaction is confirmed
    deployed_address: Optional[str] = None
    block_number: Optional[int] = None
    gas_used: Optional[int] = None

    @property
    def confirmed(self) -> bool:
        return self.deployed_address is not None


@dataclass(frozen=True)
class MintResult:
    """Token minted by a mintNFT transaction."""

    token_id: int
    transaction_hash: str
    recipient: str  # Checksummed
    token_uri: str
