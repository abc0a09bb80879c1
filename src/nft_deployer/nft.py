"""Mint and transfer tokens on a deployed MyNFT contract."""

from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from loguru import logger
from web3 import Web3
from web3.logs import DISCARD

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
from .exceptions import ContractArgumentError, EventNotFoundError
from .types import ContractArtifact, MintResult, NetworkProfile

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def _checksum(address: str, role: str) -> str:
    try:
        return Web3.to_checksum_address(address)
    except (TypeError, ValueError) as e:
        raise ContractArgumentError(f"Invalid {role} address: {address!r}") from e


def _token_id(token_id: Union[int, str]) -> int:
    if isinstance(token_id, bool):
        raise ContractArgumentError(f"Invalid token id: {token_id!r}")
    try:
        value = int(token_id)
    except (TypeError, ValueError) as e:
        raise ContractArgumentError(f"Invalid token id: {token_id!r}") from e
    if value < 0:
        raise ContractArgumentError(f"Invalid token id: {token_id!r}")
    return value


class NFTContract:
    """
    A deployed ERC-721 contract exposing mintNFT and transferFrom.

    Transactions are signed with one of the profile's keys, the deployer
    (index 0) unless signer_index says otherwise.
    """

    def __init__(
        self,
        address: str,
        artifact: ContractArtifact,
        profile: NetworkProfile,
        w3: Optional[Web3] = None,
        signer_index: int = 0,
    ):
        if not 0 <= signer_index < len(profile.private_keys):
            raise ContractArgumentError(
                f"Signer index {signer_index} out of range for network '{profile.name}' "
                f"({len(profile.private_keys)} key(s) configured)"
            )
        self.artifact = artifact
        self.profile = profile
        self.w3 = w3 if w3 is not None else connect(profile.rpc_url)
        self.address = _checksum(address, "contract")
        self.contract = self.w3.eth.contract(address=self.address, abi=artifact.abi)
        self._private_key = profile.private_keys[signer_index]
        self.signer = self.w3.eth.account.from_key(self._private_key).address

    @classmethod
    def at(
        cls,
        name: str,
        address: str,
        profile: NetworkProfile,
        artifacts_root: Optional[Union[Path, str]] = None,
        w3: Optional[Web3] = None,
        signer_index: int = 0,
    ) -> "NFTContract":
        """Bind the named artifact's ABI to a contract already on chain."""
        artifact = resolve_artifact(name, artifacts_root)
        return cls(address, artifact, profile, w3, signer_index)

    def _transact(
        self,
        function_name: str,
        args: Tuple[Any, ...],
        timeout: float,
        poll_interval: float,
    ) -> Dict[str, Any]:
        with web3_errors(function_name):
            call = self.contract.functions[function_name](*args)
        check_chain_id(self.w3, self.profile)
        transaction = build_transaction(
            self.w3, call, self.signer, self.profile.chain_id, function_name
        )
        transaction_hash = sign_and_send(self.w3, transaction, self._private_key)
        logger.info(f"Transaction sent: {transaction_hash}")
        return wait_for_receipt(self.w3, transaction_hash, timeout, poll_interval)

    def mint(
        self,
        recipient: str,
        token_uri: str,
        timeout: float = DEFAULT_CONFIRMATION_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> MintResult:
        """
        Call mintNFT(recipient, token_uri) and wait for it to be mined.

        The token id is read from the mint's Transfer event
        (from the zero address to recipient).

        Returns:
            MintResult with the new token id

        Raises:
            ContractArgumentError: If recipient is not an address
            TransactionRevertedError: If the mint reverts
            EventNotFoundError: If the receipt carries no matching Transfer event
        """
        recipient = _checksum(recipient, "recipient")
        logger.info(f"Minting token to {recipient} with URI {token_uri}")

        receipt = self._transact(
            "mintNFT",
            (recipient, token_uri),
            timeout,
            poll_interval,
        )
        transaction_hash = Web3.to_hex(receipt["transactionHash"])

        events = self.contract.events.Transfer().process_receipt(receipt, errors=DISCARD)
        for event in events:
            if event["args"]["from"] == ZERO_ADDRESS and event["args"]["to"] == recipient:
                token_id = event["args"]["tokenId"]
                logger.info(f"Minted token {token_id} in {transaction_hash}")
                return MintResult(
                    token_id=token_id,
                    transaction_hash=transaction_hash,
                    recipient=recipient,
                    token_uri=token_uri,
                )

        raise EventNotFoundError(
            f"No Transfer event minting to {recipient} in transaction {transaction_hash}"
        )

    def transfer(
        self,
        from_address: str,
        to_address: str,
        token_id: Union[int, str],
        timeout: float = DEFAULT_CONFIRMATION_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> str:
        """
        Call transferFrom(from_address, to_address, token_id) and wait for it.

        The signer must own the token or be approved for it, otherwise the
        node rejects the call during gas estimation.

        Args:
            token_id: Token id as an int or a decimal string

        Returns:
            Transaction hash

        Raises:
            ContractArgumentError: If an address or the token id is malformed
            TransactionRevertedError: If the transfer reverts
        """
        from_address = _checksum(from_address, "sender")
        to_address = _checksum(to_address, "recipient")
        token_id = _token_id(token_id)
        logger.info(f"Transferring token {token_id} from {from_address} to {to_address}")

        receipt = self._transact(
            "transferFrom",
            (from_address, to_address, token_id),
            timeout,
            poll_interval,
        )
        return Web3.to_hex(receipt["transactionHash"])
