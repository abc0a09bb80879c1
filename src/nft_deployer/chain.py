"""web3.py connection and transaction helpers shared by deployments and contract calls."""

from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

import requests
from eth_account import Account
from loguru import logger
from web3 import Web3
from web3.exceptions import (
    ABIFunctionNotFound,
    ContractLogicError,
    MismatchedABI,
    NoABIFound,
    NoABIFunctionsFound,
    ProviderConnectionError,
    TimeExhausted,
    Web3Exception,
    Web3RPCError,
    Web3ValidationError,
)

from .constants import (
    DEFAULT_CONFIRMATION_TIMEOUT,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_RPC_TIMEOUT,
    GAS_LIMIT_MULTIPLIER,
)
from .exceptions import (
    ConfigurationError,
    ContractArgumentError,
    DefectiveArtifactError,
    DeploymentTimeoutError,
    NetworkError,
    RpcError,
    TransactionRevertedError,
)
from .types import NetworkProfile


def connect(rpc_url: str, timeout: float = DEFAULT_RPC_TIMEOUT) -> Web3:
    """
    Create a Web3 instance for an HTTP JSON-RPC endpoint.

    The provider owns its requests session. Retries are disabled so an
    unreachable node fails on the first request.
    """
    provider = Web3.HTTPProvider(
        rpc_url,
        request_kwargs={"timeout": timeout},
        exception_retry_configuration=None,
    )
    return Web3(provider)


def _rpc_error_code(error: Web3RPCError) -> Optional[int]:
    response = getattr(error, "rpc_response", None) or {}
    code = response.get("error", {}).get("code") if isinstance(response, dict) else None
    return code if isinstance(code, int) else None


@contextmanager
def web3_errors(action: str) -> Iterator[None]:
    """
    Translate web3.py and requests failures into DeploymentError subclasses.

    Args:
        action: What was being attempted, used in error messages
    """
    try:
        yield
    except ContractLogicError as e:
        raise TransactionRevertedError(f"Transaction reverted during {action}: {e}") from e
    except TimeExhausted as e:
        raise DeploymentTimeoutError(f"Timed out during {action}: {e}") from e
    except ProviderConnectionError as e:
        raise NetworkError(f"Network error during {action}: {e}") from e
    except Web3RPCError as e:
        # Ganache reports reverts as plain RPC errors
        if "revert" in str(e).lower():
            raise TransactionRevertedError(f"Transaction reverted during {action}: {e}") from e
        raise RpcError(f"RPC error during {action}: {e}", _rpc_error_code(e)) from e
    except (ABIFunctionNotFound, NoABIFound, NoABIFunctionsFound) as e:
        raise DefectiveArtifactError(f"Contract ABI does not support {action}: {e}") from e
    except (MismatchedABI, Web3ValidationError) as e:
        raise ContractArgumentError(f"Invalid arguments for {action}: {e}") from e
    except Web3Exception as e:
        raise RpcError(f"RPC error during {action}: {e}") from e
    except requests.RequestException as e:
        raise NetworkError(f"Network error during {action}: {e}") from e


def check_chain_id(w3: Web3, profile: NetworkProfile) -> int:
    """
    Verify the node serves the chain the profile expects.

    Raises:
        ConfigurationError: If the node reports a different chain id
    """
    with web3_errors("eth_chainId"):
        node_chain_id = w3.eth.chain_id
    if node_chain_id != profile.chain_id:
        raise ConfigurationError(
            f"Network '{profile.name}' expects chain id {profile.chain_id} "
            f"but node at {profile.rpc_url} reports {node_chain_id}"
        )
    return node_chain_id


def build_transaction(
    w3: Web3, call: Any, sender: str, chain_id: int, action: str
) -> Dict[str, Any]:
    """
    Fill in a legacy transaction for a contract constructor or function call.

    The gas limit is the node's estimate times GAS_LIMIT_MULTIPLIER; the
    nonce counts pending transactions so back-to-back sends do not collide.

    Args:
        w3: Connected Web3 instance
        call: ContractConstructor or bound ContractFunction
        sender: Checksummed sender address
        chain_id: Chain id to sign for
        action: What is being attempted, used in error messages

    Raises:
        NetworkError: If the node cannot be reached
        TransactionRevertedError: If gas estimation reverts
    """
    with web3_errors(action):
        nonce = w3.eth.get_transaction_count(sender, "pending")
        gas_price = w3.eth.gas_price
        gas_limit = int(call.estimate_gas({"from": sender}) * GAS_LIMIT_MULTIPLIER)
        transaction = call.build_transaction(
            {
                "from": sender,
                "nonce": nonce,
                "gas": gas_limit,
                "gasPrice": gas_price,
                "chainId": chain_id,
            }
        )

    logger.debug(f"Nonce {nonce}, gas limit {gas_limit}, gas price {gas_price} wei")
    return transaction


def sign_and_send(w3: Web3, transaction: Dict[str, Any], private_key: str) -> str:
    """
    Sign a transaction locally and submit it with eth_sendRawTransaction.

    Returns:
        0x-prefixed transaction hash
    """
    signed = Account.sign_transaction(transaction, private_key)
    with web3_errors("eth_sendRawTransaction"):
        tx_hash = w3.eth.send_raw_transaction(signed.raw_transaction)
    return Web3.to_hex(tx_hash)


def wait_for_receipt(
    w3: Web3,
    transaction_hash: str,
    timeout: float = DEFAULT_CONFIRMATION_TIMEOUT,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
) -> Dict[str, Any]:
    """
    Block until a transaction is mined and check that it succeeded.

    Returns:
        The transaction receipt

    Raises:
        DeploymentTimeoutError: If no receipt arrives within timeout
        TransactionRevertedError: If the receipt status is not 1
    """
    with web3_errors("eth_getTransactionReceipt"):
        try:
            receipt = w3.eth.wait_for_transaction_receipt(
                transaction_hash, timeout=timeout, poll_latency=poll_interval
            )
        except TimeExhausted as e:
            raise DeploymentTimeoutError(
                f"Transaction {transaction_hash} not mined within {timeout}s"
            ) from e

    if receipt["status"] != 1:
        raise TransactionRevertedError(
            f"Transaction {transaction_hash} reverted in block {receipt['blockNumber']}"
        )
    logger.debug(
        f"Transaction {transaction_hash} mined in block {receipt['blockNumber']}, "
        f"gas used {receipt['gasUsed']}"
    )
    return receipt
