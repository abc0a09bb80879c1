"""Network profile loading for nft-deployer."""

import os
import re
from typing import List, Optional, Sequence

from eth_account import Account
from eth_utils import ValidationError

from .constants import NETWORK_CONFIG, SOLIDITY_VERSION
from .exceptions import ConfigurationError, NetworkNotFoundError
from .types import NetworkProfile

_PRIVATE_KEY_PATTERN = re.compile(r"^(0x)?[0-9a-fA-F]{64}$")
SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141


def normalize_private_key(key: str) -> str:
    """
    Normalize a hex private key to lowercase 0x-prefixed form.

    Args:
        key: 32-byte private key, with or without 0x prefix

    Returns:
        Normalized private key

    Raises:
        ConfigurationError: If key is not 32 bytes of hex or not a valid
            secp256k1 scalar
    """
    key = key.strip()
    if not _PRIVATE_KEY_PATTERN.match(key):
        # Never echo the key itself
        raise ConfigurationError("Private key must be 32 bytes of hex (64 characters)")
    if key.startswith("0x"):
        key = key[2:]
    key = "0x" + key.lower()

    invalid = "Private key is not a usable secp256k1 key (must be between 1 and the curve order)"
    if not 0 < int(key, 16) < SECP256K1_ORDER:
        raise ConfigurationError(invalid)
    try:
        Account.from_key(key)
    except (ValueError, ValidationError) as e:
        raise ConfigurationError(invalid) from e
    return key


def parse_private_keys(value: str) -> List[str]:
    """
    Parse a comma-separated list of private keys, preserving order.

    Empty entries (e.g., from a trailing comma) are ignored.
    """
    return [normalize_private_key(k) for k in value.split(",") if k.strip()]


def parse_chain_id(value: str, source: str = "chain id") -> int:
    """Parse a decimal ("1337", "01337") or 0x-prefixed hex ("0x539") chain id."""
    raw = value.strip()
    try:
        if raw.lower().startswith("0x"):
            return int(raw, 16)
        return int(raw, 10)
    except ValueError as e:
        raise ConfigurationError(f"{source} must be an integer, got '{value}'") from e


def load_network_profile(
    network: str = "ganache",
    rpc_url: Optional[str] = None,
    chain_id: Optional[int] = None,
    private_keys: Optional[Sequence[str]] = None,
    solidity_version: Optional[str] = None,
) -> NetworkProfile:
    """
    Build the profile for a named network.

    Explicit arguments take precedence over environment variables
    (<PREFIX>_RPC_URL, <PREFIX>_CHAIN_ID, <PREFIX>_PRIVATE_KEYS, SOLC_VERSION),
    which take precedence over the defaults in NETWORK_CONFIG.
    Private keys have no default.

    Args:
        network: Network name ("ganache" or "localhost")
        rpc_url: RPC endpoint URL
        chain_id: Expected chain identifier
        private_keys: Ordered signing keys; the first one deploys
        solidity_version: Solidity compiler version

    Returns:
        NetworkProfile

    Raises:
        NetworkNotFoundError: If network is not in NETWORK_CONFIG
        ConfigurationError: If a setting is missing or malformed
    """
    if network not in NETWORK_CONFIG:
        raise NetworkNotFoundError(
            f"Network '{network}' not configured (known: {', '.join(sorted(NETWORK_CONFIG))})"
        )

    network_config = NETWORK_CONFIG[network]
    prefix = network_config["env_prefix"]

    if rpc_url is None:
        rpc_url = os.environ.get(f"{prefix}_RPC_URL", network_config["default_rpc_url"])
    if not rpc_url:
        raise ConfigurationError(f"RPC URL for network '{network}' is empty")

    if chain_id is None:
        raw_chain_id = os.environ.get(f"{prefix}_CHAIN_ID")
        if raw_chain_id is None:
            chain_id = network_config["chain_id"]
        else:
            chain_id = parse_chain_id(raw_chain_id, f"{prefix}_CHAIN_ID")
    elif isinstance(chain_id, bool) or not isinstance(chain_id, int):
        raise ConfigurationError(
            f"chain_id must be an int, got {type(chain_id).__name__} {chain_id!r}"
        )
    if chain_id <= 0:
        raise ConfigurationError(f"chain_id must be positive, got {chain_id}")

    if private_keys is None:
        keys = parse_private_keys(os.environ.get(f"{prefix}_PRIVATE_KEYS", ""))
    else:
        keys = [normalize_private_key(k) for k in private_keys]

    if not keys:
        raise ConfigurationError(
            f"No signing keys for network '{network}': set ${prefix}_PRIVATE_KEYS "
            "or pass private_keys parameter"
        )

    if solidity_version is None:
        solidity_version = os.environ.get("SOLC_VERSION", SOLIDITY_VERSION)

    return NetworkProfile(
        name=network,
        rpc_url=rpc_url,
        chain_id=chain_id,
        solidity_version=solidity_version,
        private_keys=tuple(keys),
    )
