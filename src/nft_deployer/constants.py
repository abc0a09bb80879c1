"""Configuration constants for nft-deployer."""

DEFAULT_NETWORK = "ganache"
DEFAULT_CONTRACT_NAME = "MyNFT"

# Solidity compiler version used to build artifacts
SOLIDITY_VERSION = "0.8.28"

# Known development networks
# Env prefixes resolve <PREFIX>_RPC_URL, <PREFIX>_CHAIN_ID and <PREFIX>_PRIVATE_KEYS
NETWORK_CONFIG = {
    "ganache": {
        "chain_id": 1337,
        "default_rpc_url": "http://127.0.0.1:7545",
        "env_prefix": "GANACHE",
    },
    "localhost": {
        "chain_id": 31337,
        "default_rpc_url": "http://127.0.0.1:8545",
        "env_prefix": "LOCALHOST",
    },
}

# Hardhat artifact format marker
HARDHAT_ARTIFACT_FORMAT = "hh-sol-artifact-1"

# RPC and confirmation timing (seconds)
DEFAULT_RPC_TIMEOUT = 30
DEFAULT_CONFIRMATION_TIMEOUT = 300
DEFAULT_POLL_INTERVAL = 1.0

# Buffer applied on top of eth_estimateGas
GAS_LIMIT_MULTIPLIER = 1.2
