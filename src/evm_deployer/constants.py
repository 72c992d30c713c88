"""Configuration constants for evm-contract-deployer."""

DEFAULT_NETWORK = "local"
DEFAULT_CONTRACT_NAME = "GoldSilverStablecoin"

# Known networks; RPC_URL and CHAIN_ID environment variables override the defaults
NETWORK_CONFIG = {
    "local": {
        "chain_id": 31337,
        "chain_name": "Hardhat Network",
        "default_rpc_url": "http://127.0.0.1:8545",
    },
}

RPC_URL_ENV = "RPC_URL"
CHAIN_ID_ENV = "CHAIN_ID"
PRIVATE_KEY_ENV = "PRIVATE_KEY"

# Seconds
DEFAULT_CONFIRMATION_TIMEOUT = 30.0
DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_RPC_TIMEOUT = 30
MIN_RECEIPT_REQUEST_TIMEOUT = 0.1

# Applied to eth_estimateGas results for locally signed transactions
GAS_LIMIT_MULTIPLIER = 1.2

# Build output directories, relative to the project root
HARDHAT_ARTIFACTS_DIR = "artifacts"
FOUNDRY_OUT_DIR = "out"
HARDHAT_ARTIFACT_FORMAT = "hh-sol-artifact-1"
