"""Network configuration loading for evm-contract-deployer."""

import os
from typing import Mapping, Optional

from .constants import CHAIN_ID_ENV, DEFAULT_NETWORK, NETWORK_CONFIG, RPC_URL_ENV
from .exceptions import ConfigurationError, NetworkNotFoundError
from .types import NetworkConfig


def load_network_config(
    network: str = DEFAULT_NETWORK, environ: Optional[Mapping[str, str]] = None
) -> NetworkConfig:
    """
    Build the NetworkConfig for a named network.

    This is the only place environment variables are read; call it once at
    startup and pass the result around.

    Args:
        network: Network name (see NETWORK_CONFIG)
        environ: Environment mapping (defaults to os.environ)

    Returns:
        NetworkConfig with $RPC_URL / $CHAIN_ID overrides applied

    Raises:
        NetworkNotFoundError: If network is not known
        ConfigurationError: If $CHAIN_ID is not an integer
    """
    if network not in NETWORK_CONFIG:
        raise NetworkNotFoundError(
            f"Network '{network}' not found; known networks: "
            f"{', '.join(sorted(NETWORK_CONFIG))}"
        )

    if environ is None:
        environ = os.environ

    defaults = NETWORK_CONFIG[network]

    # Empty values count as unset
    endpoint_url = environ.get(RPC_URL_ENV) or defaults["default_rpc_url"]

    chain_id = defaults["chain_id"]
    raw_chain_id = environ.get(CHAIN_ID_ENV)
    if raw_chain_id:
        chain_id = parse_chain_id(raw_chain_id)

    return NetworkConfig(name=network, endpoint_url=endpoint_url, chain_id=chain_id)


def parse_chain_id(value: str) -> int:
    """
    Parse a chain id given in decimal or 0x-prefixed hex.

    Raises:
        ConfigurationError: If value is not a positive integer
    """
    try:
        chain_id = int(value.strip(), 0)
    except ValueError:
        raise ConfigurationError(f"Invalid ${CHAIN_ID_ENV}: {value!r}") from None

    if chain_id <= 0:
        raise ConfigurationError(f"Invalid ${CHAIN_ID_ENV}: {value!r}")
    return chain_id
