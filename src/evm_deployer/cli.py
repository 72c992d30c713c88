"""Command line interface for evm-contract-deployer."""

import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, NoReturn, Optional, Tuple

import click
from dotenv import load_dotenv

from .artifacts import ArtifactStore
from .constants import (
    DEFAULT_CONFIRMATION_TIMEOUT,
    DEFAULT_CONTRACT_NAME,
    DEFAULT_NETWORK,
    NETWORK_CONFIG,
    PRIVATE_KEY_ENV,
)
from .config import load_network_config
from .deployer import Deployer, query_transaction
from .exceptions import ArgumentMismatchError, DeploymentError
from .logging import logger
from .rpc import RpcClient
from .signers import LocalAccountSigner, NodeAccountSigner
from .types import DeploymentRequest

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


def parse_constructor_args(args_json: str) -> Tuple[Any, ...]:
    """
    Parse the --args option.

    Raises:
        ArgumentMismatchError: If the value is not a JSON array
    """
    try:
        args = json.loads(args_json)
    except json.JSONDecodeError as e:
        raise ArgumentMismatchError(f"--args is not valid JSON: {e}") from None

    if not isinstance(args, list):
        raise ArgumentMismatchError("--args must be a JSON array")
    return tuple(args)


def _signer_from_env(private_key_env: str):
    private_key = os.environ.get(private_key_env)
    if private_key:
        return LocalAccountSigner(private_key)
    return NodeAccountSigner()


def _fail(error: DeploymentError) -> NoReturn:
    """Report a deployment error on stderr and exit non-zero."""
    message = f"{error.kind}: {error}"
    transaction_hash = getattr(error, "transaction_hash", None)
    if transaction_hash:
        message += f" (transaction hash: {transaction_hash})"
    click.echo(message, err=True)
    sys.exit(EXIT_FAILURE)


@click.group()
@click.version_option(package_name="evm-contract-deployer")
@click.option("-v", "--verbose", is_flag=True, help="Log debug output.")
def cli(verbose: bool) -> None:
    """
    Deploy compiled contracts to an Ethereum-compatible network.

    RPC_URL and CHAIN_ID environment variables (or a .env file in the current
    directory) override the selected network's endpoint and chain id.
    """
    load_dotenv(Path.cwd() / ".env", override=False)
    if verbose:
        logger.setLevel(logging.DEBUG)


@cli.command()
@click.option(
    "--network",
    default=DEFAULT_NETWORK,
    show_default=True,
    help=f"Network name (known: {', '.join(sorted(NETWORK_CONFIG))}).",
)
@click.option(
    "--args",
    "args_json",
    default="[]",
    show_default=True,
    help="Constructor arguments as a JSON array.",
)
@click.option("--contract", default=DEFAULT_CONTRACT_NAME, show_default=True)
@click.option(
    "--project-root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding Hardhat artifacts/ or Foundry out/ [default: current directory]",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=DEFAULT_CONFIRMATION_TIMEOUT,
    show_default=True,
    help="Seconds to wait for the deployment to be mined.",
)
@click.option(
    "--private-key-env",
    default=PRIVATE_KEY_ENV,
    show_default=True,
    help="Environment variable holding a private key; node accounts are used when unset.",
)
def deploy(
    network: str,
    args_json: str,
    contract: str,
    project_root: Optional[Path],
    timeout: float,
    private_key_env: str,
) -> None:
    """
    Deploy a contract and print its address.

    Every run creates a new contract. After a timeout, check the reported
    transaction hash with "status" before running again.
    """
    try:
        constructor_args = parse_constructor_args(args_json)
        network_config = load_network_config(network)
        deployer = Deployer(
            network_config,
            ArtifactStore(project_root),
            signer=_signer_from_env(private_key_env),
            confirmation_timeout=timeout,
        )
        request = DeploymentRequest(
            contract_name=contract,
            constructor_args=constructor_args,
            network=network_config,
        )
        result = asyncio.run(deployer.deploy(request))
    except DeploymentError as e:
        _fail(e)

    click.echo(result.contract_address)


@cli.command()
@click.argument("transaction_hash")
@click.option(
    "--network",
    default=DEFAULT_NETWORK,
    show_default=True,
    help=f"Network name (known: {', '.join(sorted(NETWORK_CONFIG))}).",
)
def status(transaction_hash: str, network: str) -> None:
    """
    Show whether a deployment transaction was mined.

    Exits 0 only when the contract was created.
    """
    try:
        network_config = load_network_config(network)
        tx_status = query_transaction(RpcClient(network_config.endpoint_url), transaction_hash)
    except DeploymentError as e:
        _fail(e)

    if tx_status.result is not None:
        click.echo(f"{tx_status.status} {tx_status.result.contract_address}")
        sys.exit(EXIT_SUCCESS)

    click.echo(tx_status.status)
    sys.exit(EXIT_FAILURE)


@cli.command()
@click.option(
    "--project-root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
)
def contracts(project_root: Optional[Path]) -> None:
    """
    List contracts with compiled artifacts.
    """
    for name in ArtifactStore(project_root).contract_names():
        click.echo(name)
