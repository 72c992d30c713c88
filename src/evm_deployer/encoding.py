"""Constructor argument encoding for evm-contract-deployer."""

from typing import Any, Dict, List, Sequence

import eth_abi.abi
from eth_abi.exceptions import EncodingError, ParseError
from eth_abi.grammar import ABIType, TupleType, parse
from eth_utils import is_checksum_address
from eth_utils.abi import collapse_if_tuple

from .exceptions import ArgumentMismatchError
from .types import ContractArtifact


def constructor_inputs(abi: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Return the constructor's ABI inputs, empty when the ABI has none."""
    for item in abi:
        if item.get("type") == "constructor":
            return list(item.get("inputs", []))
    return []


def constructor_types(abi: List[Dict[str, Any]]) -> List[str]:
    """
    Get the constructor's parameter types.

    Args:
        abi: Contract ABI

    Returns:
        ABI type strings, tuple components collapsed (e.g. "(address,uint256)[]")
    """
    return [collapse_if_tuple(item) for item in constructor_inputs(abi)]


def coerce_argument(abi_type: str, value: Any) -> Any:
    """
    Convert a JSON-friendly value into what the ABI encoder expects.

    Integers may be given as decimal or 0x strings, byte strings as 0x hex.
    Arrays and tuples are converted element-wise. Values that cannot be
    converted are returned unchanged for the encoder to reject.

    Raises:
        ArgumentMismatchError: If abi_type is not a valid ABI type, or an
            address has a wrong checksum
    """
    try:
        parsed = parse(abi_type)
    except ParseError as e:
        raise ArgumentMismatchError(f"Unsupported ABI type '{abi_type}': {e}") from e
    return _coerce(parsed, value)


def _coerce(parsed: ABIType, value: Any) -> Any:
    if parsed.is_array:
        if isinstance(value, (list, tuple)):
            return [_coerce(parsed.item_type, item) for item in value]
        return value

    if isinstance(parsed, TupleType):
        if isinstance(value, (list, tuple)) and len(value) == len(parsed.components):
            return tuple(
                _coerce(component, item) for component, item in zip(parsed.components, value)
            )
        return value

    if parsed.base in ("uint", "int") and isinstance(value, str):
        try:
            return int(value, 0)
        except ValueError:
            return value

    if parsed.base == "address" and isinstance(value, str):
        digits = value[2:] if value.startswith("0x") else value
        # Mixed case means an EIP-55 checksum, which must be right
        if digits != digits.lower() and digits != digits.upper() and not is_checksum_address(value):
            raise ArgumentMismatchError(f"Address {value} has an invalid EIP-55 checksum")
        return value

    if parsed.base == "bytes" and isinstance(value, str) and value.startswith("0x"):
        try:
            return bytes.fromhex(value[2:])
        except ValueError:
            return value

    return value


def encode_constructor_args(abi: List[Dict[str, Any]], args: Sequence[Any]) -> bytes:
    """
    ABI-encode constructor arguments.

    Args:
        abi: Contract ABI
        args: Constructor arguments in declaration order

    Returns:
        Encoded arguments (empty for a constructor without parameters)

    Raises:
        ArgumentMismatchError: If the count or any type does not match the ABI
    """
    inputs = constructor_inputs(abi)
    types = [collapse_if_tuple(item) for item in inputs]

    if len(args) != len(types):
        raise ArgumentMismatchError(
            f"Constructor expects {len(types)} argument(s) "
            f"({', '.join(types) or 'none'}), got {len(args)}"
        )

    values = []
    for position, (item, abi_type, arg) in enumerate(zip(inputs, types, args)):
        label = item.get("name") or f"#{position}"
        try:
            value = coerce_argument(abi_type, arg)
        except ArgumentMismatchError as e:
            raise ArgumentMismatchError(
                f"Constructor argument {position} ({label}): {e}"
            ) from None
        if not eth_abi.abi.is_encodable(abi_type, value):
            raise ArgumentMismatchError(
                f"Constructor argument {position} ({label}) is not a valid {abi_type}: {arg!r}"
            )
        values.append(value)

    if not types:
        return b""

    try:
        return eth_abi.abi.encode(types, values)
    except EncodingError as e:
        raise ArgumentMismatchError(f"Cannot encode constructor arguments: {e}") from e


def build_deploy_data(artifact: ContractArtifact, args: Sequence[Any]) -> str:
    """
    Build the data field of a contract-creation transaction.

    Args:
        artifact: Compiled contract
        args: Constructor arguments

    Returns:
        0x-prefixed creation bytecode followed by the encoded arguments
    """
    encoded = encode_constructor_args(artifact.abi, args)
    return artifact.bytecode + encoded.hex()
