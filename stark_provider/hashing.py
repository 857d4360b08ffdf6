"""
Ledger hashing boundary: selectors, class hashes, contract addresses.

Entry point selectors use the ledger's 250-bit Keccak:

    selector = keccak256(name) & (2**250 - 1)

Contract address derivation is the ledger's Pedersen chain:

    address = H([CONTRACT_ADDRESS_PREFIX, deployer_address, salt,
                 class_hash, H(constructor_calldata)]) mod L2_ADDRESS_UPPER_BOUND

where H is ``compute_hash_on_elements``. The element hash and the class
hash are delegated to a ``ContractHasher``; the default
``PedersenContractHasher`` uses starknet-py's implementations, so its
predictions match the address the gateway assigns.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from eth_hash.auto import keccak
from marshmallow import ValidationError
from starknet_py.common import create_compiled_contract
from starknet_py.hash.class_hash import compute_class_hash
from starknet_py.hash.utils import compute_hash_on_elements

from stark_provider.contract import CompiledContract
from stark_provider.felt import BigNumberish, to_felt, to_hex

_MASK_250 = 2**250 - 1

CONTRACT_ADDRESS_PREFIX = int.from_bytes(b"STARKNET_CONTRACT_ADDRESS", "big")
L2_ADDRESS_UPPER_BOUND = 2**251 - 256


def starknet_keccak(data: bytes) -> int:
    """Keccak-256 of data, truncated to 250 bits."""
    return int.from_bytes(keccak(data), "big") & _MASK_250


def get_selector_from_name(name: str) -> str:
    """Entry point selector for a function name, as 0x hex."""
    if not name:
        raise ValueError("entry point name must be non-empty")
    return to_hex(starknet_keccak(name.encode("ascii")))


# =========================================================================
# Hasher protocol
# =========================================================================


@runtime_checkable
class ContractHasher(Protocol):
    """Hash functions used to derive contract addresses off-chain."""

    def class_hash(self, contract: CompiledContract) -> int:
        """Identifier of the contract class (code), independent of any instance."""
        ...

    def hash_elements(self, values: Sequence[int]) -> int:
        """Hash an ordered sequence of field elements to one field element."""
        ...


class PedersenContractHasher:
    """Ledger-exact hasher backed by starknet-py.

    ``class_hash`` needs a complete compiler artifact (builtins, hints,
    identifiers and so on); a partial one raises ValueError.
    """

    def class_hash(self, contract: CompiledContract) -> int:
        try:
            contract_class = create_compiled_contract(
                compiled_contract=contract.canonical_bytes().decode("utf-8")
            )
            return compute_class_hash(contract_class)
        except (ValidationError, KeyError, TypeError, AttributeError) as exc:
            raise ValueError(f"incomplete compiled contract: {exc}") from exc

    def hash_elements(self, values: Sequence[int]) -> int:
        return compute_hash_on_elements([to_felt(v) for v in values])


def compute_contract_address(
    salt: BigNumberish,
    class_hash: int,
    constructor_calldata: Sequence[BigNumberish],
    deployer_address: BigNumberish = 0,
    hasher: ContractHasher | None = None,
) -> str:
    """Predict the address a deploy will land at.

    Pure function: identical inputs always yield the identical address.

    Returns:
        0x-prefixed hex contract address.
    """
    hasher = hasher or PedersenContractHasher()
    calldata_hash = hasher.hash_elements([to_felt(v) for v in constructor_calldata])
    address = hasher.hash_elements(
        [
            CONTRACT_ADDRESS_PREFIX,
            to_felt(deployer_address),
            to_felt(salt),
            to_felt(class_hash),
            calldata_hash,
        ]
    )
    return to_hex(address % L2_ADDRESS_UPPER_BOUND)
