"""
Tests for selectors, contract artifacts, and address prediction.

Test plan:
- Selector: 250-bit keccak of the name, known value for increase_balance
- Canonical bytes: key order never changes them
- CompiledContract: parsing, validation, extra keys preserved
- compress_program: deterministic, round-trips through gzip
- Pedersen element hash: reference vectors
- compute_contract_address: matches starknet-py's compute_address,
  pure, sensitive to every input, custom hasher honored
- Default class hash refuses partial artifacts
"""

from __future__ import annotations

import base64
import gzip
import json
from collections.abc import Sequence

import pytest
from starknet_py.hash.address import compute_address
from starknet_py.hash.utils import pedersen_hash

from stark_provider.contract import (
    CompiledContract,
    compress_program,
    parse_contract,
    to_contract_definition,
)
from stark_provider.felt import FIELD_PRIME
from stark_provider.hashing import (
    ContractHasher,
    L2_ADDRESS_UPPER_BOUND,
    PedersenContractHasher,
    compute_contract_address,
    get_selector_from_name,
    starknet_keccak,
)

SAMPLE_CONTRACT = {
    "abi": [{"name": "increase_balance", "type": "function"}],
    "entry_points_by_type": {"CONSTRUCTOR": [], "EXTERNAL": [], "L1_HANDLER": []},
    "program": {"data": ["0x1", "0x2"], "prime": "0x800000000000011"},
}


class TestSelector:
    def test_known_selector(self) -> None:
        assert get_selector_from_name("increase_balance") == (
            "0x362398bec32bc0ebb411203221a35a0301193a96f317ebe5e40be9f60d15320"
        )

    def test_fits_250_bits(self) -> None:
        assert starknet_keccak(b"anything") < 2**250

    def test_empty_name(self) -> None:
        with pytest.raises(ValueError):
            get_selector_from_name("")


class TestCanonicalBytes:
    def test_key_order_irrelevant(self) -> None:
        reordered = {
            "program": {"prime": "0x800000000000011", "data": ["0x1", "0x2"]},
            "entry_points_by_type": {"L1_HANDLER": [], "EXTERNAL": [], "CONSTRUCTOR": []},
            "abi": SAMPLE_CONTRACT["abi"],
        }
        assert (
            CompiledContract.from_dict(reordered).canonical_bytes()
            == CompiledContract.from_dict(SAMPLE_CONTRACT).canonical_bytes()
        )

    def test_compact(self) -> None:
        contract = CompiledContract(program={"a": [1, 2]}, entry_points_by_type={})
        assert contract.canonical_bytes() == b'{"entry_points_by_type":{},"program":{"a":[1,2]}}'

    def test_nan_rejected(self) -> None:
        contract = CompiledContract(program={"x": float("nan")}, entry_points_by_type={})
        with pytest.raises(ValueError):
            contract.canonical_bytes()


class TestCompiledContract:
    def test_from_dict(self) -> None:
        contract = CompiledContract.from_dict(SAMPLE_CONTRACT)
        assert contract.program == SAMPLE_CONTRACT["program"]
        assert contract.abi == SAMPLE_CONTRACT["abi"]
        assert contract.to_dict() == SAMPLE_CONTRACT

    def test_extra_keys_preserved(self) -> None:
        contract = CompiledContract.from_dict({**SAMPLE_CONTRACT, "debug_info": None})
        assert contract.to_dict()["debug_info"] is None

    def test_abi_optional(self) -> None:
        data = {k: v for k, v in SAMPLE_CONTRACT.items() if k != "abi"}
        assert "abi" not in CompiledContract.from_dict(data).to_dict()

    def test_missing_program(self) -> None:
        with pytest.raises(ValueError, match="program"):
            CompiledContract.from_dict({"entry_points_by_type": {}})

    def test_invalid_json(self) -> None:
        with pytest.raises(ValueError):
            parse_contract("{not json")

    def test_parse_contract_idempotent(self) -> None:
        contract = CompiledContract.from_dict(SAMPLE_CONTRACT)
        assert parse_contract(contract) is contract


class TestCompression:
    def test_round_trip(self) -> None:
        encoded = compress_program(SAMPLE_CONTRACT["program"])
        decoded = json.loads(gzip.decompress(base64.b64decode(encoded)))
        assert decoded == SAMPLE_CONTRACT["program"]

    def test_deterministic(self) -> None:
        program = SAMPLE_CONTRACT["program"]
        assert compress_program(program) == compress_program(program)

    def test_definition_keeps_abi_and_entry_points(self) -> None:
        definition = to_contract_definition(CompiledContract.from_dict(SAMPLE_CONTRACT))
        assert definition["abi"] == SAMPLE_CONTRACT["abi"]
        assert definition["entry_points_by_type"] == SAMPLE_CONTRACT["entry_points_by_type"]
        assert isinstance(definition["program"], str)


class TestPedersen:
    def test_reference_vector(self) -> None:
        assert pedersen_hash(
            0x3D937C035C878245CAF64531A5756109C53068DA139362728FEB561405371CB,
            0x208A0A10250E382E1E4BBE2880906C2791BF6275695E02FBBC6AEFF9CD8B31A,
        ) == 0x30E480BED5FE53FA909CC0F8C4D99B8F9F2C016BE4C41E13A4848797979C662

    def test_empty_sequence(self) -> None:
        # H([]) folds only the length: pedersen(0, 0)
        assert PedersenContractHasher().hash_elements([]) == pedersen_hash(0, 0)

    def test_length_terminated(self) -> None:
        hasher = PedersenContractHasher()
        assert hasher.hash_elements([1]) != hasher.hash_elements([1, 0])


class TestContractAddress:
    CLASS_HASH = 0x1234

    def test_matches_ledger_derivation(self) -> None:
        ours = compute_contract_address(5, self.CLASS_HASH, [3])
        ledger = compute_address(
            salt=5,
            class_hash=self.CLASS_HASH,
            constructor_calldata=[3],
            deployer_address=0,
        )
        assert ours == hex(ledger)

    def test_matches_ledger_derivation_with_deployer(self) -> None:
        ours = compute_contract_address(
            1111, 0xABC, ["0x15", 37], deployer_address=1234
        )
        ledger = compute_address(
            salt=1111,
            class_hash=0xABC,
            constructor_calldata=[21, 37],
            deployer_address=1234,
        )
        assert ours == hex(ledger)

    def test_pure(self) -> None:
        first = compute_contract_address(7, self.CLASS_HASH, ["0x3", 4])
        second = compute_contract_address("0x7", self.CLASS_HASH, [3, "4"])
        assert first == second
        assert int(first, 16) < L2_ADDRESS_UPPER_BOUND

    def test_every_input_matters(self) -> None:
        base = compute_contract_address(1, self.CLASS_HASH, [3])
        assert compute_contract_address(2, self.CLASS_HASH, [3]) != base
        assert compute_contract_address(1, self.CLASS_HASH + 1, [3]) != base
        assert compute_contract_address(1, self.CLASS_HASH, [3, 0]) != base
        assert compute_contract_address(1, self.CLASS_HASH, [3], deployer_address=9) != base

    def test_custom_hasher(self) -> None:
        class SumHasher:
            def class_hash(self, contract: CompiledContract) -> int:
                return 0

            def hash_elements(self, values: Sequence[int]) -> int:
                return sum(values) % FIELD_PRIME

        hasher = SumHasher()
        assert isinstance(hasher, ContractHasher)
        address = compute_contract_address(1, 2, [3], hasher=hasher)
        expected_prefix = int.from_bytes(b"STARKNET_CONTRACT_ADDRESS", "big")
        assert address == hex(expected_prefix + 1 + 2 + 3)


class TestClassHash:
    def test_partial_artifact_rejected(self) -> None:
        with pytest.raises(ValueError, match="incomplete compiled contract"):
            PedersenContractHasher().class_hash(CompiledContract.from_dict(SAMPLE_CONTRACT))
