"""
Compiled contract artifacts.

A compiled contract is passed through to the gateway untouched except for
the program, which travels compressed:

    contract_definition.program = base64(gzip(compact_json(program)))

Compilation itself is out of scope; this module only parses artifacts
and produces the wire form.
"""

from __future__ import annotations

import base64
import gzip
import json
from dataclasses import dataclass, field
from typing import Any

_KNOWN_KEYS = ("program", "entry_points_by_type", "abi")


@dataclass(frozen=True)
class CompiledContract:
    """Bytecode + ABI bundle produced by the contract compiler.

    Attributes:
        program: Compiled program (opaque JSON object).
        entry_points_by_type: Entry point table keyed by type
            (``EXTERNAL``, ``L1_HANDLER``, ``CONSTRUCTOR``).
        abi: Contract ABI entries. Optional in the artifact.
        extra: Any other top-level keys, preserved as-is.
    """

    program: dict[str, Any]
    entry_points_by_type: dict[str, Any]
    abi: list[dict[str, Any]] | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CompiledContract:
        if not isinstance(data, dict):
            raise ValueError("compiled contract must be a JSON object")
        missing = [k for k in ("program", "entry_points_by_type") if k not in data]
        if missing:
            raise ValueError(f"compiled contract missing keys: {', '.join(missing)}")
        return cls(
            program=data["program"],
            entry_points_by_type=data["entry_points_by_type"],
            abi=data.get("abi"),
            extra={k: v for k, v in data.items() if k not in _KNOWN_KEYS},
        )

    @classmethod
    def from_json(cls, text: str) -> CompiledContract:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError(f"compiled contract is not valid JSON: {exc}") from exc
        return cls.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = dict(self.extra)
        result["program"] = self.program
        result["entry_points_by_type"] = self.entry_points_by_type
        if self.abi is not None:
            result["abi"] = self.abi
        return result

    def canonical_bytes(self) -> bytes:
        """Sorted-key compact UTF-8 JSON of the artifact. Key order in the
        source file never changes the bytes, so hashes over it are stable.
        """
        return json.dumps(
            self.to_dict(),
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        ).encode("utf-8")


def parse_contract(contract: CompiledContract | str | dict[str, Any]) -> CompiledContract:
    """Normalize a structured or serialized contract to CompiledContract."""
    if isinstance(contract, CompiledContract):
        return contract
    if isinstance(contract, str):
        return CompiledContract.from_json(contract)
    return CompiledContract.from_dict(contract)


def compress_program(program: dict[str, Any] | str) -> str:
    """gzip + base64 a program. Strings are taken as already-serialized JSON."""
    if isinstance(program, str):
        raw = program.encode("utf-8")
    else:
        raw = json.dumps(program, separators=(",", ":")).encode("utf-8")
    # mtime=0 keeps the output deterministic
    return base64.b64encode(gzip.compress(raw, mtime=0)).decode("ascii")


def to_contract_definition(contract: CompiledContract) -> dict[str, Any]:
    """Deploy wire payload: the artifact with its program compressed."""
    definition = contract.to_dict()
    definition["program"] = compress_program(contract.program)
    return definition
