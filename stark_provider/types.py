"""
Data model for gateway requests and responses.

Transactions are a closed sum type:

    Transaction = DeployTransaction | InvokeFunctionTransaction

Each variant is a frozen dataclass that renders its own wire payload via
``to_payload()``. Variants never share fields, so a payload can't mix
deploy and invoke keys.

Responses are frozen dataclasses built with ``from_dict``. Each keeps the
original document in ``raw`` so fields this model doesn't name are still
reachable. A response missing a required field raises RemoteError
(MALFORMED_RESPONSE); a status outside the closed enumeration raises
ProtocolViolation.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from stark_provider.errors import MALFORMED_RESPONSE, ProtocolViolation, RemoteError
from stark_provider.felt import (
    BigNumberish,
    format_signature,
    to_decimal_strings,
    to_hex,
)

# None means "latest/pending block"; sent as the literal string "null".
BlockIdentifier = int | None


# =========================================================================
# Enums
# =========================================================================


class TransactionStatus(StrEnum):
    """Lifecycle status of a submitted transaction.

    NOT_RECEIVED -> RECEIVED -> PENDING -> ACCEPTED_ONCHAIN, with REJECTED
    reachable from RECEIVED or PENDING.
    """

    NOT_RECEIVED = "NOT_RECEIVED"
    RECEIVED = "RECEIVED"
    PENDING = "PENDING"
    REJECTED = "REJECTED"
    ACCEPTED_ONCHAIN = "ACCEPTED_ONCHAIN"

    @property
    def is_terminal(self) -> bool:
        return self in (TransactionStatus.ACCEPTED_ONCHAIN, TransactionStatus.REJECTED)

    @property
    def rank(self) -> int:
        """Position along the lifecycle. REJECTED shares the terminal rank."""
        return _STATUS_RANK[self]

    @classmethod
    def parse(cls, value: Any) -> TransactionStatus:
        """Parse a wire value. Anything outside the enumeration is a violation."""
        try:
            return cls(value)
        except ValueError:
            raise ProtocolViolation(
                f"unknown transaction status: {value!r}",
                details={"tx_status": value},
            ) from None


_STATUS_RANK = {
    TransactionStatus.NOT_RECEIVED: 0,
    TransactionStatus.RECEIVED: 1,
    TransactionStatus.PENDING: 2,
    TransactionStatus.ACCEPTED_ONCHAIN: 3,
    TransactionStatus.REJECTED: 3,
}


class TransactionType(StrEnum):
    DEPLOY = "DEPLOY"
    INVOKE_FUNCTION = "INVOKE_FUNCTION"


# =========================================================================
# Transactions
# =========================================================================


@dataclass(frozen=True)
class DeployTransaction:
    """Deploy a compiled contract.

    Attributes:
        contract_definition: Wire form of the compiled contract
            (program already compressed).
        constructor_calldata: Constructor arguments.
        contract_address_salt: Salt mixed into the address derivation.
    """

    contract_definition: dict[str, Any]
    constructor_calldata: tuple[BigNumberish, ...]
    contract_address_salt: BigNumberish

    def to_payload(self) -> dict[str, Any]:
        return {
            "type": TransactionType.DEPLOY.value,
            "contract_definition": self.contract_definition,
            "contract_address_salt": to_hex(self.contract_address_salt),
            "constructor_calldata": to_decimal_strings(self.constructor_calldata),
        }


@dataclass(frozen=True)
class InvokeFunctionTransaction:
    """Invoke a state-changing entry point.

    Attributes:
        contract_address: Target contract.
        entry_point_selector: Selector of the entry point.
        calldata: Arguments. Always sent, as an empty list if none.
        signature: Optional signature components. Unsigned invokes are
            allowed; the ledger decides whether the entry point accepts them.
    """

    contract_address: BigNumberish
    entry_point_selector: BigNumberish
    calldata: tuple[BigNumberish, ...] = ()
    signature: tuple[BigNumberish, ...] | None = None

    def to_payload(self) -> dict[str, Any]:
        return {
            "type": TransactionType.INVOKE_FUNCTION.value,
            "contract_address": to_hex(self.contract_address),
            "entry_point_selector": to_hex(self.entry_point_selector),
            "calldata": to_decimal_strings(self.calldata),
            "signature": format_signature(self.signature),
        }


Transaction = DeployTransaction | InvokeFunctionTransaction


@dataclass(frozen=True)
class CallContractTransaction:
    """Read-only call. Never mutates state, never reaches the ledger."""

    contract_address: BigNumberish
    entry_point_selector: BigNumberish
    calldata: Sequence[BigNumberish] = ()
    signature: Sequence[BigNumberish] = ()

    def to_payload(self) -> dict[str, Any]:
        return {
            "contract_address": to_hex(self.contract_address),
            "entry_point_selector": to_hex(self.entry_point_selector),
            "calldata": to_decimal_strings(self.calldata),
            "signature": format_signature(self.signature),
        }


# =========================================================================
# Parsing helpers
# =========================================================================


def _require(data: Any, key: str, what: str) -> Any:
    if not isinstance(data, dict):
        raise RemoteError(
            f"{what} response is not a JSON object",
            error_code=MALFORMED_RESPONSE,
            details={"type": type(data).__name__},
        )
    if key not in data:
        raise RemoteError(
            f"{what} response missing {key!r}",
            error_code=MALFORMED_RESPONSE,
            details={"keys": sorted(data)},
        )
    return data[key]


def _require_list(data: Any, key: str, what: str) -> list[Any]:
    value = _require(data, key, what)
    if not isinstance(value, list):
        raise RemoteError(
            f"{what} response field {key!r} is not a list",
            error_code=MALFORMED_RESPONSE,
            details={"type": type(value).__name__},
        )
    return value


def block_id_param(block_id: BlockIdentifier) -> str:
    """Query-string form of a block identifier."""
    if block_id is None:
        return "null"
    if isinstance(block_id, bool) or not isinstance(block_id, int) or block_id < 0:
        raise ValueError(f"block_id must be a non-negative int or None, got {block_id!r}")
    return str(block_id)


def tx_hash_param(tx_hash: BigNumberish) -> str:
    """Transaction identifiers are opaque: strings pass through, ints go hex."""
    if isinstance(tx_hash, str):
        if not tx_hash:
            raise ValueError("transaction hash must be non-empty")
        return tx_hash
    return to_hex(tx_hash)


# =========================================================================
# Responses
# =========================================================================


@dataclass(frozen=True)
class GetContractAddressesResponse:
    starknet: str
    gps_statement_verifier: str
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Any) -> GetContractAddressesResponse:
        return cls(
            starknet=_require(data, "Starknet", "get_contract_addresses"),
            gps_statement_verifier=_require(
                data, "GpsStatementVerifier", "get_contract_addresses"
            ),
            raw=data,
        )


@dataclass(frozen=True)
class CallContractResponse:
    result: list[str]
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Any) -> CallContractResponse:
        return cls(result=_require_list(data, "result", "call_contract"), raw=data)


@dataclass(frozen=True)
class GetBlockResponse:
    """Block header plus its transactions.

    ``block_id`` accepts either the ``block_id`` or ``block_number`` key,
    depending on gateway version.
    """

    block_id: int | None
    status: str | None
    transactions: Any
    transaction_receipts: Any = None
    previous_block_id: int | None = None
    state_root: str | None = None
    timestamp: int | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Any) -> GetBlockResponse:
        transactions = _require(data, "transactions", "get_block")
        return cls(
            block_id=data.get("block_id", data.get("block_number")),
            status=data.get("status"),
            transactions=transactions,
            transaction_receipts=data.get("transaction_receipts"),
            previous_block_id=data.get(
                "previous_block_id", data.get("parent_block_number")
            ),
            state_root=data.get("state_root"),
            timestamp=data.get("timestamp"),
            raw=data,
        )


@dataclass(frozen=True)
class GetCodeResponse:
    bytecode: list[str]
    abi: list[dict[str, Any]]
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Any) -> GetCodeResponse:
        return cls(
            bytecode=_require_list(data, "bytecode", "get_code"),
            abi=list(data.get("abi") or []),
            raw=data,
        )


@dataclass(frozen=True)
class TransactionFailureReason:
    code: str | None = None
    error_message: str | None = None
    tx_id: int | None = None

    @classmethod
    def from_dict(cls, data: Any) -> TransactionFailureReason | None:
        if not isinstance(data, dict):
            return None
        return cls(
            code=data.get("code"),
            error_message=data.get("error_message"),
            tx_id=data.get("tx_id"),
        )

    def describe(self) -> str | None:
        parts = [p for p in (self.code, self.error_message) if p]
        return ": ".join(parts) if parts else None


@dataclass(frozen=True)
class GetTransactionStatusResponse:
    tx_status: TransactionStatus
    block_id: int | None = None
    block_hash: str | None = None
    tx_failure_reason: TransactionFailureReason | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Any) -> GetTransactionStatusResponse:
        status = TransactionStatus.parse(
            _require(data, "tx_status", "get_transaction_status")
        )
        return cls(
            tx_status=status,
            block_id=data.get("block_id", data.get("block_number")),
            block_hash=data.get("block_hash"),
            tx_failure_reason=TransactionFailureReason.from_dict(
                data.get("tx_failure_reason")
            ),
            raw=data,
        )


@dataclass(frozen=True)
class GetTransactionResponse:
    """Full transaction record, filled in as the transaction progresses.

    ``transaction`` is absent while NOT_RECEIVED; block metadata appears
    once the transaction lands in a block.
    """

    status: TransactionStatus
    transaction: dict[str, Any] | None = None
    transaction_id: int | None = None
    transaction_hash: str | None = None
    block_id: int | None = None
    block_number: int | None = None
    transaction_index: int | None = None
    transaction_failure_reason: TransactionFailureReason | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Any) -> GetTransactionResponse:
        status = TransactionStatus.parse(_require(data, "status", "get_transaction"))
        transaction = data.get("transaction")
        tx_hash = data.get("transaction_hash")
        if tx_hash is None and isinstance(transaction, dict):
            tx_hash = transaction.get("transaction_hash")
        return cls(
            status=status,
            transaction=transaction,
            transaction_id=data.get("transaction_id"),
            transaction_hash=tx_hash,
            block_id=data.get("block_id"),
            block_number=data.get("block_number"),
            transaction_index=data.get("transaction_index"),
            transaction_failure_reason=TransactionFailureReason.from_dict(
                data.get("transaction_failure_reason")
            ),
            raw=data,
        )


@dataclass(frozen=True)
class AddTransactionResponse:
    """Acknowledgment of a submission.

    Attributes:
        code: Gateway acknowledgment code (e.g. ``TRANSACTION_RECEIVED``).
        transaction_hash: Ledger-assigned identifier, used for all
            subsequent status and lookup queries.
        address: Contract address. Present only for deploys.
    """

    code: str
    transaction_hash: str
    address: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Any) -> AddTransactionResponse:
        tx_hash = _require(data, "transaction_hash", "add_transaction")
        if isinstance(tx_hash, bool) or not isinstance(tx_hash, (str, int)) or tx_hash == "":
            raise RemoteError(
                "add_transaction response has an unusable transaction_hash",
                error_code=MALFORMED_RESPONSE,
                details={"transaction_hash": tx_hash},
            )
        return cls(
            code=data.get("code", ""),
            transaction_hash=tx_hash_param(tx_hash),
            address=data.get("address"),
            raw=data,
        )
