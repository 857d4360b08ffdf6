"""
Error taxonomy for the gateway provider.

Every failure surfaces as a ``ProviderError`` subclass carrying a
machine-readable ``error_code`` and a ``details`` dict for diagnostics.

Categories:
    - RemoteError: transport/HTTP failure or malformed response. Retryable.
    - NotFound: queried entity absent at the given block.
    - RejectedTransaction: ledger refused the submission synchronously.
    - TransactionRejected: ledger rejected the transaction after acceptance
      (discovered by polling).
    - ProtocolViolation: the gateway broke its own contract (status
      regression, unknown status, mismatched identifiers). Never retried.

Gateway error bodies look like::

    {"code": "StarknetErrorCode.UNINITIALIZED_CONTRACT", "message": "..."}

``classify_ledger_code`` maps those codes to a coarse ``LedgerErrorKind``.
Unknown codes default to UNKNOWN rather than guessing.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

# =========================================================================
# Error codes
# =========================================================================

TIMEOUT = "TIMEOUT"
CONNECTION_FAILED = "CONNECTION_FAILED"
HTTP_ERROR = "HTTP_ERROR"
INVALID_JSON = "INVALID_JSON"
MALFORMED_RESPONSE = "MALFORMED_RESPONSE"

NOT_FOUND = "NOT_FOUND"
REJECTED = "REJECTED"
TX_REJECTED = "TX_REJECTED"
PROTOCOL_VIOLATION = "PROTOCOL_VIOLATION"


# =========================================================================
# Exceptions
# =========================================================================


class ProviderError(Exception):
    """Base class for all provider failures."""

    def __init__(
        self,
        message: str,
        *,
        error_code: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.details: dict[str, Any] = details or {}


class RemoteError(ProviderError):
    """Transport-level failure or unusable response.

    Attributes:
        status_code: HTTP status, if a response was received.
        ledger_code: Gateway error code (``StarknetErrorCode.*``), if the
            error body carried one.
    """

    def __init__(
        self,
        message: str,
        *,
        error_code: str = HTTP_ERROR,
        details: dict[str, Any] | None = None,
        status_code: int | None = None,
        ledger_code: str | None = None,
    ) -> None:
        super().__init__(message, error_code=error_code, details=details)
        self.status_code = status_code
        self.ledger_code = ledger_code


class NotFound(ProviderError):
    """The queried block, contract or transaction does not exist."""

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, error_code=NOT_FOUND, details=details)


class RejectedTransaction(ProviderError):
    """The gateway refused a submission. Resubmitting the same call won't help."""

    def __init__(
        self,
        message: str,
        *,
        ledger_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code=REJECTED, details=details)
        self.ledger_code = ledger_code


class TransactionRejected(ProviderError):
    """An accepted transaction reached the REJECTED terminal status."""

    def __init__(
        self,
        tx_hash: str,
        reason: str | None = None,
        *,
        details: dict[str, Any] | None = None,
    ) -> None:
        message = f"transaction {tx_hash} was rejected"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, error_code=TX_REJECTED, details=details)
        self.tx_hash = tx_hash
        self.reason = reason


class ProtocolViolation(ProviderError):
    """The gateway returned something its protocol does not allow."""

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, error_code=PROTOCOL_VIOLATION, details=details)


# =========================================================================
# Ledger code classification
# =========================================================================


class LedgerErrorKind(StrEnum):
    """Coarse category of a gateway error code."""

    NOT_FOUND = "NOT_FOUND"
    REJECTED = "REJECTED"
    UNKNOWN = "UNKNOWN"


LEDGER_CODE_PREFIXES = ("StarknetErrorCode.", "StarkErrorCode.")

_NOT_FOUND_CODES = frozenset(
    {
        "BLOCK_NOT_FOUND",
        "OUT_OF_RANGE_BLOCK_ID",
        "OUT_OF_RANGE_BLOCK_HASH",
        "UNINITIALIZED_CONTRACT",
        "OUT_OF_RANGE_CONTRACT_ADDRESS",
        "OUT_OF_RANGE_CONTRACT_STORAGE_KEY",
        "OUT_OF_RANGE_TRANSACTION_HASH",
        "OUT_OF_RANGE_TRANSACTION_ID",
    }
)

_REJECTED_CODES = frozenset(
    {
        "CONTRACT_ADDRESS_UNAVAILABLE",
        "ENTRY_POINT_NOT_FOUND_IN_CONTRACT",
        "INVALID_CONTRACT_DEFINITION",
        "INVALID_PROGRAM",
        "INVALID_SIGNATURE",
        "INVALID_TRANSACTION_HASH",
        "MALFORMED_REQUEST",
        "OUT_OF_RANGE_FIELD_ELEMENT",
        "SCHEMA_VALIDATION_ERROR",
        "OUT_OF_RANGE_ENTRY_POINT_SELECTOR",
        "SECURITY_ERROR",
        "TRANSACTION_FAILED",
        "TRANSACTION_LIMIT_EXCEEDED",
    }
)


def classify_ledger_code(code: str | None) -> LedgerErrorKind:
    """Map a gateway error code to a LedgerErrorKind.

    Args:
        code: Gateway code, with or without a ``StarknetErrorCode.`` or
            ``StarkErrorCode.`` prefix. None means the body carried no code.

    Returns:
        LedgerErrorKind. UNKNOWN for unrecognized or missing codes.
    """
    if not code:
        return LedgerErrorKind.UNKNOWN

    name = code
    for prefix in LEDGER_CODE_PREFIXES:
        name = name.removeprefix(prefix)
    if name in _NOT_FOUND_CODES:
        return LedgerErrorKind.NOT_FOUND
    if name in _REJECTED_CODES:
        return LedgerErrorKind.REJECTED
    return LedgerErrorKind.UNKNOWN
