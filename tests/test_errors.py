"""Tests for the error taxonomy and gateway code classification."""

from __future__ import annotations

import pytest

from stark_provider.errors import (
    LedgerErrorKind,
    NotFound,
    ProtocolViolation,
    ProviderError,
    RejectedTransaction,
    RemoteError,
    TransactionRejected,
    classify_ledger_code,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "error",
        [
            RemoteError("x"),
            NotFound("x"),
            RejectedTransaction("x"),
            TransactionRejected("0x1"),
            ProtocolViolation("x"),
        ],
    )
    def test_all_are_provider_errors(self, error: ProviderError) -> None:
        assert isinstance(error, ProviderError)
        assert error.details == {}

    def test_error_codes(self) -> None:
        assert RemoteError("x").error_code == "HTTP_ERROR"
        assert RemoteError("x", error_code="TIMEOUT").error_code == "TIMEOUT"
        assert NotFound("x").error_code == "NOT_FOUND"
        assert RejectedTransaction("x").error_code == "REJECTED"
        assert TransactionRejected("0x1").error_code == "TX_REJECTED"
        assert ProtocolViolation("x").error_code == "PROTOCOL_VIOLATION"

    def test_remote_error_attributes(self) -> None:
        error = RemoteError("boom", status_code=500, ledger_code="StarknetErrorCode.X")
        assert error.status_code == 500
        assert error.ledger_code == "StarknetErrorCode.X"

    def test_transaction_rejected_message(self) -> None:
        error = TransactionRejected("0x42", "TRANSACTION_FAILED: assert")
        assert str(error) == "transaction 0x42 was rejected: TRANSACTION_FAILED: assert"
        assert error.tx_hash == "0x42"
        assert error.reason == "TRANSACTION_FAILED: assert"

    def test_transaction_rejected_without_reason(self) -> None:
        error = TransactionRejected("0x42")
        assert str(error) == "transaction 0x42 was rejected"
        assert error.reason is None


class TestClassify:
    @pytest.mark.parametrize(
        "code",
        [
            "StarknetErrorCode.BLOCK_NOT_FOUND",
            "StarknetErrorCode.UNINITIALIZED_CONTRACT",
            "OUT_OF_RANGE_TRANSACTION_HASH",
        ],
    )
    def test_not_found(self, code: str) -> None:
        assert classify_ledger_code(code) == LedgerErrorKind.NOT_FOUND

    @pytest.mark.parametrize(
        "code",
        [
            "StarknetErrorCode.CONTRACT_ADDRESS_UNAVAILABLE",
            "StarknetErrorCode.INVALID_SIGNATURE",
            "MALFORMED_REQUEST",
            "StarkErrorCode.MALFORMED_REQUEST",
            "StarkErrorCode.SCHEMA_VALIDATION_ERROR",
            "StarknetErrorCode.OUT_OF_RANGE_FIELD_ELEMENT",
        ],
    )
    def test_rejected(self, code: str) -> None:
        assert classify_ledger_code(code) == LedgerErrorKind.REJECTED

    @pytest.mark.parametrize("code", [None, "", "StarknetErrorCode.SOMETHING_NEW"])
    def test_unknown(self, code: str | None) -> None:
        assert classify_ledger_code(code) == LedgerErrorKind.UNKNOWN
