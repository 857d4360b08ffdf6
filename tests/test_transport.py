"""Tests for HttpxTransport against a mocked httpx layer."""

from __future__ import annotations

import json

import httpx
import pytest
from pytest_httpx import HTTPXMock

from stark_provider.errors import RemoteError
from stark_provider.transport import GatewayTransport, HttpxTransport

FEEDER_URL = "https://alpha4.starknet.io/feeder_gateway"
GATEWAY_URL = "https://alpha4.starknet.io/gateway"


class TestProtocol:
    def test_httpx_transport_satisfies_protocol(self) -> None:
        assert isinstance(HttpxTransport(), GatewayTransport)

    def test_default_timeout(self) -> None:
        assert HttpxTransport().timeout == 30.0


class TestGet:
    @pytest.mark.asyncio
    async def test_returns_parsed_json(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(method="GET", json={"tx_status": "PENDING"})

        transport = HttpxTransport()
        result = await transport.get_json(
            f"{FEEDER_URL}/get_transaction_status", {"transactionHash": "0x42"}
        )

        assert result == {"tx_status": "PENDING"}
        request = httpx_mock.get_requests()[0]
        assert request.url.path == "/feeder_gateway/get_transaction_status"
        assert request.url.params["transactionHash"] == "0x42"

    @pytest.mark.asyncio
    async def test_large_integers_keep_precision(self, httpx_mock: HTTPXMock) -> None:
        big = 2**251 + 17 * 2**192
        httpx_mock.add_response(method="GET", text=json.dumps({"value": big}))

        result = await HttpxTransport().get_json(f"{FEEDER_URL}/get_storage_at")

        assert result["value"] == big

    @pytest.mark.asyncio
    async def test_non_object_json_returned_as_is(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(method="GET", json="0x0")
        assert await HttpxTransport().get_json(f"{FEEDER_URL}/get_storage_at") == "0x0"


class TestPost:
    @pytest.mark.asyncio
    async def test_sends_json_body(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(
            method="POST",
            url=f"{GATEWAY_URL}/add_transaction",
            json={"code": "TRANSACTION_RECEIVED", "transaction_hash": "0x1"},
        )

        payload = {"type": "INVOKE_FUNCTION", "calldata": []}
        await HttpxTransport().post_json(f"{GATEWAY_URL}/add_transaction", payload)

        request = httpx_mock.get_requests()[0]
        assert json.loads(request.content) == payload
        assert request.headers["Content-Type"] == "application/json"

    @pytest.mark.asyncio
    async def test_custom_headers(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(method="POST", json={})

        transport = HttpxTransport(headers={"X-Api-Key": "k"})
        await transport.post_json(f"{GATEWAY_URL}/add_transaction", {})

        assert httpx_mock.get_requests()[0].headers["X-Api-Key"] == "k"


class TestFailures:
    @pytest.mark.asyncio
    async def test_timeout(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_exception(httpx.ReadTimeout("timed out"))

        with pytest.raises(RemoteError) as exc:
            await HttpxTransport(timeout=5.0).get_json(f"{FEEDER_URL}/get_block")

        assert exc.value.error_code == "TIMEOUT"
        assert exc.value.details["timeout_s"] == 5.0

    @pytest.mark.asyncio
    async def test_connection_error(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_exception(httpx.ConnectError("Connection refused"))

        with pytest.raises(RemoteError) as exc:
            await HttpxTransport().get_json(f"{FEEDER_URL}/get_block")

        assert exc.value.error_code == "CONNECTION_FAILED"
        assert exc.value.status_code is None

    @pytest.mark.asyncio
    async def test_other_http_error(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_exception(httpx.RemoteProtocolError("peer closed"))

        with pytest.raises(RemoteError) as exc:
            await HttpxTransport().get_json(f"{FEEDER_URL}/get_block")

        assert exc.value.error_code == "HTTP_ERROR"

    @pytest.mark.asyncio
    async def test_server_error_without_body(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(method="GET", status_code=503, text="Service Unavailable")

        with pytest.raises(RemoteError) as exc:
            await HttpxTransport().get_json(f"{FEEDER_URL}/get_block")

        assert exc.value.error_code == "HTTP_ERROR"
        assert exc.value.status_code == 503
        assert exc.value.ledger_code is None
        assert "503" in str(exc.value)

    @pytest.mark.asyncio
    async def test_gateway_error_document(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(
            method="GET",
            status_code=500,
            json={
                "code": "StarknetErrorCode.BLOCK_NOT_FOUND",
                "message": "Block number 99999 was not found.",
            },
        )

        with pytest.raises(RemoteError) as exc:
            await HttpxTransport().get_json(f"{FEEDER_URL}/get_block")

        assert exc.value.ledger_code == "StarknetErrorCode.BLOCK_NOT_FOUND"
        assert "was not found" in str(exc.value)

    @pytest.mark.asyncio
    async def test_invalid_json(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(method="GET", status_code=200, text="<html>oops</html>")

        with pytest.raises(RemoteError) as exc:
            await HttpxTransport().get_json(f"{FEEDER_URL}/get_block")

        assert exc.value.error_code == "INVALID_JSON"
        assert exc.value.details["body_preview"] == "<html>oops</html>"
