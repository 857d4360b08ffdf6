"""
Transport protocol for gateway HTTP calls.

Defines the seam where the concrete HTTP implementation plugs in. The
read and write clients depend on this protocol, not on httpx directly,
so tests can swap in a fake without touching client logic.

Concrete implementations:
    - HttpxTransport (default, uses httpx.AsyncClient)
    - FakeTransport (tests, returns canned responses)

Failure mapping (HttpxTransport):
    httpx.TimeoutException  -> RemoteError(TIMEOUT)
    httpx.ConnectError      -> RemoteError(CONNECTION_FAILED)
    other httpx.HTTPError   -> RemoteError(HTTP_ERROR)
    status >= 400           -> RemoteError(HTTP_ERROR), with ledger_code
                               if the body is a gateway error document
    non-JSON body           -> RemoteError(INVALID_JSON)
"""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol, runtime_checkable

import httpx

from stark_provider.config import DEFAULT_TIMEOUT
from stark_provider.errors import (
    CONNECTION_FAILED,
    HTTP_ERROR,
    INVALID_JSON,
    TIMEOUT,
    RemoteError,
)

logger = logging.getLogger(__name__)

QueryParams = dict[str, str]


@runtime_checkable
class GatewayTransport(Protocol):
    """Async transport for gateway GET/POST requests."""

    async def get_json(self, url: str, params: QueryParams | None = None) -> Any:
        """Send a GET request and return the parsed JSON body.

        Raises:
            RemoteError: On any transport-level failure.
        """
        ...

    async def post_json(
        self,
        url: str,
        payload: dict[str, Any],
        params: QueryParams | None = None,
    ) -> Any:
        """Send a POST request with a JSON body and return the parsed JSON body.

        Raises:
            RemoteError: On any transport-level failure.
        """
        ...


class HttpxTransport:
    """Default transport using httpx.AsyncClient.

    One client per request: calls share no connection state, so any
    number of them can run concurrently.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._timeout = timeout
        self._headers = headers or {}

    @property
    def timeout(self) -> float:
        return self._timeout

    async def get_json(self, url: str, params: QueryParams | None = None) -> Any:
        return await self._request("GET", url, params=params)

    async def post_json(
        self,
        url: str,
        payload: dict[str, Any],
        params: QueryParams | None = None,
    ) -> Any:
        return await self._request("POST", url, params=params, payload=payload)

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: QueryParams | None = None,
        payload: dict[str, Any] | None = None,
    ) -> Any:
        logger.debug("%s %s params=%s", method, url, params)
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.request(
                    method,
                    url,
                    params=params,
                    json=payload,
                    headers={"Accept": "application/json", **self._headers},
                )
        except httpx.TimeoutException as e:
            raise RemoteError(
                f"HTTP request timed out after {self._timeout}s",
                error_code=TIMEOUT,
                details={"url": url, "timeout_s": self._timeout},
            ) from e
        except httpx.ConnectError as e:
            raise RemoteError(
                f"Failed to connect to {url}",
                error_code=CONNECTION_FAILED,
                details={"url": url},
            ) from e
        except httpx.HTTPError as e:
            raise RemoteError(
                f"HTTP error: {e}",
                error_code=HTTP_ERROR,
                details={"url": url, "error": str(e)},
            ) from e

        if response.status_code >= 400:
            raise _error_from_response(url, response)

        try:
            return response.json()
        except json.JSONDecodeError as e:
            raise RemoteError(
                "Response was not valid JSON",
                error_code=INVALID_JSON,
                details={
                    "url": url,
                    "status_code": response.status_code,
                    "body_preview": response.text[:200] if response.text else "",
                },
            ) from e


def _error_from_response(url: str, response: httpx.Response) -> RemoteError:
    """Build a RemoteError from a 4xx/5xx response.

    The gateway reports ledger-level failures as error documents
    (``{"code": "StarknetErrorCode.X", "message": "..."}``); those codes are
    kept so callers can classify them.
    """
    ledger_code = None
    message = f"HTTP {response.status_code}: {response.reason_phrase}"
    try:
        body = response.json()
    except json.JSONDecodeError:
        body = None
    if isinstance(body, dict) and isinstance(body.get("code"), str):
        ledger_code = body["code"]
        message = f"{ledger_code}: {body.get('message', '')}".rstrip(": ")

    return RemoteError(
        message,
        error_code=HTTP_ERROR,
        status_code=response.status_code,
        ledger_code=ledger_code,
        details={
            "url": url,
            "status_code": response.status_code,
            "reason": response.reason_phrase,
            "body_preview": response.text[:200] if response.text else "",
        },
    )
