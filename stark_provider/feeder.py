"""
Feeder gateway client — the read side.

Translates feeder gateway responses into the typed responses in
``stark_provider.types``. Uses an injectable transport
(GatewayTransport) so the HTTP layer can be swapped for test fakes.

No retry loops. No state. Every call is independently parameterized.

Endpoints (relative to the feeder gateway URL):
    GET  get_contract_addresses
    POST call_contract?blockId=
    GET  get_block?blockId=
    GET  get_code?contractAddress=&blockId=
    GET  get_storage_at?contractAddress=&key=&blockId=
    GET  get_transaction_status?transactionHash=
    GET  get_transaction?transactionHash=

Errors:
    Gateway error documents whose code means "absent" become NotFound.
    Everything else from the transport propagates as RemoteError.
"""

from __future__ import annotations

from typing import Any

from stark_provider.errors import LedgerErrorKind, NotFound, RemoteError, classify_ledger_code
from stark_provider.felt import BigNumberish, to_decimal_string, to_hex
from stark_provider.transport import GatewayTransport, HttpxTransport, QueryParams
from stark_provider.types import (
    BlockIdentifier,
    CallContractResponse,
    CallContractTransaction,
    GetBlockResponse,
    GetCodeResponse,
    GetContractAddressesResponse,
    GetTransactionResponse,
    GetTransactionStatusResponse,
    block_id_param,
    tx_hash_param,
)


class FeederGatewayClient:
    """Read-only queries against the feeder gateway.

    Args:
        url: Feeder gateway URL (e.g. "https://alpha4.starknet.io/feeder_gateway").
        transport: Injectable transport. Defaults to HttpxTransport.
    """

    def __init__(self, url: str, transport: GatewayTransport | None = None) -> None:
        self._url = url.rstrip("/")
        self._transport = transport or HttpxTransport()

    @property
    def url(self) -> str:
        return self._url

    # -----------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------

    async def get_contract_addresses(self) -> GetContractAddressesResponse:
        """Well-known ledger contract addresses."""
        data = await self._get("get_contract_addresses")
        return GetContractAddressesResponse.from_dict(data)

    async def call_contract(
        self,
        invoke_tx: CallContractTransaction,
        block_id: BlockIdentifier = None,
    ) -> CallContractResponse:
        """Run a read-only contract call and return its result values.

        Nothing is committed to the ledger and no fee is charged.
        """
        data = await self._post(
            "call_contract",
            invoke_tx.to_payload(),
            {"blockId": block_id_param(block_id)},
        )
        return CallContractResponse.from_dict(data)

    async def get_block(self, block_id: BlockIdentifier = None) -> GetBlockResponse:
        data = await self._get("get_block", {"blockId": block_id_param(block_id)})
        return GetBlockResponse.from_dict(data)

    async def get_code(
        self,
        contract_address: BigNumberish,
        block_id: BlockIdentifier = None,
    ) -> GetCodeResponse:
        """Bytecode and ABI of a deployed contract.

        Raises:
            NotFound: No contract at that address at that block.
        """
        address = to_hex(contract_address)
        data = await self._get(
            "get_code",
            {"contractAddress": address, "blockId": block_id_param(block_id)},
        )
        code = GetCodeResponse.from_dict(data)
        # Older gateways answer an undeployed address with empty bytecode.
        if not code.bytecode:
            raise NotFound(
                f"no contract deployed at {address}",
                details={"contract_address": address, "block_id": block_id},
            )
        return code

    async def get_storage_at(
        self,
        contract_address: BigNumberish,
        key: BigNumberish,
        block_id: BlockIdentifier = None,
    ) -> Any:
        """Raw storage value at ``key``, returned exactly as the gateway sent it."""
        return await self._get(
            "get_storage_at",
            {
                "contractAddress": to_hex(contract_address),
                "key": to_decimal_string(key),
                "blockId": block_id_param(block_id),
            },
        )

    async def get_transaction_status(
        self, tx_hash: BigNumberish
    ) -> GetTransactionStatusResponse:
        data = await self._get(
            "get_transaction_status", {"transactionHash": tx_hash_param(tx_hash)}
        )
        return GetTransactionStatusResponse.from_dict(data)

    async def get_transaction(self, tx_hash: BigNumberish) -> GetTransactionResponse:
        """Full transaction record.

        Filled in progressively: a NOT_RECEIVED answer carries no
        ``transaction`` body, block metadata appears once the transaction
        lands in a block.
        """
        data = await self._get(
            "get_transaction", {"transactionHash": tx_hash_param(tx_hash)}
        )
        return GetTransactionResponse.from_dict(data)

    # -----------------------------------------------------------------
    # Plumbing
    # -----------------------------------------------------------------

    async def _get(self, endpoint: str, params: QueryParams | None = None) -> Any:
        try:
            return await self._transport.get_json(f"{self._url}/{endpoint}", params)
        except RemoteError as exc:
            _raise_if_absent(exc, endpoint, params)
            raise

    async def _post(
        self, endpoint: str, payload: dict[str, Any], params: QueryParams | None = None
    ) -> Any:
        try:
            return await self._transport.post_json(
                f"{self._url}/{endpoint}", payload, params
            )
        except RemoteError as exc:
            _raise_if_absent(exc, endpoint, params)
            raise


def _raise_if_absent(
    exc: RemoteError, endpoint: str, params: QueryParams | None
) -> None:
    """Raise NotFound if the gateway code means the entity doesn't exist."""
    if classify_ledger_code(exc.ledger_code) == LedgerErrorKind.NOT_FOUND:
        raise NotFound(
            str(exc),
            details={"endpoint": endpoint, "params": params, "ledger_code": exc.ledger_code},
        ) from exc
