"""
Provider protocol — the full client contract.

One interface, one level deep. Backends (the sequencer gateway today)
implement it structurally; callers type against ``ProviderInterface``
and never against a concrete class.

All methods are async. Optional parameters are explicit defaults, never
ambient globals.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from stark_provider.contract import CompiledContract
from stark_provider.felt import BigNumberish
from stark_provider.types import (
    AddTransactionResponse,
    BlockIdentifier,
    CallContractResponse,
    CallContractTransaction,
    GetBlockResponse,
    GetCodeResponse,
    GetContractAddressesResponse,
    GetTransactionResponse,
    GetTransactionStatusResponse,
    Transaction,
)


@runtime_checkable
class ProviderInterface(Protocol):
    """Read, write, and confirm against one pair of gateway endpoints."""

    @property
    def base_url(self) -> str: ...

    @property
    def feeder_gateway_url(self) -> str: ...

    @property
    def gateway_url(self) -> str: ...

    # --- Reads ---

    async def get_contract_addresses(self) -> GetContractAddressesResponse:
        """Well-known ledger contract addresses."""
        ...

    async def call_contract(
        self,
        invoke_tx: CallContractTransaction,
        block_id: BlockIdentifier = None,
    ) -> CallContractResponse:
        """Read-only call. Does not mutate state; unlike invoke_function."""
        ...

    async def get_block(self, block_id: BlockIdentifier = None) -> GetBlockResponse:
        ...

    async def get_code(
        self,
        contract_address: BigNumberish,
        block_id: BlockIdentifier = None,
    ) -> GetCodeResponse:
        ...

    async def get_storage_at(
        self,
        contract_address: BigNumberish,
        key: BigNumberish,
        block_id: BlockIdentifier = None,
    ) -> Any:
        ...

    async def get_transaction_status(
        self, tx_hash: BigNumberish
    ) -> GetTransactionStatusResponse:
        ...

    async def get_transaction(self, tx_hash: BigNumberish) -> GetTransactionResponse:
        ...

    # --- Writes ---

    async def add_transaction(self, tx: Transaction) -> AddTransactionResponse:
        """Low-level submission. Every helper below ends here."""
        ...

    async def deploy_contract(
        self,
        contract: CompiledContract | str | dict[str, Any],
        constructor_calldata: Sequence[BigNumberish] | None = None,
        address_salt: BigNumberish | None = None,
    ) -> AddTransactionResponse:
        """Deploy a compiled contract. A random salt is used if none is given."""
        ...

    async def invoke_function(
        self,
        contract_address: BigNumberish,
        entry_point_selector: BigNumberish,
        calldata: Sequence[BigNumberish] | None = None,
        signature: Sequence[BigNumberish] | None = None,
    ) -> AddTransactionResponse:
        """State-changing call. calldata defaults to an empty list."""
        ...

    # --- Confirmation ---

    async def wait_for_tx(
        self,
        tx_hash: BigNumberish,
        retry_interval: float | None = None,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> GetTransactionStatusResponse:
        """Poll until ACCEPTED_ONCHAIN (returns) or REJECTED (raises)."""
        ...
