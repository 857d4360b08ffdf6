"""
Sequencer-backed provider.

Composes the read client (feeder gateway), the write client (gateway),
and the confirmation engine behind ``ProviderInterface``. Holds
configuration and collaborators only; no per-call state, no sessions.

Construction:

    SequencerProvider()                               # goerli-alpha
    SequencerProvider(network="mainnet-alpha")
    SequencerProvider(base_url="http://localhost:5050")
    SequencerProvider(ProviderConfig.from_env())
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

from stark_provider.config import DEFAULT_NETWORK, ProviderConfig, base_url_for_network
from stark_provider.confirm import RetryPolicy, SleepFn, wait_for_tx
from stark_provider.contract import CompiledContract, parse_contract
from stark_provider.feeder import FeederGatewayClient
from stark_provider.felt import BigNumberish
from stark_provider.gateway import (
    GatewayClient,
    build_deploy_transaction,
    build_invoke_transaction,
)
from stark_provider.hashing import ContractHasher, PedersenContractHasher, compute_contract_address
from stark_provider.transport import GatewayTransport, HttpxTransport
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

logger = logging.getLogger(__name__)


class SequencerProvider:
    """ProviderInterface implementation for the sequencer gateway.

    Args:
        config: Full configuration. Mutually exclusive with the
            network/base_url shortcuts.
        network: Named network (see config.NETWORKS).
        base_url: Sequencer root URL.
        feeder_gateway_url: Explicit read endpoint override.
        gateway_url: Explicit write endpoint override.
        transport: Injectable transport shared by both clients.
        hasher: Hasher used to predict deploy addresses.
        retry_policy: Polling policy for wait_for_tx. Its interval
            defaults to config.retry_interval.
        sleep: Injectable sleep for wait_for_tx (tests).
    """

    def __init__(
        self,
        config: ProviderConfig | None = None,
        *,
        network: str | None = None,
        base_url: str | None = None,
        feeder_gateway_url: str | None = None,
        gateway_url: str | None = None,
        transport: GatewayTransport | None = None,
        hasher: ContractHasher | None = None,
        retry_policy: RetryPolicy | None = None,
        sleep: SleepFn | None = None,
    ) -> None:
        if config is not None:
            if any(v is not None for v in (network, base_url, feeder_gateway_url, gateway_url)):
                raise ValueError("pass either config or network/URL arguments, not both")
        elif network is not None and base_url is not None:
            raise ValueError("pass either network or base_url, not both")
        else:
            config = ProviderConfig.from_base_url(
                base_url or base_url_for_network(network or DEFAULT_NETWORK),
                feeder_gateway_url=feeder_gateway_url,
                gateway_url=gateway_url,
            )

        self._config = config
        transport = transport or HttpxTransport(timeout=config.timeout)
        self._feeder = FeederGatewayClient(config.feeder_gateway_url, transport)
        self._gateway = GatewayClient(config.gateway_url, transport)
        self._hasher = hasher or PedersenContractHasher()
        self._retry_policy = retry_policy or RetryPolicy(interval=config.retry_interval)
        self._sleep = sleep

    @property
    def config(self) -> ProviderConfig:
        return self._config

    @property
    def base_url(self) -> str:
        return self._config.base_url

    @property
    def feeder_gateway_url(self) -> str:
        return self._config.feeder_gateway_url

    @property
    def gateway_url(self) -> str:
        return self._config.gateway_url

    # -----------------------------------------------------------------
    # Reads
    # -----------------------------------------------------------------

    async def get_contract_addresses(self) -> GetContractAddressesResponse:
        return await self._feeder.get_contract_addresses()

    async def call_contract(
        self,
        invoke_tx: CallContractTransaction,
        block_id: BlockIdentifier = None,
    ) -> CallContractResponse:
        return await self._feeder.call_contract(invoke_tx, block_id)

    async def get_block(self, block_id: BlockIdentifier = None) -> GetBlockResponse:
        return await self._feeder.get_block(block_id)

    async def get_code(
        self,
        contract_address: BigNumberish,
        block_id: BlockIdentifier = None,
    ) -> GetCodeResponse:
        return await self._feeder.get_code(contract_address, block_id)

    async def get_storage_at(
        self,
        contract_address: BigNumberish,
        key: BigNumberish,
        block_id: BlockIdentifier = None,
    ) -> Any:
        return await self._feeder.get_storage_at(contract_address, key, block_id)

    async def get_transaction_status(
        self, tx_hash: BigNumberish
    ) -> GetTransactionStatusResponse:
        return await self._feeder.get_transaction_status(tx_hash)

    async def get_transaction(self, tx_hash: BigNumberish) -> GetTransactionResponse:
        return await self._feeder.get_transaction(tx_hash)

    # -----------------------------------------------------------------
    # Writes
    # -----------------------------------------------------------------

    async def add_transaction(self, tx: Transaction) -> AddTransactionResponse:
        return await self._gateway.add_transaction(tx)

    async def deploy_contract(
        self,
        contract: CompiledContract | str | dict[str, Any],
        constructor_calldata: Sequence[BigNumberish] | None = None,
        address_salt: BigNumberish | None = None,
    ) -> AddTransactionResponse:
        tx, predicted = build_deploy_transaction(
            contract, constructor_calldata, address_salt, hasher=self._hasher
        )
        logger.debug("deploy predicted address %s", predicted)
        return await self._gateway.add_transaction(tx)

    def predict_contract_address(
        self,
        contract: CompiledContract | str | dict[str, Any],
        constructor_calldata: Sequence[BigNumberish] | None,
        address_salt: BigNumberish,
    ) -> str:
        """Address deploy_contract would produce for these exact inputs."""
        compiled = parse_contract(contract)
        return compute_contract_address(
            salt=address_salt,
            class_hash=self._hasher.class_hash(compiled),
            constructor_calldata=list(constructor_calldata or ()),
            hasher=self._hasher,
        )

    async def invoke_function(
        self,
        contract_address: BigNumberish,
        entry_point_selector: BigNumberish,
        calldata: Sequence[BigNumberish] | None = None,
        signature: Sequence[BigNumberish] | None = None,
    ) -> AddTransactionResponse:
        tx = build_invoke_transaction(
            contract_address, entry_point_selector, calldata, signature
        )
        return await self._gateway.add_transaction(tx)

    # -----------------------------------------------------------------
    # Confirmation
    # -----------------------------------------------------------------

    async def wait_for_tx(
        self,
        tx_hash: BigNumberish,
        retry_interval: float | None = None,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> GetTransactionStatusResponse:
        return await wait_for_tx(
            self._feeder,
            tx_hash,
            retry_interval,
            policy=self._retry_policy,
            cancel_event=cancel_event,
            sleep=self._sleep,
        )


def default_provider() -> SequencerProvider:
    """Provider configured from STARK_PROVIDER_* environment variables."""
    return SequencerProvider(ProviderConfig.from_env())
