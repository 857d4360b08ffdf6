"""
Gateway client — the write side.

Two layers, same split as plan/submit:

    Pure (no I/O):
        - build_invoke_transaction() — InvokeFunctionTransaction recipe.
        - build_deploy_transaction() — DeployTransaction recipe plus the
          predicted contract address.

    Impure (network I/O):
        - GatewayClient.add_transaction() — the single submission entry
          point. Every higher-level helper ends here.

Submission outcomes:
    - Acknowledged: AddTransactionResponse with the ledger-assigned
      transaction hash (and the contract address for deploys).
    - Gateway error document whose code classifies as REJECTED or
      NOT_FOUND: RejectedTransaction. Not retryable; a new transaction
      is needed.
    - Unrecognized ledger codes stay RemoteError, ledger_code attached,
      so the caller decides.
    - Anything else: RemoteError from the transport.

No retries here. A repeated submission is a new transaction.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from stark_provider.contract import CompiledContract, parse_contract, to_contract_definition
from stark_provider.errors import (
    LedgerErrorKind,
    RejectedTransaction,
    RemoteError,
    classify_ledger_code,
)
from stark_provider.felt import BigNumberish, random_address_salt, to_felt
from stark_provider.hashing import ContractHasher, PedersenContractHasher, compute_contract_address
from stark_provider.transport import GatewayTransport, HttpxTransport
from stark_provider.types import (
    AddTransactionResponse,
    DeployTransaction,
    InvokeFunctionTransaction,
    Transaction,
)

logger = logging.getLogger(__name__)

# An invoke on an undeployed contract is refused, not "not found".
_REFUSAL_KINDS = frozenset({LedgerErrorKind.REJECTED, LedgerErrorKind.NOT_FOUND})


# =========================================================================
# Transaction builders (pure)
# =========================================================================


def build_invoke_transaction(
    contract_address: BigNumberish,
    entry_point_selector: BigNumberish,
    calldata: Sequence[BigNumberish] | None = None,
    signature: Sequence[BigNumberish] | None = None,
) -> InvokeFunctionTransaction:
    """Build an invoke transaction.

    Args:
        contract_address: Target contract.
        entry_point_selector: Selector (see get_selector_from_name).
        calldata: Arguments. None means an empty calldata list.
        signature: Optional signature components, passed through as given.

    Raises:
        ValueError: If the address or selector is not a field element.
    """
    to_felt(contract_address)
    to_felt(entry_point_selector)
    return InvokeFunctionTransaction(
        contract_address=contract_address,
        entry_point_selector=entry_point_selector,
        calldata=tuple(calldata or ()),
        signature=tuple(signature) if signature is not None else None,
    )


def build_deploy_transaction(
    contract: CompiledContract | str | dict[str, Any],
    constructor_calldata: Sequence[BigNumberish] | None = None,
    address_salt: BigNumberish | None = None,
    *,
    hasher: ContractHasher | None = None,
) -> tuple[DeployTransaction, str]:
    """Build a deploy transaction and predict its contract address.

    With a caller-supplied salt the predicted address is a pure function
    of (contract, constructor_calldata, address_salt). Without one, a
    random salt is drawn and the caller should take the address from the
    gateway's response instead.

    Returns:
        (DeployTransaction, predicted 0x-hex contract address).
    """
    compiled = parse_contract(contract)
    calldata = tuple(constructor_calldata or ())
    salt = to_felt(address_salt) if address_salt is not None else random_address_salt()
    hasher = hasher or PedersenContractHasher()

    predicted = compute_contract_address(
        salt=salt,
        class_hash=hasher.class_hash(compiled),
        constructor_calldata=calldata,
        hasher=hasher,
    )
    tx = DeployTransaction(
        contract_definition=to_contract_definition(compiled),
        constructor_calldata=calldata,
        contract_address_salt=salt,
    )
    return tx, predicted


# =========================================================================
# GatewayClient (impure)
# =========================================================================


class GatewayClient:
    """Submits transactions to the gateway.

    Args:
        url: Gateway URL (e.g. "https://alpha4.starknet.io/gateway").
        transport: Injectable transport. Defaults to HttpxTransport.
    """

    def __init__(self, url: str, transport: GatewayTransport | None = None) -> None:
        self._url = url.rstrip("/")
        self._transport = transport or HttpxTransport()

    @property
    def url(self) -> str:
        return self._url

    async def add_transaction(self, tx: Transaction) -> AddTransactionResponse:
        """Submit exactly one transaction.

        Raises:
            TypeError: If tx is not a Transaction variant.
            RejectedTransaction: Gateway refused the transaction.
            RemoteError: Transport failure or malformed acknowledgment.
        """
        if isinstance(tx, DeployTransaction):
            kind = "deploy"
        elif isinstance(tx, InvokeFunctionTransaction):
            kind = "invoke"
        else:
            raise TypeError(f"not a transaction variant: {type(tx).__name__}")

        payload = tx.to_payload()
        try:
            data = await self._transport.post_json(f"{self._url}/add_transaction", payload)
        except RemoteError as exc:
            if classify_ledger_code(exc.ledger_code) in _REFUSAL_KINDS:
                logger.info("%s rejected by gateway: %s", kind, exc.ledger_code)
                raise RejectedTransaction(
                    str(exc),
                    ledger_code=exc.ledger_code,
                    details={**exc.details, "type": payload["type"]},
                ) from exc
            raise

        response = AddTransactionResponse.from_dict(data)
        logger.info(
            "%s submitted: transaction_hash=%s code=%s",
            kind,
            response.transaction_hash,
            response.code,
        )
        return response
