"""
stark-provider: async client for the sequencer feeder gateway and gateway.

Public API:

    Facade:
        - ``ProviderInterface`` — the full client contract (Protocol).
        - ``SequencerProvider`` — gateway-backed implementation.
        - ``default_provider()`` — provider built from the environment.

    Layers (usable on their own):
        - ``FeederGatewayClient`` — reads.
        - ``GatewayClient`` — submissions; ``build_invoke_transaction``,
          ``build_deploy_transaction`` are the pure builders.
        - ``wait_for_tx`` / ``RetryPolicy`` — confirmation engine.
        - ``GatewayTransport`` / ``HttpxTransport`` — HTTP seam.

    Types:
        - ``Transaction`` = ``DeployTransaction`` | ``InvokeFunctionTransaction``.
        - ``TransactionStatus`` and the gateway response dataclasses.

    Errors:
        - ``RemoteError``, ``NotFound``, ``RejectedTransaction``,
          ``TransactionRejected``, ``ProtocolViolation`` (all ``ProviderError``).
"""

from stark_provider.config import NETWORKS, ProviderConfig
from stark_provider.confirm import RetryPolicy, wait_for_tx
from stark_provider.contract import CompiledContract, compress_program, parse_contract
from stark_provider.errors import (
    NotFound,
    ProtocolViolation,
    ProviderError,
    RejectedTransaction,
    RemoteError,
    TransactionRejected,
)
from stark_provider.feeder import FeederGatewayClient
from stark_provider.felt import FIELD_PRIME, BigNumberish, to_felt, to_hex
from stark_provider.gateway import (
    GatewayClient,
    build_deploy_transaction,
    build_invoke_transaction,
)
from stark_provider.hashing import (
    ContractHasher,
    PedersenContractHasher,
    compute_contract_address,
    get_selector_from_name,
)
from stark_provider.interface import ProviderInterface
from stark_provider.provider import SequencerProvider, default_provider
from stark_provider.transport import GatewayTransport, HttpxTransport
from stark_provider.types import (
    AddTransactionResponse,
    BlockIdentifier,
    CallContractResponse,
    CallContractTransaction,
    DeployTransaction,
    GetBlockResponse,
    GetCodeResponse,
    GetContractAddressesResponse,
    GetTransactionResponse,
    GetTransactionStatusResponse,
    InvokeFunctionTransaction,
    Transaction,
    TransactionFailureReason,
    TransactionStatus,
)

__version__ = "0.1.0"

__all__ = [
    "AddTransactionResponse",
    "BigNumberish",
    "BlockIdentifier",
    "CallContractResponse",
    "CallContractTransaction",
    "CompiledContract",
    "ContractHasher",
    "DeployTransaction",
    "FIELD_PRIME",
    "FeederGatewayClient",
    "GatewayClient",
    "GatewayTransport",
    "GetBlockResponse",
    "GetCodeResponse",
    "GetContractAddressesResponse",
    "GetTransactionResponse",
    "GetTransactionStatusResponse",
    "HttpxTransport",
    "InvokeFunctionTransaction",
    "PedersenContractHasher",
    "NETWORKS",
    "NotFound",
    "ProtocolViolation",
    "ProviderConfig",
    "ProviderError",
    "ProviderInterface",
    "RejectedTransaction",
    "RemoteError",
    "RetryPolicy",
    "SequencerProvider",
    "Transaction",
    "TransactionFailureReason",
    "TransactionRejected",
    "TransactionStatus",
    "build_deploy_transaction",
    "build_invoke_transaction",
    "compress_program",
    "compute_contract_address",
    "default_provider",
    "get_selector_from_name",
    "parse_contract",
    "to_felt",
    "to_hex",
    "wait_for_tx",
]
