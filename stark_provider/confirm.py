"""
Confirmation engine — poll a transaction until it settles.

Lifecycle (terminal states marked *):

    NOT_RECEIVED -> RECEIVED -> PENDING -> ACCEPTED_ONCHAIN*
                        \\          \\
                         +----------+-> REJECTED*

One poll cycle: suspend for the interval, query the status once,
evaluate. Repeat until a terminal state.

Outcomes:
    - ACCEPTED_ONCHAIN: return the final status response.
    - REJECTED: raise TransactionRejected with the ledger's reason.
    - Status moves backwards: raise ProtocolViolation, stop polling.
    - Status outside the enumeration: ProtocolViolation (from parsing).
    - Transport-level RemoteError (timeout, connection failure, HTTP error
      without a ledger code): retry the query (never the submission) after
      a bounded exponential backoff with a non-zero floor. The failure is
      logged, not reported, unless RetryPolicy.max_transport_failures is
      exceeded.
    - Unusable status body (MALFORMED_RESPONSE, INVALID_JSON):
      ProtocolViolation, never retried.
    - RemoteError carrying a ledger code, NotFound, anything else:
      propagated unchanged.

There is no deadline. Callers that need one wrap the call in
``asyncio.timeout``, cancel the task, or set ``cancel_event``. Each call
keeps its own history, so concurrent waits never interfere.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol

from stark_provider.config import DEFAULT_RETRY_INTERVAL
from stark_provider.errors import (
    CONNECTION_FAILED,
    HTTP_ERROR,
    INVALID_JSON,
    MALFORMED_RESPONSE,
    TIMEOUT,
    ProtocolViolation,
    RemoteError,
    TransactionRejected,
)
from stark_provider.felt import BigNumberish
from stark_provider.types import GetTransactionStatusResponse, TransactionStatus

logger = logging.getLogger(__name__)

_TRANSPORT_CODES = frozenset({TIMEOUT, CONNECTION_FAILED, HTTP_ERROR})
_UNUSABLE_BODY_CODES = frozenset({MALFORMED_RESPONSE, INVALID_JSON})

SleepFn = Callable[[float], Awaitable[object]]


class TransactionStatusSource(Protocol):
    """Anything that can answer a status query (the read client, a provider)."""

    async def get_transaction_status(
        self, tx_hash: BigNumberish
    ) -> GetTransactionStatusResponse: ...


@dataclass(frozen=True)
class RetryPolicy:
    """Polling cadence.

    Attributes:
        interval: Delay before every status query, in seconds.
        backoff_factor: Multiplier applied per consecutive transport
            failure.
        max_interval: Upper bound on the backed-off delay.
        min_transport_delay: Floor for the backed-off delay, so a zero
            interval never turns transport failures into a tight loop.
        max_transport_failures: Consecutive transport failures tolerated
            before the RemoteError is raised. None means retry forever.
    """

    interval: float = DEFAULT_RETRY_INTERVAL
    backoff_factor: float = 2.0
    max_interval: float = 60.0
    max_transport_failures: int | None = None
    min_transport_delay: float = 1.0

    def __post_init__(self) -> None:
        if self.interval < 0:
            raise ValueError(f"interval must be >= 0, got: {self.interval}")
        if self.backoff_factor < 1:
            raise ValueError(f"backoff_factor must be >= 1, got: {self.backoff_factor}")
        if self.max_interval < 0:
            raise ValueError(f"max_interval must be >= 0, got: {self.max_interval}")
        if self.min_transport_delay <= 0:
            raise ValueError(
                f"min_transport_delay must be > 0, got: {self.min_transport_delay}"
            )
        if self.max_transport_failures is not None and self.max_transport_failures < 0:
            raise ValueError(
                f"max_transport_failures must be >= 0, got: {self.max_transport_failures}"
            )

    def transport_delay(self, failures: int, interval: float) -> float:
        """Delay before the next query after ``failures`` consecutive failures."""
        base = max(interval, self.min_transport_delay)
        ceiling = max(self.max_interval, base)
        return min(base * self.backoff_factor**failures, ceiling)


async def wait_for_tx(
    source: TransactionStatusSource,
    tx_hash: BigNumberish,
    retry_interval: float | None = None,
    *,
    policy: RetryPolicy | None = None,
    cancel_event: asyncio.Event | None = None,
    sleep: SleepFn | None = None,
) -> GetTransactionStatusResponse:
    """Poll until the transaction is ACCEPTED_ONCHAIN or REJECTED.

    Args:
        source: Status query provider.
        tx_hash: Identifier returned by the submission.
        retry_interval: Seconds between polls. Defaults to policy.interval.
        policy: Backoff policy for transport failures.
        cancel_event: When set, the wait stops at the next suspension
            point with asyncio.CancelledError.
        sleep: Injectable sleep coroutine (asyncio.sleep by default).

    Returns:
        The ACCEPTED_ONCHAIN status response.

    Raises:
        TransactionRejected: The ledger rejected the transaction.
        ProtocolViolation: Status regressed, was not a known value, or the
            status body was unusable.
        RemoteError: A ledger-coded gateway error, or a transport failure
            once max_transport_failures is exceeded.
        asyncio.CancelledError: cancel_event was set, or the task was cancelled.
    """
    policy = policy or RetryPolicy()
    interval = policy.interval if retry_interval is None else retry_interval
    if interval < 0:
        raise ValueError(f"retry_interval must be >= 0, got: {interval}")
    sleep = sleep or asyncio.sleep

    observed: TransactionStatus | None = None
    failures = 0
    polls = 0
    delay = interval

    while True:
        await _suspend(delay, sleep, cancel_event, tx_hash)
        polls += 1

        try:
            response = await source.get_transaction_status(tx_hash)
        except RemoteError as exc:
            if exc.error_code in _UNUSABLE_BODY_CODES:
                raise ProtocolViolation(
                    f"unusable status response for {tx_hash}: {exc}",
                    details={
                        **exc.details,
                        "transaction_hash": str(tx_hash),
                        "polls": polls,
                    },
                ) from exc
            if exc.error_code not in _TRANSPORT_CODES or exc.ledger_code is not None:
                raise
            failures += 1
            limit = policy.max_transport_failures
            if limit is not None and failures > limit:
                raise
            delay = policy.transport_delay(failures, interval)
            logger.warning(
                "status query for %s failed (%s, attempt %d); retrying in %.1fs",
                tx_hash,
                exc.error_code,
                failures,
                delay,
            )
            continue

        failures = 0
        delay = interval
        status = response.tx_status

        if observed is not None and status.rank < observed.rank:
            raise ProtocolViolation(
                f"status of {tx_hash} regressed from {observed} to {status}",
                details={
                    "transaction_hash": str(tx_hash),
                    "previous": str(observed),
                    "current": str(status),
                    "polls": polls,
                },
            )
        observed = status

        if not status.is_terminal:
            logger.debug("transaction %s is %s (poll %d)", tx_hash, status, polls)
            continue

        if status == TransactionStatus.ACCEPTED_ONCHAIN:
            logger.info("transaction %s accepted on chain after %d polls", tx_hash, polls)
            return response

        reason = response.tx_failure_reason
        raise TransactionRejected(
            str(tx_hash),
            reason.describe() if reason is not None else None,
            details={"polls": polls, "block_id": response.block_id},
        )


async def _suspend(
    delay: float,
    sleep: SleepFn,
    cancel_event: asyncio.Event | None,
    tx_hash: BigNumberish,
) -> None:
    """Sleep for delay, waking early (and raising) if cancel_event is set."""
    if cancel_event is None:
        await sleep(delay)
        return

    if cancel_event.is_set():
        raise asyncio.CancelledError(f"wait for {tx_hash} cancelled")

    sleeper = asyncio.ensure_future(sleep(delay))
    waiter = asyncio.ensure_future(cancel_event.wait())
    try:
        await asyncio.wait({sleeper, waiter}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        pending = [t for t in (sleeper, waiter) if not t.done()]
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

    if cancel_event.is_set():
        raise asyncio.CancelledError(f"wait for {tx_hash} cancelled")
