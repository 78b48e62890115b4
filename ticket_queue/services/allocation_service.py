"""
Queue allocation for a closed sales round.

FAIRNESS
========

Every purchase request in the round gets a distinct queue number from 1..N, and
every one of the N! assignments is equally likely:

  1. Take the round's request ids in ascending order (a stable, store-independent order)
  2. Shuffle [1..N] with a fresh random source per call
  3. Zip the two sequences

The default source is secrets.SystemRandom (OS entropy), so nobody can predict or
steer positions by learning a seed. Tests pass a factory returning random.Random(seed).
random.shuffle is an unbiased Fisher-Yates shuffle as long as the source is.

ATOMICITY
=========

Count, read, assign and the allocation record all happen in one store transaction
holding the exclusive round lock. Either every request of the round has its number
and the round is marked allocated, or nothing changed.

A round is allocated once. A second call raises AlreadyAllocatedError instead of
silently drawing a new order.
"""

import secrets
import time
from collections.abc import Sequence
from random import Random
from typing import Callable

from ticket_queue.core.clock import Clock, utcnow
from ticket_queue.core.logging import get_logger
from ticket_queue.core.metrics import record_allocation
from ticket_queue.domain.errors import (
    AlreadyAllocatedError,
    DomainError,
    SalesRoundNotFoundError,
    StorageFailureError,
)
from ticket_queue.models import QueueAllocation
from ticket_queue.services.interfaces import PurchaseRequestStore

logger = get_logger(__name__)

RandomFactory = Callable[[], Random]


def draw_queue_numbers(request_ids: Sequence[int], rng: Random) -> dict[int, int]:
    """Map each request id to a distinct queue number in 1..len(request_ids)."""
    ordered = sorted(request_ids)
    if len(set(ordered)) != len(ordered):
        raise ValueError("request ids must be unique")

    queue_numbers = list(range(1, len(ordered) + 1))
    rng.shuffle(queue_numbers)
    return dict(zip(ordered, queue_numbers))


async def allocate_queue_numbers(
    store: PurchaseRequestStore,
    sales_round_id: int,
    rng_factory: RandomFactory = secrets.SystemRandom,
    clock: Clock = utcnow,
) -> QueueAllocation:
    """
    Assign queue numbers to every purchase request of a sales round.

    Raises:
        SalesRoundNotFoundError: the round does not exist.
        AlreadyAllocatedError: the round was allocated before.
        StorageFailureError: the store failed; nothing was committed.
    """
    started = time.perf_counter()
    try:
        async with store.transaction():
            if not await store.lock_sales_round(sales_round_id, exclusive=True):
                raise SalesRoundNotFoundError(sales_round_id)

            if await store.is_allocated(sales_round_id):
                raise AlreadyAllocatedError(sales_round_id)

            total = await store.count_by_sales_round(sales_round_id)
            request_ids = await store.find_ids_by_sales_round(sales_round_id)
            if len(request_ids) != total:
                raise StorageFailureError(
                    f"sales round {sales_round_id} changed during allocation "
                    f"(counted {total}, read {len(request_ids)})"
                )

            assignments = draw_queue_numbers(request_ids, rng_factory())
            await store.assign_queue_numbers(sales_round_id, assignments)
            allocation = await store.record_allocation(sales_round_id, total, clock())
    except DomainError as e:
        elapsed = time.perf_counter() - started
        record_allocation(e.code.value.lower(), elapsed)
        logger.warning(
            "queue_allocation_failed",
            sales_round_id=sales_round_id,
            code=e.code.value,
            reason=e.message,
        )
        raise

    elapsed = time.perf_counter() - started
    record_allocation("success", elapsed, total)
    logger.info(
        "queue_allocation_completed",
        sales_round_id=sales_round_id,
        requests=total,
        duration_ms=round(elapsed * 1000, 2),
    )
    return allocation
