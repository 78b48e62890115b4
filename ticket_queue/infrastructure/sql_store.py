"""
SQLAlchemy implementation of the purchase request store.

TRANSACTION & LOCKING MODEL
===========================

Each unit of work runs inside transaction(). Intake (create/update) takes a shared
lock on the sales round row; queue allocation takes an exclusive lock on the same
row. On PostgreSQL that is SELECT ... FOR SHARE / FOR UPDATE, which means:

  - many submissions for one round proceed in parallel
  - allocation waits for in-flight submissions to commit, then blocks new ones
    until the queue numbers are committed
  - rounds never block each other

SQLite has no row locks. Engines built by ticket_queue.db.session open every
transaction with BEGIN IMMEDIATE, so transactions on one file run one after
another, which gives the same outcome for tests and local runs.

Queue numbers are written with a single ORM bulk UPDATE keyed by primary key,
so there is no per-request read-modify-write.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ticket_queue.core.logging import get_logger
from ticket_queue.domain.errors import StorageFailureError
from ticket_queue.models import PurchaseRequest, PurchaseRequestItem, QueueAllocation, SalesRound
from ticket_queue.services.interfaces import PurchaseRequestStore

logger = get_logger(__name__)


class SqlPurchaseRequestStore(PurchaseRequestStore):

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        try:
            yield
            await self._db.commit()
        except SQLAlchemyError as e:
            await self._db.rollback()
            logger.error("store_transaction_failed", error=str(e), error_type=type(e).__name__)
            raise StorageFailureError("the purchase request store could not complete the operation") from e
        except Exception:
            await self._db.rollback()
            raise

    async def save(self, request: PurchaseRequest) -> PurchaseRequest:
        self._db.add(request)
        await self._db.flush()
        return await self.find_by_id(request.id)

    async def find_by_id(self, purchase_request_id: int) -> Optional[PurchaseRequest]:
        result = await self._db.execute(
            select(PurchaseRequest)
            .where(PurchaseRequest.id == purchase_request_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def find_all_by_sales_round(self, sales_round_id: int) -> list[PurchaseRequest]:
        result = await self._db.execute(
            select(PurchaseRequest)
            .where(PurchaseRequest.sales_round_id == sales_round_id)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def find_all_by_customer(self, customer_id: str) -> list[PurchaseRequest]:
        result = await self._db.execute(
            select(PurchaseRequest)
            .where(PurchaseRequest.customer_id == customer_id)
            .order_by(PurchaseRequest.created_at.desc(), PurchaseRequest.id.desc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def count_by_sales_round(self, sales_round_id: int) -> int:
        result = await self._db.execute(
            select(func.count())
            .select_from(PurchaseRequest)
            .where(PurchaseRequest.sales_round_id == sales_round_id)
        )
        return result.scalar_one()

    async def find_ids_by_sales_round(self, sales_round_id: int) -> list[int]:
        result = await self._db.execute(
            select(PurchaseRequest.id).where(PurchaseRequest.sales_round_id == sales_round_id)
        )
        return list(result.scalars().all())

    async def delete_all(self) -> int:
        # Items first: SQLite does not enforce ON DELETE CASCADE by default
        await self._db.execute(delete(PurchaseRequestItem))
        result = await self._db.execute(delete(PurchaseRequest))
        await self._db.execute(delete(QueueAllocation))
        return result.rowcount

    async def lock_sales_round(self, sales_round_id: int, exclusive: bool) -> bool:
        result = await self._db.execute(
            select(SalesRound.id)
            .where(SalesRound.id == sales_round_id)
            .with_for_update(read=not exclusive)
        )
        return result.scalar_one_or_none() is not None

    async def is_allocated(self, sales_round_id: int) -> bool:
        result = await self._db.execute(
            select(QueueAllocation.sales_round_id).where(QueueAllocation.sales_round_id == sales_round_id)
        )
        return result.scalar_one_or_none() is not None

    async def assign_queue_numbers(self, sales_round_id: int, assignments: dict[int, int]) -> None:
        if not assignments:
            return
        # Ascending queue order keeps writes close to the order fulfillment will read them
        rows = [
            {"id": request_id, "queue_number": queue_number}
            for request_id, queue_number in sorted(assignments.items(), key=lambda pair: pair[1])
        ]
        await self._db.execute(update(PurchaseRequest), rows)
        logger.debug("queue_numbers_written", sales_round_id=sales_round_id, rows=len(rows))

    async def record_allocation(
        self, sales_round_id: int, request_count: int, allocated_at: datetime
    ) -> QueueAllocation:
        allocation = QueueAllocation(
            sales_round_id=sales_round_id,
            request_count=request_count,
            allocated_at=allocated_at,
        )
        self._db.add(allocation)
        await self._db.flush()
        return allocation
