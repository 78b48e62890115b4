"""
Purchase request store interface.
Services depend on this contract, never on a concrete backend.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import Optional

from ticket_queue.models import PurchaseRequest, QueueAllocation


class PurchaseRequestStore(ABC):
    """
    Durable collection of purchase requests.

    Every mutating call must happen inside transaction(): it commits when the block
    exits cleanly and rolls back on any error, reporting storage errors as
    StorageFailureError.
    """

    @abstractmethod
    def transaction(self) -> AbstractAsyncContextManager[None]:
        """All-or-nothing unit of work."""
        ...

    @abstractmethod
    async def save(self, request: PurchaseRequest) -> PurchaseRequest:
        """Insert a new request or fully replace the mutable fields of an existing one."""
        ...

    @abstractmethod
    async def find_by_id(self, purchase_request_id: int) -> Optional[PurchaseRequest]:
        """Return a request by id, or None if not found."""
        ...

    @abstractmethod
    async def find_all_by_sales_round(self, sales_round_id: int) -> list[PurchaseRequest]:
        """Return every request of a round. Order is not guaranteed."""
        ...

    @abstractmethod
    async def find_all_by_customer(self, customer_id: str) -> list[PurchaseRequest]:
        """Return a customer's requests, newest first."""
        ...

    @abstractmethod
    async def count_by_sales_round(self, sales_round_id: int) -> int:
        ...

    @abstractmethod
    async def find_ids_by_sales_round(self, sales_round_id: int) -> list[int]:
        ...

    @abstractmethod
    async def delete_all(self) -> int:
        """Administrative reset. Returns the number of deleted requests."""
        ...

    @abstractmethod
    async def lock_sales_round(self, sales_round_id: int, exclusive: bool) -> bool:
        """
        Lock the round for the rest of the transaction.

        Shared locks are taken by intake, the exclusive lock by allocation.
        Returns False if the round does not exist.
        """
        ...

    @abstractmethod
    async def is_allocated(self, sales_round_id: int) -> bool:
        ...

    @abstractmethod
    async def assign_queue_numbers(self, sales_round_id: int, assignments: dict[int, int]) -> None:
        """Write request id -> queue number for a round in one batch."""
        ...

    @abstractmethod
    async def record_allocation(
        self, sales_round_id: int, request_count: int, allocated_at: datetime
    ) -> QueueAllocation:
        ...
