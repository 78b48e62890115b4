"""
Read-only catalog gateways consumed by purchase intake.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ticket_queue.domain.catalog import CatalogEntry, SalesRoundWindow


class SalesRoundGateway(ABC):
    """Resolves sales round metadata by id."""

    @abstractmethod
    async def resolve(self, sales_round_id: int) -> Optional[SalesRoundWindow]:
        """Return the round's window, or None if the round does not exist."""
        ...


class TicketTypeCatalog(ABC):
    """Resolves ticket type ids to catalog entries."""

    @abstractmethod
    async def resolve(self, ticket_type_id: int) -> Optional[CatalogEntry]:
        """Return the catalog entry, or None if the ticket type does not exist."""
        ...
