"""
Service interfaces for dependency inversion.
Allows swapping storage and catalog backends without changing business logic.
"""

from .catalog import SalesRoundGateway, TicketTypeCatalog
from .store import PurchaseRequestStore

__all__ = ['PurchaseRequestStore', 'SalesRoundGateway', 'TicketTypeCatalog']
