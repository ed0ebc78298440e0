"""Abstract interface for sale storage."""

from abc import ABC, abstractmethod
from datetime import datetime

from src.core.entities.sale import Sale


class ISaleStore(ABC):
    """Interface for sale persistence."""

    @abstractmethod
    async def create_sale(self, sale: Sale) -> Sale:
        """Create a sale with all its items and material usages."""
        pass

    @abstractmethod
    async def get_sale(self, sale_id: int) -> Sale | None:
        """Get sale by ID with items."""
        pass

    @abstractmethod
    async def update_payment(self, sale: Sale) -> Sale:
        """Persist payment status, method and paid_at of a sale."""
        pass

    @abstractmethod
    async def list_sales(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[Sale], int]:
        """List sales (newest first) within an optional date range and the total count."""
        pass

    @abstractmethod
    async def list_sales_for_client(self, client_id: int) -> list[Sale]:
        """Every sale made to ``client_id``, newest first."""
        pass

    @abstractmethod
    async def list_paid_completed(self, start: datetime, end: datetime) -> list[Sale]:
        """All paid, completed sales whose sale_date falls in [start, end]."""
        pass
