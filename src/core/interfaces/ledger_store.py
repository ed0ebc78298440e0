"""Abstract interfaces for the material purchase/consumption ledger."""

from abc import ABC, abstractmethod
from datetime import datetime

from src.core.entities.material_ledger import MaterialConsumption, MaterialPurchase


class IMaterialPurchaseStore(ABC):
    """Interface for material purchase persistence."""

    @abstractmethod
    async def create_purchase(self, purchase: MaterialPurchase) -> MaterialPurchase:
        """Record a purchase."""
        pass

    @abstractmethod
    async def get_purchase(self, purchase_id: int) -> MaterialPurchase | None:
        """Get purchase by ID."""
        pass

    @abstractmethod
    async def update_purchase(self, purchase: MaterialPurchase) -> MaterialPurchase:
        """Update quantity, price, total, supplier and notes."""
        pass

    @abstractmethod
    async def delete_purchase(self, purchase_id: int) -> bool:
        """Remove a purchase record."""
        pass

    @abstractmethod
    async def list_purchases(
        self,
        material_id: int | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[MaterialPurchase], int]:
        """List purchases (newest first) and the total count."""
        pass


class IMaterialConsumptionStore(ABC):
    """Interface for material consumption persistence."""

    @abstractmethod
    async def create_consumption(
        self, consumption: MaterialConsumption
    ) -> MaterialConsumption:
        """Record a consumption."""
        pass

    @abstractmethod
    async def get_consumption(self, consumption_id: int) -> MaterialConsumption | None:
        """Get consumption by ID."""
        pass

    @abstractmethod
    async def delete_consumption(self, consumption_id: int) -> bool:
        """Remove a consumption record."""
        pass

    @abstractmethod
    async def list_consumptions(
        self,
        material_id: int | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[MaterialConsumption], int]:
        """List consumptions (newest first) and the total count."""
        pass

    @abstractmethod
    async def list_between(
        self, start: datetime, end: datetime
    ) -> list[MaterialConsumption]:
        """All consumptions with consumption_date in [start, end]."""
        pass
