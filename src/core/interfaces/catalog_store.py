"""Abstract interfaces for catalog storage (products, materials, clients)."""

from abc import ABC, abstractmethod

from src.core.entities.client import Client
from src.core.entities.material import Material, MaterialCategory
from src.core.entities.product import Product


class IProductStore(ABC):
    """Interface for product persistence."""

    @abstractmethod
    async def create_product(self, product: Product) -> Product:
        """Create a new product."""
        pass

    @abstractmethod
    async def get_product(self, product_id: int) -> Product | None:
        """Get product by ID."""
        pass

    @abstractmethod
    async def update_product(self, product: Product) -> Product:
        """Update descriptive and price fields; stock is left to ``set_stock``."""
        pass

    @abstractmethod
    async def delete_product(self, product_id: int) -> bool:
        """Delete product. Returns False if it did not exist."""
        pass

    @abstractmethod
    async def set_stock(self, product_id: int, stock: int) -> None:
        """Overwrite the stock level of a product."""
        pass

    @abstractmethod
    async def list_products(
        self, search: str | None = None, limit: int = 10, offset: int = 0
    ) -> tuple[list[Product], int]:
        """List products matching ``search`` (case-insensitive) and the total count."""
        pass


class IMaterialStore(ABC):
    """Interface for material persistence."""

    @abstractmethod
    async def create_material(self, material: Material) -> Material:
        """Create a new material."""
        pass

    @abstractmethod
    async def get_material(self, material_id: int) -> Material | None:
        """Get material by ID."""
        pass

    @abstractmethod
    async def update_material(self, material: Material) -> Material:
        """Update catalog fields; stock is left to ``set_stock``."""
        pass

    @abstractmethod
    async def delete_material(self, material_id: int) -> bool:
        """Delete material. Returns False if it did not exist."""
        pass

    @abstractmethod
    async def set_stock(
        self,
        material_id: int,
        quantity_in_stock: float,
        cost_per_unit: float | None = None,
    ) -> None:
        """Overwrite stock level, and cost per unit when given."""
        pass

    @abstractmethod
    async def list_materials(
        self,
        search: str | None = None,
        category: MaterialCategory | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[Material], int]:
        """List materials with optional search/category filter and the total count."""
        pass

    @abstractmethod
    async def list_all_materials(self) -> list[Material]:
        """List every material (for statistics)."""
        pass


class IClientStore(ABC):
    """Interface for client persistence."""

    @abstractmethod
    async def create_client(self, client: Client) -> Client:
        """Create a new client."""
        pass

    @abstractmethod
    async def get_client(self, client_id: int) -> Client | None:
        """Get client by ID."""
        pass

    @abstractmethod
    async def update_client(self, client: Client) -> Client:
        """Update client fields."""
        pass

    @abstractmethod
    async def delete_client(self, client_id: int) -> bool:
        """Delete client. Returns False if it did not exist."""
        pass

    @abstractmethod
    async def list_clients(
        self, search: str | None = None, limit: int = 10, offset: int = 0
    ) -> tuple[list[Client], int]:
        """List clients matching name/email/phone and the total count."""
        pass
