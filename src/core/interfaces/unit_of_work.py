"""Unit of work: one transaction spanning several stores."""

from abc import ABC, abstractmethod
from types import TracebackType

from src.core.interfaces.catalog_store import IClientStore, IMaterialStore, IProductStore
from src.core.interfaces.ledger_store import (
    IMaterialConsumptionStore,
    IMaterialPurchaseStore,
)
from src.core.interfaces.sale_store import ISaleStore


class IUnitOfWork(ABC):
    """
    Transactional scope over the stock-affecting stores.

    Usage:
        async with uow:
            product = await uow.products.get_product(1)
            await uow.products.set_stock(1, product.stock - 1)

    Leaving the block normally commits; an exception rolls everything back.
    While the block is open, no other unit of work can write, so stock
    read inside it cannot change underneath the caller.
    """

    products: IProductStore
    materials: IMaterialStore
    clients: IClientStore
    sales: ISaleStore
    purchases: IMaterialPurchaseStore
    consumptions: IMaterialConsumptionStore

    @abstractmethod
    async def __aenter__(self) -> "IUnitOfWork":
        pass

    @abstractmethod
    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        pass
