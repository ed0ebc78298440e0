"""Core interfaces (ports) for dependency injection."""

from src.core.interfaces.catalog_store import IClientStore, IMaterialStore, IProductStore
from src.core.interfaces.email import EmailDispatchResult, IEmailDispatcher
from src.core.interfaces.ledger_store import (
    IMaterialConsumptionStore,
    IMaterialPurchaseStore,
)
from src.core.interfaces.sale_store import ISaleStore
from src.core.interfaces.unit_of_work import IUnitOfWork
from src.core.interfaces.user_store import IUserStore

__all__ = [
    # Storage interfaces
    "IProductStore",
    "IMaterialStore",
    "IClientStore",
    "ISaleStore",
    "IMaterialPurchaseStore",
    "IMaterialConsumptionStore",
    "IUserStore",
    "IUnitOfWork",
    # Email interfaces
    "IEmailDispatcher",
    "EmailDispatchResult",
]
