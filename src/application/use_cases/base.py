"""Shared wiring for use cases that mutate stock inside a unit of work."""

from collections.abc import Callable

from src.config import get_settings
from src.core.interfaces.unit_of_work import IUnitOfWork
from src.core.services.policy import LedgerPolicy

UnitOfWorkFactory = Callable[[], IUnitOfWork]


class LedgerUseCase:
    """
    Base for stock-affecting use cases.

    Each ``execute`` opens one unit of work from ``uow_factory``; the SQLite
    implementation is used when none is injected.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory | None = None,
        policy: LedgerPolicy | None = None,
    ):
        self._uow_factory = uow_factory
        self._policy = policy

    def _new_uow(self) -> IUnitOfWork:
        if self._uow_factory is None:
            from src.infrastructure.storage.sqlite import get_unit_of_work

            self._uow_factory = get_unit_of_work
        return self._uow_factory()

    @property
    def policy(self) -> LedgerPolicy:
        if self._policy is None:
            self._policy = LedgerPolicy.from_settings(get_settings())
        return self._policy
