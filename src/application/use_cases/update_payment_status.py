"""
Update Payment Status Use Case.

``pending -> paid`` deducts the sale's recorded stock, ``paid -> pending``
restores it, and the current status changes no stock at all.
"""

from dataclasses import dataclass

from src.application.dto.requests import UpdatePaymentStatusRequest
from src.application.dto.responses import SaleResponse
from src.application.use_cases.base import LedgerUseCase
from src.config import get_logger
from src.core.entities.sale import Sale
from src.core.exceptions import SaleNotFoundError
from src.core.services.payment_transition import plan_payment_transition
from src.core.services.stock_ledger import StockLedger

logger = get_logger(__name__)


@dataclass
class UpdatePaymentStatusResult:
    sale: Sale
    status_changed: bool
    skipped_products: list[int]
    skipped_materials: list[int]


class UpdatePaymentStatusUseCase(LedgerUseCase):
    """Move a sale between paid and pending, applying or reversing its stock effects."""

    async def execute(
        self, sale_id: int, request: UpdatePaymentStatusRequest
    ) -> UpdatePaymentStatusResult:
        skipped_products: list[int] = []
        skipped_materials: list[int] = []

        async with self._new_uow() as uow:
            sale = await uow.sales.get_sale(sale_id)
            if sale is None:
                raise SaleNotFoundError(sale_id)

            transition = plan_payment_transition(sale, request.payment_status)

            if transition.changes_status:
                ledger = StockLedger(uow.products, uow.materials)
                applied = await ledger.apply(
                    transition.stock,
                    reject_shortfall=(
                        transition.deducts and self.policy.revalidate_stock_on_payment
                    ),
                    skip_missing=True,
                    reference=f"sale:{sale_id}",
                )
                skipped_products = applied.skipped_products
                skipped_materials = applied.skipped_materials

            sale.payment_status = transition.target
            sale.paid_at = transition.paid_at
            if request.payment_method is not None:
                sale.payment_method = request.payment_method
            sale = await uow.sales.update_payment(sale)

        logger.info(
            "payment_status_updated",
            sale_id=sale_id,
            source=transition.source.value,
            target=transition.target.value,
            status_changed=transition.changes_status,
        )
        return UpdatePaymentStatusResult(
            sale=sale,
            status_changed=transition.changes_status,
            skipped_products=skipped_products,
            skipped_materials=skipped_materials,
        )

    def to_response(self, result: UpdatePaymentStatusResult) -> SaleResponse:
        return SaleResponse.model_validate(result.sale)
