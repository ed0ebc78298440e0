"""Create Sale Use Case: price, validate stock, deduct when paid, persist."""

from dataclasses import dataclass
from datetime import UTC, datetime

from src.application.dto.requests import CreateSaleRequest
from src.application.dto.responses import SaleResponse
from src.application.use_cases.base import LedgerUseCase
from src.config import get_logger
from src.core.entities.sale import PaymentStatus, Sale, SaleStatus
from src.core.services.sale_pricing import MaterialLine, SaleLine, SalePricingEngine
from src.core.services.stock_ledger import StockLedger

logger = get_logger(__name__)


@dataclass
class CreateSaleResult:
    """Result of creating a sale."""

    sale: Sale
    tax: float
    stock_applied: bool


class CreateSaleUseCase(LedgerUseCase):
    """
    Create a sale.

    Pricing, stock deduction (paid sales only) and the sale record share one
    unit of work: any failure leaves stock and sales untouched.
    """

    async def execute(self, request: CreateSaleRequest, seller_id: int) -> CreateSaleResult:
        """Execute create sale use case."""
        payment_method = request.payment_method or self.policy.default_payment_method
        lines = [
            SaleLine(
                product_id=item.product_id,
                quantity=item.quantity,
                unit_price=item.unit_price,
                materials_used=[
                    MaterialLine(material_id=m.material_id, quantity=m.quantity)
                    for m in item.materials_used
                ],
            )
            for item in request.items
        ]

        logger.info(
            "create_sale_started",
            client_id=request.client_id,
            items=len(lines),
            payment_method=payment_method.value,
        )

        async with self._new_uow() as uow:
            engine = SalePricingEngine(uow.products, uow.materials, self.policy)
            priced = await engine.price_sale(lines, payment_method, request.payment_status)

            paid = priced.payment_status is PaymentStatus.PAID
            if paid:
                ledger = StockLedger(uow.products, uow.materials)
                await ledger.apply(priced.deductions, reject_shortfall=True, reference="sale:new")

            now = datetime.now(UTC)
            sale = Sale(
                client_id=request.client_id,
                seller_id=seller_id,
                items=priced.items,
                total_amount=priced.total_amount,
                total_cost=priced.total_cost,
                materials_cost=priced.materials_cost,
                gross_profit=priced.gross_profit,
                net_profit=priced.net_profit,
                payment_method=payment_method,
                payment_status=priced.payment_status,
                paid_at=now if paid else None,
                status=SaleStatus.COMPLETED,
                sale_date=request.sale_date or now,
            )
            sale = await uow.sales.create_sale(sale)

        logger.info(
            "sale_created",
            sale_id=sale.id,
            total=sale.total_amount,
            net_profit=sale.net_profit,
            payment_status=sale.payment_status.value,
        )
        return CreateSaleResult(sale=sale, tax=priced.tax, stock_applied=paid)

    def to_response(self, result: CreateSaleResult) -> SaleResponse:
        """Convert result to API response."""
        return SaleResponse.model_validate(result.sale)
