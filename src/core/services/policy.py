"""Ledger policy: the configurable business rules, built once at startup."""

from dataclasses import dataclass

from src.core.entities.sale import PaymentMethod


@dataclass(frozen=True)
class LedgerPolicy:
    tax_rate: float = 0.15
    revalidate_stock_on_payment: bool = True
    default_payment_method: PaymentMethod = PaymentMethod.CASH

    @classmethod
    def from_settings(cls, settings) -> "LedgerPolicy":
        """Build from the ``ledger`` section of application settings."""
        ledger = settings.ledger
        return cls(
            tax_rate=ledger.tax_rate,
            revalidate_stock_on_payment=ledger.revalidate_stock_on_payment,
            default_payment_method=PaymentMethod(ledger.default_payment_method),
        )
