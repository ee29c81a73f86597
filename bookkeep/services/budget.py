"""
Budget and tax figures for a customer event.

The agreed amount of a job is its budget: linked daily expenses are spent
against it. The agreed amount is also tax-inclusive, so the product's tax
rate splits it into a base amount and a tax amount.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from bookkeep.db import CustomerEventRepository, Database, DailyEventRepository

logger = logging.getLogger(__name__)


@dataclass
class BudgetStatus:
    """Spending against one customer event's agreed amount."""

    agreed_amount: float
    total_spent: float
    remaining: float
    is_over_budget: bool

    @property
    def label(self) -> str:
        return "Over Budget" if self.is_over_budget else "Remaining"

    @property
    def display_amount(self) -> float:
        """Remaining amount, or the overrun when over budget; never negative."""
        return abs(self.remaining)

    @property
    def display_text(self) -> str:
        return f"{self.label}: {self.display_amount:.2f}"


@dataclass
class TaxBreakdown:
    """Split of a tax-inclusive amount into base and tax."""

    agreed_amount: float
    tax_rate: float  # Percentage; 0 when there is no usable rate
    base_amount: float
    tax_amount: float


def calculate_budget(agreed_amount: float, expense_amounts: Iterable[float]) -> BudgetStatus:
    """
    Work out how much of the agreed amount is left.

    Args:
        agreed_amount: The job's agreed amount
        expense_amounts: Amounts of the daily expenses linked to the job

    Returns:
        BudgetStatus with remaining = agreed - total spent
    """
    total_spent = sum(expense_amounts, 0.0)
    remaining = agreed_amount - total_spent
    return BudgetStatus(
        agreed_amount=agreed_amount,
        total_spent=total_spent,
        remaining=remaining,
        is_over_budget=total_spent > agreed_amount,
    )


def calculate_tax_breakdown(agreed_amount: float, tax_rate: Optional[float]) -> TaxBreakdown:
    """
    Back-calculate base and tax from a tax-inclusive amount.

    base = agreed / (1 + rate / 100) and tax = agreed - base. Nothing is
    rounded here; round only when formatting. A missing or non-positive
    rate means the whole amount is base.
    """
    if tax_rate is None or tax_rate <= 0:
        return TaxBreakdown(
            agreed_amount=agreed_amount,
            tax_rate=0.0,
            base_amount=agreed_amount,
            tax_amount=0.0,
        )

    base_amount = agreed_amount / (1 + tax_rate / 100)
    return TaxBreakdown(
        agreed_amount=agreed_amount,
        tax_rate=tax_rate,
        base_amount=base_amount,
        tax_amount=agreed_amount - base_amount,
    )


class BudgetService:
    """Budget lookups for stored customer events."""

    def __init__(self, db: Database):
        self.customer_events = CustomerEventRepository(db)
        self.daily_events = DailyEventRepository(db)

    def get_budget(self, event_no: str) -> Optional[BudgetStatus]:
        """
        Get the budget status of a customer event.

        Returns:
            BudgetStatus, or None if the event does not exist
        """
        event = self.customer_events.get_by_id(event_no)
        if event is None:
            return None
        expenses = self.daily_events.get_by_customer_event(event_no)
        return calculate_budget(event.agreed_amount, [e.amount for e in expenses])
