"""
Payment satisfaction checks for customer events.

Closing a job (completed or cancelled) should be preceded by this check.
The check only reports; callers decide whether to ask the user before
changing the status.
"""

import logging
from dataclasses import dataclass
from typing import Iterable

from bookkeep.config import CURRENCY_SYMBOL
from bookkeep.db import (
    CustomerEventRepository,
    DailyEventRepository,
    Database,
    PaymentRepository,
)

logger = logging.getLogger(__name__)

EVENT_NOT_FOUND_MESSAGE = "Customer event not found"


@dataclass
class PaymentValidation:
    """Outcome of checking one event's payments and expenses."""

    has_payments: bool
    is_payment_satisfied: bool
    is_expense_within_budget: bool
    is_valid: bool
    total_paid: float
    total_expenses: float
    agreed_amount: float
    message: str


def _money(amount: float) -> str:
    return f"{CURRENCY_SYMBOL}{amount:.2f}"


def validate_payment(
    agreed_amount: float,
    payments: Iterable[float],
    expenses: Iterable[float],
) -> PaymentValidation:
    """
    Classify an event's payments against its agreed amount.

    The message reports the first failing condition, in this order: no
    payments, payments short of the agreed amount, expenses over the agreed
    amount.

    Args:
        agreed_amount: The job's agreed amount
        payments: Amounts of the job's payments
        expenses: Amounts of the job's linked daily expenses
    """
    payments = list(payments)
    total_paid = sum(payments, 0.0)
    total_expenses = sum(expenses, 0.0)

    has_payments = len(payments) > 0
    is_payment_satisfied = total_paid >= agreed_amount
    is_expense_within_budget = total_expenses <= agreed_amount

    if not has_payments:
        message = "No payment records found for this event"
    elif not is_payment_satisfied:
        message = (
            f"Payment amount ({_money(total_paid)}) is less than "
            f"agreed amount ({_money(agreed_amount)})"
        )
    elif not is_expense_within_budget:
        message = (
            f"Total expenses ({_money(total_expenses)}) exceed "
            f"agreed amount ({_money(agreed_amount)})"
        )
    else:
        message = "Payment is satisfied"

    return PaymentValidation(
        has_payments=has_payments,
        is_payment_satisfied=is_payment_satisfied,
        is_expense_within_budget=is_expense_within_budget,
        is_valid=is_payment_satisfied and is_expense_within_budget,
        total_paid=total_paid,
        total_expenses=total_expenses,
        agreed_amount=agreed_amount,
        message=message,
    )


def requires_confirmation(validation: PaymentValidation) -> bool:
    """Whether closing the event should be confirmed by the user first."""
    return not validation.is_valid or not validation.has_payments


class PaymentValidationService:
    """Runs the payment check against stored events."""

    def __init__(self, db: Database):
        self.customer_events = CustomerEventRepository(db)
        self.daily_events = DailyEventRepository(db)
        self.payments = PaymentRepository(db)

    def validate_payment_for_event(self, event_no: str) -> PaymentValidation:
        """
        Check the payments of a stored customer event.

        An unknown event gives an all-false result with the message
        "Customer event not found".
        """
        event = self.customer_events.get_by_id(event_no)
        if event is None:
            logger.warning(f"Payment check for unknown customer event {event_no}")
            return PaymentValidation(
                has_payments=False,
                is_payment_satisfied=False,
                is_expense_within_budget=False,
                is_valid=False,
                total_paid=0.0,
                total_expenses=0.0,
                agreed_amount=0.0,
                message=EVENT_NOT_FOUND_MESSAGE,
            )

        payments = self.payments.get_by_customer_event(event_no)
        expenses = self.daily_events.get_by_customer_event(event_no)
        return validate_payment(
            event.agreed_amount,
            [p.amount for p in payments],
            [e.amount for e in expenses],
        )

    requires_confirmation = staticmethod(requires_confirmation)
