"""
Payment summaries across customer events.

Groups payments by customer event, classifies each event's payment
progress, and rolls the summaries up into dashboard statistics.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

from bookkeep.config import AMOUNT_TOLERANCE, CURRENCY_SYMBOL
from bookkeep.db import (
    CustomerEvent,
    CustomerEventRepository,
    Database,
    Payment,
    PaymentRepository,
)
from bookkeep.models.status import CustomerEventStatus, PaymentSummaryStatus

logger = logging.getLogger(__name__)


@dataclass
class PaymentSummary:
    """Payments received against one customer event."""

    customer_event_no: str
    customer_name: str
    event_name: str
    agreed_amount: float
    payments: list[Payment] = field(default_factory=list)
    customer_event_status: CustomerEventStatus = CustomerEventStatus.ACTIVE

    @property
    def total_paid(self) -> float:
        return sum((p.amount for p in self.payments), 0.0)

    @property
    def remaining_amount(self) -> float:
        """Agreed amount less payments; negative when overpaid."""
        return self.agreed_amount - self.total_paid

    @property
    def last_payment_date(self) -> Optional[datetime]:
        dates = [p.payment_date for p in self.payments if p.payment_date is not None]
        return max(dates) if dates else None

    @property
    def status(self) -> PaymentSummaryStatus:
        if not self.payments:
            return PaymentSummaryStatus.NOT_STARTED
        difference = self.total_paid - self.agreed_amount
        if abs(difference) <= AMOUNT_TOLERANCE:
            return PaymentSummaryStatus.COMPLETED
        if difference < 0:
            return PaymentSummaryStatus.PARTIAL
        return PaymentSummaryStatus.OVERPAID

    @property
    def is_overpaid(self) -> bool:
        return self.status is PaymentSummaryStatus.OVERPAID

    @property
    def payment_progress(self) -> float:
        """Share of the agreed amount paid, clamped to 0..1."""
        if self.agreed_amount == 0:
            return 0.0
        return min(max(self.total_paid / self.agreed_amount, 0.0), 1.0)

    @property
    def remaining_display_text(self) -> str:
        remaining = self.remaining_amount
        if self.is_overpaid:
            return f"Overpaid by {CURRENCY_SYMBOL}{-remaining:.2f}"
        if remaining > AMOUNT_TOLERANCE:
            return f"Remaining {CURRENCY_SYMBOL}{remaining:.2f}"
        return "Fully Paid"


@dataclass
class PaymentStatistics:
    """Roll-up of a list of payment summaries."""

    total_events: int = 0
    completed_events: int = 0
    partial_events: int = 0
    overpaid_events: int = 0
    not_started_events: int = 0
    total_agreed_amount: float = 0.0
    total_paid_amount: float = 0.0
    total_remaining_amount: float = 0.0  # Positive remainders only
    completion_percentage: float = 0.0


def _sort_key(summary: PaymentSummary):
    # Newest payment first, then events without payments by event number
    last = summary.last_payment_date
    if last is None:
        return (1, 0.0, summary.customer_event_no)
    return (0, -last.timestamp(), summary.customer_event_no)


def build_payment_summaries(
    events: Iterable[CustomerEvent], payments: Iterable[Payment]
) -> list[PaymentSummary]:
    """
    Build one summary per visible customer event.

    Cancelled events are shown only while they still have payments. Events
    with no payments are shown only while they are active. Payments for
    events not in events are ignored.

    Returns:
        Summaries sorted by last payment date, newest first; summaries
        without payments come last, ordered by event number
    """
    grouped: dict[str, list[Payment]] = {}
    for payment in payments:
        grouped.setdefault(payment.customer_event_no, []).append(payment)

    summaries = []
    for event in events:
        event_payments = grouped.get(event.event_no, [])
        if not event_payments and event.status is not CustomerEventStatus.ACTIVE:
            continue
        summaries.append(
            PaymentSummary(
                customer_event_no=event.event_no,
                customer_name=event.customer_name,
                event_name=event.event_name,
                agreed_amount=event.agreed_amount,
                payments=event_payments,
                customer_event_status=event.status,
            )
        )

    summaries.sort(key=_sort_key)
    return summaries


def calculate_payment_statistics(summaries: Iterable[PaymentSummary]) -> PaymentStatistics:
    """Count summaries per status and total their amounts."""
    stats = PaymentStatistics()
    for summary in summaries:
        stats.total_events += 1
        status = summary.status
        if status is PaymentSummaryStatus.COMPLETED:
            stats.completed_events += 1
        elif status is PaymentSummaryStatus.PARTIAL:
            stats.partial_events += 1
        elif status is PaymentSummaryStatus.OVERPAID:
            stats.overpaid_events += 1
        else:
            stats.not_started_events += 1

        stats.total_agreed_amount += summary.agreed_amount
        stats.total_paid_amount += summary.total_paid
        if summary.remaining_amount > 0:
            stats.total_remaining_amount += summary.remaining_amount

    if stats.total_agreed_amount > 0:
        stats.completion_percentage = (
            stats.total_paid_amount / stats.total_agreed_amount * 100
        )
    return stats


class PaymentSummaryService:
    """Payment summaries and statistics for a stored BookKeep database."""

    def __init__(self, db: Database):
        self.customer_events = CustomerEventRepository(db)
        self.payments = PaymentRepository(db)

    def get_payment_summaries(self) -> list[PaymentSummary]:
        """
        Summarize payments for every visible customer event.

        Orphaned payments are deleted first, on every call.
        """
        self.payments.cleanup_orphaned_payments()
        return build_payment_summaries(
            self.customer_events.get_all(), self.payments.get_all()
        )

    def get_payment_summary_for_event(self, event_no: str) -> Optional[PaymentSummary]:
        for summary in self.get_payment_summaries():
            if summary.customer_event_no == event_no:
                return summary
        return None

    def get_payment_statistics(self) -> PaymentStatistics:
        return calculate_payment_statistics(self.get_payment_summaries())
