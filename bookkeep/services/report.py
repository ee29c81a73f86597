"""
Event report assembly.

An EventReport is everything an outside renderer (XLSX export, PDF or HTML
receipt) needs for one customer event. Renderers only format it.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from bookkeep.db import (
    Customer,
    CustomerEvent,
    CustomerEventRepository,
    CustomerRepository,
    DailyEvent,
    DailyEventRepository,
    Database,
    Product,
    ProductRepository,
)

from .budget import BudgetStatus, TaxBreakdown, calculate_budget, calculate_tax_breakdown

logger = logging.getLogger(__name__)


@dataclass
class EventReport:
    """A customer event with its resolved records and derived figures."""

    event: CustomerEvent
    customer: Optional[Customer]
    product: Optional[Product]
    daily_events: list[DailyEvent]  # Newest first
    budget: BudgetStatus
    tax: TaxBreakdown


class ReportService:
    """Builds EventReports from a BookKeep database."""

    def __init__(self, db: Database):
        self.customers = CustomerRepository(db)
        self.products = ProductRepository(db)
        self.customer_events = CustomerEventRepository(db)
        self.daily_events = DailyEventRepository(db)

    def build_event_report(self, event_no: str) -> Optional[EventReport]:
        """
        Resolve a customer event into a report.

        A missing customer or product leaves that field None; a missing
        product also means no tax split.

        Returns:
            EventReport, or None if the event does not exist
        """
        event = self.customer_events.get_by_id(event_no)
        if event is None:
            logger.warning(f"No customer event {event_no} to report on")
            return None

        customer = self.customers.get_by_id(event.cust_id)
        product = self.products.get_by_id(event.product_id) if event.product_id else None
        expenses = self.daily_events.get_by_customer_event(event_no)

        return EventReport(
            event=event,
            customer=customer,
            product=product,
            daily_events=expenses,
            budget=calculate_budget(event.agreed_amount, [e.amount for e in expenses]),
            tax=calculate_tax_breakdown(
                event.agreed_amount, product.tax_rate if product else None
            ),
        )
