"""
Customer events repository.

A customer event is a billable job. Its budget is the agreed amount less the
daily expenses linked to it, and its payments live in the payments table.
"""

import logging

from bookkeep.config import CUSTOMER_EVENT_ID_FORMAT
from bookkeep.models.status import CustomerEventStatus

from .base import BaseRepository
from .models import CustomerEvent

logger = logging.getLogger(__name__)


class CustomerEventRepository(BaseRepository[CustomerEvent]):
    """Repository for the customer_events table."""

    table = "customer_events"
    key_column = "Event_No"
    record_cls = CustomerEvent
    id_prefix, id_width = CUSTOMER_EVENT_ID_FORMAT
    default_order = "Event_Date DESC, Event_No DESC"

    def get_by_customer(self, cust_id: str) -> list[CustomerEvent]:
        return self._select("Cust_ID = ?", (cust_id,))

    def search_by_name(self, term: str) -> list[CustomerEvent]:
        """Find events whose name contains term."""
        return self._search(["Event_Name"], term)

    def get_by_status(self, status: CustomerEventStatus) -> list[CustomerEvent]:
        status = CustomerEventStatus(status)
        return self._select("Status = ?", (status.value,))

    def get_total_agreed_amount_for_customer(self, cust_id: str) -> float:
        """Sum of agreed amounts over a customer's active events."""
        return self._sum(
            "Agreed_Amount",
            "Cust_ID = ? AND Status = ?",
            (cust_id, CustomerEventStatus.ACTIVE.value),
        )

    def get_with_totals(self) -> list[tuple[CustomerEvent, float]]:
        """
        Get every event paired with the total of its linked daily expenses.

        Returns:
            (event, expense_total) pairs, newest event date first
        """
        with self._get_connection() as conn:
            cursor = conn.execute(
                """
                SELECT ce.*, COALESCE(SUM(de.Amount), 0.0) AS daily_total
                FROM customer_events ce
                LEFT JOIN daily_events de ON ce.Event_No = de.Customer_Event_No
                GROUP BY ce.Event_No
                ORDER BY ce.Event_Date DESC, ce.Event_No DESC
                """
            )
            return [
                (CustomerEvent.from_row(row), float(row["daily_total"]))
                for row in cursor.fetchall()
            ]

    def set_status(self, event_no: str, status: CustomerEventStatus) -> int:
        """
        Move an event to a new status.

        Nothing is checked here. Callers closing a job should run the payment
        validation first and confirm with the user when it is not valid.

        Returns:
            Number of rows changed
        """
        status = CustomerEventStatus(status)
        changed = self.update(event_no, status=status)
        if changed:
            logger.info(f"Customer event {event_no} marked {status.value}")
        return changed
