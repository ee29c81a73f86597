"""
Daily events (expense lines) repository.

An expense line may be linked to a customer event. Deleting that event
clears the link and keeps the expense.
"""

import logging
from datetime import date, datetime, time
from typing import Union

from bookkeep.config import DAILY_EVENT_ID_FORMAT

from .base import BaseRepository
from .models import DailyEvent

logger = logging.getLogger(__name__)


def _day_bound(value: Union[date, datetime], end: bool) -> str:
    """
    ISO text bound for a date range; a bare date covers the whole day.

    A bare start date stays date-only, which also matches rows stored
    without a time.
    """
    if not isinstance(value, datetime):
        if not end:
            return value.isoformat()
        value = datetime.combine(value, time.max)
    return value.isoformat()


class DailyEventRepository(BaseRepository[DailyEvent]):
    """Repository for the daily_events table."""

    table = "daily_events"
    key_column = "Event_No"
    record_cls = DailyEvent
    id_prefix, id_width = DAILY_EVENT_ID_FORMAT
    default_order = "Event_Date DESC, Event_No DESC"

    # =========================================================================
    # Filters
    # =========================================================================

    def get_by_customer(self, cust_id: str) -> list[DailyEvent]:
        return self._select("Cust_ID = ?", (cust_id,))

    def get_by_product(self, product_id: str) -> list[DailyEvent]:
        return self._select("Product_ID = ?", (product_id,))

    def get_by_customer_event(self, customer_event_no: str) -> list[DailyEvent]:
        """Get the expenses linked to a customer event, newest first."""
        return self._select("Customer_Event_No = ?", (customer_event_no,))

    def search_by_name(self, term: str) -> list[DailyEvent]:
        """Find expenses whose event name or expense name contains term."""
        return self._search(["Event_Name", "Expense_Name"], term)

    def get_by_expense_type(self, expense_type: str) -> list[DailyEvent]:
        return self._select("Expense_Type = ?", (expense_type,))

    def get_by_amount_range(self, min_amount: float, max_amount: float) -> list[DailyEvent]:
        """
        Get expenses with an amount between min_amount and max_amount, inclusive.

        Raises:
            ValueError: If min_amount is greater than max_amount
        """
        if min_amount > max_amount:
            raise ValueError(
                f"min_amount {min_amount} is greater than max_amount {max_amount}"
            )
        return self._select(
            "Amount >= ? AND Amount <= ?",
            (min_amount, max_amount),
            order_by="Amount DESC",
        )

    def get_by_date_range(
        self, start: Union[date, datetime], end: Union[date, datetime]
    ) -> list[DailyEvent]:
        """
        Get expenses dated between start and end, inclusive.

        Plain dates cover the whole day. Expenses without a date are never
        returned.

        Raises:
            ValueError: If start is after end
        """
        start_text = _day_bound(start, end=False)
        end_text = _day_bound(end, end=True)
        if start_text > end_text:
            raise ValueError(f"start {start} is after end {end}")
        return self._select(
            "Event_Date >= ? AND Event_Date <= ?", (start_text, end_text)
        )

    # =========================================================================
    # Totals
    # =========================================================================

    def get_total_for_customer(self, cust_id: str) -> float:
        return self._sum("Amount", "Cust_ID = ?", (cust_id,))

    def get_total_for_product(self, product_id: str) -> float:
        return self._sum("Amount", "Product_ID = ?", (product_id,))

    def get_total_for_customer_event(self, customer_event_no: str) -> float:
        """Total spent against a customer event."""
        return self._sum("Amount", "Customer_Event_No = ?", (customer_event_no,))

    def validate_references(self, cust_id: str, product_id: str) -> bool:
        """Check that both the customer and the product exist."""
        with self._get_connection() as conn:
            customer = conn.execute(
                "SELECT 1 FROM customers WHERE Cust_ID = ?", (cust_id,)
            ).fetchone()
            product = conn.execute(
                "SELECT 1 FROM products WHERE Product_ID = ?", (product_id,)
            ).fetchone()
        return customer is not None and product is not None
