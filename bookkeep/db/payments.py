"""
Payments repository.

Payments belong to a customer event and are deleted with it. Rows whose
event has gone missing anyway (written while foreign keys were off, or
restored from an old backup) are removed by cleanup_orphaned_payments.
"""

import logging
from datetime import datetime

from bookkeep.config import PAYMENT_ID_FORMAT

from .base import BaseRepository
from .models import Payment

logger = logging.getLogger(__name__)


class PaymentRepository(BaseRepository[Payment]):
    """Repository for the payments table."""

    table = "payments"
    key_column = "payment_id"
    record_cls = Payment
    id_prefix, id_width = PAYMENT_ID_FORMAT
    default_order = "payment_date DESC, payment_id DESC"

    def _prepare_changes(self, changes):
        changes["updated_at"] = datetime.now()
        return changes

    def get_by_customer_event(self, customer_event_no: str) -> list[Payment]:
        """Get the payments for a customer event, newest payment date first."""
        return self._select("customer_event_no = ?", (customer_event_no,))

    def get_total_paid(self, customer_event_no: str) -> float:
        return self._sum("amount", "customer_event_no = ?", (customer_event_no,))

    def cleanup_orphaned_payments(self) -> int:
        """
        Delete payments whose customer event no longer exists.

        Returns:
            Number of payments deleted
        """
        with self._get_connection() as conn:
            cursor = conn.execute(
                """
                DELETE FROM payments
                WHERE customer_event_no NOT IN (SELECT Event_No FROM customer_events)
                """
            )
            deleted = cursor.rowcount
        if deleted:
            logger.info(f"Removed {deleted} orphaned payments")
        return deleted
