"""
Payment modes repository.

Payment modes are the configured ways a customer can pay. Payments keep
their own free-text payment type, so a mode can be switched off or removed
without touching recorded payments.
"""

import logging

from bookkeep.config import PAYMENT_MODE_ID_FORMAT
from bookkeep.models.status import PaymentModeType

from .base import LookupRepository
from .models import PaymentMode

logger = logging.getLogger(__name__)


class PaymentModeRepository(LookupRepository[PaymentMode]):
    """Repository for the payment_modes table."""

    table = "payment_modes"
    key_column = "payment_mode_id"
    record_cls = PaymentMode
    id_prefix, id_width = PAYMENT_MODE_ID_FORMAT
    default_order = "payment_mode_name ASC"
    name_column = "payment_mode_name"
    name_field = "payment_mode_name"

    def get_by_type(self, mode_type: PaymentModeType) -> list[PaymentMode]:
        """Get the active payment modes of one type."""
        mode_type = PaymentModeType(mode_type)
        return self._select("type = ? AND is_active = 1", (mode_type.value,))

    def get_count_by_type(self) -> dict[str, int]:
        """
        Count active payment modes per type.

        Returns:
            Mapping of type value to count; types with no active modes are
            left out
        """
        with self._get_connection() as conn:
            cursor = conn.execute(
                """
                SELECT type, COUNT(*) AS count
                FROM payment_modes
                WHERE is_active = 1
                GROUP BY type
                ORDER BY type
                """
            )
            return {row["type"]: row["count"] for row in cursor.fetchall()}
