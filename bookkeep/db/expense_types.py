"""
Expense types repository.

Expense types are the user's own list of expense categories. Daily events
store the type name as text, so renaming or deleting a type does not touch
existing expense lines.
"""

import logging

from bookkeep.config import EXPENSE_TYPE_ID_FORMAT

from .base import LookupRepository
from .models import ExpenseType

logger = logging.getLogger(__name__)


class ExpenseTypeRepository(LookupRepository[ExpenseType]):
    """Repository for the expense_types table."""

    table = "expense_types"
    key_column = "expense_type_id"
    record_cls = ExpenseType
    id_prefix, id_width = EXPENSE_TYPE_ID_FORMAT
    default_order = "expense_type_name ASC"
    name_column = "expense_type_name"
    name_field = "expense_type_name"

    def get_categories(self) -> list[str]:
        """Get the distinct categories of active expense types, sorted."""
        with self._get_connection() as conn:
            cursor = conn.execute(
                """
                SELECT DISTINCT category FROM expense_types
                WHERE is_active = 1
                ORDER BY category ASC
                """
            )
            return [row["category"] for row in cursor.fetchall()]
