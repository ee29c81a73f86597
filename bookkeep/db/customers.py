"""
Customers repository.

Deleting a customer removes its customer events and daily events through
the store's cascade rules.
"""

import logging

from bookkeep.config import CUSTOMER_ID_FORMAT

from .base import BaseRepository
from .models import Customer

logger = logging.getLogger(__name__)


class CustomerRepository(BaseRepository[Customer]):
    """Repository for the customers table."""

    table = "customers"
    key_column = "Cust_ID"
    record_cls = Customer
    id_prefix, id_width = CUSTOMER_ID_FORMAT
    default_order = "Customer_Name"

    def search_by_name(self, term: str) -> list[Customer]:
        """Find customers whose name contains term."""
        return self._search(["Customer_Name"], term)

    def get_by_location(self, location: str) -> list[Customer]:
        return self._select("Location = ?", (location,))
