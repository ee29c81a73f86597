"""
Products repository.

A product's tax rate drives the tax split on customer event reports.
Deleting a product removes the customer events and daily events that use it.
"""

import logging

from bookkeep.config import PRODUCT_ID_FORMAT

from .base import BaseRepository
from .models import Product

logger = logging.getLogger(__name__)


class ProductRepository(BaseRepository[Product]):
    """Repository for the products table."""

    table = "products"
    key_column = "Product_ID"
    record_cls = Product
    id_prefix, id_width = PRODUCT_ID_FORMAT
    default_order = "Product_Name"

    def search_by_name(self, term: str) -> list[Product]:
        """Find products whose name contains term."""
        return self._search(["Product_Name"], term)

    def get_by_tax_rate_range(self, min_rate: float, max_rate: float) -> list[Product]:
        """
        Get products with a tax rate between min_rate and max_rate, inclusive.

        Raises:
            ValueError: If min_rate is greater than max_rate
        """
        if min_rate > max_rate:
            raise ValueError(f"min_rate {min_rate} is greater than max_rate {max_rate}")
        return self._select(
            "Tax_Rate >= ? AND Tax_Rate <= ?",
            (min_rate, max_rate),
            order_by="Tax_Rate, Product_Name",
        )
