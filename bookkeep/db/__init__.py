"""
Database module for the BookKeep store.

This module provides the persistence layer: a versioned SQLite schema, typed
records, and one repository per table.

Structure:
- base.py: Database handle and the shared repository contract
- schema.py: Current table definitions
- migrations.py: Upgrade steps from older schema versions
- models.py: Data models (Customer, Product, CustomerEvent, ...)
- customers.py, products.py, customer_events.py, daily_events.py,
  expense_types.py, payment_modes.py, payments.py: Entity repositories
- backup.py: JSON backup, restore and wipe
"""

from .backup import BackupError, BackupService
from .base import DEFAULT_DB_PATH, BaseRepository, Database, LookupRepository
from .customer_events import CustomerEventRepository
from .customers import CustomerRepository
from .daily_events import DailyEventRepository
from .expense_types import ExpenseTypeRepository
from .models import (
    Customer,
    CustomerEvent,
    DailyEvent,
    ExpenseType,
    Payment,
    PaymentMode,
    Product,
)
from .payment_modes import PaymentModeRepository
from .payments import PaymentRepository
from .products import ProductRepository
from .schema import SCHEMA_VERSION

__all__ = [
    # Base
    "BaseRepository",
    "Database",
    "DEFAULT_DB_PATH",
    "LookupRepository",
    "SCHEMA_VERSION",
    # Models
    "Customer",
    "CustomerEvent",
    "DailyEvent",
    "ExpenseType",
    "Payment",
    "PaymentMode",
    "Product",
    # Repositories
    "CustomerEventRepository",
    "CustomerRepository",
    "DailyEventRepository",
    "ExpenseTypeRepository",
    "PaymentModeRepository",
    "PaymentRepository",
    "ProductRepository",
    # Backup
    "BackupError",
    "BackupService",
]
