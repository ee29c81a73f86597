"""
BookKeep - small-business bookkeeping core

Customers, products, billable customer events (jobs), daily expense lines,
payments and lookup tables on a versioned SQLite store, with the budget,
tax and payment rules built on top of them.
"""

from .db import Database
from .models import CustomerEventStatus, PaymentStatus, PaymentSummaryStatus
from .services import (
    BudgetService,
    ExportService,
    PaymentSummaryService,
    PaymentValidationService,
    ReportService,
    calculate_budget,
    calculate_tax_breakdown,
    validate_payment,
)

__version__ = "0.1.0"

__all__ = [
    "BudgetService",
    "CustomerEventStatus",
    "Database",
    "ExportService",
    "PaymentStatus",
    "PaymentSummaryService",
    "PaymentSummaryStatus",
    "PaymentValidationService",
    "ReportService",
    "calculate_budget",
    "calculate_tax_breakdown",
    "validate_payment",
]
