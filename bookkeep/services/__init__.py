from .budget import (
    BudgetService,
    BudgetStatus,
    TaxBreakdown,
    calculate_budget,
    calculate_tax_breakdown,
)
from .export import ExportKind, ExportService
from .payment_summary import (
    PaymentStatistics,
    PaymentSummary,
    PaymentSummaryService,
    build_payment_summaries,
    calculate_payment_statistics,
)
from .payment_validation import (
    PaymentValidation,
    PaymentValidationService,
    requires_confirmation,
    validate_payment,
)
from .report import EventReport, ReportService

__all__ = [
    "BudgetService",
    "BudgetStatus",
    "EventReport",
    "ExportKind",
    "ExportService",
    "PaymentStatistics",
    "PaymentSummary",
    "PaymentSummaryService",
    "PaymentValidation",
    "PaymentValidationService",
    "ReportService",
    "TaxBreakdown",
    "build_payment_summaries",
    "calculate_budget",
    "calculate_payment_statistics",
    "calculate_tax_breakdown",
    "requires_confirmation",
    "validate_payment",
]
