from .status import (
    CustomerEventStatus,
    PaymentModeType,
    PaymentStatus,
    PaymentSummaryStatus,
    PaymentType,
    payment_type_display_name,
)

__all__ = [
    "CustomerEventStatus",
    "PaymentModeType",
    "PaymentStatus",
    "PaymentSummaryStatus",
    "PaymentType",
    "payment_type_display_name",
]
