"""
Status and type enumerations for BookKeep records.

The store keeps these as plain text, so every enum is a ``str`` enum and
compares equal to its stored value.
"""

from enum import Enum


class CustomerEventStatus(str, Enum):
    """Lifecycle of a customer event (job)."""

    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @property
    def is_closing(self) -> bool:
        """Whether moving to this status closes the job."""
        return self in (CustomerEventStatus.COMPLETED, CustomerEventStatus.CANCELLED)


class PaymentStatus(str, Enum):
    """
    Status recorded on a single payment.

    This is entered by the user when the payment is booked and is never
    recomputed from amounts.
    """

    PENDING = "pending"
    PARTIAL = "partial"
    FULL = "full"

    @property
    def display_name(self) -> str:
        return {
            PaymentStatus.PENDING: "Pending",
            PaymentStatus.PARTIAL: "Partial Payment",
            PaymentStatus.FULL: "Full Payment",
        }[self]


class PaymentType(str, Enum):
    """Known payment types. The payments table stores free text."""

    CASH = "cash"
    CHEQUE = "cheque"
    BANK_TRANSFER = "bank_transfer"
    UPI = "upi"
    CARD = "card"
    NETBANKING = "netbanking"
    OTHER = "other"
    ADJUSTMENT = "adjustment"


class PaymentModeType(str, Enum):
    """Type of a configured payment mode."""

    CASH = "cash"
    CARD = "card"
    BANK_TRANSFER = "bank_transfer"
    UPI = "upi"
    CHEQUE = "cheque"
    OTHER = "other"


class PaymentSummaryStatus(str, Enum):
    """Derived payment progress of a customer event."""

    NOT_STARTED = "not_started"
    PARTIAL = "partial"
    COMPLETED = "completed"
    OVERPAID = "overpaid"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()


_TYPE_DISPLAY_NAMES = {
    "cash": "Cash",
    "cheque": "Cheque",
    "bank_transfer": "Bank Transfer",
    "upi": "UPI",
    "card": "Card",
    "netbanking": "Net Banking",
    "other": "Other",
    "adjustment": "Adjustment",
}


def payment_type_display_name(payment_type: str) -> str:
    """Human readable name for a payment or payment-mode type, or the raw value."""
    value = payment_type.value if isinstance(payment_type, Enum) else payment_type
    return _TYPE_DISPLAY_NAMES.get(value, value)
