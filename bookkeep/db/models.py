"""
Database models for the BookKeep store.

One dataclass per table. Each maps to and from the store's row shape with
``to_row``/``from_row``; the column names are fixed by the on-disk schema
and must not change.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Mapping, Optional

from bookkeep.models.status import (
    CustomerEventStatus,
    PaymentModeType,
    PaymentStatus,
    payment_type_display_name,
)


def clean_optional(value: Optional[str]) -> Optional[str]:
    """Normalize an optional text value: blank strings become None."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def to_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive local time; naive values pass through."""
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse a stored ISO-8601 value; empty values become None."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return to_naive(value)
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return to_naive(datetime.fromisoformat(text))


def to_storage(value: Any) -> Any:
    """Convert a Python value into what the store keeps."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return to_naive(value).isoformat()
    if isinstance(value, bool):
        return 1 if value else 0
    return value


class Record:
    """
    Shared row mapping for all models.

    Subclasses declare COLUMNS as an ordered mapping of field name to
    column name.
    """

    COLUMNS: ClassVar[dict[str, str]] = {}

    def to_row(self) -> dict[str, Any]:
        """Convert to a column -> value mapping ready for the store."""
        return {
            column: to_storage(getattr(self, name))
            for name, column in self.COLUMNS.items()
        }

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {name: to_storage(getattr(self, name)) for name in self.COLUMNS}

    def validate(self):
        """Check field-level rules before a write. Raises ValueError."""

    @classmethod
    def column_for(cls, name: str) -> str:
        """Get the column backing a field, or raise ValueError."""
        try:
            return cls.COLUMNS[name]
        except KeyError:
            raise ValueError(f"Unknown field for {cls.__name__}: {name}") from None


@dataclass
class Customer(Record):
    """A customer that jobs are billed to."""

    COLUMNS: ClassVar[dict[str, str]] = {
        "cust_id": "Cust_ID",
        "customer_name": "Customer_Name",
        "location": "Location",
        "contact_person": "Contact_Person",
        "mobile_no": "Mobile_No",
        "gst_no": "GST_No",
    }

    cust_id: str
    customer_name: str
    location: Optional[str] = None
    contact_person: Optional[str] = None
    mobile_no: Optional[str] = None
    gst_no: Optional[str] = None

    def __post_init__(self):
        self.customer_name = (self.customer_name or "").strip()
        self.location = clean_optional(self.location)
        self.contact_person = clean_optional(self.contact_person)
        self.mobile_no = clean_optional(self.mobile_no)
        self.gst_no = clean_optional(self.gst_no)

    def validate(self):
        if not self.customer_name:
            raise ValueError("Customer name cannot be empty")

    @classmethod
    def from_row(cls, row: Mapping) -> "Customer":
        """Create a Customer from a database row."""
        return cls(
            cust_id=row["Cust_ID"],
            customer_name=row["Customer_Name"],
            location=row["Location"],
            contact_person=row["Contact_Person"],
            mobile_no=row["Mobile_No"],
            gst_no=row["GST_No"],
        )


@dataclass
class Product(Record):
    """A product or service; its tax rate is a percentage."""

    COLUMNS: ClassVar[dict[str, str]] = {
        "product_id": "Product_ID",
        "product_name": "Product_Name",
        "tax_rate": "Tax_Rate",
    }

    product_id: str
    product_name: str
    tax_rate: float = 0.0

    def __post_init__(self):
        self.product_name = (self.product_name or "").strip()
        self.tax_rate = float(self.tax_rate or 0.0)

    def validate(self):
        if not self.product_name:
            raise ValueError("Product name cannot be empty")
        if self.tax_rate < 0:
            raise ValueError(f"tax_rate must be >= 0, got {self.tax_rate}")

    @classmethod
    def from_row(cls, row: Mapping) -> "Product":
        """Create a Product from a database row."""
        return cls(
            product_id=row["Product_ID"],
            product_name=row["Product_Name"],
            tax_rate=row["Tax_Rate"],
        )


@dataclass
class CustomerEvent(Record):
    """
    A billable job for a customer.

    customer_name is copied from the customer when the job is written and
    is not refreshed if the customer is renamed later.
    """

    COLUMNS: ClassVar[dict[str, str]] = {
        "event_no": "Event_No",
        "event_name": "Event_Name",
        "cust_id": "Cust_ID",
        "product_id": "Product_ID",
        "customer_name": "Customer_Name",
        "quantity": "Quantity",
        "agreed_amount": "Agreed_Amount",
        "event_date": "Event_Date",
        "expected_finishing_date": "Expected_Finishing_Date",
        "status": "Status",
    }

    event_no: str
    event_name: str
    cust_id: str
    product_id: str
    customer_name: str
    quantity: float = 1.0
    agreed_amount: float = 0.0
    event_date: Optional[datetime] = None
    expected_finishing_date: Optional[datetime] = None
    status: CustomerEventStatus = CustomerEventStatus.ACTIVE

    def __post_init__(self):
        self.event_name = (self.event_name or "").strip()
        self.quantity = float(self.quantity)
        self.agreed_amount = float(self.agreed_amount)
        self.status = CustomerEventStatus(self.status)

    def validate(self):
        if not self.event_name:
            raise ValueError("Event name cannot be empty")
        if self.quantity <= 0:
            raise ValueError(f"quantity must be > 0, got {self.quantity}")
        if self.agreed_amount < 0:
            raise ValueError(f"agreed_amount must be >= 0, got {self.agreed_amount}")

    @classmethod
    def from_row(cls, row: Mapping) -> "CustomerEvent":
        """Create a CustomerEvent from a database row."""
        return cls(
            event_no=row["Event_No"],
            event_name=row["Event_Name"],
            cust_id=row["Cust_ID"],
            product_id=row["Product_ID"],
            customer_name=row["Customer_Name"],
            quantity=row["Quantity"] if row["Quantity"] is not None else 1.0,
            agreed_amount=row["Agreed_Amount"] or 0.0,
            event_date=parse_datetime(row["Event_Date"]),
            expected_finishing_date=parse_datetime(row["Expected_Finishing_Date"]),
            status=row["Status"] or CustomerEventStatus.ACTIVE,
        )


@dataclass
class DailyEvent(Record):
    """
    A daily expense line, optionally linked to a customer event.

    product_id may be an empty string when the linked job has no product.
    """

    COLUMNS: ClassVar[dict[str, str]] = {
        "event_no": "Event_No",
        "event_name": "Event_Name",
        "cust_id": "Cust_ID",
        "product_id": "Product_ID",
        "customer_name": "Customer_Name",
        "expense_type": "Expense_Type",
        "expense_name": "Expense_Name",
        "amount": "Amount",
        "event_date": "Event_Date",
        "customer_event_no": "Customer_Event_No",
    }

    event_no: str
    event_name: str
    cust_id: str
    product_id: str
    customer_name: str
    expense_type: str
    expense_name: str
    amount: float
    event_date: Optional[datetime] = None
    customer_event_no: Optional[str] = None

    def __post_init__(self):
        self.event_name = (self.event_name or "").strip()
        self.product_id = self.product_id or ""
        self.amount = float(self.amount)
        self.customer_event_no = clean_optional(self.customer_event_no)

    def validate(self):
        if not self.event_name:
            raise ValueError("Expense name cannot be empty")
        if self.amount <= 0:
            raise ValueError(f"amount must be > 0, got {self.amount}")

    @classmethod
    def from_row(cls, row: Mapping) -> "DailyEvent":
        """Create a DailyEvent from a database row."""
        return cls(
            event_no=row["Event_No"],
            event_name=row["Event_Name"],
            cust_id=row["Cust_ID"],
            product_id=row["Product_ID"],
            customer_name=row["Customer_Name"],
            expense_type=row["Expense_Type"],
            expense_name=row["Expense_Name"],
            amount=row["Amount"] or 0.0,
            event_date=parse_datetime(row["Event_Date"]),
            customer_event_no=row["Customer_Event_No"],
        )


@dataclass
class ExpenseType(Record):
    """A configurable expense category entry."""

    COLUMNS: ClassVar[dict[str, str]] = {
        "expense_type_id": "expense_type_id",
        "expense_type_name": "expense_type_name",
        "category": "category",
        "description": "description",
        "is_active": "is_active",
        "created_at": "created_at",
        "updated_at": "updated_at",
    }

    expense_type_id: str
    expense_type_name: str
    category: str
    description: Optional[str] = None
    is_active: bool = True
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        self.expense_type_name = (self.expense_type_name or "").strip()
        self.category = (self.category or "").strip()
        self.description = clean_optional(self.description)
        self.is_active = bool(self.is_active)

    def validate(self):
        if not self.expense_type_name:
            raise ValueError("Expense type name cannot be empty")
        if not self.category:
            raise ValueError("Expense type category cannot be empty")

    @classmethod
    def from_row(cls, row: Mapping) -> "ExpenseType":
        """Create an ExpenseType from a database row."""
        return cls(
            expense_type_id=row["expense_type_id"],
            expense_type_name=row["expense_type_name"],
            category=row["category"],
            description=row["description"],
            is_active=row["is_active"] is None or row["is_active"] == 1,
            created_at=parse_datetime(row["created_at"]) or datetime.now(),
            updated_at=parse_datetime(row["updated_at"]),
        )


@dataclass
class PaymentMode(Record):
    """A configurable payment method."""

    COLUMNS: ClassVar[dict[str, str]] = {
        "payment_mode_id": "payment_mode_id",
        "payment_mode_name": "payment_mode_name",
        "mode_type": "type",
        "description": "description",
        "is_active": "is_active",
        "created_at": "created_at",
        "updated_at": "updated_at",
    }

    payment_mode_id: str
    payment_mode_name: str
    mode_type: PaymentModeType
    description: Optional[str] = None
    is_active: bool = True
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        self.payment_mode_name = (self.payment_mode_name or "").strip()
        self.mode_type = PaymentModeType(self.mode_type)
        self.description = clean_optional(self.description)
        self.is_active = bool(self.is_active)

    @property
    def type_display_name(self) -> str:
        return payment_type_display_name(self.mode_type)

    def validate(self):
        if not self.payment_mode_name:
            raise ValueError("Payment mode name cannot be empty")

    @classmethod
    def from_row(cls, row: Mapping) -> "PaymentMode":
        """Create a PaymentMode from a database row."""
        return cls(
            payment_mode_id=row["payment_mode_id"],
            payment_mode_name=row["payment_mode_name"],
            mode_type=row["type"],
            description=row["description"],
            is_active=row["is_active"] is None or row["is_active"] == 1,
            created_at=parse_datetime(row["created_at"]) or datetime.now(),
            updated_at=parse_datetime(row["updated_at"]),
        )


@dataclass
class Payment(Record):
    """
    A payment received against a customer event.

    payment_type is free text (see PaymentType for the known values) and
    status is whatever the user recorded.
    """

    COLUMNS: ClassVar[dict[str, str]] = {
        "payment_id": "payment_id",
        "customer_event_no": "customer_event_no",
        "paying_person_name": "paying_person_name",
        "payment_type": "payment_type",
        "amount": "amount",
        "status": "status",
        "reference": "reference",
        "notes": "notes",
        "payment_date": "payment_date",
        "created_at": "created_at",
        "updated_at": "updated_at",
    }

    payment_id: str
    customer_event_no: str
    paying_person_name: str
    amount: float
    payment_date: datetime
    payment_type: str = "cash"
    status: PaymentStatus = PaymentStatus.PENDING
    reference: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        self.paying_person_name = (self.paying_person_name or "").strip()
        self.amount = float(self.amount)
        self.payment_type = to_storage(self.payment_type) or "cash"
        if isinstance(self.payment_date, datetime):
            self.payment_date = to_naive(self.payment_date)
        self.status = PaymentStatus(self.status)
        self.reference = clean_optional(self.reference)
        self.notes = clean_optional(self.notes)

    @property
    def payment_type_display_name(self) -> str:
        return payment_type_display_name(self.payment_type)

    def validate(self):
        if not self.paying_person_name:
            raise ValueError("Paying person name cannot be empty")
        if self.amount <= 0:
            raise ValueError(f"amount must be > 0, got {self.amount}")

    @classmethod
    def from_row(cls, row: Mapping) -> "Payment":
        """Create a Payment from a database row."""
        return cls(
            payment_id=row["payment_id"],
            customer_event_no=row["customer_event_no"],
            paying_person_name=row["paying_person_name"],
            amount=row["amount"] or 0.0,
            payment_date=parse_datetime(row["payment_date"]),
            payment_type=row["payment_type"],
            status=row["status"] or PaymentStatus.PENDING,
            reference=row["reference"],
            notes=row["notes"],
            created_at=parse_datetime(row["created_at"]) or datetime.now(),
            updated_at=parse_datetime(row["updated_at"]),
        )
