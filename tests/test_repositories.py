"""
Tests for the entity repositories.
"""

from datetime import date, datetime, timezone

import pytest

from bookkeep.db import (
    Customer,
    CustomerEvent,
    CustomerEventRepository,
    CustomerRepository,
    DailyEvent,
    DailyEventRepository,
    ExpenseType,
    ExpenseTypeRepository,
    Payment,
    PaymentMode,
    PaymentModeRepository,
    PaymentRepository,
    Product,
    ProductRepository,
)
from bookkeep.db.models import parse_datetime
from bookkeep.models import CustomerEventStatus, PaymentModeType, PaymentStatus, PaymentType


def make_expense(event_no, amount, customer_event_no="CE0001", **kwargs):
    values = dict(
        event_no=event_no,
        event_name=f"Expense {event_no}",
        cust_id="CUST0001",
        product_id="PROD0001",
        customer_name="Acme Traders",
        expense_type="Material",
        expense_name="Steel",
        amount=amount,
        event_date=datetime(2024, 1, 5),
        customer_event_no=customer_event_no,
    )
    values.update(kwargs)
    return DailyEvent(**values)


def make_payment(payment_id, amount, event_no="CE0001", when=datetime(2024, 1, 10)):
    return Payment(
        payment_id=payment_id,
        customer_event_no=event_no,
        paying_person_name="R. Kumar",
        amount=amount,
        payment_date=when,
    )


class TestModels:
    """Tests for record normalization and field checks."""

    def test_blank_optional_text_becomes_none(self):
        customer = Customer(
            cust_id="CUST0001", customer_name="  Acme  ", location="   ", gst_no=""
        )
        assert customer.customer_name == "Acme"
        assert customer.location is None
        assert customer.gst_no is None

    def test_negative_tax_rate_rejected(self):
        with pytest.raises(ValueError):
            Product(product_id="PROD0001", product_name="X", tax_rate=-1).validate()

    def test_quantity_must_be_positive(self):
        event = CustomerEvent(
            event_no="CE0001",
            event_name="Job",
            cust_id="CUST0001",
            product_id="PROD0001",
            customer_name="Acme",
            quantity=0,
        )
        with pytest.raises(ValueError):
            event.validate()

    def test_row_round_trip_uses_column_names(self):
        expense = make_expense("EVT0001", 250.0)
        row = expense.to_row()
        assert row["Customer_Event_No"] == "CE0001"
        assert row["Event_Date"] == "2024-01-05T00:00:00"
        assert DailyEvent.from_row(row) == expense


class TestCustomerRepository:
    """Tests for customers and the shared repository contract."""

    def test_create_and_get(self, db):
        repo = CustomerRepository(db)
        assert repo.create(Customer(cust_id="CUST0001", customer_name="Acme"))
        assert repo.get_by_id("CUST0001").customer_name == "Acme"
        assert repo.exists("CUST0001")
        assert repo.get_by_id("CUST9999") is None

    def test_duplicate_key_returns_false(self, db):
        repo = CustomerRepository(db)
        repo.create(Customer(cust_id="CUST0001", customer_name="Acme"))
        assert repo.create(Customer(cust_id="CUST0001", customer_name="Other")) is False
        assert repo.get_by_id("CUST0001").customer_name == "Acme"

    def test_generate_id_on_empty_table(self, db):
        assert CustomerRepository(db).generate_id() == "CUST0001"

    def test_generate_id_skips_past_highest(self, db):
        """Test that ids continue after the highest suffix, not the first gap."""
        repo = CustomerRepository(db)
        repo.create(Customer(cust_id="CUST0001", customer_name="A"))
        repo.create(Customer(cust_id="CUST0005", customer_name="B"))
        assert repo.generate_id() == "CUST0006"

    def test_generate_id_orders_numerically(self, db):
        repo = CustomerRepository(db)
        repo.create(Customer(cust_id="CUST0009", customer_name="A"))
        repo.create(Customer(cust_id="CUST0010", customer_name="B"))
        assert repo.generate_id() == "CUST0011"

    def test_payment_ids_use_six_digits(self, db):
        assert PaymentRepository(db).generate_id() == "PAY000001"

    def test_update_changes_fields(self, db):
        repo = CustomerRepository(db)
        repo.create(Customer(cust_id="CUST0001", customer_name="Acme"))
        assert repo.update("CUST0001", location="Salem", mobile_no="98400") == 1
        customer = repo.get_by_id("CUST0001")
        assert customer.location == "Salem"
        assert customer.mobile_no == "98400"

    def test_update_missing_row(self, db):
        assert CustomerRepository(db).update("CUST0042", location="Salem") == 0

    def test_update_unknown_field_raises(self, db):
        with pytest.raises(ValueError):
            CustomerRepository(db).update("CUST0001", nickname="A")

    def test_update_primary_key_raises(self, db):
        with pytest.raises(ValueError):
            CustomerRepository(db).update("CUST0001", cust_id="CUST0002")

    def test_save_writes_whole_record(self, db):
        repo = CustomerRepository(db)
        repo.create(Customer(cust_id="CUST0001", customer_name="Acme", location="Salem"))
        customer = repo.get_by_id("CUST0001")
        customer.customer_name = "Acme Industries"
        customer.location = None
        assert repo.save(customer)
        saved = repo.get_by_id("CUST0001")
        assert saved.customer_name == "Acme Industries"
        assert saved.location is None

    def test_search_and_location(self, db):
        repo = CustomerRepository(db)
        repo.create(Customer(cust_id="CUST0001", customer_name="Acme Traders", location="Salem"))
        repo.create(Customer(cust_id="CUST0002", customer_name="Blue Mills", location="Erode"))
        assert [c.cust_id for c in repo.search_by_name("acme")] == ["CUST0001"]
        assert [c.cust_id for c in repo.get_by_location("Erode")] == ["CUST0002"]

    def test_delete_cascades(self, seeded):
        """Test that deleting a customer removes its jobs, expenses and payments."""
        DailyEventRepository(seeded).create(make_expense("EVT0001", 300.0))
        PaymentRepository(seeded).create(make_payment("PAY000001", 500.0))

        assert CustomerRepository(seeded).delete("CUST0001") == 1
        assert CustomerEventRepository(seeded).count() == 0
        assert DailyEventRepository(seeded).count() == 0
        assert PaymentRepository(seeded).count() == 0


class TestProductRepository:
    """Tests for products."""

    def test_tax_rate_range(self, db):
        repo = ProductRepository(db)
        repo.create(Product(product_id="PROD0001", product_name="A", tax_rate=5))
        repo.create(Product(product_id="PROD0002", product_name="B", tax_rate=18))
        repo.create(Product(product_id="PROD0003", product_name="C", tax_rate=28))
        found = repo.get_by_tax_rate_range(5, 18)
        assert [p.product_id for p in found] == ["PROD0001", "PROD0002"]

    def test_bad_range_raises(self, db):
        with pytest.raises(ValueError):
            ProductRepository(db).get_by_tax_rate_range(20, 10)

    def test_delete_cascades_to_jobs(self, seeded):
        ProductRepository(seeded).delete("PROD0001")
        assert CustomerEventRepository(seeded).get_by_id("CE0001") is None


class TestCustomerEventRepository:
    """Tests for customer events (jobs)."""

    def test_missing_customer_returns_false(self, seeded):
        event = CustomerEvent(
            event_no="CE0002",
            event_name="Ghost job",
            cust_id="CUST0404",
            product_id="PROD0001",
            customer_name="Nobody",
        )
        assert CustomerEventRepository(seeded).create(event) is False
        assert not CustomerEventRepository(seeded).exists("CE0002")

    def test_status_filters_and_totals(self, seeded):
        repo = CustomerEventRepository(seeded)
        repo.create(
            CustomerEvent(
                event_no="CE0002",
                event_name="Old job",
                cust_id="CUST0001",
                product_id="PROD0001",
                customer_name="Acme Traders",
                agreed_amount=400.0,
                status=CustomerEventStatus.COMPLETED,
            )
        )
        assert [e.event_no for e in repo.get_by_status("completed")] == ["CE0002"]
        assert repo.get_total_agreed_amount_for_customer("CUST0001") == pytest.approx(1000.0)

    def test_set_status(self, seeded):
        repo = CustomerEventRepository(seeded)
        assert repo.set_status("CE0001", CustomerEventStatus.CANCELLED) == 1
        assert repo.get_by_id("CE0001").status is CustomerEventStatus.CANCELLED

    def test_get_with_totals(self, seeded):
        DailyEventRepository(seeded).create(make_expense("EVT0001", 300.0))
        DailyEventRepository(seeded).create(make_expense("EVT0002", 150.0))
        [(event, total)] = CustomerEventRepository(seeded).get_with_totals()
        assert event.event_no == "CE0001"
        assert total == pytest.approx(450.0)

    def test_delete_unlinks_expenses(self, seeded):
        """Test that deleting a job keeps its expenses but clears the link."""
        expenses = DailyEventRepository(seeded)
        expenses.create(make_expense("EVT0001", 300.0))

        CustomerEventRepository(seeded).delete("CE0001")

        expense = expenses.get_by_id("EVT0001")
        assert expense is not None
        assert expense.customer_event_no is None

    def test_update_rejects_unknown_status(self, seeded):
        """Test that a bad status is refused and the table stays readable."""
        repo = CustomerEventRepository(seeded)
        with pytest.raises(ValueError):
            repo.update("CE0001", status="done")

        assert repo.get_by_id("CE0001").status is CustomerEventStatus.ACTIVE
        assert [e.event_no for e in repo.get_all()] == ["CE0001"]

    def test_update_rejects_zero_quantity(self, seeded):
        with pytest.raises(ValueError):
            CustomerEventRepository(seeded).update("CE0001", quantity=0)


class TestDailyEventRepository:
    """Tests for daily expense lines."""

    def test_amount_must_be_positive(self, seeded):
        with pytest.raises(ValueError):
            DailyEventRepository(seeded).create(make_expense("EVT0001", 0))

    def test_filters(self, seeded):
        repo = DailyEventRepository(seeded)
        repo.create(make_expense("EVT0001", 300.0, expense_name="Bolts"))
        repo.create(
            make_expense(
                "EVT0002",
                900.0,
                expense_type="Labour",
                event_date=datetime(2024, 2, 1, 15, 30),
                customer_event_no=None,
            )
        )

        assert [e.event_no for e in repo.search_by_name("bolt")] == ["EVT0001"]
        assert [e.event_no for e in repo.get_by_expense_type("Labour")] == ["EVT0002"]
        assert [e.event_no for e in repo.get_by_amount_range(500, 1000)] == ["EVT0002"]
        assert [e.event_no for e in repo.get_by_customer_event("CE0001")] == ["EVT0001"]
        assert [e.event_no for e in repo.get_by_date_range(date(2024, 2, 1), date(2024, 2, 1))] == [
            "EVT0002"
        ]

    def test_totals(self, seeded):
        repo = DailyEventRepository(seeded)
        repo.create(make_expense("EVT0001", 300.0))
        repo.create(make_expense("EVT0002", 200.5, customer_event_no=None))
        assert repo.get_total_for_customer("CUST0001") == pytest.approx(500.5)
        assert repo.get_total_for_product("PROD0001") == pytest.approx(500.5)
        assert repo.get_total_for_customer_event("CE0001") == pytest.approx(300.0)
        assert repo.get_total_for_customer_event("CE0404") == 0.0

    def test_validate_references(self, seeded):
        repo = DailyEventRepository(seeded)
        assert repo.validate_references("CUST0001", "PROD0001")
        assert not repo.validate_references("CUST0001", "PROD0404")

    def test_date_range_includes_date_only_rows(self, seeded):
        """Test that rows stored without a time match their own start day."""
        repo = DailyEventRepository(seeded)
        repo.create(make_expense("EVT0001", 300.0))
        seeded.conn.execute(
            "UPDATE daily_events SET Event_Date = '2023-06-01' WHERE Event_No = 'EVT0001'"
        )

        found = repo.get_by_date_range(date(2023, 6, 1), date(2023, 6, 1))
        assert [e.event_no for e in found] == ["EVT0001"]
        assert found[0].event_date == datetime(2023, 6, 1)


class TestLookupRepositories:
    """Tests for expense types and payment modes."""

    def test_expense_type_names_ignore_case(self, db):
        repo = ExpenseTypeRepository(db)
        assert repo.create(
            ExpenseType(expense_type_id="EXT0001", expense_type_name="Fuel", category="Travel")
        )
        assert repo.name_exists("FUEL")
        assert not repo.name_exists("fuel", exclude_id="EXT0001")
        assert (
            repo.create(
                ExpenseType(expense_type_id="EXT0002", expense_type_name="fuel", category="Travel")
            )
            is False
        )

    def test_rename_to_taken_name_refused(self, db):
        repo = ExpenseTypeRepository(db)
        repo.create(ExpenseType(expense_type_id="EXT0001", expense_type_name="Fuel", category="Travel"))
        repo.create(ExpenseType(expense_type_id="EXT0002", expense_type_name="Tolls", category="Travel"))
        assert repo.update("EXT0002", expense_type_name="FUEL") == 0
        assert repo.update("EXT0002", expense_type_name="Parking") == 1

    def test_toggle_and_categories(self, db):
        repo = ExpenseTypeRepository(db)
        repo.create(ExpenseType(expense_type_id="EXT0001", expense_type_name="Fuel", category="Travel"))
        repo.create(ExpenseType(expense_type_id="EXT0002", expense_type_name="Paint", category="Material"))
        repo.create(ExpenseType(expense_type_id="EXT0003", expense_type_name="Tolls", category="Travel"))

        assert repo.get_categories() == ["Material", "Travel"]
        assert repo.toggle_status("EXT0002") == 1
        toggled = repo.get_by_id("EXT0002")
        assert toggled.is_active is False
        assert toggled.updated_at is not None
        assert repo.get_categories() == ["Travel"]
        assert [t.expense_type_name for t in repo.get_active()] == ["Fuel", "Tolls"]
        assert repo.toggle_status("EXT0404") == 0

    def test_payment_modes_by_type(self, db):
        repo = PaymentModeRepository(db)
        repo.create(PaymentMode(payment_mode_id="PM0001", payment_mode_name="GPay", mode_type="upi"))
        repo.create(PaymentMode(payment_mode_id="PM0002", payment_mode_name="PhonePe", mode_type="upi"))
        repo.create(
            PaymentMode(payment_mode_id="PM0003", payment_mode_name="Counter", mode_type=PaymentModeType.CASH)
        )
        repo.toggle_status("PM0002")

        assert [m.payment_mode_name for m in repo.get_by_type(PaymentModeType.UPI)] == ["GPay"]
        assert repo.get_count_by_type() == {"cash": 1, "upi": 1}
        assert repo.get_by_id("PM0001").type_display_name == "UPI"


class TestPaymentRepository:
    """Tests for payments."""

    def test_newest_first_and_total(self, seeded):
        repo = PaymentRepository(seeded)
        repo.create(make_payment("PAY000001", 300.0, when=datetime(2024, 1, 5)))
        repo.create(make_payment("PAY000002", 200.0, when=datetime(2024, 2, 5)))

        payments = repo.get_by_customer_event("CE0001")
        assert [p.payment_id for p in payments] == ["PAY000002", "PAY000001"]
        assert repo.get_total_paid("CE0001") == pytest.approx(500.0)

    def test_status_is_stored_as_entered(self, seeded):
        repo = PaymentRepository(seeded)
        payment = make_payment("PAY000001", 1000.0)
        payment.status = PaymentStatus.PARTIAL
        repo.create(payment)
        assert repo.get_by_id("PAY000001").status is PaymentStatus.PARTIAL

    def test_update_stamps_updated_at(self, seeded):
        repo = PaymentRepository(seeded)
        repo.create(make_payment("PAY000001", 300.0))
        assert repo.get_by_id("PAY000001").updated_at is None
        repo.update("PAY000001", amount=350.0)
        payment = repo.get_by_id("PAY000001")
        assert payment.amount == 350.0
        assert payment.updated_at is not None

    def test_payment_for_missing_event_rejected(self, seeded):
        assert PaymentRepository(seeded).create(make_payment("PAY000001", 10.0, "CE0404")) is False

    def test_cleanup_orphaned_payments(self, seeded):
        """Test that payments pointing at missing jobs are deleted."""
        repo = PaymentRepository(seeded)
        repo.create(make_payment("PAY000001", 300.0))
        seeded.conn.execute("PRAGMA foreign_keys = OFF")
        repo.create(make_payment("PAY000002", 50.0, "CE0404"))
        seeded.conn.execute("PRAGMA foreign_keys = ON")

        assert repo.cleanup_orphaned_payments() == 1
        assert [p.payment_id for p in repo.get_all()] == ["PAY000001"]

    def test_payment_type_stored_as_text(self, seeded):
        repo = PaymentRepository(seeded)
        payment = make_payment("PAY000001", 100.0)
        payment.payment_type = PaymentType.UPI
        repo.create(payment)
        stored = repo.get_by_id("PAY000001")
        assert stored.payment_type == "upi"
        assert stored.payment_type_display_name == "UPI"

    def test_update_rejects_negative_amount(self, seeded):
        repo = PaymentRepository(seeded)
        repo.create(make_payment("PAY000001", 300.0))
        with pytest.raises(ValueError):
            repo.update("PAY000001", amount=-50.0)
        assert repo.get_by_id("PAY000001").amount == 300.0

    def test_update_rejects_unknown_status(self, seeded):
        repo = PaymentRepository(seeded)
        repo.create(make_payment("PAY000001", 300.0))
        with pytest.raises(ValueError):
            repo.update("PAY000001", status="bounced")
        assert repo.get_by_id("PAY000001").status is PaymentStatus.PENDING

    def test_aware_dates_are_stored_naive(self, seeded):
        """Test that timezone-aware dates read back as naive local time."""
        repo = PaymentRepository(seeded)
        when = datetime(2024, 1, 6, 12, 0, tzinfo=timezone.utc)
        repo.create(make_payment("PAY000001", 300.0, when=when))

        stored = repo.get_by_id("PAY000001").payment_date
        assert stored.tzinfo is None
        assert stored == when.astimezone().replace(tzinfo=None)

    def test_utc_suffix_is_parsed(self):
        parsed = parse_datetime("2024-01-06T12:00:00.000Z")
        assert parsed.tzinfo is None
        assert parsed == datetime(2024, 1, 6, 12, 0, tzinfo=timezone.utc).astimezone().replace(
            tzinfo=None
        )
