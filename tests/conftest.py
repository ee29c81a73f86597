"""Shared fixtures: a fresh store on disk and a few seeded records."""

from datetime import datetime

import pytest

from bookkeep.db import (
    Customer,
    CustomerEvent,
    CustomerEventRepository,
    CustomerRepository,
    Database,
    Product,
    ProductRepository,
)


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "bookkeep.db"


@pytest.fixture
def db(db_path):
    """An opened, fully migrated store."""
    database = Database(db_path).open()
    yield database
    database.close()


@pytest.fixture
def seeded(db):
    """One customer, one 18% product and one active job agreed at 1000."""
    CustomerRepository(db).create(
        Customer(
            cust_id="CUST0001",
            customer_name="Acme Traders",
            location="Chennai",
            gst_no="33ABCDE1234F1Z5",
        )
    )
    ProductRepository(db).create(
        Product(product_id="PROD0001", product_name="Fabrication", tax_rate=18.0)
    )
    CustomerEventRepository(db).create(
        CustomerEvent(
            event_no="CE0001",
            event_name="Warehouse racks",
            cust_id="CUST0001",
            product_id="PROD0001",
            customer_name="Acme Traders",
            agreed_amount=1000.0,
            event_date=datetime(2024, 1, 2),
        )
    )
    return db
