"""
Versioned schema upgrades for the BookKeep store.

The stored version lives in ``PRAGMA user_version``. Opening a store at an
older version runs every step above it in order. Each step runs in its own
transaction with foreign keys switched off, checks the table shape before
changing it, and is skipped (after logging) if it fails, so one bad step
cannot take down startup or undo the steps before it.

Tables are rebuilt by creating a new table, copying, dropping the old one
and renaming the new one into place. Renaming the live table first would
make SQLite repoint other tables' foreign keys at the temporary name.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from .schema import (
    CUSTOMERS_TABLE,
    DAILY_EVENTS_TABLE,
    EXPENSE_TYPES_TABLE,
    PAYMENT_MODES_TABLE,
    PAYMENTS_TABLE,
    PRODUCTS_TABLE,
    SCHEMA_VERSION,
    create_current_schema,
)

logger = logging.getLogger(__name__)

# Combined jobs/expenses table used by versions 3 and earlier
LEGACY_EVENTS_TABLE = """
    CREATE TABLE IF NOT EXISTS events(
        Event_No TEXT PRIMARY KEY,
        Event_Name TEXT NOT NULL,
        Cust_ID TEXT NOT NULL,
        Product_ID TEXT NOT NULL,
        Customer_Name TEXT NOT NULL,
        Expense_Type TEXT NOT NULL,
        Expense_Name TEXT NOT NULL,
        Amount REAL NOT NULL DEFAULT 0.0,
        Event_Date TEXT,
        FOREIGN KEY (Cust_ID) REFERENCES customers (Cust_ID) ON DELETE CASCADE,
        FOREIGN KEY (Product_ID) REFERENCES products (Product_ID) ON DELETE CASCADE
    )
"""

# customer_events as introduced in version 4
V4_CUSTOMER_EVENTS_TABLE = """
    CREATE TABLE IF NOT EXISTS customer_events(
        Event_No TEXT PRIMARY KEY,
        Event_Name TEXT NOT NULL,
        Cust_ID TEXT NOT NULL,
        Product_ID TEXT NOT NULL,
        Customer_Name TEXT NOT NULL,
        Expense_Type TEXT NOT NULL,
        Expense_Name TEXT NOT NULL,
        Agreed_Amount REAL NOT NULL DEFAULT 0.0,
        Event_Date TEXT,
        Status TEXT DEFAULT 'active',
        FOREIGN KEY (Cust_ID) REFERENCES customers (Cust_ID) ON DELETE CASCADE,
        FOREIGN KEY (Product_ID) REFERENCES products (Product_ID) ON DELETE CASCADE
    )
"""

# customer_events as of version 5 (Expected_Finishing_Date arrives in 6)
V5_CUSTOMER_EVENTS_TABLE = """
    CREATE TABLE IF NOT EXISTS {name}(
        Event_No TEXT PRIMARY KEY,
        Event_Name TEXT NOT NULL,
        Cust_ID TEXT NOT NULL,
        Product_ID TEXT NOT NULL,
        Customer_Name TEXT NOT NULL,
        Quantity REAL NOT NULL DEFAULT 1.0,
        Agreed_Amount REAL NOT NULL DEFAULT 0.0,
        Event_Date TEXT,
        Status TEXT DEFAULT 'active',
        FOREIGN KEY (Cust_ID) REFERENCES customers (Cust_ID) ON DELETE CASCADE,
        FOREIGN KEY (Product_ID) REFERENCES products (Product_ID) ON DELETE CASCADE
    )
"""

# payments as introduced in version 8
V8_PAYMENTS_TABLE = """
    CREATE TABLE IF NOT EXISTS payments(
        payment_id TEXT PRIMARY KEY,
        customer_event_no TEXT NOT NULL,
        payment_mode_id TEXT NOT NULL,
        amount REAL NOT NULL,
        status TEXT NOT NULL DEFAULT 'pending',
        reference TEXT,
        notes TEXT,
        payment_date TEXT NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT,
        FOREIGN KEY (customer_event_no) REFERENCES customer_events (Event_No) ON DELETE CASCADE,
        FOREIGN KEY (payment_mode_id) REFERENCES payment_modes (payment_mode_id) ON DELETE RESTRICT
    )
"""


@dataclass
class MigrationStep:
    """One upgrade from version - 1 to version."""

    version: int
    description: str
    apply: Callable
    fallback: Optional[Callable] = None


def _columns(conn, table: str) -> list[str]:
    return [row[1] for row in conn.execute(f"PRAGMA table_info({table})").fetchall()]


def _table_exists(conn, table: str) -> bool:
    cursor = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name = ?", (table,)
    )
    return cursor.fetchone() is not None


def rebuild_table(conn, table: str, create_sql: str, defaults: Optional[dict] = None):
    """
    Move a table into a new shape, keeping its rows.

    Args:
        conn: Open connection, inside a transaction
        table: Table to rebuild
        create_sql: CREATE TABLE statement with a ``{name}`` placeholder
        defaults: SQL expressions for new columns missing from the old
            table; they may reference old columns

    Returns:
        Number of rows copied
    """
    defaults = defaults or {}
    new_table = f"{table}_new"
    conn.execute(f"DROP TABLE IF EXISTS {new_table}")
    conn.execute(create_sql.format(name=new_table))

    old_columns = set(_columns(conn, table))
    target_columns = []
    expressions = []
    for column in _columns(conn, new_table):
        if column in old_columns:
            target_columns.append(column)
            expressions.append(column)
        elif column in defaults:
            target_columns.append(column)
            expressions.append(f"{defaults[column]} AS {column}")

    cursor = conn.execute(
        f"""
        INSERT INTO {new_table} ({", ".join(target_columns)})
        SELECT {", ".join(expressions)} FROM {table}
        """
    )
    copied = cursor.rowcount
    conn.execute(f"DROP TABLE {table}")
    conn.execute(f"ALTER TABLE {new_table} RENAME TO {table}")
    logger.info(f"Rebuilt table {table} ({copied} rows)")
    return copied


# =============================================================================
# Steps
# =============================================================================


def _v2_fix_customer_name(conn):
    if not _table_exists(conn, "customers"):
        return
    if "Cusstomer_Name" not in _columns(conn, "customers"):
        return
    rebuild_table(
        conn,
        "customers",
        CUSTOMERS_TABLE.replace("customers(", "{name}("),
        defaults={"Customer_Name": "Cusstomer_Name"},
    )


def _v2_recreate_customers(conn):
    conn.execute("DROP TABLE IF EXISTS customers")
    conn.execute(CUSTOMERS_TABLE)


def _v3_products_and_events(conn):
    if _table_exists(conn, "products"):
        wanted = {"Product_ID", "Product_Name", "Tax_Rate"}
        if not wanted.issubset(_columns(conn, "products")):
            logger.warning("Replacing products table with an incompatible shape")
            conn.execute("DROP TABLE products")
    conn.execute(PRODUCTS_TABLE)

    if not _table_exists(conn, "daily_events"):
        conn.execute(LEGACY_EVENTS_TABLE)


def _v4_split_events(conn):
    conn.execute(V4_CUSTOMER_EVENTS_TABLE)
    conn.execute(DAILY_EVENTS_TABLE)

    if _table_exists(conn, "events"):
        cursor = conn.execute(
            """
            INSERT INTO daily_events (
                Event_No, Event_Name, Cust_ID, Product_ID, Customer_Name,
                Expense_Type, Expense_Name, Amount, Event_Date
            )
            SELECT Event_No, Event_Name, Cust_ID, Product_ID, Customer_Name,
                   Expense_Type, Expense_Name, Amount, Event_Date
            FROM events
            """
        )
        logger.info(f"Moved {cursor.rowcount} rows from events to daily_events")
        conn.execute("DROP TABLE events")


def _v5_add_quantity(conn):
    if "Quantity" in _columns(conn, "customer_events"):
        return
    rebuild_table(
        conn,
        "customer_events",
        V5_CUSTOMER_EVENTS_TABLE,
        defaults={"Quantity": "1.0"},
    )


def _v6_add_expected_finishing_date(conn):
    if "Expected_Finishing_Date" in _columns(conn, "customer_events"):
        return
    conn.execute("ALTER TABLE customer_events ADD COLUMN Expected_Finishing_Date TEXT")


def _v7_lookup_tables(conn):
    conn.execute(EXPENSE_TYPES_TABLE)
    conn.execute(PAYMENT_MODES_TABLE)


def _v8_payments(conn):
    conn.execute(V8_PAYMENTS_TABLE)


def _v9_reshape_payments(conn):
    if not _table_exists(conn, "payments"):
        conn.execute(PAYMENTS_TABLE.format(name="payments"))
        return
    if "paying_person_name" in _columns(conn, "payments"):
        return
    rebuild_table(
        conn,
        "payments",
        PAYMENTS_TABLE,
        defaults={"paying_person_name": "'Unknown'", "payment_type": "'cash'"},
    )


STEPS = [
    MigrationStep(
        2,
        "rename Cusstomer_Name to Customer_Name",
        _v2_fix_customer_name,
        _v2_recreate_customers,
    ),
    MigrationStep(3, "products table with tax rate, combined events table", _v3_products_and_events),
    MigrationStep(4, "split events into customer_events and daily_events", _v4_split_events),
    MigrationStep(5, "replace expense columns on customer_events with Quantity", _v5_add_quantity),
    MigrationStep(6, "add Expected_Finishing_Date to customer_events", _v6_add_expected_finishing_date),
    MigrationStep(7, "expense_types and payment_modes tables", _v7_lookup_tables),
    MigrationStep(8, "payments table", _v8_payments),
    MigrationStep(9, "payments carry paying person and payment type", _v9_reshape_payments),
]


def _run_step(db, step: MigrationStep) -> bool:
    """Run one step in its own transaction. Returns True on success."""
    try:
        with db.transaction() as conn:
            step.apply(conn)
        logger.info(f"Applied migration v{step.version}: {step.description}")
        return True
    except Exception as e:
        logger.error(
            f"Migration v{step.version} ({step.description}) failed: {e}",
            exc_info=True,
        )

    if step.fallback is not None:
        try:
            with db.transaction() as conn:
                step.fallback(conn)
            logger.warning(f"Migration v{step.version} fell back to a clean table")
        except Exception as e:
            logger.error(
                f"Fallback for migration v{step.version} failed: {e}", exc_info=True
            )
    return False


def upgrade(db, target_version: int = SCHEMA_VERSION) -> list[int]:
    """
    Bring the store behind db up to target_version.

    Args:
        db: Database handle with an open connection
        target_version: Schema version to reach

    Returns:
        Versions whose step failed and was skipped

    Raises:
        ValueError: If the store is newer than target_version
    """
    conn = db.conn
    current = db.get_version()

    if current > target_version:
        raise ValueError(
            f"Database schema version {current} is newer than supported "
            f"version {target_version}"
        )
    if current == target_version:
        return []

    conn.execute("PRAGMA foreign_keys = OFF")
    failed = []

    if current == 0:
        with db.transaction() as conn:
            created = create_current_schema(conn)
            db.set_version(target_version)
        logger.info(f"Created schema version {target_version}: {', '.join(created)}")
        return failed

    logger.info(f"Upgrading database from version {current} to {target_version}")
    for step in STEPS:
        if current < step.version <= target_version:
            if not _run_step(db, step):
                failed.append(step.version)

    with db.transaction() as conn:
        if target_version == SCHEMA_VERSION:
            created = create_current_schema(conn, only_missing=True)
            if created:
                logger.warning(f"Recreated missing tables: {', '.join(created)}")
        db.set_version(target_version)

    if failed:
        logger.warning(f"Skipped migration steps: {failed}")
    return failed
