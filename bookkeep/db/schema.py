"""
Table definitions for the BookKeep store.

CURRENT_TABLES holds the schema as of SCHEMA_VERSION. Legacy shapes that
only exist part-way through the upgrade path live next to the migration
steps that create them.
"""

SCHEMA_VERSION = 9

CUSTOMERS_TABLE = """
    CREATE TABLE IF NOT EXISTS customers(
        Cust_ID TEXT PRIMARY KEY,
        Customer_Name TEXT NOT NULL,
        Location TEXT,
        Contact_Person TEXT,
        Mobile_No TEXT,
        GST_No TEXT
    )
"""

PRODUCTS_TABLE = """
    CREATE TABLE IF NOT EXISTS products(
        Product_ID TEXT PRIMARY KEY,
        Product_Name TEXT NOT NULL,
        Tax_Rate REAL DEFAULT 0.0
    )
"""

CUSTOMER_EVENTS_TABLE = """
    CREATE TABLE IF NOT EXISTS {name}(
        Event_No TEXT PRIMARY KEY,
        Event_Name TEXT NOT NULL,
        Cust_ID TEXT NOT NULL,
        Product_ID TEXT NOT NULL,
        Customer_Name TEXT NOT NULL,
        Quantity REAL NOT NULL DEFAULT 1.0,
        Agreed_Amount REAL NOT NULL DEFAULT 0.0,
        Event_Date TEXT,
        Expected_Finishing_Date TEXT,
        Status TEXT DEFAULT 'active',
        FOREIGN KEY (Cust_ID) REFERENCES customers (Cust_ID) ON DELETE CASCADE,
        FOREIGN KEY (Product_ID) REFERENCES products (Product_ID) ON DELETE CASCADE
    )
"""

DAILY_EVENTS_TABLE = """
    CREATE TABLE IF NOT EXISTS daily_events(
        Event_No TEXT PRIMARY KEY,
        Event_Name TEXT NOT NULL,
        Cust_ID TEXT NOT NULL,
        Product_ID TEXT NOT NULL,
        Customer_Name TEXT NOT NULL,
        Expense_Type TEXT NOT NULL,
        Expense_Name TEXT NOT NULL,
        Amount REAL NOT NULL DEFAULT 0.0,
        Event_Date TEXT,
        Customer_Event_No TEXT,
        FOREIGN KEY (Cust_ID) REFERENCES customers (Cust_ID) ON DELETE CASCADE,
        FOREIGN KEY (Product_ID) REFERENCES products (Product_ID) ON DELETE CASCADE,
        FOREIGN KEY (Customer_Event_No) REFERENCES customer_events (Event_No) ON DELETE SET NULL
    )
"""

EXPENSE_TYPES_TABLE = """
    CREATE TABLE IF NOT EXISTS expense_types(
        expense_type_id TEXT PRIMARY KEY,
        expense_type_name TEXT NOT NULL,
        category TEXT NOT NULL,
        description TEXT,
        is_active INTEGER DEFAULT 1,
        created_at TEXT NOT NULL,
        updated_at TEXT
    )
"""

PAYMENT_MODES_TABLE = """
    CREATE TABLE IF NOT EXISTS payment_modes(
        payment_mode_id TEXT PRIMARY KEY,
        payment_mode_name TEXT NOT NULL,
        type TEXT NOT NULL,
        description TEXT,
        is_active INTEGER DEFAULT 1,
        created_at TEXT NOT NULL,
        updated_at TEXT
    )
"""

PAYMENTS_TABLE = """
    CREATE TABLE IF NOT EXISTS {name}(
        payment_id TEXT PRIMARY KEY,
        customer_event_no TEXT NOT NULL,
        paying_person_name TEXT NOT NULL,
        payment_type TEXT NOT NULL DEFAULT 'cash',
        amount REAL NOT NULL,
        status TEXT NOT NULL DEFAULT 'pending',
        reference TEXT,
        notes TEXT,
        payment_date TEXT NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT,
        FOREIGN KEY (customer_event_no) REFERENCES customer_events (Event_No) ON DELETE CASCADE
    )
"""

# Parents before children, so creation order satisfies foreign keys
CURRENT_TABLES = {
    "customers": CUSTOMERS_TABLE,
    "products": PRODUCTS_TABLE,
    "customer_events": CUSTOMER_EVENTS_TABLE.format(name="customer_events"),
    "daily_events": DAILY_EVENTS_TABLE,
    "expense_types": EXPENSE_TYPES_TABLE,
    "payment_modes": PAYMENT_MODES_TABLE,
    "payments": PAYMENTS_TABLE.format(name="payments"),
}


def create_current_schema(conn, only_missing: bool = False):
    """
    Create every table in its current shape.

    Args:
        conn: Open sqlite3 connection
        only_missing: Skip tables that already exist (in whatever shape)
    """
    existing = set()
    if only_missing:
        cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
        existing = {row[0] for row in cursor.fetchall()}

    created = []
    for table, ddl in CURRENT_TABLES.items():
        if table in existing:
            continue
        conn.execute(ddl)
        created.append(table)
    return created
