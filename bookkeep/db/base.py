"""
Base module with the store handle and the shared repository behaviour.

Provides the foundation for all database operations in BookKeep: a single
injected SQLite connection, schema upgrades on open, and the CRUD/ID
generation contract every entity repository follows.
"""

import logging
import sqlite3
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any, Generic, Optional, TypeVar, Union

from bookkeep.config import DB_TIMEOUT, DEFAULT_DB_PATH, get_db_path

from .models import Record, to_storage
from .schema import SCHEMA_VERSION

logger = logging.getLogger(__name__)

MEMORY_DB = ":memory:"

R = TypeVar("R", bound=Record)


class Database:
    """
    Handle for one BookKeep store.

    Open it once at startup, pass it to every repository and service, and
    close it at shutdown. All work goes through a single connection.
    """

    def __init__(
        self, db_path: Optional[Union[Path, str]] = None, timeout: float = DB_TIMEOUT
    ):
        """
        Initialize the handle without touching the file.

        Args:
            db_path: Path to the SQLite database file, or ":memory:".
                Defaults to data/bookkeep.db
            timeout: Seconds to wait on a locked database
        """
        if db_path is None:
            db_path = get_db_path()
        self.db_path = db_path if str(db_path) == MEMORY_DB else Path(db_path)
        self.timeout = timeout
        self._conn: Optional[sqlite3.Connection] = None

    def __enter__(self) -> "Database":
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("Database is not open")
        return self._conn

    def _ensure_db_directory(self):
        """Ensure the database directory exists."""
        if self.db_path == MEMORY_DB:
            return
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            logger.debug(f"Database directory ensured: {self.db_path.parent}")
        except Exception as e:
            logger.error(f"Failed to create database directory: {e}", exc_info=True)
            raise

    def open(self, target_version: int = SCHEMA_VERSION) -> "Database":
        """
        Open the store and bring its schema up to target_version.

        A fresh file gets the full current schema. An older file is walked
        through each upgrade step in order.

        Returns:
            This handle, ready for use

        Raises:
            ValueError: If the stored schema is newer than target_version
        """
        if self._conn is not None:
            return self

        from .migrations import upgrade

        self._ensure_db_directory()
        conn = sqlite3.connect(str(self.db_path), timeout=self.timeout)
        conn.row_factory = sqlite3.Row
        self._conn = conn

        try:
            upgrade(self, target_version)
            conn.execute("PRAGMA foreign_keys = ON")
        except Exception:
            self.close()
            raise

        logger.info(f"Opened database {self.db_path} at version {self.get_version()}")
        return self

    def close(self):
        """Close the connection if it is open."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.debug(f"Closed database {self.db_path}")

    @contextmanager
    def connection(self):
        """Context manager for a unit of work: commit on success, roll back on error."""
        conn = self.conn
        try:
            yield conn
            conn.commit()
        except sqlite3.IntegrityError:
            # Callers decide how loud a constraint violation is
            conn.rollback()
            raise
        except sqlite3.OperationalError as e:
            logger.error(f"Database locked or operational error: {e}", exc_info=True)
            conn.rollback()
            raise
        except Exception as e:
            logger.error(f"Database error: {e}", exc_info=True)
            conn.rollback()
            raise

    @contextmanager
    def transaction(self):
        """Run several statements inside one explicit transaction."""
        conn = self.conn
        if conn.in_transaction:
            conn.commit()
        conn.execute("BEGIN")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    def get_version(self) -> int:
        """Get the stored schema version."""
        return self.conn.execute("PRAGMA user_version").fetchone()[0]

    def set_version(self, version: int):
        """Record the schema version."""
        self.conn.execute(f"PRAGMA user_version = {int(version)}")

    def table_exists(self, table: str) -> bool:
        cursor = self.conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name = ?",
            (table,),
        )
        return cursor.fetchone() is not None

    def column_names(self, table: str) -> list[str]:
        cursor = self.conn.execute(f"PRAGMA table_info({table})")
        return [row["name"] for row in cursor.fetchall()]


class BaseRepository(Generic[R]):
    """
    Base repository class for one BookKeep table.

    Subclasses set the table, its primary-key column, the record type and
    the id format. Each repository only writes its own table.
    """

    table: str = ""
    key_column: str = ""
    record_cls: type = Record
    id_prefix: str = ""
    id_width: int = 4
    default_order: Optional[str] = None

    def __init__(self, db: Database):
        """
        Initialize the repository.

        Args:
            db: Open database handle shared by the application
        """
        self.db = db

    def _get_connection(self):
        return self.db.connection()

    def _select(
        self,
        where: Optional[str] = None,
        params: tuple = (),
        order_by: Optional[str] = None,
    ) -> list[R]:
        """Fetch records matching an optional WHERE clause."""
        query = f"SELECT * FROM {self.table}"
        if where:
            query += f" WHERE {where}"
        order_by = order_by or self.default_order
        if order_by:
            query += f" ORDER BY {order_by}"
        with self._get_connection() as conn:
            cursor = conn.execute(query, params)
            return [self.record_cls.from_row(row) for row in cursor.fetchall()]

    def _scalar(self, query: str, params: tuple = ()) -> Any:
        with self._get_connection() as conn:
            row = conn.execute(query, params).fetchone()
            return row[0] if row else None

    # =========================================================================
    # CRUD
    # =========================================================================

    def create(self, record: R) -> bool:
        """
        Insert a new record.

        Returns:
            True if inserted, False on a constraint violation (duplicate
            key, missing parent row, NOT NULL)

        Raises:
            ValueError: If the record fails its own field checks
        """
        record.validate()
        row = record.to_row()
        columns = ", ".join(row)
        placeholders = ", ".join("?" for _ in row)
        key = row[self.key_column]

        try:
            with self._get_connection() as conn:
                conn.execute(
                    f"INSERT INTO {self.table} ({columns}) VALUES ({placeholders})",
                    tuple(row.values()),
                )
            logger.info(f"Created {self.table} row {key}")
            return True
        except sqlite3.IntegrityError as e:
            logger.warning(f"Could not create {self.table} row {key}: {e}")
            return False

    def get_all(self) -> list[R]:
        """Get every record in the table."""
        return self._select()

    def get_by_id(self, key: str) -> Optional[R]:
        """Get a record by its primary key."""
        records = self._select(f"{self.key_column} = ?", (key,))
        return records[0] if records else None

    def exists(self, key: str) -> bool:
        """Check whether a primary key is taken."""
        return (
            self._scalar(
                f"SELECT 1 FROM {self.table} WHERE {self.key_column} = ?", (key,)
            )
            is not None
        )

    def count(self) -> int:
        return self._scalar(f"SELECT COUNT(*) FROM {self.table}") or 0

    def _prepare_changes(self, changes: dict[str, Any]) -> dict[str, Any]:
        """Hook for subclasses to stamp extra columns on update."""
        return changes

    def update(self, key: str, **changes) -> int:
        """
        Update some fields of a record.

        The changes are applied to the stored record and checked the same
        way create() checks a new one before anything is written.

        Args:
            key: Primary key of the record
            **changes: Record field names and their new values

        Returns:
            Number of rows changed; 0 if not found or a constraint failed

        Raises:
            ValueError: If a field name is unknown, is the primary key, or
                the changed record fails its own field checks
        """
        if not changes:
            return 0
        changes = self._prepare_changes(dict(changes))
        columns = {}
        for name in changes:
            column = self.record_cls.column_for(name)
            if column == self.key_column:
                raise ValueError(f"Cannot change the primary key of {self.table}")
            columns[name] = column

        current = self.get_by_id(key)
        if current is None:
            return 0
        updated = replace(current, **changes)
        updated.validate()

        assignments = [f"{column} = ?" for column in columns.values()]
        values = [to_storage(getattr(updated, name)) for name in columns]
        try:
            with self._get_connection() as conn:
                cursor = conn.execute(
                    f"UPDATE {self.table} SET {', '.join(assignments)} "
                    f"WHERE {self.key_column} = ?",
                    (*values, key),
                )
                return cursor.rowcount
        except sqlite3.IntegrityError as e:
            logger.warning(f"Could not update {self.table} row {key}: {e}")
            return 0

    def save(self, record: R) -> bool:
        """Write every field of an existing record. Returns True if a row changed."""
        record.validate()
        key = None
        fields = {}
        for name, column in self.record_cls.COLUMNS.items():
            if column == self.key_column:
                key = getattr(record, name)
            else:
                fields[name] = getattr(record, name)
        return self.update(key, **fields) > 0

    def delete(self, key: str) -> int:
        """
        Delete a record; the store applies its cascade rules.

        Returns:
            Number of rows deleted
        """
        try:
            with self._get_connection() as conn:
                cursor = conn.execute(
                    f"DELETE FROM {self.table} WHERE {self.key_column} = ?", (key,)
                )
                if cursor.rowcount:
                    logger.info(f"Deleted {self.table} row {key}")
                return cursor.rowcount
        except sqlite3.IntegrityError as e:
            logger.warning(f"Could not delete {self.table} row {key}: {e}")
            return 0

    # =========================================================================
    # ID generation
    # =========================================================================

    def format_id(self, number: int) -> str:
        return f"{self.id_prefix}{number:0{self.id_width}d}"

    def generate_id(self) -> str:
        """
        Generate the next free id for this table.

        Takes the highest numeric suffix among ids with this prefix, adds
        one, and keeps incrementing while the candidate is taken. The read
        and the later insert are not atomic; a concurrent writer can still
        claim the id first, in which case create() returns False.
        """
        prefix_len = len(self.id_prefix)
        last_id = self._scalar(
            f"""
            SELECT {self.key_column} FROM {self.table}
            WHERE {self.key_column} LIKE ?
            ORDER BY CAST(SUBSTR({self.key_column}, {prefix_len + 1}) AS INTEGER) DESC
            LIMIT 1
            """,
            (f"{self.id_prefix}%",),
        )

        next_number = 1
        if last_id:
            try:
                next_number = int(last_id[prefix_len:]) + 1
            except ValueError:
                next_number = 1

        candidate = self.format_id(next_number)
        while self.exists(candidate):
            next_number += 1
            candidate = self.format_id(next_number)
        return candidate

    # =========================================================================
    # Helpers for subclasses
    # =========================================================================

    def _search(self, columns: list[str], term: str) -> list[R]:
        """Substring search over one or more text columns."""
        where = " OR ".join(f"{column} LIKE ?" for column in columns)
        return self._select(where, tuple(f"%{term}%" for _ in columns))

    def _sum(self, column: str, where: str, params: tuple) -> float:
        total = self._scalar(
            f"SELECT SUM({column}) FROM {self.table} WHERE {where}", params
        )
        return float(total or 0.0)


class LookupRepository(BaseRepository[R]):
    """
    Base for the user-maintained lookup tables (expense types, payment modes).

    Names are unique without regard to case, rows can be switched off
    instead of deleted, and every update stamps updated_at.
    """

    name_column: str = ""
    name_field: str = ""

    def get_active(self) -> list[R]:
        return self._select("is_active = 1")

    def name_exists(self, name: str, exclude_id: Optional[str] = None) -> bool:
        """
        Check whether a name is taken, ignoring case.

        Args:
            name: Name to check
            exclude_id: Row to ignore, for renaming a row to itself
        """
        query = f"SELECT 1 FROM {self.table} WHERE LOWER({self.name_column}) = LOWER(?)"
        params: tuple = (name.strip(),)
        if exclude_id is not None:
            query += f" AND {self.key_column} != ?"
            params += (exclude_id,)
        return self._scalar(query, params) is not None

    def create(self, record: R) -> bool:
        """Insert a new row. Returns False if the name is already taken."""
        name = getattr(record, self.name_field)
        if self.name_exists(name):
            logger.warning(f"{self.table} name '{name}' already exists")
            return False
        return super().create(record)

    def _prepare_changes(self, changes: dict[str, Any]) -> dict[str, Any]:
        changes["updated_at"] = datetime.now()
        return changes

    def update(self, key: str, **changes) -> int:
        name = changes.get(self.name_field)
        if name is not None and self.name_exists(name, exclude_id=key):
            logger.warning(f"{self.table} name '{name}' already exists")
            return 0
        return super().update(key, **changes)

    def toggle_status(self, key: str) -> int:
        """
        Flip the active flag of a row.

        Returns:
            Number of rows changed; 0 if the row does not exist
        """
        record = self.get_by_id(key)
        if record is None:
            return 0
        return self.update(key, is_active=not record.is_active)
