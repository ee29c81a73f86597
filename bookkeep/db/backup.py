"""
Backup, restore and wipe of the core BookKeep tables.

A backup is a JSON document::

    {"version": 1, "timestamp": "...", "tables": {"customers": [...], ...}}

Each table holds a list of column -> value records. Only customers,
products, customer_events and daily_events are included. Payments are
removed with their customer events when a restore or wipe clears them.
"""

import json
import logging
import sqlite3
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Union

from bookkeep.config import (
    BACKUP_FILE_EXTENSION,
    BACKUP_FILE_PREFIX,
    BACKUP_FORMAT_VERSION,
    ERROR_MESSAGES,
)

from .base import Database

logger = logging.getLogger(__name__)

# Parents first; deletes walk this in reverse
BACKUP_TABLES = ("customers", "products", "customer_events", "daily_events")


class BackupError(Exception):
    """A backup, restore or wipe could not be completed."""


class BackupService:
    """Creates and restores JSON backups of a BookKeep store."""

    def __init__(self, db: Database):
        self.db = db

    def create_backup(self) -> dict[str, Any]:
        """Read the backed-up tables into a backup document."""
        try:
            tables = {}
            with self.db.connection() as conn:
                for table in BACKUP_TABLES:
                    cursor = conn.execute(f"SELECT * FROM {table}")
                    tables[table] = [dict(row) for row in cursor.fetchall()]
        except sqlite3.Error as e:
            raise BackupError(ERROR_MESSAGES["backup_failed"]) from e

        return {
            "version": BACKUP_FORMAT_VERSION,
            "timestamp": datetime.now().isoformat(),
            "tables": tables,
        }

    def backup_to_file(self, directory: Union[Path, str]) -> Path:
        """
        Write a backup document into directory.

        Returns:
            Path of the new bookkeep_backup_<epoch-ms>.bookkeep file
        """
        directory = Path(directory)
        data = self.create_backup()
        path = directory / f"{BACKUP_FILE_PREFIX}{int(time.time() * 1000)}{BACKUP_FILE_EXTENSION}"
        try:
            directory.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to write backup {path}: {e}", exc_info=True)
            raise BackupError(ERROR_MESSAGES["backup_failed"]) from e

        counts = {table: len(rows) for table, rows in data["tables"].items()}
        logger.info(f"Wrote backup {path}: {counts}")
        return path

    def restore_from_file(self, path: Union[Path, str]):
        """
        Replace the backed-up tables with the contents of a backup file.

        Raises:
            BackupError: If the file is missing, is not a .bookkeep file, is
                not JSON, has no tables, or could not be loaded
        """
        path = Path(path)
        if not path.is_file():
            raise BackupError(ERROR_MESSAGES["backup_not_found"])
        if path.suffix != BACKUP_FILE_EXTENSION:
            raise BackupError(ERROR_MESSAGES["backup_bad_extension"])

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise BackupError(ERROR_MESSAGES["backup_bad_json"]) from e

        self.restore(data)
        logger.info(f"Restored backup {path}")

    def restore(self, data: dict[str, Any]):
        """
        Clear the backed-up tables and load them from a backup document.

        Everything runs in one transaction: either the whole backup is
        loaded or the store is left as it was.

        Raises:
            BackupError: If the document is malformed or a row is rejected
        """
        tables = data.get("tables") if isinstance(data, dict) else None
        if not isinstance(tables, dict):
            raise BackupError(ERROR_MESSAGES["backup_bad_format"])
        for table in BACKUP_TABLES:
            rows = tables.get(table, [])
            if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
                raise BackupError(ERROR_MESSAGES["backup_bad_format"])

        try:
            with self.db.transaction() as conn:
                for table in reversed(BACKUP_TABLES):
                    conn.execute(f"DELETE FROM {table}")
                for table in BACKUP_TABLES:
                    self._insert_rows(conn, table, tables.get(table, []))
        except sqlite3.Error as e:
            logger.error(f"Restore failed: {e}", exc_info=True)
            raise BackupError(ERROR_MESSAGES["restore_failed"]) from e

    def _insert_rows(self, conn, table: str, rows: list[dict]):
        # Keys that are not columns of the table are ignored
        known = set(self.db.column_names(table))
        for row in rows:
            columns = [column for column in row if column in known]
            if not columns:
                continue
            conn.execute(
                f"INSERT INTO {table} ({', '.join(columns)}) "
                f"VALUES ({', '.join('?' for _ in columns)})",
                tuple(row[column] for column in columns),
            )
        logger.debug(f"Restored {len(rows)} rows into {table}")

    def wipe(self):
        """Delete every row from the backed-up tables in one transaction."""
        try:
            with self.db.transaction() as conn:
                for table in reversed(BACKUP_TABLES):
                    conn.execute(f"DELETE FROM {table}")
        except sqlite3.Error as e:
            logger.error(f"Wipe failed: {e}", exc_info=True)
            raise BackupError(ERROR_MESSAGES["wipe_failed"]) from e
        logger.warning("Wiped customers, products, customer_events and daily_events")

    def get_stats(self) -> dict[str, int]:
        """Row counts of the backed-up tables."""
        with self.db.connection() as conn:
            return {
                table: conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
                for table in BACKUP_TABLES
            }
