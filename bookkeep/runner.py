"""
Command line entry point for BookKeep.

Opens a store (upgrading its schema when needed) and prints a short
overview of what it holds.

Usage:
    bookkeep [db_path]
"""

import logging
import shutil
import sqlite3
import sys
from pathlib import Path

from dotenv import load_dotenv

from bookkeep.config import (
    CURRENCY_SYMBOL,
    LOG_DIR,
    LOG_FILE,
    LOG_FORMAT,
    ensure_directories,
    get_db_path,
    get_log_level,
)
from bookkeep.db import (
    SCHEMA_VERSION,
    BackupService,
    Database,
    ExpenseTypeRepository,
    PaymentModeRepository,
    PaymentRepository,
)
from bookkeep.services import PaymentSummaryService

logger = logging.getLogger(__name__)


def configure_logging():
    """Log to the log file and to stdout."""
    ensure_directories()
    logging.basicConfig(
        level=get_log_level(),
        format=LOG_FORMAT,
        handlers=[
            logging.FileHandler(LOG_DIR / LOG_FILE),
            logging.StreamHandler(sys.stdout),
        ],
    )


def stored_version(db_path: Path) -> int:
    """Read the schema version of an existing store without changing it."""
    conn = sqlite3.connect(str(db_path))
    try:
        return conn.execute("PRAGMA user_version").fetchone()[0]
    finally:
        conn.close()


def backup_before_upgrade(db_path: Path):
    """
    Copy an existing store to <db_path>.backup if opening it will upgrade it.

    Returns:
        Path of the copy, or None if no copy was needed
    """
    if not db_path.exists():
        return None
    version = stored_version(db_path)
    if version == 0 or version >= SCHEMA_VERSION:
        return None

    backup_path = Path(f"{db_path}.backup")
    print(f"Upgrading schema v{version} -> v{SCHEMA_VERSION}")
    print(f"Creating backup: {backup_path}")
    shutil.copy2(db_path, backup_path)
    logger.info(f"Copied {db_path} to {backup_path} before upgrade")
    return backup_path


def print_overview(db: Database):
    """Print table counts and payment statistics."""
    print(f"Database: {db.db_path} (schema v{db.get_version()})")
    print("-" * 40)

    for table, count in BackupService(db).get_stats().items():
        print(f"  {table:<18} {count:>6}")
    print(f"  {'expense_types':<18} {ExpenseTypeRepository(db).count():>6}")
    print(f"  {'payment_modes':<18} {PaymentModeRepository(db).count():>6}")
    print(f"  {'payments':<18} {PaymentRepository(db).count():>6}")

    stats = PaymentSummaryService(db).get_payment_statistics()
    print("-" * 40)
    print(f"  Events tracked:   {stats.total_events}")
    print(
        f"  Completed: {stats.completed_events}  Partial: {stats.partial_events}  "
        f"Overpaid: {stats.overpaid_events}  Not started: {stats.not_started_events}"
    )
    print(f"  Agreed:    {CURRENCY_SYMBOL}{stats.total_agreed_amount:,.2f}")
    print(f"  Paid:      {CURRENCY_SYMBOL}{stats.total_paid_amount:,.2f}")
    print(f"  Remaining: {CURRENCY_SYMBOL}{stats.total_remaining_amount:,.2f}")
    print(f"  Collected: {stats.completion_percentage:.1f}%")


def run():
    """Open the store given on the command line and print its overview."""
    env_path = Path(__file__).parent.parent / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    configure_logging()
    if env_path.exists():
        logger.info(f"Loaded environment from {env_path}")

    db_path = Path(sys.argv[1]) if len(sys.argv) > 1 else get_db_path()

    try:
        backup_path = backup_before_upgrade(db_path)
    except (OSError, sqlite3.Error) as e:
        logger.error(f"Could not back up {db_path}: {e}", exc_info=True)
        print(f"\nError: could not back up {db_path}. Nothing was changed.")
        sys.exit(1)

    try:
        with Database(db_path) as db:
            print_overview(db)
    except ValueError as e:
        logger.error(f"Cannot open {db_path}: {e}")
        print(f"\nError: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")
        print("\nShutting down...")
    except Exception as e:
        logger.critical(f"Critical error opening {db_path}: {e}", exc_info=True)
        print(f"\nCritical error: {e}")
        if backup_path:
            print(f"Your original database is backed up at: {backup_path}")
        print(f"Check {LOG_DIR / LOG_FILE} for more details.")
        sys.exit(1)


if __name__ == "__main__":
    run()
