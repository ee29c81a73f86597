"""
Configuration module for BookKeep.

Contains constants, settings, and configuration values used throughout the application.
"""

import os
from pathlib import Path

# Version
VERSION = "0.1.0"

# Application paths
PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = PROJECT_ROOT / "data"
LOG_DIR = PROJECT_ROOT / "logs"

# Database configuration
DEFAULT_DB_PATH = DATA_DIR / "bookkeep.db"
DB_TIMEOUT = 10.0  # seconds

# Identifier formats: (prefix, zero-padded digits)
CUSTOMER_ID_FORMAT = ("CUST", 4)
PRODUCT_ID_FORMAT = ("PROD", 4)
CUSTOMER_EVENT_ID_FORMAT = ("CE", 4)
DAILY_EVENT_ID_FORMAT = ("EVT", 4)
EXPENSE_TYPE_ID_FORMAT = ("EXT", 4)
PAYMENT_MODE_ID_FORMAT = ("PM", 4)
PAYMENT_ID_FORMAT = ("PAY", 6)

# Money handling
CURRENCY_SYMBOL = "₹"
AMOUNT_TOLERANCE = 1e-6

# Backup configuration
BACKUP_FORMAT_VERSION = 1
BACKUP_FILE_EXTENSION = ".bookkeep"
BACKUP_FILE_PREFIX = "bookkeep_backup_"

# Export configuration
DEFAULT_COMPANY_NAME = "BOOKKEEP ACCOUNTING"
DEFAULT_REPORT_SUBTITLE = "Customer Event Report"

# Logging configuration
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE = "bookkeep.log"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Error messages
ERROR_MESSAGES = {
    "backup_failed": "Failed to backup database.",
    "restore_failed": "Failed to restore database.",
    "wipe_failed": "Failed to wipe database.",
    "backup_not_found": "Backup file does not exist.",
    "backup_bad_extension": "Invalid file type. Please select a .bookkeep backup file.",
    "backup_bad_json": "Backup file is not valid JSON.",
    "backup_bad_format": "Invalid backup file format.",
}


def ensure_directories():
    """Ensure required directories exist."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    LOG_DIR.mkdir(parents=True, exist_ok=True)


def get_db_path() -> Path:
    """Get the database path, honouring the BOOKKEEP_DB_PATH override."""
    override = os.getenv("BOOKKEEP_DB_PATH")
    return Path(override) if override else DEFAULT_DB_PATH


def get_company_name() -> str:
    """Get the company name printed on exported reports."""
    return os.getenv("BOOKKEEP_COMPANY_NAME") or DEFAULT_COMPANY_NAME


def get_log_level():
    """Get the configured log level."""
    import logging

    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    return level_map.get(LOG_LEVEL.upper(), logging.INFO)
