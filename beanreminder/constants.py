"""
Global constants for beanreminder.

This module centralizes file names, metadata keys and default values
so the loader, consumer and CLI agree on them.
"""

# ============================================================================
# File Paths and Directories
# ============================================================================

CONFIG_FILENAME = "_config.yaml"
REMINDER_FILE_PATTERN = "*.yaml"
DEFAULT_REMINDERS_DIR = "reminders"
DEFAULT_REMINDERS_FILE = "reminders.yaml"
REMINDER_FILE_VERSION = "1.0"

# Environment variables for reminder location discovery
ENV_REMINDERS_DIR = "BEANREMINDER_DIR"
ENV_REMINDERS_FILE = "BEANREMINDER_FILE"

# ============================================================================
# Metadata Keys (added to generated transactions)
# ============================================================================

META_REMINDER_ID = "reminder_id"
META_REMINDER_OCCURRENCE = "reminder_occurrence"
SYNTHETIC_REMINDERS_SOURCE = "<reminders>"

# ============================================================================
# Default Configuration Values
# ============================================================================

DEFAULT_CURRENCY = "USD"
DEFAULT_FLAG = "!"
DEFAULT_HORIZON_DAYS = 365
DEFAULT_INCREMENT = 1
DEFAULT_DAYS_ADVANCE = 0
DEFAULT_NEXT_COUNT = 5

# ============================================================================
# Calendar Constants
# ============================================================================

DAYS_PER_WEEK = 7

# ============================================================================
# Display/Formatting Constants
# ============================================================================

MAX_TABLE_COLUMN_WIDTH = 30  # Max width for table columns in CLI
