"""Beanreminder - Recurring reminders for Beancount ledgers.

This package computes the occurrences of recurring reminders (daily, weekly,
monthly, yearly and month/year-end rules) from their fire history, and turns
due occurrences into Beancount transactions.

Main exports:
    RecurrenceRule: Rule configuration and fire history
    ReminderScheduler: Next occurrence, horizon and due-date queries
    ConfigurationError: Raised for invalid rule data
"""

from .exceptions import ConfigurationError
from .scheduler import ReminderScheduler
from .schema import RecurrenceRule, Reminder
from .types import ReminderKind

__all__ = [
    "ConfigurationError",
    "RecurrenceRule",
    "Reminder",
    "ReminderKind",
    "ReminderScheduler",
]
__version__ = "1.0.0"
