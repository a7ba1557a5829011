"""Type definitions and enums for beanreminder."""

from enum import Enum
from typing import Literal


class ReminderKind(str, Enum):
    """Recurrence kinds."""

    ONE_TIME = "ONE_TIME"
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    MONTHLY_LAST_DAY = "MONTHLY_LAST_DAY"  # Always last day of month
    YEARLY = "YEARLY"
    YEARLY_LAST_DAY = "YEARLY_LAST_DAY"  # Always Dec 31


class IteratorState(str, Enum):
    """States of an occurrence iterator cursor."""

    SEEDED = "SEEDED"
    ADVANCED = "ADVANCED"
    EXHAUSTED = "EXHAUSTED"


FlagType = Literal["*", "!", "P", "A", "S", "R", "C", "U", "?", "#"]
