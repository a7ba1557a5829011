"""Pydantic schema models for reminder validation."""

from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from . import constants
from .exceptions import ConfigurationError
from .types import FlagType, ReminderKind


class RecurrenceRule(BaseModel):
    """Recurrence rule and fire history of a reminder.

    The model is mutable: the consumer of an occurrence writes ``last_date``
    back, and users edit the schedule fields. Assignments are validated like
    construction, so an edit can never leave the rule in an invalid state.
    Both raise ConfigurationError for invalid data. Rules nested in a
    Reminder are validated by pydantic and raise ValidationError there.
    """

    model_config = ConfigDict(validate_assignment=True)

    kind: ReminderKind = Field(..., description="Recurrence kind")
    start_date: date = Field(..., description="Anchor occurrence")
    end_date: Optional[date] = Field(
        None, description="Occurrences must fall strictly before this date (null = ongoing)"
    )
    increment: int = Field(
        constants.DEFAULT_INCREMENT, description="Periods to advance per step (every N periods)"
    )
    enabled: bool = Field(True, description="Whether the rule produces occurrences")
    last_date: Optional[date] = Field(None, description="Most recently consumed occurrence")
    days_advance: int = Field(
        constants.DEFAULT_DAYS_ADVANCE,
        description="Days before an occurrence at which it becomes pending",
    )

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid recurrence rule: {e}") from e

    def __setattr__(self, name: str, value: Any) -> None:
        try:
            super().__setattr__(name, value)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid value for {name}: {e}") from e

    @field_validator("increment")
    @classmethod
    def validate_increment(cls, v: int) -> int:
        """Ensure increment is positive."""
        if v < 1:
            raise ValueError("increment must be at least 1")
        return v

    @field_validator("days_advance")
    @classmethod
    def validate_days_advance(cls, v: int) -> int:
        """Ensure days_advance is not negative."""
        if v < 0:
            raise ValueError("days_advance must not be negative")
        return v

    @model_validator(mode="after")
    def validate_date_range(self) -> "RecurrenceRule":
        """Ensure end_date is not before start_date."""
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError(
                f"end_date ({self.end_date}) must not be before start_date ({self.start_date})"
            )
        return self


class Posting(BaseModel):
    """Transaction posting template."""

    account: str = Field(..., description="Account name")
    amount: Optional[Decimal] = Field(None, description="Amount (null = balancing posting)")
    currency: Optional[str] = Field(None, description="Currency (null = default currency)")

    @field_validator("account")
    @classmethod
    def validate_account(cls, v: str) -> str:
        """Ensure account is not empty."""
        if not v or not v.strip():
            raise ValueError("account cannot be empty")
        return v


class TransactionTemplate(BaseModel):
    """Transaction created when an occurrence of a reminder is consumed."""

    payee: Optional[str] = Field(None, description="Payee")
    narration: str = Field("", description="Narration")
    flag: Optional[FlagType] = Field(None, description="Flag (null = config default)")
    tags: list[str] = Field(default_factory=list, description="Tags to add")
    links: list[str] = Field(default_factory=list, description="Links to add")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Metadata to add")
    postings: list[Posting] = Field(default_factory=list, description="Posting list")

    @field_validator("postings")
    @classmethod
    def validate_single_balancing_posting(cls, v: list[Posting]) -> list[Posting]:
        """Ensure at most one posting leaves its amount to be balanced."""
        null_amounts = [p.account for p in v if p.amount is None]
        if len(null_amounts) > 1:
            raise ValueError(
                f"at most one posting may have a null amount, got {len(null_amounts)}: "
                f"{', '.join(null_amounts)}"
            )
        return v


class Reminder(BaseModel):
    """Complete reminder definition."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str = Field(..., description="Unique reminder identifier")
    description: str = Field("", description="Short description")
    notes: Optional[str] = Field(None, description="Free-form notes")
    rule: RecurrenceRule = Field(..., description="Recurrence rule")
    transaction: Optional[TransactionTemplate] = Field(
        None, description="Transaction template (null = reminder only)"
    )
    source_file: Optional[Path] = Field(
        None,
        exclude=True,
        description="Source file path (populated during loading, not from YAML)",
    )

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        """Ensure id is valid."""
        if not v or not v.strip():
            raise ValueError("id cannot be empty")
        return v

    @property
    def enabled(self) -> bool:
        return self.rule.enabled


class GlobalConfig(BaseModel):
    """Global configuration for beanreminder."""

    default_currency: str = Field(
        constants.DEFAULT_CURRENCY, description="Default currency for postings"
    )
    default_flag: FlagType = Field(
        constants.DEFAULT_FLAG, description="Flag for generated transactions"
    )
    horizon_days: int = Field(
        constants.DEFAULT_HORIZON_DAYS, description="Default look-ahead for listings (days)"
    )

    @field_validator("horizon_days")
    @classmethod
    def validate_horizon_days(cls, v: int) -> int:
        """Ensure horizon_days is positive."""
        if v < 1:
            raise ValueError("horizon_days must be at least 1")
        return v


class ReminderFile(BaseModel):
    """Root reminder file structure."""

    version: str = Field(constants.REMINDER_FILE_VERSION, description="File format version")
    reminders: list[Reminder] = Field(default_factory=list, description="List of reminders")
    config: GlobalConfig = Field(default_factory=GlobalConfig, description="Global configuration")

    @field_validator("reminders")
    @classmethod
    def validate_unique_ids(cls, v: list[Reminder]) -> list[Reminder]:
        """Ensure reminder ids are unique."""
        seen = set()
        for reminder in v:
            if reminder.id in seen:
                raise ValueError(f"duplicate reminder id '{reminder.id}'")
            seen.add(reminder.id)
        return v

    def get(self, reminder_id: str) -> Optional[Reminder]:
        """Return the reminder with ``reminder_id`` or None."""
        return next((r for r in self.reminders if r.id == reminder_id), None)
