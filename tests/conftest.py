"""Pytest configuration and shared fixtures for beanreminder tests."""

from datetime import date
from decimal import Decimal

import pytest
import yaml

from beanreminder.schema import (
    GlobalConfig,
    Posting,
    RecurrenceRule,
    Reminder,
    ReminderFile,
    TransactionTemplate,
)
from beanreminder.types import ReminderKind

# ============================================================================
# Rule and Reminder Builders
# ============================================================================


def make_rule(
    kind: ReminderKind = ReminderKind.MONTHLY,
    start_date: date = date(2024, 1, 15),
    end_date: date = None,
    increment: int = 1,
    enabled: bool = True,
    last_date: date = None,
    days_advance: int = 0,
) -> RecurrenceRule:
    """Create RecurrenceRule with sensible defaults."""
    return RecurrenceRule(
        kind=kind,
        start_date=start_date,
        end_date=end_date,
        increment=increment,
        enabled=enabled,
        last_date=last_date,
        days_advance=days_advance,
    )


def make_transaction_template(
    payee: str = "Landlord",
    narration: str = "Rent",
    postings: list[Posting] = None,
    **kwargs,
) -> TransactionTemplate:
    """Create TransactionTemplate with a fixed and a balancing posting."""
    if postings is None:
        postings = [
            Posting(account="Expenses:Housing:Rent", amount=Decimal("1500.00")),
            Posting(account="Assets:Bank:Checking"),
        ]
    return TransactionTemplate(payee=payee, narration=narration, postings=postings, **kwargs)


def make_reminder(
    id: str = "test-reminder",
    description: str = "Test reminder",
    with_transaction: bool = True,
    **rule_kwargs,
) -> Reminder:
    """Create a complete Reminder object with sensible defaults."""
    return Reminder(
        id=id,
        description=description,
        rule=make_rule(**rule_kwargs),
        transaction=make_transaction_template() if with_transaction else None,
    )


def make_reminder_file(
    reminders: list[Reminder] = None,
    config: GlobalConfig = None,
) -> ReminderFile:
    """Create a ReminderFile with reminders and config."""
    return ReminderFile(
        version="1.0",
        reminders=reminders or [],
        config=config or GlobalConfig(),
    )


# ============================================================================
# Pytest Fixtures
# ============================================================================


@pytest.fixture
def sample_rule():
    """Fixture providing a rule builder function."""
    return make_rule


@pytest.fixture
def sample_reminder():
    """Fixture providing a reminder builder function."""
    return make_reminder


@pytest.fixture
def reminder_dict():
    """Fixture providing a sample reminder as a dictionary."""
    return {
        "id": "rent",
        "description": "Monthly rent",
        "rule": {
            "kind": "MONTHLY",
            "start_date": "2024-01-01",
            "increment": 1,
            "enabled": True,
        },
        "transaction": {
            "payee": "Landlord",
            "narration": "Rent",
            "postings": [
                {"account": "Expenses:Housing:Rent", "amount": "1500.00"},
                {"account": "Assets:Bank:Checking"},
            ],
        },
    }


@pytest.fixture
def temp_reminder_dir(tmp_path):
    """Fixture providing a temporary reminders directory with a config file."""
    reminders_dir = tmp_path / "reminders"
    reminders_dir.mkdir()

    config = {"default_currency": "EUR", "default_flag": "!"}
    with open(reminders_dir / "_config.yaml", "w") as f:
        yaml.dump(config, f)

    return reminders_dir


def write_yaml(path, data):
    """Dump ``data`` as YAML to ``path``."""
    with open(path, "w") as f:
        yaml.dump(data, f)
    return path
