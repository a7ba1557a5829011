"""Turn due reminder occurrences into Beancount transactions.

The scheduler never records anything itself. This module is the consumer
side: it builds a transaction from a reminder's template for each pending
occurrence and returns copies of the reminders with ``last_date`` moved to
the newest consumed occurrence. Persisting those copies is up to the caller
(see ``store.save_reminders_to_path``).
"""

import logging
from datetime import date
from decimal import Decimal
from typing import NamedTuple, Optional

from beancount.core import amount, data

from . import constants
from .scheduler import ReminderScheduler
from .schema import GlobalConfig, RecurrenceRule, Reminder

logger = logging.getLogger(__name__)


class ProcessResult(NamedTuple):
    """Outcome of consuming every pending occurrence."""

    transactions: list[data.Transaction]
    reminders: list[Reminder]


def build_transaction(
    reminder: Reminder,
    occurrence: date,
    config: Optional[GlobalConfig] = None,
) -> data.Transaction:
    """
    Build the transaction for one occurrence of a reminder.

    Postings with an explicit amount are copied as-is. The single posting
    without an amount, if any, receives the negated sum of the others.

    Args:
        reminder: Reminder with a transaction template
        occurrence: Date of the occurrence being consumed
        config: Global configuration (default currency and flag)

    Returns:
        Beancount Transaction dated at the occurrence

    Raises:
        ValueError: If the reminder has no transaction template, or the
            balancing posting would need to balance several currencies
    """
    if config is None:
        config = GlobalConfig()

    template = reminder.transaction
    if template is None:
        raise ValueError(f"Reminder {reminder.id} has no transaction template")

    meta = data.new_metadata(constants.SYNTHETIC_REMINDERS_SOURCE, 0)
    meta.update(template.metadata)
    meta[constants.META_REMINDER_ID] = reminder.id
    meta[constants.META_REMINDER_OCCURRENCE] = occurrence.isoformat()

    specified = [p for p in template.postings if p.amount is not None]
    currencies = {p.currency or config.default_currency for p in specified}

    postings = []
    for posting_template in template.postings:
        currency = posting_template.currency or config.default_currency

        if posting_template.amount is not None:
            number = Decimal(posting_template.amount)
        else:
            if len(currencies) > 1:
                raise ValueError(
                    f"Reminder {reminder.id}: cannot balance postings in several "
                    f"currencies ({', '.join(sorted(currencies))})"
                )
            if currencies:
                currency = currencies.pop()
            number = -sum((Decimal(p.amount) for p in specified), Decimal("0"))

        postings.append(
            data.Posting(
                account=posting_template.account,
                units=amount.Amount(number, currency),
                cost=None,
                price=None,
                flag=None,
                meta=None,
            )
        )

    return data.Transaction(
        meta=meta,
        date=occurrence,
        flag=template.flag or config.default_flag,
        payee=template.payee,
        narration=template.narration or reminder.description,
        tags=frozenset(template.tags),
        links=frozenset(template.links),
        postings=postings,
    )


def record_occurrence(rule: RecurrenceRule, occurrence: date) -> RecurrenceRule:
    """Return a copy of ``rule`` that remembers ``occurrence`` as consumed."""
    return rule.model_copy(update={"last_date": occurrence})


def process_due(
    reminders: list[Reminder],
    as_of: date,
    scheduler: Optional[ReminderScheduler] = None,
    config: Optional[GlobalConfig] = None,
) -> ProcessResult:
    """
    Consume every pending occurrence of the given reminders.

    Reminders without a transaction template are only reminders: they are
    reported by the scheduler queries but never consumed here.

    Args:
        reminders: Reminders to process (disabled ones produce nothing)
        as_of: Reference date; an occurrence is pending once ``as_of`` is
            within the rule's ``days_advance`` of it
        scheduler: Scheduler to use (a new one by default)
        config: Global configuration for building transactions

    Returns:
        ProcessResult with the transactions in date order and every input
        reminder, updated where an occurrence was consumed
    """
    if scheduler is None:
        scheduler = ReminderScheduler()

    transactions = []
    updated = []

    for reminder in reminders:
        if reminder.transaction is None:
            logger.debug("Reminder %s has no transaction template, skipping", reminder.id)
            updated.append(reminder)
            continue

        pending = scheduler.pending_occurrences(reminder.rule, as_of)
        if not pending:
            updated.append(reminder)
            continue

        for occurrence in pending:
            transactions.append(build_transaction(reminder, occurrence, config))

        logger.info(
            "Reminder %s: consumed %d occurrence(s) up to %s",
            reminder.id,
            len(pending),
            pending[-1],
        )
        updated.append(
            reminder.model_copy(update={"rule": record_occurrence(reminder.rule, pending[-1])})
        )

    transactions.sort(key=lambda txn: txn.date)
    return ProcessResult(transactions, updated)
