"""Reminder scheduler: queries over the occurrences of a recurrence rule."""

import logging
from datetime import date, timedelta
from typing import Iterator, Optional

from .iterators import OccurrenceIterator
from .schema import RecurrenceRule

logger = logging.getLogger(__name__)


class ReminderScheduler:
    """Computes occurrences of recurrence rules.

    Every query builds a fresh iterator over a snapshot of the rule, so the
    results always reflect the rule's current fields and repeated calls with
    an unchanged rule give the same answer.
    """

    def iterator(self, rule: RecurrenceRule) -> OccurrenceIterator:
        """
        Build an iterator for the rule's kind.

        Raises:
            ConfigurationError: If the rule's kind is not recognized
        """
        return OccurrenceIterator(rule)

    def next_occurrence(self, rule: RecurrenceRule) -> Optional[date]:
        """Return the next occurrence of ``rule`` or None if there is none."""
        occurrence = self.iterator(rule).next()
        logger.debug(
            "Next occurrence for %s rule (start %s, last %s): %s",
            rule.kind,
            rule.start_date,
            rule.last_date,
            occurrence,
        )
        return occurrence

    def next_occurrences(self, rule: RecurrenceRule, count: int) -> list[date]:
        """Return up to ``count`` upcoming occurrences of ``rule``."""
        if count < 0:
            raise ValueError(f"count must not be negative, got {count}")

        occurrences = []
        iterator = self.iterator(rule)
        while len(occurrences) < count:
            occurrence = iterator.next()
            if occurrence is None:
                break
            occurrences.append(occurrence)
        return occurrences

    def occurrences_until(self, rule: RecurrenceRule, horizon: date) -> Iterator[date]:
        """
        Lazily yield occurrences strictly before ``horizon``.

        Each call starts over with a new iterator, so the returned generator
        can be recreated at any time to restart the sequence.

        Args:
            rule: Recurrence rule
            horizon: Exclusive upper bound for yielded dates

        Yields:
            Occurrence dates in increasing order
        """
        iterator = self.iterator(rule)
        while True:
            occurrence = iterator.next()
            if occurrence is None or occurrence >= horizon:
                return
            yield occurrence

    def is_due(self, rule: RecurrenceRule, as_of: date) -> bool:
        """True if the next occurrence exists and is not after ``as_of``."""
        occurrence = self.next_occurrence(rule)
        return occurrence is not None and occurrence <= as_of

    def is_overdue(self, rule: RecurrenceRule, as_of: date) -> bool:
        """True if the next occurrence exists and is strictly before ``as_of``."""
        occurrence = self.next_occurrence(rule)
        return occurrence is not None and occurrence < as_of

    def pending_occurrences(self, rule: RecurrenceRule, as_of: date) -> list[date]:
        """
        Return every occurrence that is due as of ``as_of``.

        An occurrence is pending once ``as_of`` is within ``days_advance``
        days of it. A rule that has not been consumed for several periods
        reports all of its missed occurrences, oldest first.
        """
        horizon = as_of + timedelta(days=rule.days_advance + 1)
        return list(self.occurrences_until(rule, horizon))
