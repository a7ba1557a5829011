"""Occurrence iterators, one period definition per reminder kind.

An iterator is a small explicit state machine. Its cursor holds the last
computed date (``base``) and one of three states:

    SEEDED    -> set by ``seed()``, nothing produced yet
    ADVANCED  -> the previous ``advance()`` produced an occurrence
    EXHAUSTED -> terminal; every further ``advance()`` produces nothing

Seeding and advancing share the same re-anchoring step. After the cursor
moves by ``increment`` periods it is re-aligned to the rule's canonical day
of period, taken from ``start_date``:

    - if ``start_date`` is the last day of its period, the cursor is pinned
      to the last day of its own period (tracks month lengths and leap years)
    - otherwise the cursor takes the same numeric day of period as
      ``start_date``

``last_date`` therefore decides how many periods have elapsed while
``start_date`` decides the day within the period, so editing the start day
of a rule that already fired moves the next occurrence to the new day.
"""

import logging
from datetime import date
from typing import Callable, NamedTuple, Optional

from . import calendar_math as cal
from .exceptions import ConfigurationError
from .schema import RecurrenceRule
from .types import IteratorState, ReminderKind

logger = logging.getLogger(__name__)

StepFunc = Callable[[date, int], date]
AnchorFunc = Callable[[RecurrenceRule, date], date]


class Cursor(NamedTuple):
    """Transient position of an occurrence iterator."""

    base: date
    state: IteratorState


class Period(NamedTuple):
    """How a reminder kind steps from one occurrence to the next."""

    step: StepFunc
    anchor: AnchorFunc
    repeats: bool = True


def _stay(d: date, _n: int) -> date:
    return d


def _no_anchor(_rule: RecurrenceRule, d: date) -> date:
    return d


def _anchor_weekday(rule: RecurrenceRule, d: date) -> date:
    # Weeks have no varying length, so there is no last-day pinning here.
    return cal.with_weekday(d, rule.start_date.weekday())


def _anchor_day_of_month(rule: RecurrenceRule, d: date) -> date:
    if cal.is_last_day_of_month(rule.start_date):
        return cal.last_day_of_month(d)
    return cal.with_day_of_month(d, rule.start_date.day)


def _anchor_last_day_of_month(_rule: RecurrenceRule, d: date) -> date:
    return cal.last_day_of_month(d)


def _anchor_day_of_year(rule: RecurrenceRule, d: date) -> date:
    if cal.is_last_day_of_year(rule.start_date):
        return cal.last_day_of_year(d)
    return cal.with_day_of_year(d, cal.day_of_year(rule.start_date))


def _anchor_last_day_of_year(_rule: RecurrenceRule, d: date) -> date:
    return cal.last_day_of_year(d)


PERIODS: dict[ReminderKind, Period] = {
    ReminderKind.ONE_TIME: Period(_stay, _no_anchor, repeats=False),
    ReminderKind.DAILY: Period(cal.plus_days, _no_anchor),
    ReminderKind.WEEKLY: Period(cal.plus_weeks, _anchor_weekday),
    ReminderKind.MONTHLY: Period(cal.plus_months, _anchor_day_of_month),
    ReminderKind.MONTHLY_LAST_DAY: Period(cal.plus_months, _anchor_last_day_of_month),
    ReminderKind.YEARLY: Period(cal.plus_years, _anchor_day_of_year),
    ReminderKind.YEARLY_LAST_DAY: Period(cal.plus_years, _anchor_last_day_of_year),
}


def period_for(kind) -> Period:
    """
    Look up the period definition for a reminder kind.

    Args:
        kind: ReminderKind member or its string value

    Returns:
        Period used to step and re-anchor occurrences

    Raises:
        ConfigurationError: If the kind is not a known reminder kind
    """
    try:
        return PERIODS[ReminderKind(kind)]
    except (KeyError, ValueError) as e:
        raise ConfigurationError(f"Unknown reminder kind: {kind!r}") from e


def seed(rule: RecurrenceRule) -> Cursor:
    """
    Build the initial cursor for a rule.

    With a ``last_date`` the cursor starts there, re-anchored to the rule's
    day of period. Without one it starts one increment before
    ``start_date`` so that the first advance reproduces ``start_date``.
    """
    period = period_for(rule.kind)

    if rule.last_date is not None:
        if not period.repeats:
            return Cursor(rule.last_date, IteratorState.EXHAUSTED)
        return Cursor(period.anchor(rule, rule.last_date), IteratorState.SEEDED)

    return Cursor(period.step(rule.start_date, -rule.increment), IteratorState.SEEDED)


def advance(rule: RecurrenceRule, cursor: Cursor) -> tuple[Optional[date], Cursor]:
    """
    Compute the next occurrence after ``cursor``.

    Returns:
        Tuple of (occurrence or None, new cursor). None always comes with an
        EXHAUSTED cursor.
    """
    if cursor.state is IteratorState.EXHAUSTED:
        return None, cursor

    period = period_for(rule.kind)
    exhausted = Cursor(cursor.base, IteratorState.EXHAUSTED)

    if not rule.enabled:
        return None, exhausted
    if not period.repeats and cursor.state is IteratorState.ADVANCED:
        return None, exhausted

    candidate = period.anchor(rule, period.step(cursor.base, rule.increment))

    if rule.end_date is not None and not cal.before(candidate, rule.end_date):
        logger.debug("Occurrence %s is not before end date %s", candidate, rule.end_date)
        return None, exhausted

    return candidate, Cursor(candidate, IteratorState.ADVANCED)


class OccurrenceIterator:
    """Stateful convenience wrapper around ``seed``/``advance``.

    Works on a private copy of the rule, so later edits to the caller's rule
    do not leak into an iteration in progress. Supports both ``next()``
    (returns None when exhausted) and the Python iterator protocol.
    """

    def __init__(self, rule: RecurrenceRule):
        self.rule = rule.model_copy()
        self.cursor = seed(self.rule)

    @property
    def state(self) -> IteratorState:
        return self.cursor.state

    def next(self) -> Optional[date]:
        occurrence, self.cursor = advance(self.rule, self.cursor)
        return occurrence

    def __iter__(self) -> "OccurrenceIterator":
        return self

    def __next__(self) -> date:
        occurrence = self.next()
        if occurrence is None:
            raise StopIteration
        return occurrence
