"""
Recurrence rules for recurring appointments and availability.

A user's recurrence selection (period, interval, weekdays, monthly pattern and
end condition) is turned into an RFC 5545 style rule string such as
``FREQ=WEEKLY;INTERVAL=2;BYDAY=MO,WE;COUNT=6``. The string is what gets stored
on the appointment; ``parse_rule`` and ``expand_occurrences`` read it back.
"""

import itertools
import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional, Union

from dateutil.rrule import rrulestr

from ...config import MAX_RECURRING_OCCURRENCES, MAX_SERIES_OCCURRENCES
from ...exceptions import ValidationError
from ...shared.validators import WEEKDAY_CODES

logger = logging.getLogger(__name__)


class Period(str, Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


class MonthlyPattern(str, Enum):
    ON_DATE_OF_MONTH = "onDateOfMonth"
    ON_WEEKDAY_OF_MONTH = "onWeekDayOfMonth"
    ON_LAST_WEEKDAY_OF_MONTH = "onLastWeekDayOfMonth"


@dataclass(frozen=True)
class Never:
    """Series without an end"""


@dataclass(frozen=True)
class EndAfter:
    count: int


@dataclass(frozen=True)
class EndOnDate:
    date: date


EndCondition = Union[Never, EndAfter, EndOnDate]

NEVER = Never()


@dataclass(frozen=True)
class RecurrenceSelection:
    period: Period
    anchor_date: date  # first occurrence
    interval: int = 1
    weekdays: tuple[str, ...] = ()
    monthly_pattern: Optional[MonthlyPattern] = None
    end: EndCondition = NEVER


@dataclass
class RecurrenceRuleInfo:
    freq: str
    count: int
    interval: int
    by_days: list[str] = field(default_factory=list)
    by_month_day: Optional[str] = None
    until: Optional[str] = None


def weekday_code(day: date) -> str:
    """Two-letter code for a date's weekday (Sunday-start numbering)"""
    return WEEKDAY_CODES[day.isoweekday() % 7]


def _monthly_clause(pattern: MonthlyPattern, anchor: date) -> tuple[str, str]:
    if pattern == MonthlyPattern.ON_DATE_OF_MONTH:
        return "BYMONTHDAY", str(anchor.day)
    if pattern == MonthlyPattern.ON_WEEKDAY_OF_MONTH:
        ordinal = math.ceil(anchor.day / 7)
        return "BYDAY", f"{ordinal}{weekday_code(anchor)}"
    # Last occurrence of the weekday, whichever week the anchor falls in
    return "BYDAY", f"-1{weekday_code(anchor)}"


def _end_clause(end: EndCondition) -> Optional[tuple[str, str]]:
    if isinstance(end, EndAfter):
        return "COUNT", str(end.count)
    if isinstance(end, EndOnDate):
        return "UNTIL", f"{end.date.strftime('%Y%m%d')}T235959Z"
    return None


def rule_clauses(selection: RecurrenceSelection) -> list[tuple[str, str]]:
    """Ordered (key, value) clauses for a selection"""
    clauses = [("FREQ", selection.period.value)]

    if selection.interval > 1:
        clauses.append(("INTERVAL", str(selection.interval)))

    if selection.period == Period.WEEKLY and selection.weekdays:
        clauses.append(("BYDAY", ",".join(selection.weekdays)))

    if selection.period == Period.MONTHLY and selection.monthly_pattern:
        clauses.append(_monthly_clause(selection.monthly_pattern, selection.anchor_date))

    end_clause = _end_clause(selection.end)
    if end_clause:
        clauses.append(end_clause)

    return clauses


def build_rule(selection: RecurrenceSelection) -> str:
    """Serialize a recurrence selection into a rule string"""
    return ";".join(f"{key}={value}" for key, value in rule_clauses(selection))


def parse_rule(rule: str) -> RecurrenceRuleInfo:
    """
    Read the clauses of a stored rule string.

    Missing clauses fall back to FREQ=WEEKLY, COUNT=0 (no count) and INTERVAL=1.
    """
    values = {}
    for part in rule.split(";"):
        key, sep, value = part.partition("=")
        if sep:
            values[key.strip().upper()] = value.strip()

    by_day = values.get("BYDAY")
    return RecurrenceRuleInfo(
        freq=values.get("FREQ") or "WEEKLY",
        count=int(values.get("COUNT") or 0),
        interval=int(values.get("INTERVAL") or 1),
        by_days=by_day.split(",") if by_day else [],
        by_month_day=values.get("BYMONTHDAY"),
        until=values.get("UNTIL"),
    )


def expand_occurrences(
    rule: str,
    start: datetime,
    limit: int = MAX_RECURRING_OCCURRENCES,
    max_occurrences: int = MAX_SERIES_OCCURRENCES,
) -> list[datetime]:
    """
    Expand a rule into concrete occurrence start times.

    Occurrences are generated from ``start`` and keep its time of day. A rule
    with neither COUNT nor UNTIL is cut off after ``limit`` occurrences; a
    bounded rule producing more than ``max_occurrences`` is rejected, as is a
    rule producing none. UNTIL is read without its UTC suffix so it bounds the
    same calendar day as the appointment's own (possibly naive) clock.

    Raises:
        ValidationError: If the series is empty or longer than ``max_occurrences``
    """
    info = parse_rule(rule)
    tzinfo = start.tzinfo
    recurrence = rrulestr(rule, dtstart=start.replace(tzinfo=None), ignoretz=True)

    if info.count or info.until:
        occurrences = list(itertools.islice(recurrence, max_occurrences + 1))
        if len(occurrences) > max_occurrences:
            raise ValidationError(
                f"Recurring rule {rule} produces more than {max_occurrences} occurrences"
            )
    else:
        occurrences = list(itertools.islice(recurrence, limit))

    if not occurrences:
        raise ValidationError(f"Recurring rule {rule} produces no occurrences")

    logger.debug(f"Expanded {rule!r} from {start.isoformat()} into {len(occurrences)} occurrence(s)")
    return [occurrence.replace(tzinfo=tzinfo) for occurrence in occurrences]
