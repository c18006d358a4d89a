from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from dateutil.relativedelta import relativedelta

logger = logging.getLogger(__name__)


class ServiceFrequency(str, Enum):
    """Cadence tags stored on service contracts. Values are persisted, do not rename."""

    WEEKLY = "WEEKLY"
    BIWEEKLY = "BIWEEKLY"
    MONTHLY = "MONTHLY"
    BIMONTHLY = "BIMONTHLY"
    QUARTERLY = "QUARTERLY"
    SEMIANNUAL = "SEMIANNUAL"
    ANNUAL = "ANNUAL"
    ONE_TIME = "ONE_TIME"


class ProjectionKind(str, Enum):
    RECURS = "recurs"
    NO_RECURRENCE = "no-recurrence"
    UNSUPPORTED = "unsupported"


class RecurrenceError(ValueError):
    def __init__(self, errors: List[str]):
        super().__init__("; ".join(errors))
        self.errors = errors


@dataclass(frozen=True)
class Projection:
    kind: ProjectionKind
    next_date: Optional[date] = None

    @property
    def recurs(self) -> bool:
        return self.kind is ProjectionKind.RECURS


# One period of each cadence. relativedelta clamps month/year overflow to the
# last valid day of the target month (Jan 31 + 1 month -> Feb 28/29).
# ONE_TIME maps to None: it has no period.
CADENCE_STEPS: Dict[ServiceFrequency, Optional[relativedelta]] = {
    ServiceFrequency.WEEKLY: relativedelta(days=7),
    ServiceFrequency.BIWEEKLY: relativedelta(days=14),
    ServiceFrequency.MONTHLY: relativedelta(months=1),
    ServiceFrequency.BIMONTHLY: relativedelta(months=2),
    ServiceFrequency.QUARTERLY: relativedelta(months=3),
    ServiceFrequency.SEMIANNUAL: relativedelta(months=6),
    ServiceFrequency.ANNUAL: relativedelta(years=1),
    ServiceFrequency.ONE_TIME: None,
}

FrequencyLike = Union[ServiceFrequency, str]

# "every 100 months/years" is already far past any real service contract
MAX_FREQUENCY_VALUE = 100


def resolve_frequency(raw: Optional[FrequencyLike]) -> Optional[ServiceFrequency]:
    """Map a stored tag (or enum member) to a ServiceFrequency, None if unknown.

    Tags are persisted identifiers and are matched exactly: "monthly" is unknown.
    """
    if isinstance(raw, ServiceFrequency):
        return raw
    if not isinstance(raw, str):
        return None
    try:
        return ServiceFrequency(raw)
    except ValueError:
        return None


def _value_errors(value: object) -> List[str]:
    # bool is an int subclass; True would silently mean "1"
    if isinstance(value, bool) or not isinstance(value, int):
        return [f"frequency value must be an integer, got {value!r}"]
    if value < 1:
        return [f"frequency value must be at least 1, got {value}"]
    if value > MAX_FREQUENCY_VALUE:
        return [f"frequency value must be at most {MAX_FREQUENCY_VALUE}, got {value}"]
    return []


def _validate_inputs(base_date: object, value: object) -> None:
    errors: List[str] = []
    if not isinstance(base_date, date):
        errors.append(f"base date must be a date or datetime, got {type(base_date).__name__}")
    errors.extend(_value_errors(value))
    if errors:
        raise RecurrenceError(errors)


def _advance(base_date: date, step: relativedelta, periods: int) -> date:
    try:
        return base_date + step * periods
    except (ValueError, OverflowError) as exc:
        raise RecurrenceError(
            [f"service date {periods} period(s) after {base_date.isoformat()} is out of range"]
        ) from exc


def project_recurrence(
    base_date: date,
    frequency: Optional[FrequencyLike],
    value: int = 1,
) -> Projection:
    """
    Project the next service date after ``base_date``.

    Returns a tagged Projection:
      - RECURS: next_date = base_date + value * (cadence period)
      - NO_RECURRENCE: the contract is ONE_TIME
      - UNSUPPORTED: the cadence tag is not one we know; logged, never raised

    ``base_date`` may be a date or a datetime; the result keeps its type,
    time of day and tzinfo. A result past year 9999 raises RecurrenceError.
    """
    _validate_inputs(base_date, value)

    cadence = resolve_frequency(frequency)
    if cadence is None:
        logger.warning("Unsupported service frequency %r, skipping projection", frequency)
        return Projection(kind=ProjectionKind.UNSUPPORTED)

    step = CADENCE_STEPS[cadence]
    if step is None:
        return Projection(kind=ProjectionKind.NO_RECURRENCE)

    return Projection(kind=ProjectionKind.RECURS, next_date=_advance(base_date, step, value))


def project_next_service_date(
    base_date: date,
    frequency: Optional[FrequencyLike],
    value: int = 1,
) -> Optional[date]:
    """Next service date, or None when there is nothing to schedule."""
    return project_recurrence(base_date, frequency, value).next_date


def project_schedule(
    base_date: date,
    frequency: Optional[FrequencyLike],
    value: int = 1,
    count: int = 4,
) -> Tuple[Projection, List[date]]:
    """
    The first projection plus the next ``count`` service dates after ``base_date``.

    Each date is offset from the base rather than from the previous date, so
    a clamped month end does not drift: Jan 31 monthly gives Feb 29, Mar 31,
    Apr 30 (not Feb 29, Mar 29, Apr 29).
    """
    if isinstance(count, bool) or not isinstance(count, int) or count < 1:
        raise RecurrenceError([f"count must be a positive integer, got {count!r}"])

    first = project_recurrence(base_date, frequency, value)
    if not first.recurs:
        return first, []

    step = CADENCE_STEPS[resolve_frequency(frequency)]
    dates = [first.next_date]
    dates.extend(_advance(base_date, step, value * k) for k in range(2, count + 1))
    return first, dates


def upcoming_service_dates(
    base_date: date,
    frequency: Optional[FrequencyLike],
    value: int = 1,
    count: int = 4,
) -> List[date]:
    """The next ``count`` service dates; empty for ONE_TIME or unknown cadences."""
    return project_schedule(base_date, frequency, value, count)[1]


_UNIT_LABELS = {
    ServiceFrequency.WEEKLY: ("Weekly", "weeks", 1),
    ServiceFrequency.BIWEEKLY: ("Biweekly", "weeks", 2),
    ServiceFrequency.MONTHLY: ("Monthly", "months", 1),
    ServiceFrequency.BIMONTHLY: ("Bimonthly", "months", 2),
    ServiceFrequency.QUARTERLY: ("Quarterly", "months", 3),
    ServiceFrequency.SEMIANNUAL: ("Semiannual", "months", 6),
    ServiceFrequency.ANNUAL: ("Annual", "years", 1),
}


def describe_frequency(frequency: Optional[FrequencyLike], value: int = 1) -> str:
    """Human readable cadence, e.g. "Monthly" or "Every 6 months"."""
    errors = _value_errors(value)
    if errors:
        raise RecurrenceError(errors)

    cadence = resolve_frequency(frequency)
    if cadence is None:
        return str(frequency)
    if cadence is ServiceFrequency.ONE_TIME:
        return "One time"

    label, unit, per_value = _UNIT_LABELS[cadence]
    if value == 1:
        return label
    return f"Every {per_value * value} {unit}"


__all__ = [
    "CADENCE_STEPS",
    "MAX_FREQUENCY_VALUE",
    "Projection",
    "ProjectionKind",
    "RecurrenceError",
    "ServiceFrequency",
    "describe_frequency",
    "project_next_service_date",
    "project_recurrence",
    "project_schedule",
    "resolve_frequency",
    "upcoming_service_dates",
]
